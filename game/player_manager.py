"""
Player management for the trivia backend.

Handles joining with the shared game code, rejoining with a personal
code, and removing players.
"""

import hmac
import logging
from typing import Optional, List

from sqlalchemy.exc import IntegrityError

from database import (
    Player,
    create_player,
    delete_player,
    get_player_by_id,
    get_player_by_join_code,
    get_players,
    get_setting
)
from utils.constants import FEED_ACTIONS, JOIN_CODE_ATTEMPTS, SETTING_KEYS
from utils.exceptions import ValidationError, NotFoundError, ConflictError, PermissionDeniedError
from utils.helpers import clean_text, generate_join_code, normalize_code, validate_player_name
from .change_feed import ChangeFeed

logger = logging.getLogger(__name__)

class PlayerManager:
    """Manages players joining and leaving the game."""

    def __init__(self, change_feed: Optional[ChangeFeed] = None):
        self.change_feed = change_feed

    def join_game(self, name: str, share_code: Optional[str]) -> Player:
        """
        Add a new player to the game.

        Args:
            name: Display name
            share_code: The game code the admin handed out

        Returns:
            The new player, carrying the join_code used to rejoin later
        """
        display_name = clean_text(name)
        is_valid, error_msg = validate_player_name(display_name)
        if not is_valid:
            raise ValidationError(error_msg or "Invalid name")

        expected = normalize_code(get_setting(SETTING_KEYS['SHARE_CODE']))
        if not expected or not hmac.compare_digest(normalize_code(share_code).encode(), expected.encode()):
            raise PermissionDeniedError("Invalid game code")

        for _ in range(JOIN_CODE_ATTEMPTS):
            join_code = generate_join_code(display_name)
            try:
                player = create_player(display_name, join_code)
                break
            except IntegrityError:
                logger.debug(f"Join code {join_code} already taken, retrying")
                continue
        else:
            raise ConflictError("Unable to create a join code right now")

        logger.info(f"Player '{display_name}' joined with code {player.join_code}")
        self._publish(FEED_ACTIONS['INSERT'], player.id)
        return player

    def rejoin_game(self, join_code: str) -> Player:
        """Find a returning player by their join code (case-insensitive)."""
        code = normalize_code(join_code)
        if not code:
            raise ValidationError("Rejoin code is required")

        player = get_player_by_join_code(code)
        if not player:
            raise NotFoundError("Invalid rejoin code")

        logger.info(f"Player '{player.name}' rejoined")
        return player

    def delete_player(self, player_id: str):
        """Remove a player and their answers. Other scores are untouched."""
        delete_player(player_id)
        self._publish(FEED_ACTIONS['DELETE'], player_id)
        if self.change_feed:
            self.change_feed.publish('answers', FEED_ACTIONS['DELETE'], player_id=player_id)

    def get_player(self, player_id: str) -> Player:
        """Get a player or raise NotFoundError."""
        player = get_player_by_id(player_id)
        if not player:
            raise NotFoundError(f"Player {player_id} not found")
        return player

    def list_players(self) -> List[Player]:
        """Get all players, newest first."""
        return get_players()

    def _publish(self, action: str, record_id: Optional[str] = None):
        if self.change_feed:
            self.change_feed.publish('players', action, record_id)
