"""
Game Manager - Coordinator for game operations.

Provides a unified interface for game operations by coordinating
between QuestionManager, AnswerManager, PlayerManager and the
ScoringEngine, and builds the read models the views poll.
"""

import logging
from typing import Optional, Dict, Any

from database import (
    reset_game,
    get_questions,
    get_revealed_questions,
    get_players_by_score,
    get_answers_for_player,
    count_players,
    get_setting,
    get_database_health
)
from utils.constants import FEED_ACTIONS, FEED_TABLES, QUESTION_STATUS, SETTING_KEYS
from .change_feed import ChangeFeed
from .question_manager import QuestionManager
from .answer_manager import AnswerManager
from .player_manager import PlayerManager
from .scoring import ScoringEngine

logger = logging.getLogger(__name__)

class GameManager:
    """Coordinates all game operations."""

    def __init__(self, change_feed: Optional[ChangeFeed] = None):
        self.change_feed = change_feed or ChangeFeed()
        self.question_manager = QuestionManager(self.change_feed)
        self.answer_manager = AnswerManager(self.change_feed)
        self.player_manager = PlayerManager(self.change_feed)
        self.scoring = ScoringEngine(self.change_feed)

    def reset_game(self, delete_questions: bool = False) -> Dict[str, Any]:
        """
        Start over: remove every player and answer.

        Args:
            delete_questions: Also delete the questions instead of un-revealing them

        Returns:
            Counts of removed and reset rows
        """
        result = reset_game(delete_questions=bool(delete_questions))
        logger.info(f"Game reset (delete_questions={bool(delete_questions)})")

        for table in FEED_TABLES:
            action = FEED_ACTIONS['UPDATE'] if table == 'questions' and not delete_questions \
                else FEED_ACTIONS['DELETE']
            self.change_feed.publish(table, action)
        return result

    def get_leaderboard(self) -> Dict[str, Any]:
        """Players ranked by score, plus the questions revealed so far."""
        players = get_players_by_score()
        revealed = get_revealed_questions()

        return {
            'players': [
                dict(player.to_dict(include_join_code=False), rank=rank)
                for rank, player in enumerate(players, start=1)
            ],
            'revealed_questions': [question.to_dict() for question in revealed],
            'player_count': len(players)
        }

    def get_player_sheet(self, player_id: str) -> Dict[str, Any]:
        """
        A player's view: active questions with their own answer and progress.
        """
        player = self.player_manager.get_player(player_id)
        answers = {answer.question_id: answer for answer in get_answers_for_player(player_id)}

        questions = []
        answered = revealed = correct = 0
        for question in get_questions(active_only=True):
            answer = answers.get(question.id)
            if question.is_revealed:
                status = QUESTION_STATUS['REVEALED']
                revealed += 1
            elif answer:
                status = QUESTION_STATUS['ANSWERED']
            else:
                status = QUESTION_STATUS['OPEN']
            if answer:
                answered += 1
                if answer.is_correct:
                    correct += 1

            data = question.to_dict()
            data['player_answer'] = answer.to_dict() if answer else None
            data['status'] = status
            questions.append(data)

        return {
            'player': player.to_dict(),
            'questions': questions,
            'answered_count': answered,
            'revealed_count': revealed,
            'correct_count': correct,
            'total_questions': len(questions),
            'total_score': player.total_score
        }

    def get_dashboard(self) -> Dict[str, Any]:
        """Admin overview: all questions, player count, revealed count, share code."""
        questions = get_questions()
        return {
            'questions': [question.to_dict() for question in questions],
            'player_count': count_players(),
            'revealed_count': sum(1 for question in questions if question.is_revealed),
            'total_questions': len(questions),
            'share_code': get_setting(SETTING_KEYS['SHARE_CODE'])
        }

    def get_health(self) -> Dict[str, Any]:
        """Database health plus change feed position."""
        health = get_database_health()
        health['feed_sequence'] = self.change_feed.last_sequence
        return health
