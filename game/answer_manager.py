"""
Answer Manager for the trivia backend.

Handles ONLY answer submission and the admin's view of submitted answers.
Contains no grading logic - purely answer management.
"""

import logging
from typing import Optional, List

from database import Answer, upsert_answer, get_answers_for_question, get_question_by_id
from utils.constants import FEED_ACTIONS, MAX_ANSWER_LENGTH
from utils.exceptions import ValidationError, NotFoundError
from utils.helpers import clean_text
from .change_feed import ChangeFeed

logger = logging.getLogger(__name__)

class AnswerManager:
    """
    Manages answer flow in games.

    A player has at most one answer per question. Submitting again
    overwrites the text and leaves grading alone.
    """

    def __init__(self, change_feed: Optional[ChangeFeed] = None,
                 max_answer_length: int = MAX_ANSWER_LENGTH):
        """
        Initialize answer manager.

        Args:
            change_feed: Feed notified after each committed write
            max_answer_length: Maximum characters allowed in answers
        """
        self.change_feed = change_feed
        self.max_answer_length = max_answer_length
        logger.debug("Answer manager initialized")

    def validate_answer(self, answer_text) -> str:
        """
        Validate an answer before it's stored.

        Returns:
            The trimmed answer text
        """
        text = clean_text(answer_text)
        if not text:
            raise ValidationError("Answer cannot be empty")
        if len(text) > self.max_answer_length:
            raise ValidationError(f"Answer too long (max {self.max_answer_length} characters)")
        return text

    def submit_answer(self, player_id: str, question_id: str, answer_text: str) -> Answer:
        """
        Record a player's answer, replacing any earlier one.

        Raises:
            ValidationError: empty or oversized text
            NotFoundError: unknown player, or question missing or inactive
            ConflictError: the question has already been revealed
        """
        text = self.validate_answer(answer_text)
        answer, created = upsert_answer(player_id, question_id, text)

        action = FEED_ACTIONS['INSERT'] if created else FEED_ACTIONS['UPDATE']
        if self.change_feed:
            self.change_feed.publish('answers', action, answer.id, player_id=player_id)
        return answer

    def get_question_answers(self, question_id: str) -> List[Answer]:
        """Get every answer to a question, each with its player loaded."""
        if not get_question_by_id(question_id):
            raise NotFoundError(f"Question {question_id} not found")
        return get_answers_for_question(question_id)
