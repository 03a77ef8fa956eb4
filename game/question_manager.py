"""
Question Manager for the trivia backend.

Handles question authoring: creation, edits, deletion and ordering.
Contains no grading logic - reveal and scoring live in the scoring engine.
"""

import logging
from typing import Optional, Dict, Any, List

from config import settings
from database import (
    Question,
    get_question_by_id,
    get_questions,
    get_answers_for_question,
    create_question,
    update_question,
    delete_question,
    reorder_questions
)
from utils.constants import (
    QUESTION_TYPES,
    FEED_ACTIONS,
    EDITABLE_QUESTION_FIELDS,
    MIN_CHOICE_OPTIONS,
    MAX_CHOICE_OPTIONS,
    MAX_QUESTION_LENGTH
)
from utils.exceptions import ValidationError, NotFoundError
from utils.helpers import clean_text, clean_options, is_positive_int
from .change_feed import ChangeFeed

logger = logging.getLogger(__name__)

class QuestionManager:
    """
    Manages the question list the admin authors.

    Validates input, enforces the option rules for each question type and
    keeps the correct-answer/revealed pair consistent on edits.
    """

    def __init__(self, change_feed: Optional[ChangeFeed] = None):
        """
        Initialize question manager.

        Args:
            change_feed: Feed notified after each committed write
        """
        self.change_feed = change_feed
        logger.debug("Question manager initialized")

    def create_question(self,
                        question_text: str,
                        question_type: str = QUESTION_TYPES['FREEFORM'],
                        options: Optional[List[str]] = None,
                        points: Optional[int] = None) -> Question:
        """
        Create a question at the end of the list.

        Args:
            question_text: The question as shown to players
            question_type: 'freeform' or 'multiple_choice'
            options: Choices for multiple_choice; blanks are dropped
            points: Points for a correct answer, defaults to settings.DEFAULT_POINTS

        Returns:
            The stored question
        """
        text = self._validate_text(question_text)
        question_type = self._validate_type(question_type)
        points = settings.DEFAULT_POINTS if points is None else points
        self._validate_points(points)
        stored_options = self._options_for_type(question_type, options)

        question = create_question(text, question_type, stored_options, points)
        self._publish(FEED_ACTIONS['INSERT'], question.id)
        return question

    def edit_question(self, question_id: str, fields: Dict[str, Any]) -> Question:
        """
        Apply an admin edit to a question.

        Un-revealing clears the correct answer unless a replacement comes in
        the same edit. Revealing needs a correct answer, supplied now or
        already stored. Player scores are not recomputed.
        """
        if not isinstance(fields, dict) or not fields:
            raise ValidationError("No fields to update")

        unknown = sorted(set(fields) - set(EDITABLE_QUESTION_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown question fields: {', '.join(unknown)}",
                                  details={'fields': unknown})

        question = get_question_by_id(question_id)
        if not question:
            raise NotFoundError(f"Question {question_id} not found")

        updates: Dict[str, Any] = {}

        if 'question_text' in fields:
            updates['question_text'] = self._validate_text(fields['question_text'])

        if 'points' in fields:
            self._validate_points(fields['points'])
            updates['points'] = fields['points']

        if 'is_active' in fields:
            updates['is_active'] = self._validate_flag('is_active', fields['is_active'])

        # Type and options
        question_type = self._validate_type(fields.get('question_type', question.question_type))
        if question_type == QUESTION_TYPES['MULTIPLE_CHOICE']:
            if 'options' in fields or question_type != question.question_type:
                source = fields['options'] if 'options' in fields else question.options
                updates['options'] = self._options_for_type(question_type, source)
            else:
                self._options_for_type(question_type, question.options)
        elif question.options is not None or 'options' in fields:
            updates['options'] = None
        if question_type != question.question_type:
            updates['question_type'] = question_type

        # Revealed flag and correct answer move together
        revealed = self._validate_flag('is_revealed', fields.get('is_revealed', question.is_revealed))
        supplied = clean_text(fields.get('correct_answer')) if 'correct_answer' in fields else ''

        if revealed:
            if supplied:
                updates['correct_answer'] = supplied
            elif not question.correct_answer:
                raise ValidationError("A revealed question needs a correct answer")
        elif question.is_revealed:
            updates['correct_answer'] = supplied or None
            if self._has_graded_answers(question_id):
                logger.warning(f"Question {question_id} un-revealed after grading; "
                               f"player scores keep the points already awarded")
        elif supplied:
            logger.debug(f"Ignoring correct answer for unrevealed question {question_id}")
        if revealed != question.is_revealed:
            updates['is_revealed'] = revealed

        if not updates:
            return question

        question = update_question(question_id, **updates)
        self._publish(FEED_ACTIONS['UPDATE'], question_id)
        return question

    def delete_question(self, question_id: str):
        """Delete a question outright. Scores are left as they are."""
        delete_question(question_id)
        self._publish(FEED_ACTIONS['DELETE'], question_id)

    def reorder(self, question_ids: List[str]) -> List[Question]:
        """
        Give the questions a dense order 1..N following question_ids.

        Args:
            question_ids: Every question id exactly once, in the desired order
        """
        if not isinstance(question_ids, list) or not all(isinstance(q, str) for q in question_ids):
            raise ValidationError("question_ids must be a list of question ids")

        questions = reorder_questions(question_ids)
        self._publish(FEED_ACTIONS['UPDATE'])
        return questions

    def list_questions(self, active_only: bool = False) -> List[Question]:
        """Get questions in play order."""
        return get_questions(active_only=active_only)

    def get_question(self, question_id: str) -> Question:
        """Get a single question or raise NotFoundError."""
        question = get_question_by_id(question_id)
        if not question:
            raise NotFoundError(f"Question {question_id} not found")
        return question

    # Validation helpers

    def _validate_text(self, question_text) -> str:
        text = clean_text(question_text)
        if not text:
            raise ValidationError("Question text cannot be empty")
        if len(text) > MAX_QUESTION_LENGTH:
            raise ValidationError(f"Question too long (max {MAX_QUESTION_LENGTH} characters)")
        return text

    def _validate_type(self, question_type) -> str:
        if question_type not in QUESTION_TYPES.values():
            raise ValidationError(f"Unknown question type '{question_type}'")
        return question_type

    def _validate_points(self, points):
        if not is_positive_int(points):
            raise ValidationError("Points must be a positive whole number")

    def _validate_flag(self, name: str, value) -> bool:
        if not isinstance(value, bool):
            raise ValidationError(f"{name} must be true or false")
        return value

    def _options_for_type(self, question_type: str, options) -> Optional[List[str]]:
        if question_type != QUESTION_TYPES['MULTIPLE_CHOICE']:
            return None

        if options is not None and not isinstance(options, (list, tuple)):
            raise ValidationError("Options must be a list")

        cleaned = clean_options(options)
        if len(cleaned) < MIN_CHOICE_OPTIONS:
            raise ValidationError(f"Please add at least {MIN_CHOICE_OPTIONS} options for multiple choice")
        if len(cleaned) > MAX_CHOICE_OPTIONS:
            raise ValidationError(f"Multiple choice allows at most {MAX_CHOICE_OPTIONS} options")
        return cleaned

    def _has_graded_answers(self, question_id: str) -> bool:
        return any(answer.is_correct for answer in get_answers_for_question(question_id))

    def _publish(self, action: str, record_id: Optional[str] = None):
        if self.change_feed:
            self.change_feed.publish('questions', action, record_id)
