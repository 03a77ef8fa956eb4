"""
Scoring Engine for the trivia backend.

Owns the reveal/grade state machine and is the only writer of player
scores. Grading is done by the admin one answer at a time rather than by
string comparison, since real answers come as synonyms and abbreviations
("Chiefs" vs "KC").
"""

import logging
from typing import Optional, Dict

from database import (
    Answer,
    Question,
    reveal_question,
    mark_answer_correct,
    mark_answer_incorrect,
    recompute_player_scores
)
from utils.constants import FEED_ACTIONS
from utils.exceptions import ValidationError
from utils.helpers import clean_text, is_non_negative_int
from .change_feed import ChangeFeed

logger = logging.getLogger(__name__)

class ScoringEngine:
    """Reveals questions and grades answers."""

    def __init__(self, change_feed: Optional[ChangeFeed] = None):
        self.change_feed = change_feed

    def reveal_question(self, question_id: str, correct_answer_text: str) -> Question:
        """
        Publish a question's correct answer.

        Sets correct_answer and is_revealed together. Calling again
        replaces the text. Does not grade any answer.
        """
        correct_answer = clean_text(correct_answer_text)
        if not correct_answer:
            raise ValidationError("Correct answer cannot be empty")

        question = reveal_question(question_id, correct_answer)
        self._publish('questions', question_id)
        return question

    def mark_correct(self, answer_id: str, player_id: str,
                     points_awarded: Optional[int] = None) -> Answer:
        """
        Grade an answer correct and add the points to the player's score.

        Only the first transition into 'correct' awards points; calling
        again on a correct answer leaves the score as it is.

        Args:
            answer_id: Answer being graded
            player_id: Owner of the answer
            points_awarded: Points to credit, defaults to the question's value
        """
        if points_awarded is not None and not is_non_negative_int(points_awarded):
            raise ValidationError("Points awarded must be a whole number of zero or more")

        answer, changed = mark_answer_correct(answer_id, player_id, points_awarded)
        if changed:
            self._publish('answers', answer_id, player_id)
            self._publish('players', player_id)
        return answer

    def mark_incorrect(self, answer_id: str, player_id: str) -> Answer:
        """
        Grade an answer incorrect.

        If it was previously correct, the points it earned come off the
        player's score.
        """
        answer, changed = mark_answer_incorrect(answer_id, player_id)
        if changed:
            self._publish('answers', answer_id, player_id)
            self._publish('players', player_id)
        return answer

    def recompute_scores(self) -> Dict[str, int]:
        """
        Rebuild all player totals from graded answers.

        Never runs on its own: question edits leave scores stale until an
        admin asks for this.
        """
        changed = recompute_player_scores()
        if changed:
            self._publish('players')
        return changed

    def _publish(self, table: str, record_id: Optional[str] = None,
                 player_id: Optional[str] = None):
        if self.change_feed:
            self.change_feed.publish(table, FEED_ACTIONS['UPDATE'], record_id, player_id=player_id)
