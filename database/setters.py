"""
Universal Database Setters for the trivia backend.

Contains all write operations to the database. All session management
is contained within this module - other modules should never handle sessions directly.

Every function here is one transaction: either all of its writes land or,
on any exception, none do.
"""

import logging
import uuid
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime, timezone

from sqlalchemy import or_, func
from sqlalchemy.dialects import postgresql, sqlite

from utils.exceptions import NotFoundError, ConflictError, OrderingConflictError, ValidationError
from .config import get_db_session
from .models import Question, Player, Answer

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}

# ==============================================================================
# QUESTION SETTERS
# ==============================================================================

def create_question(question_text: str, question_type: str, options: Optional[List[str]],
                    points: int, is_active: bool = True) -> Question:
    """Create a new question at the end of the current ordering."""
    with get_db_session() as session:
        last = session.query(Question).order_by(Question.question_order.desc()).first()
        next_order = (last.question_order + 1) if last else 1

        question = Question(
            question_text=question_text,
            question_type=question_type,
            options=options,
            points=points,
            is_active=is_active,
            question_order=next_order
        )
        session.add(question)
        session.flush()  # Get the ID without committing
        logger.info(f"Created question {question.id} at position {next_order}")
        return question

def update_question(question_id: str, **fields) -> Question:
    """Write already-validated field values onto a question."""
    with get_db_session() as session:
        question = session.query(Question).filter_by(id=question_id).first()
        if not question:
            raise NotFoundError(f"Question {question_id} not found")

        for name, value in fields.items():
            setattr(question, name, value)
        session.flush()
        logger.info(f"Updated question {question_id}: {sorted(fields)}")
        return question

def reveal_question(question_id: str, correct_answer: str) -> Question:
    """Publish the correct answer and flip the revealed flag together."""
    with get_db_session() as session:
        question = session.query(Question).filter_by(id=question_id).first()
        if not question:
            raise NotFoundError(f"Question {question_id} not found")

        question.correct_answer = correct_answer
        question.is_revealed = True
        session.flush()
        logger.info(f"Revealed question {question_id}")
        return question

def delete_question(question_id: str):
    """Delete a question and every answer given to it."""
    with get_db_session() as session:
        question = session.query(Question).filter_by(id=question_id).first()
        if not question:
            raise NotFoundError(f"Question {question_id} not found")

        removed = session.query(Answer).filter_by(question_id=question_id)\
            .delete(synchronize_session=False)
        session.delete(question)
        logger.info(f"Deleted question {question_id} and {removed} answers")

def reorder_questions(ordered_ids: List[str]) -> List[Question]:
    """
    Assign question_order 1..N following the given id order.

    The ids must be exactly the stored question ids.
    """
    with get_db_session() as session:
        questions = {q.id: q for q in session.query(Question).all()}

        requested = set(ordered_ids)
        if len(requested) != len(ordered_ids):
            raise ValidationError("Question ids must not repeat")
        missing = sorted(set(questions) - requested)
        foreign = sorted(requested - set(questions))
        if missing or foreign:
            raise OrderingConflictError(
                "Reorder must list every question exactly once",
                details={'missing': missing, 'unknown': foreign}
            )

        for position, question_id in enumerate(ordered_ids, start=1):
            questions[question_id].question_order = position
        session.flush()

        logger.info(f"Reordered {len(ordered_ids)} questions")
        return [questions[question_id] for question_id in ordered_ids]

# ==============================================================================
# PLAYER SETTERS
# ==============================================================================

def create_player(name: str, join_code: str) -> Player:
    """Create a new player. Raises IntegrityError if the join code is taken."""
    with get_db_session() as session:
        player = Player(name=name, join_code=join_code, total_score=0)
        session.add(player)
        session.flush()
        logger.info(f"Created player '{name}' ({join_code})")
        return player

def delete_player(player_id: str):
    """Delete a player and all of their answers."""
    with get_db_session() as session:
        player = session.query(Player).filter_by(id=player_id).first()
        if not player:
            raise NotFoundError(f"Player {player_id} not found")

        name = player.name
        removed = session.query(Answer).filter_by(player_id=player_id)\
            .delete(synchronize_session=False)
        session.delete(player)
        logger.info(f"Deleted player '{name}' and {removed} answers")

# ==============================================================================
# ANSWER SETTERS
# ==============================================================================

def upsert_answer(player_id: str, question_id: str, answer_text: str) -> Tuple[Answer, bool]:
    """
    Insert or overwrite the answer for (player, question).

    Only the text and submission time change on overwrite; grading
    fields keep whatever they held.

    Returns:
        tuple: (answer, created)
    """
    with get_db_session() as session:
        question = session.query(Question).filter_by(id=question_id).first()
        if not question or not question.is_active:
            raise NotFoundError(f"Question {question_id} not found")
        if question.is_revealed:
            raise ConflictError("Question has already been revealed")

        if not session.query(Player.id).filter_by(id=player_id).first():
            raise NotFoundError(f"Player {player_id} not found")

        existed = session.query(Answer.id)\
            .filter_by(player_id=player_id, question_id=question_id).first() is not None
        now = datetime.now(timezone.utc)

        insert = _UPSERT_DIALECTS.get(session.get_bind().dialect.name)
        if insert is not None:
            stmt = insert(Answer).values(
                id=str(uuid.uuid4()),
                player_id=player_id,
                question_id=question_id,
                answer_text=answer_text,
                is_correct=None,
                points_earned=0,
                submitted_at=now
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[Answer.player_id, Answer.question_id],
                set_={
                    'answer_text': stmt.excluded.answer_text,
                    'submitted_at': stmt.excluded.submitted_at
                }
            )
            session.execute(stmt)
        else:
            # Dialects without ON CONFLICT fall back to the unique constraint alone
            answer = session.query(Answer).filter_by(player_id=player_id, question_id=question_id).first()
            if answer:
                answer.answer_text = answer_text
                answer.submitted_at = now
            else:
                session.add(Answer(player_id=player_id, question_id=question_id,
                                   answer_text=answer_text, submitted_at=now))
            session.flush()

        answer = session.query(Answer).populate_existing()\
            .filter_by(player_id=player_id, question_id=question_id).one()
        logger.info(f"{'Updated' if existed else 'Recorded'} answer of player {player_id} "
                    f"to question {question_id}")
        return answer, not existed

def mark_answer_correct(answer_id: str, player_id: str,
                        points: Optional[int] = None) -> Tuple[Answer, bool]:
    """
    Grade an answer correct and credit the player, at most once.

    The answer row is switched with a compare-and-set on is_correct; the
    score increment only runs when that switch matched. A repeated or
    concurrent call finds is_correct already true and changes nothing.

    Returns:
        tuple: (answer, changed)
    """
    with get_db_session() as session:
        answer = _load_owned_answer(session, answer_id, player_id)
        if points is None:
            points = answer.question.points

        matched = session.query(Answer).filter(
            Answer.id == answer_id,
            or_(Answer.is_correct.is_(None), Answer.is_correct.is_(False))
        ).update({Answer.is_correct: True, Answer.points_earned: points},
                 synchronize_session=False)

        if matched:
            session.query(Player).filter_by(id=player_id).update(
                {Player.total_score: Player.total_score + points},
                synchronize_session=False
            )
            logger.info(f"Marked answer {answer_id} correct (+{points} to player {player_id})")
        else:
            logger.info(f"Answer {answer_id} already marked correct, score unchanged")

        session.refresh(answer)
        return answer, bool(matched)

def mark_answer_incorrect(answer_id: str, player_id: str) -> Tuple[Answer, bool]:
    """
    Grade an answer incorrect, taking back any points it had earned.

    Returns:
        tuple: (answer, changed)
    """
    with get_db_session() as session:
        answer = _load_owned_answer(session, answer_id, player_id)

        if answer.is_correct is True:
            earned = answer.points_earned
            matched = session.query(Answer).filter(
                Answer.id == answer_id,
                Answer.is_correct.is_(True),
                Answer.points_earned == earned
            ).update({Answer.is_correct: False, Answer.points_earned: 0},
                     synchronize_session=False)
            if matched:
                session.query(Player).filter_by(id=player_id).update(
                    {Player.total_score: Player.total_score - earned},
                    synchronize_session=False
                )
                logger.info(f"Marked answer {answer_id} incorrect (-{earned} from player {player_id})")
        elif answer.is_correct is None:
            matched = session.query(Answer).filter(
                Answer.id == answer_id,
                Answer.is_correct.is_(None)
            ).update({Answer.is_correct: False, Answer.points_earned: 0},
                     synchronize_session=False)
            if matched:
                logger.info(f"Marked answer {answer_id} incorrect")
        else:
            matched = 0

        session.refresh(answer)
        return answer, bool(matched)

def recompute_player_scores() -> Dict[str, int]:
    """
    Rebuild every player's total_score from their correct answers.

    Returns:
        Mapping of player id to new score for players whose total changed
    """
    with get_db_session() as session:
        earned = dict(
            session.query(Answer.player_id, func.coalesce(func.sum(Answer.points_earned), 0))
            .filter(Answer.is_correct.is_(True))
            .group_by(Answer.player_id)
            .all()
        )

        changed = {}
        for player in session.query(Player).all():
            expected = int(earned.get(player.id, 0))
            if player.total_score != expected:
                logger.warning(f"Player '{player.name}' score {player.total_score} "
                               f"recomputed to {expected}")
                player.total_score = expected
                changed[player.id] = expected

        logger.info(f"Recomputed scores, {len(changed)} players changed")
        return changed

def _load_owned_answer(session, answer_id: str, player_id: str) -> Answer:
    answer = session.query(Answer).filter_by(id=answer_id).first()
    if not answer:
        raise NotFoundError(f"Answer {answer_id} not found")
    if not session.query(Player.id).filter_by(id=player_id).first():
        raise NotFoundError(f"Player {player_id} not found")
    if answer.player_id != player_id:
        raise ValidationError("Answer does not belong to this player")
    return answer

# ==============================================================================
# GAME SETTERS
# ==============================================================================

def reset_game(delete_questions: bool = False) -> Dict[str, Any]:
    """
    Remove all players and answers; delete or un-reveal every question.

    Returns:
        Counts of what was removed or reset
    """
    with get_db_session() as session:
        answer_count = session.query(Answer).delete(synchronize_session=False)
        player_count = session.query(Player).delete(synchronize_session=False)

        if delete_questions:
            question_count = session.query(Question).delete(synchronize_session=False)
            logger.info(f"Reset game: removed {question_count} questions")
        else:
            question_count = session.query(Question).update(
                {Question.is_revealed: False, Question.correct_answer: None},
                synchronize_session=False
            )
            logger.info(f"Reset game: un-revealed {question_count} questions")

        logger.info(f"Reset game: removed {player_count} players and {answer_count} answers")
        return {
            'answers_removed': answer_count,
            'players_removed': player_count,
            'questions_removed': question_count if delete_questions else 0,
            'questions_reset': 0 if delete_questions else question_count,
        }
