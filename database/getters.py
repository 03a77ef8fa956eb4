"""
Universal Database Getters for the trivia backend.

Contains all read operations from the database.
All session management is contained within this module.
"""

import logging
from typing import List, Optional, Dict, Any

from sqlalchemy.orm import joinedload

from .config import get_db_session
from .models import Question, Player, Answer, GameSetting

logger = logging.getLogger(__name__)

# ==============================================================================
# QUESTION GETTERS
# ==============================================================================

def get_question_by_id(question_id: str) -> Optional[Question]:
    """Get a question by its ID."""
    with get_db_session() as session:
        return session.query(Question).filter_by(id=question_id).first()

def get_questions(active_only: bool = False) -> List[Question]:
    """Get questions ordered by question_order."""
    with get_db_session() as session:
        query = session.query(Question)
        if active_only:
            query = query.filter_by(is_active=True)
        return query.order_by(Question.question_order.asc(), Question.created_at.asc()).all()

def get_revealed_questions() -> List[Question]:
    """Get revealed questions for the leaderboard."""
    with get_db_session() as session:
        return session.query(Question).filter_by(is_revealed=True)\
            .order_by(Question.question_order.asc()).all()

def count_questions(revealed: Optional[bool] = None) -> int:
    """Count questions, optionally filtered by revealed state."""
    with get_db_session() as session:
        query = session.query(Question)
        if revealed is not None:
            query = query.filter_by(is_revealed=revealed)
        return query.count()

# ==============================================================================
# PLAYER GETTERS
# ==============================================================================

def get_player_by_id(player_id: str) -> Optional[Player]:
    """Get a player by their ID."""
    with get_db_session() as session:
        return session.query(Player).filter_by(id=player_id).first()

def get_player_by_join_code(join_code: str) -> Optional[Player]:
    """Get a player by their rejoin code."""
    with get_db_session() as session:
        return session.query(Player).filter_by(join_code=join_code).first()

def get_players() -> List[Player]:
    """Get all players, newest first."""
    with get_db_session() as session:
        return session.query(Player).order_by(Player.created_at.desc()).all()

def get_players_by_score() -> List[Player]:
    """Get all players ordered for the leaderboard."""
    with get_db_session() as session:
        return session.query(Player)\
            .order_by(Player.total_score.desc(), Player.created_at.asc()).all()

def count_players() -> int:
    """Count joined players."""
    with get_db_session() as session:
        return session.query(Player).count()

# ==============================================================================
# ANSWER GETTERS
# ==============================================================================

def get_answer_by_id(answer_id: str) -> Optional[Answer]:
    """Get an answer by its ID."""
    with get_db_session() as session:
        return session.query(Answer).filter_by(id=answer_id).first()

def get_answer(player_id: str, question_id: str) -> Optional[Answer]:
    """Get the answer a player gave to a question."""
    with get_db_session() as session:
        return session.query(Answer).filter_by(player_id=player_id, question_id=question_id).first()

def get_answers_for_question(question_id: str) -> List[Answer]:
    """Get all answers to a question with the answering player loaded."""
    with get_db_session() as session:
        return session.query(Answer).options(joinedload(Answer.player))\
            .filter_by(question_id=question_id)\
            .order_by(Answer.submitted_at.asc()).all()

def get_answers_for_player(player_id: str) -> List[Answer]:
    """Get all answers a player has submitted."""
    with get_db_session() as session:
        return session.query(Answer).filter_by(player_id=player_id).all()

def count_answers() -> int:
    """Count stored answers."""
    with get_db_session() as session:
        return session.query(Answer).count()

# ==============================================================================
# SETTINGS GETTERS
# ==============================================================================

def get_setting(setting_key: str) -> Optional[str]:
    """Get a game setting value by key."""
    with get_db_session() as session:
        setting = session.query(GameSetting).filter_by(setting_key=setting_key).first()
        return setting.setting_value if setting else None

# ==============================================================================
# UTILITY FUNCTIONS
# ==============================================================================

def get_database_health() -> Dict[str, Any]:
    """Get database health information."""
    try:
        with get_db_session() as session:
            # Test basic connectivity
            question_count = session.query(Question).count()
            player_count = session.query(Player).count()

            return {
                'connected': True,
                'question_count': question_count,
                'player_count': player_count,
                'status': 'healthy'
            }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            'connected': False,
            'error': str(e),
            'status': 'unhealthy'
        }
