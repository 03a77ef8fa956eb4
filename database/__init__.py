"""
Database Package for the trivia backend.

Provides clean imports for all database functionality.
"""

# Models
from .models import (
    Base,
    Question,
    Player,
    Answer,
    GameSetting
)

# Configuration and session management
from .config import (
    SessionLocal,
    configure_database,
    get_engine,
    get_db_session,
    init_database,
    drop_database
)

# Import getter functions
from .getters import (
    get_question_by_id,
    get_questions,
    get_revealed_questions,
    count_questions,
    get_player_by_id,
    get_player_by_join_code,
    get_players,
    get_players_by_score,
    count_players,
    get_answer_by_id,
    get_answer,
    get_answers_for_question,
    get_answers_for_player,
    count_answers,
    get_setting,
    get_database_health
)

# Import setter functions
from .setters import (
    create_question,
    update_question,
    reveal_question,
    delete_question,
    reorder_questions,
    create_player,
    delete_player,
    upsert_answer,
    mark_answer_correct,
    mark_answer_incorrect,
    recompute_player_scores,
    reset_game,
)

__all__ = [
    # Models
    "Base",
    "Question",
    "Player",
    "Answer",
    "GameSetting",

    # Configuration
    "SessionLocal",
    "configure_database",
    "get_engine",
    "get_db_session",
    "init_database",
    "drop_database",

    # Getters
    "get_question_by_id",
    "get_questions",
    "get_revealed_questions",
    "count_questions",
    "get_player_by_id",
    "get_player_by_join_code",
    "get_players",
    "get_players_by_score",
    "count_players",
    "get_answer_by_id",
    "get_answer",
    "get_answers_for_question",
    "get_answers_for_player",
    "count_answers",
    "get_setting",
    "get_database_health",

    # Setters
    "create_question",
    "update_question",
    "reveal_question",
    "delete_question",
    "reorder_questions",
    "create_player",
    "delete_player",
    "upsert_answer",
    "mark_answer_correct",
    "mark_answer_incorrect",
    "recompute_player_scores",
    "reset_game",
]
