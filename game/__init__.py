"""
Game Module for the trivia backend.

Contains all game-specific logic: question authoring, answer submission,
reveal and grading, players, admin sessions and the change feed.
"""

from .change_feed import ChangeFeed, ChangeEvent, ReconciliationLoop
from .question_manager import QuestionManager
from .answer_manager import AnswerManager
from .player_manager import PlayerManager
from .scoring import ScoringEngine
from .admin_auth import AdminAuth, AdminSession
from .manager import GameManager

__all__ = [
    # Change feed
    'ChangeFeed',
    'ChangeEvent',
    'ReconciliationLoop',

    # Admin sessions
    'AdminAuth',
    'AdminSession',

    # Managers
    'GameManager',
    'QuestionManager',
    'AnswerManager',
    'PlayerManager',
    'ScoringEngine'
]
