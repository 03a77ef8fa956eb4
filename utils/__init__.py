"""
Utilities module for the trivia backend.

This module contains constants, helper functions, and the error
taxonomy used throughout the application.
"""

from .constants import QUESTION_TYPES, QUESTION_STATUS, SETTING_KEYS, FEED_TABLES, FEED_ACTIONS
from .helpers import generate_join_code, generate_share_code, normalize_code, validate_player_name
from .exceptions import (
    TriviaError,
    ValidationError,
    NotFoundError,
    ConflictError,
    OrderingConflictError,
    PermissionDeniedError
)

__all__ = [
    'QUESTION_TYPES',
    'QUESTION_STATUS',
    'SETTING_KEYS',
    'FEED_TABLES',
    'FEED_ACTIONS',
    'generate_join_code',
    'generate_share_code',
    'normalize_code',
    'validate_player_name',
    'TriviaError',
    'ValidationError',
    'NotFoundError',
    'ConflictError',
    'OrderingConflictError',
    'PermissionDeniedError'
]
