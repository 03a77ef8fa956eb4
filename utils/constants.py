"""
Game constants for the trivia backend.

This module contains all constant values used throughout the game,
including question types, validation limits, and setting keys.
"""

# Question types
QUESTION_TYPES = {
    'FREEFORM': 'freeform',
    'MULTIPLE_CHOICE': 'multiple_choice'
}

# Question status as seen by a player
QUESTION_STATUS = {
    'OPEN': 'open',          # No answer submitted yet
    'ANSWERED': 'answered',  # Answer submitted, can still be changed
    'REVEALED': 'revealed'   # Correct answer published, input closed
}

# Keys in the game_settings table
SETTING_KEYS = {
    'SHARE_CODE': 'share_code',
    'ADMIN_PASSWORD': 'admin_password'
}

# Tables published on the change feed
FEED_TABLES = ('questions', 'players', 'answers')

# Change feed actions
FEED_ACTIONS = {
    'INSERT': 'insert',
    'UPDATE': 'update',
    'DELETE': 'delete',
    'SYNC': 'sync'  # Periodic reconciliation pass
}

# Validation limits
MIN_CHOICE_OPTIONS = 2
MAX_CHOICE_OPTIONS = 6
MAX_PLAYER_NAME_LENGTH = 100
MAX_ANSWER_LENGTH = 500
MAX_QUESTION_LENGTH = 1000

# Join codes look like "JOHN-A1B2"
JOIN_CODE_PREFIX_LENGTH = 4
JOIN_CODE_SUFFIX_LENGTH = 4
JOIN_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
JOIN_CODE_ATTEMPTS = 24

# Share code handed out by the admin
SHARE_CODE_LENGTH = 6

# Fields an admin may change through edit_question
EDITABLE_QUESTION_FIELDS = (
    'question_text',
    'question_type',
    'options',
    'points',
    'is_active',
    'is_revealed',
    'correct_answer'
)
