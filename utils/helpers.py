"""
Helper utilities for the trivia backend.

This module contains utility functions used throughout the application
for validation, code generation, and text normalisation.
"""

import random
import re
import string
from typing import List, Optional

from .constants import (
    JOIN_CODE_ALPHABET,
    JOIN_CODE_PREFIX_LENGTH,
    JOIN_CODE_SUFFIX_LENGTH,
    MAX_PLAYER_NAME_LENGTH,
    SHARE_CODE_LENGTH
)

def generate_share_code(length: int = SHARE_CODE_LENGTH) -> str:
    """Generate a random game share code."""
    characters = string.ascii_uppercase + string.digits
    return ''.join(random.choices(characters, k=length))

def generate_join_code(name: str) -> str:
    """
    Generate a player's rejoin code from their display name.

    The prefix is the first four characters of the name, upper-cased,
    with anything outside A-Z replaced by 'X'. The suffix is random.

    Args:
        name: Player display name

    Returns:
        Code such as "JOHN-A1B2"
    """
    prefix = re.sub(r'[^A-Z]', 'X', name[:JOIN_CODE_PREFIX_LENGTH].upper())
    suffix = ''.join(random.choices(JOIN_CODE_ALPHABET, k=JOIN_CODE_SUFFIX_LENGTH))
    return f"{prefix}-{suffix}"

def normalize_code(code: Optional[str]) -> str:
    """Trim and upper-case a join or share code."""
    if code is None:
        return ''
    return str(code).strip().upper()

def clean_text(value: Optional[str]) -> str:
    """Trim surrounding whitespace, treating None as empty."""
    if value is None:
        return ''
    return str(value).strip()

def clean_options(options: Optional[List[str]]) -> List[str]:
    """
    Drop blank multiple choice options and trim the rest.

    Order is preserved.
    """
    if not options:
        return []
    return [str(opt).strip() for opt in options if opt is not None and str(opt).strip()]

def validate_player_name(name: str) -> tuple[bool, Optional[str]]:
    """
    Validate a display name for the game.

    Returns:
        tuple: (is_valid, error_message)
    """
    if not name:
        return False, "Name cannot be empty"

    if len(name) > MAX_PLAYER_NAME_LENGTH:
        return False, f"Name must be {MAX_PLAYER_NAME_LENGTH} characters or less"

    return True, None

def is_positive_int(value) -> bool:
    """True for ints (not bools) greater than zero."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0

def is_non_negative_int(value) -> bool:
    """True for ints (not bools) greater than or equal to zero."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
