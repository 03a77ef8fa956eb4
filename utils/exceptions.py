"""
Error taxonomy for the trivia backend.

Core operations raise these; the handlers turn them into error payloads
with the matching HTTP status.
"""

from typing import Any, Optional

class TriviaError(Exception):
    """Base class for all expected game errors."""

    status_code = 400
    code = 'trivia_error'

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else {}

class ValidationError(TriviaError):
    """Malformed or insufficient input."""

    status_code = 400
    code = 'validation_error'

class NotFoundError(TriviaError):
    """A referenced id does not exist."""

    status_code = 404
    code = 'not_found'

class ConflictError(TriviaError):
    """The request clashes with the current game state."""

    status_code = 409
    code = 'conflict'

class OrderingConflictError(ConflictError, ValidationError):
    """Reorder received an id set that is not a permutation of the stored one."""

    status_code = 409
    code = 'ordering_conflict'

class PermissionDeniedError(TriviaError):
    """Wrong admin password or share code."""

    status_code = 403
    code = 'permission_denied'
