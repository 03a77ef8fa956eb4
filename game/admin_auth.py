"""
Admin authentication for the trivia backend.

The admin password lives in the game_settings table. A successful login
yields an AdminSession with a fixed lifetime; the web layer keeps the
issue time in the signed session cookie and checks expiry before every
admin operation.
"""

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from database import get_setting
from utils.constants import SETTING_KEYS
from utils.exceptions import ValidationError, PermissionDeniedError

logger = logging.getLogger(__name__)

@dataclass
class AdminSession:
    """An authenticated admin login."""
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'issued_at': self.issued_at.isoformat(),
            'expires_at': self.expires_at.isoformat()
        }

class AdminAuth:
    """Checks the admin password and rebuilds sessions from stored timestamps."""

    def __init__(self, session_hours: int = 24):
        self.session_lifetime = timedelta(hours=session_hours)

    def authenticate(self, password: str, now: Optional[datetime] = None) -> AdminSession:
        """
        Start an admin session.

        Raises:
            ValidationError: no password given
            PermissionDeniedError: wrong password
        """
        if not password or not str(password).strip():
            raise ValidationError("Password is required")

        expected = get_setting(SETTING_KEYS['ADMIN_PASSWORD'])
        if expected is None or not hmac.compare_digest(str(password).encode(), expected.encode()):
            logger.warning("Rejected admin login")
            raise PermissionDeniedError("Invalid password")

        issued_at = now or datetime.now(timezone.utc)
        logger.info("Admin logged in")
        return AdminSession(issued_at=issued_at, expires_at=issued_at + self.session_lifetime)

    def restore_session(self, issued_at_iso: Optional[str],
                        now: Optional[datetime] = None) -> Optional[AdminSession]:
        """
        Rebuild a session from its stored issue time.

        Returns:
            The session, or None when missing, malformed or expired
        """
        if not issued_at_iso:
            return None
        try:
            issued_at = datetime.fromisoformat(issued_at_iso)
        except (TypeError, ValueError):
            logger.warning("Discarding malformed admin session timestamp")
            return None
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)

        session = AdminSession(issued_at=issued_at, expires_at=issued_at + self.session_lifetime)
        if session.is_expired(now):
            logger.info("Admin session expired")
            return None
        return session
