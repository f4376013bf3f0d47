"""
Session Management.

Tracks authenticated sessions by opaque token. The identity attached to a
session is resolved once, when the session is established, and is read back
unchanged on every later check.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from datetime import datetime, timedelta, timezone
import logging
import secrets

logger = logging.getLogger(__name__)


def generate_session_token() -> str:
    """Generate a secure session token."""
    return secrets.token_urlsafe(32)


@dataclass
class SessionContext:
    """
    A single authenticated session.

    Attributes:
        token: Opaque token handed to the client
        identity: The identity value resolved at sign-in
        provider_token: Access token issued by an upstream identity provider, if any
    """
    token: str
    identity: Any
    provider_token: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now > self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization (token excluded)."""
        identity = self.identity.to_dict() if hasattr(self.identity, "to_dict") else self.identity
        return {
            "identity": identity,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }


class SessionManager:
    """
    Manages sessions in process memory.

    Sessions do not survive a restart; clients sign in again.
    """

    def __init__(self, ttl_hours: int = 24):
        self._sessions: Dict[str, SessionContext] = {}
        self._ttl = timedelta(hours=ttl_hours)

    def create(self, identity: Any, provider_token: Optional[str] = None) -> SessionContext:
        """Create a new session for an identity and return it."""
        now = datetime.now(timezone.utc)
        self._prune_expired(now)
        session = SessionContext(
            token=generate_session_token(),
            identity=identity,
            provider_token=provider_token,
            created_at=now,
            expires_at=now + self._ttl,
        )
        self._sessions[session.token] = session
        logger.debug("Created session")
        return session

    def _prune_expired(self, now: datetime) -> None:
        expired = [token for token, session in self._sessions.items() if session.is_expired(now)]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.debug(f"Pruned {len(expired)} expired sessions")

    def get(self, token: Optional[str]) -> Optional[SessionContext]:
        """Get the session for a token, or None if invalid or expired."""
        if not token or token not in self._sessions:
            return None

        session = self._sessions[token]
        if session.is_expired():
            del self._sessions[token]
            logger.debug("Dropped expired session")
            return None

        return session

    def delete(self, token: Optional[str]) -> Optional[SessionContext]:
        """Delete a session (logout) and return it if it existed."""
        if not token:
            return None
        return self._sessions.pop(token, None)

    def __len__(self) -> int:
        return len(self._sessions)
