"""
Admin authentication: shared password check and signed sessions.

The console is guarded by a single shared password. A successful login
issues an explicit ``AdminSession`` (issue time and expiry) encoded as a
signed JWT, which every admin route verifies server-side.
"""

import hmac
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from jose import JWTError, jwt

from votetally.core.config import Settings, settings
from votetally.core.logging_config import get_logger

logger = get_logger(__name__)

SESSION_SUBJECT = "admin"

# Argon2id parameters for ADMIN_PASSWORD_HASH
ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,  # 64 MB
    parallelism=4,
    hash_len=32,
    salt_len=16,
    type=Type.ID,
)


@dataclass(frozen=True)
class AdminSession:
    """An authenticated admin console session."""

    session_id: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Used to produce a value for ADMIN_PASSWORD_HASH.
    """
    return ph.hash(password)


def verify_admin_password(password: str, config: Settings | None = None) -> bool:
    """
    Check a submitted password against the configured shared secret.

    Uses the argon2 hash when ADMIN_PASSWORD_HASH is configured, otherwise a
    constant-time comparison with ADMIN_PASSWORD.
    """
    config = config or settings

    if config.ADMIN_PASSWORD_HASH:
        try:
            return ph.verify(config.ADMIN_PASSWORD_HASH, password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False

    return hmac.compare_digest(
        password.encode("utf-8"), config.ADMIN_PASSWORD.encode("utf-8")
    )


def create_admin_session(
    ttl: timedelta | None = None, now: datetime | None = None
) -> AdminSession:
    """Start a new admin session expiring after the configured TTL."""
    issued_at = (now or datetime.now(UTC)).replace(microsecond=0)
    if ttl is None:
        ttl = timedelta(seconds=settings.ADMIN_SESSION_TTL_SECONDS)

    return AdminSession(
        session_id=secrets.token_urlsafe(16),
        issued_at=issued_at,
        expires_at=issued_at + ttl,
    )


def encode_session(session: AdminSession) -> str:
    """Encode a session as a signed JWT."""
    payload = {
        "sub": SESSION_SUBJECT,
        "jti": session.session_id,
        "iat": int(session.issued_at.timestamp()),
        "exp": int(session.expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_session(token: str) -> AdminSession | None:
    """
    Decode and verify a session token.

    Returns:
        The session, or None if the token is invalid, expired or not an admin
        session.
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        logger.debug(f"Rejected session token: {e}")
        return None

    if payload.get("sub") != SESSION_SUBJECT or "jti" not in payload:
        return None

    session = AdminSession(
        session_id=payload["jti"],
        issued_at=datetime.fromtimestamp(payload["iat"], UTC),
        expires_at=datetime.fromtimestamp(payload["exp"], UTC),
    )
    if session.is_expired():
        return None
    return session
