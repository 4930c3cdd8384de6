"""Security utilities: password hashing and JWT sessions."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

from cineverse.core.config import settings
from cineverse.core.logging import get_logger
from cineverse.core.permissions import permissions_for

logger = get_logger(__name__)

SESSION_TOKEN_TYPE = "session"

_password_hasher = PasswordHasher()


def hash_password(plain_password: str) -> str:
    """Hash a plain password using Argon2."""
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify a plain password against a hash."""
    try:
        _password_hasher.verify(password_hash, plain_password)
        return True
    except VerifyMismatchError:
        return False
    except Exception as e:
        logger.warning(f"Password verification error: {e}")
        return False


@dataclass
class SessionData:
    """Decoded session token claims."""

    user_id: str
    role: str
    name: str | None = None
    email: str | None = None
    permissions: list[str] = field(default_factory=list)
    expires_at: datetime | None = None


def _secret() -> str:
    if not settings.AUTH_SECRET:
        raise ValueError("AUTH_SECRET must be set")
    return settings.AUTH_SECRET


def create_session_token(
    user_id: str,
    role: str,
    name: str | None = None,
    email: str | None = None,
    expires_minutes: int | None = None,
) -> tuple[str, datetime]:
    """Create a signed session token carrying role and derived permissions.

    Returns the token and its expiry.
    """
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expires_minutes or settings.SESSION_EXPIRE_MINUTES)

    payload = {
        "sub": str(user_id),
        "name": name,
        "email": email,
        "role": role,
        "permissions": permissions_for(role),
        "iat": now,
        "exp": expire,
        "jti": str(uuid4()),
        "type": SESSION_TOKEN_TYPE,
    }

    return jwt.encode(payload, _secret(), algorithm=settings.JWT_ALG), expire


def verify_session_token(token: str) -> SessionData:
    """Verify and decode a session token.

    Raises jwt.InvalidTokenError for expired, tampered or foreign tokens.
    """
    try:
        payload: dict[str, Any] = jwt.decode(token, _secret(), algorithms=[settings.JWT_ALG])
    except jwt.ExpiredSignatureError:
        raise jwt.InvalidTokenError("Token has expired")

    if payload.get("type") != SESSION_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Token is not a session token")
    if "sub" not in payload or "role" not in payload:
        raise jwt.InvalidTokenError("Token is missing required claims")

    return SessionData(
        user_id=payload["sub"],
        role=payload["role"],
        name=payload.get("name"),
        email=payload.get("email"),
        permissions=list(payload.get("permissions") or []),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
