"""Password hashing and access-token helpers."""
from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from inkwell.core.settings import settings

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash ``password`` with bcrypt at the configured cost factor."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check ``plain_password`` against a stored bcrypt hash.

    Malformed hashes never verify.
    """
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Invalid password hash format detected")
        return False


def create_access_token(
    user_id: int,
    role_id: int | None,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed token embedding the user and role identifiers.

    Args:
        user_id: Primary key of the authenticated user.
        role_id: Role row the user held at login time.
        expires_delta: Optional lifetime override; defaults to the configured 30 days.

    Returns:
        Encoded JWT string.
    """
    issued_at = datetime.now(UTC)
    expire = issued_at + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    claims = {
        "sub": str(user_id),
        "userId": user_id,
        "roleId": role_id,
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Return the token claims, or None if the signature or expiry is invalid."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
