# core/security.py
"""
Password hashing and JWT handling for requester identity.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from config import settings

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE = timedelta(hours=12)
REFRESH_TOKEN_EXPIRE = timedelta(days=7)

_DEV_SECRET = "dev-secret-key-change-in-production"


def get_secret_key() -> str:
    """JWT secret from settings, with a development fallback."""
    return settings.SECRET_KEY or _DEV_SECRET


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def _encode(data: dict[str, Any], expires_delta: timedelta, token_type: str) -> str:
    to_encode = data.copy()
    to_encode.update({
        "exp": datetime.now(timezone.utc) + expires_delta,
        "type": token_type,
    })
    return jwt.encode(to_encode, get_secret_key(), algorithm=ALGORITHM)


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode, at least `sub` (the user id)
        expires_delta: Optional custom lifetime
    """
    return _encode(data, expires_delta or ACCESS_TOKEN_EXPIRE, "access")


def create_refresh_token(data: dict[str, Any]) -> str:
    return _encode(data, REFRESH_TOKEN_EXPIRE, "refresh")


def decode_token(token: str) -> dict[str, Any] | None:
    """Decoded payload if the token is valid, None otherwise."""
    try:
        return jwt.decode(token, get_secret_key(), algorithms=[ALGORITHM])
    except JWTError:
        return None


def verify_token_type(token: str, expected_type: str) -> dict[str, Any] | None:
    payload = decode_token(token)
    if payload is None or payload.get("type") != expected_type:
        return None
    return payload
