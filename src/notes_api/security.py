"""Password hashing and JWT helpers."""

from datetime import datetime, timedelta
from typing import Any, Dict

import bcrypt
import jwt

from .config import settings

# bcrypt only considers the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password with a freshly generated bcrypt salt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _create_token(username: str, roles: list, expires: timedelta, token_type: str) -> str:
    payload = {
        "sub": username,
        "roles": roles,
        "exp": datetime.utcnow() + expires,
        "type": token_type,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(username: str, roles: list) -> str:
    return _create_token(
        username, roles, timedelta(minutes=settings.access_token_expire_minutes), "access"
    )


def create_refresh_token(username: str, roles: list) -> str:
    return _create_token(
        username, roles, timedelta(minutes=settings.refresh_token_expire_minutes), "refresh"
    )


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify a token, raising ``jwt.PyJWTError`` when invalid."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
