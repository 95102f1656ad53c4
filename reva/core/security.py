"""
Security utilities: password hashing, password policy and access tokens.

Passwords are hashed with bcrypt (12 rounds) via passlib; access tokens are
HS256 JWTs signed with settings.jwt_secret.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from reva.config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)

_PASSWORD_RULES = (
    (r".{8,}", "Password must be at least 8 characters long"),
    (r"[A-Z]", "Password must contain at least one uppercase letter"),
    (r"[a-z]", "Password must contain at least one lowercase letter"),
    (r"[0-9]", "Password must contain at least one number"),
    (r"[^A-Za-z0-9]", "Password must contain at least one special character"),
)


def validate_password_strength(password: str) -> None:
    """
    Raise ValueError naming the first rule the password breaks.
    """
    for pattern, message in _PASSWORD_RULES:
        if not re.search(pattern, password):
            raise ValueError(message)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return pwd_context.verify(password, hashed_password)


def create_access_token(user_id: int, username: str, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)
    payload = {"sub": str(user_id), "username": username, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> dict[str, Any] | None:
    """
    Decode and verify a token.

    Returns:
        The token claims, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
