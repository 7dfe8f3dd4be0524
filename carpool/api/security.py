"""Password hashing (passlib) and bearer-token encoding (PyJWT)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return _pwd_context.verify(password, hashed)


def create_access_token(
    user_id: int, secret: str, algorithm: str = "HS256", expire_minutes: int = 60
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=expire_minutes),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(
    token: str, secret: str, algorithm: str = "HS256"
) -> Optional[int]:
    """Return the user id in *token*, or ``None`` if it is invalid or expired."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
        return int(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        return None
