from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from leaveflow.config import get_settings
from leaveflow.exceptions import Unauthorized


def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is malformed.
        return False


def create_access_token(user_id: uuid.UUID, role: str, expires_minutes: int | None = None) -> str:
    """Issue a signed session token for the given user."""
    settings = get_settings()
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes
    now = datetime.now(UTC)
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> uuid.UUID:
    """Validate a session token and return the user id it was issued for."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise Unauthorized("Could not validate credentials") from None

    subject = payload.get("sub")
    if not subject:
        raise Unauthorized("Could not validate credentials")
    try:
        return uuid.UUID(subject)
    except ValueError:
        raise Unauthorized("Could not validate credentials") from None
