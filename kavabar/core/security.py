"""
Passwords and bearer tokens.

Tokens carry the user id as ``sub`` and their kind as ``type``; an access
token is never accepted where a refresh token is expected, nor the reverse.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from passlib.context import CryptContext

from kavabar.core.config import settings

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"

password_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    return password_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return password_context.verify(password, hashed_password)


def _lifetime(token_type: str) -> timedelta:
    if token_type == REFRESH:
        return timedelta(minutes=settings.refresh_token_expire_minutes)
    return timedelta(minutes=settings.access_token_expire_minutes)


def create_token(user_id: int, token_type: str = ACCESS) -> str:
    issued = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "type": token_type,
        "iat": issued,
        "exp": issued + _lifetime(token_type),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def token_user_id(token: str, expected_type: str = ACCESS) -> Optional[int]:
    """User id of a valid token of ``expected_type``; None for anything else."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        logger.debug("Rejected token: %s", exc)
        return None
    if payload.get("type") != expected_type:
        return None
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None
