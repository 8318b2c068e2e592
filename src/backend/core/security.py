"""Security utilities for authentication.

Players are anonymous: a bearer token is the only credential and its `sub`
claim is the player's uid.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from core.config import settings

# Token issuer and audience for validation
TOKEN_ISSUER = "thisorthat-api"
TOKEN_AUDIENCE = "thisorthat-client"


def create_access_token(
    uid: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token for `uid`."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": uid,
        "exp": expire,
        "iat": now,
        "type": "access",
        "iss": TOKEN_ISSUER,
        "aud": TOKEN_AUDIENCE,
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate an access token.

    Returns:
        The decoded payload or None if invalid, expired or not an access token
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=TOKEN_ISSUER,
            audience=TOKEN_AUDIENCE,
        )
    except JWTError:
        return None

    if payload.get("type") != "access":
        return None
    return payload
