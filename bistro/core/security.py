"""
Session Token Service

Issues and verifies the signed JWTs clients send as
`Authorization: Bearer <token>`. Tokens carry the user's email and
expire after ACCESS_TOKEN_EXPIRE_MINUTES (one hour by default).
There is no refresh flow; clients request a new token from POST /jwt.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from bistro.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Raised when a token is missing its claims, malformed, tampered or expired."""


def issue_token(claims: dict[str, Any], settings: Optional[Settings] = None) -> str:
    """
    Sign a session token for the given identity claims.

    Args:
        claims: Payload to sign; must include "email"
        settings: Override for the cached settings

    Returns:
        Encoded JWT string
    """
    settings = settings or get_settings()

    if not claims.get("email"):
        raise TokenError("Token claims must include an email")

    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": now,
        "exp": now + timedelta(minutes=settings.access_token_expire_minutes),
    }
    return jwt.encode(
        payload,
        settings.access_token_secret,
        algorithm=settings.jwt_algorithm,
    )


def verify_token(token: str, settings: Optional[Settings] = None) -> dict[str, Any]:
    """
    Decode a session token and return its claims.

    Raises:
        TokenError: If the signature, expiry or email claim is invalid
    """
    settings = settings or get_settings()

    try:
        claims = jwt.decode(
            token,
            settings.access_token_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        logger.debug(f"Rejected expired token: {e}")
        raise TokenError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected invalid token: {e}")
        raise TokenError("Invalid token") from e

    if not isinstance(claims.get("email"), str) or not claims["email"]:
        raise TokenError("Token has no email claim")

    return claims
