"""
Session token utilities.

Session tokens are HS256 JWTs. Each token carries a unique "jti" that is also
stored server-side (see rest_api.models.AuthSession) so that logout and
password changes can revoke it before it expires.
"""

from __future__ import annotations

import secrets
import time
import uuid
from typing import Any

import jwt
from fastapi import HTTPException, status

from shared.config.settings import (
    JWT_SECRET,
    JWT_ISSUER,
    JWT_AUDIENCE,
    settings,
)
from shared.config.logging import get_logger

logger = get_logger(__name__)

SESSION_TOKEN_TYPE = "session"


def generate_token_id() -> str:
    """Unique ID for a new session token."""
    return str(uuid.uuid4())


def generate_secure_token(nbytes: int = 32) -> str:
    """Random hex token (64 hex chars for the default 32 bytes)."""
    return secrets.token_hex(nbytes)


# =============================================================================
# JWT Functions
# =============================================================================


def sign_jwt(
    payload: dict[str, Any],
    ttl_seconds: int | None = None,
    token_type: str = SESSION_TOKEN_TYPE,
) -> str:
    """
    Sign a JWT token with the given payload.

    Args:
        payload: Claims to include (sub, restaurant_id, roles, email, ...).
            A "jti" in the payload is kept, otherwise a new one is generated.
        ttl_seconds: Token lifetime in seconds. Defaults to the session lifetime.
        token_type: Value of the "type" claim.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.session_ttl_seconds

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": token_type,
        "jti": payload.get("jti") or generate_token_id(),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a session JWT.

    Checks signature, expiry, issuer, audience and the required claims.
    Session revocation is checked separately against the database.

    Raises:
        HTTPException: 401 if the token is invalid or expired.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session has expired",
        )
    except jwt.InvalidTokenError as e:
        # Log the actual error, return a generic message
        logger.warning("JWT validation failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    if payload.get("type") != SESSION_TOKEN_TYPE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: invalid type claim",
        )

    if not payload.get("jti"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing token id",
        )

    try:
        int(payload["sub"])
    except (KeyError, ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: malformed subject claim",
        )

    restaurant_id = payload.get("restaurant_id")
    if restaurant_id is not None and not isinstance(restaurant_id, int):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: malformed restaurant_id claim",
        )

    return payload


def get_bearer_token(authorization: str | None) -> str | None:
    """
    Extract bearer token from an Authorization header.

    Returns None when the header is absent.

    Raises:
        HTTPException: If the header is present but malformed.
    """
    if not authorization:
        return None
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format. Expected: Bearer <token>",
        )
    return authorization.split(" ", 1)[1].strip() or None


def resolve_session_token(authorization: str | None, cookie_token: str | None) -> str:
    """
    Pick the session token from the Authorization header, falling back to the cookie.

    Raises:
        HTTPException: 401 if neither carries a token.
    """
    token = get_bearer_token(authorization) or cookie_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return token
