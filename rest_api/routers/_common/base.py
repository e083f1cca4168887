"""
Request context dependencies shared by every authenticated router.

The session token comes from the Authorization header (Bearer) or from the
HttpOnly session cookie. Besides verifying the JWT, the matching AuthSession
row must still be open.
"""

from typing import Any

from fastapi import Cookie, Depends, Header, Request
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.services.domain.auth_service import AuthService, user_context
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import resolve_session_token


def current_session(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    session_cookie: str | None = Cookie(default=None, alias=settings.session_cookie_name),
    db: Session = Depends(get_db),
) -> tuple[User, str]:
    """
    FastAPI dependency resolving the signed-in user and the session token ID.

    Raises:
        HTTPException: 401 when there is no token or the session is not valid.
    """
    token = resolve_session_token(authorization, session_cookie)
    user, token_id = AuthService(db).validate_session(token)
    request.state.user_id = user.id
    return user, token_id


def current_user_context(
    session: tuple[User, str] = Depends(current_session),
) -> dict[str, Any]:
    """
    FastAPI dependency to get the current user context.

    Usage:
        @router.get("/protected")
        def protected_endpoint(ctx: dict = Depends(current_user_context)):
            user_id = get_user_id(ctx)
            restaurant_id = ctx["restaurant_id"]

    Returns:
        Dict with: sub (user_id), email, username, roles, restaurant_id, jti
    """
    user, token_id = session
    return user_context(user, token_id)


def get_user_id(user: dict[str, Any]) -> int:
    """User ID of the request context."""
    return int(user["sub"])


def get_user_email(user: dict[str, Any]) -> str:
    """Email of the request context (empty string when missing)."""
    return user.get("email", "")
