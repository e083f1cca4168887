"""
Authentication router.
Handles login, logout, session checks and password management.
"""

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Request, Response
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common.base import current_session
from rest_api.services.domain.auth_service import AuthService, user_info
from shared.config.logging import auth_logger as logger, mask_email
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import resolve_session_token
from shared.security.rate_limit import LOGIN_RATE_LIMIT, limiter
from shared.utils.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordResetRequestResponse,
    SessionCheckResponse,
    UserInfo,
)


router = APIRouter(prefix="/api/auth", tags=["auth"])

RESET_REQUESTED_MESSAGE = "If the email is registered, password reset instructions have been sent"


# =============================================================================
# HttpOnly Cookie Helpers
# =============================================================================


def set_session_cookie(response: Response, token: str) -> None:
    """
    Set the session token as an HttpOnly cookie with security flags.

    - httponly: Cannot be accessed by JavaScript (XSS protection)
    - secure: Only sent over HTTPS (configurable for dev)
    - samesite: CSRF protection (strict by default)
    - max_age: session lifetime
    """
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        max_age=settings.session_ttl_seconds,
        path="/",
        domain=settings.cookie_domain or None,
    )


def clear_session_cookie(response: Response) -> None:
    """Clear the session cookie on logout."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        domain=settings.cookie_domain or None,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/login", response_model=LoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: Session = Depends(get_db),
) -> LoginResponse:
    """
    Authenticate with username and password.

    The session token contains:
    - sub: user ID
    - restaurant_id: restaurant of the user (null for root admins)
    - roles: the user's role
    - email, username
    - jti: ID of the server-side session

    It is returned in the body and set as the HttpOnly session cookie.
    Five consecutive wrong passwords lock the account.
    """
    token, user = AuthService(db).authenticate(
        body.username,
        body.password,
        ip_address=get_remote_address(request),
        user_agent=request.headers.get("user-agent"),
    )
    set_session_cookie(response, token)
    logger.info("LOGIN_SUCCESS", email=mask_email(user.email), user_id=user.id, role=user.role)

    return LoginResponse(
        access_token=token,
        expires_in=settings.session_ttl_seconds,
        user=user_info(user),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    session: tuple[User, str] = Depends(current_session),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Revoke the current session and clear the cookie."""
    user, token_id = session
    AuthService(db).revoke_session(token_id, user.id)
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserInfo)
def me(session: tuple[User, str] = Depends(current_session)) -> UserInfo:
    """Current user info."""
    user, _ = session
    return user_info(user)


@router.get("/check", response_model=SessionCheckResponse)
def check_session(
    authorization: str | None = Header(default=None, alias="Authorization"),
    session_cookie: str | None = Cookie(default=None, alias=settings.session_cookie_name),
    db: Session = Depends(get_db),
) -> SessionCheckResponse:
    """Report whether the request carries a valid session, without failing."""
    try:
        token = resolve_session_token(authorization, session_cookie)
        user, _ = AuthService(db).validate_session(token)
    except HTTPException:
        return SessionCheckResponse(authenticated=False)
    return SessionCheckResponse(authenticated=True, user=user_info(user))


@router.post("/password-reset/request", response_model=PasswordResetRequestResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
def request_password_reset(
    request: Request,
    body: PasswordResetRequest,
    db: Session = Depends(get_db),
) -> PasswordResetRequestResponse:
    """
    Start a password reset. The answer is the same whether or not the email
    is registered. With DEBUG on, the token is included for local testing.
    """
    token, expires_at = AuthService(db).request_password_reset(body.email)
    if settings.debug and token is not None:
        return PasswordResetRequestResponse(
            message=RESET_REQUESTED_MESSAGE,
            reset_token=token,
            expires_at=expires_at,
        )
    return PasswordResetRequestResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/password-reset/confirm", response_model=MessageResponse)
def confirm_password_reset(
    body: PasswordResetConfirm,
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Set a new password with a reset token. Every session of the user ends."""
    AuthService(db).confirm_password_reset(body.token, body.new_password)
    return MessageResponse(message="Password has been reset")


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    session: tuple[User, str] = Depends(current_session),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Change the password of the signed-in user. Other sessions end."""
    user, token_id = session
    AuthService(db).change_password(
        user,
        body.current_password,
        body.new_password,
        current_token_id=token_id,
    )
    return MessageResponse(message="Password changed successfully")
