"""
Auth Service - credentials, server-side sessions, lock-out and password reset.

Session tokens are JWTs whose "jti" is stored as an AuthSession row. A token
is only accepted while that row exists, is not revoked and has not expired,
so logout and password changes take effect immediately.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session, selectinload

from rest_api.models import AuthSession, Credential, User
from shared.config.logging import audit_auth_event, audit_session_event, auth_logger as logger, mask_token
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.auth import generate_secure_token, generate_token_id, sign_jwt, verify_jwt
from shared.security.password import hash_password, needs_rehash, verify_password
from shared.utils.clock import as_utc, utcnow
from shared.utils.exceptions import (
    AccountLockedError,
    AuthenticationError,
    RestaurantInactiveError,
    ValidationError,
)
from shared.utils.schemas import UserInfo


# =============================================================================
# Module helpers (shared with the user service)
# =============================================================================


def hash_new_password(password: str) -> str:
    """
    Check the password policy and hash the password.

    Raises:
        ValidationError: Too short, or too long for bcrypt.
    """
    if len(password) < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters"
        )
    try:
        return hash_password(password)
    except ValueError as e:
        raise ValidationError(str(e))


def revoke_user_sessions(
    db: Session,
    user_id: int,
    *,
    except_token_id: str | None = None,
) -> None:
    """Mark every open session of the user as revoked. Caller commits."""
    stmt = (
        update(AuthSession)
        .where(AuthSession.user_id == user_id, AuthSession.revoked_at.is_(None))
        .values(revoked_at=utcnow())
    )
    if except_token_id is not None:
        stmt = stmt.where(AuthSession.token_id != except_token_id)
    db.execute(stmt.execution_options(synchronize_session=False))
    audit_session_event("REVOKED_ALL", user_id=user_id, kept_token_id=mask_token(except_token_id))


def purge_stale_sessions(db: Session, *, user_id: int | None = None) -> int:
    """
    Delete expired and revoked session rows, of one user or of everybody.
    Caller commits. A purged token is rejected like an unknown one.
    """
    stmt = delete(AuthSession).where(
        or_(AuthSession.expires_at <= utcnow(), AuthSession.revoked_at.is_not(None))
    )
    if user_id is not None:
        stmt = stmt.where(AuthSession.user_id == user_id)
    purged = db.execute(stmt.execution_options(synchronize_session=False)).rowcount or 0
    if purged:
        logger.info("Stale sessions purged", user_id=user_id, purged=purged)
    return purged


def restaurant_is_active(user: User) -> bool:
    """Root admins have no restaurant; everybody else needs an active one."""
    if user.restaurant_id is None:
        return True
    return user.restaurant is not None and user.restaurant.is_active


def user_info(user: User) -> UserInfo:
    return UserInfo(
        id=user.id,
        email=user.email,
        username=user.credential.username if user.credential else None,
        full_name=user.full_name,
        role=user.role,
        restaurant_id=user.restaurant_id,
    )


def user_context(user: User, token_id: str) -> dict[str, Any]:
    """Request context for an authenticated user (same keys as the JWT claims)."""
    return {
        "sub": str(user.id),
        "email": user.email,
        "username": user.credential.username if user.credential else None,
        "roles": [user.role],
        "restaurant_id": user.restaurant_id,
        "jti": token_id,
    }


class AuthService:
    """Login, logout, session validation and password management."""

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Login / Sessions
    # =========================================================================

    def authenticate(
        self,
        username: str,
        password: str,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[str, User]:
        """
        Check username and password and open a new session.

        Returns:
            (signed session token, user)

        Raises:
            AuthenticationError: Unknown username, inactive user or wrong password.
            AccountLockedError: Credential locked, or locked by this failure.
            RestaurantInactiveError: Right password, but the restaurant was deleted.
        """
        username = username.strip()
        credential = self._db.scalar(
            select(Credential)
            .options(selectinload(Credential.user).selectinload(User.restaurant))
            .where(Credential.username == username)
        )
        user = credential.user if credential else None

        if credential is None or user is None or not user.is_active or user.deleted_at is not None:
            audit_auth_event(
                "LOGIN", username=username, success=False,
                reason="unknown_user", ip_address=ip_address,
            )
            raise AuthenticationError("Invalid credentials")

        if credential.is_locked:
            audit_auth_event(
                "LOGIN", user_id=user.id, username=username, success=False,
                reason="locked", ip_address=ip_address,
            )
            raise AccountLockedError()

        if not verify_password(password, credential.password_hash):
            # Increment in SQL so concurrent failures are all counted
            self._db.execute(
                update(Credential)
                .where(Credential.id == credential.id)
                .values(failed_attempts=Credential.failed_attempts + 1)
                .execution_options(synchronize_session=False)
            )
            self._db.refresh(credential, ["failed_attempts"])
            locked_now = credential.failed_attempts >= settings.max_failed_login_attempts
            if locked_now:
                credential.is_locked = True
            safe_commit(self._db)

            if locked_now:
                audit_auth_event(
                    "ACCOUNT_LOCKED", user_id=user.id, username=username, success=False,
                    reason="too_many_failures", ip_address=ip_address,
                    failed_attempts=credential.failed_attempts,
                )
                raise AccountLockedError("Account locked for security")

            audit_auth_event(
                "LOGIN", user_id=user.id, username=username, success=False,
                reason="bad_password", ip_address=ip_address,
                failed_attempts=credential.failed_attempts,
            )
            raise AuthenticationError("Invalid credentials")

        if not restaurant_is_active(user):
            audit_auth_event(
                "LOGIN", user_id=user.id, username=username, success=False,
                reason="restaurant_inactive", ip_address=ip_address,
            )
            raise RestaurantInactiveError(user.restaurant_id, user_id=user.id)

        credential.failed_attempts = 0
        credential.last_login = utcnow()
        if needs_rehash(credential.password_hash):
            credential.password_hash = hash_password(password)

        purge_stale_sessions(self._db, user_id=user.id)
        token = self._open_session(user, ip_address=ip_address, user_agent=user_agent)
        safe_commit(self._db)

        audit_auth_event(
            "LOGIN", user_id=user.id, username=username, email=user.email,
            ip_address=ip_address, role=user.role,
        )
        return token, user

    def _open_session(
        self,
        user: User,
        *,
        ip_address: str | None,
        user_agent: str | None,
    ) -> str:
        token_id = generate_token_id()
        self._db.add(
            AuthSession(
                token_id=token_id,
                user_id=user.id,
                expires_at=utcnow() + timedelta(seconds=settings.session_ttl_seconds),
                ip_address=ip_address,
                user_agent=(user_agent or "")[:500] or None,
            )
        )
        audit_session_event("CREATED", user_id=user.id, token_id=token_id, ip_address=ip_address)
        return sign_jwt({
            "sub": str(user.id),
            "restaurant_id": user.restaurant_id,
            "roles": [user.role],
            "email": user.email,
            "username": user.credential.username if user.credential else None,
            "jti": token_id,
        })

    def validate_session(self, token: str) -> tuple[User, str]:
        """
        Resolve a session token to its user.

        Raises:
            HTTPException/AuthenticationError (401): Bad token, or a session
                that is unknown, revoked, expired or belongs to an inactive user.
            RestaurantInactiveError (403): The user's restaurant was deleted.
        """
        payload = verify_jwt(token)
        token_id = payload["jti"]

        session = self._db.scalar(
            select(AuthSession).where(AuthSession.token_id == token_id)
        )
        if session is None or session.revoked_at is not None:
            audit_session_event("REJECTED", token_id=token_id, reason="revoked_or_unknown")
            raise AuthenticationError("Session is no longer valid", token_id=mask_token(token_id))
        if as_utc(session.expires_at) <= utcnow():
            audit_session_event("REJECTED", user_id=session.user_id, token_id=token_id, reason="expired")
            raise AuthenticationError("Session has expired", token_id=mask_token(token_id))

        user = self._db.scalar(
            select(User)
            .options(selectinload(User.credential), selectinload(User.restaurant))
            .where(User.id == session.user_id)
        )
        if user is None or not user.is_active or user.deleted_at is not None:
            raise AuthenticationError("Session is no longer valid", user_id=session.user_id)
        if not restaurant_is_active(user):
            raise RestaurantInactiveError(user.restaurant_id, user_id=user.id)
        if str(user.id) != str(payload["sub"]):
            raise AuthenticationError("Session is no longer valid", user_id=session.user_id)

        return user, token_id

    def revoke_session(self, token_id: str, user_id: int | None = None) -> None:
        session = self._db.scalar(
            select(AuthSession).where(AuthSession.token_id == token_id)
        )
        if session is None or session.revoked_at is not None:
            return
        session.revoked_at = utcnow()
        safe_commit(self._db)
        audit_session_event("REVOKED", user_id=session.user_id, token_id=token_id)
        audit_auth_event("LOGOUT", user_id=user_id or session.user_id)

    # =========================================================================
    # Password management
    # =========================================================================

    def request_password_reset(self, email: str) -> tuple[str | None, datetime | None]:
        """
        Store a reset token for an active user with this email.

        Returns (token, expires_at), or (None, None) when no such user exists.
        Callers answer the same way in both cases.
        """
        user = self._db.scalar(
            select(User)
            .options(selectinload(User.credential))
            .where(
                User.email == email.strip().lower(),
                User.is_active.is_(True),
                User.deleted_at.is_(None),
            )
        )
        if user is None or user.credential is None:
            audit_auth_event(
                "PASSWORD_RESET_REQUESTED", email=email, success=False, reason="unknown_email"
            )
            return None, None

        token = generate_secure_token()
        expires_at = utcnow() + timedelta(minutes=settings.password_reset_token_expire_minutes)
        user.credential.reset_token = token
        user.credential.reset_token_expires = expires_at
        safe_commit(self._db)

        audit_auth_event("PASSWORD_RESET_REQUESTED", user_id=user.id, email=user.email)
        return token, expires_at

    def confirm_password_reset(self, token: str, new_password: str) -> None:
        """
        Set a new password from a reset token. Unlocks the account and
        revokes every session of the user.

        Raises:
            ValidationError: Unknown or expired token, or a weak password.
        """
        credential = self._db.scalar(
            select(Credential).where(Credential.reset_token == token)
        )
        if credential is None:
            audit_auth_event(
                "PASSWORD_RESET", success=False, reason="invalid_token",
                token=mask_token(token),
            )
            raise ValidationError("Invalid or expired reset token")

        expires = as_utc(credential.reset_token_expires)
        if expires is None or expires <= utcnow():
            credential.reset_token = None
            credential.reset_token_expires = None
            safe_commit(self._db)
            audit_auth_event(
                "PASSWORD_RESET", user_id=credential.user_id, success=False,
                reason="expired_token",
            )
            raise ValidationError("Invalid or expired reset token")

        credential.password_hash = hash_new_password(new_password)
        credential.reset_token = None
        credential.reset_token_expires = None
        credential.failed_attempts = 0
        credential.is_locked = False
        revoke_user_sessions(self._db, credential.user_id)
        safe_commit(self._db)

        audit_auth_event("PASSWORD_RESET", user_id=credential.user_id)

    def change_password(
        self,
        user: User,
        current_password: str,
        new_password: str,
        *,
        current_token_id: str | None = None,
    ) -> None:
        """
        Change the password of the signed-in user. Other sessions are revoked.

        Raises:
            ValidationError: Wrong current password, or a weak new password.
        """
        credential = user.credential
        if credential is None or not verify_password(current_password, credential.password_hash):
            audit_auth_event(
                "PASSWORD_CHANGE", user_id=user.id, success=False, reason="bad_password"
            )
            raise ValidationError("Current password is incorrect")

        credential.password_hash = hash_new_password(new_password)
        revoke_user_sessions(self._db, user.id, except_token_id=current_token_id)
        safe_commit(self._db)

        logger.info("Password changed", user_id=user.id)
        audit_auth_event("PASSWORD_CHANGE", user_id=user.id)
