"""
User Service - staff accounts and their credentials.

Root admins manage every account. Restaurant admins only see and manage the
accounts of their own restaurant and can't create root admins.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Credential, User
from rest_api.services.crud.soft_delete import set_created_by, set_updated_by, soft_delete
from rest_api.services.domain.auth_service import hash_new_password, revoke_user_sessions
from rest_api.services.domain.restaurant_service import RestaurantService
from shared.config.constants import RESTAURANT_SCOPED_ROLES, Roles
from shared.config.logging import get_logger, mask_email
from shared.infrastructure.db import safe_commit
from shared.utils.admin_schemas import UserOutput
from shared.utils.exceptions import (
    DatabaseError,
    DuplicateEntityError,
    ForbiddenError,
    NotFoundError,
    RestaurantAccessError,
    ValidationError,
)

logger = get_logger(__name__)


def to_user_output(user: User) -> UserOutput:
    credential = user.credential
    return UserOutput(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        restaurant_id=user.restaurant_id,
        is_active=user.is_active,
        username=credential.username if credential else None,
        is_locked=credential.is_locked if credential else False,
        failed_attempts=credential.failed_attempts if credential else 0,
        last_login=credential.last_login if credential else None,
        created_at=user.created_at,
    )


class UserService:
    """CRUD for users. `actor` arguments are the request context of the caller."""

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Queries
    # =========================================================================

    def list_users(
        self,
        actor: dict[str, Any],
        restaurant_id: int | None = None,
    ) -> list[UserOutput]:
        stmt = (
            select(User)
            .options(selectinload(User.credential))
            .where(User.deleted_at.is_(None))
        )
        if not self._is_root(actor):
            restaurant_id = actor.get("restaurant_id")
        if restaurant_id is not None:
            stmt = stmt.where(User.restaurant_id == restaurant_id)
        users = self._db.scalars(stmt.order_by(User.created_at.desc(), User.id.desc())).all()
        return [to_user_output(u) for u in users]

    def get_entity(self, user_id: int, actor: dict[str, Any]) -> User:
        """
        User visible to the actor.

        Raises:
            NotFoundError: Unknown, deleted, or outside the actor's restaurant.
        """
        user = self._db.scalar(
            select(User)
            .options(selectinload(User.credential))
            .where(User.id == user_id, User.deleted_at.is_(None))
        )
        if user is None:
            raise NotFoundError("User", user_id)
        if not self._is_root(actor) and user.restaurant_id != actor.get("restaurant_id"):
            raise NotFoundError("User", user_id)
        return user

    def get_user(self, user_id: int, actor: dict[str, Any]) -> UserOutput:
        return to_user_output(self.get_entity(user_id, actor))

    # =========================================================================
    # Commands
    # =========================================================================

    def create_user(self, data: dict[str, Any], actor: dict[str, Any]) -> UserOutput:
        """
        Create a user and its credential.

        Raises:
            ForbiddenError: Restaurant admin creating a root admin or a user
                of another restaurant.
            ValidationError: Missing restaurant, duplicate email/username,
                weak password.
        """
        role = data["role"]
        restaurant_id = data.get("restaurant_id")

        if not self._is_root(actor):
            if role not in RESTAURANT_SCOPED_ROLES:
                raise ForbiddenError(f"create {role} users", actor_id=actor.get("sub"))
            if restaurant_id is None:
                restaurant_id = actor.get("restaurant_id")
            if restaurant_id != actor.get("restaurant_id"):
                raise RestaurantAccessError(restaurant_id, actor_id=actor.get("sub"))

        restaurant_id = self._resolve_restaurant(role, restaurant_id)

        email = data["email"].strip().lower()
        username = data["username"].strip()
        self._check_unique(email=email, username=username)
        password_hash = hash_new_password(data["password"])

        user = User(
            email=email,
            full_name=data.get("full_name"),
            role=role,
            restaurant_id=restaurant_id,
        )
        set_created_by(user, _actor_id(actor), actor.get("email"))
        user.credential = Credential(username=username, password_hash=password_hash)
        self._db.add(user)

        try:
            safe_commit(self._db)
            self._db.refresh(user)
        except Exception as e:
            logger.error("Failed to create user", error=str(e), email=mask_email(email))
            raise DatabaseError("create user")

        logger.info(
            "User created",
            user_id=user.id,
            role=role,
            restaurant_id=restaurant_id,
            created_by=actor.get("sub"),
        )
        return to_user_output(user)

    def update_user(
        self,
        user_id: int,
        data: dict[str, Any],
        actor: dict[str, Any],
    ) -> UserOutput:
        """
        Update profile, role, restaurant, active flag and optionally the password.
        Deactivating a user or changing the password ends their sessions.
        """
        user = self.get_entity(user_id, actor)

        role = data.get("role") or user.role
        restaurant_id = data.get("restaurant_id", user.restaurant_id)

        if not self._is_root(actor):
            if role not in RESTAURANT_SCOPED_ROLES:
                raise ForbiddenError(f"assign the {role} role", actor_id=actor.get("sub"))
            if restaurant_id is None:
                restaurant_id = actor.get("restaurant_id")
            if restaurant_id != actor.get("restaurant_id"):
                raise RestaurantAccessError(restaurant_id, actor_id=actor.get("sub"))

        if "role" in data or "restaurant_id" in data:
            user.restaurant_id = self._resolve_restaurant(role, restaurant_id)
            user.role = role

        if data.get("full_name") is not None:
            user.full_name = data["full_name"]

        end_sessions = False
        if data.get("is_active") is not None:
            if data["is_active"] is False and user.id == _actor_id(actor):
                raise ValidationError("You cannot deactivate your own account")
            end_sessions = user.is_active and not data["is_active"]
            user.is_active = data["is_active"]

        if data.get("password"):
            user.credential.password_hash = hash_new_password(data["password"])
            end_sessions = True

        if end_sessions:
            revoke_user_sessions(self._db, user.id)

        set_updated_by(user, _actor_id(actor), actor.get("email"))

        try:
            safe_commit(self._db)
            self._db.refresh(user)
        except Exception as e:
            logger.error("Failed to update user", error=str(e), user_id=user_id)
            raise DatabaseError("update user")

        logger.info("User updated", user_id=user.id, fields=sorted(data), updated_by=actor.get("sub"))
        return to_user_output(user)

    def delete_user(self, user_id: int, actor: dict[str, Any]) -> None:
        """Soft delete a user and end their sessions. Users can't delete themselves."""
        if user_id == _actor_id(actor):
            raise ValidationError("You cannot delete your own account")
        user = self.get_entity(user_id, actor)

        revoke_user_sessions(self._db, user.id)
        soft_delete(self._db, user, _actor_id(actor), actor.get("email"))
        logger.info("User deleted", user_id=user_id, deleted_by=actor.get("sub"))

    def unlock_user(self, user_id: int, actor: dict[str, Any]) -> UserOutput:
        """Clear the lock-out state of a user's credential."""
        user = self.get_entity(user_id, actor)
        if user.credential is None:
            raise NotFoundError("Credential", user_id)

        user.credential.is_locked = False
        user.credential.failed_attempts = 0
        set_updated_by(user.credential, _actor_id(actor), actor.get("email"))
        safe_commit(self._db)
        self._db.refresh(user)

        logger.info("User unlocked", user_id=user_id, unlocked_by=actor.get("sub"))
        return to_user_output(user)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    @staticmethod
    def _is_root(actor: dict[str, Any]) -> bool:
        return Roles.ROOT_ADMIN in actor.get("roles", [])

    def _resolve_restaurant(self, role: str, restaurant_id: int | None) -> int | None:
        """Root admins have no restaurant; every other role needs an active one."""
        if role == Roles.ROOT_ADMIN:
            return None
        if restaurant_id is None:
            raise ValidationError(f"restaurant_id is required for role '{role}'")
        # Raises RestaurantNotFoundError for unknown or inactive restaurants
        RestaurantService(self._db).get_entity(restaurant_id)
        return restaurant_id

    def _check_unique(self, *, email: str, username: str) -> None:
        email_taken = self._db.scalar(
            select(func.count(User.id)).where(User.email == email)
        )
        if email_taken:
            raise DuplicateEntityError("User with email", email)
        username_taken = self._db.scalar(
            select(func.count(Credential.id)).where(Credential.username == username)
        )
        if username_taken:
            raise DuplicateEntityError("Username", username)


def _actor_id(actor: dict[str, Any]) -> int | None:
    sub = actor.get("sub")
    return int(sub) if sub is not None else None
