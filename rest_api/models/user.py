"""
User and Authentication Models.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .restaurant import Restaurant


class User(AuditMixin, Base):
    """
    Represents a person who can sign in to the admin panel.
    root_admin users have no restaurant; every other role is scoped to one.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    full_name: Mapped[Optional[str]] = mapped_column(Text)
    role: Mapped[str] = mapped_column(Text, nullable=False)  # root_admin, restaurant_admin, kitchen
    restaurant_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=True, index=True
    )

    # Relationships
    restaurant: Mapped[Optional["Restaurant"]] = relationship(back_populates="users")
    credential: Mapped[Optional["Credential"]] = relationship(
        back_populates="user", uselist=False
    )
    sessions: Mapped[list["AuthSession"]] = relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"


class Credential(AuditMixin, Base):
    """
    Username and bcrypt hash of a user, plus lock-out and reset state.
    The salt is embedded in the bcrypt hash.
    """

    __tablename__ = "credential"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False, unique=True
    )
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    failed_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reset_token: Mapped[Optional[str]] = mapped_column(Text, index=True)
    reset_token_expires: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    user: Mapped["User"] = relationship(back_populates="credential")

    def __repr__(self) -> str:
        return f"<Credential(user_id={self.user_id}, username='{self.username}', locked={self.is_locked})>"


class AuthSession(Base):
    """
    Server-side record of an issued session token, keyed by the JWT jti.
    A token is only accepted while its row exists, is not revoked and not expired.
    """

    __tablename__ = "auth_session"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    token_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    ip_address: Mapped[Optional[str]] = mapped_column(Text)
    user_agent: Mapped[Optional[str]] = mapped_column(Text)

    user: Mapped["User"] = relationship(back_populates="sessions")

    def __repr__(self) -> str:
        state = "revoked" if self.revoked_at else "open"
        return f"<AuthSession(user_id={self.user_id}, {state})>"
