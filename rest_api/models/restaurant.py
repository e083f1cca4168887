"""
Multi-Tenancy Models: Restaurant and Branch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import DefaultColors
from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .user import User
    from .menu import Menu
    from .order import Order


class Restaurant(AuditMixin, Base):
    """
    A restaurant brand: the tenant every other entity belongs to.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "restaurant"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    logo_url: Mapped[Optional[str]] = mapped_column(Text)
    primary_color: Mapped[str] = mapped_column(Text, default=DefaultColors.PRIMARY, nullable=False)
    secondary_color: Mapped[str] = mapped_column(Text, default=DefaultColors.SECONDARY, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    whatsapp: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    branches: Mapped[list["Branch"]] = relationship(back_populates="restaurant")
    users: Mapped[list["User"]] = relationship(back_populates="restaurant")
    menus: Mapped[list["Menu"]] = relationship(back_populates="restaurant")
    orders: Mapped[list["Order"]] = relationship(back_populates="restaurant")

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, name='{self.name}')>"


class Branch(AuditMixin, Base):
    """
    A physical location of a restaurant.
    Exactly one active branch per restaurant has is_main=True.
    """

    __tablename__ = "branch"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    whatsapp: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    is_main: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship(back_populates="branches")
    menus: Mapped[list["Menu"]] = relationship(back_populates="branch")

    __table_args__ = (
        Index("ix_branch_restaurant_main", "restaurant_id", "is_main"),
    )

    def __repr__(self) -> str:
        return f"<Branch(id={self.id}, name='{self.name}', restaurant_id={self.restaurant_id}, main={self.is_main})>"
