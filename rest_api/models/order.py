"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderStatus
from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .restaurant import Restaurant
    from .menu import MenuItem


class Order(AuditMixin, Base):
    """
    A customer purchase, placed from the public menu or by staff.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.

    Status flow: pending -> confirmed -> preparing -> ready -> delivered,
    or cancelled from any state before ready.
    """

    __tablename__ = "customer_order"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    branch_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("branch.id"), nullable=True, index=True
    )
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_phone: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, default=OrderStatus.PENDING, nullable=False, index=True
    )
    total_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship(back_populates="orders")
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order", order_by="OrderItem.id"
    )

    __table_args__ = (
        CheckConstraint("total_cents >= 0", name="chk_order_total_non_negative"),
        Index("ix_order_restaurant_status", "restaurant_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, restaurant_id={self.restaurant_id}, status='{self.status}')>"


class OrderItem(AuditMixin, Base):
    """
    One line of an order. Name and unit price are copied from the menu item
    when the order is placed so later edits to the menu don't change history.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("customer_order.id"), nullable=False, index=True
    )
    menu_item_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("menu_item.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")
    menu_item: Mapped[Optional["MenuItem"]] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_quantity_positive"),
        CheckConstraint("unit_price_cents >= 0", name="chk_order_item_price_non_negative"),
    )

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.unit_price_cents

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, order_id={self.order_id}, qty={self.quantity})>"
