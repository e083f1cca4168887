"""
Billing Models: Plan, WebpayTransaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, BigInteger, Boolean, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import TransactionStatus
from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .restaurant import Restaurant


class Plan(AuditMixin, Base):
    """
    A subscription plan offered at sign-up. Price is in CLP (no decimals).
    """

    __tablename__ = "plan"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    features: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    is_popular: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Plan(id={self.id}, name='{self.name}', price={self.price})>"


class WebpayTransaction(AuditMixin, Base):
    """
    A simulated Webpay payment for a plan.

    Lifecycle: pending -> completed | failed. A completed transaction is
    consumed by registration, which stores the new restaurant_id on it.
    """

    __tablename__ = "webpay_transaction"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    user_email: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    plan_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("plan.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        Text, default=TransactionStatus.PENDING, nullable=False, index=True
    )
    webpay_token: Mapped[Optional[str]] = mapped_column(Text, unique=True, index=True)
    webpay_session_id: Mapped[Optional[str]] = mapped_column(Text)
    restaurant_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=True
    )

    plan: Mapped["Plan"] = relationship()
    restaurant: Mapped[Optional["Restaurant"]] = relationship()

    @property
    def is_consumed(self) -> bool:
        return self.restaurant_id is not None

    def __repr__(self) -> str:
        return f"<WebpayTransaction(id={self.id}, status='{self.status}', plan_id={self.plan_id})>"
