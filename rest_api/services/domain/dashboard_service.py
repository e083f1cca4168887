"""
Dashboard Service - aggregate figures for the admin panel.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import Branch, Menu, Order, Restaurant, User
from shared.config.constants import OrderStatus
from shared.utils.admin_schemas import AdminOverview, OrderSummary, RestaurantDashboard

RECENT_ORDERS_LIMIT = 5


class DashboardService:
    def __init__(self, db: Session):
        self._db = db

    def _revenue(self, *filters) -> int:
        """Sum of order totals, cancelled orders excluded."""
        total = self._db.scalar(
            select(func.coalesce(func.sum(Order.total_cents), 0)).where(
                Order.is_active.is_(True),
                Order.status != OrderStatus.CANCELLED,
                *filters,
            )
        )
        return int(total or 0)

    def restaurant_dashboard(self, restaurant_id: int) -> RestaurantDashboard:
        order_scope = (Order.restaurant_id == restaurant_id, Order.is_active.is_(True))

        total_orders = self._db.scalar(select(func.count(Order.id)).where(*order_scope))
        pending_orders = self._db.scalar(
            select(func.count(Order.id)).where(*order_scope, Order.status == OrderStatus.PENDING)
        )
        distinct_customers = self._db.scalar(
            select(func.count(func.distinct(Order.customer_phone))).where(*order_scope)
        )
        menus = self._db.scalar(
            select(func.count(Menu.id)).where(
                Menu.restaurant_id == restaurant_id,
                Menu.deleted_at.is_(None),
            )
        )
        branches = self._db.scalar(
            select(func.count(Branch.id)).where(
                Branch.restaurant_id == restaurant_id,
                Branch.is_active.is_(True),
            )
        )
        recent = self._db.scalars(
            select(Order)
            .where(*order_scope)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(RECENT_ORDERS_LIMIT)
        ).all()

        return RestaurantDashboard(
            restaurant_id=restaurant_id,
            total_orders=total_orders or 0,
            revenue_cents=self._revenue(Order.restaurant_id == restaurant_id),
            distinct_customers=distinct_customers or 0,
            pending_orders=pending_orders or 0,
            menus=menus or 0,
            branches=branches or 0,
            recent_orders=[OrderSummary.model_validate(o) for o in recent],
        )

    def admin_overview(self) -> AdminOverview:
        """Platform-wide figures for root admins."""
        return AdminOverview(
            restaurants=self._db.scalar(select(func.count(Restaurant.id))) or 0,
            active_restaurants=self._db.scalar(
                select(func.count(Restaurant.id)).where(Restaurant.is_active.is_(True))
            ) or 0,
            users=self._db.scalar(
                select(func.count(User.id)).where(User.deleted_at.is_(None))
            ) or 0,
            orders=self._db.scalar(
                select(func.count(Order.id)).where(Order.is_active.is_(True))
            ) or 0,
            revenue_cents=self._revenue(),
        )
