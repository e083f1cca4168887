"""
Order Service - Clean Architecture Implementation.

Totals are computed server side from current menu item prices; each order
line keeps a snapshot of the item name and unit price.

Status flow:
    pending -> confirmed -> preparing -> ready -> delivered
    pending | confirmed | preparing -> cancelled
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy.orm import Session, selectinload

from rest_api.models import Branch, Category, MenuItem, Order, OrderItem
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.crud.repository import TenantRepository
from rest_api.services.crud.soft_delete import set_created_by, set_updated_by
from shared.config.constants import (
    OrderStatus,
    get_allowed_order_transitions,
    validate_order_transition,
)
from shared.config.logging import mask_phone, orders_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.admin_schemas import OrderOutput
from shared.utils.exceptions import (
    DatabaseError,
    ForbiddenError,
    InvalidTransitionError,
    OrderNotFoundError,
    ValidationError,
)

ORDER_DETAIL_OPTIONS = [selectinload(Order.items)]


class OrderService(BaseCRUDService[Order, OrderOutput]):
    """Service for orders: placement, listing and the status state machine."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Order,
            output_schema=OrderOutput,
            entity_name="Order",
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_entity(
        self,
        entity_id: int,
        restaurant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> Order:
        entity = self._repo.find_by_id(
            entity_id,
            restaurant_id,
            options=options or ORDER_DETAIL_OPTIONS,
            include_inactive=include_inactive,
        )
        if entity is None:
            raise OrderNotFoundError(entity_id, restaurant_id=restaurant_id)
        return entity

    def list_orders(
        self,
        restaurant_id: int,
        *,
        status: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[OrderOutput]:
        """Orders newest first, optionally filtered by status."""
        filters = [Order.status == status] if status else None
        return self.list_all(
            restaurant_id,
            filters=filters,
            options=ORDER_DETAIL_OPTIONS,
            order_by=[Order.created_at.desc(), Order.id.desc()],
            limit=limit,
            offset=offset,
        )

    def count_orders(self, restaurant_id: int, *, status: str | None = None) -> int:
        return self.count(restaurant_id, filters=[Order.status == status] if status else None)

    def get_order(self, order_id: int, restaurant_id: int) -> OrderOutput:
        return self.to_output(self.get_entity(order_id, restaurant_id))

    # =========================================================================
    # Commands
    # =========================================================================

    def create_order(
        self,
        restaurant_id: int,
        *,
        customer_name: str,
        customer_phone: str,
        items: Sequence[dict[str, Any]],
        branch_id: int | None = None,
        notes: str | None = None,
        menu_id: int | None = None,
        published_only: bool = False,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> Order:
        """
        Price the requested items and store a pending order.

        Args:
            items: [{"menu_item_id", "quantity", "notes"?}, ...]
            menu_id: When given, every item must be on that menu.
            published_only: Reject items whose menu is not active (public orders).

        Raises:
            RestaurantNotFoundError: Unknown or deleted restaurant.
            ValidationError: Blank customer name, unknown, unavailable or
                off-menu items, or a branch outside the restaurant.
        """
        self.ensure_restaurant_active(restaurant_id)
        customer_name = customer_name.strip()
        if not customer_name:
            raise ValidationError("Customer name is required")
        if branch_id is not None:
            branch = TenantRepository(Branch, self._db).find_by_id(branch_id, restaurant_id)
            if branch is None:
                raise ValidationError(
                    "Branch does not belong to this restaurant",
                    branch_id=branch_id,
                )

        menu_items = self._load_menu_items(
            restaurant_id,
            [line["menu_item_id"] for line in items],
            published_only=published_only,
        )

        order = Order(
            restaurant_id=restaurant_id,
            branch_id=branch_id,
            customer_name=customer_name,
            customer_phone=customer_phone.strip(),
            status=OrderStatus.PENDING,
            notes=notes,
            total_cents=0,
        )
        set_created_by(order, user_id, user_email)

        total_cents = 0
        for line in items:
            menu_item = menu_items.get(line["menu_item_id"])
            if menu_item is None:
                raise ValidationError(
                    f"Menu item {line['menu_item_id']} not found",
                    menu_item_id=line["menu_item_id"],
                )
            if not menu_item.is_available:
                raise ValidationError(
                    f"Menu item '{menu_item.name}' is not available",
                    menu_item_id=menu_item.id,
                )
            if menu_id is not None and menu_item.category.menu_id != menu_id:
                raise ValidationError(
                    f"Menu item '{menu_item.name}' is not on this menu",
                    menu_item_id=menu_item.id,
                    menu_id=menu_id,
                )

            order_item = OrderItem(
                menu_item_id=menu_item.id,
                name=menu_item.name,
                quantity=line["quantity"],
                unit_price_cents=menu_item.price_cents,
                notes=line.get("notes"),
            )
            set_created_by(order_item, user_id, user_email)
            order.items.append(order_item)
            total_cents += order_item.line_total_cents

        order.total_cents = total_cents
        self._db.add(order)

        try:
            safe_commit(self._db)
            self._db.refresh(order)
        except Exception as e:
            logger.error("Failed to create order", error=str(e), restaurant_id=restaurant_id)
            raise DatabaseError("create order")

        logger.info(
            "Order created",
            order_id=order.id,
            restaurant_id=restaurant_id,
            items=len(order.items),
            total_cents=total_cents,
            customer_phone=mask_phone(order.customer_phone),
        )
        return order

    def update_status(
        self,
        order_id: int,
        restaurant_id: int,
        new_status: str,
        roles: list[str],
        user_id: int | None,
        user_email: str | None,
    ) -> OrderOutput:
        """
        Move an order along the state machine.

        Raises:
            InvalidTransitionError: Transition not allowed from the current status (400).
            ForbiddenError: Transition allowed, but not for the user's roles (403).
        """
        order = self.get_entity(order_id, restaurant_id)
        old_status = order.status

        if not validate_order_transition(old_status, new_status):
            raise InvalidTransitionError("order", old_status, new_status, order_id=order_id)

        if new_status not in get_allowed_order_transitions(old_status, roles):
            raise ForbiddenError(
                f"change order status from '{old_status}' to '{new_status}'",
                order_id=order_id,
                roles=roles,
            )

        order.status = new_status
        set_updated_by(order, user_id, user_email)

        try:
            safe_commit(self._db)
            self._db.refresh(order)
        except Exception as e:
            logger.error("Failed to update order status", error=str(e), order_id=order_id)
            raise DatabaseError("update order status")

        logger.info(
            "Order status changed",
            order_id=order_id,
            restaurant_id=restaurant_id,
            from_status=old_status,
            to_status=new_status,
            user_id=user_id,
        )
        return self.to_output(order)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _load_menu_items(
        self,
        restaurant_id: int,
        menu_item_ids: list[int],
        *,
        published_only: bool = False,
    ) -> dict[int, MenuItem]:
        """Active menu items of the restaurant whose category (and menu) is also active."""
        entities = TenantRepository(MenuItem, self._db).find_by_ids(
            list(set(menu_item_ids)),
            restaurant_id,
            options=[selectinload(MenuItem.category).selectinload(Category.menu)],
        )
        found = {}
        for item in entities:
            category = item.category
            if category is None or not category.is_active:
                continue
            if published_only and not category.menu.is_active:
                continue
            found[item.id] = item
        return found
