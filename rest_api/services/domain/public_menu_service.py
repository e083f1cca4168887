"""
Public Menu Service - the customer-facing page of a restaurant.

Customers browse published menus and send their order to the restaurant
through a WhatsApp click-to-chat link. The order is also stored as pending
so the staff can track it in the admin panel.
"""

from __future__ import annotations

from typing import Any, Iterable
from urllib.parse import quote

from sqlalchemy.orm import Session

from rest_api.models import Order, Restaurant
from rest_api.services.domain.branch_service import BranchService
from rest_api.services.domain.menu_service import MENU_DETAIL_OPTIONS, MenuService, category_with_items
from rest_api.services.domain.order_service import OrderService
from rest_api.services.domain.restaurant_service import RestaurantService
from rest_api.services.domain.theme_service import theme_for_menu
from shared.config.logging import public_logger as logger
from shared.config.settings import settings
from shared.utils.admin_schemas import (
    BranchSummary,
    OrderOutput,
    PublicMenuOutput,
    PublicOrderResponse,
    PublicRestaurantOutput,
)
from shared.utils.colors import resolve_brand_colors
from shared.utils.exceptions import ValidationError
from shared.utils.validators import normalize_whatsapp_number


# =============================================================================
# WhatsApp message helpers
# =============================================================================


def format_cents(cents: int) -> str:
    """1250 -> "12.50" (integer math, no float rounding)."""
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{sign}{cents // 100}.{cents % 100:02d}"


def build_whatsapp_message(
    restaurant_name: str,
    lines: Iterable[tuple[int, str, int]],
    total_cents: int,
) -> str:
    """
    Order summary text sent to the restaurant.

    Args:
        lines: (quantity, item name, line total in cents) per order line.

    Example:
        *New Order from Pizzeria*

        2x Margherita - $20.00
        1x Soda - $2.50

        *Total: $22.50*
    """
    body = "\n".join(
        f"{quantity}x {name} - ${format_cents(line_total)}"
        for quantity, name, line_total in lines
    )
    return (
        f"*New Order from {restaurant_name}*\n\n"
        f"{body}\n\n"
        f"*Total: ${format_cents(total_cents)}*"
    )


def build_whatsapp_url(phone: str | None, message: str) -> str | None:
    """wa.me click-to-chat link, or None when there is no usable number."""
    digits = normalize_whatsapp_number(phone)
    if not digits:
        return None
    base = settings.whatsapp_base_url.rstrip("/")
    return f"{base}/{digits}?text={quote(message, safe='')}"


def whatsapp_message_for_order(restaurant_name: str, order: Order) -> str:
    return build_whatsapp_message(
        restaurant_name,
        ((item.quantity, item.name, item.line_total_cents) for item in order.items),
        order.total_cents,
    )


# =============================================================================
# Service
# =============================================================================


class PublicMenuService:
    """Read-only menu access and order placement for anonymous customers."""

    def __init__(self, db: Session):
        self._db = db
        self._restaurants = RestaurantService(db)
        self._menus = MenuService(db)

    def _active_restaurant(self, restaurant_id: int) -> Restaurant:
        # Inactive (deleted) restaurants are not found
        return self._restaurants.get_entity(restaurant_id)

    def get_restaurant(self, restaurant_id: int) -> PublicRestaurantOutput:
        restaurant = self._active_restaurant(restaurant_id)
        colors = resolve_brand_colors(restaurant.primary_color, restaurant.secondary_color)
        return PublicRestaurantOutput(
            id=restaurant.id,
            name=restaurant.name,
            description=restaurant.description,
            logo_url=restaurant.logo_url,
            whatsapp=restaurant.whatsapp,
            address=restaurant.address,
            phone=restaurant.phone,
            **colors,
        )

    def list_menus(
        self,
        restaurant_id: int,
        branch_id: int | None = None,
    ) -> list[PublicMenuOutput]:
        """Published menus with active categories and available items only."""
        self._active_restaurant(restaurant_id)
        menus = self._menus.find_published(restaurant_id, branch_id)
        return [
            PublicMenuOutput(
                id=menu.id,
                name=menu.name,
                description=menu.description,
                branch=BranchSummary.model_validate(menu.branch) if menu.branch else None,
                theme=theme_for_menu(menu),
                categories=[
                    category_with_items(category, available_only=True)
                    for category in menu.categories
                    if category.is_active
                ],
            )
            for menu in menus
        ]

    def place_order(self, restaurant_id: int, data: dict[str, Any]) -> PublicOrderResponse:
        """
        Store a pending order and build the WhatsApp link for it.

        Raises:
            NotFoundError: Unknown or inactive restaurant or menu.
            ValidationError: Ordering disabled on the menu, or invalid items.
        """
        restaurant = self._active_restaurant(restaurant_id)

        menu_id = data.get("menu_id")
        branch = None
        if menu_id is not None:
            menu = self._menus.get_entity(
                menu_id,
                restaurant_id,
                options=MENU_DETAIL_OPTIONS,
                include_inactive=False,
            )
            if not theme_for_menu(menu).enable_ordering:
                raise ValidationError("Ordering is disabled for this menu", menu_id=menu_id)
            branch = menu.branch
        else:
            branch = BranchService(self._db).get_main_branch(restaurant_id)

        if branch is not None and not branch.is_active:
            branch = None

        order = OrderService(self._db).create_order(
            restaurant_id,
            customer_name=data["customer_name"],
            customer_phone=data["customer_phone"],
            items=data["items"],
            branch_id=branch.id if branch is not None else None,
            notes=data.get("notes"),
            menu_id=menu_id,
            published_only=True,
        )

        # Active branch number first, restaurant number as fallback
        phone = (branch.whatsapp if branch is not None else None) or restaurant.whatsapp
        whatsapp_url = build_whatsapp_url(
            phone, whatsapp_message_for_order(restaurant.name, order)
        )
        if whatsapp_url is None:
            logger.warning("Restaurant has no WhatsApp number", restaurant_id=restaurant_id)

        logger.info(
            "Public order placed",
            order_id=order.id,
            restaurant_id=restaurant_id,
            menu_id=menu_id,
        )
        return PublicOrderResponse(
            order=OrderOutput.model_validate(order),
            whatsapp_url=whatsapp_url,
        )
