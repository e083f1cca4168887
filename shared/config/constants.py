"""
Centralized constants for the backend application.

Usage:
    from shared.config.constants import Roles, OrderStatus, ADMIN_ROLES

    if role in ADMIN_ROLES:
        ...

    if order.status == OrderStatus.PENDING:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """User role constants."""

    ROOT_ADMIN: Final[str] = "root_admin"
    RESTAURANT_ADMIN: Final[str] = "restaurant_admin"
    KITCHEN: Final[str] = "kitchen"

    ALL: Final[list[str]] = [ROOT_ADMIN, RESTAURANT_ADMIN, KITCHEN]


# Role groups for common access patterns
ADMIN_ROLES: Final[frozenset[str]] = frozenset({Roles.ROOT_ADMIN, Roles.RESTAURANT_ADMIN})
ORDER_READ_ROLES: Final[frozenset[str]] = frozenset(
    {Roles.ROOT_ADMIN, Roles.RESTAURANT_ADMIN, Roles.KITCHEN}
)
# Roles that must be attached to a restaurant
RESTAURANT_SCOPED_ROLES: Final[frozenset[str]] = frozenset({Roles.RESTAURANT_ADMIN, Roles.KITCHEN})


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """Order status constants."""

    PENDING: Final[str] = "pending"
    CONFIRMED: Final[str] = "confirmed"
    PREPARING: Final[str] = "preparing"
    READY: Final[str] = "ready"
    DELIVERED: Final[str] = "delivered"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [PENDING, CONFIRMED, PREPARING, READY, DELIVERED, CANCELLED]
    ACTIVE: Final[list[str]] = [PENDING, CONFIRMED, PREPARING, READY]
    COMPLETED: Final[list[str]] = [DELIVERED, CANCELLED]


class TransactionStatus:
    """Webpay transaction status constants."""

    PENDING: Final[str] = "pending"
    COMPLETED: Final[str] = "completed"
    FAILED: Final[str] = "failed"

    ALL: Final[list[str]] = [PENDING, COMPLETED, FAILED]


class ThemeOptions:
    """Allowed values for menu theme layout settings."""

    HEADER_STYLES: Final[tuple[str, ...]] = ("default", "minimal", "fullwidth")
    FOOTER_STYLES: Final[tuple[str, ...]] = ("default", "minimal", "detailed")
    ITEM_LAYOUTS: Final[tuple[str, ...]] = ("grid", "list", "compact")

    HEADER_DEFAULT: Final[str] = "default"
    FOOTER_DEFAULT: Final[str] = "default"
    LAYOUT_DEFAULT: Final[str] = "grid"


class DefaultColors:
    """Brand colors used when a restaurant or menu has none configured."""

    PRIMARY: Final[str] = "#4f46e5"
    SECONDARY: Final[str] = "#f9fafb"
    FONT_FAMILY: Final[str] = "Inter, sans-serif"


# =============================================================================
# Status Transitions
# =============================================================================

# Valid order status transitions (from -> [allowed to states])
# Flow: pending → confirmed → preparing → ready → delivered
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.PENDING: [OrderStatus.CONFIRMED, OrderStatus.CANCELLED],
    OrderStatus.CONFIRMED: [OrderStatus.PREPARING, OrderStatus.CANCELLED],
    OrderStatus.PREPARING: [OrderStatus.READY, OrderStatus.CANCELLED],
    OrderStatus.READY: [OrderStatus.DELIVERED],
    OrderStatus.DELIVERED: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}

# Role-based transition restrictions
# Format: (from_status, to_status) -> [allowed_roles]; missing keys mean ADMIN_ROLES
ORDER_TRANSITION_ROLES: Final[dict[tuple[str, str], frozenset[str]]] = {
    (OrderStatus.CONFIRMED, OrderStatus.PREPARING): ORDER_READ_ROLES,
    (OrderStatus.PREPARING, OrderStatus.READY): ORDER_READ_ROLES,
}


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    # Price limits (in cents)
    MIN_PRICE_CENTS: Final[int] = 0
    MAX_PRICE_CENTS: Final[int] = 100_000_00  # $100,000

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_URL_LENGTH: Final[int] = 2048
    MAX_NOTES_LENGTH: Final[int] = 500
    MAX_ORDER_ITEMS: Final[int] = 50

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 200

    # Uploaded images
    MAX_UPLOAD_BYTES: Final[int] = 5 * 1024 * 1024

    # QR codes (pixels per module)
    MIN_QR_BOX_SIZE: Final[int] = 4
    MAX_QR_BOX_SIZE: Final[int] = 20


HEX_COLOR_PATTERN: Final[str] = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"

# Accepted image uploads and the extension they are stored with
IMAGE_CONTENT_TYPES: Final[dict[str, str]] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


# =============================================================================
# Status Validation Functions
# =============================================================================


def validate_order_transition(current_status: str, new_status: str) -> bool:
    """
    Validate that an order status transition is allowed.

    Returns True if transition is valid, False otherwise.
    """
    allowed = ORDER_TRANSITIONS.get(current_status, [])
    return new_status in allowed


def get_allowed_order_transitions(current_status: str, roles: list[str]) -> list[str]:
    """
    Get allowed order transitions for a given status and user roles.

    Returns list of status values the user can transition to.
    """
    allowed_by_status = ORDER_TRANSITIONS.get(current_status, [])
    result = []

    for new_status in allowed_by_status:
        key = (current_status, new_status)
        allowed_roles = ORDER_TRANSITION_ROLES.get(key, ADMIN_ROLES)
        if any(role in allowed_roles for role in roles):
            result.append(new_status)

    return result
