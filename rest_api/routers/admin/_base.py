"""
Shared dependencies and helpers for admin routers.

Access rules:
- root_admin: every restaurant.
- restaurant_admin: only their own restaurant.
- kitchen: read orders and move them through kitchen states, own restaurant only.

Routes addressed by restaurant ID answer 403 for a foreign restaurant.
Routes addressed by entity ID answer 404 for an entity of a foreign
restaurant, so IDs of other tenants are not disclosed.
"""

from typing import Any, Protocol

from fastapi import Depends

from rest_api.routers._common.base import current_user_context as current_user
from shared.config.constants import ADMIN_ROLES, ORDER_READ_ROLES, Roles
from shared.utils.exceptions import InsufficientRoleError, NotFoundError, RestaurantAccessError


class OwnedEntityService(Protocol):
    entity_name: str

    def get_owner_restaurant_id(self, entity_id: int) -> int: ...


# =============================================================================
# Role-based Dependencies
# =============================================================================


def _require(user: dict[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
    if not set(user.get("roles", [])) & allowed:
        raise InsufficientRoleError(sorted(allowed), user_id=user.get("sub"))
    return user


def require_admin(user: dict = Depends(current_user)) -> dict:
    """Dependency that requires root_admin or restaurant_admin."""
    return _require(user, ADMIN_ROLES)


def require_root_admin(user: dict = Depends(current_user)) -> dict:
    """Dependency that requires root_admin."""
    return _require(user, frozenset({Roles.ROOT_ADMIN}))


def require_order_reader(user: dict = Depends(current_user)) -> dict:
    """Dependency for order endpoints: admins and kitchen staff."""
    return _require(user, ORDER_READ_ROLES)


# =============================================================================
# Restaurant scoping
# =============================================================================


def is_root_admin(user: dict) -> bool:
    return Roles.ROOT_ADMIN in user.get("roles", [])


def ensure_restaurant_access(user: dict, restaurant_id: int) -> int:
    """
    Validate that the user may act on the restaurant in the path.

    Raises:
        RestaurantAccessError: 403 for a restaurant other than the user's own.
    """
    if not is_root_admin(user) and user.get("restaurant_id") != restaurant_id:
        raise RestaurantAccessError(restaurant_id, user_id=user.get("sub"))
    return restaurant_id


def owner_restaurant_id(service: OwnedEntityService, entity_id: int, user: dict) -> int:
    """
    Restaurant that owns the entity, checked against the user.

    Raises:
        NotFoundError: Unknown/deleted entity, or one of another restaurant.
    """
    restaurant_id = service.get_owner_restaurant_id(entity_id)
    if not is_root_admin(user) and user.get("restaurant_id") != restaurant_id:
        raise NotFoundError(service.entity_name, entity_id, user_id=user.get("sub"))
    return restaurant_id
