"""
Restaurant Service - tenant lifecycle and brand settings.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Restaurant
from rest_api.services.base_service import BaseService
from rest_api.services.crud.repository import BaseRepository
from rest_api.services.crud.soft_delete import soft_delete, set_created_by, set_updated_by
from rest_api.services.domain.branch_service import BranchService
from shared.config.constants import DefaultColors
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.admin_schemas import BrandColorsOutput, RestaurantOutput
from shared.utils.colors import resolve_brand_colors
from shared.utils.exceptions import DatabaseError, RestaurantNotFoundError, ValidationError
from shared.utils.validators import normalize_whatsapp_number, validate_image_url

logger = get_logger(__name__)

# Fields copied from RestaurantCreate onto the model
_RESTAURANT_FIELDS = (
    "name",
    "description",
    "logo_url",
    "primary_color",
    "secondary_color",
    "address",
    "phone",
    "whatsapp",
    "email",
)


def get_changed_fields(entity: Any, data: dict[str, Any]) -> list[str]:
    """Names of the fields in data whose value differs from the entity's."""
    return [
        name
        for name, value in data.items()
        if hasattr(entity, name) and getattr(entity, name) != value
    ]


class RestaurantService(BaseService[Restaurant]):
    """Service for restaurants (the tenants themselves)."""

    def __init__(self, db: Session):
        super().__init__(db, Restaurant)
        # Restaurants are not scoped by another tenant
        self._repo = BaseRepository(Restaurant, db)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_entity(self, restaurant_id: int, *, include_inactive: bool = False) -> Restaurant:
        restaurant = self._repo.find_by_id(restaurant_id, include_inactive=include_inactive)
        if restaurant is None:
            raise RestaurantNotFoundError(restaurant_id)
        return restaurant

    def get(self, restaurant_id: int, *, include_inactive: bool = False) -> RestaurantOutput:
        return RestaurantOutput.model_validate(
            self.get_entity(restaurant_id, include_inactive=include_inactive)
        )

    def list_all(self, *, include_inactive: bool = True) -> list[RestaurantOutput]:
        """All restaurants, newest first. Deleted ones are listed as inactive."""
        entities = self._repo.find_all(
            include_inactive=include_inactive,
            order_by=[Restaurant.created_at.desc(), Restaurant.id.desc()],
        )
        return [RestaurantOutput.model_validate(e) for e in entities]

    def get_brand_colors(self, restaurant_id: int) -> BrandColorsOutput:
        restaurant = self.get_entity(restaurant_id)
        return BrandColorsOutput(
            **resolve_brand_colors(restaurant.primary_color, restaurant.secondary_color)
        )

    # =========================================================================
    # Commands
    # =========================================================================

    def build_restaurant(
        self,
        data: dict[str, Any],
        user_id: int | None,
        user_email: str | None,
    ) -> Restaurant:
        """
        Validate data and add a new Restaurant to the session (not committed).
        Used by create() and by the registration flow.
        """
        values = {name: data.get(name) for name in _RESTAURANT_FIELDS}
        values["primary_color"] = values["primary_color"] or DefaultColors.PRIMARY
        values["secondary_color"] = values["secondary_color"] or DefaultColors.SECONDARY
        values["whatsapp"] = normalize_whatsapp_number(values["whatsapp"])
        values["logo_url"] = self._checked_logo_url(values["logo_url"])

        restaurant = Restaurant(**values)
        set_created_by(restaurant, user_id, user_email)
        self._db.add(restaurant)
        return restaurant

    def create(
        self,
        data: dict[str, Any],
        user_id: int | None,
        user_email: str | None,
    ) -> RestaurantOutput:
        """Create a restaurant together with its main branch."""
        restaurant = self.build_restaurant(data, user_id, user_email)

        try:
            self._db.flush()
            BranchService(self._db).create_main_branch(
                restaurant.id,
                data.get("main_branch_name") or restaurant.name,
                data["address"],
                user_id,
                user_email,
                phone=restaurant.phone,
                whatsapp=restaurant.whatsapp,
                email=restaurant.email,
            )
            safe_commit(self._db)
            self._db.refresh(restaurant)
        except Exception as e:
            self._db.rollback()
            logger.error("Failed to create restaurant", error=str(e))
            raise DatabaseError("create restaurant")

        logger.info("Restaurant created", restaurant_id=restaurant.id, user_id=user_id)
        return RestaurantOutput.model_validate(restaurant)

    def update(
        self,
        restaurant_id: int,
        data: dict[str, Any],
        user_id: int | None,
        user_email: str | None,
    ) -> tuple[RestaurantOutput, list[str]]:
        """
        Apply a partial update.

        Returns:
            The updated restaurant and the names of the fields that changed.
        """
        restaurant = self.get_entity(restaurant_id)

        if "whatsapp" in data:
            data["whatsapp"] = normalize_whatsapp_number(data["whatsapp"])
        if "logo_url" in data:
            data["logo_url"] = self._checked_logo_url(data["logo_url"])
        for color_field in ("primary_color", "secondary_color"):
            if color_field in data and data[color_field] is None:
                # Clearing a color falls back to the default
                data[color_field] = getattr(DefaultColors, color_field.split("_")[0].upper())
        if data.get("name") is None:
            data.pop("name", None)

        changed = get_changed_fields(restaurant, data)
        if not changed:
            return RestaurantOutput.model_validate(restaurant), []

        for name in changed:
            setattr(restaurant, name, data[name])
        set_updated_by(restaurant, user_id, user_email)

        try:
            safe_commit(self._db)
            self._db.refresh(restaurant)
        except Exception as e:
            logger.error("Failed to update restaurant", error=str(e), restaurant_id=restaurant_id)
            raise DatabaseError("update restaurant")

        logger.info(
            "Restaurant updated",
            restaurant_id=restaurant_id,
            changed_fields=changed,
            user_id=user_id,
        )
        return RestaurantOutput.model_validate(restaurant), changed

    def delete(self, restaurant_id: int, user_id: int | None, user_email: str | None) -> None:
        restaurant = self.get_entity(restaurant_id)
        soft_delete(self._db, restaurant, user_id, user_email)
        logger.info("Restaurant deleted", restaurant_id=restaurant_id, user_id=user_id)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    @staticmethod
    def _checked_logo_url(url: str | None) -> str | None:
        try:
            return validate_image_url(url)
        except ValueError as e:
            raise ValidationError(str(e), field="logo_url")
