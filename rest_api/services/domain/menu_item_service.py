"""
Menu Item Service - Clean Architecture Implementation.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import Category, MenuItem
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.crud.soft_delete import set_updated_by
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.utils.admin_schemas import MenuItemOutput
from shared.utils.exceptions import DatabaseError, NotFoundError, ValidationError
from shared.utils.media import check_image, delete_stored_image, store_image
from shared.utils.validators import is_uploaded_media_path

logger = get_logger(__name__)

MENU_ITEM_MEDIA_FOLDER = "menu-items"


class MenuItemService(BaseCRUDService[MenuItem, MenuItemOutput]):
    """
    Service for menu items.

    Image URLs are validated against internal hosts. Uploaded photos are
    stored per restaurant and deleted when no item refers to them.
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=MenuItem,
            output_schema=MenuItemOutput,
            entity_name="Menu item",
            image_url_fields={"image_url"},
        )

    def list_by_category(self, category_id: int, restaurant_id: int) -> list[MenuItemOutput]:
        return self.list_all(
            restaurant_id,
            filters=[MenuItem.category_id == category_id],
            order_by=[MenuItem.order, MenuItem.id],
        )

    def next_order(self, category_id: int) -> int:
        """Position after the last active item of the category."""
        current_max = self._db.scalar(
            select(func.max(MenuItem.order)).where(
                MenuItem.category_id == category_id,
                MenuItem.is_active.is_(True),
            )
        )
        return 0 if current_max is None else current_max + 1

    def _validate_create(self, data: dict[str, Any], restaurant_id: int) -> None:
        category = self._db.scalar(
            select(Category).where(
                Category.id == data["category_id"],
                Category.restaurant_id == restaurant_id,
                Category.is_active.is_(True),
            )
        )
        if category is None:
            raise NotFoundError("Category", data["category_id"], restaurant_id=restaurant_id)
        if data.get("order") is None:
            data["order"] = self.next_order(category.id)
        self._check_media_owner(data, restaurant_id)

    def _validate_update(self, entity: MenuItem, data: dict[str, Any], restaurant_id: int) -> None:
        for required in ("name", "price_cents", "is_available", "is_featured", "order"):
            if required in data and data[required] is None:
                data.pop(required)
        self._check_media_owner(data, restaurant_id)

    def _check_media_owner(self, data: dict[str, Any], restaurant_id: int) -> None:
        """Uploaded images can only be reused inside their own restaurant."""
        url = (data.get("image_url") or "").strip()
        own_prefix = f"{settings.media_url_path.rstrip('/')}/{restaurant_id}/"
        if is_uploaded_media_path(url) and not url.startswith(own_prefix):
            raise ValidationError("Image belongs to another restaurant", field="image_url")

    def _after_update(
        self,
        entity: MenuItem,
        old_values: dict[str, Any],
        user_id: int | None,
        user_email: str | None,
    ) -> None:
        old_url = old_values.get("image_url")
        if "image_url" in old_values and old_url != entity.image_url:
            self._discard_image(old_url)

    def _discard_image(self, url: str | None) -> None:
        """Delete an uploaded file once no item points at it."""
        if not url:
            return
        in_use = self._db.scalar(
            select(func.count()).select_from(MenuItem).where(MenuItem.image_url == url)
        )
        if not in_use:
            delete_stored_image(url)

    def upload_image(
        self,
        item_id: int,
        restaurant_id: int,
        data: bytes,
        content_type: str | None,
        user_id: int | None,
        user_email: str | None,
    ) -> MenuItemOutput:
        """
        Store an uploaded photo and make it the item's image.

        The previous upload is removed once the new URL is saved and no
        other item uses it.

        Raises:
            NotFoundError: If the item doesn't exist in this restaurant.
            ValidationError: Wrong type, empty, over 5 MB or not an image.
            DatabaseError: If saving the new URL fails.
        """
        item = self.get_entity(item_id, restaurant_id)
        extension = check_image(data, content_type)
        url = store_image(data, restaurant_id, MENU_ITEM_MEDIA_FOLDER, extension)

        old_url = item.image_url
        item.image_url = url
        set_updated_by(item, user_id, user_email)
        try:
            safe_commit(self._db)
            self._db.refresh(item)
        except Exception as e:
            delete_stored_image(url)
            logger.error("Failed to save menu item image", error=str(e), item_id=item_id)
            raise DatabaseError("update menu item image")

        self._discard_image(old_url)
        logger.info("Menu item image uploaded", item_id=item_id, restaurant_id=restaurant_id)
        return self.to_output(item)
