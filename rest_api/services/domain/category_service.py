"""
Category Service - Clean Architecture Implementation.

Categories belong to a menu; their branch_id is always the menu's branch.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Category
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.crud.cascade_delete import CascadeDeleteService
from rest_api.services.domain.menu_service import MenuService, category_with_items
from shared.utils.admin_schemas import CategoryOutput, CategoryWithItemsOutput


class CategoryService(BaseCRUDService[Category, CategoryOutput]):
    """Service for category management."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Category,
            output_schema=CategoryOutput,
            entity_name="Category",
        )

    def list_with_items(
        self,
        restaurant_id: int,
        menu_id: int | None = None,
    ) -> list[CategoryWithItemsOutput]:
        """Active categories (optionally of one menu) with their items, ordered."""
        filters = [Category.menu_id == menu_id] if menu_id is not None else None
        entities = self._repo.find_all(
            restaurant_id,
            filters=filters,
            options=[selectinload(Category.items)],
            order_by=[Category.menu_id, Category.order, Category.id],
        )
        return [category_with_items(e) for e in entities]

    def get_with_items(self, category_id: int, restaurant_id: int) -> CategoryWithItemsOutput:
        entity = self.get_entity(
            category_id,
            restaurant_id,
            options=[selectinload(Category.items)],
        )
        return category_with_items(entity)

    def next_order(self, menu_id: int) -> int:
        """Position after the last active category of the menu."""
        current_max = self._db.scalar(
            select(func.max(Category.order)).where(
                Category.menu_id == menu_id,
                Category.is_active.is_(True),
            )
        )
        return 0 if current_max is None else current_max + 1

    def delete(
        self,
        entity_id: int,
        restaurant_id: int,
        user_id: int | None,
        user_email: str | None,
    ) -> None:
        """Soft delete the category and its items."""
        entity = self.get_entity(
            entity_id,
            restaurant_id,
            options=[selectinload(Category.items)],
        )
        CascadeDeleteService(self._db).soft_delete_category(entity, user_id, user_email)

    def _validate_create(self, data: dict[str, Any], restaurant_id: int) -> None:
        # Raises NotFoundError when the menu is not in this restaurant
        menu = MenuService(self._db).get_entity(data["menu_id"], restaurant_id)
        data["branch_id"] = menu.branch_id
        if data.get("order") is None:
            data["order"] = self.next_order(menu.id)

    def _validate_update(self, entity: Category, data: dict[str, Any], restaurant_id: int) -> None:
        for required in ("name", "order"):
            if required in data and data[required] is None:
                data.pop(required)
