"""
Menu Service - Clean Architecture Implementation.

A menu's is_active flag is a publish switch the admin toggles; deletion is
tracked by deleted_at, so inactive menus stay visible in the admin panel.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy.orm import Session, selectinload

from rest_api.models import Branch, Category, Menu
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.crud.cascade_delete import CascadeDeleteService
from rest_api.services.crud.repository import BranchRepository, TenantRepository
from shared.utils.admin_schemas import (
    BranchSummary,
    CategoryOutput,
    CategoryWithItemsOutput,
    MenuDetailOutput,
    MenuItemOutput,
    MenuOutput,
)
from shared.utils.exceptions import NotFoundError, ValidationError
from shared.utils.qr import public_menu_url, qr_filename, render_qr_png

# Eager loading for menu detail responses
MENU_DETAIL_OPTIONS = [
    selectinload(Menu.branch),
    selectinload(Menu.categories).selectinload(Category.items),
]


def category_with_items(
    category: Category,
    *,
    available_only: bool = False,
) -> CategoryWithItemsOutput:
    """
    Category output with its active items in display order.

    Args:
        available_only: Also hide items marked unavailable (public menu).
    """
    items = [
        MenuItemOutput.model_validate(item)
        for item in category.items
        if item.is_active and (item.is_available or not available_only)
    ]
    return CategoryWithItemsOutput(
        **CategoryOutput.model_validate(category).model_dump(),
        items=items,
    )


class MenuService(BaseCRUDService[Menu, MenuOutput]):
    """Service for menu management."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Menu,
            output_schema=MenuOutput,
            entity_name="Menu",
            has_branch_id=True,
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
        include_inactive: bool = True,
    ) -> Menu:
        """Menu by ID, published or not. Deleted menus are not found."""
        entity = self._repo.find_by_id(
            entity_id,
            restaurant_id,
            options=options,
            include_inactive=include_inactive,
        )
        if entity is None or entity.deleted_at is not None:
            raise NotFoundError(self._entity_name, entity_id, restaurant_id=restaurant_id)
        return entity

    def list_detailed(
        self,
        restaurant_id: int,
        branch_id: int | None = None,
    ) -> list[MenuDetailOutput]:
        """All non-deleted menus, newest first, with branch and categories."""
        filters = [Menu.deleted_at.is_(None)]
        if branch_id is not None:
            filters.append(Menu.branch_id == branch_id)
        entities = self._repo.find_all(
            restaurant_id,
            filters=filters,
            options=MENU_DETAIL_OPTIONS,
            include_inactive=True,
            order_by=[Menu.created_at.desc(), Menu.id.desc()],
        )
        return [self.to_detail(e) for e in entities]

    def get_detail(self, menu_id: int, restaurant_id: int) -> MenuDetailOutput:
        return self.to_detail(
            self.get_entity(menu_id, restaurant_id, options=MENU_DETAIL_OPTIONS)
        )

    def find_published(
        self,
        restaurant_id: int,
        branch_id: int | None = None,
    ) -> Sequence[Menu]:
        """Active menus for the public page, newest first."""
        repo: BranchRepository = self._repo
        order_by = [Menu.created_at.desc(), Menu.id.desc()]
        if branch_id is not None:
            return repo.find_by_branch(
                branch_id,
                restaurant_id,
                options=MENU_DETAIL_OPTIONS,
                order_by=order_by,
            )
        return repo.find_all(
            restaurant_id,
            options=MENU_DETAIL_OPTIONS,
            order_by=order_by,
        )

    def qr_code(
        self,
        menu_id: int,
        restaurant_id: int,
        *,
        box_size: int = 10,
    ) -> tuple[bytes, str]:
        """
        PNG QR code of the menu's public page and a download filename.

        Unpublished menus get a code too, so it can be printed before launch.
        """
        menu = self.get_entity(menu_id, restaurant_id, options=[selectinload(Menu.branch)])
        png = render_qr_png(public_menu_url(restaurant_id, menu.id), box_size=box_size)
        branch_name = menu.branch.name if menu.branch else ""
        return png, qr_filename(menu.name, branch_name)

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_detail(self, menu: Menu) -> MenuDetailOutput:
        categories = [category_with_items(c) for c in menu.categories if c.is_active]
        branch = BranchSummary.model_validate(menu.branch) if menu.branch else None
        return MenuDetailOutput(
            **MenuOutput.model_validate(menu).model_dump(),
            branch=branch,
            categories=categories,
        )

    # =========================================================================
    # Hooks
    # =========================================================================

    def delete(
        self,
        entity_id: int,
        restaurant_id: int,
        user_id: int | None,
        user_email: str | None,
    ) -> None:
        """Soft delete the menu with its categories, items and theme."""
        entity = self.get_entity(entity_id, restaurant_id, options=MENU_DETAIL_OPTIONS)
        CascadeDeleteService(self._db).soft_delete_menu(entity, user_id, user_email)

    def _validate_create(self, data: dict[str, Any], restaurant_id: int) -> None:
        self._check_branch(data["branch_id"], restaurant_id)

    def _validate_update(self, entity: Menu, data: dict[str, Any], restaurant_id: int) -> None:
        for required in ("name", "branch_id", "is_active"):
            if required in data and data[required] is None:
                data.pop(required)
        if "branch_id" in data and data["branch_id"] != entity.branch_id:
            self._check_branch(data["branch_id"], restaurant_id)
            # Categories follow the menu to the new branch
            for category in entity.categories:
                category.branch_id = data["branch_id"]

    def _check_branch(self, branch_id: int, restaurant_id: int) -> None:
        if TenantRepository(Branch, self._db).find_by_id(branch_id, restaurant_id) is None:
            raise ValidationError(
                "Branch does not belong to this restaurant",
                branch_id=branch_id,
                restaurant_id=restaurant_id,
            )
