"""
Cascade Delete Service with Audit Trail.

Instead of relying on ORM cascade="all, delete-orphan" which hard-deletes
related records, this service soft-deletes the entire tree, preserving
the audit trail. Orders keep pointing at soft-deleted menu items, so their
history stays readable.

Usage:
    from rest_api.services.crud.cascade_delete import CascadeDeleteService

    service = CascadeDeleteService(db)
    affected = service.soft_delete_menu(menu, user_id, user_email)
    # Returns count of affected records (menu + categories + items + theme)

    service.soft_delete_branch(branch, user_id, user_email)
    # The branch and every menu tree served there
"""

from typing import Any

from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from .soft_delete import soft_delete

logger = get_logger(__name__)


class CascadeDeleteService:
    """
    Service for cascading soft deletes with audit trail preservation.

    When a parent entity is soft-deleted, all related child entities are
    soft-deleted too, and everything is committed once.
    """

    def __init__(self, db: Session):
        self._db = db

    def _delete_category_tree(
        self,
        category: Any,
        user_id: int | None,
        user_email: str | None,
    ) -> int:
        affected = 0
        for item in category.items:
            if item.is_active:
                soft_delete(self._db, item, user_id, user_email, commit=False)
                affected += 1
        if category.is_active:
            soft_delete(self._db, category, user_id, user_email, commit=False)
            affected += 1
        return affected

    def soft_delete_category(
        self,
        category: Any,
        user_id: int | None,
        user_email: str | None,
    ) -> int:
        """
        Soft delete a category with its menu items.

        Returns:
            Count of affected records
        """
        affected = self._delete_category_tree(category, user_id, user_email)
        safe_commit(self._db)

        logger.info(
            "Category cascade soft deleted",
            category_id=category.id,
            affected_records=affected,
            user_id=user_id,
        )
        return affected

    def _delete_menu_tree(
        self,
        menu: Any,
        user_id: int | None,
        user_email: str | None,
    ) -> int:
        affected = 0
        for category in menu.categories:
            affected += self._delete_category_tree(category, user_id, user_email)

        theme = menu.theme
        if theme is not None and theme.is_active:
            soft_delete(self._db, theme, user_id, user_email, commit=False)
            affected += 1

        soft_delete(self._db, menu, user_id, user_email, commit=False)
        return affected + 1

    def soft_delete_menu(
        self,
        menu: Any,
        user_id: int | None,
        user_email: str | None,
    ) -> int:
        """
        Soft delete a menu with its categories, their items and the theme.

        Returns:
            Count of affected records
        """
        affected = self._delete_menu_tree(menu, user_id, user_email)
        safe_commit(self._db)

        logger.info(
            "Menu cascade soft deleted",
            menu_id=menu.id,
            affected_records=affected,
            user_id=user_id,
        )
        return affected

    def soft_delete_branch(
        self,
        branch: Any,
        user_id: int | None,
        user_email: str | None,
    ) -> int:
        """
        Soft delete a branch with every menu served there, published or not.

        Returns:
            Count of affected records
        """
        affected = 0
        for menu in branch.menus:
            if menu.deleted_at is None:
                affected += self._delete_menu_tree(menu, user_id, user_email)

        soft_delete(self._db, branch, user_id, user_email, commit=False)
        affected += 1

        safe_commit(self._db)

        logger.info(
            "Branch cascade soft deleted",
            branch_id=branch.id,
            affected_records=affected,
            user_id=user_id,
        )
        return affected
