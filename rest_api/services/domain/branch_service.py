"""
Branch Service - Clean Architecture Implementation.

Keeps the main-branch invariant: every restaurant with at least one active
branch has exactly one active branch flagged is_main.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Branch, Category, Menu
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.crud.cascade_delete import CascadeDeleteService
from rest_api.services.crud.soft_delete import set_updated_by
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.admin_schemas import BranchOutput
from shared.utils.exceptions import NotFoundError, ValidationError
from shared.utils.validators import normalize_whatsapp_number

logger = get_logger(__name__)

# Menus with their category trees and themes, for the cascade on delete
BRANCH_MENU_OPTIONS = [
    selectinload(Branch.menus).selectinload(Menu.categories).selectinload(Category.items),
    selectinload(Branch.menus).selectinload(Menu.theme),
]


class BranchService(BaseCRUDService[Branch, BranchOutput]):
    """Service for branch management."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Branch,
            output_schema=BranchOutput,
            entity_name="Branch",
            has_branch_id=False,  # Branches don't have branch_id
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def list_for_restaurant(self, restaurant_id: int) -> list[BranchOutput]:
        """Active branches, main branch first, then by name."""
        return self.list_all(
            restaurant_id,
            order_by=[Branch.is_main.desc(), Branch.name],
        )

    def get_main_branch(self, restaurant_id: int) -> Branch | None:
        entities = self._repo.find_all(
            restaurant_id,
            filters=[Branch.is_main.is_(True)],
            limit=1,
        )
        return entities[0] if entities else None

    # =========================================================================
    # Commands
    # =========================================================================

    def replace(
        self,
        branch_id: int,
        data: dict[str, Any],
        restaurant_id: int,
        user_id: int | None,
        user_email: str | None,
    ) -> BranchOutput:
        """
        Full update (PUT). is_main may only be turned on; the main flag moves
        away from a branch by promoting another one.
        """
        return self.update(branch_id, data, restaurant_id, user_id, user_email)

    def set_main(
        self,
        restaurant_id: int,
        branch_id: int,
        user_id: int | None,
        user_email: str | None,
    ) -> BranchOutput:
        """Clear is_main on every branch of the restaurant and set it on branch_id."""
        self.ensure_restaurant_active(restaurant_id)
        branch = self._repo.find_by_id(branch_id, restaurant_id)
        if branch is None:
            raise NotFoundError(self._entity_name, branch_id, restaurant_id=restaurant_id)

        self._clear_main(restaurant_id)
        branch.is_main = True
        set_updated_by(branch, user_id, user_email)
        safe_commit(self._db)
        self._db.refresh(branch)

        logger.info(
            "Main branch changed",
            restaurant_id=restaurant_id,
            branch_id=branch_id,
            user_id=user_id,
        )
        return self.to_output(branch)

    def create_main_branch(
        self,
        restaurant_id: int,
        name: str,
        address: str,
        user_id: int | None,
        user_email: str | None,
        *,
        phone: str | None = None,
        whatsapp: str | None = None,
        email: str | None = None,
    ) -> Branch:
        """
        Add the first (main) branch of a new restaurant to the session.
        The caller commits.
        """
        branch = Branch(
            restaurant_id=restaurant_id,
            name=name,
            address=address,
            phone=phone,
            whatsapp=normalize_whatsapp_number(whatsapp),
            email=email,
            is_main=True,
        )
        branch.set_created_by(user_id, user_email)
        self._db.add(branch)
        return branch

    def delete(
        self,
        entity_id: int,
        restaurant_id: int,
        user_id: int | None,
        user_email: str | None,
    ) -> None:
        """Soft delete the branch and the menus served there."""
        branch = self.get_entity(entity_id, restaurant_id, options=BRANCH_MENU_OPTIONS)
        self._validate_delete(branch, restaurant_id)
        CascadeDeleteService(self._db).soft_delete_branch(branch, user_id, user_email)

    # =========================================================================
    # Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any], restaurant_id: int) -> None:
        if "whatsapp" in data:
            data["whatsapp"] = normalize_whatsapp_number(data["whatsapp"])
        # The first branch of a restaurant is always main
        if self._repo.count(restaurant_id) == 0:
            data["is_main"] = True

    def _before_commit_create(self, entity: Branch) -> None:
        if entity.is_main:
            self._clear_main(entity.restaurant_id)

    def _validate_update(self, entity: Branch, data: dict[str, Any], restaurant_id: int) -> None:
        if "whatsapp" in data:
            data["whatsapp"] = normalize_whatsapp_number(data["whatsapp"])

        is_main = data.get("is_main")
        if is_main is None:
            data.pop("is_main", None)
        elif is_main is False and entity.is_main:
            raise ValidationError(
                "Cannot unset the main branch. Set another branch as main instead.",
                branch_id=entity.id,
            )

    def _before_commit_update(self, entity: Branch, old_values: dict[str, Any]) -> None:
        if entity.is_main and not old_values.get("is_main", True):
            self._clear_main(entity.restaurant_id, exclude_id=entity.id)

    def _validate_delete(self, entity: Branch, restaurant_id: int) -> None:
        if entity.is_main:
            raise ValidationError("Cannot delete the main branch", branch_id=entity.id)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _clear_main(self, restaurant_id: int, exclude_id: int | None = None) -> None:
        stmt = (
            update(Branch)
            .where(Branch.restaurant_id == restaurant_id, Branch.is_main.is_(True))
            .values(is_main=False)
            .execution_options(synchronize_session="fetch")
        )
        if exclude_id is not None:
            stmt = stmt.where(Branch.id != exclude_id)
        self._db.execute(stmt)
