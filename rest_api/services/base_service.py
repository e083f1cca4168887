"""
Base Service Classes for Clean Architecture.

Provides abstract base classes for application services that:
- Use Repository for data access (not direct queries)
- Convert entities to Pydantic output schemas
- Handle business logic and orchestration

Architecture:
    Router (thin) → Service (business logic) → Repository (data access) → Model

Usage:
    from rest_api.services.base_service import BaseService, BaseCRUDService

    class CategoryService(BaseCRUDService[Category, CategoryOutput]):
        def __init__(self, db: Session):
            super().__init__(
                db=db,
                model=Category,
                output_schema=CategoryOutput,
                entity_name="Category",
            )

        def list_by_menu(self, restaurant_id: int, menu_id: int) -> list[CategoryOutput]:
            entities = self._repo.find_all(
                restaurant_id,
                filters=[Category.menu_id == menu_id],
                order_by=Category.order,
            )
            return [self.to_output(e) for e in entities]
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Generic, TypeVar, Type

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Base, Restaurant
from rest_api.services.crud.repository import TenantRepository, BranchRepository
from rest_api.services.crud.soft_delete import soft_delete, set_created_by, set_updated_by
from shared.infrastructure.db import safe_commit
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, DatabaseError, RestaurantNotFoundError, ValidationError
from shared.utils.validators import validate_image_url

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseService(ABC, Generic[ModelT]):
    """
    Abstract base service for domain operations.

    Subclasses implement specific business logic while this class
    provides common infrastructure (repository access, logging).
    """

    def __init__(self, db: Session, model: Type[ModelT]):
        self._db = db
        self._model = model
        self._repo = TenantRepository(model, db)


class BaseCRUDService(BaseService[ModelT], Generic[ModelT, OutputT]):
    """
    Base service for restaurant-owned entities with CRUD operations.

    Provides standard CRUD methods that can be overridden for
    custom business logic. Uses Repository for all data access.

    Responsibilities:
    - Data access via Repository (not direct queries)
    - DTO transformation via output schema
    - Audit fields for mutations
    - Business rule validation hooks
    """

    def __init__(
        self,
        db: Session,
        model: Type[ModelT],
        output_schema: Type[OutputT],
        entity_name: str,
        *,
        has_branch_id: bool = False,
        image_url_fields: set[str] | None = None,
    ):
        super().__init__(db, model)
        self._output_schema = output_schema
        self._entity_name = entity_name
        self._image_url_fields = image_url_fields or {"image_url"}

        # Use BranchRepository if entity has branch_id
        if has_branch_id:
            self._repo = BranchRepository(model, db)

    @property
    def entity_name(self) -> str:
        """Human-readable entity name for messages."""
        return self._entity_name

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_by_id(
        self,
        entity_id: int,
        restaurant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> OutputT:
        """
        Get entity by ID.

        Raises:
            NotFoundError: If entity not found in this restaurant.
        """
        entity = self._repo.find_by_id(
            entity_id,
            restaurant_id,
            options=options,
            include_inactive=include_inactive,
        )

        if entity is None:
            raise NotFoundError(self._entity_name, entity_id, restaurant_id=restaurant_id)

        return self.to_output(entity)

    def get_entity(
        self,
        entity_id: int,
        restaurant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> ModelT:
        """Get raw entity (for internal use). Raises NotFoundError."""
        entity = self._repo.find_by_id(
            entity_id,
            restaurant_id,
            options=options,
            include_inactive=include_inactive,
        )
        if entity is None:
            raise NotFoundError(self._entity_name, entity_id, restaurant_id=restaurant_id)
        return entity

    def list_all(
        self,
        restaurant_id: int,
        *,
        filters: list[Any] | None = None,
        options: list[Any] | None = None,
        include_inactive: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> list[OutputT]:
        """List all entities of a restaurant."""
        entities = self._repo.find_all(
            restaurant_id,
            filters=filters,
            options=options,
            include_inactive=include_inactive,
            limit=limit,
            offset=offset,
            order_by=order_by,
        )
        return [self.to_output(e) for e in entities]

    def count(self, restaurant_id: int, *, filters: list[Any] | None = None) -> int:
        """Count active entities of a restaurant."""
        return self._repo.count(restaurant_id, filters=filters)

    def get_owner_restaurant_id(self, entity_id: int) -> int:
        """
        Restaurant that owns a (not deleted) entity.

        Used by routes addressed by entity ID only, before checking access.

        Raises:
            NotFoundError: If entity doesn't exist, was deleted, or its
                restaurant was deleted.
        """
        restaurant_id = self._db.scalar(
            select(self._model.restaurant_id)
            .join(Restaurant, Restaurant.id == self._model.restaurant_id)
            .where(
                self._model.id == entity_id,
                self._model.deleted_at.is_(None),
                Restaurant.is_active.is_(True),
            )
        )
        if restaurant_id is None:
            raise NotFoundError(self._entity_name, entity_id)
        return restaurant_id

    def ensure_restaurant_active(self, restaurant_id: int) -> None:
        """Writes into a deleted restaurant answer as if it did not exist."""
        active = self._db.scalar(
            select(Restaurant.id).where(
                Restaurant.id == restaurant_id,
                Restaurant.is_active.is_(True),
            )
        )
        if active is None:
            raise RestaurantNotFoundError(restaurant_id)

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(
        self,
        data: dict[str, Any],
        restaurant_id: int,
        user_id: int | None,
        user_email: str | None,
    ) -> OutputT:
        """
        Create new entity.

        Raises:
            ValidationError: If data is invalid.
            DatabaseError: If creation fails.
        """
        self.ensure_restaurant_active(restaurant_id)
        self._validate_create(data, restaurant_id)
        data = self._validate_image_urls(data)
        data["restaurant_id"] = restaurant_id

        entity = self._model(**data)
        set_created_by(entity, user_id, user_email)
        self._db.add(entity)
        self._before_commit_create(entity)

        try:
            safe_commit(self._db)
            self._db.refresh(entity)
        except Exception as e:
            logger.error(
                f"Failed to create {self._entity_name}",
                error=str(e),
                restaurant_id=restaurant_id,
            )
            raise DatabaseError(f"create {self._entity_name.lower()}")

        self._after_create(entity, user_id, user_email)

        return self.to_output(entity)

    def update(
        self,
        entity_id: int,
        data: dict[str, Any],
        restaurant_id: int,
        user_id: int | None,
        user_email: str | None,
    ) -> OutputT:
        """
        Update existing entity with the given fields.

        Raises:
            NotFoundError: If entity not found.
            ValidationError: If data is invalid.
            DatabaseError: If update fails.
        """
        entity = self.get_entity(entity_id, restaurant_id)

        self._validate_update(entity, data, restaurant_id)
        data = self._validate_image_urls(data)

        old_values = {k: getattr(entity, k) for k in data.keys() if hasattr(entity, k)}

        for field_name, value in data.items():
            if hasattr(entity, field_name):
                setattr(entity, field_name, value)

        set_updated_by(entity, user_id, user_email)
        self._before_commit_update(entity, old_values)

        try:
            safe_commit(self._db)
            self._db.refresh(entity)
        except Exception as e:
            logger.error(
                f"Failed to update {self._entity_name}",
                error=str(e),
                entity_id=entity_id,
            )
            raise DatabaseError(f"update {self._entity_name.lower()}")

        self._after_update(entity, old_values, user_id, user_email)

        return self.to_output(entity)

    def delete(
        self,
        entity_id: int,
        restaurant_id: int,
        user_id: int | None,
        user_email: str | None,
    ) -> None:
        """
        Soft delete entity.

        Raises:
            NotFoundError: If entity not found.
        """
        entity = self.get_entity(entity_id, restaurant_id)

        self._validate_delete(entity, restaurant_id)

        entity_info = self._get_entity_info(entity)

        soft_delete(self._db, entity, user_id, user_email)

        self._after_delete(entity_info, user_id, user_email)

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_output(self, entity: ModelT) -> OutputT:
        """
        Convert entity to output DTO.

        Override this method for custom transformation logic.
        """
        return self._output_schema.model_validate(entity)

    # =========================================================================
    # Validation Hooks (override in subclasses)
    # =========================================================================

    def _validate_create(self, data: dict[str, Any], restaurant_id: int) -> None:
        """
        Validate (and complete) data before create.

        Raises:
            ValidationError: If validation fails.
        """
        pass

    def _validate_update(
        self, entity: ModelT, data: dict[str, Any], restaurant_id: int
    ) -> None:
        """
        Validate data before update.

        Raises:
            ValidationError: If validation fails.
        """
        pass

    def _validate_delete(self, entity: ModelT, restaurant_id: int) -> None:
        """
        Validate before delete.

        Raises:
            ValidationError: If deletion is not allowed.
        """
        pass

    # =========================================================================
    # Lifecycle Hooks (override in subclasses)
    # =========================================================================

    def _before_commit_create(self, entity: ModelT) -> None:
        """Hook called inside the create transaction, before commit."""
        pass

    def _before_commit_update(self, entity: ModelT, old_values: dict[str, Any]) -> None:
        """Hook called inside the update transaction, before commit."""
        pass

    def _after_create(self, entity: ModelT, user_id: int | None, user_email: str | None) -> None:
        """Hook called after entity creation. Override for side effects."""
        pass

    def _after_update(
        self,
        entity: ModelT,
        old_values: dict[str, Any],
        user_id: int | None,
        user_email: str | None,
    ) -> None:
        """Hook called after entity update. Override for side effects."""
        pass

    def _after_delete(
        self,
        entity_info: dict[str, Any],
        user_id: int | None,
        user_email: str | None,
    ) -> None:
        """Hook called after entity deletion."""
        logger.info(
            f"{self._entity_name} deleted",
            entity_id=entity_info["id"],
            restaurant_id=entity_info["restaurant_id"],
            user_id=user_id,
        )

    def _get_entity_info(self, entity: ModelT) -> dict[str, Any]:
        """Entity info captured before deletion."""
        return {
            "id": entity.id,
            "name": getattr(entity, "name", None),
            "restaurant_id": getattr(entity, "restaurant_id", None),
            "branch_id": getattr(entity, "branch_id", None),
        }

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _validate_image_urls(self, data: dict[str, Any]) -> dict[str, Any]:
        """Validate and sanitize image URL fields."""
        for field_name in self._image_url_fields:
            if field_name in data and data[field_name]:
                try:
                    data[field_name] = validate_image_url(data[field_name])
                except ValueError as e:
                    raise ValidationError(str(e), field=field_name)
        return data
