"""
Repository Pattern for database access.

Provides an abstraction layer between business logic and data access, with
built-in multi-tenant isolation: every tenant query is filtered by
restaurant_id.

Usage:
    from rest_api.services.crud.repository import (
        BaseRepository,
        TenantRepository,
        BranchRepository,
    )

    menu_repo = TenantRepository(Menu, db)
    menus = menu_repo.find_all(restaurant_id=1)
    menu = menu_repo.find_by_id(42, restaurant_id=1)

    # With eager loading
    menu_repo.find_all(
        restaurant_id=1,
        options=[selectinload(Menu.categories)],
    )

    # Branch-scoped repository
    repo = BranchRepository(Menu, db)
    menus = repo.find_by_branch(branch_id=5, restaurant_id=1)
"""

from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import select, func
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from rest_api.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Base repository providing common database operations.

    Used directly for entities without tenant isolation (restaurants, plans).
    For restaurant-owned entities, use TenantRepository instead.
    """

    def __init__(self, model: type[ModelT], session: Session):
        self._model = model
        self._session = session

    def _base_query(self) -> Select:
        """Create base select query."""
        return select(self._model)

    def _apply_active_filter(self, query: Select, include_inactive: bool) -> Select:
        """Apply is_active filter if model has it."""
        if hasattr(self._model, "is_active") and not include_inactive:
            query = query.where(self._model.is_active.is_(True))
        return query

    def _apply_options(
        self, query: Select, options: list[Any] | None
    ) -> Select:
        """Apply eager loading options."""
        if options:
            query = query.options(*options)
        return query

    def _apply_window(
        self,
        query: Select,
        order_by: Any | None,
        limit: int | None,
        offset: int | None,
    ) -> Select:
        """Apply ordering and pagination. order_by may be one expression or a list."""
        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                query = query.order_by(*order_by)
            else:
                query = query.order_by(order_by)
        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query

    def find_by_id(
        self,
        entity_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> ModelT | None:
        """
        Find entity by primary key.

        Args:
            entity_id: The primary key value.
            options: SQLAlchemy loader options (selectinload, joinedload).
            include_inactive: Include soft-deleted entities.

        Returns:
            Entity or None if not found.
        """
        query = self._base_query().where(self._model.id == entity_id)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        return self._session.scalar(query)

    def find_all(
        self,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """Find all entities."""
        query = self._base_query()
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        query = self._apply_window(query, order_by, limit, offset)
        return self._session.scalars(query).all()

class TenantRepository(BaseRepository[ModelT]):
    """
    Repository with automatic multi-tenant isolation.

    All queries are filtered by restaurant_id to ensure data isolation.
    The model must have a `restaurant_id` column.

    Usage:
        repo = TenantRepository(Category, db)
        categories = repo.find_all(restaurant_id=1)
    """

    def _tenant_query(self, restaurant_id: int) -> Select:
        """Create tenant-filtered base query."""
        if not hasattr(self._model, "restaurant_id"):
            raise AttributeError(
                f"Model {self._model.__name__} does not have restaurant_id column. "
                "Use BaseRepository instead."
            )
        return self._base_query().where(self._model.restaurant_id == restaurant_id)

    def find_by_id(
        self,
        entity_id: int,
        restaurant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> ModelT | None:
        """
        Find entity by ID within tenant scope.

        Returns:
            Entity or None if not found or owned by another restaurant.
        """
        query = self._tenant_query(restaurant_id).where(self._model.id == entity_id)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        return self._session.scalar(query)

    def find_all(
        self,
        restaurant_id: int,
        *,
        filters: list[Any] | None = None,
        options: list[Any] | None = None,
        include_inactive: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """
        Find all entities within tenant scope.

        Args:
            restaurant_id: The restaurant ID for isolation.
            filters: Extra WHERE clauses.
            options: SQLAlchemy loader options.
            include_inactive: Include soft-deleted entities.
            limit: Maximum results.
            offset: Skip count.
            order_by: Order expression (or list of expressions).

        Returns:
            Sequence of entities.
        """
        query = self._tenant_query(restaurant_id)
        if filters:
            query = query.where(*filters)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        query = self._apply_window(query, order_by, limit, offset)
        return self._session.scalars(query).all()

    def find_by_ids(
        self,
        entity_ids: Sequence[int],
        restaurant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> Sequence[ModelT]:
        """
        Find multiple entities by IDs within tenant scope.

        Returns:
            Sequence of found entities (may be less than requested).
        """
        if not entity_ids:
            return []

        query = self._tenant_query(restaurant_id).where(self._model.id.in_(entity_ids))
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        return self._session.scalars(query).all()

    def count(
        self,
        restaurant_id: int,
        *,
        filters: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> int:
        """Count entities within tenant scope."""
        query = (
            select(func.count())
            .select_from(self._model)
            .where(self._model.restaurant_id == restaurant_id)
        )
        if filters:
            query = query.where(*filters)
        if hasattr(self._model, "is_active") and not include_inactive:
            query = query.where(self._model.is_active.is_(True))
        return self._session.scalar(query) or 0


class BranchRepository(TenantRepository[ModelT]):
    """
    Repository for branch-scoped entities.

    Extends TenantRepository with branch filtering.
    The model must have both `restaurant_id` and `branch_id` columns.
    """

    def _branch_query(self, branch_id: int, restaurant_id: int) -> Select:
        """Create branch-filtered query."""
        if not hasattr(self._model, "branch_id"):
            raise AttributeError(
                f"Model {self._model.__name__} does not have branch_id column. "
                "Use TenantRepository instead."
            )
        return self._tenant_query(restaurant_id).where(self._model.branch_id == branch_id)

    def find_by_branch(
        self,
        branch_id: int,
        restaurant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """Find all entities within branch scope."""
        query = self._branch_query(branch_id, restaurant_id)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        query = self._apply_window(query, order_by, limit, offset)
        return self._session.scalars(query).all()
