"""
Soft Delete Service for consistent soft delete operations across all entities.

This service provides functions to:
- Soft delete entities (set is_active=False with audit trail)
- Set created_by/updated_by audit fields
"""

from typing import TypeVar

from sqlalchemy.orm import Session

from rest_api.models import AuditMixin


# Type variable for generic entity operations
T = TypeVar("T", bound=AuditMixin)


def soft_delete(
    db: Session,
    entity: T,
    user_id: int | None,
    user_email: str | None,
    commit: bool = True,
) -> T:
    """
    Perform soft delete on an entity with audit trail.

    Args:
        db: Database session
        entity: The entity to soft delete (must inherit from AuditMixin)
        user_id: ID of the user performing the deletion
        user_email: Email of the user performing the deletion
        commit: Commit immediately. Cascades pass False and commit once.

    Returns:
        The soft-deleted entity

    Raises:
        Exception: Re-raises any exception after rollback
    """
    entity.soft_delete(user_id, user_email)
    if not commit:
        return entity
    try:
        db.commit()
        db.refresh(entity)
    except Exception:
        db.rollback()
        raise
    return entity


def set_created_by(entity: T, user_id: int | None, user_email: str | None) -> T:
    """Set created_by fields on a new entity."""
    entity.set_created_by(user_id, user_email)
    return entity


def set_updated_by(entity: T, user_id: int | None, user_email: str | None) -> T:
    """Set updated_by fields on an entity being updated."""
    entity.set_updated_by(user_id, user_email)
    return entity

