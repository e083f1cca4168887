"""
CRUD Services - Generic operations for entity management.

Provides:
- Repository Pattern: Type-safe data access with tenant isolation
- soft_delete: Soft delete with audit trail
- CascadeDeleteService: Cascade soft delete with audit preservation
"""

from .repository import (
    BaseRepository,
    TenantRepository,
    BranchRepository,
)
from .soft_delete import (
    soft_delete,
    set_created_by,
    set_updated_by,
)
from .cascade_delete import CascadeDeleteService

__all__ = [
    # Repository Pattern
    "BaseRepository",
    "TenantRepository",
    "BranchRepository",
    # Soft delete
    "soft_delete",
    "set_created_by",
    "set_updated_by",
    # Cascade delete
    "CascadeDeleteService",
]
