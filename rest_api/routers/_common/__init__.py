"""
Common utilities shared across routers.

NOTE: Request/response schemas live in shared/utils/admin_schemas.py
so services never import from routers.
"""

from .base import current_session, current_user_context, get_user_id, get_user_email
from .pagination import Pagination, get_pagination, set_total_count

__all__ = [
    # Request context
    "current_session",
    "current_user_context",
    "get_user_id",
    "get_user_email",
    # Pagination
    "Pagination",
    "get_pagination",
    "set_total_count",
]
