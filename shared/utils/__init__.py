"""
Utilities module: Exceptions, validators, schemas, colors, health checks.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ForbiddenError,
    ValidationError,
    ConflictError,
)
from shared.utils.validators import (
    validate_image_url,
    validate_hex_color,
)

__all__ = [
    # exceptions
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "ConflictError",
    # validators
    "validate_image_url",
    "validate_hex_color",
]
