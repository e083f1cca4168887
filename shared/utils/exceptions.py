"""
Centralized HTTP exceptions for consistent error handling.

Usage:
    from shared.utils.exceptions import NotFoundError, ForbiddenError, ValidationError

    raise NotFoundError("Menu", menu_id)
    raise ForbiddenError("manage this restaurant")
    raise ValidationError("Price must be positive")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 401 Unauthorized Errors
# =============================================================================


class AuthenticationError(AppException):
    """
    Missing or invalid credentials/session (401).

    Usage:
        raise AuthenticationError("Invalid credentials")
    """

    def __init__(self, detail: str = "Authentication required", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Menu", 123)
        raise NotFoundError("Branch", branch_id, restaurant_id=restaurant_id)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class RestaurantNotFoundError(NotFoundError):
    """Restaurant not found (or inactive)."""

    def __init__(self, restaurant_id: int | None = None, **log_context: Any):
        super().__init__("Restaurant", restaurant_id, **log_context)


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


# =============================================================================
# 403 Forbidden Errors
# =============================================================================


class ForbiddenError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise ForbiddenError("delete orders")
        raise ForbiddenError("access this restaurant", user_id=user_id)
    """

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to {action}"
        else:
            detail = "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


class RestaurantAccessError(ForbiddenError):
    """User doesn't belong to the restaurant."""

    def __init__(self, restaurant_id: int | None = None, **log_context: Any):
        super().__init__("access this restaurant", restaurant_id=restaurant_id, **log_context)


class InsufficientRoleError(ForbiddenError):
    """User doesn't have the required role."""

    def __init__(self, required_roles: list[str], **log_context: Any):
        roles_str = ", ".join(sorted(required_roles))
        super().__init__(
            f"perform this action (requires role: {roles_str})",
            required_roles=required_roles,
            **log_context,
        )


class AccountLockedError(AppException):
    """Login refused because the credential is locked (403)."""

    def __init__(self, detail: str = "Account is locked. Contact support.", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class RestaurantInactiveError(AppException):
    """The user's restaurant was deleted; its staff can no longer sign in (403)."""

    def __init__(self, restaurant_id: int | None = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Restaurant is inactive",
            log_level="warning",
            restaurant_id=restaurant_id,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Passwords do not match")
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidStateError(ValidationError):
    """Entity is in an invalid state for the operation."""

    def __init__(self, entity: str, current_state: str, expected_states: list[str] | None = None, **log_context: Any):
        if expected_states:
            states_str = ", ".join(expected_states)
            detail = f"{entity} is '{current_state}', expected: {states_str}"
        else:
            detail = f"{entity} cannot be '{current_state}' for this operation"

        super().__init__(detail, entity=entity, current_state=current_state, **log_context)


class InvalidTransitionError(ValidationError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


class DuplicateEntityError(ValidationError):
    """Entity already exists."""

    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        if identifier:
            detail = f"{entity} '{identifier}' already exists"
        else:
            detail = f"{entity} already exists"

        super().__init__(detail, entity=entity, **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Transaction already used for a registration")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to build order", order_id=123)
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error while trying to {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)


# =============================================================================
# Rate Limiting Errors
# =============================================================================


class RateLimitError(AppException):
    """Rate limit exceeded (429)."""

    def __init__(self, retry_after: int, context: str | None = None, **log_context: Any):
        detail = f"Too many requests. Try again in {retry_after} seconds."
        if context:
            detail = f"{context}: {detail}"

        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=detail,
            log_level="warning",
            headers={"Retry-After": str(retry_after)},
            retry_after=retry_after,
            **log_context,
        )
