"""
Shared Pydantic schemas used across the application (auth and common types).
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["root_admin", "restaurant_admin", "kitchen"]
OrderStatusLiteral = Literal["pending", "confirmed", "preparing", "ready", "delivered", "cancelled"]
TransactionStatusLiteral = Literal["pending", "completed", "failed"]


class MessageResponse(BaseModel):
    """Generic acknowledgement."""

    success: bool = True
    message: str


# =============================================================================
# Authentication Schemas
# =============================================================================


class LoginRequest(BaseModel):
    """Login request body."""

    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=200)


class UserInfo(BaseModel):
    """Basic user information included in auth responses."""

    id: int
    email: str
    username: str | None = None
    full_name: str | None = None
    role: Role
    restaurant_id: int | None = None


class LoginResponse(BaseModel):
    """Login response with the session token (also set as a cookie)."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds
    user: UserInfo


class SessionCheckResponse(BaseModel):
    """Session status that never fails."""

    authenticated: bool
    user: UserInfo | None = None


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetRequestResponse(BaseModel):
    message: str
    # Only populated when running with DEBUG=true
    reset_token: str | None = None
    expires_at: datetime | None = None


class PasswordResetConfirm(BaseModel):
    token: str = Field(min_length=1, max_length=200)
    new_password: str = Field(min_length=1, max_length=200)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=200)
    new_password: str = Field(min_length=1, max_length=200)
