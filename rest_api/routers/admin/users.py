"""
User management endpoints.

Root admins manage all users. Restaurant admins manage the restaurant_admin
and kitchen users of their own restaurant.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers.admin._base import require_admin
from rest_api.services.domain import UserService
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import UserCreate, UserOutput, UserUpdate


router = APIRouter(tags=["admin-users"])


@router.get("/users", response_model=list[UserOutput])
def list_users(
    restaurant_id: int | None = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> list[UserOutput]:
    """List users. The restaurant_id filter only applies to root admins."""
    return UserService(db).list_users(user, restaurant_id)


@router.post("/users", response_model=UserOutput, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> UserOutput:
    """Create a user with username and password."""
    return UserService(db).create_user(body.model_dump(), user)


@router.get("/users/{user_id}", response_model=UserOutput)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> UserOutput:
    return UserService(db).get_user(user_id, user)


@router.patch("/users/{user_id}", response_model=UserOutput)
def update_user(
    user_id: int,
    body: UserUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> UserOutput:
    """Update a user. Setting a password ends the user's open sessions."""
    return UserService(db).update_user(user_id, body.model_dump(exclude_unset=True), user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> None:
    """Soft delete a user. Users cannot delete themselves."""
    UserService(db).delete_user(user_id, user)


@router.post("/users/{user_id}/unlock", response_model=UserOutput)
def unlock_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> UserOutput:
    """Clear failed login attempts and the lock of a user's credential."""
    return UserService(db).unlock_user(user_id, user)
