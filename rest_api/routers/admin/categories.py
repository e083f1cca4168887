"""
Category management endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common.base import get_user_email, get_user_id
from rest_api.routers.admin._base import ensure_restaurant_access, owner_restaurant_id, require_admin
from rest_api.services.domain import CategoryService
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import (
    CategoryCreate,
    CategoryOutput,
    CategoryUpdate,
    CategoryWithItemsOutput,
)


router = APIRouter(tags=["admin-categories"])


@router.get(
    "/restaurants/{restaurant_id}/categories",
    response_model=list[CategoryWithItemsOutput],
)
def list_categories(
    restaurant_id: int,
    menu_id: int | None = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> list[CategoryWithItemsOutput]:
    """List categories with their items, optionally of one menu."""
    ensure_restaurant_access(user, restaurant_id)
    return CategoryService(db).list_with_items(restaurant_id, menu_id)


@router.post(
    "/restaurants/{restaurant_id}/categories",
    response_model=CategoryOutput,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    restaurant_id: int,
    body: CategoryCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> CategoryOutput:
    """Create a category in a menu. Without `order` it goes last."""
    ensure_restaurant_access(user, restaurant_id)
    return CategoryService(db).create(
        body.model_dump(),
        restaurant_id,
        get_user_id(user),
        get_user_email(user),
    )


@router.get("/categories/{category_id}", response_model=CategoryWithItemsOutput)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> CategoryWithItemsOutput:
    service = CategoryService(db)
    restaurant_id = owner_restaurant_id(service, category_id, user)
    return service.get_with_items(category_id, restaurant_id)


@router.patch("/categories/{category_id}", response_model=CategoryOutput)
def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> CategoryOutput:
    service = CategoryService(db)
    restaurant_id = owner_restaurant_id(service, category_id, user)
    return service.update(
        category_id,
        body.model_dump(exclude_unset=True),
        restaurant_id,
        get_user_id(user),
        get_user_email(user),
    )


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> None:
    """Soft delete a category and its items."""
    service = CategoryService(db)
    restaurant_id = owner_restaurant_id(service, category_id, user)
    service.delete(category_id, restaurant_id, get_user_id(user), get_user_email(user))
