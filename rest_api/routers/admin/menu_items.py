"""
Menu item management endpoints.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from rest_api.routers._common.base import get_user_email, get_user_id
from rest_api.routers.admin._base import owner_restaurant_id, require_admin
from rest_api.services.domain import CategoryService, MenuItemService
from shared.config.constants import Limits
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import MenuItemCreate, MenuItemOutput, MenuItemUpdate


router = APIRouter(tags=["admin-menu-items"])


@router.get("/categories/{category_id}/menu-items", response_model=list[MenuItemOutput])
def list_menu_items(
    category_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> list[MenuItemOutput]:
    """List the items of a category in display order."""
    restaurant_id = owner_restaurant_id(CategoryService(db), category_id, user)
    return MenuItemService(db).list_by_category(category_id, restaurant_id)


@router.post(
    "/categories/{category_id}/menu-items",
    response_model=MenuItemOutput,
    status_code=status.HTTP_201_CREATED,
)
def create_menu_item(
    category_id: int,
    body: MenuItemCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> MenuItemOutput:
    """Create an item in a category. Without `order` it goes last."""
    restaurant_id = owner_restaurant_id(CategoryService(db), category_id, user)
    return MenuItemService(db).create(
        {**body.model_dump(), "category_id": category_id},
        restaurant_id,
        get_user_id(user),
        get_user_email(user),
    )


@router.get("/menu-items/{menu_item_id}", response_model=MenuItemOutput)
def get_menu_item(
    menu_item_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> MenuItemOutput:
    service = MenuItemService(db)
    restaurant_id = owner_restaurant_id(service, menu_item_id, user)
    return service.get_by_id(menu_item_id, restaurant_id)


@router.patch("/menu-items/{menu_item_id}", response_model=MenuItemOutput)
def update_menu_item(
    menu_item_id: int,
    body: MenuItemUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> MenuItemOutput:
    service = MenuItemService(db)
    restaurant_id = owner_restaurant_id(service, menu_item_id, user)
    return service.update(
        menu_item_id,
        body.model_dump(exclude_unset=True),
        restaurant_id,
        get_user_id(user),
        get_user_email(user),
    )


@router.delete("/menu-items/{menu_item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(
    menu_item_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> None:
    service = MenuItemService(db)
    restaurant_id = owner_restaurant_id(service, menu_item_id, user)
    service.delete(menu_item_id, restaurant_id, get_user_id(user), get_user_email(user))


@router.post("/menu-items/{menu_item_id}/image", response_model=MenuItemOutput)
def upload_menu_item_image(
    menu_item_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> MenuItemOutput:
    """Upload a PNG, JPG or WEBP photo (max 5 MB) and set it as the item image."""
    service = MenuItemService(db)
    restaurant_id = owner_restaurant_id(service, menu_item_id, user)
    # One byte over the limit is enough to reject oversized files.
    data = file.file.read(Limits.MAX_UPLOAD_BYTES + 1)
    return service.upload_image(
        menu_item_id,
        restaurant_id,
        data,
        file.content_type,
        get_user_id(user),
        get_user_email(user),
    )
