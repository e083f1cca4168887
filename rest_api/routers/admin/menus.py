"""
Menu management endpoints.

Menus are listed with their branch summary and their categories and items,
so the admin panel can render a whole menu from one response.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from rest_api.routers._common.base import get_user_email, get_user_id
from rest_api.routers.admin._base import ensure_restaurant_access, owner_restaurant_id, require_admin
from rest_api.services.domain import MenuService
from shared.config.constants import Limits
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import MenuCreate, MenuDetailOutput, MenuOutput, MenuUpdate


router = APIRouter(tags=["admin-menus"])


@router.get("/restaurants/{restaurant_id}/menus", response_model=list[MenuDetailOutput])
def list_menus(
    restaurant_id: int,
    branch_id: int | None = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> list[MenuDetailOutput]:
    """List menus newest first, published or not, optionally of one branch."""
    ensure_restaurant_access(user, restaurant_id)
    return MenuService(db).list_detailed(restaurant_id, branch_id)


@router.post(
    "/restaurants/{restaurant_id}/menus",
    response_model=MenuOutput,
    status_code=status.HTTP_201_CREATED,
)
def create_menu(
    restaurant_id: int,
    body: MenuCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> MenuOutput:
    """Create a menu on a branch of the restaurant."""
    ensure_restaurant_access(user, restaurant_id)
    return MenuService(db).create(
        body.model_dump(),
        restaurant_id,
        get_user_id(user),
        get_user_email(user),
    )


@router.get("/menus/{menu_id}", response_model=MenuDetailOutput)
def get_menu(
    menu_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> MenuDetailOutput:
    service = MenuService(db)
    restaurant_id = owner_restaurant_id(service, menu_id, user)
    return service.get_detail(menu_id, restaurant_id)


@router.patch("/menus/{menu_id}", response_model=MenuOutput)
def update_menu(
    menu_id: int,
    body: MenuUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> MenuOutput:
    """Update a menu. is_active publishes or hides it on the public page."""
    service = MenuService(db)
    restaurant_id = owner_restaurant_id(service, menu_id, user)
    return service.update(
        menu_id,
        body.model_dump(exclude_unset=True),
        restaurant_id,
        get_user_id(user),
        get_user_email(user),
    )


@router.delete("/menus/{menu_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu(
    menu_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> None:
    """Soft delete a menu with its categories, items and theme."""
    service = MenuService(db)
    restaurant_id = owner_restaurant_id(service, menu_id, user)
    service.delete(menu_id, restaurant_id, get_user_id(user), get_user_email(user))


@router.get(
    "/menus/{menu_id}/qr",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
def get_menu_qr(
    menu_id: int,
    box_size: int = Query(default=10, ge=Limits.MIN_QR_BOX_SIZE, le=Limits.MAX_QR_BOX_SIZE),
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> Response:
    """QR code (PNG) linking to the menu's public page, as a download."""
    service = MenuService(db)
    restaurant_id = owner_restaurant_id(service, menu_id, user)
    png, filename = service.qr_code(menu_id, restaurant_id, box_size=box_size)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
