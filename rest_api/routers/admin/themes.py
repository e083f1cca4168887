"""
Menu theme endpoints (presentation of a menu's public page).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.routers._common.base import get_user_email, get_user_id
from rest_api.routers.admin._base import owner_restaurant_id, require_admin
from rest_api.services.domain import MenuService, ThemeService
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import ThemeOutput, ThemeUpdate


router = APIRouter(tags=["admin-themes"])


@router.get("/menus/{menu_id}/theme", response_model=ThemeOutput)
def get_theme(
    menu_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> ThemeOutput:
    """Stored theme of the menu, or the defaults (is_default=true)."""
    restaurant_id = owner_restaurant_id(MenuService(db), menu_id, user)
    return ThemeService(db).get_theme(menu_id, restaurant_id)


@router.put("/menus/{menu_id}/theme", response_model=ThemeOutput)
def upsert_theme(
    menu_id: int,
    body: ThemeUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> ThemeOutput:
    """Create or update the theme. Only the fields sent are changed."""
    restaurant_id = owner_restaurant_id(MenuService(db), menu_id, user)
    return ThemeService(db).upsert_theme(
        menu_id,
        restaurant_id,
        body.model_dump(exclude_unset=True),
        get_user_id(user),
        get_user_email(user),
    )
