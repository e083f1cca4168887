"""
Theme Service - presentation settings of a menu's public page.

A menu has at most one MenuTheme row; menus without one render with the
defaults below.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Menu, MenuTheme
from rest_api.services.crud.soft_delete import set_created_by, set_updated_by
from rest_api.services.domain.menu_service import MenuService
from shared.config.constants import DefaultColors, ThemeOptions
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.admin_schemas import ThemeOutput
from shared.utils.exceptions import DatabaseError, ValidationError
from shared.utils.validators import validate_image_url

logger = get_logger(__name__)

THEME_DEFAULTS: dict[str, Any] = {
    "primary_color": DefaultColors.PRIMARY,
    "secondary_color": DefaultColors.SECONDARY,
    "font_family": DefaultColors.FONT_FAMILY,
    "logo_url": None,
    "background_image_url": None,
    "show_prices": True,
    "enable_ordering": True,
    "header_style": ThemeOptions.HEADER_DEFAULT,
    "footer_style": ThemeOptions.FOOTER_DEFAULT,
    "item_layout": ThemeOptions.LAYOUT_DEFAULT,
}

_IMAGE_FIELDS = ("logo_url", "background_image_url")


def default_theme(menu_id: int) -> ThemeOutput:
    return ThemeOutput(menu_id=menu_id, is_default=True, **THEME_DEFAULTS)


def theme_for_menu(menu: Menu) -> ThemeOutput:
    """Stored theme of a loaded menu, or the defaults."""
    theme = menu.theme
    if theme is None or not theme.is_active:
        return default_theme(menu.id)
    return ThemeOutput.model_validate(theme)


class ThemeService:
    """Read and upsert menu themes."""

    def __init__(self, db: Session):
        self._db = db
        self._menus = MenuService(db)

    def _find(self, menu_id: int) -> MenuTheme | None:
        return self._db.scalar(
            select(MenuTheme).where(
                MenuTheme.menu_id == menu_id,
                MenuTheme.is_active.is_(True),
            )
        )

    def get_theme(self, menu_id: int, restaurant_id: int) -> ThemeOutput:
        menu = self._menus.get_entity(menu_id, restaurant_id)
        return theme_for_menu(menu)

    def upsert_theme(
        self,
        menu_id: int,
        restaurant_id: int,
        data: dict[str, Any],
        user_id: int | None,
        user_email: str | None,
    ) -> ThemeOutput:
        """
        Create or update the theme of a menu. Only the given fields change;
        a new theme starts from the defaults.
        """
        menu = self._menus.get_entity(menu_id, restaurant_id)

        for field_name in _IMAGE_FIELDS:
            if data.get(field_name):
                try:
                    data[field_name] = validate_image_url(data[field_name])
                except ValueError as e:
                    raise ValidationError(str(e), field=field_name)
        # None means "back to default" for fields that can't be empty
        for field_name, default in THEME_DEFAULTS.items():
            if field_name in data and data[field_name] is None and default is not None:
                data[field_name] = default

        theme = self._find(menu.id)
        if theme is None:
            theme = MenuTheme(
                menu_id=menu.id,
                restaurant_id=restaurant_id,
                **{**THEME_DEFAULTS, **data},
            )
            set_created_by(theme, user_id, user_email)
            self._db.add(theme)
        else:
            for field_name, value in data.items():
                setattr(theme, field_name, value)
            set_updated_by(theme, user_id, user_email)

        try:
            safe_commit(self._db)
            self._db.refresh(theme)
        except Exception as e:
            logger.error("Failed to save menu theme", error=str(e), menu_id=menu_id)
            raise DatabaseError("save menu theme")

        logger.info("Menu theme saved", menu_id=menu_id, fields=sorted(data), user_id=user_id)
        return ThemeOutput.model_validate(theme)
