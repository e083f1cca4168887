"""
Menu Models: Menu, Category, MenuItem, MenuTheme.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import DefaultColors, ThemeOptions
from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .restaurant import Branch, Restaurant


class Menu(AuditMixin, Base):
    """
    A named collection of categories served at one branch.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "menu"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    branch_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("branch.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship(back_populates="menus")
    branch: Mapped["Branch"] = relationship(back_populates="menus")
    categories: Mapped[list["Category"]] = relationship(
        back_populates="menu", order_by="Category.order"
    )
    theme: Mapped[Optional["MenuTheme"]] = relationship(
        back_populates="menu", uselist=False
    )

    def __repr__(self) -> str:
        return f"<Menu(id={self.id}, name='{self.name}', branch_id={self.branch_id})>"


class Category(AuditMixin, Base):
    """
    A grouping of menu items within a menu.
    branch_id is copied from the menu so branch-level queries need no join.
    """

    __tablename__ = "category"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    branch_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("branch.id"), nullable=False, index=True
    )
    menu_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("menu.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    menu: Mapped["Menu"] = relationship(back_populates="categories")
    items: Mapped[list["MenuItem"]] = relationship(
        back_populates="category", order_by="MenuItem.order"
    )

    __table_args__ = (
        Index("ix_category_menu_order", "menu_id", "order"),
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}', menu_id={self.menu_id})>"


class MenuItem(AuditMixin, Base):
    """
    A dish or product on sale. Prices are stored in cents.
    """

    __tablename__ = "menu_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    category_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("category.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    category: Mapped["Category"] = relationship(back_populates="items")

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="chk_menu_item_price_non_negative"),
        Index("ix_menu_item_category_order", "category_id", "order"),
    )

    def __repr__(self) -> str:
        return f"<MenuItem(id={self.id}, name='{self.name}', price_cents={self.price_cents})>"


class MenuTheme(AuditMixin, Base):
    """
    Presentation settings of the public page of one menu.
    """

    __tablename__ = "menu_theme"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    menu_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("menu.id"), nullable=False, unique=True
    )
    primary_color: Mapped[str] = mapped_column(Text, default=DefaultColors.PRIMARY, nullable=False)
    secondary_color: Mapped[str] = mapped_column(Text, default=DefaultColors.SECONDARY, nullable=False)
    font_family: Mapped[str] = mapped_column(Text, default=DefaultColors.FONT_FAMILY, nullable=False)
    logo_url: Mapped[Optional[str]] = mapped_column(Text)
    background_image_url: Mapped[Optional[str]] = mapped_column(Text)
    show_prices: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    enable_ordering: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    header_style: Mapped[str] = mapped_column(Text, default=ThemeOptions.HEADER_DEFAULT, nullable=False)
    footer_style: Mapped[str] = mapped_column(Text, default=ThemeOptions.FOOTER_DEFAULT, nullable=False)
    item_layout: Mapped[str] = mapped_column(Text, default=ThemeOptions.LAYOUT_DEFAULT, nullable=False)

    menu: Mapped["Menu"] = relationship(back_populates="theme")

    def __repr__(self) -> str:
        return f"<MenuTheme(menu_id={self.menu_id}, layout='{self.item_layout}')>"
