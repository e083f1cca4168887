"""
Pydantic schemas for admin, public and registration API endpoints.
Centralized so services and routers share them without circular imports.

Money is always in integer cents (menu items, orders) except plan prices,
which are whole CLP.
"""

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

from shared.config.constants import Limits
from shared.utils.schemas import OrderStatusLiteral, Role, TransactionStatusLiteral
from shared.utils.validators import validate_hex_color

HeaderStyle = Literal["default", "minimal", "fullwidth"]
FooterStyle = Literal["default", "minimal", "detailed"]
ItemLayout = Literal["grid", "list", "compact"]

NameStr = Annotated[str, Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)]
USERNAME_PATTERN = r"^[A-Za-z0-9_.\-]+$"


class _ColorFields(BaseModel):
    """Mixin validating primary/secondary colors as #RGB or #RRGGBB."""

    @field_validator("primary_color", "secondary_color", check_fields=False)
    @classmethod
    def _check_color(cls, value: str | None) -> str | None:
        return validate_hex_color(value)


# =============================================================================
# Restaurant Schemas
# =============================================================================


class RestaurantOutput(BaseModel):
    id: int
    name: str
    description: str | None = None
    logo_url: str | None = None
    primary_color: str
    secondary_color: str
    address: str | None = None
    phone: str | None = None
    whatsapp: str | None = None
    email: str | None = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RestaurantCreate(_ColorFields):
    name: NameStr
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    logo_url: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    # Also used as the main branch address
    address: str = Field(min_length=1, max_length=500)
    phone: str | None = None
    whatsapp: str | None = None
    email: EmailStr | None = None
    main_branch_name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)


class RestaurantUpdate(_ColorFields):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    logo_url: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    address: str | None = None
    phone: str | None = None
    whatsapp: str | None = None
    email: EmailStr | None = None


class RestaurantUpdateResponse(BaseModel):
    restaurant: RestaurantOutput
    changed_fields: list[str]


class BrandColorsOutput(BaseModel):
    primary_color: str
    secondary_color: str
    primary_foreground: str
    secondary_foreground: str


# =============================================================================
# Branch Schemas
# =============================================================================


class BranchOutput(BaseModel):
    id: int
    restaurant_id: int
    name: str
    address: str
    phone: str | None = None
    whatsapp: str | None = None
    email: str | None = None
    is_main: bool
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class BranchSummary(BaseModel):
    id: int
    name: str
    is_main: bool

    class Config:
        from_attributes = True


class BranchCreate(BaseModel):
    name: NameStr
    address: str = Field(min_length=1, max_length=500)
    phone: str | None = None
    whatsapp: str | None = None
    email: EmailStr | None = None
    is_main: bool = False


class BranchUpdate(BaseModel):
    """Full replacement (PUT): name and address are required."""

    name: NameStr
    address: str = Field(min_length=1, max_length=500)
    phone: str | None = None
    whatsapp: str | None = None
    email: EmailStr | None = None
    is_main: bool | None = None


class SetMainBranchRequest(BaseModel):
    branch_id: int


# =============================================================================
# Menu Item Schemas
# =============================================================================


class MenuItemOutput(BaseModel):
    id: int
    restaurant_id: int
    category_id: int
    name: str
    description: str | None = None
    price_cents: int
    image_url: str | None = None
    is_available: bool
    is_featured: bool
    order: int
    is_active: bool

    class Config:
        from_attributes = True


class MenuItemCreate(BaseModel):
    name: NameStr
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price_cents: int = Field(ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)
    image_url: str | None = None
    is_available: bool = True
    is_featured: bool = False
    order: int | None = Field(default=None, ge=0)


class MenuItemUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price_cents: int | None = Field(default=None, ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)
    image_url: str | None = None
    is_available: bool | None = None
    is_featured: bool | None = None
    order: int | None = Field(default=None, ge=0)


# =============================================================================
# Category Schemas
# =============================================================================


class CategoryOutput(BaseModel):
    id: int
    restaurant_id: int
    branch_id: int
    menu_id: int
    name: str
    description: str | None = None
    order: int
    is_active: bool

    class Config:
        from_attributes = True


class CategoryWithItemsOutput(CategoryOutput):
    items: list[MenuItemOutput] = []


class CategoryCreate(BaseModel):
    menu_id: int
    name: NameStr
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    order: int | None = Field(default=None, ge=0)


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    order: int | None = Field(default=None, ge=0)


# =============================================================================
# Menu Schemas
# =============================================================================


class MenuOutput(BaseModel):
    id: int
    restaurant_id: int
    branch_id: int
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class MenuDetailOutput(MenuOutput):
    branch: BranchSummary | None = None
    categories: list[CategoryWithItemsOutput] = []


class MenuCreate(BaseModel):
    name: NameStr
    branch_id: int
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    is_active: bool = True


class MenuUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    branch_id: int | None = None
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    is_active: bool | None = None


# =============================================================================
# Theme Schemas
# =============================================================================


class ThemeOutput(BaseModel):
    menu_id: int
    primary_color: str
    secondary_color: str
    font_family: str
    logo_url: str | None = None
    background_image_url: str | None = None
    show_prices: bool
    enable_ordering: bool
    header_style: HeaderStyle
    footer_style: FooterStyle
    item_layout: ItemLayout
    # True when no theme is stored and defaults are returned
    is_default: bool = False

    class Config:
        from_attributes = True


class ThemeUpdate(_ColorFields):
    primary_color: str | None = None
    secondary_color: str | None = None
    font_family: str | None = Field(default=None, min_length=1, max_length=100)
    logo_url: str | None = None
    background_image_url: str | None = None
    show_prices: bool | None = None
    enable_ordering: bool | None = None
    header_style: HeaderStyle | None = None
    footer_style: FooterStyle | None = None
    item_layout: ItemLayout | None = None


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemInput(BaseModel):
    menu_item_id: int
    quantity: int = Field(ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class OrderCreate(BaseModel):
    customer_name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    customer_phone: str = Field(min_length=3, max_length=30)
    branch_id: int | None = None
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    items: list[OrderItemInput] = Field(min_length=1, max_length=Limits.MAX_ORDER_ITEMS)

    class Config:
        str_strip_whitespace = True


class OrderItemOutput(BaseModel):
    id: int
    menu_item_id: int | None = None
    name: str
    quantity: int
    unit_price_cents: int
    line_total_cents: int
    notes: str | None = None

    class Config:
        from_attributes = True


class OrderOutput(BaseModel):
    id: int
    restaurant_id: int
    branch_id: int | None = None
    customer_name: str
    customer_phone: str
    status: OrderStatusLiteral
    total_cents: int
    notes: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    items: list[OrderItemOutput] = []

    class Config:
        from_attributes = True


class OrderSummary(BaseModel):
    id: int
    customer_name: str
    status: OrderStatusLiteral
    total_cents: int
    created_at: datetime

    class Config:
        from_attributes = True


class OrderStatusUpdate(BaseModel):
    status: OrderStatusLiteral


# =============================================================================
# Public Menu Schemas
# =============================================================================


class PublicRestaurantOutput(BaseModel):
    id: int
    name: str
    description: str | None = None
    logo_url: str | None = None
    primary_color: str
    secondary_color: str
    primary_foreground: str
    secondary_foreground: str
    whatsapp: str | None = None
    address: str | None = None
    phone: str | None = None


class PublicMenuOutput(BaseModel):
    id: int
    name: str
    description: str | None = None
    branch: BranchSummary | None = None
    theme: ThemeOutput
    categories: list[CategoryWithItemsOutput] = []


class PublicOrderCreate(BaseModel):
    customer_name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    customer_phone: str = Field(min_length=3, max_length=30)
    menu_id: int | None = None
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    items: list[OrderItemInput] = Field(min_length=1, max_length=Limits.MAX_ORDER_ITEMS)

    class Config:
        str_strip_whitespace = True


class PublicOrderResponse(BaseModel):
    order: OrderOutput
    whatsapp_url: str | None = None


# =============================================================================
# User Schemas
# =============================================================================


class UserOutput(BaseModel):
    id: int
    email: str
    full_name: str | None = None
    role: Role
    restaurant_id: int | None = None
    is_active: bool
    username: str | None = None
    is_locked: bool = False
    failed_attempts: int = 0
    last_login: datetime | None = None
    created_at: datetime


class UserCreate(BaseModel):
    email: EmailStr
    full_name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    username: str = Field(min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=1, max_length=200)
    role: Role
    restaurant_id: int | None = None


class UserUpdate(BaseModel):
    full_name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    role: Role | None = None
    restaurant_id: int | None = None
    is_active: bool | None = None
    password: str | None = Field(default=None, min_length=1, max_length=200)


# =============================================================================
# Registration Schemas
# =============================================================================


class PlanOutput(BaseModel):
    id: int
    name: str
    description: str | None = None
    price: int
    features: list[Any] = []
    is_popular: bool

    class Config:
        from_attributes = True


class CheckoutRequest(BaseModel):
    email: EmailStr
    plan_id: int


class CheckoutResponse(BaseModel):
    transaction_id: int
    plan_id: int
    amount: int
    status: TransactionStatusLiteral


class WebpayInitRequest(BaseModel):
    transaction_id: int


class WebpayInitResponse(BaseModel):
    token: str
    url: str


class WebpayConfirmRequest(BaseModel):
    token: str = Field(min_length=1, max_length=200)
    success: bool = True


class WebpayConfirmResponse(BaseModel):
    success: bool
    transaction_id: int
    status: TransactionStatusLiteral


class RegisterRestaurantData(_ColorFields):
    name: NameStr
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    logo_url: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    address: str | None = Field(default=None, max_length=500)
    phone: str | None = None
    whatsapp: str | None = None


class RegisterAdminData(BaseModel):
    username: str = Field(min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=1, max_length=200)
    confirm_password: str = Field(min_length=1, max_length=200)
    full_name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)


class RegisterRequest(BaseModel):
    transaction_id: int
    restaurant: RegisterRestaurantData
    admin: RegisterAdminData


class RegisterResponse(BaseModel):
    success: bool = True
    restaurant_id: int
    user_id: int
    username: str


# =============================================================================
# Dashboard Schemas
# =============================================================================


class RestaurantDashboard(BaseModel):
    restaurant_id: int
    total_orders: int
    revenue_cents: int
    distinct_customers: int
    pending_orders: int
    menus: int
    branches: int
    recent_orders: list[OrderSummary]


class AdminOverview(BaseModel):
    restaurants: int
    active_restaurants: int
    users: int
    orders: int
    revenue_cents: int
