"""
Domain Services - Clean Architecture Application Layer.

Services contain business logic and orchestrate operations.
They use Repositories for data access.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import CategoryService

    # In router
    service = CategoryService(db)
    categories = service.list_with_items(restaurant_id, menu_id)
"""

from .restaurant_service import RestaurantService
from .branch_service import BranchService
from .menu_service import MenuService
from .category_service import CategoryService
from .menu_item_service import MenuItemService
from .theme_service import ThemeService
from .order_service import OrderService
from .public_menu_service import PublicMenuService
from .auth_service import AuthService
from .user_service import UserService
from .registration_service import RegistrationService
from .dashboard_service import DashboardService

__all__ = [
    # Tenants
    "RestaurantService",
    "BranchService",
    # Menu content
    "MenuService",
    "CategoryService",
    "MenuItemService",
    "ThemeService",
    # Orders
    "OrderService",
    "PublicMenuService",
    # Accounts
    "AuthService",
    "UserService",
    "RegistrationService",
    "DashboardService",
]
