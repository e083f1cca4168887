"""
Admin API router - combines all admin sub-routers.

This module provides a single router that includes all admin endpoints
organized by domain:

- restaurants: Restaurant CRUD and brand colors
- branches: Branch CRUD and the main branch
- menus: Menu CRUD
- categories: Category CRUD
- menu_items: Menu item CRUD
- themes: Menu theme settings
- orders: Orders and the status workflow
- users: User management and unlocking
- dashboard: Restaurant figures and platform overview

All routes are prefixed with /api
"""

from fastapi import APIRouter

from .restaurants import router as restaurants_router
from .branches import router as branches_router
from .menus import router as menus_router
from .categories import router as categories_router
from .menu_items import router as menu_items_router
from .themes import router as themes_router
from .orders import router as orders_router
from .users import router as users_router
from .dashboard import router as dashboard_router


# Create the main admin router
router = APIRouter(prefix="/api")

# Include all sub-routers
# Note: Order matters for route matching - more specific routes first

# Tenants
router.include_router(restaurants_router)
router.include_router(branches_router)

# Menu content
router.include_router(menus_router)
router.include_router(categories_router)
router.include_router(menu_items_router)
router.include_router(themes_router)

# Operations
router.include_router(orders_router)
router.include_router(users_router)
router.include_router(dashboard_router)

__all__ = ["router"]
