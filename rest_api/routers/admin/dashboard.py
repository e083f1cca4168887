"""
Dashboard endpoints: per-restaurant figures and the platform overview.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.routers.admin._base import ensure_restaurant_access, require_admin, require_root_admin
from rest_api.services.domain import DashboardService, RestaurantService
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import AdminOverview, RestaurantDashboard


router = APIRouter(tags=["admin-dashboard"])


@router.get("/restaurants/{restaurant_id}/dashboard", response_model=RestaurantDashboard)
def restaurant_dashboard(
    restaurant_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> RestaurantDashboard:
    """Orders, revenue, customers, menus and branches of a restaurant."""
    ensure_restaurant_access(user, restaurant_id)
    RestaurantService(db).get_entity(restaurant_id)
    return DashboardService(db).restaurant_dashboard(restaurant_id)


@router.get("/admin/overview", response_model=AdminOverview)
def admin_overview(
    db: Session = Depends(get_db),
    user: dict = Depends(require_root_admin),
) -> AdminOverview:
    """Platform-wide figures. Requires root_admin."""
    return DashboardService(db).admin_overview()
