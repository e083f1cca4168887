"""
Public menu endpoints - no authentication required.

Customers open a restaurant's page, browse its published menus and place an
order that is forwarded to the restaurant through WhatsApp.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from rest_api.services.domain import PublicMenuService
from shared.infrastructure.db import get_db
from shared.security.rate_limit import PUBLIC_ORDER_RATE_LIMIT, PUBLIC_READ_RATE_LIMIT, limiter
from shared.utils.admin_schemas import (
    PublicMenuOutput,
    PublicOrderCreate,
    PublicOrderResponse,
    PublicRestaurantOutput,
)


router = APIRouter(prefix="/api/public", tags=["public"])


@router.get("/restaurants/{restaurant_id}", response_model=PublicRestaurantOutput)
@limiter.limit(PUBLIC_READ_RATE_LIMIT)
def get_public_restaurant(
    request: Request,
    response: Response,
    restaurant_id: int,
    db: Session = Depends(get_db),
) -> PublicRestaurantOutput:
    """Public profile of an active restaurant."""
    return PublicMenuService(db).get_restaurant(restaurant_id)


@router.get("/restaurants/{restaurant_id}/menus", response_model=list[PublicMenuOutput])
@limiter.limit(PUBLIC_READ_RATE_LIMIT)
def list_public_menus(
    request: Request,
    response: Response,
    restaurant_id: int,
    branch_id: int | None = None,
    db: Session = Depends(get_db),
) -> list[PublicMenuOutput]:
    """Published menus with their theme, active categories and available items."""
    return PublicMenuService(db).list_menus(restaurant_id, branch_id)


@router.post(
    "/restaurants/{restaurant_id}/orders",
    response_model=PublicOrderResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(PUBLIC_ORDER_RATE_LIMIT)
def place_public_order(
    request: Request,
    response: Response,
    restaurant_id: int,
    body: PublicOrderCreate,
    db: Session = Depends(get_db),
) -> PublicOrderResponse:
    """
    Place a pending order and get the WhatsApp link that sends it to the
    restaurant. whatsapp_url is null when the restaurant has no number.
    """
    data = body.model_dump()
    return PublicMenuService(db).place_order(restaurant_id, data)
