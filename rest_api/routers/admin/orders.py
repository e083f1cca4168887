"""
Order management endpoints.

Kitchen users read orders and move them from confirmed to preparing and from
preparing to ready; every other transition needs an admin.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from rest_api.routers._common.base import get_user_email, get_user_id
from rest_api.routers._common.pagination import Pagination, get_pagination, set_total_count
from rest_api.routers.admin._base import (
    ensure_restaurant_access,
    owner_restaurant_id,
    require_admin,
    require_order_reader,
)
from rest_api.services.domain import OrderService
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import OrderCreate, OrderOutput, OrderStatusUpdate
from shared.utils.schemas import OrderStatusLiteral


router = APIRouter(tags=["admin-orders"])


@router.get("/restaurants/{restaurant_id}/orders", response_model=list[OrderOutput])
def list_orders(
    restaurant_id: int,
    response: Response,
    status_filter: OrderStatusLiteral | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    user: dict = Depends(require_order_reader),
) -> list[OrderOutput]:
    """List orders newest first with their items, optionally by status."""
    ensure_restaurant_access(user, restaurant_id)
    service = OrderService(db)
    set_total_count(response, service.count_orders(restaurant_id, status=status_filter))
    return service.list_orders(
        restaurant_id,
        status=status_filter,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.post(
    "/restaurants/{restaurant_id}/orders",
    response_model=OrderOutput,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    restaurant_id: int,
    body: OrderCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> OrderOutput:
    """Create a pending order on behalf of a customer (phone or counter orders)."""
    ensure_restaurant_access(user, restaurant_id)
    order = OrderService(db).create_order(
        restaurant_id,
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        items=[item.model_dump() for item in body.items],
        branch_id=body.branch_id,
        notes=body.notes,
        user_id=get_user_id(user),
        user_email=get_user_email(user),
    )
    return OrderOutput.model_validate(order)


@router.get("/orders/{order_id}", response_model=OrderOutput)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_order_reader),
) -> OrderOutput:
    service = OrderService(db)
    restaurant_id = owner_restaurant_id(service, order_id, user)
    return service.get_order(order_id, restaurant_id)


@router.patch("/orders/{order_id}/status", response_model=OrderOutput)
def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_order_reader),
) -> OrderOutput:
    """Move an order to a new status (400 for an invalid transition)."""
    service = OrderService(db)
    restaurant_id = owner_restaurant_id(service, order_id, user)
    return service.update_status(
        order_id,
        restaurant_id,
        body.status,
        user.get("roles", []),
        get_user_id(user),
        get_user_email(user),
    )


@router.delete("/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> None:
    """Soft delete an order. Requires an admin role."""
    service = OrderService(db)
    restaurant_id = owner_restaurant_id(service, order_id, user)
    service.delete(order_id, restaurant_id, get_user_id(user), get_user_email(user))
