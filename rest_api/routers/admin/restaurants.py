"""
Restaurant management endpoints.

Root admins manage every restaurant; restaurant admins read and update
their own settings.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common.base import current_user_context as current_user
from rest_api.routers._common.base import get_user_email, get_user_id
from rest_api.routers.admin._base import ensure_restaurant_access, require_admin, require_root_admin
from rest_api.services.domain import RestaurantService
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import (
    BrandColorsOutput,
    RestaurantCreate,
    RestaurantOutput,
    RestaurantUpdate,
    RestaurantUpdateResponse,
)


router = APIRouter(tags=["admin-restaurants"])


@router.get("/restaurants", response_model=list[RestaurantOutput])
def list_restaurants(
    db: Session = Depends(get_db),
    user: dict = Depends(require_root_admin),
) -> list[RestaurantOutput]:
    """List every restaurant, newest first. Requires root_admin."""
    return RestaurantService(db).list_all()


@router.post("/restaurants", response_model=RestaurantOutput, status_code=status.HTTP_201_CREATED)
def create_restaurant(
    body: RestaurantCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_root_admin),
) -> RestaurantOutput:
    """Create a restaurant and its main branch. Requires root_admin."""
    return RestaurantService(db).create(
        body.model_dump(),
        get_user_id(user),
        get_user_email(user),
    )


@router.get("/restaurants/{restaurant_id}", response_model=RestaurantOutput)
def get_restaurant(
    restaurant_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> RestaurantOutput:
    """Restaurant settings."""
    ensure_restaurant_access(user, restaurant_id)
    return RestaurantService(db).get(restaurant_id)


@router.patch("/restaurants/{restaurant_id}", response_model=RestaurantUpdateResponse)
def update_restaurant(
    restaurant_id: int,
    body: RestaurantUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> RestaurantUpdateResponse:
    """Update restaurant settings and report which fields changed."""
    ensure_restaurant_access(user, restaurant_id)
    restaurant, changed = RestaurantService(db).update(
        restaurant_id,
        body.model_dump(exclude_unset=True),
        get_user_id(user),
        get_user_email(user),
    )
    return RestaurantUpdateResponse(restaurant=restaurant, changed_fields=changed)


@router.get("/restaurants/{restaurant_id}/colors", response_model=BrandColorsOutput)
def get_brand_colors(
    restaurant_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> BrandColorsOutput:
    """Brand colors with defaults applied and a readable text color for each."""
    ensure_restaurant_access(user, restaurant_id)
    return RestaurantService(db).get_brand_colors(restaurant_id)


@router.delete("/restaurants/{restaurant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_restaurant(
    restaurant_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_root_admin),
) -> None:
    """Soft delete a restaurant. Requires root_admin."""
    RestaurantService(db).delete(restaurant_id, get_user_id(user), get_user_email(user))
