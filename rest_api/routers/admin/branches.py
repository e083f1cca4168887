"""
Branch management endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common.base import get_user_email, get_user_id
from rest_api.routers.admin._base import ensure_restaurant_access, owner_restaurant_id, require_admin
from rest_api.services.domain import BranchService
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import BranchCreate, BranchOutput, BranchUpdate, SetMainBranchRequest


router = APIRouter(tags=["admin-branches"])


@router.get("/restaurants/{restaurant_id}/branches", response_model=list[BranchOutput])
def list_branches(
    restaurant_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> list[BranchOutput]:
    """List active branches, main branch first."""
    ensure_restaurant_access(user, restaurant_id)
    return BranchService(db).list_for_restaurant(restaurant_id)


@router.post(
    "/restaurants/{restaurant_id}/branches",
    response_model=BranchOutput,
    status_code=status.HTTP_201_CREATED,
)
def create_branch(
    restaurant_id: int,
    body: BranchCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> BranchOutput:
    """Create a branch. The first branch of a restaurant becomes its main branch."""
    ensure_restaurant_access(user, restaurant_id)
    return BranchService(db).create(
        body.model_dump(),
        restaurant_id,
        get_user_id(user),
        get_user_email(user),
    )


@router.patch("/restaurants/{restaurant_id}/branches/main", response_model=BranchOutput)
def set_main_branch(
    restaurant_id: int,
    body: SetMainBranchRequest,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> BranchOutput:
    """Make a branch the main branch of the restaurant."""
    ensure_restaurant_access(user, restaurant_id)
    return BranchService(db).set_main(
        restaurant_id,
        body.branch_id,
        get_user_id(user),
        get_user_email(user),
    )


@router.get("/branches/{branch_id}", response_model=BranchOutput)
def get_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> BranchOutput:
    service = BranchService(db)
    restaurant_id = owner_restaurant_id(service, branch_id, user)
    return service.get_by_id(branch_id, restaurant_id)


@router.put("/branches/{branch_id}", response_model=BranchOutput)
def replace_branch(
    branch_id: int,
    body: BranchUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> BranchOutput:
    """Replace a branch. Name and address are required; is_main can only be turned on."""
    service = BranchService(db)
    restaurant_id = owner_restaurant_id(service, branch_id, user)
    return service.replace(
        branch_id,
        body.model_dump(),
        restaurant_id,
        get_user_id(user),
        get_user_email(user),
    )


@router.delete("/branches/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> None:
    """Soft delete a branch. The main branch cannot be deleted."""
    service = BranchService(db)
    restaurant_id = owner_restaurant_id(service, branch_id, user)
    service.delete(branch_id, restaurant_id, get_user_id(user), get_user_email(user))
