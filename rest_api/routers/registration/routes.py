"""
Registration router - plans, simulated Webpay payment and restaurant sign-up.
No authentication required.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from rest_api.services.domain import RegistrationService
from shared.infrastructure.db import get_db
from shared.security.rate_limit import LOGIN_RATE_LIMIT, limiter
from shared.utils.admin_schemas import (
    CheckoutRequest,
    CheckoutResponse,
    PlanOutput,
    RegisterRequest,
    RegisterResponse,
    WebpayConfirmRequest,
    WebpayConfirmResponse,
    WebpayInitRequest,
    WebpayInitResponse,
)


router = APIRouter(prefix="/api", tags=["registration"])


@router.get("/plans", response_model=list[PlanOutput])
def list_plans(db: Session = Depends(get_db)) -> list[PlanOutput]:
    """Active plans, cheapest first."""
    return RegistrationService(db).list_plans()


@router.post(
    "/register/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
def checkout(body: CheckoutRequest, db: Session = Depends(get_db)) -> CheckoutResponse:
    """Start the payment of a plan for an email that has no account yet."""
    return RegistrationService(db).checkout(body.email, body.plan_id)


@router.post("/webpay/init", response_model=WebpayInitResponse)
def init_webpay(body: WebpayInitRequest, db: Session = Depends(get_db)) -> WebpayInitResponse:
    """Get the simulated Webpay token and the simulator URL to redirect to."""
    return RegistrationService(db).init_webpay(body.transaction_id)


@router.post("/webpay/confirm", response_model=WebpayConfirmResponse)
def confirm_webpay(
    body: WebpayConfirmRequest,
    db: Session = Depends(get_db),
) -> WebpayConfirmResponse:
    """Settle the simulated payment (success=false marks it failed)."""
    return RegistrationService(db).confirm_webpay(body.token, body.success)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(LOGIN_RATE_LIMIT)
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    db: Session = Depends(get_db),
) -> RegisterResponse:
    """Create the restaurant, its main branch and its admin from a paid transaction."""
    return RegistrationService(db).register(
        body.transaction_id,
        body.restaurant.model_dump(),
        body.admin.model_dump(),
    )
