"""
Registration Service - self sign-up of a new restaurant.

Flow:
    1. GET  /api/plans              pick a plan
    2. POST /api/register/checkout  pending WebpayTransaction for the plan price
    3. POST /api/webpay/init        simulated Webpay token + redirect URL
    4. POST /api/webpay/confirm     transaction completed (or failed)
    5. POST /api/register           restaurant + main branch + admin user,
                                    consuming the completed transaction
"""

from __future__ import annotations

import secrets
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import Credential, Plan, User, WebpayTransaction
from rest_api.services.domain.auth_service import hash_new_password
from rest_api.services.domain.branch_service import BranchService
from rest_api.services.domain.restaurant_service import RestaurantService
from shared.config.constants import Roles, TransactionStatus
from shared.config.logging import mask_email, mask_token, registration_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.utils.admin_schemas import (
    CheckoutResponse,
    PlanOutput,
    RegisterResponse,
    WebpayConfirmResponse,
    WebpayInitResponse,
)
from shared.utils.exceptions import (
    AppException,
    ConflictError,
    DatabaseError,
    DuplicateEntityError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

# Plans created on first startup when the table is empty (prices in CLP)
DEFAULT_PLANS: list[dict[str, Any]] = [
    {
        "name": "Básico",
        "description": "Para restaurantes que recién comienzan",
        "price": 9990,
        "features": ["1 sucursal", "1 menú digital", "Pedidos por WhatsApp"],
        "is_popular": False,
    },
    {
        "name": "Profesional",
        "description": "El más elegido por restaurantes en crecimiento",
        "price": 19990,
        "features": [
            "Hasta 3 sucursales",
            "Menús ilimitados",
            "Temas personalizados",
            "Usuarios de cocina",
        ],
        "is_popular": True,
    },
    {
        "name": "Empresarial",
        "description": "Cadenas con muchas sucursales",
        "price": 39990,
        "features": [
            "Sucursales ilimitadas",
            "Menús ilimitados",
            "Temas personalizados",
            "Soporte prioritario",
        ],
        "is_popular": False,
    },
]


def seed_default_plans(db: Session) -> int:
    """Insert DEFAULT_PLANS when no plan exists. Returns the number created."""
    if db.scalar(select(func.count(Plan.id))):
        return 0
    for values in DEFAULT_PLANS:
        db.add(Plan(**values))
    safe_commit(db)
    logger.info("Default plans created", count=len(DEFAULT_PLANS))
    return len(DEFAULT_PLANS)


def _random_suffix() -> str:
    return secrets.token_hex(7)


class RegistrationService:
    """Plans, simulated Webpay payments and restaurant sign-up."""

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Plans / Checkout
    # =========================================================================

    def list_plans(self) -> list[PlanOutput]:
        plans = self._db.scalars(
            select(Plan)
            .where(Plan.is_active.is_(True))
            .order_by(Plan.price, Plan.id)
        ).all()
        return [PlanOutput.model_validate(p) for p in plans]

    def checkout(self, email: str, plan_id: int) -> CheckoutResponse:
        """
        Start a payment for a plan.

        Raises:
            ValidationError: The email already has an account.
            NotFoundError: Unknown or inactive plan.
        """
        email = email.strip().lower()
        self._ensure_email_free(email)

        plan = self._db.scalar(
            select(Plan).where(Plan.id == plan_id, Plan.is_active.is_(True))
        )
        if plan is None:
            raise NotFoundError("Plan", plan_id)

        transaction = WebpayTransaction(
            user_email=email,
            amount=plan.price,
            plan_id=plan.id,
            status=TransactionStatus.PENDING,
        )
        self._db.add(transaction)
        try:
            safe_commit(self._db)
            self._db.refresh(transaction)
        except Exception as e:
            logger.error("Failed to create transaction", error=str(e), email=mask_email(email))
            raise DatabaseError("create transaction")

        logger.info(
            "Checkout started",
            transaction_id=transaction.id,
            plan_id=plan.id,
            amount=plan.price,
            email=mask_email(email),
        )
        return CheckoutResponse(
            transaction_id=transaction.id,
            plan_id=plan.id,
            amount=transaction.amount,
            status=transaction.status,
        )

    # =========================================================================
    # Webpay simulator
    # =========================================================================

    def init_webpay(self, transaction_id: int) -> WebpayInitResponse:
        """Assign a simulated Webpay token to a pending transaction."""
        transaction = self._db.get(WebpayTransaction, transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        if transaction.status != TransactionStatus.PENDING:
            raise InvalidStateError(
                "Transaction", transaction.status, [TransactionStatus.PENDING],
                transaction_id=transaction_id,
            )

        transaction.webpay_token = f"WEBPAY-{_random_suffix()}"
        transaction.webpay_session_id = f"SESSION-{_random_suffix()}"
        safe_commit(self._db)

        logger.info(
            "Webpay initialized",
            transaction_id=transaction_id,
            token=mask_token(transaction.webpay_token),
        )
        return WebpayInitResponse(
            token=transaction.webpay_token,
            url=f"{settings.webpay_simulator_path}?token={transaction.webpay_token}",
        )

    def confirm_webpay(self, token: str, success: bool = True) -> WebpayConfirmResponse:
        """Settle a pending transaction as completed, or failed when success is False."""
        transaction = self._db.scalar(
            select(WebpayTransaction).where(WebpayTransaction.webpay_token == token)
        )
        if transaction is None:
            raise NotFoundError("Transaction")
        if transaction.status != TransactionStatus.PENDING:
            raise InvalidStateError(
                "Transaction", transaction.status, [TransactionStatus.PENDING],
                transaction_id=transaction.id,
            )

        transaction.status = TransactionStatus.COMPLETED if success else TransactionStatus.FAILED
        safe_commit(self._db)

        logger.info(
            "Webpay confirmed",
            transaction_id=transaction.id,
            status=transaction.status,
        )
        return WebpayConfirmResponse(
            success=success,
            transaction_id=transaction.id,
            status=transaction.status,
        )

    # =========================================================================
    # Sign-up
    # =========================================================================

    def register(
        self,
        transaction_id: int,
        restaurant_data: dict[str, Any],
        admin_data: dict[str, Any],
    ) -> RegisterResponse:
        """
        Create the restaurant, its main branch and its admin in one transaction.

        Raises:
            NotFoundError: Unknown transaction.
            ValidationError: Transaction not completed, passwords differ,
                email or username taken.
            ConflictError: Transaction already used.
        """
        transaction = self._db.get(WebpayTransaction, transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        if transaction.is_consumed:
            raise ConflictError(
                "Transaction already used for a registration",
                transaction_id=transaction_id,
            )
        if transaction.status != TransactionStatus.COMPLETED:
            raise InvalidStateError(
                "Transaction", transaction.status, [TransactionStatus.COMPLETED],
                transaction_id=transaction_id,
            )
        if admin_data["password"] != admin_data["confirm_password"]:
            raise ValidationError("Passwords do not match")

        email = transaction.user_email
        username = admin_data["username"].strip()
        self._ensure_email_free(email)
        if self._db.scalar(select(func.count(Credential.id)).where(Credential.username == username)):
            raise DuplicateEntityError("Username", username)
        password_hash = hash_new_password(admin_data["password"])

        try:
            restaurant = RestaurantService(self._db).build_restaurant(
                {**restaurant_data, "email": email}, None, email
            )
            self._db.flush()

            if restaurant_data.get("address"):
                BranchService(self._db).create_main_branch(
                    restaurant.id,
                    restaurant.name,
                    restaurant_data["address"],
                    None,
                    email,
                    phone=restaurant.phone,
                    whatsapp=restaurant.whatsapp,
                    email=email,
                )

            user = User(
                email=email,
                full_name=admin_data.get("full_name"),
                role=Roles.RESTAURANT_ADMIN,
                restaurant_id=restaurant.id,
            )
            user.set_created_by(None, email)
            user.credential = Credential(username=username, password_hash=password_hash)
            self._db.add(user)

            transaction.restaurant_id = restaurant.id
            safe_commit(self._db)
        except AppException:
            self._db.rollback()
            raise
        except Exception as e:
            self._db.rollback()
            logger.error(
                "Registration failed",
                error=str(e),
                transaction_id=transaction_id,
                email=mask_email(email),
            )
            raise DatabaseError("register restaurant")

        logger.info(
            "Restaurant registered",
            restaurant_id=restaurant.id,
            user_id=user.id,
            plan_id=transaction.plan_id,
            transaction_id=transaction_id,
        )
        return RegisterResponse(
            restaurant_id=restaurant.id,
            user_id=user.id,
            username=username,
        )

    def _ensure_email_free(self, email: str) -> None:
        if self._db.scalar(select(func.count(User.id)).where(User.email == email)):
            raise ValidationError("Email is already registered", email=mask_email(email))
