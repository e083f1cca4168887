"""
Seed data for first startup, development and testing.
Creates the subscription plans, the bootstrap root admin and, in development,
a demo restaurant with one menu.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import (
    Branch,
    Category,
    Credential,
    Menu,
    MenuItem,
    Restaurant,
    User,
)
from rest_api.services.domain.registration_service import seed_default_plans
from shared.config.constants import DefaultColors, Roles
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.password import hash_password

logger = get_logger(__name__)

# Demo accounts (development only)
DEMO_ADMIN_USERNAME = "demo_admin"
DEMO_KITCHEN_USERNAME = "demo_kitchen"
DEMO_PASSWORD = "demo1234"

DEMO_MENU: dict[str, list[tuple[str, str, int]]] = {
    "Entradas": [
        ("Empanada de pino", "Horneada, con carne, cebolla, huevo y aceituna", 2500_00),
        ("Sopaipillas", "Cuatro unidades con pebre", 1800_00),
    ],
    "Platos principales": [
        ("Pastel de choclo", "Gratinado en greda", 8900_00),
        ("Cazuela de vacuno", "Con zapallo, papa y choclo", 7500_00),
    ],
    "Bebidas": [
        ("Mote con huesillo", "Bebida tradicional", 2200_00),
        ("Jugo natural", "Frutilla, frambuesa o piña", 2500_00),
    ],
}


def seed_root_admin(db: Session) -> User | None:
    """
    Create the bootstrap root admin from settings when no root admin exists.
    An empty ROOT_ADMIN_PASSWORD disables it.
    """
    if not settings.root_admin_password:
        logger.info("Root admin bootstrap disabled")
        return None

    existing = db.scalar(select(User.id).where(User.role == Roles.ROOT_ADMIN).limit(1))
    if existing:
        logger.info("Root admin already exists, skipping")
        return None

    user = User(
        email=settings.root_admin_email.lower(),
        full_name="Root Admin",
        role=Roles.ROOT_ADMIN,
    )
    user.credential = Credential(
        username=settings.root_admin_username,
        password_hash=hash_password(settings.root_admin_password),
    )
    db.add(user)
    safe_commit(db)
    logger.info("Root admin created", username=settings.root_admin_username)
    return user


def seed_demo_restaurant(db: Session) -> Restaurant | None:
    """
    Demo restaurant with a main branch, a published menu and two staff users.
    Idempotent: only inserts when there is no restaurant yet.
    """
    if db.scalar(select(func.count(Restaurant.id))):
        logger.info("Restaurants already exist, skipping demo data")
        return None

    restaurant = Restaurant(
        name="Picada Don Pepe",
        description="Comida chilena casera",
        primary_color=DefaultColors.PRIMARY,
        secondary_color=DefaultColors.SECONDARY,
        address="Av. Providencia 1234, Santiago",
        phone="+56 2 2345 6789",
        whatsapp="56912345678",
        email="contacto@donpepe.cl",
    )
    db.add(restaurant)
    db.flush()

    branch = Branch(
        restaurant_id=restaurant.id,
        name="Casa Matriz",
        address=restaurant.address,
        phone=restaurant.phone,
        whatsapp=restaurant.whatsapp,
        is_main=True,
    )
    db.add(branch)
    db.flush()

    menu = Menu(
        restaurant_id=restaurant.id,
        branch_id=branch.id,
        name="Carta",
        description="Menú principal",
    )
    db.add(menu)
    db.flush()

    for category_order, (category_name, items) in enumerate(DEMO_MENU.items()):
        category = Category(
            restaurant_id=restaurant.id,
            branch_id=branch.id,
            menu_id=menu.id,
            name=category_name,
            order=category_order,
        )
        db.add(category)
        db.flush()
        for item_order, (name, description, price_cents) in enumerate(items):
            db.add(
                MenuItem(
                    restaurant_id=restaurant.id,
                    category_id=category.id,
                    name=name,
                    description=description,
                    price_cents=price_cents,
                    order=item_order,
                )
            )

    for username, role, email in (
        (DEMO_ADMIN_USERNAME, Roles.RESTAURANT_ADMIN, "admin@donpepe.cl"),
        (DEMO_KITCHEN_USERNAME, Roles.KITCHEN, "cocina@donpepe.cl"),
    ):
        user = User(email=email, full_name=username, role=role, restaurant_id=restaurant.id)
        user.credential = Credential(username=username, password_hash=hash_password(DEMO_PASSWORD))
        db.add(user)

    safe_commit(db)
    logger.info("Demo restaurant created", restaurant_id=restaurant.id)
    return restaurant


def seed(db: Session, *, demo: bool = False) -> None:
    """Idempotent startup seeding."""
    seed_default_plans(db)
    seed_root_admin(db)
    if demo:
        seed_demo_restaurant(db)
