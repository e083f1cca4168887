"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are read at import time: configure the test environment first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ROOT_ADMIN_PASSWORD"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from rest_api.main import app
from rest_api.models import Base, Branch, Category, Menu, MenuItem
from shared.config.constants import Roles
from shared.infrastructure.db import engine, get_db
from shared.security.rate_limit import limiter
from tests.helpers import login, make_restaurant, make_user

# In-memory SQLite on a StaticPool: every session shares one connection
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

limiter.enabled = False


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    The lifespan (table creation and seeding) is not run.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def restaurant(db_session):
    return make_restaurant(db_session)


@pytest.fixture
def other_restaurant(db_session):
    return make_restaurant(db_session, name="Other Restaurant", whatsapp="56933334444")


@pytest.fixture
def main_branch(db_session, restaurant):
    return db_session.query(Branch).filter_by(restaurant_id=restaurant.id, is_main=True).one()


@pytest.fixture
def root_admin(db_session):
    return make_user(db_session, "root", Roles.ROOT_ADMIN)


@pytest.fixture
def restaurant_admin(db_session, restaurant):
    return make_user(db_session, "admin", Roles.RESTAURANT_ADMIN, restaurant.id)


@pytest.fixture
def kitchen_user(db_session, restaurant):
    return make_user(db_session, "cook", Roles.KITCHEN, restaurant.id)


@pytest.fixture
def other_admin(db_session, other_restaurant):
    return make_user(db_session, "other_admin", Roles.RESTAURANT_ADMIN, other_restaurant.id)


@pytest.fixture
def root_headers(client, root_admin):
    return login(client, "root")


@pytest.fixture
def admin_headers(client, restaurant_admin):
    return login(client, "admin")


@pytest.fixture
def kitchen_headers(client, kitchen_user):
    return login(client, "cook")


@pytest.fixture
def other_admin_headers(client, other_admin):
    return login(client, "other_admin")


@pytest.fixture
def menu(db_session, restaurant, main_branch):
    """
    Published menu with one category holding two available items and one
    unavailable item.
    """
    menu = Menu(restaurant_id=restaurant.id, branch_id=main_branch.id, name="Carta")
    db_session.add(menu)
    db_session.flush()
    category = Category(
        restaurant_id=restaurant.id,
        branch_id=main_branch.id,
        menu_id=menu.id,
        name="Pizzas",
        order=0,
    )
    db_session.add(category)
    db_session.flush()
    db_session.add_all(
        [
            MenuItem(
                restaurant_id=restaurant.id,
                category_id=category.id,
                name="Margherita",
                price_cents=1000,
                order=0,
            ),
            MenuItem(
                restaurant_id=restaurant.id,
                category_id=category.id,
                name="Soda",
                price_cents=250,
                order=1,
            ),
            MenuItem(
                restaurant_id=restaurant.id,
                category_id=category.id,
                name="Calzone",
                price_cents=1500,
                is_available=False,
                order=2,
            ),
        ]
    )
    db_session.commit()
    db_session.refresh(menu)
    return menu


@pytest.fixture
def menu_items(db_session, menu):
    """Menu items of the menu fixture by name."""
    items = db_session.query(MenuItem).filter_by(restaurant_id=menu.restaurant_id).all()
    return {item.name: item for item in items}
