"""
Tests for plans, the simulated Webpay payment and restaurant sign-up.
"""

import pytest
from sqlalchemy import select

from rest_api.models import Branch, Plan, Restaurant, WebpayTransaction
from rest_api.services.domain.registration_service import DEFAULT_PLANS, seed_default_plans
from tests.helpers import login


@pytest.fixture
def plans(db_session):
    seed_default_plans(db_session)
    return db_session.scalars(select(Plan).order_by(Plan.price)).all()


def _checkout(client, plan, email="owner@example.com"):
    response = client.post(
        "/api/register/checkout", json={"email": email, "plan_id": plan.id}
    )
    assert response.status_code == 201, response.text
    return response.json()


def _pay(client, transaction_id, success=True):
    token = client.post("/api/webpay/init", json={"transaction_id": transaction_id}).json()["token"]
    return client.post("/api/webpay/confirm", json={"token": token, "success": success})


def _register_body(transaction_id, **admin_overrides):
    admin = {
        "username": "owner",
        "password": "secret123",
        "confirm_password": "secret123",
        "full_name": "Dueña",
    }
    admin.update(admin_overrides)
    return {
        "transaction_id": transaction_id,
        "restaurant": {
            "name": "Sanguchería Nueva",
            "address": "Av. Matta 100",
            "whatsapp": "+56 9 4444 5555",
        },
        "admin": admin,
    }


@pytest.fixture
def paid_transaction(client, plans):
    transaction_id = _checkout(client, plans[0])["transaction_id"]
    assert _pay(client, transaction_id).status_code == 200
    return transaction_id


class TestPlans:
    """Test GET /api/plans."""

    def test_seed_is_idempotent(self, db_session):
        """Plans are only created into an empty table."""
        assert seed_default_plans(db_session) == len(DEFAULT_PLANS)
        assert seed_default_plans(db_session) == 0

    def test_list_plans_cheapest_first(self, client, plans):
        """Plans are listed by price."""
        response = client.get("/api/plans")
        assert response.status_code == 200
        prices = [p["price"] for p in response.json()]
        assert prices == sorted(prices)
        assert sum(p["is_popular"] for p in response.json()) == 1

    def test_inactive_plans_hidden(self, client, db_session, plans):
        """Inactive plans are not offered."""
        plans[0].is_active = False
        db_session.commit()
        response = client.get("/api/plans")
        assert len(response.json()) == len(DEFAULT_PLANS) - 1


class TestCheckout:
    """Test checkout and the Webpay simulator."""

    def test_checkout_uses_plan_price(self, client, plans):
        """The transaction amount is the plan price."""
        data = _checkout(client, plans[1])
        assert data["amount"] == plans[1].price
        assert data["status"] == "pending"

    def test_checkout_unknown_plan(self, client, plans):
        """Unknown plans are a 404."""
        response = client.post(
            "/api/register/checkout", json={"email": "x@example.com", "plan_id": 99999}
        )
        assert response.status_code == 404

    def test_checkout_taken_email(self, client, plans, restaurant_admin):
        """Emails with an account cannot check out again."""
        response = client.post(
            "/api/register/checkout", json={"email": "admin@test.com", "plan_id": plans[0].id}
        )
        assert response.status_code == 400

    def test_init_returns_simulator_url(self, client, plans):
        """Init gives a token and the simulator URL that carries it."""
        transaction_id = _checkout(client, plans[0])["transaction_id"]
        response = client.post("/api/webpay/init", json={"transaction_id": transaction_id})
        assert response.status_code == 200
        data = response.json()
        assert data["token"].startswith("WEBPAY-")
        assert data["url"].endswith(f"?token={data['token']}")

    def test_confirm_completes(self, client, db_session, plans):
        """A successful confirmation completes the transaction."""
        transaction_id = _checkout(client, plans[0])["transaction_id"]
        response = _pay(client, transaction_id)
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    def test_confirm_failure(self, client, plans):
        """success=false marks the payment failed."""
        transaction_id = _checkout(client, plans[0])["transaction_id"]
        response = _pay(client, transaction_id, success=False)
        assert response.json()["status"] == "failed"
        assert response.json()["success"] is False

    def test_confirm_twice(self, client, db_session, plans):
        """Settled transactions cannot be confirmed again."""
        transaction_id = _checkout(client, plans[0])["transaction_id"]
        _pay(client, transaction_id)
        token = db_session.get(WebpayTransaction, transaction_id).webpay_token
        response = client.post("/api/webpay/confirm", json={"token": token})
        assert response.status_code == 400

    def test_confirm_unknown_token(self, client):
        """Unknown tokens are a 404."""
        response = client.post("/api/webpay/confirm", json={"token": "WEBPAY-nope"})
        assert response.status_code == 404


class TestRegister:
    """Test POST /api/register."""

    def test_register_creates_everything(self, client, db_session, paid_transaction):
        """Restaurant, main branch and admin are created; the admin can log in."""
        response = client.post("/api/register", json=_register_body(paid_transaction))
        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["username"] == "owner"

        restaurant = db_session.get(Restaurant, data["restaurant_id"])
        assert restaurant.email == "owner@example.com"
        assert restaurant.whatsapp == "56944445555"
        branches = db_session.scalars(
            select(Branch).where(Branch.restaurant_id == restaurant.id)
        ).all()
        assert [b.is_main for b in branches] == [True]

        headers = login(client, "owner", "secret123")
        me = client.get("/api/auth/me", headers=headers).json()
        assert me["role"] == "restaurant_admin"
        assert me["restaurant_id"] == restaurant.id

    def test_transaction_is_consumed(self, client, paid_transaction):
        """A transaction registers one restaurant only."""
        assert client.post("/api/register", json=_register_body(paid_transaction)).status_code == 201
        response = client.post(
            "/api/register", json=_register_body(paid_transaction, username="owner2")
        )
        assert response.status_code == 409

    def test_unpaid_transaction(self, client, plans):
        """Pending transactions cannot register."""
        transaction_id = _checkout(client, plans[0])["transaction_id"]
        response = client.post("/api/register", json=_register_body(transaction_id))
        assert response.status_code == 400

    def test_password_mismatch(self, client, paid_transaction):
        """Both passwords must match."""
        response = client.post(
            "/api/register",
            json=_register_body(paid_transaction, confirm_password="different1"),
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Passwords do not match"

    def test_username_taken(self, client, paid_transaction, restaurant_admin):
        """Usernames must be free."""
        response = client.post(
            "/api/register", json=_register_body(paid_transaction, username="admin")
        )
        assert response.status_code == 400

    def test_failed_registration_leaves_no_restaurant(self, client, db_session, paid_transaction):
        """Nothing is created when the sign-up fails."""
        client.post(
            "/api/register",
            json=_register_body(paid_transaction, password="abc", confirm_password="abc"),
        )
        assert db_session.scalars(select(Restaurant)).all() == []
