"""
Tests for the public menu page and WhatsApp ordering.
"""

from urllib.parse import parse_qs, urlparse

import pytest
from sqlalchemy import select

from rest_api.models import Menu, MenuTheme, Order
from rest_api.services.domain.public_menu_service import (
    build_whatsapp_message,
    build_whatsapp_url,
    format_cents,
)


def _order_body(menu_items, **overrides):
    body = {
        "customer_name": "Ana",
        "customer_phone": "+56 9 5555 1234",
        "items": [
            {"menu_item_id": menu_items["Margherita"].id, "quantity": 2},
            {"menu_item_id": menu_items["Soda"].id, "quantity": 1},
        ],
    }
    body.update(overrides)
    return body


def _message_of(url):
    return parse_qs(urlparse(url).query)["text"][0]


@pytest.fixture
def draft_menu(db_session, restaurant, main_branch):
    """Unpublished menu of the same restaurant."""
    menu = Menu(
        restaurant_id=restaurant.id,
        branch_id=main_branch.id,
        name="Borrador",
        is_active=False,
    )
    db_session.add(menu)
    db_session.commit()
    return menu


class TestWhatsAppHelpers:
    """Test message and link building."""

    def test_format_cents(self):
        """Cents are rendered with two decimals."""
        assert format_cents(0) == "0.00"
        assert format_cents(5) == "0.05"
        assert format_cents(1250) == "12.50"

    def test_message_layout(self):
        """The message lists lines and the total."""
        message = build_whatsapp_message("Pizzeria", [(2, "Margherita", 2000), (1, "Soda", 250)], 2250)
        assert message == (
            "*New Order from Pizzeria*\n\n"
            "2x Margherita - $20.00\n"
            "1x Soda - $2.50\n\n"
            "*Total: $22.50*"
        )

    def test_url_uses_digits_only(self):
        """Numbers are reduced to digits and the text is percent-encoded."""
        url = build_whatsapp_url("+56 (9) 1234-5678", "Hola mundo")
        assert url == "https://wa.me/56912345678?text=Hola%20mundo"

    def test_url_without_number(self):
        """No number, no link."""
        assert build_whatsapp_url(None, "Hola") is None
        assert build_whatsapp_url("sin numero", "Hola") is None


class TestPublicRestaurant:
    """Test GET /api/public/restaurants/{id}."""

    def test_profile_with_colors(self, client, restaurant):
        """The profile carries brand colors with readable foregrounds."""
        response = client.get(f"/api/public/restaurants/{restaurant.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Test Restaurant"
        assert data["whatsapp"] == "56911112222"
        assert data["primary_foreground"] == "#ffffff"
        assert data["secondary_foreground"] == "#000000"

    def test_unknown_restaurant(self, client):
        """Unknown restaurants are a 404."""
        assert client.get("/api/public/restaurants/99999").status_code == 404


class TestPublicMenus:
    """Test GET /api/public/restaurants/{id}/menus."""

    def test_only_published_and_available(self, client, restaurant, menu, draft_menu):
        """Draft menus and unavailable items are hidden."""
        response = client.get(f"/api/public/restaurants/{restaurant.id}/menus")
        assert response.status_code == 200
        data = response.json()
        assert [m["name"] for m in data] == ["Carta"]
        items = [i["name"] for i in data[0]["categories"][0]["items"]]
        assert items == ["Margherita", "Soda"]
        assert data[0]["theme"]["is_default"] is True

    def test_stored_theme_is_returned(self, client, db_session, restaurant, menu):
        """A stored theme replaces the defaults."""
        db_session.add(
            MenuTheme(
                menu_id=menu.id,
                restaurant_id=restaurant.id,
                primary_color="#123456",
                secondary_color="#ffffff",
                font_family="Inter",
                show_prices=False,
                enable_ordering=True,
                header_style="default",
                footer_style="default",
                item_layout="list",
            )
        )
        db_session.commit()
        data = client.get(f"/api/public/restaurants/{restaurant.id}/menus").json()
        assert data[0]["theme"]["primary_color"] == "#123456"
        assert data[0]["theme"]["show_prices"] is False

    def test_filter_by_branch(self, client, restaurant, menu):
        """Menus of another branch are not listed."""
        response = client.get(
            f"/api/public/restaurants/{restaurant.id}/menus", params={"branch_id": 99999}
        )
        assert response.status_code == 200
        assert response.json() == []


class TestPublicOrders:
    """Test POST /api/public/restaurants/{id}/orders."""

    def test_place_order(self, client, db_session, restaurant, menu, menu_items):
        """The order is stored as pending and a wa.me link is returned."""
        response = client.post(
            f"/api/public/restaurants/{restaurant.id}/orders",
            json=_order_body(menu_items, menu_id=menu.id),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["order"]["status"] == "pending"
        assert data["order"]["total_cents"] == 2250
        assert data["whatsapp_url"].startswith("https://wa.me/56911112222?text=")
        assert _message_of(data["whatsapp_url"]) == (
            "*New Order from Test Restaurant*\n\n"
            "2x Margherita - $20.00\n"
            "1x Soda - $2.50\n\n"
            "*Total: $22.50*"
        )
        assert db_session.scalars(select(Order)).one().branch_id == menu.branch_id

    def test_branch_number_preferred(self, client, db_session, restaurant, main_branch, menu, menu_items):
        """The branch WhatsApp number wins over the restaurant's."""
        main_branch.whatsapp = "56977778888"
        db_session.commit()
        data = client.post(
            f"/api/public/restaurants/{restaurant.id}/orders",
            json=_order_body(menu_items, menu_id=menu.id),
        ).json()
        assert data["whatsapp_url"].startswith("https://wa.me/56977778888?")

    def test_inactive_branch_falls_back_to_restaurant(self, client, db_session, restaurant, main_branch, menu, menu_items):
        """A deactivated branch neither receives the order nor its WhatsApp message."""
        main_branch.whatsapp = "56977778888"
        main_branch.is_active = False
        db_session.commit()
        response = client.post(
            f"/api/public/restaurants/{restaurant.id}/orders",
            json=_order_body(menu_items, menu_id=menu.id),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["order"]["branch_id"] is None
        assert data["whatsapp_url"].startswith("https://wa.me/56911112222?")

    def test_blank_customer_name(self, client, restaurant, menu, menu_items):
        """A whitespace-only customer name is rejected."""
        response = client.post(
            f"/api/public/restaurants/{restaurant.id}/orders",
            json=_order_body(menu_items, customer_name="   "),
        )
        assert response.status_code == 422

    def test_without_menu_uses_main_branch(self, client, db_session, restaurant, main_branch, menu_items):
        """Orders without a menu go to the main branch."""
        response = client.post(
            f"/api/public/restaurants/{restaurant.id}/orders",
            json=_order_body(menu_items),
        )
        assert response.status_code == 201
        assert response.json()["order"]["branch_id"] == main_branch.id

    def test_no_whatsapp_number(self, client, db_session, restaurant, menu, menu_items):
        """Without any number the order is stored and the link is null."""
        restaurant.whatsapp = None
        db_session.commit()
        response = client.post(
            f"/api/public/restaurants/{restaurant.id}/orders",
            json=_order_body(menu_items, menu_id=menu.id),
        )
        assert response.status_code == 201
        assert response.json()["whatsapp_url"] is None

    def test_unavailable_item(self, client, restaurant, menu, menu_items):
        """Unavailable items are refused."""
        body = _order_body(
            menu_items,
            items=[{"menu_item_id": menu_items["Calzone"].id, "quantity": 1}],
        )
        response = client.post(f"/api/public/restaurants/{restaurant.id}/orders", json=body)
        assert response.status_code == 400

    def test_ordering_disabled(self, client, db_session, restaurant, menu, menu_items):
        """Menus whose theme disables ordering refuse orders."""
        db_session.add(
            MenuTheme(
                menu_id=menu.id,
                restaurant_id=restaurant.id,
                primary_color="#4f46e5",
                secondary_color="#f9fafb",
                font_family="Inter",
                show_prices=True,
                enable_ordering=False,
                header_style="default",
                footer_style="default",
                item_layout="grid",
            )
        )
        db_session.commit()
        response = client.post(
            f"/api/public/restaurants/{restaurant.id}/orders",
            json=_order_body(menu_items, menu_id=menu.id),
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Ordering is disabled for this menu"

    def test_unpublished_menu(self, client, restaurant, draft_menu, menu_items):
        """Draft menus cannot take orders."""
        response = client.post(
            f"/api/public/restaurants/{restaurant.id}/orders",
            json=_order_body(menu_items, menu_id=draft_menu.id),
        )
        assert response.status_code == 404

    def test_items_of_unpublished_menu(self, client, db_session, restaurant, menu, menu_items):
        """Items on a hidden menu cannot be ordered."""
        menu.is_active = False
        db_session.commit()
        response = client.post(
            f"/api/public/restaurants/{restaurant.id}/orders",
            json=_order_body(menu_items),
        )
        assert response.status_code == 400

    def test_deleted_restaurant(self, client, db_session, restaurant, menu, menu_items):
        """Inactive restaurants take no orders."""
        restaurant.is_active = False
        db_session.commit()
        response = client.post(
            f"/api/public/restaurants/{restaurant.id}/orders",
            json=_order_body(menu_items),
        )
        assert response.status_code == 404
