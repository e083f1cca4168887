"""
Tests for orders and the order status workflow.
"""

import pytest

from shared.config.constants import (
    OrderStatus,
    Roles,
    get_allowed_order_transitions,
    validate_order_transition,
)


@pytest.fixture
def place_order(client, restaurant, menu_items, admin_headers):
    """Create an order through the admin API and return its JSON."""

    def _place(**overrides):
        body = {
            "customer_name": "Ana",
            "customer_phone": "+56 9 5555 1234",
            "items": [
                {"menu_item_id": menu_items["Margherita"].id, "quantity": 2},
                {"menu_item_id": menu_items["Soda"].id, "quantity": 1, "notes": "sin hielo"},
            ],
        }
        body.update(overrides)
        response = client.post(
            f"/api/restaurants/{restaurant.id}/orders", json=body, headers=admin_headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _place


def _set_status(client, order_id, new_status, headers):
    return client.patch(
        f"/api/orders/{order_id}/status", json={"status": new_status}, headers=headers
    )


class TestTransitionRules:
    """Test the transition table and role restrictions."""

    def test_happy_path_is_valid(self):
        """The normal flow is allowed step by step."""
        flow = [
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.READY,
            OrderStatus.DELIVERED,
        ]
        for current, new in zip(flow, flow[1:]):
            assert validate_order_transition(current, new) is True

    def test_terminal_states(self):
        """Delivered and cancelled orders cannot move."""
        assert validate_order_transition(OrderStatus.DELIVERED, OrderStatus.PENDING) is False
        assert validate_order_transition(OrderStatus.CANCELLED, OrderStatus.CONFIRMED) is False

    def test_ready_cannot_be_cancelled(self):
        """Ready orders can only be delivered."""
        assert validate_order_transition(OrderStatus.READY, OrderStatus.CANCELLED) is False

    def test_kitchen_transitions(self):
        """Kitchen only moves orders through the kitchen states."""
        kitchen = [Roles.KITCHEN]
        assert get_allowed_order_transitions(OrderStatus.PENDING, kitchen) == []
        assert get_allowed_order_transitions(OrderStatus.CONFIRMED, kitchen) == [OrderStatus.PREPARING]
        assert get_allowed_order_transitions(OrderStatus.PREPARING, kitchen) == [OrderStatus.READY]
        assert get_allowed_order_transitions(OrderStatus.READY, kitchen) == []

    def test_admin_transitions(self):
        """Admins get every valid transition."""
        admin = [Roles.RESTAURANT_ADMIN]
        assert get_allowed_order_transitions(OrderStatus.CONFIRMED, admin) == [
            OrderStatus.PREPARING,
            OrderStatus.CANCELLED,
        ]


class TestOrderEndpoints:
    """Test order creation and listing."""

    def test_create_computes_totals(self, place_order):
        """Totals come from current prices, with name and price snapshots."""
        order = place_order()
        assert order["status"] == "pending"
        assert order["total_cents"] == 2 * 1000 + 250
        lines = {line["name"]: line for line in order["items"]}
        assert lines["Margherita"]["unit_price_cents"] == 1000
        assert lines["Margherita"]["line_total_cents"] == 2000
        assert lines["Soda"]["notes"] == "sin hielo"

    def test_create_with_unavailable_item(self, client, restaurant, menu_items, admin_headers):
        """Unavailable items cannot be ordered."""
        response = client.post(
            f"/api/restaurants/{restaurant.id}/orders",
            json={
                "customer_name": "Ana",
                "customer_phone": "555-1234",
                "items": [{"menu_item_id": menu_items["Calzone"].id, "quantity": 1}],
            },
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert "not available" in response.json()["detail"]

    def test_create_with_foreign_item(self, client, restaurant, menu_items, other_admin_headers, other_restaurant):
        """Items of another restaurant are unknown."""
        response = client.post(
            f"/api/restaurants/{other_restaurant.id}/orders",
            json={
                "customer_name": "Ana",
                "customer_phone": "555-1234",
                "items": [{"menu_item_id": menu_items["Soda"].id, "quantity": 1}],
            },
            headers=other_admin_headers,
        )
        assert response.status_code == 400

    def test_create_requires_items(self, client, restaurant, admin_headers):
        """An order needs at least one line."""
        response = client.post(
            f"/api/restaurants/{restaurant.id}/orders",
            json={"customer_name": "Ana", "customer_phone": "555-1234", "items": []},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_list_filters_by_status(self, client, restaurant, admin_headers, place_order):
        """The status query parameter filters the listing."""
        first = place_order()
        place_order(customer_name="Beto")
        _set_status(client, first["id"], "confirmed", admin_headers)

        response = client.get(
            f"/api/restaurants/{restaurant.id}/orders",
            params={"status": "pending"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert [o["customer_name"] for o in response.json()] == ["Beto"]

        everything = client.get(f"/api/restaurants/{restaurant.id}/orders", headers=admin_headers)
        assert len(everything.json()) == 2

    def test_total_count_header(self, client, restaurant, admin_headers, place_order):
        """Paginated listings report the full count in X-Total-Count."""
        first = place_order()
        place_order(customer_name="Beto")
        place_order(customer_name="Carla")
        _set_status(client, first["id"], "confirmed", admin_headers)

        response = client.get(
            f"/api/restaurants/{restaurant.id}/orders",
            params={"limit": 1},
            headers=admin_headers,
        )
        assert len(response.json()) == 1
        assert response.headers["X-Total-Count"] == "3"

        pending = client.get(
            f"/api/restaurants/{restaurant.id}/orders",
            params={"status": "pending", "limit": 1},
            headers=admin_headers,
        )
        assert pending.headers["X-Total-Count"] == "2"

    def test_blank_customer_name_rejected(self, client, restaurant, menu_items, admin_headers):
        """Whitespace-only names are a 422."""
        response = client.post(
            f"/api/restaurants/{restaurant.id}/orders",
            json={
                "customer_name": "   ",
                "customer_phone": "555-1234",
                "items": [{"menu_item_id": menu_items["Soda"].id, "quantity": 1}],
            },
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_kitchen_lists_orders(self, client, restaurant, kitchen_headers, place_order):
        """Kitchen users can read the orders of their restaurant."""
        place_order()
        response = client.get(f"/api/restaurants/{restaurant.id}/orders", headers=kitchen_headers)
        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_kitchen_cannot_create(self, client, restaurant, menu_items, kitchen_headers):
        """Only admins create orders."""
        response = client.post(
            f"/api/restaurants/{restaurant.id}/orders",
            json={
                "customer_name": "Ana",
                "customer_phone": "555-1234",
                "items": [{"menu_item_id": menu_items["Soda"].id, "quantity": 1}],
            },
            headers=kitchen_headers,
        )
        assert response.status_code == 403

    def test_foreign_order_not_found(self, client, other_admin_headers, place_order):
        """Orders of other restaurants answer 404."""
        order = place_order()
        response = client.get(f"/api/orders/{order['id']}", headers=other_admin_headers)
        assert response.status_code == 404


class TestOrderStatus:
    """Test PATCH /api/orders/{id}/status."""

    def test_admin_full_flow(self, client, admin_headers, place_order):
        """Admins can walk the order to delivered."""
        order = place_order()
        for new_status in ("confirmed", "preparing", "ready", "delivered"):
            response = _set_status(client, order["id"], new_status, admin_headers)
            assert response.status_code == 200
            assert response.json()["status"] == new_status

    def test_invalid_transition(self, client, admin_headers, place_order):
        """Skipping states is a 400."""
        order = place_order()
        response = _set_status(client, order["id"], "ready", admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid transition from 'pending' to 'ready' for order"

    def test_unknown_status(self, client, admin_headers, place_order):
        """Unknown statuses fail validation."""
        order = place_order()
        response = _set_status(client, order["id"], "eaten", admin_headers)
        assert response.status_code == 422

    def test_cancel_pending(self, client, admin_headers, place_order):
        """Pending orders can be cancelled, and then stay cancelled."""
        order = place_order()
        assert _set_status(client, order["id"], "cancelled", admin_headers).status_code == 200
        assert _set_status(client, order["id"], "confirmed", admin_headers).status_code == 400

    def test_kitchen_moves_confirmed_to_preparing(self, client, admin_headers, kitchen_headers, place_order):
        """Kitchen takes confirmed orders through preparing and ready."""
        order = place_order()
        _set_status(client, order["id"], "confirmed", admin_headers)
        response = _set_status(client, order["id"], "preparing", kitchen_headers)
        assert response.status_code == 200
        response = _set_status(client, order["id"], "ready", kitchen_headers)
        assert response.status_code == 200

    def test_kitchen_cannot_confirm(self, client, kitchen_headers, place_order):
        """Confirming needs an admin."""
        order = place_order()
        response = _set_status(client, order["id"], "confirmed", kitchen_headers)
        assert response.status_code == 403

    def test_kitchen_cannot_cancel(self, client, admin_headers, kitchen_headers, place_order):
        """Cancelling needs an admin."""
        order = place_order()
        _set_status(client, order["id"], "confirmed", admin_headers)
        response = _set_status(client, order["id"], "cancelled", kitchen_headers)
        assert response.status_code == 403


class TestOrderDelete:
    """Test DELETE /api/orders/{id}."""

    def test_admin_deletes(self, client, admin_headers, place_order):
        """Deleted orders are gone."""
        order = place_order()
        assert client.delete(f"/api/orders/{order['id']}", headers=admin_headers).status_code == 204
        assert client.get(f"/api/orders/{order['id']}", headers=admin_headers).status_code == 404

    def test_kitchen_cannot_delete(self, client, kitchen_headers, place_order):
        """Kitchen users cannot delete orders."""
        order = place_order()
        response = client.delete(f"/api/orders/{order['id']}", headers=kitchen_headers)
        assert response.status_code == 403
