"""
Tests for the restaurant dashboard and the platform overview.
"""

import pytest


@pytest.fixture
def orders(client, restaurant, menu_items, admin_headers):
    """Three orders: one pending, one delivered, one cancelled."""

    def _order(name, phone, quantity):
        response = client.post(
            f"/api/restaurants/{restaurant.id}/orders",
            json={
                "customer_name": name,
                "customer_phone": phone,
                "items": [{"menu_item_id": menu_items["Margherita"].id, "quantity": quantity}],
            },
            headers=admin_headers,
        )
        return response.json()["id"]

    def _walk(order_id, *statuses):
        for new_status in statuses:
            client.patch(
                f"/api/orders/{order_id}/status", json={"status": new_status}, headers=admin_headers
            )

    pending = _order("Ana", "555-0001", 1)
    delivered = _order("Beto", "555-0002", 2)
    cancelled = _order("Ana", "555-0001", 5)
    _walk(delivered, "confirmed", "preparing", "ready", "delivered")
    _walk(cancelled, "cancelled")
    return {"pending": pending, "delivered": delivered, "cancelled": cancelled}


class TestRestaurantDashboard:
    """Test GET /api/restaurants/{id}/dashboard."""

    def test_figures(self, client, admin_headers, restaurant, orders):
        """Cancelled orders count as orders but not as revenue."""
        response = client.get(f"/api/restaurants/{restaurant.id}/dashboard", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total_orders"] == 3
        assert data["pending_orders"] == 1
        assert data["distinct_customers"] == 2
        assert data["revenue_cents"] == 1000 + 2000
        assert data["menus"] == 1
        assert data["branches"] == 1
        assert len(data["recent_orders"]) == 3

    def test_empty_restaurant(self, client, admin_headers, restaurant):
        """A new restaurant has zeroes everywhere."""
        data = client.get(f"/api/restaurants/{restaurant.id}/dashboard", headers=admin_headers).json()
        assert data["total_orders"] == 0
        assert data["revenue_cents"] == 0
        assert data["recent_orders"] == []

    def test_other_restaurant_forbidden(self, client, other_admin_headers, restaurant):
        """Dashboards of other restaurants are forbidden."""
        response = client.get(
            f"/api/restaurants/{restaurant.id}/dashboard", headers=other_admin_headers
        )
        assert response.status_code == 403

    def test_kitchen_forbidden(self, client, kitchen_headers, restaurant):
        """Kitchen users do not see the dashboard."""
        response = client.get(f"/api/restaurants/{restaurant.id}/dashboard", headers=kitchen_headers)
        assert response.status_code == 403


class TestAdminOverview:
    """Test GET /api/admin/overview."""

    def test_root_overview(self, client, root_headers, restaurant, other_restaurant, orders):
        """Root admins see platform totals."""
        response = client.get("/api/admin/overview", headers=root_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["restaurants"] == 2
        assert data["active_restaurants"] == 2
        assert data["users"] == 2
        assert data["orders"] == 3
        assert data["revenue_cents"] == 3000

    def test_restaurant_admin_forbidden(self, client, admin_headers):
        """Only root admins see the overview."""
        assert client.get("/api/admin/overview", headers=admin_headers).status_code == 403
