"""
Tests for restaurant management and brand colors.
"""

from sqlalchemy import select

from rest_api.models import Branch


class TestRestaurantCrud:
    """Test /api/restaurants endpoints."""

    def test_root_creates_restaurant_with_main_branch(self, client, db_session, root_headers):
        """Creating a restaurant also creates its main branch."""
        response = client.post(
            "/api/restaurants",
            json={
                "name": "La Picada",
                "address": "Av. Siempre Viva 742",
                "whatsapp": "+56 9 8765 4321",
                "main_branch_name": "Casa Matriz",
            },
            headers=root_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["whatsapp"] == "56987654321"
        assert data["primary_color"] == "#4f46e5"

        branches = db_session.scalars(
            select(Branch).where(Branch.restaurant_id == data["id"])
        ).all()
        assert len(branches) == 1
        assert branches[0].is_main is True
        assert branches[0].name == "Casa Matriz"

    def test_restaurant_admin_cannot_create(self, client, admin_headers):
        """Only root admins create restaurants."""
        response = client.post(
            "/api/restaurants",
            json={"name": "Nope", "address": "Somewhere"},
            headers=admin_headers,
        )
        assert response.status_code == 403

    def test_invalid_color_rejected(self, client, root_headers):
        """Colors must be hex."""
        response = client.post(
            "/api/restaurants",
            json={"name": "Bad", "address": "Somewhere", "primary_color": "red"},
            headers=root_headers,
        )
        assert response.status_code == 422

    def test_root_lists_all(self, client, root_headers, restaurant, other_restaurant):
        """Root admins see every restaurant."""
        response = client.get("/api/restaurants", headers=root_headers)
        assert response.status_code == 200
        assert {r["id"] for r in response.json()} == {restaurant.id, other_restaurant.id}

    def test_admin_reads_own_restaurant(self, client, admin_headers, restaurant):
        """Restaurant admins read their own restaurant."""
        response = client.get(f"/api/restaurants/{restaurant.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Test Restaurant"

    def test_admin_cannot_read_other_restaurant(self, client, admin_headers, other_restaurant):
        """A foreign restaurant is forbidden."""
        response = client.get(f"/api/restaurants/{other_restaurant.id}", headers=admin_headers)
        assert response.status_code == 403

    def test_update_reports_changed_fields(self, client, admin_headers, restaurant):
        """PATCH returns only the fields that actually changed."""
        response = client.patch(
            f"/api/restaurants/{restaurant.id}",
            json={"name": "Test Restaurant", "description": "Nueva", "primary_color": "#000000"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert sorted(data["changed_fields"]) == ["description", "primary_color"]
        assert data["restaurant"]["description"] == "Nueva"

    def test_update_without_changes(self, client, admin_headers, restaurant):
        """Unchanged values produce an empty list."""
        response = client.patch(
            f"/api/restaurants/{restaurant.id}",
            json={"name": "Test Restaurant"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["changed_fields"] == []

    def test_internal_logo_url_rejected(self, client, admin_headers, restaurant):
        """Logo URLs pointing at internal hosts are refused."""
        response = client.patch(
            f"/api/restaurants/{restaurant.id}",
            json={"logo_url": "http://localhost/logo.png"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_delete_is_soft(self, client, root_headers, restaurant):
        """Deleted restaurants are listed as inactive and hidden publicly."""
        response = client.delete(f"/api/restaurants/{restaurant.id}", headers=root_headers)
        assert response.status_code == 204

        listing = client.get("/api/restaurants", headers=root_headers).json()
        assert listing[0]["is_active"] is False
        public = client.get(f"/api/public/restaurants/{restaurant.id}")
        assert public.status_code == 404

    def test_admin_cannot_delete(self, client, admin_headers, restaurant):
        """Restaurant admins cannot delete restaurants."""
        response = client.delete(f"/api/restaurants/{restaurant.id}", headers=admin_headers)
        assert response.status_code == 403


class TestBrandColors:
    """Test GET /api/restaurants/{id}/colors."""

    def test_kitchen_reads_colors(self, client, kitchen_headers, restaurant):
        """Any user of the restaurant can read its colors."""
        response = client.get(f"/api/restaurants/{restaurant.id}/colors", headers=kitchen_headers)
        assert response.status_code == 200
        assert response.json() == {
            "primary_color": "#4f46e5",
            "secondary_color": "#f9fafb",
            "primary_foreground": "#ffffff",
            "secondary_foreground": "#000000",
        }

    def test_colors_of_other_restaurant(self, client, kitchen_headers, other_restaurant):
        """Colors of another restaurant are forbidden."""
        response = client.get(
            f"/api/restaurants/{other_restaurant.id}/colors", headers=kitchen_headers
        )
        assert response.status_code == 403

    def test_colors_require_auth(self, client, restaurant):
        """Anonymous requests are refused."""
        response = client.get(f"/api/restaurants/{restaurant.id}/colors")
        assert response.status_code == 401
