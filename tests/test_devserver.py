"""
Test suite for the development API
Tests: authentication, admin guard, inventory and featured rules
"""
import pytest
from fastapi.testclient import TestClient

from admin_console.devserver import ADMIN_EMAIL, ADMIN_PASSWORD, app, create_token, seed_demo_data


@pytest.fixture
def client(mongo):
    seed_demo_data()
    return TestClient(app)


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def first_product(client, headers):
    return client.get("/api/admin/products", headers=headers).json()["products"][0]


class TestAuth:
    """Login and the admin guard"""

    def test_root(self, client):
        """Test the health endpoint"""
        assert client.get("/").json() == {"message": "Admin Console Dev API running"}

    def test_login_returns_public_user(self, client):
        """Test login does not leak the password hash"""
        body = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}).json()
        assert body["user"]["email"] == ADMIN_EMAIL
        assert body["user"]["isAdmin"]
        assert "password_hash" not in body["user"]

    def test_customer_is_forbidden(self, client, mongo):
        """Test a non-admin token cannot reach admin endpoints"""
        customer = mongo["user"].find_one({"email": "asha@example.com"})
        headers = {"Authorization": f"Bearer {create_token(customer)}"}
        response = client.get("/api/admin/dashboard", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin only"


class TestProducts:
    """Product rules enforced by the API"""

    def test_pagination(self, client, admin_headers):
        """Test page metadata"""
        body = client.get("/api/admin/products?page=2&limit=5", headers=admin_headers).json()
        assert len(body["products"]) == 5
        assert body["pagination"] == {
            "currentPage": 2,
            "totalPages": 3,
            "totalProducts": 12,
            "hasNext": True,
            "hasPrev": True,
        }

    def test_search_is_case_insensitive(self, client, admin_headers):
        """Test the search parameter matches names regardless of case"""
        body = client.get("/api/admin/products?search=AIR&limit=1000", headers=admin_headers).json()
        assert sorted(p["name"] for p in body["products"]) == ["Air Force 1", "Air Max 90"]
        assert body["pagination"]["totalProducts"] == 2

    def test_dashboard_counts_customers_only(self, client, admin_headers, mongo):
        """Test the admin account is left out of the user count"""
        stats = client.get("/api/admin/dashboard", headers=admin_headers).json()["stats"]
        assert stats["totalUsers"] == 2
        assert stats["totalProducts"] == mongo["product"].count_documents({}) == 12
        assert stats["pendingOrders"] == 1

    def test_unknown_size(self, client, admin_headers):
        """Test stock cannot be set for a size the product lacks"""
        product = first_product(client, admin_headers)
        response = client.put(
            f"/api/admin/products/{product['_id']}/inventory",
            json={"size": 13, "stock": 4},
            headers=admin_headers,
        )
        assert response.status_code == 404

    def test_negative_stock(self, client, admin_headers):
        """Test negative stock is rejected"""
        product = first_product(client, admin_headers)
        response = client.put(
            f"/api/admin/products/{product['_id']}/inventory",
            json={"size": 7, "stock": -1},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_featured_limit(self, client, admin_headers):
        """Test at most eight products can be featured at once"""
        ids = [p["_id"] for p in client.get("/api/admin/products-for-featured", headers=admin_headers).json()]
        response = client.put("/api/admin/featured-products/bulk", json={"productIds": ids[:9]}, headers=admin_headers)
        assert response.status_code == 400
        response = client.put("/api/admin/featured-products/bulk", json={"productIds": ids[:8]}, headers=admin_headers)
        assert len(response.json()) == 8

    def test_invalid_settings_are_rejected(self, client, admin_headers):
        """Test settings updates are validated after merging"""
        response = client.put(
            "/api/admin/store-settings",
            json={"contactEmails": "not a list"},
            headers=admin_headers,
        )
        assert response.status_code == 400
