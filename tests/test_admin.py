"""Admin dashboard, user management, discounts and audit trail"""

import pytest

from shopfront.core.database import SessionLocal
from shopfront.models import AuditLog, User, UserRole
from tests.conftest import auth_headers, create_user

@pytest.fixture
def paid_order(client, customer_headers, admin_headers, product):
    client.post(
        "/api/cart/add",
        json={"product_id": str(product.id), "quantity": 3, "size": "M"},
        headers=customer_headers,
    )
    order = client.post("/api/orders", json={"payment_method": "upi"}, headers=customer_headers).json()["data"]
    client.put(
        f"/api/admin/orders/{order['id']}/payment-status",
        json={"payment_status": "completed"},
        headers=admin_headers,
    )
    return order

def discount_body(**overrides):
    body = {
        "name": "Summer Sale",
        "discount_type": "percentage",
        "discount_value": 10,
        "start_date": "2020-01-01T00:00:00Z",
        "end_date": "2099-01-01T00:00:00Z",
        "coupon_code": "summer10",
    }
    body.update(overrides)
    return body

class TestAdminAccess:
    def test_customer_is_forbidden(self, client, customer_headers):
        assert client.get("/api/admin/dashboard/stats", headers=customer_headers).status_code == 403

    def test_requires_token(self, client):
        assert client.get("/api/admin/dashboard/stats").status_code == 401

    def test_deactivated_admin_is_forbidden(self, client):
        admin = create_user(email="retired@example.com", role=UserRole.ADMIN, is_active=False)
        assert client.get("/api/admin/dashboard/stats", headers=auth_headers(admin)).status_code == 403

    def test_demoted_admin_loses_access_immediately(self, client, admin, admin_headers):
        with SessionLocal() as db:
            db.get(User, admin.id).role = UserRole.CUSTOMER
            db.commit()
        assert client.get("/api/admin/dashboard/stats", headers=admin_headers).status_code == 403

class TestDashboard:
    def test_empty_store(self, client, admin_headers):
        data = client.get("/api/admin/dashboard/stats", headers=admin_headers).json()["data"]
        assert data["total_users"] == 1
        assert data["total_orders"] == 0
        assert data["total_revenue"] == 0.0

    def test_revenue_counts_paid_orders(self, client, admin_headers, paid_order, other_headers, product):
        client.post(
            "/api/cart/add",
            json={"product_id": str(product.id), "quantity": 1, "size": "M"},
            headers=other_headers,
        )
        client.post("/api/orders", json={}, headers=other_headers)

        data = client.get("/api/admin/dashboard/stats", headers=admin_headers).json()["data"]
        assert data["total_users"] == 3
        assert data["total_orders"] == 2
        assert data["total_products"] == 1
        assert data["total_revenue"] == 165.0
        assert data["pending_orders"] == 2

    def test_payment_stats(self, client, admin_headers, paid_order):
        data = client.get("/api/admin/payments/stats", headers=admin_headers).json()["data"]
        assert data["total_completed"] == 1
        assert data["total_failed"] == 0
        assert data["by_method"] == [{"method": "upi", "count": 1, "total": 165.0}]

    def test_payment_stats_window(self, client, admin_headers, paid_order):
        response = client.get(
            "/api/admin/payments/stats",
            params={"start_date": "2000-01-01T00:00:00", "end_date": "2000-12-31T00:00:00"},
            headers=admin_headers,
        )
        assert response.json()["data"]["total_completed"] == 0

class TestUserManagement:
    def test_list_filters_by_role(self, client, admin_headers, customer, other_customer):
        data = client.get("/api/admin/users?role=customer", headers=admin_headers).json()["data"]
        assert data["pagination"]["total"] == 2
        assert {u["email"] for u in data["users"]} == {customer.email, other_customer.email}

    def test_list_rejects_unknown_role(self, client, admin_headers):
        assert client.get("/api/admin/users?role=owner", headers=admin_headers).status_code == 400

    def test_user_detail_totals(self, client, admin_headers, customer, paid_order):
        data = client.get(f"/api/admin/users/{customer.id}", headers=admin_headers).json()["data"]
        assert data["total_orders"] == 1
        assert data["total_spent"] == 165.0

    def test_change_role(self, client, admin_headers, customer):
        response = client.put(
            f"/api/admin/users/{customer.id}/role", json={"role": "admin"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "admin"

        with SessionLocal() as db:
            log = db.query(AuditLog).filter_by(entity="User").one()
        assert log.changes == {"role": {"from": "customer", "to": "admin"}}

    def test_change_role_rejects_unknown_role(self, client, admin_headers, customer):
        response = client.put(
            f"/api/admin/users/{customer.id}/role", json={"role": "superuser"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_toggle_active_blocks_login(self, client, admin_headers, customer):
        response = client.put(f"/api/admin/users/{customer.id}/toggle-active", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False

        login = client.post(
            "/api/auth/login", json={"email": customer.email, "password": "password123"}
        )
        assert login.status_code == 403

class TestDiscounts:
    def test_create(self, client, admin_headers):
        response = client.post("/api/admin/discounts", json=discount_body(), headers=admin_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["coupon_code"] == "SUMMER10"
        assert data["discount_value"] == 10.0
        assert data["is_active"] is True
        assert data["is_valid"] is True

    def test_missing_fields(self, client, admin_headers):
        response = client.post("/api/admin/discounts", json={"name": "Half"}, headers=admin_headers)
        assert response.status_code == 400

    def test_percentage_over_100(self, client, admin_headers):
        response = client.post(
            "/api/admin/discounts", json=discount_body(discount_value=150), headers=admin_headers
        )
        assert response.status_code == 400

    def test_end_before_start(self, client, admin_headers):
        response = client.post(
            "/api/admin/discounts",
            json=discount_body(start_date="2030-01-01T00:00:00Z", end_date="2029-01-01T00:00:00Z"),
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["data"]["field"] == "end_date"

    def test_duplicate_coupon(self, client, admin_headers):
        client.post("/api/admin/discounts", json=discount_body(), headers=admin_headers)
        response = client.post(
            "/api/admin/discounts", json=discount_body(name="Again", coupon_code="SUMMER10"), headers=admin_headers
        )
        assert response.status_code == 409

    def test_update_toggle_and_delete(self, client, admin_headers):
        discount_id = client.post(
            "/api/admin/discounts", json=discount_body(), headers=admin_headers
        ).json()["data"]["id"]

        updated = client.put(
            f"/api/admin/discounts/{discount_id}", json={"discount_value": 20}, headers=admin_headers
        )
        assert updated.json()["data"]["discount_value"] == 20.0

        toggled = client.put(f"/api/admin/discounts/{discount_id}/toggle-active", headers=admin_headers)
        assert toggled.json()["data"]["is_active"] is False
        assert toggled.json()["data"]["is_valid"] is False

        listed = client.get("/api/admin/discounts?is_active=false", headers=admin_headers).json()["data"]
        assert [d["id"] for d in listed["discounts"]] == [discount_id]

        assert client.delete(f"/api/admin/discounts/{discount_id}", headers=admin_headers).status_code == 200
        assert client.get("/api/admin/discounts", headers=admin_headers).json()["data"]["discounts"] == []

    def test_discounts_do_not_change_order_totals(self, client, admin_headers, customer_headers, product):
        client.post("/api/admin/discounts", json=discount_body(), headers=admin_headers)
        client.post(
            "/api/cart/add",
            json={"product_id": str(product.id), "quantity": 3, "size": "M"},
            headers=customer_headers,
        )
        order = client.post("/api/orders", json={}, headers=customer_headers).json()["data"]
        assert order["total"] == 165.0

class TestAuditLogs:
    def test_lists_admin_actions_newest_first(self, client, admin_headers):
        client.post("/api/admin/discounts", json=discount_body(), headers=admin_headers)
        client.post(
            "/api/admin/products",
            json={"name": "Logged Tee", "price": 20, "category": "T-Shirts"},
            headers=admin_headers,
        )

        data = client.get("/api/admin/audit-logs", headers=admin_headers).json()["data"]
        assert data["pagination"]["total"] == 2
        assert [log["entity"] for log in data["items"]] == ["Product", "Discount"]

        filtered = client.get("/api/admin/audit-logs?entity=Discount", headers=admin_headers).json()["data"]
        assert [log["action"] for log in filtered["items"]] == ["DISCOUNT"]

    def test_records_request_context(self, client, admin_headers):
        client.post(
            "/api/admin/discounts",
            json=discount_body(),
            headers={**admin_headers, "X-Forwarded-For": "203.0.113.9, 10.0.0.1", "User-Agent": "ops-console"},
        )
        with SessionLocal() as db:
            log = db.query(AuditLog).one()
        assert log.ip_address == "203.0.113.9"
        assert log.user_agent == "ops-console"
