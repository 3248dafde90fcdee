"""Order placement, customer access and admin management"""

import asyncio
from decimal import Decimal

import pytest

from shopfront.api.cart.services import CartService
from shopfront.api.orders.services import OrderService, calculate_totals
from shopfront.core.database import AsyncSessionLocal, SessionLocal
from shopfront.core.exceptions import ConcurrentModificationException
from shopfront.core.security import Principal
from shopfront.models import AuditLog, Order, Product
from tests.conftest import create_product

def add(client, headers, product_id, quantity=1, size="M"):
    return client.post(
        "/api/cart/add",
        json={"product_id": str(product_id), "quantity": quantity, "size": size},
        headers=headers,
    )

def place(client, headers, **body):
    return client.post("/api/orders", json=body, headers=headers)

class TestCalculateTotals:
    def test_free_shipping_above_threshold(self):
        totals = calculate_totals(150)
        assert str(totals["tax"]) == "15.00"
        assert str(totals["shipping"]) == "0.00"
        assert str(totals["total"]) == "165.00"

    def test_flat_fee_at_or_below_threshold(self):
        totals = calculate_totals(100)
        assert str(totals["shipping"]) == "10.00"
        assert str(totals["total"]) == "120.00"

    def test_tax_rounds_half_up(self):
        totals = calculate_totals("0.05")
        assert str(totals["tax"]) == "0.01"

class TestPlaceOrder:
    def test_end_to_end(self, client, customer_headers, admin_headers, product):
        cart = add(client, customer_headers, product.id, quantity=3).json()["data"]
        assert cart["total"] == 150.0

        response = place(client, customer_headers, shipping_address={"city": "Pune"})
        assert response.status_code == 201
        order = response.json()["data"]
        assert order["subtotal"] == 150.0
        assert order["tax"] == 15.0
        assert order["shipping"] == 0.0
        assert order["total"] == 165.0
        assert order["status"] == "pending"
        assert order["payment_status"] == "unpaid"
        assert order["can_cancel"] is True
        assert order["shipping_address"] == {"city": "Pune"}

        shipped = client.put(
            f"/api/admin/orders/{order['id']}/status", json={"status": "shipped"}, headers=admin_headers
        )
        assert shipped.status_code == 200
        assert shipped.json()["data"]["status"] == "shipped"

        cancel = client.delete(f"/api/orders/{order['id']}", headers=customer_headers)
        assert cancel.status_code == 400
        assert cancel.json()["data"]["error_code"] == "ORDER_NOT_CANCELLABLE"

        current = client.get(f"/api/orders/{order['id']}", headers=customer_headers).json()["data"]
        assert current["status"] == "shipped"
        assert current["can_cancel"] is False

    def test_cart_is_emptied(self, client, customer_headers, product):
        add(client, customer_headers, product.id, quantity=2)
        place(client, customer_headers)

        cart = client.get("/api/cart", headers=customer_headers).json()["data"]
        assert cart["items"] == []

    def test_empty_cart_is_400(self, client, customer_headers):
        response = place(client, customer_headers)
        assert response.status_code == 400

    def test_second_placement_finds_empty_cart(self, client, customer_headers, product):
        add(client, customer_headers, product.id)
        assert place(client, customer_headers).status_code == 201
        assert place(client, customer_headers).status_code == 400

    def test_order_items_are_copies(self, client, customer_headers, product):
        add(client, customer_headers, product.id, quantity=1)
        order = place(client, customer_headers).json()["data"]

        with SessionLocal() as db:
            stored = db.get(Product, product.id)
            stored.price = 999
            db.commit()

        fetched = client.get(f"/api/orders/{order['id']}", headers=customer_headers).json()["data"]
        assert fetched["items"][0]["price"] == 50.0
        assert fetched["subtotal"] == 50.0

    def test_small_order_pays_shipping(self, client, customer_headers):
        product = create_product(name="Cap", price=Decimal("20.00"))
        add(client, customer_headers, product.id, quantity=2)

        order = place(client, customer_headers).json()["data"]
        assert order["shipping"] == 10.0
        assert order["tax"] == 4.0
        assert order["total"] == 54.0

class TestConcurrentPlacement:
    async def test_only_one_of_two_racing_placements_wins(self, customer, product, monkeypatch):
        principal = Principal(user_id=customer.id, role="customer", email=customer.email)
        async with AsyncSessionLocal() as setup:
            await CartService(setup).add_item(principal, product.id, quantity=1)

        # Both placements read the cart before either commits
        load_cart = CartService.load_cart
        loaded = []
        both_loaded = asyncio.Event()

        async def load_then_wait(self, user_id):
            cart = await load_cart(self, user_id)
            loaded.append(cart)
            if len(loaded) == 2:
                both_loaded.set()
            await both_loaded.wait()
            return cart

        monkeypatch.setattr(CartService, "load_cart", load_then_wait)

        async with AsyncSessionLocal() as first, AsyncSessionLocal() as second:
            results = await asyncio.gather(
                OrderService(first).place_order(principal),
                OrderService(second).place_order(principal),
                return_exceptions=True,
            )

        conflicts = [r for r in results if isinstance(r, ConcurrentModificationException)]
        placed = [r for r in results if not isinstance(r, Exception)]
        assert len(conflicts) == 1
        assert len(placed) == 1

        with SessionLocal() as db:
            assert db.query(Order).count() == 1

class TestCustomerAccess:
    def test_list_own_orders(self, client, customer_headers, other_headers, product):
        add(client, customer_headers, product.id)
        place(client, customer_headers)

        assert len(client.get("/api/orders", headers=customer_headers).json()["data"]) == 1
        assert client.get("/api/orders", headers=other_headers).json()["data"] == []

    def test_other_user_gets_403(self, client, customer_headers, other_headers, product):
        add(client, customer_headers, product.id)
        order_id = place(client, customer_headers).json()["data"]["id"]

        assert client.get(f"/api/orders/{order_id}", headers=other_headers).status_code == 403
        assert client.delete(f"/api/orders/{order_id}", headers=other_headers).status_code == 403

    def test_unknown_order_is_404(self, client, customer_headers):
        response = client.get("/api/orders/00000000-0000-0000-0000-000000000000", headers=customer_headers)
        assert response.status_code == 404

    def test_cancel_pending_order(self, client, customer_headers, product):
        add(client, customer_headers, product.id)
        order_id = place(client, customer_headers).json()["data"]["id"]

        response = client.delete(f"/api/orders/{order_id}", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "cancelled"
        assert response.json()["data"]["can_cancel"] is False

    def test_customer_cannot_use_admin_update(self, client, customer_headers, product):
        add(client, customer_headers, product.id)
        order_id = place(client, customer_headers).json()["data"]["id"]

        response = client.put(f"/api/orders/{order_id}", json={"status": "shipped"}, headers=customer_headers)
        assert response.status_code == 403

class TestAdminOrders:
    @pytest.fixture
    def order_id(self, client, customer_headers, product):
        add(client, customer_headers, product.id, quantity=3)
        return place(client, customer_headers).json()["data"]["id"]

    def test_invalid_status_is_400(self, client, admin_headers, order_id):
        response = client.put(
            f"/api/admin/orders/{order_id}/status", json={"status": "lost"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_unknown_order_is_404(self, client, admin_headers):
        response = client.put(
            "/api/admin/orders/00000000-0000-0000-0000-000000000000/status",
            json={"status": "shipped"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    def test_payment_status_and_tracking(self, client, admin_headers, order_id):
        paid = client.put(
            f"/api/admin/orders/{order_id}/payment-status",
            json={"payment_status": "completed"},
            headers=admin_headers,
        )
        assert paid.status_code == 200
        assert paid.json()["data"]["payment_status"] == "completed"
        assert paid.json()["data"]["status"] == "pending"

        tracked = client.put(
            f"/api/admin/orders/{order_id}/tracking",
            json={"tracking_number": "TRK123"},
            headers=admin_headers,
        )
        assert tracked.json()["data"]["tracking_number"] == "TRK123"

    def test_unpaid_is_not_an_admin_payment_status(self, client, admin_headers, order_id):
        response = client.put(
            f"/api/admin/orders/{order_id}/payment-status",
            json={"payment_status": "unpaid"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_combined_update_through_orders_route(self, client, admin_headers, order_id):
        response = client.put(
            f"/api/orders/{order_id}",
            json={"status": "confirmed", "tracking_number": "TRK9"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "confirmed"
        assert data["tracking_number"] == "TRK9"

    def test_list_filter_and_summary(self, client, admin_headers, order_id):
        listed = client.get("/api/admin/orders?status=pending", headers=admin_headers).json()["data"]
        assert listed["pagination"]["total"] == 1
        assert listed["items"][0]["id"] == order_id

        empty = client.get("/api/admin/orders?status=delivered", headers=admin_headers).json()["data"]
        assert empty["items"] == []

        summary = client.get("/api/admin/orders/stats/summary", headers=admin_headers).json()["data"]
        assert summary["total_orders"] == 1
        assert summary["total_revenue"] == 165.0
        assert summary["orders_by_status"] == {"pending": 1}

    def test_status_change_is_audited(self, client, admin, admin_headers, order_id):
        client.put(f"/api/admin/orders/{order_id}/status", json={"status": "shipped"}, headers=admin_headers)

        with SessionLocal() as db:
            logs = db.query(AuditLog).all()
        assert len(logs) == 1
        assert logs[0].action == "ORDER_STATUS"
        assert logs[0].entity == "Order"
        assert logs[0].admin_id == admin.id
        assert logs[0].changes == {"status": {"from": "pending", "to": "shipped"}}
