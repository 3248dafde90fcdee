"""Cart API and service tests"""

import pytest
from sqlalchemy import event

from shopfront.api.cart.services import CartService
from shopfront.core.database import AsyncSessionLocal, engine, sync_engine
from shopfront.core.exceptions import ConcurrentModificationException
from shopfront.core.security import Principal
from tests.conftest import create_product

def add(client, headers, product_id, quantity=1, size="M"):
    return client.post(
        "/api/cart/add",
        json={"product_id": str(product_id), "quantity": quantity, "size": size},
        headers=headers,
    )

class TestGetCart:
    def test_requires_token(self, client):
        response = client.get("/api/cart")
        assert response.status_code == 401
        assert response.json()["status"] == "error"

    def test_empty_cart_before_first_add(self, client, customer_headers):
        response = client.get("/api/cart", headers=customer_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["items"] == []
        assert data["total"] == 0

class TestAddToCart:
    def test_add_creates_cart_with_snapshot(self, client, customer_headers, product):
        response = add(client, customer_headers, product.id, quantity=3)
        assert response.status_code == 201

        data = response.json()["data"]
        assert len(data["items"]) == 1
        item = data["items"][0]
        assert item["name"] == "Classic Tee"
        assert item["price"] == 50.0
        assert item["quantity"] == 3
        assert item["size"] == "M"
        assert data["total"] == 150.0
        assert data["item_count"] == 3

    def test_same_product_and_size_merges(self, client, customer_headers, product):
        add(client, customer_headers, product.id, quantity=2)
        response = add(client, customer_headers, product.id, quantity=3)

        items = response.json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["quantity"] == 5

    def test_different_size_is_separate_line(self, client, customer_headers, product):
        add(client, customer_headers, product.id, size="M")
        response = add(client, customer_headers, product.id, size="L")
        assert len(response.json()["data"]["items"]) == 2

    def test_merge_clamps_to_max_quantity(self, client, customer_headers):
        product = create_product(name="Bulk Socks", stock=500)
        add(client, customer_headers, product.id, quantity=80)
        response = add(client, customer_headers, product.id, quantity=50)

        assert response.status_code == 201
        assert response.json()["data"]["items"][0]["quantity"] == 100

    def test_unknown_product_is_404(self, client, customer_headers):
        response = add(client, customer_headers, "00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404

    def test_quantity_above_stock_is_400(self, client, customer_headers, product):
        response = add(client, customer_headers, product.id, quantity=11)
        assert response.status_code == 400
        assert response.json()["data"]["error_code"] == "OUT_OF_STOCK"

    @pytest.mark.parametrize("quantity", [0, -1, 101])
    def test_quantity_out_of_range_is_400(self, client, customer_headers, quantity):
        product = create_product(name="Plenty", stock=1000)
        response = add(client, customer_headers, product.id, quantity=quantity)
        assert response.status_code == 400
        assert response.json()["data"]["error_code"] == "INVALID_QUANTITY"

    def test_unknown_size_is_400(self, client, customer_headers, product):
        response = add(client, customer_headers, product.id, size="XXXL")
        assert response.status_code == 400

    def test_cart_keeps_price_snapshot(self, client, customer_headers, product, admin_headers):
        add(client, customer_headers, product.id)
        client.put(f"/api/admin/products/{product.id}", json={"price": 80}, headers=admin_headers)

        response = client.get("/api/cart", headers=customer_headers)
        assert response.json()["data"]["items"][0]["price"] == 50.0

class TestUpdateAndRemove:
    def test_update_quantity(self, client, customer_headers, product):
        item_id = add(client, customer_headers, product.id).json()["data"]["items"][0]["id"]

        response = client.put(f"/api/cart/update/{item_id}", json={"quantity": 4}, headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["data"]["items"][0]["quantity"] == 4

    def test_update_beyond_stock_is_400(self, client, customer_headers, product):
        item_id = add(client, customer_headers, product.id).json()["data"]["items"][0]["id"]

        response = client.put(f"/api/cart/update/{item_id}", json={"quantity": 20}, headers=customer_headers)
        assert response.status_code == 400

    def test_update_unknown_item_is_404(self, client, customer_headers, product):
        add(client, customer_headers, product.id)
        response = client.put(
            "/api/cart/update/00000000-0000-0000-0000-000000000000",
            json={"quantity": 2},
            headers=customer_headers,
        )
        assert response.status_code == 404

    def test_remove_item(self, client, customer_headers, product):
        item_id = add(client, customer_headers, product.id).json()["data"]["items"][0]["id"]

        response = client.delete(f"/api/cart/remove/{item_id}", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["data"]["items"] == []

    def test_remove_unknown_item_leaves_cart(self, client, customer_headers, product):
        add(client, customer_headers, product.id)
        response = client.delete(
            "/api/cart/remove/00000000-0000-0000-0000-000000000000", headers=customer_headers
        )
        assert response.status_code == 200
        assert len(response.json()["data"]["items"]) == 1

    def test_clear(self, client, customer_headers, product):
        add(client, customer_headers, product.id)
        response = client.delete("/api/cart/clear", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["data"]["items"] == []

    def test_carts_are_per_user(self, client, customer_headers, other_headers, product):
        add(client, customer_headers, product.id)
        response = client.get("/api/cart", headers=other_headers)
        assert response.json()["data"]["items"] == []

class TestCartVersioning:
    async def test_stale_cart_write_is_rejected(self, customer, product):
        async with AsyncSessionLocal() as setup:
            principal = Principal(user_id=customer.id, role="customer", email=customer.email)
            await CartService(setup).add_item(principal, product.id, quantity=1)

        async with AsyncSessionLocal() as first, AsyncSessionLocal() as second:
            cart_a = await CartService(first).load_cart(customer.id)
            cart_b = await CartService(second).load_cart(customer.id)

            cart_a.items[0].quantity = 2
            cart_a.touch()
            await CartService(first).commit_cart()

            cart_b.items[0].quantity = 5
            cart_b.touch()
            with pytest.raises(ConcurrentModificationException):
                await CartService(second).commit_cart()

        async with AsyncSessionLocal() as check:
            cart = await CartService(check).load_cart(customer.id)
            assert cart.items[0].quantity == 2
            assert cart.version == 2

def enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

@pytest.fixture
def foreign_keys():
    """Enforce SQLite foreign keys on every new connection"""
    targets = (engine.sync_engine, sync_engine)
    for target in targets:
        event.listen(target, "connect", enable_foreign_keys)
    yield
    for target in targets:
        event.remove(target, "connect", enable_foreign_keys)

class TestDeletedProduct:
    def test_cart_line_survives_product_delete(
        self, foreign_keys, client, customer_headers, admin_headers, product
    ):
        assert add(client, customer_headers, product.id, quantity=2).status_code == 201

        response = client.delete(f"/api/admin/products/{product.id}", headers=admin_headers)
        assert response.status_code == 200

        data = client.get("/api/cart", headers=customer_headers).json()["data"]
        assert len(data["items"]) == 1
        assert data["items"][0]["name"] == "Classic Tee"
        assert data["items"][0]["quantity"] == 2
        assert data["total"] == 100.0
