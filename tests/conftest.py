"""Shared fixtures: a throwaway SQLite database, the fake gateway and API helpers"""

import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="shopfront-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_db_dir}/test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["PAYMENT_GATEWAY"] = "fake"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from shopfront.api.payments.gateway import get_gateway, reset_gateways
from shopfront.core.database import SessionLocal, sync_engine
from shopfront.core.security import SecurityUtils
from shopfront.main import create_app
from shopfront.models import Base, Product, User, UserRole

PASSWORD = "password123"

@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(sync_engine)
    yield
    Base.metadata.drop_all(sync_engine)

@pytest.fixture(autouse=True)
def gateways():
    reset_gateways()
    yield
    reset_gateways()

@pytest.fixture
def fake_gateway():
    return get_gateway("fake")

@pytest.fixture
def app():
    return create_app()

@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

def create_user(
    email: str = "customer@example.com",
    role: UserRole = UserRole.CUSTOMER,
    name: str = "Test Customer",
    is_active: bool = True,
    password: str = PASSWORD,
) -> User:
    with SessionLocal() as db:
        user = User(
            name=name,
            email=email,
            password_hash=SecurityUtils.hash_password(password),
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user

def create_product(**overrides) -> Product:
    values = {
        "name": "Classic Tee",
        "description": "Soft cotton t-shirt",
        "price": Decimal("50.00"),
        "stock": 10,
        "category": "T-Shirts",
        "image": "/images/tee.jpg",
        "images": ["/images/tee.jpg"],
        "sizes": ["S", "M", "L"],
        "tags": [],
    }
    values.update(overrides)
    with SessionLocal() as db:
        product = Product(**values)
        db.add(product)
        db.commit()
        return product

def auth_headers(user: User) -> dict:
    tokens = SecurityUtils.create_token_pair(user.id, user.role.value, user.email)
    return {"Authorization": f"Bearer {tokens['access_token']}"}

@pytest.fixture
def customer():
    return create_user()

@pytest.fixture
def other_customer():
    return create_user(email="other@example.com", name="Other Customer")

@pytest.fixture
def admin():
    return create_user(email="admin@example.com", role=UserRole.ADMIN, name="Admin User")

@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)

@pytest.fixture
def other_headers(other_customer):
    return auth_headers(other_customer)

@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)

@pytest.fixture
def product():
    return create_product()
