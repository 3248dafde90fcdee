"""Signup, login, token refresh and password changes"""

from shopfront.core.security import SecurityUtils
from tests.conftest import PASSWORD, create_user

def signup(client, **overrides):
    body = {"name": "New Shopper", "email": "new@example.com", "password": "longenough"}
    body.update(overrides)
    return client.post("/api/auth/signup", json=body)

def login(client, email="customer@example.com", password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})

class TestSignup:
    def test_signup_returns_customer_and_tokens(self, client):
        response = signup(client, email="  New@Example.com ")
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["role"] == "customer"
        assert data["tokens"]["token_type"] == "bearer"
        assert "password_hash" not in data["user"]

        payload = SecurityUtils.decode_token(data["tokens"]["access_token"])
        assert payload["sub"] == data["user"]["id"]

    def test_duplicate_email(self, client):
        signup(client)
        response = signup(client)
        assert response.status_code == 409
        assert response.json()["data"]["error_code"] == "DUPLICATE_RESOURCE"

    def test_short_password(self, client):
        response = signup(client, password="short")
        assert response.status_code == 400
        assert response.json()["data"]["field"] == "password"

    def test_password_confirmation_must_match(self, client):
        response = signup(client, password_confirm="different1")
        assert response.status_code == 400

    def test_invalid_email(self, client):
        assert signup(client, email="not-an-email").status_code == 400

    def test_blank_name(self, client):
        assert signup(client, name="   ").status_code == 400

class TestLogin:
    def test_login(self, client, customer):
        response = login(client)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == str(customer.id)
        assert data["user"]["last_login"] is not None

    def test_email_is_case_insensitive(self, client, customer):
        assert login(client, email="Customer@Example.com").status_code == 200

    def test_wrong_password(self, client, customer):
        response = login(client, password="wrong-password")
        assert response.status_code == 401
        assert response.json()["data"]["error_code"] == "INVALID_CREDENTIALS"

    def test_unknown_email(self, client):
        assert login(client, email="nobody@example.com").status_code == 401

    def test_inactive_account(self, client):
        create_user(email="gone@example.com", is_active=False)
        response = login(client, email="gone@example.com")
        assert response.status_code == 403
        assert response.json()["data"]["error_code"] == "ACCOUNT_INACTIVE"

class TestTokens:
    def test_refresh(self, client, customer):
        tokens = login(client).json()["data"]["tokens"]
        response = client.post("/api/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == 200
        assert response.json()["data"]["access_token"]

    def test_access_token_cannot_refresh(self, client, customer):
        tokens = login(client).json()["data"]["tokens"]
        response = client.post("/api/auth/refresh-token", json={"refresh_token": tokens["access_token"]})
        assert response.status_code == 401

    def test_missing_refresh_token(self, client):
        assert client.post("/api/auth/refresh-token", json={}).status_code == 401

    def test_me(self, client, customer, customer_headers):
        response = client.get("/api/auth/me", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["data"]["email"] == customer.email

    def test_me_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401
        assert response.json()["data"]["error_code"] == "INVALID_TOKEN"

class TestUpdatePassword:
    def test_change_password(self, client, customer, customer_headers):
        response = client.put(
            "/api/auth/update-password",
            json={"current_password": PASSWORD, "new_password": "brandnewpass"},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert login(client, password="brandnewpass").status_code == 200
        assert login(client).status_code == 401

    def test_wrong_current_password(self, client, customer_headers):
        response = client.put(
            "/api/auth/update-password",
            json={"current_password": "nope", "new_password": "brandnewpass"},
            headers=customer_headers,
        )
        assert response.status_code == 401

    def test_new_password_too_short(self, client, customer_headers):
        response = client.put(
            "/api/auth/update-password",
            json={"current_password": PASSWORD, "new_password": "short"},
            headers=customer_headers,
        )
        assert response.status_code == 400
