"""Review API tests, including product rating recomputation"""

import pytest

from shopfront.core.database import SessionLocal
from shopfront.models import Product
from tests.conftest import auth_headers, create_user

def review(client, headers, product_id, rating=5, title="Great", comment="Fits well"):
    return client.post(
        "/api/reviews",
        json={"product_id": str(product_id), "rating": rating, "title": title, "comment": comment},
        headers=headers,
    )

def product_rating(product_id) -> float:
    with SessionLocal() as db:
        return db.get(Product, product_id).rating

@pytest.fixture
def reviewers():
    return [auth_headers(create_user(email=f"reviewer{i}@example.com")) for i in range(3)]

class TestAddReview:
    def test_add_review(self, client, customer_headers, product):
        response = review(client, customer_headers, product.id, rating=4)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["rating"] == 4
        assert data["user"]["name"] == "Test Customer"
        assert product_rating(product.id) == 4.0

    def test_missing_fields_is_400(self, client, customer_headers, product):
        response = client.post(
            "/api/reviews", json={"product_id": str(product.id), "rating": 5}, headers=customer_headers
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range_is_400(self, client, customer_headers, product, rating):
        response = review(client, customer_headers, product.id, rating=rating)
        assert response.status_code == 400
        assert response.json()["data"]["error_code"] == "INVALID_RATING"

    def test_unknown_product_is_404(self, client, customer_headers):
        response = review(client, customer_headers, "00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404

    def test_duplicate_is_rejected_without_recompute(self, client, customer_headers, product):
        review(client, customer_headers, product.id, rating=5)
        response = review(client, customer_headers, product.id, rating=1)

        assert response.status_code == 400
        assert response.json()["data"]["error_code"] == "DUPLICATE_REVIEW"
        assert product_rating(product.id) == 5.0

    def test_markup_is_stripped(self, client, customer_headers, product):
        response = review(client, customer_headers, product.id, title="<b>Nice</b>", comment="<script>x</script>ok")
        data = response.json()["data"]
        assert data["title"] == "Nice"
        assert "<" not in data["comment"]

class TestRatingRecompute:
    def test_mean_then_delete(self, client, reviewers, product):
        ids = [
            review(client, headers, product.id, rating=rating).json()["data"]["id"]
            for headers, rating in zip(reviewers, [5, 3, 4])
        ]
        assert product_rating(product.id) == 4.0

        response = client.delete(f"/api/reviews/{ids[1]}", headers=reviewers[1])
        assert response.status_code == 200
        assert product_rating(product.id) == 4.5

    def test_update_recomputes(self, client, customer_headers, product):
        review_id = review(client, customer_headers, product.id, rating=2).json()["data"]["id"]

        response = client.put(f"/api/reviews/{review_id}", json={"rating": 5}, headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["data"]["rating"] == 5
        assert product_rating(product.id) == 5.0

    def test_deleting_last_review_resets_rating(self, client, customer_headers, product):
        review_id = review(client, customer_headers, product.id, rating=3).json()["data"]["id"]
        client.delete(f"/api/reviews/{review_id}", headers=customer_headers)
        assert product_rating(product.id) == 0.0

class TestReviewOwnership:
    def test_only_owner_updates(self, client, customer_headers, other_headers, product):
        review_id = review(client, customer_headers, product.id).json()["data"]["id"]
        response = client.put(f"/api/reviews/{review_id}", json={"rating": 1}, headers=other_headers)
        assert response.status_code == 403

    def test_other_user_cannot_delete(self, client, customer_headers, other_headers, product):
        review_id = review(client, customer_headers, product.id).json()["data"]["id"]
        response = client.delete(f"/api/reviews/{review_id}", headers=other_headers)
        assert response.status_code == 403

    def test_admin_can_delete(self, client, customer_headers, admin_headers, product):
        review_id = review(client, customer_headers, product.id).json()["data"]["id"]
        response = client.delete(f"/api/reviews/{review_id}", headers=admin_headers)
        assert response.status_code == 200

    def test_update_unknown_review_is_404(self, client, customer_headers):
        response = client.put(
            "/api/reviews/00000000-0000-0000-0000-000000000000", json={"rating": 3}, headers=customer_headers
        )
        assert response.status_code == 404

class TestListReviews:
    def test_paginated_newest_first(self, client, reviewers, product):
        for headers, title in zip(reviewers, ["first", "second", "third"]):
            review(client, headers, product.id, title=title)

        response = client.get(f"/api/reviews/product/{product.id}?page=1&limit=2")
        assert response.status_code == 200
        data = response.json()["data"]
        assert [r["title"] for r in data["reviews"]] == ["third", "second"]
        assert data["pagination"]["total"] == 3
        assert data["pagination"]["pages"] == 2
