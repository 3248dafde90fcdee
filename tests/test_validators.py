"""Input validators and sanitizers"""

import pytest

from shopfront.models import OrderPaymentStatus, OrderStatus
from shopfront.utils.validators import (
    clean_text,
    validate_admin_payment_status,
    validate_email_address,
    validate_order_status,
    validate_password,
    validate_quantity,
    validate_rating,
    validate_required,
    validate_size,
)

class TestQuantity:
    @pytest.mark.parametrize("quantity", [1, 50, 100])
    def test_valid(self, quantity):
        assert validate_quantity(quantity).value == quantity

    @pytest.mark.parametrize("quantity", [0, -1, 101, 2.5, "3", True])
    def test_invalid(self, quantity):
        result = validate_quantity(quantity)
        assert not result
        assert result.field == "quantity"

class TestRating:
    def test_bounds(self):
        assert validate_rating(1)
        assert validate_rating(5)
        assert not validate_rating(0)
        assert not validate_rating(6)
        assert not validate_rating(4.5)

class TestSize:
    def test_defaults_to_medium(self):
        assert validate_size(None).value == "M"

    def test_normalizes_case(self):
        assert validate_size(" xl ").value == "XL"

    def test_rejects_unknown(self):
        assert not validate_size("XXXL")

class TestStatuses:
    def test_order_status(self):
        assert validate_order_status("shipped").value == OrderStatus.SHIPPED
        assert not validate_order_status("lost")

    def test_admin_cannot_set_unpaid(self):
        assert validate_admin_payment_status("refunded").value == OrderPaymentStatus.REFUNDED
        assert not validate_admin_payment_status("unpaid")

class TestRequired:
    def test_reports_first_missing_field(self):
        result = validate_required(name="Tee", price=None, category="  ")
        assert not result
        assert result.field == "price"
        assert "price, category" in result.error

    def test_zero_counts_as_present(self):
        assert validate_required(stock=0)

class TestText:
    def test_password_length(self):
        assert not validate_password("short")
        assert validate_password("long enough")

    def test_email_is_normalized(self):
        assert validate_email_address("  Shopper@Example.COM ") == "shopper@example.com"

    def test_bad_email_raises_value_error(self):
        with pytest.raises(ValueError):
            validate_email_address("no-at-sign")

    def test_clean_text_strips_markup_and_whitespace(self):
        assert clean_text("<b>Great</b>​   fit\n") == "Great fit"
        assert clean_text(None) is None
