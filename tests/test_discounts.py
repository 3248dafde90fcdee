"""Discount validity window and usage cap"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from shopfront.models import Discount

START = datetime(2026, 1, 1, tzinfo=timezone.utc)
END = datetime(2026, 2, 1, tzinfo=timezone.utc)

def discount(**overrides):
    values = {
        "name": "Winter sale",
        "discount_type": "percentage",
        "discount_value": Decimal("10.00"),
        "start_date": START,
        "end_date": END,
        "usage_limit": None,
        "usage_count": 0,
        "is_active": True,
    }
    values.update(overrides)
    return Discount(**values)

class TestIsValid:
    @pytest.mark.parametrize("at, expected", [
        (datetime(2025, 12, 31, 23, 59, tzinfo=timezone.utc), False),
        (START, True),
        (datetime(2026, 1, 15, tzinfo=timezone.utc), True),
        (END, True),
        (datetime(2026, 2, 1, 0, 1, tzinfo=timezone.utc), False),
    ])
    def test_date_window(self, at, expected):
        assert discount().is_valid(at=at) is expected

    def test_inactive_discount_is_invalid(self):
        assert discount(is_active=False).is_valid(at=datetime(2026, 1, 15, tzinfo=timezone.utc)) is False

    @pytest.mark.parametrize("usage_limit, usage_count, expected", [
        (None, 1000, True),
        (5, 4, True),
        (5, 5, False),
    ])
    def test_usage_cap(self, usage_limit, usage_count, expected):
        capped = discount(usage_limit=usage_limit, usage_count=usage_count)
        assert capped.is_valid(at=datetime(2026, 1, 15, tzinfo=timezone.utc)) is expected

    def test_naive_stored_dates_compare_with_aware_clock(self):
        naive = discount(start_date=START.replace(tzinfo=None), end_date=END.replace(tzinfo=None))
        assert naive.is_valid(at=datetime(2026, 1, 15, tzinfo=timezone.utc)) is True
        assert naive.is_valid(at=datetime(2026, 3, 1, tzinfo=timezone.utc)) is False
