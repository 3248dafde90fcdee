"""
Input validators and sanitizers
Validators return a ValidationResult instead of raising, services decide
which exception to surface
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional
import bleach
from email_validator import validate_email, EmailNotValidError

from shopfront.core.config import settings
from shopfront.models import (
    OrderStatus,
    OrderPaymentStatus,
    PaymentType,
    UserRole,
    DiscountType,
    PRODUCT_CATEGORIES,
    PRODUCT_GENDERS,
    PRODUCT_SIZES,
)

# Payment statuses an admin may set on an order
ADMIN_PAYMENT_STATUSES = (
    OrderPaymentStatus.PENDING,
    OrderPaymentStatus.COMPLETED,
    OrderPaymentStatus.FAILED,
    OrderPaymentStatus.REFUNDED,
)

MIN_RATING = 1
MAX_RATING = 5

@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation, carrying the normalised value when valid"""

    ok: bool
    value: Any = None
    error: Optional[str] = None
    field: Optional[str] = None

    @classmethod
    def valid(cls, value: Any = None) -> "ValidationResult":
        return cls(ok=True, value=value)

    @classmethod
    def invalid(cls, error: str, field: Optional[str] = None) -> "ValidationResult":
        return cls(ok=False, error=error, field=field)

    def __bool__(self) -> bool:
        return self.ok

def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

def validate_quantity(quantity: Any, field: str = "quantity") -> ValidationResult:
    """Cart quantities are integers in [1, MAX_CART_QUANTITY]"""
    if not _is_int(quantity):
        return ValidationResult.invalid("Quantity must be a whole number", field)
    if quantity < 1 or quantity > settings.MAX_CART_QUANTITY:
        return ValidationResult.invalid(
            f"Quantity must be between 1 and {settings.MAX_CART_QUANTITY}", field
        )
    return ValidationResult.valid(quantity)

def validate_size(size: Optional[str]) -> ValidationResult:
    if size is None:
        return ValidationResult.valid("M")
    normalized = size.strip().upper()
    if normalized not in PRODUCT_SIZES:
        return ValidationResult.invalid(
            f"Size must be one of {', '.join(PRODUCT_SIZES)}", "size"
        )
    return ValidationResult.valid(normalized)

def validate_rating(rating: Any) -> ValidationResult:
    if not _is_int(rating) or rating < MIN_RATING or rating > MAX_RATING:
        return ValidationResult.invalid(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}", "rating"
        )
    return ValidationResult.valid(rating)

def _validate_choice(value: Any, choices: Iterable, field: str, label: str) -> ValidationResult:
    options = list(choices)
    for option in options:
        if value == option or (hasattr(option, "value") and value == option.value):
            return ValidationResult.valid(option)
    names = ", ".join(getattr(o, "value", o) for o in options)
    return ValidationResult.invalid(f"Invalid {label}. Must be one of: {names}", field)

def validate_order_status(status: Any) -> ValidationResult:
    return _validate_choice(status, OrderStatus, "status", "status")

def validate_admin_payment_status(payment_status: Any) -> ValidationResult:
    return _validate_choice(payment_status, ADMIN_PAYMENT_STATUSES, "payment_status", "payment status")

def validate_payment_type(method: Any) -> ValidationResult:
    return _validate_choice(method, PaymentType, "method", "payment method")

def validate_role(role: Any) -> ValidationResult:
    return _validate_choice(role, UserRole, "role", "role")

def validate_discount_type(discount_type: Any) -> ValidationResult:
    return _validate_choice(discount_type, DiscountType, "discount_type", "discount type")

def validate_category(category: Any) -> ValidationResult:
    return _validate_choice(category, PRODUCT_CATEGORIES, "category", "category")

def validate_gender(gender: Any) -> ValidationResult:
    if gender is None:
        return ValidationResult.valid(None)
    return _validate_choice(gender, PRODUCT_GENDERS, "gender", "gender")

def validate_required(**fields: Any) -> ValidationResult:
    """Every named field must be present and, for strings, non-blank"""
    missing = [
        name for name, value in fields.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        return ValidationResult.invalid(
            f"Please provide {', '.join(missing)}", missing[0]
        )
    return ValidationResult.valid()

def validate_password(password: str) -> ValidationResult:
    if not password or len(password) < settings.PASSWORD_MIN_LENGTH:
        return ValidationResult.invalid(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long",
            "password",
        )
    return ValidationResult.valid(password)

def validate_email_address(email: str) -> str:
    """Validate and normalize email"""
    email = email.strip().lower()

    try:
        validation = validate_email(email, check_deliverability=False)
        return validation.normalized.lower()
    except EmailNotValidError as e:
        raise ValueError(str(e))

def sanitize_html(html: str) -> str:
    """Strip every tag from user supplied text"""
    return bleach.clean(html, tags=set(), attributes={}, strip=True)

def normalize_text(text: str) -> str:
    """Normalize text input"""
    # Remove zero-width characters
    text = re.sub(r"[\u200b\u200c\u200d\ufeff]", "", text)
    return " ".join(text.split()).strip()

def clean_text(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return normalize_text(sanitize_html(text))
