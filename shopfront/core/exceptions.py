"""
Custom exception classes
Provides consistent error responses across the application
"""

from fastapi import HTTPException, status
from typing import Any, Dict, Optional

class ShopfrontException(HTTPException):
    """Base exception class for the Shopfront application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.field = field

class BadRequestException(ShopfrontException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST", field: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
            field=field
        )

class ValidationException(BadRequestException):
    """400 for malformed or missing input"""

    def __init__(self, detail: str, field: Optional[str] = None, error_code: str = "VALIDATION_ERROR"):
        super().__init__(detail=detail, error_code=error_code, field=field)

class UnauthorizedException(ShopfrontException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Unauthorized", error_code: str = "UNAUTHORIZED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"}
        )

class ForbiddenException(ShopfrontException):
    """403 Forbidden"""

    def __init__(self, detail: str = "Forbidden", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code
        )

class NotFoundException(ShopfrontException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )

class ConflictException(ShopfrontException):
    """409 Conflict"""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )

class InternalServerException(ShopfrontException):
    """500 Internal Server Error"""

    def __init__(
        self,
        detail: str = "Internal server error",
        error_code: str = "INTERNAL_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code
        )

class PaymentGatewayException(ShopfrontException):
    """502 when the payment provider fails or times out"""

    def __init__(self, detail: str = "Payment gateway error", error_code: str = "PAYMENT_GATEWAY_ERROR"):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            error_code=error_code
        )

# Business logic exceptions
class InsufficientStockException(BadRequestException):
    """Product stock insufficient"""

    def __init__(self, available: int):
        super().__init__(
            detail=f"Only {available} items available",
            error_code="OUT_OF_STOCK"
        )

class InvalidQuantityException(ValidationException):
    """Cart quantity outside the allowed range"""

    def __init__(self, detail: str, field: str = "quantity"):
        super().__init__(detail=detail, field=field, error_code="INVALID_QUANTITY")

class InvalidStatusException(ValidationException):
    """Status value outside its enum"""

    def __init__(self, detail: str, field: str = "status"):
        super().__init__(detail=detail, field=field, error_code="INVALID_STATE")

class InvalidRatingException(ValidationException):
    """Review rating outside 1..5"""

    def __init__(self, detail: str = "Rating must be between 1 and 5"):
        super().__init__(detail=detail, field="rating", error_code="INVALID_RATING")

class InvalidTransitionException(BadRequestException):
    """State change not allowed from the current state"""

    def __init__(self, detail: str, error_code: str = "INVALID_TRANSITION"):
        super().__init__(detail=detail, error_code=error_code)

class OrderNotCancellableException(InvalidTransitionException):
    """Order cannot be cancelled"""

    def __init__(self, current_status: str):
        super().__init__(
            detail=f"Cannot cancel {current_status} order",
            error_code="ORDER_NOT_CANCELLABLE"
        )

class InvalidPaymentException(BadRequestException):
    """Payment validation failed"""

    def __init__(self, detail: str):
        super().__init__(
            detail=detail,
            error_code="INVALID_PAYMENT"
        )

class DuplicateReviewException(BadRequestException):
    """User already reviewed the product"""

    def __init__(self, detail: str = "You have already reviewed this product"):
        super().__init__(detail=detail, error_code="DUPLICATE_REVIEW")

class DuplicateResourceException(ConflictException):
    """Resource already exists"""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            detail=f"{resource} with {field} '{value}' already exists",
            error_code="DUPLICATE_RESOURCE"
        )

class ConcurrentModificationException(ConflictException):
    """Optimistic version check failed"""

    def __init__(self, resource: str = "Resource"):
        super().__init__(
            detail=f"{resource} was modified by another request, please retry",
            error_code="CONCURRENT_MODIFICATION"
        )
