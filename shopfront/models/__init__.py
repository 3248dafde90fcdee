"""Models package initialization"""

from .base import Base, BaseModel
from .user import User, UserRole
from .product import Product, PRODUCT_CATEGORIES, PRODUCT_GENDERS, PRODUCT_SIZES
from .cart import Cart, CartItem
from .order import Order, OrderItem, OrderStatus, OrderPaymentStatus
from .payment import Payment, PaymentStatus, PaymentType
from .review import Review
from .wishlist import WishlistItem
from .discount import Discount, DiscountType
from .audit_log import AuditLog, AuditAction, AuditEntity

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "UserRole",
    "Product",
    "PRODUCT_CATEGORIES",
    "PRODUCT_GENDERS",
    "PRODUCT_SIZES",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderPaymentStatus",
    "Payment",
    "PaymentStatus",
    "PaymentType",
    "Review",
    "WishlistItem",
    "Discount",
    "DiscountType",
    "AuditLog",
    "AuditAction",
    "AuditEntity",
]
