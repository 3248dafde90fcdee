"""Order model with status and payment status"""

from sqlalchemy import Column, String, Numeric, Integer, Enum, Uuid, ForeignKey, Index, Text, JSON
from sqlalchemy.orm import relationship
import enum

from .base import BaseModel

class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

class OrderPaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"

class Order(BaseModel):
    """Frozen snapshot of a cart at checkout"""

    __tablename__ = "orders"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # Status
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    payment_status = Column(Enum(OrderPaymentStatus), default=OrderPaymentStatus.UNPAID, nullable=False)

    # Amounts
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    shipping = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    payment_method = Column(String(50), nullable=True)
    shipping_address = Column(JSON, nullable=True)
    tracking_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.created_at",
    )
    payments = relationship("Payment", back_populates="order")

    __table_args__ = (
        Index("idx_orders_user_status", "user_id", "status"),
        Index("idx_orders_payment_status", "payment_status"),
    )

class OrderItem(BaseModel):
    """Independent copy of a cart line"""

    __tablename__ = "order_items"

    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Plain reference, products may be deleted after purchase
    product_id = Column(Uuid(as_uuid=True), nullable=False)

    name = Column(String(100), nullable=False)
    image = Column(String(500), nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    size = Column(String(5), nullable=False, default="M")

    # Relationships
    order = relationship("Order", back_populates="items")
