"""
Payment model for transaction handling
One record per payment attempt against an order
"""

from sqlalchemy import Column, String, Numeric, Uuid, ForeignKey, Index, Enum, DateTime, Text, JSON
from sqlalchemy.orm import relationship
import enum

from .base import BaseModel

class PaymentStatus(str, enum.Enum):
    """Payment status enumeration"""
    INITIATED = "initiated"
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    EXPIRED = "expired"

class PaymentType(str, enum.Enum):
    """How the customer pays at the gateway"""
    UPI = "upi"
    CARD = "card"
    NETBANKING = "netbanking"
    WALLET = "wallet"

class Payment(BaseModel):
    """Payment transaction records"""

    __tablename__ = "payments"

    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # Payment details
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    gateway = Column(String(20), nullable=False)
    method = Column(Enum(PaymentType), nullable=False)
    status = Column(Enum(PaymentStatus), default=PaymentStatus.INITIATED, nullable=False)

    # Gateway details
    gateway_order_id = Column(String(255), nullable=True, index=True)
    gateway_transaction_id = Column(String(255), unique=True, nullable=True)
    gateway_signature = Column(String(500), nullable=True)

    # Failure and refund
    failure_reason = Column(Text, nullable=True)
    failure_code = Column(String(100), nullable=True)
    refund_details = Column(JSON, nullable=True)

    processed_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    order = relationship("Order", back_populates="payments")

    __table_args__ = (
        Index("idx_payments_status", "status"),
        Index("idx_payments_status_expires", "status", "expires_at"),
    )

    def __str__(self):
        return f"Payment {self.id} - {self.amount} {self.currency} ({self.status.value})"
