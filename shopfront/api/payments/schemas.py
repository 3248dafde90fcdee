"""
Payment schemas
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime
import uuid

from shopfront.models import PaymentStatus, PaymentType
from shopfront.schemas.base import BaseSchema, Money

class PaymentInitiate(BaseModel):
    """Start a payment attempt for an order"""
    order_id: uuid.UUID
    method: str = Field("upi", description="upi, card, netbanking or wallet")

class PaymentVerify(BaseModel):
    """Values the client received from the gateway after paying"""
    payment_id: uuid.UUID
    gateway_order_id: str
    gateway_payment_id: str
    signature: str

class PaymentResponse(BaseSchema):
    id: uuid.UUID
    order_id: uuid.UUID
    user_id: uuid.UUID
    amount: Money
    currency: str
    gateway: str
    method: PaymentType
    status: PaymentStatus
    gateway_order_id: Optional[str] = None
    gateway_transaction_id: Optional[str] = None
    failure_reason: Optional[str] = None
    failure_code: Optional[str] = None
    refund_details: Optional[Dict[str, Any]] = None
    processed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime

class PaymentInitiateResponse(BaseModel):
    payment: PaymentResponse
    gateway_order_id: str
    amount_minor: int
    currency: str
    key_id: Optional[str] = None
