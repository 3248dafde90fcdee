"""
Order schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
import uuid

from shopfront.models import OrderStatus, OrderPaymentStatus
from shopfront.schemas.base import BaseSchema, Money

class ShippingAddress(BaseModel):
    """Free-form address captured at checkout"""
    full_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    address_line1: Optional[str] = Field(None, max_length=500)
    address_line2: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)

class OrderCreate(BaseModel):
    """Place an order from the current cart"""
    shipping_address: Optional[ShippingAddress] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)

class OrderStatusUpdate(BaseModel):
    status: str

class OrderPaymentStatusUpdate(BaseModel):
    payment_status: str

class OrderTrackingUpdate(BaseModel):
    tracking_number: Optional[str] = None

class OrderUpdate(BaseModel):
    """Combined admin update"""
    status: Optional[str] = None
    payment_status: Optional[str] = None
    tracking_number: Optional[str] = Field(None, max_length=100)

class OrderItemResponse(BaseSchema):
    """Order line snapshot"""
    id: uuid.UUID
    product_id: uuid.UUID
    name: str
    image: str
    price: Money
    quantity: int
    size: str

class OrderResponse(BaseSchema):
    """Schema for order response"""
    id: uuid.UUID
    user_id: uuid.UUID
    items: List[OrderItemResponse]
    subtotal: Money
    tax: Money
    shipping: Money
    total: Money
    status: OrderStatus
    payment_status: OrderPaymentStatus
    payment_method: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    can_cancel: bool = False
    created_at: datetime
    updated_at: datetime
