"""Admin request schemas"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

class DiscountCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    discount_type: Optional[str] = None
    discount_value: Optional[Decimal] = Field(None, ge=0)
    applicable_products: Optional[List[uuid.UUID]] = None
    applicable_categories: Optional[List[str]] = None
    min_purchase_amount: Optional[Decimal] = Field(None, ge=0)
    max_discount_amount: Optional[Decimal] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, ge=1)
    per_user_limit: Optional[int] = Field(None, ge=1)
    coupon_code: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None

class DiscountUpdate(DiscountCreate):
    pass

class DashboardStats(BaseModel):
    total_users: int
    total_orders: int
    total_products: int
    total_revenue: float
    pending_orders: int
    shipped_orders: int
    delivered_orders: int
