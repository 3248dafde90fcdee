"""Cart request and response schemas"""

from pydantic import BaseModel
from typing import List, Optional
import uuid

from shopfront.schemas.base import BaseSchema, Money

class CartItemCreate(BaseModel):
    """Add to cart request"""
    product_id: uuid.UUID
    quantity: int = 1
    size: str = "M"

class CartItemUpdate(BaseModel):
    """Update cart item request"""
    quantity: int

class CartItemResponse(BaseSchema):
    """Cart line with its product snapshot"""
    id: uuid.UUID
    product_id: uuid.UUID
    name: str
    price: Money
    image: str
    category: Optional[str] = None
    quantity: int
    size: str
    line_total: Money

class CartResponse(BaseSchema):
    """Complete cart response"""
    id: Optional[uuid.UUID] = None
    items: List[CartItemResponse] = []
    item_count: int = 0
    total: Money = 0
    version: Optional[int] = None
