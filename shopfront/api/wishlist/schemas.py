"""Wishlist response schemas"""

from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
import uuid

from shopfront.schemas.base import BaseSchema, Money

class WishlistProduct(BaseSchema):
    id: uuid.UUID
    name: str
    price: Money
    image: str
    images: List[str] = []

class WishlistItemResponse(BaseSchema):
    product_id: uuid.UUID
    product: Optional[WishlistProduct] = None
    created_at: datetime

class WishlistResponse(BaseModel):
    items: List[WishlistItemResponse] = []
    count: int = 0
