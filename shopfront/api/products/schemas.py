"""
Product schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

from shopfront.schemas.base import BaseSchema, Money

PRODUCT_SORTS = ("price-asc", "price-desc", "newest", "rating")

class ProductCreate(BaseModel):
    """Required fields are checked by the service so missing values map to 400"""
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = None
    gender: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    images: Optional[List[str]] = None
    stock: Optional[int] = Field(None, ge=0)
    sizes: Optional[List[str]] = None
    material: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None
    featured: bool = False
    is_new_arrival: bool = False

class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = None
    gender: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    images: Optional[List[str]] = None
    stock: Optional[int] = Field(None, ge=0)
    sizes: Optional[List[str]] = None
    material: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None
    featured: Optional[bool] = None
    is_new_arrival: Optional[bool] = None

class ProductBulkItem(ProductUpdate):
    id: uuid.UUID

class ProductBulkUpdate(BaseModel):
    updates: List[ProductBulkItem] = []

class ProductResponse(BaseSchema):
    id: uuid.UUID
    name: str
    description: str
    price: Money
    stock: int
    category: str
    gender: Optional[str] = None
    image: str
    images: List[str] = []
    sizes: List[str] = []
    material: Optional[str] = None
    tags: List[str] = []
    featured: bool
    is_new_arrival: bool
    rating: float
    created_at: datetime
    updated_at: datetime

def product_changes(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset fields, keeping explicit falsy values like stock=0"""
    return {key: value for key, value in data.items() if value is not None}
