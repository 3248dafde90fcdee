"""Review request and response schemas"""

from pydantic import BaseModel, Field
from typing import Any, Optional
from datetime import datetime
import uuid

from shopfront.schemas.base import BaseSchema

class ReviewCreate(BaseModel):
    """Fields are checked by the service so missing values map to 400"""
    product_id: Optional[uuid.UUID] = None
    rating: Optional[Any] = None
    title: Optional[str] = Field(None, max_length=255)
    comment: Optional[str] = None

class ReviewUpdate(BaseModel):
    rating: Optional[Any] = None
    title: Optional[str] = Field(None, max_length=255)
    comment: Optional[str] = None

class ReviewAuthor(BaseSchema):
    id: uuid.UUID
    name: str

class ReviewResponse(BaseSchema):
    id: uuid.UUID
    product_id: uuid.UUID
    user_id: uuid.UUID
    user: Optional[ReviewAuthor] = None
    rating: int
    title: str
    comment: str
    created_at: datetime
    updated_at: datetime
