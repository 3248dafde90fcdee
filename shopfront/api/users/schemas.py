"""User profile schemas"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
import re

from shopfront.api.auth.schemas import UserResponse
from shopfront.schemas.base import Money

PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")

class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if v is not None else v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v is None:
            return v
        v = re.sub(r"[\s\-()]", "", v)
        if not PHONE_PATTERN.match(v):
            raise ValueError("Invalid phone number")
        return v

class RoleUpdate(BaseModel):
    role: str

class UserDetailResponse(UserResponse):
    """Admin view with order totals"""
    total_orders: int = 0
    total_spent: Money = 0
