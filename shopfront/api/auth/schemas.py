"""
Authentication schemas for request/response validation
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

from shopfront.models import UserRole
from shopfront.schemas.base import BaseSchema
from shopfront.utils.validators import validate_email_address

class SignupRequest(BaseModel):
    """User registration request"""
    name: str = Field(..., min_length=2, max_length=50)
    email: str
    password: str = Field(..., max_length=100)
    password_confirm: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email_address(v)

class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

class RefreshTokenRequest(BaseModel):
    refresh_token: Optional[str] = None

class UpdatePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., max_length=100)

class UserResponse(BaseSchema):
    """Public view of an account"""
    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    role: UserRole
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class AuthResponse(BaseModel):
    user: UserResponse
    tokens: TokenResponse
