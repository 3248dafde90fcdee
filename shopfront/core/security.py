"""
Security utilities for authentication and authorization
Handles JWT tokens, password hashing, and the request principal
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from uuid import UUID
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .config import settings
from .exceptions import UnauthorizedException

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Security scheme
security = HTTPBearer(auto_error=False)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

@dataclass(frozen=True)
class Principal:
    """Authenticated caller, built from a verified access token"""

    user_id: UUID
    role: str
    email: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def owns(self, owner_id: UUID) -> bool:
        return self.user_id == owner_id

class SecurityUtils:
    """Security utility functions"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash"""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash password using bcrypt"""
        return pwd_context.hash(password)

    @staticmethod
    def _encode(data: Dict[str, Any], token_type: str, lifetime: timedelta) -> str:
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + lifetime
        to_encode.update({"exp": expire, "type": token_type})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def create_access_token(data: Dict[str, Any]) -> str:
        """Create JWT access token"""
        return SecurityUtils._encode(
            data, ACCESS_TOKEN, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )

    @staticmethod
    def create_refresh_token(data: Dict[str, Any]) -> str:
        """Create JWT refresh token"""
        return SecurityUtils._encode(
            data, REFRESH_TOKEN, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        )

    @staticmethod
    def create_token_pair(user_id: UUID, role: str, email: str) -> Dict[str, str]:
        claims = {"sub": str(user_id), "role": role, "email": email}
        return {
            "access_token": SecurityUtils.create_access_token(claims),
            "refresh_token": SecurityUtils.create_refresh_token(claims),
            "token_type": "bearer",
        }

    @staticmethod
    def decode_token(token: str, expected_type: str = ACCESS_TOKEN) -> Dict[str, Any]:
        """Decode and validate JWT token"""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            raise UnauthorizedException("Invalid or expired token", error_code="INVALID_TOKEN")

        if payload.get("type") != expected_type:
            raise UnauthorizedException("Invalid token type", error_code="INVALID_TOKEN")
        if not payload.get("sub"):
            raise UnauthorizedException("Invalid token payload", error_code="INVALID_TOKEN")

        return payload

    @staticmethod
    def principal_from_payload(payload: Dict[str, Any]) -> Principal:
        try:
            user_id = UUID(payload["sub"])
        except (KeyError, ValueError):
            raise UnauthorizedException("Invalid token payload", error_code="INVALID_TOKEN")
        return Principal(
            user_id=user_id,
            role=payload.get("role", "customer"),
            email=payload.get("email", ""),
        )

# Dependency to get current principal from token
async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Principal:
    """Extract and validate the caller from the bearer token"""
    if credentials is None:
        raise UnauthorizedException("Not authorized, no token")

    payload = SecurityUtils.decode_token(credentials.credentials)
    return SecurityUtils.principal_from_payload(payload)
