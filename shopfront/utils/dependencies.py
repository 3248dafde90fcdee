"""
Common dependencies for FastAPI
"""

from dataclasses import dataclass
from typing import Optional
from fastapi import Query, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shopfront.core.config import settings
from shopfront.core.database import get_db
from shopfront.core.exceptions import ForbiddenException, UnauthorizedException
from shopfront.core.security import Principal, get_current_principal
from shopfront.models import User, UserRole
from .pagination import PaginationParams

@dataclass(frozen=True)
class RequestContext:
    """Client details recorded alongside admin actions"""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size")
) -> PaginationParams:
    """Get pagination parameters from query"""
    return PaginationParams(page=page, limit=limit)

def get_request_context(request: Request) -> RequestContext:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return RequestContext(ip_address=ip_address, user_agent=request.headers.get("User-Agent"))

async def require_active_admin(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
) -> Principal:
    """
    Admin routes re-check the stored account, so a demoted or
    deactivated admin loses access before their token expires
    """
    user = await db.get(User, principal.user_id)

    if not user:
        raise UnauthorizedException("User not found")
    if not user.is_active:
        raise ForbiddenException("Account has been deactivated")
    if user.role != UserRole.ADMIN:
        raise ForbiddenException("Access denied. Admin privileges required.")

    return Principal(user_id=user.id, role=user.role.value, email=user.email)
