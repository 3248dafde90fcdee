"""
Pagination utilities
"""

from typing import Any, Dict
from pydantic import BaseModel, Field
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from shopfront.core.config import settings

class PaginationParams(BaseModel):
    """Pagination parameters"""
    page: int = Field(1, ge=1, description="Page number")
    limit: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size")

    @property
    def offset(self) -> int:
        """Calculate offset"""
        return (self.page - 1) * self.limit

def pagination_meta(total: int, page: int, limit: int) -> Dict[str, int]:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": (total + limit - 1) // limit if limit else 0,
    }

async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE
) -> Dict[str, Any]:
    """
    Paginate query results

    Args:
        db: Database session
        query: SQLAlchemy select returning ORM entities
        page: Page number
        limit: Page size

    Returns:
        Dictionary with the page of items and pagination data
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = await db.scalar(count_query) or 0

    offset = (page - 1) * limit
    result = await db.execute(query.offset(offset).limit(limit))
    items = result.scalars().unique().all()

    return {"items": items, "pagination": pagination_meta(total, page, limit)}
