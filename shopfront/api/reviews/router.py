"""Review router"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from shopfront.core.database import get_db
from shopfront.core.security import Principal, get_current_principal
from shopfront.schemas.base import success_response
from shopfront.utils.dependencies import get_pagination_params
from shopfront.utils.pagination import PaginationParams
from .schemas import ReviewCreate, ReviewUpdate
from .services import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])

@router.get("/product/{product_id}")
async def list_product_reviews(
    product_id: uuid.UUID,
    pagination: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db)
):
    """Get all reviews for a product"""
    reviews = await ReviewService(db).list_reviews(product_id, pagination.page, pagination.limit)
    return success_response(reviews, "Reviews fetched successfully")

@router.post("", status_code=status.HTTP_201_CREATED)
async def add_review(
    review_data: ReviewCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Add review for a product"""
    review = await ReviewService(db).add_review(
        principal,
        product_id=review_data.product_id,
        rating=review_data.rating,
        title=review_data.title,
        comment=review_data.comment
    )
    return success_response(review, "Review added successfully")

@router.put("/{review_id}")
async def update_review(
    review_id: uuid.UUID,
    review_data: ReviewUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    review = await ReviewService(db).update_review(
        principal,
        review_id,
        rating=review_data.rating,
        title=review_data.title,
        comment=review_data.comment
    )
    return success_response(review, "Review updated successfully")

@router.delete("/{review_id}")
async def delete_review(
    review_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    await ReviewService(db).delete_review(principal, review_id)
    return success_response({}, "Review deleted successfully")
