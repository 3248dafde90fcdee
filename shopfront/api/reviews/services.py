"""
Review service layer
Every review write recomputes the product's mean rating in the same commit
"""

from typing import Any, Dict, Optional
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import uuid
import logging

from shopfront.core.exceptions import (
    NotFoundException,
    ForbiddenException,
    ValidationException,
    InvalidRatingException,
    DuplicateReviewException,
)
from shopfront.core.security import Principal
from shopfront.models import Product, Review
from shopfront.utils.pagination import paginate
from shopfront.utils.validators import validate_rating, validate_required, clean_text
from .schemas import ReviewResponse

logger = logging.getLogger(__name__)

class ReviewService:
    """Product review service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_review(self, review_id: uuid.UUID) -> Review:
        result = await self.db.execute(
            select(Review)
            .options(selectinload(Review.user))
            .where(Review.id == review_id)
            .execution_options(populate_existing=True)
        )
        review = result.scalar_one_or_none()
        if not review:
            raise NotFoundException("Review not found")
        return review

    async def recompute_rating(self, product_id: uuid.UUID) -> float:
        """Set product.rating to the mean of its reviews, 0 when none remain"""
        await self.db.flush()
        average = await self.db.scalar(
            select(func.avg(Review.rating)).where(Review.product_id == product_id)
        )
        rating = float(average) if average is not None else 0.0

        product = await self.db.get(Product, product_id)
        if product is not None:
            product.rating = rating
        return rating

    async def list_reviews(self, product_id: uuid.UUID, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """Reviews for a product, newest first"""
        stmt = (
            select(Review)
            .options(selectinload(Review.user))
            .where(Review.product_id == product_id)
            .order_by(Review.created_at.desc())
        )
        result = await paginate(self.db, stmt, page, limit)
        return {
            "reviews": [ReviewResponse.model_validate(r) for r in result["items"]],
            "pagination": result["pagination"],
        }

    async def add_review(
        self,
        principal: Principal,
        product_id: Optional[uuid.UUID],
        rating: Any,
        title: Optional[str],
        comment: Optional[str]
    ) -> ReviewResponse:
        """
        Add the caller's review of a product

        Raises:
            ValidationException: If a field is missing
            InvalidRatingException: If rating is outside 1..5
            NotFoundException: If product not found
            DuplicateReviewException: If the caller already reviewed it
        """
        title, comment = clean_text(title), clean_text(comment)

        checked = validate_required(product_id=product_id, rating=rating, title=title, comment=comment)
        if not checked:
            raise ValidationException("Missing required fields", field=checked.field)

        checked = validate_rating(rating)
        if not checked:
            raise InvalidRatingException(checked.error)

        product = await self.db.get(Product, product_id)
        if not product:
            raise NotFoundException("Product not found")

        existing = await self.db.scalar(
            select(Review.id).where(
                Review.product_id == product_id,
                Review.user_id == principal.user_id
            )
        )
        if existing:
            raise DuplicateReviewException()

        review = Review(
            product_id=product_id,
            user_id=principal.user_id,
            rating=checked.value,
            title=title,
            comment=comment,
        )
        self.db.add(review)

        try:
            await self.recompute_rating(product_id)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateReviewException()

        logger.info(f"User {principal.user_id} reviewed product {product_id}")
        return ReviewResponse.model_validate(await self._get_review(review.id))

    async def update_review(
        self,
        principal: Principal,
        review_id: uuid.UUID,
        rating: Any = None,
        title: Optional[str] = None,
        comment: Optional[str] = None
    ) -> ReviewResponse:
        """Owner-only edit, only the given fields change"""
        review = await self._get_review(review_id)

        if not principal.owns(review.user_id):
            raise ForbiddenException("Not authorized to update this review")

        if rating is not None:
            checked = validate_rating(rating)
            if not checked:
                raise InvalidRatingException(checked.error)
            review.rating = checked.value

        title, comment = clean_text(title), clean_text(comment)
        if title:
            review.title = title
        if comment:
            review.comment = comment

        await self.recompute_rating(review.product_id)
        await self.db.commit()

        return ReviewResponse.model_validate(await self._get_review(review.id))

    async def delete_review(self, principal: Principal, review_id: uuid.UUID) -> None:
        """Owner or admin may delete"""
        review = await self._get_review(review_id)

        if not principal.owns(review.user_id) and not principal.is_admin:
            raise ForbiddenException("Not authorized to delete this review")

        product_id = review.product_id
        await self.db.delete(review)
        await self.recompute_rating(product_id)
        await self.db.commit()

        logger.info(f"Review {review_id} deleted by {principal.user_id}")
