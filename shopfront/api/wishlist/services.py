"""
Wishlist service layer
"""

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import uuid
import logging

from shopfront.core.exceptions import NotFoundException
from shopfront.core.security import Principal
from shopfront.models import Product, WishlistItem
from .schemas import WishlistItemResponse, WishlistResponse

logger = logging.getLogger(__name__)

class WishlistService:
    """Saved products per user"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_wishlist(self, principal: Principal) -> WishlistResponse:
        result = await self.db.execute(
            select(WishlistItem)
            .where(WishlistItem.user_id == principal.user_id)
            .order_by(WishlistItem.created_at.desc())
            .execution_options(populate_existing=True)
        )
        items = [
            WishlistItemResponse.model_validate(item)
            for item in result.scalars().unique().all()
            if item.product is not None
        ]
        return WishlistResponse(items=items, count=len(items))

    async def add(self, principal: Principal, product_id: uuid.UUID) -> WishlistResponse:
        """Adding a product already on the list is a no-op"""
        product = await self.db.get(Product, product_id)
        if not product:
            raise NotFoundException("Product not found")

        existing = await self.db.scalar(
            select(WishlistItem.id).where(
                WishlistItem.user_id == principal.user_id,
                WishlistItem.product_id == product_id
            )
        )
        if not existing:
            self.db.add(WishlistItem(user_id=principal.user_id, product_id=product_id))
            try:
                await self.db.commit()
            except IntegrityError:
                # Concurrent add of the same product
                await self.db.rollback()

        return await self.get_wishlist(principal)

    async def remove(self, principal: Principal, product_id: uuid.UUID) -> WishlistResponse:
        await self.db.execute(
            delete(WishlistItem).where(
                WishlistItem.user_id == principal.user_id,
                WishlistItem.product_id == product_id
            )
        )
        await self.db.commit()
        return await self.get_wishlist(principal)

    async def clear(self, principal: Principal) -> None:
        await self.db.execute(
            delete(WishlistItem).where(WishlistItem.user_id == principal.user_id)
        )
        await self.db.commit()
        logger.info(f"Wishlist cleared for {principal.user_id}")
