"""
Cart service layer
Handles shopping cart business logic
"""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
import uuid
import logging

from shopfront.core.config import settings
from shopfront.core.exceptions import (
    NotFoundException,
    InsufficientStockException,
    InvalidQuantityException,
    ValidationException,
    ConcurrentModificationException,
)
from shopfront.core.security import Principal
from shopfront.models import Cart, CartItem, Product
from shopfront.utils.validators import validate_quantity, validate_size
from .schemas import CartResponse

logger = logging.getLogger(__name__)

class CartService:
    """Shopping cart service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_cart(self, user_id: uuid.UUID) -> Optional[Cart]:
        """Fetch the user's cart with its items, refreshing any cached copy"""
        result = await self.db.execute(
            select(Cart)
            .where(Cart.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def commit_cart(self) -> None:
        """
        Commit a cart mutation
        The cart row's version must still match, otherwise another request
        changed the cart first
        """
        try:
            await self.db.commit()
        except (StaleDataError, IntegrityError) as e:
            await self.db.rollback()
            logger.warning(f"Cart write lost a race: {e}")
            raise ConcurrentModificationException("Cart")

    @staticmethod
    def to_response(cart: Optional[Cart]) -> CartResponse:
        if cart is None:
            return CartResponse()
        return CartResponse.model_validate(cart)

    async def get_cart(self, principal: Principal) -> CartResponse:
        """Get the caller's cart, an empty cart when none exists yet"""
        cart = await self.load_cart(principal.user_id)
        return self.to_response(cart)

    async def add_item(
        self,
        principal: Principal,
        product_id: uuid.UUID,
        quantity: int = 1,
        size: str = "M"
    ) -> CartResponse:
        """
        Add a product to the cart

        The same (product, size) line is merged and its quantity is capped
        at the maximum cart quantity

        Raises:
            InvalidQuantityException: If quantity is out of range
            NotFoundException: If product not found
            InsufficientStockException: If not enough stock
        """
        checked = validate_quantity(quantity)
        if not checked:
            raise InvalidQuantityException(checked.error)

        checked_size = validate_size(size)
        if not checked_size:
            raise ValidationException(checked_size.error, field=checked_size.field)
        size = checked_size.value

        product = await self.db.get(Product, product_id)
        if not product:
            raise NotFoundException("Product not found")

        if product.stock < quantity:
            raise InsufficientStockException(product.stock)

        cart = await self.load_cart(principal.user_id)
        if cart is None:
            cart = Cart(user_id=principal.user_id, items=[])
            self.db.add(cart)

        existing = next(
            (item for item in cart.items if item.product_id == product.id and item.size == size),
            None
        )

        if existing:
            existing.quantity = min(existing.quantity + quantity, settings.MAX_CART_QUANTITY)
        else:
            cart.items.append(
                CartItem(
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    image=product.image or "",
                    category=product.category,
                    quantity=quantity,
                    size=size,
                )
            )

        cart.touch()
        await self.commit_cart()

        logger.info(f"User {principal.user_id} added {quantity} x {product.id} ({size}) to cart")
        return self.to_response(await self.load_cart(principal.user_id))

    async def update_item(
        self,
        principal: Principal,
        item_id: uuid.UUID,
        quantity: int
    ) -> CartResponse:
        """Set a line's quantity, re-checking live stock"""
        checked = validate_quantity(quantity)
        if not checked:
            raise InvalidQuantityException(checked.error)

        cart = await self.load_cart(principal.user_id)
        if cart is None:
            raise NotFoundException("Cart not found")

        item = next((i for i in cart.items if i.id == item_id), None)
        if item is None:
            raise NotFoundException("Item not found in cart")

        product = await self.db.get(Product, item.product_id)
        if product and product.stock < quantity:
            raise InsufficientStockException(product.stock)

        item.quantity = quantity
        cart.touch()
        await self.commit_cart()

        return self.to_response(await self.load_cart(principal.user_id))

    async def remove_item(self, principal: Principal, item_id: uuid.UUID) -> CartResponse:
        """Remove a line; an unknown item id leaves the cart unchanged"""
        cart = await self.load_cart(principal.user_id)
        if cart is None:
            raise NotFoundException("Cart not found")

        item = next((i for i in cart.items if i.id == item_id), None)
        if item is not None:
            cart.items.remove(item)
            cart.touch()
            await self.commit_cart()

        return self.to_response(await self.load_cart(principal.user_id))

    async def clear(self, principal: Principal) -> CartResponse:
        """Empty the cart"""
        cart = await self.load_cart(principal.user_id)
        if cart is None:
            raise NotFoundException("Cart not found")

        cart.items.clear()
        cart.touch()
        await self.commit_cart()

        return self.to_response(await self.load_cart(principal.user_id))
