"""Cart router"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from shopfront.core.database import get_db
from shopfront.core.security import Principal, get_current_principal
from shopfront.schemas.base import success_response
from .schemas import CartItemCreate, CartItemUpdate
from .services import CartService

router = APIRouter(prefix="/cart", tags=["cart"])

@router.get("")
async def get_cart(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get the current user's cart"""
    cart = await CartService(db).get_cart(principal)
    message = "Cart retrieved" if cart.items else "Cart is empty"
    return success_response(cart, message)

@router.post("/add", status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    item_data: CartItemCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Add item to cart"""
    cart = await CartService(db).add_item(
        principal,
        product_id=item_data.product_id,
        quantity=item_data.quantity,
        size=item_data.size
    )
    return success_response(cart, "Product added to cart")

@router.put("/update/{item_id}")
async def update_cart_item(
    item_id: uuid.UUID,
    update_data: CartItemUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Update cart item quantity"""
    cart = await CartService(db).update_item(principal, item_id, update_data.quantity)
    return success_response(cart, "Item quantity updated")

@router.delete("/remove/{item_id}")
async def remove_from_cart(
    item_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Remove item from cart"""
    cart = await CartService(db).remove_item(principal, item_id)
    return success_response(cart, "Item removed from cart")

@router.delete("/clear")
async def clear_cart(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Clear entire cart"""
    cart = await CartService(db).clear(principal)
    return success_response(cart, "Cart cleared")
