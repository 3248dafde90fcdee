"""Wishlist router"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from shopfront.core.database import get_db
from shopfront.core.security import Principal, get_current_principal
from shopfront.schemas.base import success_response
from .services import WishlistService

router = APIRouter(prefix="/wishlist", tags=["wishlist"])

@router.get("")
async def get_wishlist(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    wishlist = await WishlistService(db).get_wishlist(principal)
    return success_response(wishlist, "Wishlist fetched successfully")

@router.post("/add/{product_id}")
async def add_to_wishlist(
    product_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    wishlist = await WishlistService(db).add(principal, product_id)
    return success_response(wishlist, "Product added to wishlist")

@router.delete("/remove/{product_id}")
async def remove_from_wishlist(
    product_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    wishlist = await WishlistService(db).remove(principal, product_id)
    return success_response(wishlist, "Product removed from wishlist")

@router.delete("")
async def clear_wishlist(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    await WishlistService(db).clear(principal)
    return success_response({}, "Wishlist cleared successfully")
