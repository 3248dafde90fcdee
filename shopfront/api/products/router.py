"""
Public catalogue routes
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from shopfront.core.database import get_db
from shopfront.schemas.base import success_response
from .services import ProductService

router = APIRouter(prefix="/products", tags=["products"])

@router.get("")
async def list_products(
    category: Optional[str] = Query(None, description="Category, 'All' for every category"),
    search: Optional[str] = Query(None, description="Matches name or description"),
    sort: Optional[str] = Query(None, description="price-asc, price-desc, newest or rating"),
    db: AsyncSession = Depends(get_db)
):
    """Get all products with optional filtering"""
    products = await ProductService(db).list_products(category=category, search=search, sort=sort)
    return success_response(products, f"{len(products)} products")

@router.get("/featured")
async def featured_products(db: AsyncSession = Depends(get_db)):
    products = await ProductService(db).featured()
    return success_response(products, "Featured products")

@router.get("/{product_id}")
async def get_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """Get single product by ID"""
    product = await ProductService(db).get_product(product_id)
    return success_response(product, "Product retrieved")
