"""API router aggregation"""

from fastapi import APIRouter

from .admin.router import router as admin_router
from .auth.router import router as auth_router
from .cart.router import router as cart_router
from .health import router as health_router
from .orders.router import router as orders_router
from .payments.router import router as payments_router
from .products.router import router as products_router
from .reviews.router import router as reviews_router
from .users.router import router as users_router
from .wishlist.router import router as wishlist_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(products_router)
api_router.include_router(cart_router)
api_router.include_router(orders_router)
api_router.include_router(payments_router)
api_router.include_router(reviews_router)
api_router.include_router(wishlist_router)
api_router.include_router(admin_router)

__all__ = ["api_router"]
