"""
Order API routes
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from shopfront.core.database import get_db
from shopfront.core.security import Principal, get_current_principal
from shopfront.schemas.base import success_response
from shopfront.utils.dependencies import get_request_context, require_active_admin
from .schemas import OrderCreate, OrderUpdate
from .services import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Place an order from the cart"""
    order = await OrderService(db).place_order(
        principal,
        shipping_address=order_data.shipping_address.model_dump(exclude_none=True)
        if order_data.shipping_address else None,
        notes=order_data.notes,
        payment_method=order_data.payment_method
    )
    return success_response(order, "Order placed successfully")

@router.get("")
async def list_my_orders(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's order history"""
    orders = await OrderService(db).list_orders(principal)
    return success_response(orders, f"{len(orders)} orders")

@router.get("/{order_id}")
async def get_order(
    order_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get single order by ID"""
    order = await OrderService(db).get_order(principal, order_id)
    return success_response(order, "Order retrieved")

@router.put("/{order_id}")
async def update_order(
    order_id: uuid.UUID,
    update_data: OrderUpdate,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update order status, payment status or tracking (admin)"""
    order = await OrderService(db).update_order(
        admin,
        order_id,
        status=update_data.status,
        payment_status=update_data.payment_status,
        tracking_number=update_data.tracking_number,
        context=get_request_context(request)
    )
    return success_response(order, "Order updated successfully")

@router.delete("/{order_id}")
async def cancel_order(
    order_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Cancel a pending order"""
    order = await OrderService(db).cancel(principal, order_id)
    return success_response(order, "Order cancelled successfully")
