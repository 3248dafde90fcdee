"""Admin management endpoints"""

from typing import Optional
from datetime import datetime
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from shopfront.api.orders.schemas import OrderStatusUpdate, OrderPaymentStatusUpdate, OrderTrackingUpdate
from shopfront.api.orders.services import OrderService
from shopfront.api.products.schemas import ProductCreate, ProductUpdate, ProductBulkUpdate
from shopfront.api.products.services import ProductService
from shopfront.api.users.schemas import RoleUpdate
from shopfront.api.users.services import UserService
from shopfront.core.database import get_db
from shopfront.core.security import Principal
from shopfront.schemas.base import success_response
from shopfront.services.audit_service import AuditService
from shopfront.services.discount_service import DiscountService
from shopfront.utils.dependencies import get_pagination_params, get_request_context, require_active_admin
from shopfront.utils.pagination import PaginationParams
from .schemas import DiscountCreate, DiscountUpdate
from .services import AdminStatsService

router = APIRouter(prefix="/admin", tags=["admin"])

# Dashboard

@router.get("/dashboard/stats")
async def dashboard_stats(
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    """Get admin dashboard statistics"""
    stats = await AdminStatsService(db).dashboard()
    return success_response(stats, "Dashboard stats")

# Products

@router.get("/products")
async def list_products(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    pagination: PaginationParams = Depends(get_pagination_params),
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await ProductService(db).admin_list(
        category=category,
        search=search,
        featured=featured,
        page=pagination.page,
        limit=pagination.limit
    )
    return success_response(result, "Products retrieved")

@router.post("/products", status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService(db).create_product(
        admin, product_data.model_dump(), context=get_request_context(request)
    )
    return success_response(product, "Product created successfully")

@router.put("/products/bulk/update")
async def bulk_update_products(
    bulk_data: ProductBulkUpdate,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    """Apply several product updates, useful for inventory"""
    products = await ProductService(db).bulk_update(
        admin,
        [item.model_dump() for item in bulk_data.updates],
        context=get_request_context(request)
    )
    return success_response(products, f"{len(products)} products updated")

@router.get("/products/{product_id}")
async def get_product(
    product_id: uuid.UUID,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService(db).get_product(product_id)
    return success_response(product, "Product retrieved")

@router.put("/products/{product_id}")
async def update_product(
    product_id: uuid.UUID,
    product_data: ProductUpdate,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService(db).update_product(
        admin, product_id, product_data.model_dump(), context=get_request_context(request)
    )
    return success_response(product, "Product updated successfully")

@router.delete("/products/{product_id}")
async def delete_product(
    product_id: uuid.UUID,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    await ProductService(db).delete_product(admin, product_id, context=get_request_context(request))
    return success_response({"product_id": str(product_id)}, "Product deleted successfully")

# Orders

@router.get("/orders")
async def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_status: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(get_pagination_params),
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await OrderService(db).list_all(
        status=status_filter,
        payment_status=payment_status,
        page=pagination.page,
        limit=pagination.limit
    )
    return success_response(result, "Orders retrieved")

@router.get("/orders/stats/summary")
async def order_stats(
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    stats = await OrderService(db).summary_stats()
    return success_response(stats, "Order stats")

@router.get("/orders/{order_id}")
async def get_order(
    order_id: uuid.UUID,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).admin_get(order_id)
    return success_response(order, "Order retrieved")

@router.put("/orders/{order_id}/status")
async def update_order_status(
    order_id: uuid.UUID,
    update_data: OrderStatusUpdate,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).update_status(
        admin, order_id, update_data.status, context=get_request_context(request)
    )
    return success_response(order, "Order status updated")

@router.put("/orders/{order_id}/payment-status")
async def update_order_payment_status(
    order_id: uuid.UUID,
    update_data: OrderPaymentStatusUpdate,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).update_payment_status(
        admin, order_id, update_data.payment_status, context=get_request_context(request)
    )
    return success_response(order, "Payment status updated")

@router.put("/orders/{order_id}/tracking")
async def update_order_tracking(
    order_id: uuid.UUID,
    update_data: OrderTrackingUpdate,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).update_tracking(
        admin, order_id, update_data.tracking_number, context=get_request_context(request)
    )
    return success_response(order, "Tracking number updated")

# Payments

@router.get("/payments/stats")
async def payment_stats(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    stats = await AdminStatsService(db).payment_stats(start_date, end_date)
    return success_response(stats, "Payment stats")

# Users

@router.get("/users")
async def list_users(
    role: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    pagination: PaginationParams = Depends(get_pagination_params),
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await UserService(db).list_users(
        role=role, is_active=is_active, page=pagination.page, limit=pagination.limit
    )
    return success_response(result, "Users retrieved")

@router.get("/users/{user_id}")
async def get_user(
    user_id: uuid.UUID,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    user = await UserService(db).get_user_detail(user_id)
    return success_response(user, "User retrieved")

@router.put("/users/{user_id}/role")
async def update_user_role(
    user_id: uuid.UUID,
    role_data: RoleUpdate,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    user = await UserService(db).change_role(
        admin, user_id, role_data.role, context=get_request_context(request)
    )
    return success_response(user, "User role updated")

@router.put("/users/{user_id}/toggle-active")
async def toggle_user_active(
    user_id: uuid.UUID,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    user = await UserService(db).toggle_active(admin, user_id, context=get_request_context(request))
    return success_response(user, f"User {'activated' if user.is_active else 'deactivated'}")

# Discounts

@router.get("/discounts")
async def list_discounts(
    is_active: Optional[bool] = Query(None),
    pagination: PaginationParams = Depends(get_pagination_params),
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await DiscountService(db).list_discounts(
        is_active=is_active, page=pagination.page, limit=pagination.limit
    )
    return success_response(result, "Discounts retrieved")

@router.post("/discounts", status_code=status.HTTP_201_CREATED)
async def create_discount(
    discount_data: DiscountCreate,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    discount = await DiscountService(db).create_discount(
        admin, discount_data.model_dump(), context=get_request_context(request)
    )
    return success_response(discount, "Discount created successfully")

@router.put("/discounts/{discount_id}")
async def update_discount(
    discount_id: uuid.UUID,
    discount_data: DiscountUpdate,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    discount = await DiscountService(db).update_discount(
        admin, discount_id, discount_data.model_dump(), context=get_request_context(request)
    )
    return success_response(discount, "Discount updated successfully")

@router.delete("/discounts/{discount_id}")
async def delete_discount(
    discount_id: uuid.UUID,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    await DiscountService(db).delete_discount(admin, discount_id, context=get_request_context(request))
    return success_response({}, "Discount deleted successfully")

@router.put("/discounts/{discount_id}/toggle-active")
async def toggle_discount_active(
    discount_id: uuid.UUID,
    request: Request,
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    discount = await DiscountService(db).toggle_active(
        admin, discount_id, context=get_request_context(request)
    )
    state = "activated" if discount["is_active"] else "deactivated"
    return success_response(discount, f"Discount {state}")

# Audit logs

@router.get("/audit-logs")
async def list_audit_logs(
    action: Optional[str] = Query(None),
    entity: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(get_pagination_params),
    admin: Principal = Depends(require_active_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await AuditService(db).list_logs(
        action=action, entity=entity, page=pagination.page, limit=pagination.limit
    )
    return success_response(result, "Audit logs retrieved")
