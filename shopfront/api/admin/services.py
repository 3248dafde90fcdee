"""
Admin reporting queries
"""

from typing import Any, Dict, Optional
from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from shopfront.models import User, Order, Product, OrderStatus, OrderPaymentStatus
from .schemas import DashboardStats

class AdminStatsService:
    """Dashboard and payment statistics"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *criteria) -> int:
        stmt = select(func.count(model.id))
        if criteria:
            stmt = stmt.where(*criteria)
        return await self.db.scalar(stmt) or 0

    async def dashboard(self) -> DashboardStats:
        """Counts plus revenue over orders whose payment completed"""
        revenue = await self.db.scalar(
            select(func.coalesce(func.sum(Order.total), 0))
            .where(Order.payment_status == OrderPaymentStatus.COMPLETED)
        )
        return DashboardStats(
            total_users=await self._count(User),
            total_orders=await self._count(Order),
            total_products=await self._count(Product),
            total_revenue=float(revenue or 0),
            pending_orders=await self._count(Order, Order.status == OrderStatus.PENDING),
            shipped_orders=await self._count(Order, Order.status == OrderStatus.SHIPPED),
            delivered_orders=await self._count(Order, Order.status == OrderStatus.DELIVERED),
        )

    async def payment_stats(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Completed/failed/refunded counts and completed totals per payment method"""
        window = []
        if start_date:
            window.append(Order.created_at >= start_date)
        if end_date:
            window.append(Order.created_at <= end_date)

        completed = [Order.payment_status == OrderPaymentStatus.COMPLETED, *window]
        by_method = await self.db.execute(
            select(Order.payment_method, func.count(Order.id), func.coalesce(func.sum(Order.total), 0))
            .where(*completed)
            .group_by(Order.payment_method)
        )

        return {
            "total_completed": await self._count(Order, *completed),
            "total_failed": await self._count(
                Order, Order.payment_status == OrderPaymentStatus.FAILED, *window
            ),
            "total_refunded": await self._count(
                Order, Order.payment_status == OrderPaymentStatus.REFUNDED, *window
            ),
            "by_method": [
                {"method": method or "unspecified", "count": count, "total": float(total or 0)}
                for method, count, total in by_method.all()
            ],
        }
