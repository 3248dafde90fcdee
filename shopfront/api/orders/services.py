"""
Order service layer
Handles checkout, order queries and admin order management
"""

from typing import Any, Dict, List, Optional
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import uuid
import logging

from shopfront.api.cart.services import CartService
from shopfront.core.config import settings
from shopfront.core.event_bus import AdminActionEvent, OrderPlacedEvent, event_bus
from shopfront.core.exceptions import (
    NotFoundException,
    ForbiddenException,
    ValidationException,
    InvalidStatusException,
    OrderNotCancellableException,
)
from shopfront.core.security import Principal
from shopfront.models import (
    Order,
    OrderItem,
    OrderStatus,
    OrderPaymentStatus,
    AuditAction,
    AuditEntity,
)
from shopfront.utils.dependencies import RequestContext
from shopfront.utils.pagination import paginate
from shopfront.utils.validators import validate_order_status, validate_admin_payment_status
from .schemas import OrderResponse
from .state_machine import order_state_machine

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

def calculate_totals(subtotal: Decimal) -> Dict[str, Decimal]:
    """Tax is rounded half-up to cents, shipping is free above the threshold"""
    subtotal = Decimal(subtotal).quantize(CENT, rounding=ROUND_HALF_UP)
    tax = (subtotal * settings.TAX_RATE).quantize(CENT, rounding=ROUND_HALF_UP)
    shipping = Decimal("0.00") if subtotal > settings.FREE_SHIPPING_THRESHOLD else settings.FLAT_SHIPPING_FEE
    shipping = Decimal(shipping).quantize(CENT)
    return {
        "subtotal": subtotal,
        "tax": tax,
        "shipping": shipping,
        "total": subtotal + tax + shipping,
    }

def order_to_response(order: Order) -> OrderResponse:
    response = OrderResponse.model_validate(order)
    response.can_cancel = order_state_machine.is_cancellable(order.status)
    return response

class OrderService:
    """Order service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_order(self, order_id: uuid.UUID) -> Order:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise NotFoundException("Order not found")
        return order

    async def _get_owned_order(self, principal: Principal, order_id: uuid.UUID) -> Order:
        order = await self._get_order(order_id)
        if not principal.owns(order.user_id):
            raise ForbiddenException("Not authorized to access this order")
        return order

    async def place_order(
        self,
        principal: Principal,
        shipping_address: Optional[Dict[str, Any]] = None,
        notes: Optional[str] = None,
        payment_method: Optional[str] = None
    ) -> OrderResponse:
        """
        Place an order from the caller's cart

        The order insert and the cart clear commit together. The cart's
        version guard makes a concurrent second placement fail with a
        conflict instead of creating a duplicate order.

        Raises:
            ValidationException: If the cart is missing or empty
            ConcurrentModificationException: If the cart changed meanwhile
        """
        cart_service = CartService(self.db)
        cart = await cart_service.load_cart(principal.user_id)

        if cart is None or not cart.items:
            raise ValidationException("Cart is empty. Add items before placing an order.", field="cart")

        subtotal = sum((item.price * item.quantity for item in cart.items), Decimal("0"))
        totals = calculate_totals(subtotal)

        order = Order(
            user_id=principal.user_id,
            status=OrderStatus.PENDING,
            payment_status=OrderPaymentStatus.UNPAID,
            payment_method=payment_method,
            shipping_address=shipping_address or {},
            notes=notes,
            items=[
                OrderItem(
                    product_id=item.product_id,
                    name=item.name,
                    image=item.image,
                    price=item.price,
                    quantity=item.quantity,
                    size=item.size,
                )
                for item in cart.items
            ],
            **totals,
        )
        self.db.add(order)

        cart.items.clear()
        cart.touch()
        await cart_service.commit_cart()

        logger.info(f"Order {order.id} placed by {principal.user_id}")
        await event_bus.publish(
            OrderPlacedEvent(order_id=order.id, user_id=principal.user_id, total=str(order.total))
        )

        return order_to_response(await self._get_order(order.id))

    async def list_orders(self, principal: Principal) -> List[OrderResponse]:
        """Caller's orders, newest first"""
        result = await self.db.execute(
            select(Order)
            .where(Order.user_id == principal.user_id)
            .order_by(Order.created_at.desc())
        )
        return [order_to_response(order) for order in result.scalars().all()]

    async def get_order(self, principal: Principal, order_id: uuid.UUID) -> OrderResponse:
        order = await self._get_owned_order(principal, order_id)
        return order_to_response(order)

    async def cancel(self, principal: Principal, order_id: uuid.UUID) -> OrderResponse:
        """
        Cancel the caller's order

        Raises:
            NotFoundException: If order not found
            ForbiddenException: If the caller does not own the order
            OrderNotCancellableException: If the order is past pending
        """
        order = await self._get_owned_order(principal, order_id)

        if not order_state_machine.is_cancellable(order.status):
            raise OrderNotCancellableException(order.status.value)

        order.status = OrderStatus.CANCELLED
        await self.db.commit()

        logger.info(f"Order {order.id} cancelled by {principal.user_id}")
        return order_to_response(await self._get_order(order.id))

    # Admin operations

    async def _publish_admin_change(
        self,
        admin: Principal,
        order: Order,
        action: AuditAction,
        changes: Dict[str, Any],
        context: Optional[RequestContext]
    ) -> None:
        context = context or RequestContext()
        await event_bus.publish(
            AdminActionEvent(
                admin_id=admin.user_id,
                action=action.value,
                entity=AuditEntity.ORDER.value,
                entity_id=order.id,
                changes=changes,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
            )
        )

    async def update_status(
        self,
        admin: Principal,
        order_id: uuid.UUID,
        status: str,
        context: Optional[RequestContext] = None
    ) -> OrderResponse:
        """Admin override, any valid status may be set from any status"""
        checked = validate_order_status(status)
        if not checked:
            raise InvalidStatusException(checked.error)

        order = await self._get_order(order_id)
        previous = order.status
        order.status = checked.value
        await self.db.commit()

        await self._publish_admin_change(
            admin, order, AuditAction.ORDER_STATUS,
            {"status": {"from": previous.value, "to": order.status.value}}, context
        )
        return order_to_response(await self._get_order(order.id))

    async def update_payment_status(
        self,
        admin: Principal,
        order_id: uuid.UUID,
        payment_status: str,
        context: Optional[RequestContext] = None
    ) -> OrderResponse:
        checked = validate_admin_payment_status(payment_status)
        if not checked:
            raise InvalidStatusException(checked.error, field="payment_status")

        order = await self._get_order(order_id)
        previous = order.payment_status
        order.payment_status = checked.value
        await self.db.commit()

        await self._publish_admin_change(
            admin, order, AuditAction.UPDATE,
            {"payment_status": {"from": previous.value, "to": order.payment_status.value}}, context
        )
        return order_to_response(await self._get_order(order.id))

    async def update_tracking(
        self,
        admin: Principal,
        order_id: uuid.UUID,
        tracking_number: Optional[str],
        context: Optional[RequestContext] = None
    ) -> OrderResponse:
        if not tracking_number or not tracking_number.strip():
            raise ValidationException("Tracking number is required", field="tracking_number")

        order = await self._get_order(order_id)
        previous = order.tracking_number
        order.tracking_number = tracking_number.strip()
        await self.db.commit()

        await self._publish_admin_change(
            admin, order, AuditAction.UPDATE,
            {"tracking_number": {"from": previous, "to": order.tracking_number}}, context
        )
        return order_to_response(await self._get_order(order.id))

    async def update_order(
        self,
        admin: Principal,
        order_id: uuid.UUID,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        tracking_number: Optional[str] = None,
        context: Optional[RequestContext] = None
    ) -> OrderResponse:
        """Combined admin update, only the given fields change"""
        new_status = new_payment_status = None
        if status:
            checked = validate_order_status(status)
            if not checked:
                raise InvalidStatusException(checked.error)
            new_status = checked.value
        if payment_status:
            checked = validate_admin_payment_status(payment_status)
            if not checked:
                raise InvalidStatusException(checked.error, field="payment_status")
            new_payment_status = checked.value

        order = await self._get_order(order_id)
        changes: Dict[str, Any] = {}

        if new_status is not None and new_status != order.status:
            changes["status"] = {"from": order.status.value, "to": new_status.value}
            order.status = new_status
        if new_payment_status is not None and new_payment_status != order.payment_status:
            changes["payment_status"] = {"from": order.payment_status.value, "to": new_payment_status.value}
            order.payment_status = new_payment_status
        if tracking_number and tracking_number != order.tracking_number:
            changes["tracking_number"] = {"from": order.tracking_number, "to": tracking_number}
            order.tracking_number = tracking_number

        await self.db.commit()

        if changes:
            action = AuditAction.ORDER_STATUS if "status" in changes else AuditAction.UPDATE
            await self._publish_admin_change(admin, order, action, changes, context)
        return order_to_response(await self._get_order(order.id))

    async def list_all(
        self,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> Dict[str, Any]:
        """All orders for the admin surface, newest first"""
        stmt = select(Order)

        if status:
            checked = validate_order_status(status)
            if not checked:
                raise InvalidStatusException(checked.error)
            stmt = stmt.where(Order.status == checked.value)
        if payment_status:
            checked = validate_admin_payment_status(payment_status)
            if not checked and payment_status != OrderPaymentStatus.UNPAID.value:
                raise InvalidStatusException(checked.error, field="payment_status")
            stmt = stmt.where(Order.payment_status == OrderPaymentStatus(payment_status))

        stmt = stmt.order_by(Order.created_at.desc())
        result = await paginate(self.db, stmt, page, limit)
        result["items"] = [order_to_response(order) for order in result["items"]]
        return result

    async def admin_get(self, order_id: uuid.UUID) -> OrderResponse:
        return order_to_response(await self._get_order(order_id))

    async def summary_stats(self) -> Dict[str, Any]:
        """Order count, revenue and counts by status and payment status"""
        total_orders = await self.db.scalar(select(func.count(Order.id))) or 0
        total_revenue = await self.db.scalar(select(func.coalesce(func.sum(Order.total), 0)))

        by_status = await self.db.execute(
            select(Order.status, func.count(Order.id)).group_by(Order.status)
        )
        by_payment_status = await self.db.execute(
            select(Order.payment_status, func.count(Order.id)).group_by(Order.payment_status)
        )

        return {
            "total_orders": total_orders,
            "total_revenue": float(total_revenue or 0),
            "orders_by_status": {row[0].value: row[1] for row in by_status.all()},
            "orders_by_payment_status": {row[0].value: row[1] for row in by_payment_status.all()},
        }
