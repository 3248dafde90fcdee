"""
Payment service layer
Handles payment initiation, verification and status queries
"""

from typing import List, Optional
from datetime import timedelta
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import asyncio
import uuid
import logging

from shopfront.core.config import settings
from shopfront.core.event_bus import PaymentStatusChangedEvent, event_bus
from shopfront.core.exceptions import (
    BadRequestException,
    ForbiddenException,
    InvalidPaymentException,
    NotFoundException,
    PaymentGatewayException,
    ValidationException,
)
from shopfront.core.security import Principal
from shopfront.models import Order, OrderStatus, OrderPaymentStatus, Payment, PaymentStatus
from shopfront.models.base import utcnow
from shopfront.utils.validators import validate_payment_type
from .gateway import GatewayError, PaymentGateway, get_gateway
from .schemas import PaymentInitiateResponse, PaymentResponse
from .state_machine import OPEN_STATUSES, ensure_transition

logger = logging.getLogger(__name__)

# How a payment's status shows up on its order
ORDER_PAYMENT_STATUS = {
    PaymentStatus.INITIATED: OrderPaymentStatus.PENDING,
    PaymentStatus.PENDING: OrderPaymentStatus.PENDING,
    PaymentStatus.COMPLETED: OrderPaymentStatus.COMPLETED,
    PaymentStatus.FAILED: OrderPaymentStatus.FAILED,
    PaymentStatus.REFUNDED: OrderPaymentStatus.REFUNDED,
    PaymentStatus.EXPIRED: OrderPaymentStatus.UNPAID,
}

def mirror_on_order(order: Order, status: PaymentStatus, other_attempt_open: bool = False) -> None:
    """
    Copy a payment outcome onto its order's payment status
    A completed order is only changed by a refund. A failed attempt leaves the
    order pending while another attempt is still open. Order status is never touched.
    """
    if order.payment_status == OrderPaymentStatus.COMPLETED and status != PaymentStatus.REFUNDED:
        return
    if status == PaymentStatus.FAILED and other_attempt_open:
        return
    order.payment_status = ORDER_PAYMENT_STATUS[status]

def resolve_gateway(name: Optional[str]) -> PaymentGateway:
    try:
        return get_gateway(name)
    except GatewayError as e:
        raise PaymentGatewayException(str(e))

class PaymentService:
    """Payment service for processing transactions"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_payment(self, payment_id: uuid.UUID) -> Payment:
        result = await self.db.execute(
            select(Payment)
            .where(Payment.id == payment_id)
            .execution_options(populate_existing=True)
        )
        payment = result.scalar_one_or_none()
        if not payment:
            raise NotFoundException("Payment not found")
        return payment

    async def _get_by_transaction(self, gateway_transaction_id: str) -> Optional[Payment]:
        result = await self.db.execute(
            select(Payment)
            .where(Payment.gateway_transaction_id == gateway_transaction_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _other_attempt_open(self, payment: Payment) -> bool:
        """Whether the order has another initiated or pending payment"""
        count = await self.db.scalar(
            select(func.count(Payment.id))
            .where(
                Payment.order_id == payment.order_id,
                Payment.id != payment.id,
                Payment.status.in_(OPEN_STATUSES),
            )
        )
        return bool(count)

    async def _publish(self, payment: Payment) -> None:
        await event_bus.publish(
            PaymentStatusChangedEvent(
                payment_id=payment.id,
                order_id=payment.order_id,
                status=payment.status.value,
            )
        )

    async def initiate(
        self,
        principal: Principal,
        order_id: uuid.UUID,
        gateway_name: Optional[str] = None,
        method: str = "upi"
    ) -> PaymentInitiateResponse:
        """
        Start a payment attempt

        The payment row is committed as initiated before the gateway is
        called, so no transaction is open while waiting on the provider.

        Raises:
            NotFoundException: If order not found
            ForbiddenException: If the caller does not own the order
            BadRequestException: If the order is cancelled or already paid
            PaymentGatewayException: If the gateway fails or times out
        """
        checked = validate_payment_type(method)
        if not checked:
            raise ValidationException(checked.error, field=checked.field)

        gateway = resolve_gateway(gateway_name)

        order = await self.db.get(Order, order_id, populate_existing=True)
        if not order:
            raise NotFoundException("Order not found")
        if not principal.owns(order.user_id):
            raise ForbiddenException("Not authorized to pay for this order")
        if order.status == OrderStatus.CANCELLED:
            raise BadRequestException("Cannot pay for a cancelled order", error_code="ORDER_CANCELLED")
        if order.payment_status == OrderPaymentStatus.COMPLETED:
            raise BadRequestException("Order already paid", error_code="ORDER_ALREADY_PAID")

        payment = Payment(
            order_id=order.id,
            user_id=principal.user_id,
            amount=order.total,
            currency=settings.DEFAULT_CURRENCY,
            gateway=gateway.name,
            method=checked.value,
            status=PaymentStatus.INITIATED,
            expires_at=utcnow() + timedelta(minutes=settings.PAYMENT_EXPIRY_MINUTES),
        )
        self.db.add(payment)
        mirror_on_order(order, PaymentStatus.INITIATED)
        await self.db.commit()

        try:
            gateway_order = await asyncio.wait_for(
                asyncio.to_thread(gateway.create_order, payment.amount, payment.currency, str(payment.id)),
                timeout=settings.PAYMENT_GATEWAY_TIMEOUT,
            )
        except (GatewayError, asyncio.TimeoutError) as e:
            if isinstance(e, GatewayError):
                reason, code = str(e), e.code or "GATEWAY_ERROR"
            else:
                reason, code = "Payment gateway timed out", "GATEWAY_TIMEOUT"
            logger.error(f"Gateway {gateway.name} failed for payment {payment.id}: {reason}")

            payment = await self._get_payment(payment.id)
            ensure_transition(payment.status, PaymentStatus.FAILED)
            payment.status = PaymentStatus.FAILED
            payment.failure_reason = reason
            payment.failure_code = code
            order = await self.db.get(Order, payment.order_id, populate_existing=True)
            mirror_on_order(order, PaymentStatus.FAILED, await self._other_attempt_open(payment))
            await self.db.commit()
            await self._publish(payment)

            raise PaymentGatewayException(f"Payment gateway error: {reason}")

        payment = await self._get_payment(payment.id)
        ensure_transition(payment.status, PaymentStatus.PENDING)
        payment.gateway_order_id = gateway_order.id
        payment.status = PaymentStatus.PENDING
        await self.db.commit()
        await self._publish(payment)

        logger.info(f"Payment {payment.id} pending at {gateway.name} as {gateway_order.id}")
        return PaymentInitiateResponse(
            payment=PaymentResponse.model_validate(payment),
            gateway_order_id=gateway_order.id,
            amount_minor=gateway_order.amount,
            currency=gateway_order.currency,
            key_id=gateway.key_id,
        )

    async def verify(
        self,
        principal: Principal,
        payment_id: uuid.UUID,
        gateway_order_id: str,
        gateway_payment_id: str,
        signature: str,
        gateway_name: Optional[str] = None
    ) -> PaymentResponse:
        """
        Verify the gateway signature for a payment

        The gateway transaction id is the idempotency key: verifying the
        same transaction again returns the recorded payment unchanged.

        Raises:
            InvalidPaymentException: If the signature is rejected
        """
        existing = await self._get_by_transaction(gateway_payment_id)
        if existing is not None:
            if not principal.owns(existing.user_id):
                raise ForbiddenException("Not authorized to verify this payment")
            return PaymentResponse.model_validate(existing)

        payment = await self._get_payment(payment_id)
        if not principal.owns(payment.user_id):
            raise ForbiddenException("Not authorized to verify this payment")
        if gateway_name and gateway_name.lower() != payment.gateway:
            raise InvalidPaymentException(f"Payment was not made through {gateway_name}")
        if payment.gateway_order_id != gateway_order_id:
            raise InvalidPaymentException("Gateway order does not match this payment")
        if payment.status not in OPEN_STATUSES:
            raise InvalidPaymentException(f"Payment is already {payment.status.value}")

        gateway = resolve_gateway(payment.gateway)
        order = await self.db.get(Order, payment.order_id, populate_existing=True)

        if not gateway.verify_payment_signature(gateway_order_id, gateway_payment_id, signature):
            ensure_transition(payment.status, PaymentStatus.FAILED)
            payment.status = PaymentStatus.FAILED
            payment.failure_reason = "Payment signature verification failed"
            payment.failure_code = "SIGNATURE_MISMATCH"
            mirror_on_order(order, PaymentStatus.FAILED, await self._other_attempt_open(payment))
            await self.db.commit()
            await self._publish(payment)
            raise InvalidPaymentException("Payment verification failed")

        ensure_transition(payment.status, PaymentStatus.COMPLETED)
        payment.status = PaymentStatus.COMPLETED
        payment.gateway_transaction_id = gateway_payment_id
        payment.gateway_signature = signature
        payment.processed_at = utcnow()
        mirror_on_order(order, PaymentStatus.COMPLETED)

        try:
            await self.db.commit()
        except IntegrityError:
            # Another request recorded this transaction first
            await self.db.rollback()
            existing = await self._get_by_transaction(gateway_payment_id)
            if existing is None:
                raise
            return PaymentResponse.model_validate(existing)

        await self._publish(payment)
        logger.info(f"Payment {payment.id} completed with {gateway_payment_id}")
        return PaymentResponse.model_validate(payment)

    async def get_status(self, principal: Principal, payment_id: uuid.UUID) -> PaymentResponse:
        payment = await self._get_payment(payment_id)
        if not principal.owns(payment.user_id) and not principal.is_admin:
            raise ForbiddenException("Not authorized to view this payment")
        return PaymentResponse.model_validate(payment)

    async def history(self, principal: Principal) -> List[PaymentResponse]:
        """Caller's payments, newest first"""
        result = await self.db.execute(
            select(Payment)
            .where(Payment.user_id == principal.user_id)
            .order_by(Payment.created_at.desc())
        )
        return [PaymentResponse.model_validate(p) for p in result.scalars().all()]

    async def apply_gateway_event(
        self,
        gateway_order_id: str,
        new_status: PaymentStatus,
        gateway_payment_id: Optional[str] = None,
        failure_reason: Optional[str] = None,
        failure_code: Optional[str] = None
    ) -> Optional[Payment]:
        """
        Record a provider-reported outcome for a payment
        Events that would move a payment backwards are ignored
        """
        result = await self.db.execute(
            select(Payment)
            .where(Payment.gateway_order_id == gateway_order_id)
            .order_by(Payment.created_at.desc())
        )
        payment = result.scalars().first()
        if payment is None:
            logger.warning(f"Webhook for unknown gateway order {gateway_order_id}")
            return None

        if payment.status == new_status or payment.status not in OPEN_STATUSES:
            logger.info(f"Ignoring {new_status.value} for payment {payment.id} in {payment.status.value}")
            return payment

        if new_status == PaymentStatus.COMPLETED and gateway_payment_id:
            if await self._get_by_transaction(gateway_payment_id) is not None:
                return payment
            payment.gateway_transaction_id = gateway_payment_id
            payment.processed_at = utcnow()
        if new_status == PaymentStatus.FAILED:
            payment.failure_reason = failure_reason or "Payment failed at gateway"
            payment.failure_code = failure_code

        ensure_transition(payment.status, new_status)
        payment.status = new_status
        order = await self.db.get(Order, payment.order_id, populate_existing=True)
        mirror_on_order(order, new_status, await self._other_attempt_open(payment))
        await self.db.commit()
        await self._publish(payment)
        return payment
