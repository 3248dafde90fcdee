"""
Payment webhook handlers
"""

from typing import Any, Awaitable, Callable, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import json
import logging

from shopfront.core.exceptions import InvalidPaymentException
from shopfront.models import PaymentStatus
from .services import PaymentService, resolve_gateway

logger = logging.getLogger(__name__)

def _payment_entity(payload: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return payload["payload"]["payment"]["entity"]
    except (KeyError, TypeError):
        raise InvalidPaymentException("Malformed webhook payload")

async def handle_payment_captured(service: PaymentService, payload: Dict[str, Any]):
    entity = _payment_entity(payload)
    logger.info(f"Payment captured: {entity.get('id')}")
    return await service.apply_gateway_event(
        entity.get("order_id"),
        PaymentStatus.COMPLETED,
        gateway_payment_id=entity.get("id"),
    )

async def handle_payment_failed(service: PaymentService, payload: Dict[str, Any]):
    entity = _payment_entity(payload)
    logger.info(f"Payment failed: {entity.get('id')}")
    return await service.apply_gateway_event(
        entity.get("order_id"),
        PaymentStatus.FAILED,
        failure_reason=entity.get("error_description"),
        failure_code=entity.get("error_code"),
    )

EVENT_HANDLERS: Dict[str, Callable[[PaymentService, Dict[str, Any]], Awaitable[Any]]] = {
    "payment.captured": handle_payment_captured,
    "payment.failed": handle_payment_failed,
}

async def process_webhook(
    db: AsyncSession,
    gateway_name: str,
    body: bytes,
    signature: Optional[str]
) -> Dict[str, Any]:
    """
    Verify and apply a gateway callback

    Raises:
        InvalidPaymentException: If the signature or body is invalid
    """
    gateway = resolve_gateway(gateway_name)
    if not gateway.verify_webhook_signature(body, signature):
        raise InvalidPaymentException("Invalid webhook signature")

    try:
        payload = json.loads(body)
    except ValueError:
        raise InvalidPaymentException("Malformed webhook payload")

    event = payload.get("event") if isinstance(payload, dict) else None
    handler = EVENT_HANDLERS.get(event)
    if handler is None:
        logger.info(f"Ignoring {gateway_name} webhook event {event}")
        return {"event": event, "processed": False}

    payment = await handler(PaymentService(db), payload)
    return {
        "event": event,
        "processed": payment is not None,
        "payment_id": str(payment.id) if payment else None,
        "status": payment.status.value if payment else None,
    }
