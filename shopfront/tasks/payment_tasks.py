"""Payment maintenance tasks"""

from celery.utils.log import get_task_logger
from datetime import datetime
from typing import Optional
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopfront.api.payments.state_machine import OPEN_STATUSES, ensure_transition
from shopfront.core.celery_app import celery_app
from shopfront.core.database import get_db_sync_context
from shopfront.models import Order, OrderPaymentStatus, Payment, PaymentStatus
from shopfront.models.base import utcnow

logger = get_task_logger(__name__)

def expire_payments(db: Session, now: Optional[datetime] = None) -> int:
    """
    Move open payments past their expiry to expired
    An order still waiting on an expired attempt goes back to unpaid
    """
    now = now or utcnow()

    payments = db.execute(
        select(Payment)
        .where(
            Payment.status.in_(OPEN_STATUSES),
            Payment.expires_at.is_not(None),
            Payment.expires_at < now,
        )
    ).scalars().all()

    for payment in payments:
        ensure_transition(payment.status, PaymentStatus.EXPIRED)
        payment.status = PaymentStatus.EXPIRED
        payment.failure_reason = "Payment was not completed in time"
        payment.failure_code = "EXPIRED"

        db.flush()

        still_open = db.scalar(
            select(func.count(Payment.id))
            .where(Payment.order_id == payment.order_id, Payment.status.in_(OPEN_STATUSES))
        )
        order = db.get(Order, payment.order_id)
        if order is not None and order.payment_status == OrderPaymentStatus.PENDING and not still_open:
            order.payment_status = OrderPaymentStatus.UNPAID

    return len(payments)

@celery_app.task(name="shopfront.tasks.payment_tasks.expire_stale_payments")
def expire_stale_payments():
    """Expire payments abandoned at the gateway"""
    try:
        with get_db_sync_context() as db:
            expired = expire_payments(db)

        logger.info(f"Expired {expired} stale payments")
        return {"expired_count": expired}

    except Exception as e:
        logger.error(f"Error expiring payments: {str(e)}")
        raise
