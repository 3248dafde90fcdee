"""
Payment status transitions
Statuses only move forward, a payment never returns to an earlier state
"""

from typing import Dict, Set
from shopfront.core.exceptions import InvalidTransitionException
from shopfront.models.payment import PaymentStatus

PAYMENT_TRANSITIONS: Dict[PaymentStatus, Set[PaymentStatus]] = {
    PaymentStatus.INITIATED: {
        PaymentStatus.PENDING,
        PaymentStatus.COMPLETED,
        PaymentStatus.FAILED,
        PaymentStatus.EXPIRED,
    },
    PaymentStatus.PENDING: {
        PaymentStatus.COMPLETED,
        PaymentStatus.FAILED,
        PaymentStatus.EXPIRED,
    },
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
    PaymentStatus.EXPIRED: set(),
}

OPEN_STATUSES = (PaymentStatus.INITIATED, PaymentStatus.PENDING)

def can_transition(current: PaymentStatus, new: PaymentStatus) -> bool:
    return new in PAYMENT_TRANSITIONS.get(current, set())

def ensure_transition(current: PaymentStatus, new: PaymentStatus) -> None:
    if not can_transition(current, new):
        raise InvalidTransitionException(
            f"Cannot move payment from {current.value} to {new.value}"
        )
