"""Stale payment sweep"""

from datetime import timedelta

import pytest

from shopfront.api.payments.fake_gateway import FakeGateway
from shopfront.api.payments.state_machine import OPEN_STATUSES, can_transition
from shopfront.core.database import SessionLocal
from shopfront.models import Order, OrderPaymentStatus, Payment, PaymentStatus
from shopfront.models.base import utcnow
from shopfront.tasks.payment_tasks import expire_payments

@pytest.fixture
def started(client, customer_headers, product):
    client.post(
        "/api/cart/add",
        json={"product_id": str(product.id), "quantity": 1, "size": "M"},
        headers=customer_headers,
    )
    order = client.post("/api/orders", json={}, headers=customer_headers).json()["data"]
    return client.post(
        "/api/payments/fake/initiate",
        json={"order_id": order["id"], "method": "card"},
        headers=customer_headers,
    ).json()["data"]

def later(hours=1):
    return utcnow() + timedelta(hours=hours)

class TestExpirePayments:
    def test_expires_open_payment_and_resets_order(self, started):
        with SessionLocal() as db:
            assert expire_payments(db, now=later()) == 1
            db.commit()

        with SessionLocal() as db:
            payment = db.query(Payment).one()
            assert payment.status == PaymentStatus.EXPIRED
            assert payment.failure_code == "EXPIRED"
            assert db.get(Order, payment.order_id).payment_status == OrderPaymentStatus.UNPAID

    def test_leaves_payments_inside_their_window(self, started):
        with SessionLocal() as db:
            assert expire_payments(db, now=utcnow()) == 0

    def test_completed_payments_are_untouched(self, client, customer_headers, started):
        gateway_order_id = started["gateway_order_id"]
        client.post(
            "/api/payments/fake/verify",
            json={
                "payment_id": started["payment"]["id"],
                "gateway_order_id": gateway_order_id,
                "gateway_payment_id": "pay_done",
                "signature": FakeGateway.sign_payment(gateway_order_id, "pay_done"),
            },
            headers=customer_headers,
        )

        with SessionLocal() as db:
            assert expire_payments(db, now=later()) == 0
            assert db.query(Payment).one().status == PaymentStatus.COMPLETED

    def test_order_with_another_open_attempt_stays_pending(self, client, customer_headers, started):
        client.post(
            "/api/payments/fake/initiate",
            json={"order_id": started["payment"]["order_id"], "method": "upi"},
            headers=customer_headers,
        )
        first_id = started["payment"]["id"]

        with SessionLocal() as db:
            pending = db.query(Payment).filter(Payment.status == PaymentStatus.PENDING).all()
            for payment in pending:
                if str(payment.id) != first_id:
                    payment.expires_at = later(hours=5)
            db.commit()

        with SessionLocal() as db:
            assert expire_payments(db, now=later()) == 1
            db.commit()

        with SessionLocal() as db:
            order = db.query(Order).one()
            assert order.payment_status == OrderPaymentStatus.PENDING

    def test_failed_payments_are_untouched(self, started):
        with SessionLocal() as db:
            db.query(Payment).one().status = PaymentStatus.FAILED
            db.commit()

        with SessionLocal() as db:
            assert expire_payments(db, now=later()) == 0
            assert db.query(Payment).one().status == PaymentStatus.FAILED

    def test_swept_statuses_may_expire(self):
        for status in OPEN_STATUSES:
            assert can_transition(status, PaymentStatus.EXPIRED)
