"""
Configurable fake payment gateway for development and testing
Signatures are real HMACs over a fixed secret so the verify path is exercised
"""

from decimal import Decimal
from typing import Optional
from uuid import uuid4
import hashlib
import hmac
import time

from .gateway import GatewayError, GatewayOrder, PaymentGateway, to_minor_units

FAKE_KEY_SECRET = "fake_key_secret"
FAKE_WEBHOOK_SECRET = "fake_webhook_secret"

def _hmac(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()

class FakeGateway(PaymentGateway):
    """Deterministic in-process gateway"""

    name = "fake"
    key_id = "fake_key_id"

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.delay_seconds: float = 0.0
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Gateway unavailable",
        delay_seconds: float = 0.0
    ) -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.delay_seconds = delay_seconds

    def create_order(self, amount: Decimal, currency: str, receipt: str) -> GatewayOrder:
        self.calls.append({"method": "create_order", "amount": amount, "currency": currency, "receipt": receipt})

        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if not self.should_succeed:
            raise GatewayError(self.failure_reason, code="GATEWAY_DECLINED")

        order_id = f"fake_order_{uuid4().hex[:14]}"
        minor = to_minor_units(amount)
        return GatewayOrder(
            id=order_id,
            amount=minor,
            currency=currency,
            raw={"id": order_id, "amount": minor, "currency": currency, "receipt": receipt, "status": "created"},
        )

    @staticmethod
    def sign_payment(gateway_order_id: str, gateway_payment_id: str) -> str:
        """Signature a client would receive after paying"""
        return _hmac(FAKE_KEY_SECRET, f"{gateway_order_id}|{gateway_payment_id}".encode("utf-8"))

    @staticmethod
    def sign_webhook(body: bytes) -> str:
        return _hmac(FAKE_WEBHOOK_SECRET, body)

    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: Optional[str]) -> bool:
        if not signature:
            return False
        return hmac.compare_digest(self.sign_payment(gateway_order_id, gateway_payment_id), signature)

    def verify_webhook_signature(self, body: bytes, signature: Optional[str]) -> bool:
        if not signature:
            return False
        return hmac.compare_digest(self.sign_webhook(body), signature)
