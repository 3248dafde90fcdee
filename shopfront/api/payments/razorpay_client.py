"""
Razorpay payment gateway integration
"""

import razorpay
import hmac
import hashlib
from decimal import Decimal
from typing import Optional

from shopfront.core.config import settings
from .gateway import GatewayError, GatewayOrder, PaymentGateway, to_minor_units

class RazorpayGateway(PaymentGateway):
    """Razorpay API client wrapper"""

    name = "razorpay"

    def __init__(self):
        if not settings.RAZORPAY_KEY_ID or not settings.RAZORPAY_KEY_SECRET:
            raise GatewayError("Razorpay credentials are not configured", code="GATEWAY_NOT_CONFIGURED")

        self.key_id = settings.RAZORPAY_KEY_ID
        self.key_secret = settings.RAZORPAY_KEY_SECRET
        self.webhook_secret = settings.RAZORPAY_WEBHOOK_SECRET
        self.client = razorpay.Client(auth=(self.key_id, self.key_secret))

    def create_order(self, amount: Decimal, currency: str, receipt: str) -> GatewayOrder:
        """
        Create Razorpay order

        Args:
            amount: Amount in major units, converted to paise
            currency: Currency code
            receipt: Receipt reference, our payment id

        Returns:
            The created provider order
        """
        try:
            order = self.client.order.create(data={
                "amount": to_minor_units(amount),
                "currency": currency,
                "receipt": receipt,
                "payment_capture": 1,
            })
        except Exception as e:
            raise GatewayError(f"Failed to create payment order: {str(e)}", code="GATEWAY_ORDER_FAILED")

        return GatewayOrder(
            id=order["id"],
            amount=order["amount"],
            currency=order["currency"],
            raw=order,
        )

    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: Optional[str]) -> bool:
        """Signature is HMAC-SHA256 of "order_id|payment_id" with the key secret"""
        if not signature:
            return False

        expected_signature = hmac.new(
            self.key_secret.encode("utf-8"),
            f"{gateway_order_id}|{gateway_payment_id}".encode("utf-8"),
            hashlib.sha256
        ).hexdigest()

        return hmac.compare_digest(expected_signature, signature)

    def verify_webhook_signature(self, body: bytes, signature: Optional[str]) -> bool:
        """Webhook signature is HMAC-SHA256 of the raw body with the webhook secret"""
        if not signature or not self.webhook_secret:
            return False

        expected_signature = hmac.new(
            self.webhook_secret.encode("utf-8"),
            body,
            hashlib.sha256
        ).hexdigest()

        return hmac.compare_digest(expected_signature, signature)
