"""
Payment gateway port and factory

Adapters are synchronous; the payment service runs them in a worker
thread with a timeout.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

from shopfront.core.config import settings
from shopfront.core.exceptions import BadRequestException

SUPPORTED_GATEWAYS = ("razorpay", "fake")

class GatewayError(Exception):
    """Raised by adapters when the provider rejects or fails a call"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code

@dataclass(frozen=True)
class GatewayOrder:
    """Order created at the provider for one payment attempt"""

    id: str
    amount: int
    currency: str
    raw: Dict[str, Any] = field(default_factory=dict)

class PaymentGateway(ABC):
    """Abstract payment gateway interface"""

    name: str = ""
    key_id: Optional[str] = None

    @abstractmethod
    def create_order(self, amount: Decimal, currency: str, receipt: str) -> GatewayOrder:
        """Create a provider order the client will pay against"""

    @abstractmethod
    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        """Check the signature the client received after paying"""

    @abstractmethod
    def verify_webhook_signature(self, body: bytes, signature: str) -> bool:
        """Check that a webhook body really comes from the provider"""

def to_minor_units(amount: Decimal) -> int:
    """Amount in the smallest currency unit (paise for INR)"""
    return int((Decimal(amount) * 100).to_integral_value())

_gateways: Dict[str, PaymentGateway] = {}

def _build_gateway(name: str) -> PaymentGateway:
    if name == "fake":
        from .fake_gateway import FakeGateway
        return FakeGateway()
    if name == "razorpay":
        from .razorpay_client import RazorpayGateway
        return RazorpayGateway()
    raise BadRequestException(f"Unsupported payment gateway: {name}", error_code="UNSUPPORTED_GATEWAY")

def get_gateway(name: Optional[str] = None) -> PaymentGateway:
    """Return the gateway adapter, defaulting to the configured one"""
    name = (name or settings.PAYMENT_GATEWAY).lower()
    if name not in SUPPORTED_GATEWAYS:
        raise BadRequestException(f"Unsupported payment gateway: {name}", error_code="UNSUPPORTED_GATEWAY")
    if name not in _gateways:
        _gateways[name] = _build_gateway(name)
    return _gateways[name]

def reset_gateways() -> None:
    _gateways.clear()
