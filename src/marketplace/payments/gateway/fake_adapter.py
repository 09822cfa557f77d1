"""Configurable fake payment gateway for development and testing.

Simulates the gateway without any external calls. Signatures are real
HMAC-SHA256 digests over the configured secret, so tests exercise the same
verification path as production; ``sign()`` produces a valid one.
"""

from uuid import uuid4

from marketplace.payments.gateway.port import GatewayOrder, PaymentGateway
from marketplace.payments.signature import compute_signature, signature_matches
from marketplace.shared.errors import ExternalServiceError


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, secret: str = "fake_secret") -> None:
        self.secret = secret
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_order(self, amount_minor: int, currency: str, receipt: str, notes: dict | None = None) -> GatewayOrder:
        self.calls.append(
            {
                "method": "create_order",
                "amount_minor": amount_minor,
                "currency": currency,
                "receipt": receipt,
                "notes": notes or {},
            }
        )
        if not self.should_succeed:
            raise ExternalServiceError("fake-gateway", self.failure_reason)
        return GatewayOrder(
            external_order_ref=f"order_fake_{uuid4().hex[:14]}",
            amount_minor=amount_minor,
            currency=currency,
            receipt=receipt,
        )

    def verify_payment_signature(self, external_order_ref: str, external_payment_ref: str, signature: str) -> bool:
        self.calls.append(
            {
                "method": "verify_payment_signature",
                "external_order_ref": external_order_ref,
                "external_payment_ref": external_payment_ref,
            }
        )
        return signature_matches(self.secret, external_order_ref, external_payment_ref, signature)

    def sign(self, external_order_ref: str, external_payment_ref: str) -> str:
        """Produce the signature a real gateway would send for this payment."""
        return compute_signature(self.secret, external_order_ref, external_payment_ref)

    def reset(self) -> None:
        """Clear recorded calls and restore default behavior."""
        self.calls.clear()
        self.should_succeed = True
        self.failure_reason = "Gateway unavailable"
