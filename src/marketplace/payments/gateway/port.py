"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement, so the
FakeGateway (dev/test) and RazorpayGateway (production) are interchangeable.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GatewayOrder:
    """A gateway-side order the requester pays against."""

    external_order_ref: str
    amount_minor: int
    currency: str
    receipt: str
    status: str = "created"


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_order(self, amount_minor: int, currency: str, receipt: str, notes: dict | None = None) -> GatewayOrder:
        """Register a payable order with the gateway. Amounts are in minor units (paise)."""
        ...

    @abstractmethod
    def verify_payment_signature(self, external_order_ref: str, external_payment_ref: str, signature: str) -> bool:
        """Check that a payment assertion was signed with the merchant secret."""
        ...
