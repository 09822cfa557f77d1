"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (default)
- RazorpayGateway when MARKETPLACE_PAYMENT_GATEWAY=razorpay

Both sign with PAYMENT_KEY_SECRET.
"""

import os

from marketplace.payments.gateway.fake_adapter import FakeGateway
from marketplace.payments.gateway.port import PaymentGateway
from marketplace.payments.gateway.razorpay_adapter import RazorpayGateway

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to FakeGateway."""
    global _current_gateway
    if _current_gateway is None:
        adapter = os.environ.get("MARKETPLACE_PAYMENT_GATEWAY", "fake")
        if adapter == "fake":
            _current_gateway = FakeGateway(secret=os.environ.get("PAYMENT_KEY_SECRET", "fake_secret"))
        elif adapter == "razorpay":
            _current_gateway = RazorpayGateway(
                key_id=os.environ["PAYMENT_KEY_ID"],
                key_secret=os.environ["PAYMENT_KEY_SECRET"],
            )
        else:
            raise ValueError(f"Unknown payment gateway: {adapter}")
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
