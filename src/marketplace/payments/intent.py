"""PaymentIntent aggregate: a gateway order awaiting the requester's payment.

The external order reference issued by the gateway is what a payment
signature binds, so verification always starts by finding the intent.
"""

import time
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.payments.events import PaymentIntentCreated, PaymentIntentVerified
from marketplace.shared.errors import ConflictError


class IntentStatus(Enum):
    CREATED = "created"
    VERIFIED = "verified"


def receipt_for(order_id, now_ms: int | None = None) -> str:
    """``order_<last 8 of order id>_<last 8 of epoch millis>``."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"order_{str(order_id)[-8:]}_{str(now_ms)[-8:]}"


@marketplace.aggregate
class PaymentIntent:
    order_id = Identifier(required=True)
    external_order_ref = String(required=True, max_length=255, unique=True)
    amount = Float(required=True, min_value=0.0)
    amount_minor = Integer(required=True, min_value=1)
    currency = String(max_length=3, default="INR")
    receipt = String(required=True, max_length=40)
    status = String(choices=IntentStatus, default=IntentStatus.CREATED.value)
    external_payment_ref = String(max_length=255)
    created_at = DateTime()
    verified_at = DateTime()

    @classmethod
    def open(cls, order_id, gateway_order, amount):
        now = datetime.now(UTC)
        intent = cls(
            order_id=str(order_id),
            external_order_ref=gateway_order.external_order_ref,
            amount=amount,
            amount_minor=gateway_order.amount_minor,
            currency=gateway_order.currency,
            receipt=gateway_order.receipt,
            created_at=now,
        )
        intent.raise_(
            PaymentIntentCreated(
                intent_id=str(intent.id),
                order_id=str(order_id),
                external_order_ref=intent.external_order_ref,
                amount=amount,
                amount_minor=intent.amount_minor,
                currency=intent.currency,
                created_at=now,
            )
        )
        return intent

    def mark_verified(self, external_payment_ref):
        if IntentStatus(self.status) != IntentStatus.CREATED:
            raise ConflictError(
                "Payment intent has already been verified",
                current_status=self.status,
                expected=[IntentStatus.CREATED.value],
            )
        now = datetime.now(UTC)
        self.status = IntentStatus.VERIFIED.value
        self.external_payment_ref = external_payment_ref
        self.verified_at = now
        self.raise_(
            PaymentIntentVerified(
                intent_id=str(self.id),
                order_id=str(self.order_id),
                external_order_ref=self.external_order_ref,
                external_payment_ref=external_payment_ref,
                verified_at=now,
            )
        )
