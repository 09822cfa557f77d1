"""Domain events for the PaymentIntent aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="PaymentIntent")
class PaymentIntentCreated:
    __version__ = 1

    intent_id = Identifier(required=True)
    order_id = Identifier(required=True)
    external_order_ref = String(required=True)
    amount = Float(required=True)
    amount_minor = Integer(required=True)
    currency = String(required=True)
    created_at = DateTime(required=True)


@marketplace.event(part_of="PaymentIntent")
class PaymentIntentVerified:
    __version__ = 1

    intent_id = Identifier(required=True)
    order_id = Identifier(required=True)
    external_order_ref = String(required=True)
    external_payment_ref = String(required=True)
    verified_at = DateTime(required=True)
