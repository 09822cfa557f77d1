"""Payment verification: the single path by which an order becomes paid.

The signature is checked before anything is loaded for writing. A mismatch is
logged as a security event and nothing changes.
"""

import math

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.access import order_for_requester
from marketplace.ordering.order import Order
from marketplace.payments.gateway import get_gateway
from marketplace.payments.intent import PaymentIntent
from marketplace.shared.errors import NotFoundError, SignatureInvalidError
from marketplace.shared.lookup import find_all

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="PaymentIntent")
class VerifyPayment:
    external_order_ref = String(required=True, max_length=255)
    external_payment_ref = String(required=True, max_length=255)
    signature = String(required=True, max_length=512)
    amount = Float(required=True)
    actor_id = Identifier(required=True)


def intent_for_ref(external_order_ref):
    intents = find_all(PaymentIntent, external_order_ref=external_order_ref)
    if not intents:
        raise NotFoundError("PaymentIntent", external_order_ref)
    return intents[0]


@marketplace.command_handler(part_of=PaymentIntent)
class VerifyPaymentHandler:
    @handle(VerifyPayment)
    def verify_payment(self, command):
        if not get_gateway().verify_payment_signature(
            command.external_order_ref,
            command.external_payment_ref,
            command.signature,
        ):
            logger.warning(
                "payment_signature_invalid",
                security_event=True,
                external_order_ref=command.external_order_ref,
                external_payment_ref=command.external_payment_ref,
                actor_id=str(command.actor_id),
            )
            raise SignatureInvalidError()

        intent = intent_for_ref(command.external_order_ref)
        if not math.isclose(command.amount, intent.amount, abs_tol=0.005):
            raise ValidationError({"amount": ["Amount does not match the payment intent"]})

        order = order_for_requester(intent.order_id, command.actor_id)
        order.record_payment(
            transaction_id=command.external_payment_ref,
            external_order_ref=command.external_order_ref,
            amount=intent.amount,
        )
        intent.mark_verified(command.external_payment_ref)

        current_domain.repository_for(Order).add(order)
        current_domain.repository_for(PaymentIntent).add(intent)

        logger.info(
            "payment_verified",
            order_id=str(order.id),
            external_order_ref=command.external_order_ref,
            amount=intent.amount,
        )
        return str(order.id)
