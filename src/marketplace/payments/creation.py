"""Payment intent creation: command and handler."""

import math

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.access import order_for_requester
from marketplace.ordering.order import OrderStatus
from marketplace.payments.gateway import get_gateway
from marketplace.payments.intent import PaymentIntent, receipt_for
from marketplace.shared.errors import ConflictError


@marketplace.command(part_of="PaymentIntent")
class CreatePaymentIntent:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    amount = Float(required=True)


@marketplace.command_handler(part_of=PaymentIntent)
class CreatePaymentIntentHandler:
    @handle(CreatePaymentIntent)
    def create_intent(self, command):
        if command.amount is None or command.amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than 0"]})

        order = order_for_requester(command.order_id, command.actor_id)
        if OrderStatus(order.status) != OrderStatus.APPROVED:
            raise ConflictError(
                "Only approved orders can be paid",
                current_status=order.status,
                expected=[OrderStatus.APPROVED.value],
            )
        if not math.isclose(command.amount, order.total_amount, abs_tol=0.005):
            raise ValidationError({"amount": [f"Amount must equal the order total {order.total_amount:.2f}"]})

        gateway_order = get_gateway().create_order(
            amount_minor=round(command.amount * 100),
            currency=order.currency,
            receipt=receipt_for(order.id),
            notes={"order_id": str(order.id), "requester_id": str(order.requester_id)},
        )
        intent = PaymentIntent.open(order.id, gateway_order, command.amount)
        current_domain.repository_for(PaymentIntent).add(intent)
        return str(intent.id)
