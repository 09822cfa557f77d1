"""Order cancellation: the requester withdraws an order before it ships."""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.access import order_for_requester
from marketplace.ordering.order import Order


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    reason = Text()


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = order_for_requester(command.order_id, command.actor_id)
        order.cancel(reason=command.reason)
        current_domain.repository_for(Order).add(order)
