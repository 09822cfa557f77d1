"""Order fulfillment: dispatch and delivery, both performed by the fulfiller."""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.access import order_for_fulfiller
from marketplace.ordering.order import Order


@marketplace.command(part_of="Order")
class DispatchOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    note = Text()


@marketplace.command(part_of="Order")
class DeliverOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    note = Text()


@marketplace.command_handler(part_of=Order)
class FulfillmentHandler:
    @handle(DispatchOrder)
    def dispatch_order(self, command):
        order = order_for_fulfiller(command.order_id, command.actor_id)
        order.dispatch(note=command.note)
        current_domain.repository_for(Order).add(order)

    @handle(DeliverOrder)
    def deliver_order(self, command):
        order = order_for_fulfiller(command.order_id, command.actor_id)
        order.deliver(note=command.note)
        current_domain.repository_for(Order).add(order)
