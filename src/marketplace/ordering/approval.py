"""Order approval and rejection: fulfiller decisions on a pending order."""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.access import order_for_fulfiller
from marketplace.ordering.order import Order


@marketplace.command(part_of="Order")
class ApproveOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    note = Text()


@marketplace.command(part_of="Order")
class RejectOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    reason = Text(required=True)


@marketplace.command_handler(part_of=Order)
class OrderDecisionHandler:
    @handle(ApproveOrder)
    def approve_order(self, command):
        order = order_for_fulfiller(command.order_id, command.actor_id)
        order.approve(note=command.note)
        current_domain.repository_for(Order).add(order)

    @handle(RejectOrder)
    def reject_order(self, command):
        order = order_for_fulfiller(command.order_id, command.actor_id)
        order.reject(reason=command.reason)
        current_domain.repository_for(Order).add(order)
