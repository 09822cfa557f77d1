"""Order events → live notifications for both parties.

Each transition notifies the counterpart and acknowledges the actor.
"""

import json

import structlog
from protean import handle

from marketplace.domain import marketplace
from marketplace.ordering.events import (
    OrderApproved,
    OrderCancelled,
    OrderDelivered,
    OrderDispatched,
    OrderPaid,
    OrderPlaced,
    OrderRejected,
)
from marketplace.ordering.order import Order
from marketplace.realtime import get_dispatcher
from marketplace.realtime.notifier import Notifier

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=Order)
class OrderNotificationsHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        notifier = Notifier(get_dispatcher())
        common = {
            "items": json.loads(event.items),
            "total_amount": event.total_amount,
            "currency": event.currency,
        }
        notifier.notify_order(
            event.fulfiller_id,
            "order_request",
            event.order_id,
            event.actor_id,
            "New order request received",
            event.placed_at,
            requester_id=str(event.requester_id),
            delivery_note=event.delivery_note,
            **common,
        )
        notifier.notify_order(
            event.requester_id,
            "order_placed",
            event.order_id,
            event.actor_id,
            "Order placed successfully",
            event.placed_at,
            fulfiller_id=str(event.fulfiller_id),
            **common,
        )

    @handle(OrderApproved)
    def on_order_approved(self, event: OrderApproved) -> None:
        notifier = Notifier(get_dispatcher())
        notifier.notify_order(
            event.requester_id,
            "order_approved",
            event.order_id,
            event.actor_id,
            "Your order has been approved",
            event.approved_at,
            note=event.note,
            total_amount=event.total_amount,
        )
        notifier.notify_order(
            event.fulfiller_id,
            "order_approval_sent",
            event.order_id,
            event.actor_id,
            "Order approval sent to requester",
            event.approved_at,
        )

    @handle(OrderRejected)
    def on_order_rejected(self, event: OrderRejected) -> None:
        notifier = Notifier(get_dispatcher())
        notifier.notify_order(
            event.requester_id,
            "order_rejected",
            event.order_id,
            event.actor_id,
            "Your order has been rejected",
            event.rejected_at,
            reason=event.reason,
        )
        notifier.notify_order(
            event.fulfiller_id,
            "order_rejection_sent",
            event.order_id,
            event.actor_id,
            "Order rejection sent to requester",
            event.rejected_at,
        )

    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid) -> None:
        notifier = Notifier(get_dispatcher())
        for party_id in (event.requester_id, event.fulfiller_id):
            notifier.notify_order(
                party_id,
                "payment_done",
                event.order_id,
                event.actor_id,
                "Payment completed",
                event.paid_at,
                amount=event.amount,
                currency=event.currency,
                transaction_id=event.transaction_id,
            )

    @handle(OrderDispatched)
    def on_order_dispatched(self, event: OrderDispatched) -> None:
        notifier = Notifier(get_dispatcher())
        notifier.notify_order(
            event.requester_id,
            "order_dispatched",
            event.order_id,
            event.actor_id,
            "Your order has been dispatched",
            event.dispatched_at,
            note=event.note,
            was_paid=event.was_paid == "True",
        )
        notifier.notify_order(
            event.fulfiller_id,
            "order_dispatch_sent",
            event.order_id,
            event.actor_id,
            "Dispatch notice sent to requester",
            event.dispatched_at,
        )

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        notifier = Notifier(get_dispatcher())
        notifier.notify_order(
            event.requester_id,
            "order_delivered",
            event.order_id,
            event.actor_id,
            "Your order has been delivered",
            event.delivered_at,
            note=event.note,
        )
        notifier.notify_order(
            event.fulfiller_id,
            "order_delivery_sent",
            event.order_id,
            event.actor_id,
            "Delivery confirmation sent to requester",
            event.delivered_at,
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        notifier = Notifier(get_dispatcher())
        notifier.notify_order(
            event.fulfiller_id,
            "order_cancelled",
            event.order_id,
            event.actor_id,
            "An order has been cancelled by the requester",
            event.cancelled_at,
            reason=event.reason,
            previous_status=event.previous_status,
        )
        notifier.notify_order(
            event.requester_id,
            "order_cancellation_sent",
            event.order_id,
            event.actor_id,
            "Cancellation sent to fulfiller",
            event.cancelled_at,
        )
