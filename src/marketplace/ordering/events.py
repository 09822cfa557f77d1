"""Domain events for the Order aggregate.

Every event names both parties and the actor, so downstream handlers can
route notifications without reloading the order.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A requester placed an order against a fulfiller's catalog."""

    __version__ = 1

    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line item dicts
    item_count = Integer(required=True)
    total_amount = Float(required=True)
    currency = String(required=True)
    delivery_note = Text()
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderApproved:
    __version__ = 1

    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    note = Text()
    total_amount = Float(required=True)
    approved_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderRejected:
    __version__ = 1

    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    reason = Text(required=True)
    rejected_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderPaid:
    """Payment was verified; the only way an order becomes paid."""

    __version__ = 1

    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    transaction_id = String(required=True)
    external_order_ref = String(required=True)
    paid_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderDispatched:
    __version__ = 1

    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    note = Text()
    was_paid = String(required=True)  # "True"/"False"
    dispatched_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    note = Text()
    delivered_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    reason = Text()
    previous_status = String(required=True)
    cancelled_at = DateTime(required=True)
