"""Party-scoped order loading.

An actor who is not the owning party gets NotFoundError, so the existence of
other parties' orders is never revealed.
"""

from marketplace.ordering.order import Order
from marketplace.shared.errors import NotFoundError
from marketplace.shared.lookup import load


def order_for_party(order_id, actor_id):
    order = load(Order, order_id)
    if not order.is_party(actor_id):
        raise NotFoundError("Order", order_id)
    return order


def order_for_fulfiller(order_id, actor_id):
    order = load(Order, order_id)
    if str(order.fulfiller_id) != str(actor_id):
        raise NotFoundError("Order", order_id)
    return order


def order_for_requester(order_id, actor_id):
    order = load(Order, order_id)
    if str(order.requester_id) != str(actor_id):
        raise NotFoundError("Order", order_id)
    return order
