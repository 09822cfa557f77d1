"""OrderLifecycle: the entry point for every order transition.

Each transition runs as load → precondition check → write while holding the
order's lock, so two racing requests on the same order are linearized: the
first wins and the second sees the new status and fails with ConflictError.
Commands processed around this service skip the lock and rely on the
aggregate's status check alone.
"""

import json

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.ordering.access import order_for_party
from marketplace.ordering.approval import ApproveOrder, RejectOrder
from marketplace.ordering.cancellation import CancelOrder
from marketplace.ordering.fulfillment import DeliverOrder, DispatchOrder
from marketplace.ordering.locks import KeyedLock, order_locks
from marketplace.ordering.order import Order, OrderStatus
from marketplace.ordering.placement import PlaceOrder
from marketplace.shared.errors import ConflictError
from marketplace.shared.lookup import find_all, load

logger = structlog.get_logger(__name__)

ROLES = ("requester", "fulfiller")


class OrderLifecycle:
    def __init__(self, locks: KeyedLock | None = None) -> None:
        self.locks = locks or order_locks

    # -------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------
    def place(
        self,
        requester_id,
        fulfiller_id,
        items,
        delivery_note=None,
        delivery_address=None,
        is_urgent=False,
        payment_method="online",
    ) -> Order:
        order_id = current_domain.process(
            PlaceOrder(
                requester_id=requester_id,
                fulfiller_id=fulfiller_id,
                items=json.dumps(items),
                delivery_note=delivery_note,
                delivery_address=delivery_address,
                is_urgent=is_urgent,
                payment_method=payment_method,
            ),
            asynchronous=False,
        )
        logger.info("order_placed", order_id=order_id, requester_id=str(requester_id), fulfiller_id=str(fulfiller_id))
        return load(Order, order_id)

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def approve(self, order_id, actor_id, note=None) -> Order:
        return self._transition(order_id, ApproveOrder(order_id=order_id, actor_id=actor_id, note=note))

    def reject(self, order_id, actor_id, reason) -> Order:
        return self._transition(order_id, RejectOrder(order_id=order_id, actor_id=actor_id, reason=reason))

    def dispatch(self, order_id, actor_id, note=None) -> Order:
        return self._transition(order_id, DispatchOrder(order_id=order_id, actor_id=actor_id, note=note))

    def deliver(self, order_id, actor_id, note=None) -> Order:
        return self._transition(order_id, DeliverOrder(order_id=order_id, actor_id=actor_id, note=note))

    def cancel(self, order_id, actor_id, reason=None) -> Order:
        return self._transition(order_id, CancelOrder(order_id=order_id, actor_id=actor_id, reason=reason))

    def _transition(self, order_id, command) -> Order:
        name = type(command).__name__
        with self.locks.hold(order_id):
            try:
                current_domain.process(command, asynchronous=False)
            except ConflictError as exc:
                logger.info(
                    "order_transition_conflict",
                    order_id=str(order_id),
                    command=name,
                    current_status=exc.current_status,
                )
                raise
            order = load(Order, order_id)

        logger.info("order_transitioned", order_id=str(order_id), command=name, status=order.status)
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get(self, order_id, actor_id) -> Order:
        return order_for_party(order_id, actor_id)

    def orders_for(self, actor_id, role, status=None, limit=None, page=1) -> list[Order]:
        """Orders where the actor plays the given role, newest first.

        ``status="all"`` is the same as no status filter. With ``limit`` set,
        results come back one page at a time, ``page`` counting from 1.
        """
        if role not in ROLES:
            raise ValidationError({"role": [f"Role must be one of {', '.join(ROLES)}"]})
        filters = {f"{role}_id": str(actor_id)}
        if limit is not None and limit < 1:
            raise ValidationError({"limit": ["Limit must be at least 1"]})
        if page < 1:
            raise ValidationError({"page": ["Page must be at least 1"]})
        if status not in (None, "all"):
            if status not in {s.value for s in OrderStatus}:
                raise ValidationError({"status": [f"Unknown order status: {status}"]})
            filters["status"] = status
        orders = sorted(find_all(Order, **filters), key=lambda order: (order.created_at, str(order.id)), reverse=True)
        if limit is None:
            return orders
        start = (page - 1) * limit
        return orders[start : start + limit]
