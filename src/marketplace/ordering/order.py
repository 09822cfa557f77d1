"""Order aggregate (CQRS): the core of the marketplace.

An order binds one requester to one fulfiller for a list of catalog items.
Party contact details and locations are snapshotted at placement and never
refreshed. The status history is append-only: every successful transition
adds exactly one entry, failed transitions add none.

State Machine (7 states):
    PENDING → APPROVED → PAID → DISPATCHED → DELIVERED
    APPROVED → DISPATCHED (payment-optional fulfillment, e.g. cash on delivery)
    PENDING → REJECTED
    PENDING | APPROVED → CANCELLED
"""

import json
import math
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

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
from marketplace.shared.errors import ConflictError
from marketplace.shared.geo import GeoPoint

DEFAULT_CURRENCY = "INR"
DELIVERY_WINDOW = timedelta(days=7)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"
    DISPATCHED = "dispatched"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    CASH = "cash"
    ONLINE = "online"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.APPROVED, OrderStatus.REJECTED, OrderStatus.CANCELLED},
    OrderStatus.APPROVED: {OrderStatus.PAID, OrderStatus.DISPATCHED, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.DISPATCHED},
    OrderStatus.DISPATCHED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.REJECTED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Source states for each target, derived from the transition map
_SOURCES = {
    target: {source for source, targets in _VALID_TRANSITIONS.items() if target in targets} for target in OrderStatus
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class PartySnapshot:
    """A party's contact details and location as they were when the order was placed."""

    name: String(required=True, max_length=200)
    business_name: String(max_length=200)
    phone: String(max_length=30)
    email: String(max_length=254)
    location: ValueObject(GeoPoint)

    @classmethod
    def of(cls, party):
        return cls(
            name=party.name,
            business_name=party.business_name,
            phone=party.phone,
            email=party.email,
            location=party.location,
        )


@marketplace.value_object(part_of="Order")
class PaymentRecord:
    """Proof of a verified payment. Written once, never changed."""

    method: String(required=True, max_length=50)
    transaction_id: String(required=True, max_length=255)
    external_order_ref: String(required=True, max_length=255)
    amount: Float(required=True, min_value=0.0)
    currency: String(max_length=3, default=DEFAULT_CURRENCY)
    paid_at: DateTime(required=True)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class LineItem:
    """One ordered catalog item, priced at placement time."""

    line_no = Integer(required=True, min_value=1)
    item_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1)
    unit = String(required=True, max_length=20)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)

    @invariant.post
    def line_total_matches_quantity_times_price(self):
        if None in (self.quantity, self.unit_price, self.line_total):
            return
        if not math.isclose(self.line_total, self.quantity * self.unit_price, rel_tol=1e-9, abs_tol=1e-9):
            raise ValidationError({"line_total": ["Line total must equal quantity times unit price"]})


@marketplace.entity(part_of="Order")
class StatusEntry:
    """One entry of the order's audit trail."""

    sequence = Integer(required=True, min_value=1)
    status = String(choices=OrderStatus, required=True)
    note = Text()
    timestamp = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    requester = ValueObject(PartySnapshot)
    fulfiller = ValueObject(PartySnapshot)
    items = HasMany(LineItem)
    total_amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default=DEFAULT_CURRENCY)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusEntry)
    payment = ValueObject(PaymentRecord)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.ONLINE.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    delivery_note = Text()
    delivery_address = String(max_length=500)
    expected_delivery_date = DateTime()
    is_urgent = Boolean(default=False)
    rejection_reason = Text()
    cancellation_reason = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_matches_line_items(self):
        if not self.items or self.total_amount is None:
            return
        expected = math.fsum(item.line_total for item in self.items)
        if not math.isclose(self.total_amount, expected, rel_tol=1e-9, abs_tol=1e-9):
            raise ValidationError({"total_amount": ["Total amount must equal the sum of line totals"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        requester,
        fulfiller,
        lines,
        delivery_note=None,
        delivery_address=None,
        is_urgent=False,
        payment_method=PaymentMethod.ONLINE.value,
    ):
        """Create a pending order.

        Args:
            requester: The Requester aggregate placing the order.
            fulfiller: The Fulfiller aggregate servicing it.
            lines: List of dicts with item_id, name, quantity, unit,
                   unit_price, already validated against the catalog.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        line_items = [
            LineItem(
                line_no=position,
                item_id=line["item_id"],
                name=line["name"],
                quantity=line["quantity"],
                unit=line["unit"],
                unit_price=line["unit_price"],
                line_total=line["quantity"] * line["unit_price"],
            )
            for position, line in enumerate(lines, start=1)
        ]
        total = math.fsum(item.line_total for item in line_items)

        if delivery_address is None and requester.location is not None:
            delivery_address = requester.location.label()

        order = cls(
            requester_id=str(requester.id),
            fulfiller_id=str(fulfiller.id),
            requester=PartySnapshot.of(requester),
            fulfiller=PartySnapshot.of(fulfiller),
            items=line_items,
            total_amount=total,
            payment_method=payment_method,
            delivery_note=delivery_note,
            delivery_address=delivery_address,
            expected_delivery_date=now + DELIVERY_WINDOW,
            is_urgent=is_urgent,
            created_at=now,
            updated_at=now,
        )
        order._append_history(OrderStatus.PENDING, "Order placed by requester", now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                requester_id=order.requester_id,
                fulfiller_id=order.fulfiller_id,
                actor_id=order.requester_id,
                items=json.dumps([item_snapshot(item) for item in order.line_items()]),
                item_count=len(line_items),
                total_amount=total,
                currency=order.currency,
                delivery_note=delivery_note,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    def line_items(self):
        return sorted(self.items, key=lambda item: item.line_no)

    def history(self):
        """The status history in the order it was written."""
        return sorted(self.status_history, key=lambda entry: entry.sequence)

    def is_party(self, actor_id) -> bool:
        return str(actor_id) in (str(self.requester_id), str(self.fulfiller_id))

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Compare the stored status against the target's legal sources."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ConflictError(
                f"Cannot transition from {current.value} to {target_status.value}",
                current_status=current.value,
                expected=[status.value for status in _SOURCES[target_status]],
            )

    def _append_history(self, status, note, timestamp):
        self.add_status_history(
            StatusEntry(
                sequence=len(self.status_history) + 1,
                status=status.value,
                note=note,
                timestamp=timestamp,
            )
        )

    def _transition(self, target_status, note):
        self._assert_can_transition(target_status)
        now = datetime.now(UTC)
        self.status = target_status.value
        self.updated_at = now
        self._append_history(target_status, note, now)
        return now

    # -------------------------------------------------------------------
    # Order lifecycle transitions
    # -------------------------------------------------------------------
    def approve(self, note=None):
        now = self._transition(OrderStatus.APPROVED, note or "Order approved by fulfiller")
        self.raise_(
            OrderApproved(
                order_id=str(self.id),
                requester_id=str(self.requester_id),
                fulfiller_id=str(self.fulfiller_id),
                actor_id=str(self.fulfiller_id),
                note=note,
                total_amount=self.total_amount,
                approved_at=now,
            )
        )

    def reject(self, reason):
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A rejection reason is required"]})
        now = self._transition(OrderStatus.REJECTED, reason)
        self.rejection_reason = reason
        self.raise_(
            OrderRejected(
                order_id=str(self.id),
                requester_id=str(self.requester_id),
                fulfiller_id=str(self.fulfiller_id),
                actor_id=str(self.fulfiller_id),
                reason=reason,
                rejected_at=now,
            )
        )

    def record_payment(self, transaction_id, external_order_ref, amount, method="online"):
        """Attach the verified payment and move to PAID."""
        if self.payment is not None:
            raise ConflictError(
                "Payment has already been recorded for this order",
                current_status=self.status,
                expected=[OrderStatus.APPROVED.value],
            )
        self._assert_can_transition(OrderStatus.PAID)

        now = datetime.now(UTC)
        self.payment = PaymentRecord(
            method=method,
            transaction_id=transaction_id,
            external_order_ref=external_order_ref,
            amount=amount,
            currency=self.currency,
            paid_at=now,
        )
        self.payment_method = PaymentMethod.ONLINE.value
        self.payment_status = PaymentStatus.COMPLETED.value
        self._transition(OrderStatus.PAID, f"Payment completed. Payment ID: {transaction_id}")
        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                requester_id=str(self.requester_id),
                fulfiller_id=str(self.fulfiller_id),
                actor_id=str(self.requester_id),
                amount=amount,
                currency=self.currency,
                transaction_id=transaction_id,
                external_order_ref=external_order_ref,
                paid_at=now,
            )
        )

    def dispatch(self, note=None):
        was_paid = OrderStatus(self.status) == OrderStatus.PAID
        now = self._transition(OrderStatus.DISPATCHED, note or "Order has been dispatched by fulfiller")
        self.raise_(
            OrderDispatched(
                order_id=str(self.id),
                requester_id=str(self.requester_id),
                fulfiller_id=str(self.fulfiller_id),
                actor_id=str(self.fulfiller_id),
                note=note,
                was_paid=str(was_paid),
                dispatched_at=now,
            )
        )

    def deliver(self, note=None):
        now = self._transition(OrderStatus.DELIVERED, note or "Order delivered")
        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                requester_id=str(self.requester_id),
                fulfiller_id=str(self.fulfiller_id),
                actor_id=str(self.fulfiller_id),
                note=note,
                delivered_at=now,
            )
        )

    def cancel(self, reason=None):
        previous = self.status
        now = self._transition(OrderStatus.CANCELLED, reason or "Order cancelled by requester")
        self.cancellation_reason = reason
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                requester_id=str(self.requester_id),
                fulfiller_id=str(self.fulfiller_id),
                actor_id=str(self.requester_id),
                reason=reason,
                previous_status=previous,
                cancelled_at=now,
            )
        )


def item_snapshot(item) -> dict:
    return {
        "line_no": item.line_no,
        "item_id": str(item.item_id),
        "name": item.name,
        "quantity": item.quantity,
        "unit": item.unit,
        "unit_price": item.unit_price,
        "line_total": item.line_total,
    }
