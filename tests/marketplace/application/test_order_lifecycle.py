"""Application tests for OrderLifecycle transitions and queries."""

import pytest
from protean.exceptions import ValidationError

from marketplace.ordering.lifecycle import OrderLifecycle
from marketplace.ordering.order import OrderStatus
from marketplace.shared.errors import ConflictError, NotFoundError


@pytest.fixture()
def lifecycle():
    return OrderLifecycle()


def _statuses(order):
    return [entry.status for entry in order.history()]


class TestHappyPath:
    def test_prepaid_order_walks_full_lifecycle(self, lifecycle, parties, approved_order, gateway):
        from marketplace.payments.gate import PaymentGate

        gate = PaymentGate()
        intent = gate.create_intent(approved_order.id, parties.requester_id, approved_order.total_amount)
        gate.verify(
            intent.external_order_ref,
            "pay_lifecycle",
            gateway.sign(intent.external_order_ref, "pay_lifecycle"),
            intent.amount,
            parties.requester_id,
        )
        lifecycle.dispatch(approved_order.id, parties.fulfiller_id, note="Truck MH12 left")
        order = lifecycle.deliver(approved_order.id, parties.fulfiller_id)

        assert order.status == OrderStatus.DELIVERED.value
        assert _statuses(order) == ["pending", "approved", "paid", "dispatched", "delivered"]
        assert order.payment.transaction_id == "pay_lifecycle"

    def test_unpaid_dispatch_from_approved(self, lifecycle, parties, approved_order):
        order = lifecycle.dispatch(approved_order.id, parties.fulfiller_id)
        assert order.status == OrderStatus.DISPATCHED.value
        assert order.payment is None
        assert _statuses(order) == ["pending", "approved", "dispatched"]

    def test_approve_note_is_recorded(self, lifecycle, parties, pending_order):
        order = lifecycle.approve(pending_order.id, parties.fulfiller_id, note="Stock reserved")
        assert order.history()[-1].note == "Stock reserved"

    def test_reject_stores_reason(self, lifecycle, parties, pending_order):
        order = lifecycle.reject(pending_order.id, parties.fulfiller_id, reason="Out of stock")
        assert order.status == OrderStatus.REJECTED.value
        assert order.rejection_reason == "Out of stock"

    def test_requester_cancels_approved_order(self, lifecycle, parties, approved_order):
        order = lifecycle.cancel(approved_order.id, parties.requester_id, reason="Event postponed")
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancellation_reason == "Event postponed"
        assert len(order.history()) == 3


class TestRejectedTransitions:
    def test_deliver_pending_order_conflicts(self, lifecycle, parties, pending_order):
        with pytest.raises(ConflictError) as exc:
            lifecycle.deliver(pending_order.id, parties.fulfiller_id)
        assert exc.value.current_status == "pending"
        assert exc.value.expected == ["dispatched"]

        order = lifecycle.get(pending_order.id, parties.requester_id)
        assert order.status == OrderStatus.PENDING.value
        assert len(order.history()) == 1

    def test_approve_twice_conflicts(self, lifecycle, parties, approved_order):
        with pytest.raises(ConflictError):
            lifecycle.approve(approved_order.id, parties.fulfiller_id)
        assert len(lifecycle.get(approved_order.id, parties.fulfiller_id).history()) == 2

    def test_cancel_after_dispatch_conflicts(self, lifecycle, parties, approved_order):
        lifecycle.dispatch(approved_order.id, parties.fulfiller_id)
        with pytest.raises(ConflictError):
            lifecycle.cancel(approved_order.id, parties.requester_id)

    def test_reject_requires_reason(self, lifecycle, parties, pending_order):
        with pytest.raises(ValidationError):
            lifecycle.reject(pending_order.id, parties.fulfiller_id, reason="   ")
        assert lifecycle.get(pending_order.id, parties.fulfiller_id).status == "pending"


class TestPartyScoping:
    def test_outsider_cannot_read_order(self, lifecycle, pending_order, make_requester):
        outsider = make_requester(requester_id="req-999", name="Someone Else")
        with pytest.raises(NotFoundError):
            lifecycle.get(pending_order.id, outsider)

    def test_unknown_order(self, lifecycle, parties):
        with pytest.raises(NotFoundError):
            lifecycle.get("no-such-order", parties.requester_id)

    def test_requester_cannot_approve(self, lifecycle, parties, pending_order):
        with pytest.raises(NotFoundError):
            lifecycle.approve(pending_order.id, parties.requester_id)

    def test_fulfiller_cannot_cancel(self, lifecycle, parties, pending_order):
        with pytest.raises(NotFoundError):
            lifecycle.cancel(pending_order.id, parties.fulfiller_id)


class TestOrdersFor:
    def test_lists_by_role(self, lifecycle, parties, pending_order):
        assert [o.id for o in lifecycle.orders_for(parties.requester_id, "requester")] == [pending_order.id]
        assert [o.id for o in lifecycle.orders_for(parties.fulfiller_id, "fulfiller")] == [pending_order.id]
        assert lifecycle.orders_for(parties.requester_id, "fulfiller") == []

    def test_filters_by_status(self, lifecycle, parties, pending_order):
        second = lifecycle.place(
            requester_id=parties.requester_id,
            fulfiller_id=parties.fulfiller_id,
            items=[{"item_id": parties.dal_id, "quantity": 1}],
        )
        lifecycle.approve(second.id, parties.fulfiller_id)

        approved = lifecycle.orders_for(parties.requester_id, "requester", status="approved")
        pending = lifecycle.orders_for(parties.requester_id, "requester", status="pending")
        assert [o.id for o in approved] == [second.id]
        assert [o.id for o in pending] == [pending_order.id]

    def test_unknown_role(self, lifecycle, parties):
        with pytest.raises(ValidationError):
            lifecycle.orders_for(parties.requester_id, "admin")

    def test_unknown_status(self, lifecycle, parties):
        with pytest.raises(ValidationError):
            lifecycle.orders_for(parties.requester_id, "requester", status="lost")

    def test_all_status_means_no_filter(self, lifecycle, parties, pending_order):
        orders = lifecycle.orders_for(parties.requester_id, "requester", status="all")
        assert [o.id for o in orders] == [pending_order.id]

    def test_pages(self, lifecycle, parties, pending_order):
        for _ in range(2):
            lifecycle.place(
                requester_id=parties.requester_id,
                fulfiller_id=parties.fulfiller_id,
                items=[{"item_id": parties.dal_id, "quantity": 1}],
            )
        everything = lifecycle.orders_for(parties.requester_id, "requester")
        first = lifecycle.orders_for(parties.requester_id, "requester", limit=2)
        second = lifecycle.orders_for(parties.requester_id, "requester", limit=2, page=2)

        assert len(everything) == 3
        assert len(second) == 1
        assert [o.id for o in first + second] == [o.id for o in everything]
        assert lifecycle.orders_for(parties.requester_id, "requester", limit=2, page=3) == []

    @pytest.mark.parametrize("paging,field", [({"limit": 0}, "limit"), ({"page": 0}, "page")])
    def test_bad_paging(self, lifecycle, parties, paging, field):
        with pytest.raises(ValidationError) as exc:
            lifecycle.orders_for(parties.requester_id, "requester", **paging)
        assert field in exc.value.messages
