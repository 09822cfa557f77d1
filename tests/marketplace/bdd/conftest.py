"""Shared BDD fixtures and step definitions for the marketplace."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when

from marketplace.ordering.lifecycle import OrderLifecycle
from marketplace.shared.errors import ConflictError, MarketplaceError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


def _rice(market, quantity):
    return OrderLifecycle().place(
        requester_id=market.requester_id,
        fulfiller_id=market.fulfiller_id,
        items=[{"item_id": market.rice_id, "quantity": quantity}],
    )


@pytest.fixture()
def attempt(error):
    """Run an action, recording a domain failure in ``error`` instead of raising."""

    def run(action):
        try:
            return action()
        except (MarketplaceError, ValidationError) as exc:
            error["exc"] = exc
            return None

    return run


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a requester and a fulfiller with a stocked catalog", target_fixture="market")
def market_with_parties(parties):
    return parties


@given(parsers.cfparse("a pending order for {quantity:d} kg of rice"), target_fixture="order_id")
def pending_rice_order(market, quantity):
    return _rice(market, quantity).id


@given(parsers.cfparse("an approved order for {quantity:d} kg of rice"), target_fixture="order_id")
def approved_rice_order(market, quantity):
    order = _rice(market, quantity)
    OrderLifecycle().approve(order.id, market.fulfiller_id)
    return order.id


# ---------------------------------------------------------------------------
# When steps (shared)
# ---------------------------------------------------------------------------
@when("the fulfiller dispatches the order")
def fulfiller_dispatches(market, order_id, attempt):
    attempt(lambda: OrderLifecycle().dispatch(order_id, market.fulfiller_id))


@when("the fulfiller delivers the order")
def fulfiller_delivers(market, order_id, attempt):
    attempt(lambda: OrderLifecycle().deliver(order_id, market.fulfiller_id))


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
@then("the transition fails with a conflict")
def transition_conflicts(error):
    assert error["exc"] is not None, "Expected a conflict but none was raised"
    assert isinstance(error["exc"], ConflictError)


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(market, order_id, status):
    assert OrderLifecycle().get(order_id, market.requester_id).status == status


@then(parsers.cfparse("the order history length is {count:d}"))
def history_length_is(market, order_id, count):
    assert len(OrderLifecycle().get(order_id, market.requester_id).history()) == count


@then("the order has no payment")
def order_has_no_payment(market, order_id):
    order = OrderLifecycle().get(order_id, market.requester_id)
    assert order.payment is None
    assert order.payment_status == "pending"
