"""Application tests for order placement against a fulfiller's catalog."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from marketplace.ordering.order import Order, OrderStatus
from marketplace.ordering.placement import PlaceOrder
from marketplace.party.catalog import UpdateCatalogItem
from marketplace.party.profile import RelocateFulfiller
from marketplace.shared.errors import InvalidItemError, NotFoundError, QuantityTooLowError


def _place(parties, items, **overrides):
    fields = {
        "requester_id": parties.requester_id,
        "fulfiller_id": parties.fulfiller_id,
        "items": json.dumps(items),
    }
    fields.update(overrides)
    return current_domain.process(PlaceOrder(**fields), asynchronous=False)


class TestPlaceOrder:
    def test_order_is_persisted_pending(self, parties):
        order_id = _place(parties, [{"item_id": parties.rice_id, "quantity": 10}])
        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.PENDING.value
        assert order.total_amount == pytest.approx(800.0)
        assert len(order.history()) == 1

    def test_lines_are_priced_from_catalog(self, parties):
        order_id = _place(
            parties,
            [{"item_id": parties.rice_id, "quantity": 25}, {"item_id": parties.dal_id, "quantity": 4}],
        )
        order = current_domain.repository_for(Order).get(order_id)
        lines = order.line_items()
        assert [(line.name, line.unit_price, line.line_total) for line in lines] == [
            ("Basmati Rice", 80.0, 2000.0),
            ("Toor Dal", 120.5, 482.0),
        ]
        assert order.total_amount == pytest.approx(2482.0)

    def test_party_snapshots_persist(self, parties):
        order_id = _place(parties, [{"item_id": parties.dal_id, "quantity": 1}])
        order = current_domain.repository_for(Order).get(order_id)
        assert order.fulfiller.name == "Ramesh Patil"
        assert order.requester.business_name == "Kulkarni Caterers"

    def test_later_catalog_edits_do_not_change_order(self, parties):
        order_id = _place(parties, [{"item_id": parties.dal_id, "quantity": 2}])
        current_domain.process(
            UpdateCatalogItem(fulfiller_id=parties.fulfiller_id, item_id=parties.dal_id, unit_price=999.0),
            asynchronous=False,
        )
        current_domain.process(
            RelocateFulfiller(fulfiller_id=parties.fulfiller_id, latitude=19.0, longitude=72.8),
            asynchronous=False,
        )
        order = current_domain.repository_for(Order).get(order_id)
        assert order.line_items()[0].unit_price == 120.5
        assert order.total_amount == pytest.approx(241.0)
        assert order.fulfiller.location.latitude == pytest.approx(18.5384)


class TestPlacementErrors:
    def test_unknown_item(self, parties):
        with pytest.raises(InvalidItemError):
            _place(parties, [{"item_id": "not-in-catalog", "quantity": 1}])

    def test_unavailable_item(self, parties):
        current_domain.process(
            UpdateCatalogItem(fulfiller_id=parties.fulfiller_id, item_id=parties.dal_id, is_available=False),
            asynchronous=False,
        )
        with pytest.raises(InvalidItemError) as exc:
            _place(parties, [{"item_id": parties.dal_id, "quantity": 1}])
        assert "unavailable" in str(exc.value)

    def test_quantity_below_minimum(self, parties):
        with pytest.raises(QuantityTooLowError) as exc:
            _place(parties, [{"item_id": parties.rice_id, "quantity": 5}])
        assert exc.value.minimum == 10

    @pytest.mark.parametrize("quantity", [0, -3, 2.5, "4", True])
    def test_quantity_must_be_positive_integer(self, parties, quantity):
        with pytest.raises(ValidationError):
            _place(parties, [{"item_id": parties.dal_id, "quantity": quantity}])

    def test_empty_item_list(self, parties):
        with pytest.raises(ValidationError):
            _place(parties, [])

    def test_duplicate_item(self, parties):
        with pytest.raises(ValidationError) as exc:
            _place(
                parties,
                [{"item_id": parties.dal_id, "quantity": 1}, {"item_id": parties.dal_id, "quantity": 2}],
            )
        assert "more than once" in str(exc.value)

    def test_unknown_fulfiller(self, parties):
        with pytest.raises(NotFoundError):
            _place(parties, [{"item_id": parties.dal_id, "quantity": 1}], fulfiller_id="ghost")

    def test_unknown_requester(self, parties):
        with pytest.raises(NotFoundError):
            _place(parties, [{"item_id": parties.dal_id, "quantity": 1}], requester_id="ghost")

    def test_failed_placement_persists_nothing(self, parties):
        with pytest.raises(InvalidItemError):
            _place(parties, [{"item_id": "not-in-catalog", "quantity": 1}])
        assert current_domain.repository_for(Order)._dao.query.all().total == 0
