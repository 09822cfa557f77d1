"""Tests for the Fulfiller aggregate: catalog management, profile and rating."""

import json

import pytest
from protean.exceptions import ValidationError

from marketplace.party.events import (
    CatalogItemAdded,
    CatalogItemRemoved,
    CatalogItemUpdated,
    FulfillerProfileUpdated,
    FulfillerRatingRecomputed,
    FulfillerRegistered,
)
from marketplace.party.fulfiller import Fulfiller, FulfillerRating
from marketplace.shared.geo import GeoPoint


def _make_fulfiller():
    fulfiller = Fulfiller.register("ful-cat", "Ramesh Patil", business_name="Patil Agro")
    fulfiller._events.clear()
    return fulfiller


class TestRegistration:
    def test_register_sets_identity_and_zero_rating(self):
        fulfiller = Fulfiller.register("ful-new", "Sunita Jadhav")
        assert fulfiller.id == "ful-new"
        assert fulfiller.rating.average == 0.0
        assert fulfiller.rating.count == 0
        assert fulfiller.is_active is True
        assert fulfiller.is_verified is False
        assert isinstance(fulfiller._events[0], FulfillerRegistered)


class TestCatalogItems:
    def test_add_item(self):
        fulfiller = _make_fulfiller()
        item = fulfiller.add_catalog_item(name="Basmati Rice", unit_price=80.0, unit="kg", category="grains")
        assert fulfiller.catalog_item(item.id) is item
        assert item.minimum_order_quantity == 1
        assert item.is_available is True
        assert isinstance(fulfiller._events[-1], CatalogItemAdded)

    def test_invalid_unit_rejected(self):
        fulfiller = _make_fulfiller()
        with pytest.raises(ValidationError):
            fulfiller.add_catalog_item(name="Rice", unit_price=80.0, unit="bushel")

    def test_negative_price_rejected(self):
        fulfiller = _make_fulfiller()
        with pytest.raises(ValidationError):
            fulfiller.add_catalog_item(name="Rice", unit_price=-1.0, unit="kg")

    def test_minimum_quantity_below_one_rejected(self):
        fulfiller = _make_fulfiller()
        with pytest.raises(ValidationError):
            fulfiller.add_catalog_item(name="Rice", unit_price=80.0, unit="kg", minimum_order_quantity=0)

    def test_update_item(self):
        fulfiller = _make_fulfiller()
        item = fulfiller.add_catalog_item(name="Basmati Rice", unit_price=80.0, unit="kg")
        fulfiller._events.clear()

        fulfiller.update_catalog_item(item.id, unit_price=85.0, is_available=False)

        assert item.unit_price == 85.0
        assert item.is_available is False
        event = fulfiller._events[-1]
        assert isinstance(event, CatalogItemUpdated)
        assert json.loads(event.changes) == {"unit_price": 85.0, "is_available": False}

    @pytest.mark.parametrize(
        "changes, field",
        [
            ({"unit": "bushel"}, "unit"),
            ({"unit_price": -5.0}, "unit_price"),
            ({"minimum_order_quantity": 0}, "minimum_order_quantity"),
            ({"colour": "red"}, "item"),
            ({}, "item"),
        ],
    )
    def test_update_validation(self, changes, field):
        fulfiller = _make_fulfiller()
        item = fulfiller.add_catalog_item(name="Basmati Rice", unit_price=80.0, unit="kg")
        with pytest.raises(ValidationError) as exc:
            fulfiller.update_catalog_item(item.id, **changes)
        assert field in exc.value.messages

    def test_update_unknown_item(self):
        fulfiller = _make_fulfiller()
        with pytest.raises(ValidationError) as exc:
            fulfiller.update_catalog_item("missing", unit_price=10.0)
        assert "item_id" in exc.value.messages

    def test_remove_item(self):
        fulfiller = _make_fulfiller()
        item = fulfiller.add_catalog_item(name="Basmati Rice", unit_price=80.0, unit="kg")
        fulfiller.remove_catalog_item(item.id)
        assert fulfiller.catalog_item(item.id) is None
        assert isinstance(fulfiller._events[-1], CatalogItemRemoved)


class TestProfile:
    def test_update_profile_records_changes(self):
        fulfiller = _make_fulfiller()
        fulfiller.update_profile(phone="+91 90000 00000")
        assert fulfiller.phone == "+91 90000 00000"
        event = fulfiller._events[-1]
        assert isinstance(event, FulfillerProfileUpdated)
        assert json.loads(event.changes) == {"phone": "+91 90000 00000"}

    def test_blank_name_rejected(self):
        fulfiller = _make_fulfiller()
        with pytest.raises(ValidationError):
            fulfiller.update_profile(name="")

    def test_nothing_to_update(self):
        fulfiller = _make_fulfiller()
        with pytest.raises(ValidationError):
            fulfiller.update_profile()

    def test_relocate(self):
        fulfiller = _make_fulfiller()
        fulfiller.relocate(GeoPoint(latitude=18.6, longitude=73.9, address="Pimpri"))
        assert fulfiller.location.address == "Pimpri"
        assert json.loads(fulfiller._events[-1].changes)["location"]["latitude"] == 18.6

    def test_verify(self):
        fulfiller = _make_fulfiller()
        fulfiller.verify()
        assert fulfiller.is_verified is True


class TestRating:
    def test_apply_rating_replaces_aggregate(self):
        fulfiller = _make_fulfiller()
        fulfiller.apply_rating(4.5, 2)
        assert fulfiller.rating.average == 4.5
        assert fulfiller.rating.count == 2
        assert isinstance(fulfiller._events[-1], FulfillerRatingRecomputed)

    def test_unrated_fulfiller_cannot_have_average(self):
        with pytest.raises(ValidationError):
            FulfillerRating(average=3.0, count=0)

    def test_average_above_five_rejected(self):
        with pytest.raises(ValidationError):
            FulfillerRating(average=5.5, count=3)
