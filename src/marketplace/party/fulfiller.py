"""Fulfiller aggregate: a party that publishes a catalog and services orders.

The catalog lives inside the aggregate: items are only mutable by the owning
fulfiller and are read by discovery and order placement as point-in-time
snapshots. The aggregate rating is never updated incrementally; it is replaced
wholesale whenever the reviews are re-aggregated.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Integer,
    String,
    Text,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.party.events import (
    CatalogItemAdded,
    CatalogItemRemoved,
    CatalogItemUpdated,
    FulfillerProfileUpdated,
    FulfillerRatingRecomputed,
    FulfillerRegistered,
    FulfillerVerified,
)
from marketplace.shared.geo import GeoPoint

_UNSET = object()

_ITEM_FIELDS = (
    "name",
    "description",
    "category",
    "unit_price",
    "unit",
    "quantity_available",
    "is_available",
    "minimum_order_quantity",
    "delivery_time",
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class CatalogUnit(Enum):
    KG = "kg"
    TON = "ton"
    PIECE = "piece"
    LITER = "liter"
    METER = "meter"
    SQFT = "sqft"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Fulfiller")
class FulfillerRating:
    """Mean and count of every review the fulfiller has received."""

    average: Float(default=0.0, min_value=0.0, max_value=5.0)
    count: Integer(default=0, min_value=0)

    @invariant.post
    def unrated_means_zero_average(self):
        if self.count == 0 and self.average:
            raise ValidationError({"rating": ["A fulfiller without reviews cannot have an average"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Fulfiller")
class CatalogItem:
    """A priced, quantity-bearing offering in a fulfiller's catalog."""

    name = String(required=True, max_length=200)
    description = Text()
    category = String(max_length=100)
    unit_price = Float(required=True, min_value=0.0)
    unit = String(choices=CatalogUnit, required=True)
    quantity_available = Integer(default=0, min_value=0)
    is_available = Boolean(default=True)
    minimum_order_quantity = Integer(default=1, min_value=1)
    delivery_time = String(max_length=100)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Fulfiller:
    name = String(required=True, max_length=200)
    business_name = String(max_length=200)
    phone = String(max_length=30)
    email = String(max_length=254)
    location = ValueObject(GeoPoint)
    is_verified = Boolean(default=False)
    is_active = Boolean(default=True)
    rating = ValueObject(FulfillerRating)
    catalog = HasMany(CatalogItem)
    registered_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, fulfiller_id, name, business_name=None, phone=None, email=None, location=None):
        now = datetime.now(UTC)
        fulfiller = cls(
            id=fulfiller_id,
            name=name,
            business_name=business_name,
            phone=phone,
            email=email,
            location=location,
            rating=FulfillerRating(average=0.0, count=0),
            registered_at=now,
            updated_at=now,
        )
        fulfiller.raise_(
            FulfillerRegistered(
                fulfiller_id=str(fulfiller.id),
                name=name,
                business_name=business_name,
                registered_at=now,
            )
        )
        return fulfiller

    # -------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------
    def update_profile(self, name=_UNSET, business_name=_UNSET, phone=_UNSET, email=_UNSET):
        requested = {"name": name, "business_name": business_name, "phone": phone, "email": email}
        changes = {field: value for field, value in requested.items() if value is not _UNSET}
        if not changes:
            raise ValidationError({"profile": ["No profile fields to update"]})
        if "name" in changes and not changes["name"]:
            raise ValidationError({"name": ["Name cannot be blank"]})

        for field, value in changes.items():
            setattr(self, field, value)
        self._profile_changed(changes)

    def relocate(self, location: GeoPoint):
        self.location = location
        self._profile_changed(
            {
                "location": {
                    "latitude": location.latitude,
                    "longitude": location.longitude,
                    "address": location.address,
                }
            }
        )

    def verify(self, is_verified=True):
        now = datetime.now(UTC)
        self.is_verified = is_verified
        self.updated_at = now
        self.raise_(
            FulfillerVerified(
                fulfiller_id=str(self.id),
                is_verified=is_verified,
                verified_at=now,
            )
        )

    def _profile_changed(self, changes):
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            FulfillerProfileUpdated(
                fulfiller_id=str(self.id),
                changes=json.dumps(changes),
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------
    def catalog_item(self, item_id):
        """Return the catalog item with this id, or None."""
        return next((item for item in self.catalog if str(item.id) == str(item_id)), None)

    def add_catalog_item(
        self,
        name,
        unit_price,
        unit,
        description=None,
        category=None,
        quantity_available=0,
        is_available=True,
        minimum_order_quantity=1,
        delivery_time=None,
    ):
        item = CatalogItem(
            name=name,
            description=description,
            category=category,
            unit_price=unit_price,
            unit=unit,
            quantity_available=quantity_available,
            is_available=is_available,
            minimum_order_quantity=minimum_order_quantity,
            delivery_time=delivery_time,
        )
        self.add_catalog(item)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            CatalogItemAdded(
                fulfiller_id=str(self.id),
                item_id=str(item.id),
                name=name,
                category=category,
                unit_price=unit_price,
                unit=unit,
                added_at=now,
            )
        )
        return item

    def update_catalog_item(self, item_id, **changes):
        item = self.catalog_item(item_id)
        if item is None:
            raise ValidationError({"item_id": [f"Catalog item {item_id} not found"]})

        unknown = set(changes) - set(_ITEM_FIELDS)
        if unknown:
            raise ValidationError({"item": [f"Unknown catalog fields: {', '.join(sorted(unknown))}"]})
        if not changes:
            raise ValidationError({"item": ["No catalog fields to update"]})
        if "unit" in changes and changes["unit"] not in {u.value for u in CatalogUnit}:
            raise ValidationError({"unit": [f"Unit must be one of {', '.join(u.value for u in CatalogUnit)}"]})
        if "unit_price" in changes and changes["unit_price"] is not None and changes["unit_price"] < 0:
            raise ValidationError({"unit_price": ["Price cannot be negative"]})
        if "minimum_order_quantity" in changes and (changes["minimum_order_quantity"] or 0) < 1:
            raise ValidationError({"minimum_order_quantity": ["Minimum order quantity must be at least 1"]})

        for field, value in changes.items():
            setattr(item, field, value)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            CatalogItemUpdated(
                fulfiller_id=str(self.id),
                item_id=str(item.id),
                changes=json.dumps(changes),
                updated_at=now,
            )
        )
        return item

    def remove_catalog_item(self, item_id):
        item = self.catalog_item(item_id)
        if item is None:
            raise ValidationError({"item_id": [f"Catalog item {item_id} not found"]})

        self.remove_catalog(item)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            CatalogItemRemoved(
                fulfiller_id=str(self.id),
                item_id=str(item_id),
                removed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Rating
    # -------------------------------------------------------------------
    def apply_rating(self, average: float, count: int):
        """Replace the aggregate rating with a freshly re-aggregated one."""
        now = datetime.now(UTC)
        self.rating = FulfillerRating(average=average, count=count)
        self.updated_at = now
        self.raise_(
            FulfillerRatingRecomputed(
                fulfiller_id=str(self.id),
                average=average,
                count=count,
                recomputed_at=now,
            )
        )
