"""Domain events for the Requester and Fulfiller aggregates."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Requester")
class RequesterRegistered:
    __version__ = 1

    requester_id = Identifier(required=True)
    name = String(required=True)
    business_name = String()
    registered_at = DateTime(required=True)


@marketplace.event(part_of="Requester")
class RequesterProfileUpdated:
    """Profile fields or location of a requester changed."""

    __version__ = 1

    requester_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: {field: new value}
    updated_at = DateTime(required=True)


@marketplace.event(part_of="Fulfiller")
class FulfillerRegistered:
    __version__ = 1

    fulfiller_id = Identifier(required=True)
    name = String(required=True)
    business_name = String()
    registered_at = DateTime(required=True)


@marketplace.event(part_of="Fulfiller")
class FulfillerProfileUpdated:
    """Profile fields, location or verification status of a fulfiller changed."""

    __version__ = 1

    fulfiller_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: {field: new value}
    updated_at = DateTime(required=True)


@marketplace.event(part_of="Fulfiller")
class CatalogItemAdded:
    __version__ = 1

    fulfiller_id = Identifier(required=True)
    item_id = Identifier(required=True)
    name = String(required=True)
    category = String()
    unit_price = Float(required=True)
    unit = String(required=True)
    added_at = DateTime(required=True)


@marketplace.event(part_of="Fulfiller")
class CatalogItemUpdated:
    __version__ = 1

    fulfiller_id = Identifier(required=True)
    item_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: {field: new value}
    updated_at = DateTime(required=True)


@marketplace.event(part_of="Fulfiller")
class CatalogItemRemoved:
    __version__ = 1

    fulfiller_id = Identifier(required=True)
    item_id = Identifier(required=True)
    removed_at = DateTime(required=True)


@marketplace.event(part_of="Fulfiller")
class FulfillerRatingRecomputed:
    """The fulfiller's aggregate rating was re-derived from all of its reviews."""

    __version__ = 1

    fulfiller_id = Identifier(required=True)
    average = Float(required=True)
    count = Integer(required=True)
    recomputed_at = DateTime(required=True)


@marketplace.event(part_of="Fulfiller")
class FulfillerVerified:
    __version__ = 1

    fulfiller_id = Identifier(required=True)
    is_verified = Boolean(required=True)
    verified_at = DateTime(required=True)
