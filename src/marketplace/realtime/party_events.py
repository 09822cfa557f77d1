"""Party events → acknowledgments to the party that made the change."""

import json

from protean import handle

from marketplace.domain import marketplace
from marketplace.party.events import (
    CatalogItemAdded,
    CatalogItemRemoved,
    CatalogItemUpdated,
    FulfillerProfileUpdated,
    FulfillerVerified,
    RequesterProfileUpdated,
)
from marketplace.party.fulfiller import Fulfiller
from marketplace.party.requester import Requester
from marketplace.realtime import get_dispatcher
from marketplace.realtime.notifier import Notifier


@marketplace.event_handler(part_of=Requester)
class RequesterNotificationsHandler:
    @handle(RequesterProfileUpdated)
    def on_profile_updated(self, event: RequesterProfileUpdated) -> None:
        Notifier(get_dispatcher()).notify(
            event.requester_id,
            "profile_updated",
            event.requester_id,
            event.requester_id,
            "Profile updated",
            event.updated_at,
            changes=json.loads(event.changes),
        )


@marketplace.event_handler(part_of=Fulfiller)
class FulfillerNotificationsHandler:
    @handle(FulfillerProfileUpdated)
    def on_profile_updated(self, event: FulfillerProfileUpdated) -> None:
        Notifier(get_dispatcher()).notify(
            event.fulfiller_id,
            "profile_updated",
            event.fulfiller_id,
            event.fulfiller_id,
            "Profile updated",
            event.updated_at,
            changes=json.loads(event.changes),
        )

    @handle(FulfillerVerified)
    def on_verified(self, event: FulfillerVerified) -> None:
        Notifier(get_dispatcher()).notify(
            event.fulfiller_id,
            "profile_updated",
            event.fulfiller_id,
            None,
            "Verification status changed",
            event.verified_at,
            changes={"is_verified": event.is_verified},
        )

    @handle(CatalogItemAdded)
    def on_item_added(self, event: CatalogItemAdded) -> None:
        Notifier(get_dispatcher()).notify(
            event.fulfiller_id,
            "material_added",
            event.item_id,
            event.fulfiller_id,
            f"{event.name} added to catalog",
            event.added_at,
            name=event.name,
            category=event.category,
            unit_price=event.unit_price,
            unit=event.unit,
        )

    @handle(CatalogItemUpdated)
    def on_item_updated(self, event: CatalogItemUpdated) -> None:
        Notifier(get_dispatcher()).notify(
            event.fulfiller_id,
            "material_updated",
            event.item_id,
            event.fulfiller_id,
            "Catalog item updated",
            event.updated_at,
            changes=json.loads(event.changes),
        )

    @handle(CatalogItemRemoved)
    def on_item_removed(self, event: CatalogItemRemoved) -> None:
        Notifier(get_dispatcher()).notify(
            event.fulfiller_id,
            "material_removed",
            event.item_id,
            event.fulfiller_id,
            "Catalog item removed",
            event.removed_at,
        )
