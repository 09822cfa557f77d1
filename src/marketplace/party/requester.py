"""Requester aggregate: a party that places orders against fulfiller catalogs."""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, String, ValueObject

from marketplace.domain import marketplace
from marketplace.party.events import RequesterProfileUpdated, RequesterRegistered
from marketplace.shared.geo import GeoPoint

_UNSET = object()


@marketplace.aggregate
class Requester:
    name: String(required=True, max_length=200)
    business_name: String(max_length=200)
    phone: String(max_length=30)
    email: String(max_length=254)
    location: ValueObject(GeoPoint)
    registered_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def register(cls, requester_id, name, business_name=None, phone=None, email=None, location=None):
        now = datetime.now(UTC)
        requester = cls(
            id=requester_id,
            name=name,
            business_name=business_name,
            phone=phone,
            email=email,
            location=location,
            registered_at=now,
            updated_at=now,
        )
        requester.raise_(
            RequesterRegistered(
                requester_id=str(requester.id),
                name=name,
                business_name=business_name,
                registered_at=now,
            )
        )
        return requester

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

    def _profile_changed(self, changes):
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            RequesterProfileUpdated(
                requester_id=str(self.id),
                changes=json.dumps(changes),
                updated_at=now,
            )
        )
