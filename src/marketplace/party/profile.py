"""Profile maintenance: contact details, location and verification."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.party.fulfiller import Fulfiller
from marketplace.party.requester import Requester
from marketplace.shared.geo import GeoPoint
from marketplace.shared.lookup import load


def _provided(command, *fields):
    """Fields the caller actually supplied; None means "leave unchanged"."""
    return {field: getattr(command, field) for field in fields if getattr(command, field) is not None}


@marketplace.command(part_of="Requester")
class UpdateRequesterProfile:
    requester_id = Identifier(required=True)
    name = String(max_length=200)
    business_name = String(max_length=200)
    phone = String(max_length=30)
    email = String(max_length=254)


@marketplace.command(part_of="Requester")
class RelocateRequester:
    requester_id = Identifier(required=True)
    latitude = Float(required=True)
    longitude = Float(required=True)
    address = String(max_length=500)


@marketplace.command(part_of="Fulfiller")
class UpdateFulfillerProfile:
    fulfiller_id = Identifier(required=True)
    name = String(max_length=200)
    business_name = String(max_length=200)
    phone = String(max_length=30)
    email = String(max_length=254)


@marketplace.command(part_of="Fulfiller")
class RelocateFulfiller:
    fulfiller_id = Identifier(required=True)
    latitude = Float(required=True)
    longitude = Float(required=True)
    address = String(max_length=500)


@marketplace.command(part_of="Fulfiller")
class VerifyFulfiller:
    fulfiller_id = Identifier(required=True)
    is_verified = Boolean(default=True)


@marketplace.command_handler(part_of=Requester)
class RequesterProfileHandler:
    @handle(UpdateRequesterProfile)
    def update_profile(self, command):
        requester = load(Requester, command.requester_id)
        requester.update_profile(**_provided(command, "name", "business_name", "phone", "email"))
        current_domain.repository_for(Requester).add(requester)

    @handle(RelocateRequester)
    def relocate(self, command):
        requester = load(Requester, command.requester_id)
        requester.relocate(
            GeoPoint(latitude=command.latitude, longitude=command.longitude, address=command.address)
        )
        current_domain.repository_for(Requester).add(requester)


@marketplace.command_handler(part_of=Fulfiller)
class FulfillerProfileHandler:
    @handle(UpdateFulfillerProfile)
    def update_profile(self, command):
        fulfiller = load(Fulfiller, command.fulfiller_id)
        fulfiller.update_profile(**_provided(command, "name", "business_name", "phone", "email"))
        current_domain.repository_for(Fulfiller).add(fulfiller)

    @handle(RelocateFulfiller)
    def relocate(self, command):
        fulfiller = load(Fulfiller, command.fulfiller_id)
        fulfiller.relocate(
            GeoPoint(latitude=command.latitude, longitude=command.longitude, address=command.address)
        )
        current_domain.repository_for(Fulfiller).add(fulfiller)

    @handle(VerifyFulfiller)
    def verify(self, command):
        fulfiller = load(Fulfiller, command.fulfiller_id)
        fulfiller.verify(is_verified=command.is_verified if command.is_verified is not None else True)
        current_domain.repository_for(Fulfiller).add(fulfiller)
