"""Party registration: commands and handlers for requesters and fulfillers.

Identities are issued outside the marketplace; registration binds a profile to
an identity the caller already owns.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.party.fulfiller import Fulfiller
from marketplace.party.requester import Requester
from marketplace.shared.geo import GeoPoint


def _location(command):
    if command.latitude is None and command.longitude is None:
        return None
    if command.latitude is None or command.longitude is None:
        raise ValidationError({"location": ["Both latitude and longitude are required"]})
    return GeoPoint(latitude=command.latitude, longitude=command.longitude, address=command.address)


def _ensure_unregistered(aggregate_cls, identifier):
    try:
        current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError:
        return
    raise ValidationError({"id": [f"{aggregate_cls.__name__} {identifier} is already registered"]})


@marketplace.command(part_of="Requester")
class RegisterRequester:
    requester_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    business_name = String(max_length=200)
    phone = String(max_length=30)
    email = String(max_length=254)
    latitude = Float()
    longitude = Float()
    address = String(max_length=500)


@marketplace.command(part_of="Fulfiller")
class RegisterFulfiller:
    fulfiller_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    business_name = String(max_length=200)
    phone = String(max_length=30)
    email = String(max_length=254)
    latitude = Float()
    longitude = Float()
    address = String(max_length=500)


@marketplace.command_handler(part_of=Requester)
class RegisterRequesterHandler:
    @handle(RegisterRequester)
    def register_requester(self, command):
        _ensure_unregistered(Requester, command.requester_id)
        requester = Requester.register(
            requester_id=command.requester_id,
            name=command.name,
            business_name=command.business_name,
            phone=command.phone,
            email=command.email,
            location=_location(command),
        )
        current_domain.repository_for(Requester).add(requester)
        return str(requester.id)


@marketplace.command_handler(part_of=Fulfiller)
class RegisterFulfillerHandler:
    @handle(RegisterFulfiller)
    def register_fulfiller(self, command):
        _ensure_unregistered(Fulfiller, command.fulfiller_id)
        fulfiller = Fulfiller.register(
            fulfiller_id=command.fulfiller_id,
            name=command.name,
            business_name=command.business_name,
            phone=command.phone,
            email=command.email,
            location=_location(command),
        )
        current_domain.repository_for(Fulfiller).add(fulfiller)
        return str(fulfiller.id)
