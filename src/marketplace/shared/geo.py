"""GeoPoint value object and great-circle distance."""

from math import asin, cos, radians, sin, sqrt

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, String

from marketplace.domain import marketplace

EARTH_RADIUS_KM = 6371.0


@marketplace.value_object
class GeoPoint:
    """The single canonical location of a party.

    Only the coordinate pair is authoritative; any spatial-index representation
    is derived by the storage adapter. The address is a human-readable label.
    """

    latitude: Float(required=True, min_value=-90.0, max_value=90.0)
    longitude: Float(required=True, min_value=-180.0, max_value=180.0)
    address: String(max_length=500)

    @invariant.post
    def coordinates_must_be_in_range(self):
        if self.latitude is not None and not -90.0 <= self.latitude <= 90.0:
            raise ValidationError({"latitude": ["Latitude must be between -90 and 90"]})
        if self.longitude is not None and not -180.0 <= self.longitude <= 180.0:
            raise ValidationError({"longitude": ["Longitude must be between -180 and 180"]})

    def label(self) -> str:
        """Address if known, else the coordinates."""
        return self.address or coordinate_label(self.latitude, self.longitude)


def coordinate_label(latitude: float, longitude: float) -> str:
    return f"{latitude:.5f}, {longitude:.5f}"


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    phi1, phi2 = radians(lat1), radians(lat2)
    d_phi = radians(lat2 - lat1)
    d_lambda = radians(lon2 - lon1)

    a = sin(d_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(min(1.0, sqrt(a)))


def distance_between(origin: GeoPoint, target: GeoPoint) -> float:
    return haversine_km(origin.latitude, origin.longitude, target.latitude, target.longitude)
