"""Geocoding adapter factory and the degrading address resolver."""

import os

import structlog

from marketplace.discovery.geocoding.fake_adapter import FakeGeocoder
from marketplace.discovery.geocoding.nominatim_adapter import NominatimGeocoder
from marketplace.discovery.geocoding.port import GeocodingPort
from marketplace.shared.errors import ExternalServiceError
from marketplace.shared.geo import coordinate_label

logger = structlog.get_logger(__name__)

_current_geocoder: GeocodingPort | None = None


def get_geocoder() -> GeocodingPort:
    """Return the configured geocoder (singleton).

    Uses FakeGeocoder by default; MARKETPLACE_GEOCODER=nominatim selects the
    OpenStreetMap adapter.
    """
    global _current_geocoder
    if _current_geocoder is None:
        adapter = os.environ.get("MARKETPLACE_GEOCODER", "fake")
        if adapter == "fake":
            _current_geocoder = FakeGeocoder()
        elif adapter == "nominatim":
            _current_geocoder = NominatimGeocoder(
                base_url=os.environ.get("NOMINATIM_URL", "https://nominatim.openstreetmap.org"),
            )
        else:
            raise ValueError(f"Unknown geocoder: {adapter}")
    return _current_geocoder


def set_geocoder(geocoder: GeocodingPort) -> None:
    global _current_geocoder
    _current_geocoder = geocoder


def reset_geocoder() -> None:
    global _current_geocoder
    _current_geocoder = None


def resolve_address(latitude: float, longitude: float, geocoder: GeocodingPort | None = None) -> tuple[str, bool]:
    """Return ``(address, fallback)`` for a coordinate.

    Falls back to a coordinate label when the geocoder fails.
    """
    geocoder = geocoder or get_geocoder()
    try:
        return geocoder.reverse(latitude, longitude), False
    except ExternalServiceError as exc:
        logger.warning("geocoding_fallback", service=exc.service, latitude=latitude, longitude=longitude)
        return coordinate_label(latitude, longitude), True
