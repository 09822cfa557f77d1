"""Configurable fake geocoder for development and testing."""

from marketplace.discovery.geocoding.port import GeocodingPort
from marketplace.shared.errors import ExternalServiceError


class FakeGeocoder(GeocodingPort):
    def __init__(self) -> None:
        self.addresses: dict[tuple[float, float], str] = {}
        self.should_fail: bool = False
        self.calls: list[dict] = []

    def configure(self, should_fail: bool = False, addresses: dict[tuple[float, float], str] | None = None) -> None:
        self.should_fail = should_fail
        if addresses is not None:
            self.addresses = dict(addresses)

    def reverse(self, latitude: float, longitude: float) -> str:
        self.calls.append({"method": "reverse", "latitude": latitude, "longitude": longitude})
        if self.should_fail:
            raise ExternalServiceError("fake-geocoder", "geocoding unavailable")
        return self.addresses.get((latitude, longitude), f"Near {latitude:.3f}, {longitude:.3f}")

    def reset(self) -> None:
        self.calls.clear()
        self.should_fail = False
