"""Geocoding port (abstract interface).

Turns a coordinate into a human-readable address. Adapters raise
ExternalServiceError on failure or timeout.
"""

from abc import ABC, abstractmethod


class GeocodingPort(ABC):
    """Abstract reverse-geocoding interface."""

    @abstractmethod
    def reverse(self, latitude: float, longitude: float) -> str:
        """Return a display address for the coordinate."""
        ...
