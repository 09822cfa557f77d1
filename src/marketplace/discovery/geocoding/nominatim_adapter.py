"""Nominatim adapter: reverse geocoding against OpenStreetMap's Nominatim API."""

import requests
import structlog

from marketplace.discovery.geocoding.port import GeocodingPort
from marketplace.shared.errors import ExternalServiceError

logger = structlog.get_logger(__name__)

REVERSE_TIMEOUT_S = 10.0


class NominatimGeocoder(GeocodingPort):
    service_name = "nominatim"

    def __init__(
        self,
        base_url: str = "https://nominatim.openstreetmap.org",
        user_agent: str = "supplylink-marketplace/1.0",
        timeout_s: float = REVERSE_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def reverse(self, latitude: float, longitude: float) -> str:
        try:
            response = self.session.get(
                f"{self.base_url}/reverse",
                params={"format": "json", "lat": latitude, "lon": longitude, "zoom": 18, "addressdetails": 1},
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_s,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as exc:
            logger.warning("geocoding_timeout", latitude=latitude, longitude=longitude, timeout_s=self.timeout_s)
            raise ExternalServiceError(self.service_name, f"timed out after {self.timeout_s}s") from exc
        except (requests.RequestException, ValueError) as exc:
            logger.warning("geocoding_failed", latitude=latitude, longitude=longitude, error=str(exc))
            raise ExternalServiceError(self.service_name, str(exc)) from exc

        address = payload.get("display_name") if isinstance(payload, dict) else None
        if not address:
            raise ExternalServiceError(self.service_name, "no address for coordinate")
        return address
