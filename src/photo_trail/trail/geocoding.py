"""Reverse geocoding clients."""

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from .base import ReverseGeocoder
from .models import Coordinates

logger = logging.getLogger(__name__)

NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
DEFAULT_USER_AGENT = "photo-trail/0.1.0"
KOREA_NAMES = ("대한민국", "South Korea")


def format_address(payload: Mapping[str, Any]) -> Optional[str]:
    """Build a short address line from a Nominatim reverse response.

    Korean addresses read from province down to road; elsewhere from road up
    to country. ``display_name`` is used when no address parts are present.
    """
    addr = payload.get("address") or {}

    if addr.get("country") in KOREA_NAMES:
        candidates = [
            addr.get("province") or addr.get("state"),
            addr.get("city"),
            addr.get("county"),
            addr.get("suburb") or addr.get("town") or addr.get("village"),
            addr.get("neighbourhood"),
            addr.get("road"),
        ]
    else:
        candidates = [
            addr.get("road"),
            addr.get("suburb") or addr.get("neighbourhood"),
            addr.get("city") or addr.get("town") or addr.get("village"),
            addr.get("state") or addr.get("province"),
            addr.get("country"),
        ]
    parts = [part for part in candidates if part]

    address = " ".join(parts)
    if not address:
        address = payload.get("display_name") or ""
    return address or None


class NominatimGeocoder(ReverseGeocoder):
    """Reverse geocoding through the OpenStreetMap Nominatim API."""

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        language: str = "ko",
        base_url: str = NOMINATIM_REVERSE_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__()
        self.user_agent = user_agent
        self.language = language
        self.base_url = base_url
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def provider(self) -> str:
        return "nominatim"

    def _lookup(self, coords: Coordinates) -> Optional[str]:
        params = {
            "format": "json",
            "lat": coords.lat,
            "lon": coords.lon,
            "zoom": 18,
            "addressdetails": 1,
        }
        headers = {"Accept-Language": self.language, "User-Agent": self.user_agent}
        try:
            response = self._session.get(self.base_url, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return format_address(response.json())
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Reverse geocoding failed for {coords.cache_key()}: {e}")
            return None


class MockGeocoder(ReverseGeocoder):
    """Offline geocoder returning canned or coordinate-based addresses."""

    def __init__(self, addresses: Optional[Dict[str, str]] = None):
        super().__init__()
        self.addresses = dict(addresses or {})
        self.lookups = 0

    @property
    def provider(self) -> str:
        return "mock"

    def _lookup(self, coords: Coordinates) -> Optional[str]:
        self.lookups += 1
        return self.addresses.get(coords.cache_key(), f"Mock address near {coords.lat:.4f}, {coords.lon:.4f}")
