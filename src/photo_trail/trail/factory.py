"""Factory for creating reverse geocoders by provider name."""

import logging
from typing import Optional

from .base import ReverseGeocoder

logger = logging.getLogger(__name__)


def create_geocoder(
    provider: str = "nominatim",
    user_agent: Optional[str] = None,
    language: str = "ko",
    **kwargs
) -> ReverseGeocoder:
    """Create a reverse geocoder.

    Args:
        provider: "nominatim" or "mock"
        user_agent: User-Agent header sent to Nominatim (its usage policy requires one)
        language: Preferred address language
        **kwargs: Additional arguments passed to the geocoder constructor

    Returns:
        ReverseGeocoder instance

    Raises:
        ValueError: If the provider is not recognized
    """
    provider_lower = (provider or "").lower().strip()

    if provider_lower.startswith("mock"):
        from .geocoding import MockGeocoder
        return MockGeocoder(**kwargs)

    if provider_lower in ("nominatim", "osm", "openstreetmap"):
        from .geocoding import DEFAULT_USER_AGENT, NominatimGeocoder
        if not user_agent:
            logger.info(f"No user agent configured for Nominatim, using {DEFAULT_USER_AGENT}")
        return NominatimGeocoder(user_agent=user_agent or DEFAULT_USER_AGENT, language=language, **kwargs)

    raise ValueError(
        f"Unrecognized geocoder: {provider}. "
        f"Supported providers: nominatim, mock"
    )
