"""Interfaces for the collaborators the route pipeline talks to."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from .models import Coordinates, MapViewport

logger = logging.getLogger(__name__)


class RouteRenderer(ABC):
    """Receives marker and viewport updates from route playback."""

    @abstractmethod
    def move_marker(self, position: Coordinates) -> None:
        """Move the current-position marker.

        Args:
            position: Coordinates of the current waypoint
        """
        pass

    @abstractmethod
    def set_view(self, viewport: MapViewport) -> None:
        """Recentre the map.

        Args:
            viewport: Target centre; a zoom of None keeps the current zoom
        """
        pass

    @abstractmethod
    def reset_marker(self) -> None:
        """Drop any retained marker position and running animation."""
        pass


class NullRenderer(RouteRenderer):
    """Renderer that ignores every update."""

    def move_marker(self, position: Coordinates) -> None:
        pass

    def set_view(self, viewport: MapViewport) -> None:
        pass

    def reset_marker(self) -> None:
        pass


class TickScheduler(ABC):
    """Cancellable one-shot timer used to drive playback ticks."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        """Run ``callback`` once after ``delay_ms`` milliseconds.

        Returns:
            A handle accepted by ``cancel``
        """
        pass

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Cancel a pending callback. Cancelling a fired handle is a no-op."""
        pass


class ReverseGeocoder(ABC):
    """Best-effort coordinate to address lookup with an in-memory cache."""

    def __init__(self):
        self._cache: Dict[str, Optional[str]] = {}

    @property
    @abstractmethod
    def provider(self) -> str:
        """Name of the lookup provider."""
        pass

    @abstractmethod
    def _lookup(self, coords: Coordinates) -> Optional[str]:
        """Fetch the address for ``coords`` without consulting the cache."""
        pass

    def cached_address(self, coords: Coordinates) -> Optional[str]:
        """Return a cached address without performing a lookup."""
        return self._cache.get(coords.cache_key())

    def reverse(self, coords: Coordinates) -> Optional[str]:
        """Return the address for ``coords``, or None if the lookup failed.

        Successful lookups are cached by coordinates rounded to six decimals;
        failures are not cached so a later call can retry.
        """
        key = coords.cache_key()
        if key in self._cache:
            return self._cache[key]
        address = self._lookup(coords)
        if address is not None:
            self._cache[key] = address
        return address

    def clear_cache(self) -> None:
        self._cache.clear()
