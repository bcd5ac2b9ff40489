"""Car marker that glides between consecutive route positions."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from photo_trail.trail.base import RouteRenderer
from photo_trail.trail.config import (
    MARKER_GLIDE_FULL_DISTANCE_KM,
    MARKER_MAX_GLIDE_MS,
    MARKER_MIN_GLIDE_MS,
)
from photo_trail.trail.models import Coordinates, MapViewport
from photo_trail.trail.viewport import haversine_km

logger = logging.getLogger(__name__)


def glide_duration_ms(distance_km: float) -> float:
    """Animation length for a hop: longer hops glide longer, capped at 10 km."""
    ratio = min(distance_km / MARKER_GLIDE_FULL_DISTANCE_KM, 1.0)
    return MARKER_MIN_GLIDE_MS + (MARKER_MAX_GLIDE_MS - MARKER_MIN_GLIDE_MS) * ratio


def ease_in_out(progress: float) -> float:
    """Quadratic ease-in-out on [0, 1]."""
    if progress < 0.5:
        return 2 * progress * progress
    return 1 - ((-2 * progress + 2) ** 2) / 2


@dataclass(frozen=True)
class Glide:
    start: Coordinates
    end: Coordinates
    duration_ms: float

    def position_at(self, elapsed_ms: float) -> Coordinates:
        progress = 1.0 if self.duration_ms <= 0 else min(max(elapsed_ms / self.duration_ms, 0.0), 1.0)
        eased = ease_in_out(progress)
        return Coordinates(
            lat=self.start.lat + (self.end.lat - self.start.lat) * eased,
            lon=self.start.lon + (self.end.lon - self.start.lon) * eased,
        )


class CarMarker:
    """The animated current-position marker.

    Owned by whoever renders playback; ``reset()`` forgets the previous
    position so the next ``move_to`` places the marker without a glide.
    """

    def __init__(self):
        self.position: Optional[Coordinates] = None
        self.glide: Optional[Glide] = None

    @property
    def visible(self) -> bool:
        return self.position is not None

    def move_to(self, position: Coordinates) -> Optional[Glide]:
        """Move to ``position``; returns the glide from the previous spot, if any."""
        previous = self.position
        self.position = position
        if previous is None or previous == position:
            self.glide = None
            return None
        self.glide = Glide(previous, position, glide_duration_ms(haversine_km(previous, position)))
        return self.glide

    def position_at(self, elapsed_ms: float) -> Optional[Coordinates]:
        """Where the marker is drawn ``elapsed_ms`` after the last move."""
        if self.glide is not None:
            return self.glide.position_at(elapsed_ms)
        return self.position

    def reset(self) -> None:
        self.position = None
        self.glide = None


class MarkerRenderer(RouteRenderer):
    """Renderer that keeps a CarMarker and the last requested viewport."""

    def __init__(self, marker: Optional[CarMarker] = None):
        self.marker = marker or CarMarker()
        self.viewport: Optional[MapViewport] = None
        self.trail: List[Coordinates] = []

    def move_marker(self, position: Coordinates) -> None:
        glide = self.marker.move_to(position)
        self.trail.append(position)
        if glide is not None:
            logger.debug(f"Marker glide {glide.duration_ms:.0f}ms to {position.lat:.5f}, {position.lon:.5f}")

    def set_view(self, viewport: MapViewport) -> None:
        if viewport.zoom is None and self.viewport is not None:
            viewport = MapViewport(center=viewport.center, zoom=self.viewport.zoom)
        self.viewport = viewport

    def reset_marker(self) -> None:
        self.marker.reset()
        self.trail.clear()
