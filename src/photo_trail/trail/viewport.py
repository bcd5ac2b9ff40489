"""Map viewport and zoom calculations."""

import math
from typing import Iterable, Optional

from photo_trail.trail.config import (
    EARTH_RADIUS_KM,
    GAP_DEFAULT_ZOOM,
    GAP_ZOOM_STEPS,
    VIEWPORT_DEFAULT_ZOOM,
    VIEWPORT_ZOOM_STEPS,
)
from photo_trail.trail.models import Coordinates, MapViewport


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(b.lat - a.lat)
    d_lon = math.radians(b.lon - a.lon)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def zoom_for_span(span: float) -> int:
    """Zoom level for a bounding box whose larger side is ``span`` degrees."""
    for threshold, zoom in VIEWPORT_ZOOM_STEPS:
        if span > threshold:
            return zoom
    return VIEWPORT_DEFAULT_ZOOM


def zoom_for_gap(distance_km: float) -> int:
    """Zoom level for following a hop of ``distance_km`` to the next waypoint."""
    for threshold, zoom in GAP_ZOOM_STEPS:
        if distance_km < threshold:
            return zoom
    return GAP_DEFAULT_ZOOM


def compute_viewport(coords_list: Iterable[Coordinates]) -> Optional[MapViewport]:
    """Viewport centred on the bounding box of ``coords_list``.

    Returns:
        MapViewport, or None for an empty input
    """
    coords_list = list(coords_list)
    if not coords_list:
        return None

    lats = [c.lat for c in coords_list]
    lons = [c.lon for c in coords_list]
    min_lat, max_lat = min(lats), max(lats)
    min_lon, max_lon = min(lons), max(lons)

    center = Coordinates(lat=(min_lat + max_lat) / 2, lon=(min_lon + max_lon) / 2)
    span = max(max_lat - min_lat, max_lon - min_lon)
    return MapViewport(center=center, zoom=zoom_for_span(span))


def follow_viewport(
    current: Coordinates,
    next_coords: Optional[Coordinates],
    auto_zoom_enabled: bool,
) -> MapViewport:
    """Auto-follow viewport during playback.

    Always centres on ``current``. The zoom is only set when auto-zoom is on
    and there is a next waypoint to measure against; otherwise it is None
    and the renderer keeps its current zoom.
    """
    zoom = None
    if auto_zoom_enabled and next_coords is not None:
        zoom = zoom_for_gap(haversine_km(current, next_coords))
    return MapViewport(center=current, zoom=zoom)
