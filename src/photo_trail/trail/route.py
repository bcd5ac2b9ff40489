"""Route reconstruction from a photo collection."""

import logging
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List

from photo_trail.trail.capture_time import resolve_timestamp, sort_by_time
from photo_trail.trail.models import PhotoRecord, Route, Waypoint

logger = logging.getLogger(__name__)


def build_route(photos: Iterable[PhotoRecord]) -> Route:
    """Build the time-ordered route of geotagged photos.

    Photos are sorted by capture time, reduced to those with coordinates, and
    the resulting waypoints are stably sorted by timestamp once more. A photo
    that fails to process is skipped; the rest of the collection still is.
    """
    waypoints: List[Waypoint] = []
    for photo in sort_by_time(photos):
        try:
            coords = photo.normalized.coords
            if coords is None:
                continue
            waypoints.append(Waypoint(photo_id=photo.id, coords=coords, timestamp=resolve_timestamp(photo)))
        except Exception as e:
            logger.warning(f"Skipping photo {photo.id} while building route: {e}")

    waypoints.sort(key=lambda wp: wp.timestamp)
    logger.debug(f"Built route with {len(waypoints)} waypoints")
    return Route(tuple(waypoints))


def day_key(timestamp_ms: int) -> str:
    """Local calendar day of an epoch-ms timestamp as ``YYYY.MM.DD``."""
    if not timestamp_ms:
        return "unknown"
    try:
        return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y.%m.%d")
    except (OverflowError, OSError, ValueError):
        return "unknown"


def group_by_day(route: Route) -> Dict[str, List[int]]:
    """Group waypoint indices by capture day, preserving route order."""
    groups: Dict[str, List[int]] = OrderedDict()
    for index, waypoint in enumerate(route):
        groups.setdefault(day_key(waypoint.timestamp), []).append(index)
    return groups
