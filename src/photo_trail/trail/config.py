"""Constants and enums shared by the route pipeline and playback."""

from enum import Enum
from typing import List, Tuple

class PlaybackStatus(str, Enum):
    """States of the route playback state machine."""
    STOPPED = "stopped"
    PLAYING = "playing"
    FINISHED = "finished"


# Playback cadence
DEFAULT_TICK_INTERVAL_MS = 1000

EMPTY_ROUTE_NOTICE = "No photos with GPS information to play back."

MONTH_NAMES: List[str] = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# (span threshold in degrees, zoom); first span strictly greater wins
VIEWPORT_ZOOM_STEPS: List[Tuple[float, int]] = [
    (1.0, 8),
    (0.5, 9),
    (0.1, 11),
    (0.05, 12),
]
VIEWPORT_DEFAULT_ZOOM = 13

# (distance threshold in km, zoom); first distance strictly smaller wins
GAP_ZOOM_STEPS: List[Tuple[float, int]] = [
    (0.1, 18),
    (0.5, 17),
    (1.0, 16),
    (5.0, 15),
]
GAP_DEFAULT_ZOOM = 14

EARTH_RADIUS_KM = 6371.0

# Car marker glide between consecutive waypoints
MARKER_MIN_GLIDE_MS = 200
MARKER_MAX_GLIDE_MS = 600
MARKER_GLIDE_FULL_DISTANCE_KM = 10.0
