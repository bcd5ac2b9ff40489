"""photo-trail - replay the route behind a photo collection on a map."""

__version__ = "0.1.0"
__author__ = "photo-trail contributors"
__license__ = "MIT"

import logging

# Public API
from .trail.capture_time import resolve_timestamp, sort_by_time
from .trail.gps import resolve as resolve_coordinates
from .trail.models import Coordinates, MapViewport, PhotoRecord, RawTagBag, Route, Waypoint
from .trail.normalizer import normalize
from .trail.playback import RoutePlayback
from .trail.route import build_route
from .trail.session import TrailSession
from .trail.viewport import compute_viewport, follow_viewport

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "Coordinates",
    "MapViewport",
    "PhotoRecord",
    "RawTagBag",
    "Route",
    "Waypoint",
    "RoutePlayback",
    "TrailSession",
    "build_route",
    "compute_viewport",
    "follow_viewport",
    "normalize",
    "resolve_coordinates",
    "resolve_timestamp",
    "sort_by_time",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
