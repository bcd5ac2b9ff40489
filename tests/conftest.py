"""Shared fixtures for photo-trail tests."""

from typing import Any, Dict, Optional

import pytest

from photo_trail.trail.models import PhotoRecord


def gps_tags(lat: float, lon: float) -> Dict[str, Dict[str, Any]]:
    """Tag records for a decimal position, written the way the scanner writes them."""
    return {
        "GPSLatitude": {"value": [abs(lat)], "description": str(abs(lat))},
        "GPSLatitudeRef": {"value": ["S" if lat < 0 else "N"], "description": "South latitude" if lat < 0 else "North latitude"},
        "GPSLongitude": {"value": [abs(lon)], "description": str(abs(lon))},
        "GPSLongitudeRef": {"value": ["W" if lon < 0 else "E"], "description": "West longitude" if lon < 0 else "East longitude"},
    }


def make_photo(
    photo_id: str,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    taken: Optional[str] = None,
    fallback: int = 0,
) -> PhotoRecord:
    """Build a PhotoRecord with optional position and ``YYYY:MM:DD HH:MM:SS`` capture date."""
    tags: Dict[str, Any] = {}
    if lat is not None and lon is not None:
        tags.update(gps_tags(lat, lon))
    if taken is not None:
        tags["DateTimeOriginal"] = {"value": taken, "description": taken}
    return PhotoRecord(id=photo_id, raw_tags=tags, fallback_timestamp=fallback, file_name=f"{photo_id}.jpg")


@pytest.fixture
def trip_photos():
    """Four photos of a short walk in Seoul plus one without GPS, in shuffled order."""
    return [
        make_photo("c", 37.5700, 126.9830, taken="2023:05:01 12:20:00"),
        make_photo("a", 37.5665, 126.9780, taken="2023:05:01 12:00:00"),
        make_photo("nogps", taken="2023:05:01 12:05:00"),
        make_photo("d", 37.5800, 126.9900, taken="2023:05:02 09:00:00"),
        make_photo("b", 37.5670, 126.9790, taken="2023:05:01 12:10:00"),
    ]
