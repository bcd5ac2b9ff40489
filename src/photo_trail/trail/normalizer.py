"""Flatten raw EXIF tags into display-ready metadata."""

import logging
from typing import Optional

from photo_trail.trail.capture_time import parse_exif_datetime
from photo_trail.trail.config import MONTH_NAMES
from photo_trail.trail.gps import first_number, resolve
from photo_trail.trail.models import Coordinates, DisplayMetadata, RawTagBag, TagName, TagRecord

logger = logging.getLogger(__name__)


def normalize(raw_tags: RawTagBag) -> DisplayMetadata:
    """Build a DisplayMetadata from a tag bag. Never raises."""
    if not isinstance(raw_tags, RawTagBag):
        raw_tags = RawTagBag(raw_tags)

    coords = resolve(raw_tags)
    if coords is None:
        coords = lenient_coords(raw_tags)

    return DisplayMetadata(
        camera=format_camera(raw_tags),
        exif_summary=format_exif_summary(raw_tags),
        formatted_date=format_date(raw_tags),
        coords=coords,
        gps_text=format_gps_text(raw_tags, coords),
    )


def format_camera(raw_tags: RawTagBag) -> Optional[str]:
    make = raw_tags.tag(TagName.MAKE)
    model = raw_tags.tag(TagName.MODEL)
    if make is None and model is None:
        return None
    camera = f"{make.text if make else ''} {model.text if model else ''}".strip()
    return camera or None


def format_exif_summary(raw_tags: RawTagBag) -> Optional[str]:
    parts = []
    for name in (TagName.FOCAL_LENGTH, TagName.EXPOSURE_TIME, TagName.F_NUMBER):
        record = raw_tags.tag(name)
        text = record.text.strip() if record else ""
        if text:
            parts.append(text)
    return ", ".join(parts) or None


def format_date(raw_tags: RawTagBag) -> Optional[str]:
    """Render DateTimeOriginal as ``DD. Month. YYYY``; unparseable values pass through."""
    record = raw_tags.tag(TagName.DATE_TIME_ORIGINAL)
    if record is None or not record.text:
        return None
    parsed = parse_exif_datetime(record.text)
    if parsed is None:
        return record.text
    return f"{parsed.day:02d}. {MONTH_NAMES[parsed.month - 1]}. {parsed.year}"


def _hemisphere_negative(text: str, ref: Optional[TagRecord], word: str, letter: str) -> bool:
    lower = text.lower()
    if word in lower or f"{letter} " in lower:
        return True
    if ref is None:
        return False
    if ref.text.lower() == letter:
        return True
    first = ref.first_value()
    return isinstance(first, str) and first.lower() == letter


def lenient_coords(raw_tags: RawTagBag) -> Optional[Coordinates]:
    """Second-chance parse straight from the individual GPS descriptions.

    Only runs when both GPS tags exist, and only accepts in-range results.
    Hemisphere words also match a bare ``"s "``/``"w "``, unlike ``gps.resolve``.
    """
    lat_tag = raw_tags.tag(TagName.GPS_LATITUDE)
    lon_tag = raw_tags.tag(TagName.GPS_LONGITUDE)
    if lat_tag is None or lon_tag is None:
        return None

    lat = first_number(lat_tag.text)
    lon = first_number(lon_tag.text)
    if lat is None or lon is None:
        return None

    if _hemisphere_negative(lat_tag.text, raw_tags.tag(TagName.GPS_LATITUDE_REF), "south", "s"):
        lat = -lat
    if _hemisphere_negative(lon_tag.text, raw_tags.tag(TagName.GPS_LONGITUDE_REF), "west", "w"):
        lon = -lon

    coords = Coordinates(lat=lat, lon=lon)
    if not coords.in_range():
        logger.debug(f"Discarding out-of-range GPS description parse: {lat}, {lon}")
        return None
    return coords


def _ref_label(ref: Optional[TagRecord], default: str) -> str:
    if ref is None:
        return default
    first = ref.first_value()
    if isinstance(first, str) and first:
        return first
    return ref.text or default


def format_gps_text(raw_tags: RawTagBag, coords: Optional[Coordinates]) -> Optional[str]:
    """Human-readable GPS line, e.g. ``37.500000°N, 127.000000°E``."""
    lat_ref = _ref_label(raw_tags.tag(TagName.GPS_LATITUDE_REF), "N")
    lon_ref = _ref_label(raw_tags.tag(TagName.GPS_LONGITUDE_REF), "E")
    if coords is not None:
        return f"{abs(coords.lat):.6f}°{lat_ref}, {abs(coords.lon):.6f}°{lon_ref}"

    lat_tag = raw_tags.tag(TagName.GPS_LATITUDE)
    lon_tag = raw_tags.tag(TagName.GPS_LONGITUDE)
    if lat_tag is None or lon_tag is None or not lat_tag.text or not lon_tag.text:
        return None
    return f"{lat_tag.text}{lat_ref}, {lon_tag.text}{lon_ref}"
