"""GPS coordinate resolution from raw EXIF tags.

Cameras disagree on how GPS is written: some store clean degree/minute/second
arrays, some only fill in the human-readable description, and some fuse both
axes into one string. ``resolve`` tries, per axis and in this order:

1. the structured value (DMS list, single decimal, or scalar),
2. the first number in that axis' description,
3. the numbers of both descriptions concatenated (latitude first).

An axis that resolves on an earlier step is never overwritten by a later one.
"""

import logging
import math
import re
from typing import List, Optional

from photo_trail.trail.models import Coordinates, RawTagBag, TagName, TagRecord

logger = logging.getLogger(__name__)

NUMBER_PATTERN = re.compile(r"(\d+\.\d+|\d+)")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _component(value) -> Optional[float]:
    """Convert a DMS component: a plain number or a ``[numerator, denominator]`` rational."""
    if _is_number(value):
        return float(value)
    if isinstance(value, (list, tuple)) and len(value) == 2 and all(_is_number(v) for v in value):
        if value[1] == 0:
            return None
        return value[0] / value[1]
    return None


def _finite(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value


def number_tokens(text: str) -> List[float]:
    """All decimal or integer tokens in ``text``, in order."""
    return [float(token) for token in NUMBER_PATTERN.findall(text or "")]


def first_number(text: str) -> Optional[float]:
    """First decimal or integer token in ``text``."""
    match = NUMBER_PATTERN.search(text or "")
    return float(match.group(1)) if match else None


def ref_letter_is(ref: Optional[TagRecord], letter: str) -> bool:
    """Whether the ref tag's description or value starts with ``letter`` (case-insensitive)."""
    if ref is None:
        return False
    if ref.text[:1].lower() == letter:
        return True
    first = ref.first_value()
    return isinstance(first, str) and first[:1].lower() == letter


def structured_axis(
    tag: Optional[TagRecord],
    ref: Optional[TagRecord],
    negative_ref: str,
    default_ref: str,
) -> Optional[float]:
    """Resolve one axis from its structured value.

    Args:
        tag: GPSLatitude or GPSLongitude record
        ref: matching ``*Ref`` record
        negative_ref: 'S' or 'W'
        default_ref: 'N' or 'E', assumed when the ref is missing

    Returns:
        Signed decimal degrees, or None when the value cannot be used
    """
    if tag is None:
        return None

    value = tag.value
    if isinstance(value, (list, tuple)):
        if len(value) >= 3:
            parts = [_component(v) for v in value[:3]]
            if any(p is None for p in parts):
                return None
            degrees = parts[0] + parts[1] / 60 + parts[2] / 3600
        elif len(value) == 1:
            degrees = _component(value[0])
            if degrees is None:
                return None
        else:
            return None
        ref_value = (ref.first_value() if ref else None) or default_ref
    elif value is not None and value != "":
        if _is_number(value):
            degrees = float(value)
        else:
            try:
                degrees = float(str(value).strip())
            except ValueError:
                return None
        ref_value = None
        if ref is not None:
            ref_value = ref.first_value() or ref.description
        ref_value = ref_value or default_ref
    else:
        return None

    if ref_value == negative_ref:
        degrees = -degrees
    return _finite(degrees)


def description_axis(
    tag: Optional[TagRecord],
    ref: Optional[TagRecord],
    hemisphere_word: str,
    hemisphere_letter: str,
) -> Optional[float]:
    """Resolve one axis from the first number in its description."""
    if tag is None or not tag.text:
        return None
    degrees = first_number(tag.text)
    if degrees is None:
        return None
    if hemisphere_word in tag.text.lower() or ref_letter_is(ref, hemisphere_letter):
        degrees = -degrees
    return _finite(degrees)


def resolve(raw_tags: RawTagBag) -> Optional[Coordinates]:
    """Resolve signed decimal coordinates from a tag bag.

    Never raises; returns None unless both axes resolve to finite numbers.
    Values are not range-checked here.
    """
    try:
        return _resolve(raw_tags)
    except (TypeError, ValueError, ArithmeticError) as e:
        logger.debug(f"GPS parsing failed: {e}")
        return None


def _resolve(raw_tags: RawTagBag) -> Optional[Coordinates]:
    lat_tag = raw_tags.tag(TagName.GPS_LATITUDE)
    lon_tag = raw_tags.tag(TagName.GPS_LONGITUDE)
    lat_ref = raw_tags.tag(TagName.GPS_LATITUDE_REF)
    lon_ref = raw_tags.tag(TagName.GPS_LONGITUDE_REF)

    lat = structured_axis(lat_tag, lat_ref, "S", "N")
    lon = structured_axis(lon_tag, lon_ref, "W", "E")

    if lat is None:
        lat = description_axis(lat_tag, lat_ref, "south", "s")
    if lon is None:
        lon = description_axis(lon_tag, lon_ref, "west", "w")

    if (lat is None or lon is None) and lat_tag is not None and lon_tag is not None:
        combined = f"{lat_tag.text} {lon_tag.text}"
        tokens = number_tokens(combined)
        if len(tokens) >= 2:
            combined_lower = combined.lower()
            if lat is None:
                lat = tokens[0]
                if "south" in combined_lower or ref_letter_is(lat_ref, "s"):
                    lat = -lat
            if lon is None:
                lon = tokens[1]
                if "west" in combined_lower or ref_letter_is(lon_ref, "w"):
                    lon = -lon

    lat, lon = _finite(lat), _finite(lon)
    if lat is None or lon is None:
        return None
    return Coordinates(lat=lat, lon=lon)
