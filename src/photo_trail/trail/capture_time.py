"""Capture time resolution and time ordering of photo collections."""

import logging
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from photo_trail.trail.models import PhotoRecord, RawTagBag, TagName

logger = logging.getLogger(__name__)

# EXIF writes the date part with colons: "2023:05:01 12:34:56"
EXIF_DATE_PREFIX = re.compile(r"(\d{4}):(\d{2}):(\d{2})")

# A bare date is midnight UTC, as in ISO 8601 date-only forms
DATE_ONLY = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_exif_datetime(text: Optional[str]) -> Optional[datetime]:
    """Parse an EXIF date-time string.

    The first ``YYYY:MM:DD`` group is rewritten to ``YYYY-MM-DD`` and the result
    is parsed as an ISO date-time. Naive date-times are local time; a date with
    no time part is midnight UTC.

    Returns:
        The parsed datetime, or None when the string is not a valid date
    """
    if not text:
        return None
    candidate = EXIF_DATE_PREFIX.sub(r"\1-\2-\3", str(text).strip(), count=1)
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if DATE_ONLY.fullmatch(candidate):
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_epoch_ms(value: datetime) -> Optional[int]:
    try:
        return int(round(value.timestamp() * 1000))
    except (OverflowError, OSError, ValueError):
        return None


def capture_date_string(raw_tags: RawTagBag) -> Optional[str]:
    """The single date candidate: DateTimeOriginal, else DateTime."""
    for name in (TagName.DATE_TIME_ORIGINAL, TagName.DATE_TIME):
        record = raw_tags.tag(name)
        if record is not None and record.text:
            return record.text
    return None


def resolve_timestamp(photo: PhotoRecord) -> int:
    """Authoritative capture time of ``photo`` in epoch milliseconds.

    A date string that fails to parse falls straight back to the photo's
    ``fallback_timestamp``; the next tag is not tried.
    """
    date_str = capture_date_string(photo.raw_tags)
    if date_str:
        parsed = parse_exif_datetime(date_str)
        timestamp = to_epoch_ms(parsed) if parsed is not None else None
        if timestamp is not None:
            return timestamp
        logger.debug(f"Unparseable capture date {date_str!r} for {photo.id}, using fallback")
    return int(photo.fallback_timestamp)


def sort_by_time(photos: Iterable[PhotoRecord]) -> List[PhotoRecord]:
    """Return photos ordered by capture time; ties keep their input order."""
    return sorted(photos, key=resolve_timestamp)
