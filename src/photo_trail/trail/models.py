"""Data models for photo tags, display metadata and routes."""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

TagValue = Union[int, float, str, List[Any], None]


class TagName(str, Enum):
    """EXIF tags read by the normalizer and resolvers."""
    MAKE = "Make"
    MODEL = "Model"
    FOCAL_LENGTH = "FocalLength"
    EXPOSURE_TIME = "ExposureTime"
    F_NUMBER = "FNumber"
    DATE_TIME_ORIGINAL = "DateTimeOriginal"
    DATE_TIME = "DateTime"
    GPS_LATITUDE = "GPSLatitude"
    GPS_LATITUDE_REF = "GPSLatitudeRef"
    GPS_LONGITUDE = "GPSLongitude"
    GPS_LONGITUDE_REF = "GPSLongitudeRef"


@dataclass(frozen=True)
class TagRecord:
    """A single decoded tag: raw value plus its human-readable description."""
    value: TagValue = None
    description: Optional[str] = None

    @property
    def text(self) -> str:
        """Description as a string, empty when absent."""
        if self.description is None:
            return ""
        return self.description if isinstance(self.description, str) else str(self.description)

    def first_value(self) -> Any:
        """First element of a list value, or the first character of a string value."""
        value = self.value
        if isinstance(value, (list, tuple)):
            return value[0] if value else None
        if isinstance(value, str):
            return value[:1] or None
        return value

    def to_dict(self) -> Dict[str, Any]:
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {"value": value, "description": self.description}

    @classmethod
    def from_dict(cls, data: Any) -> "TagRecord":
        if isinstance(data, TagRecord):
            return data
        if not isinstance(data, Mapping):
            # Bare values (e.g. hand-written fixtures) carry no description
            return cls(value=_freeze_value(data))
        return cls(
            value=_freeze_value(data.get("value")),
            description=data.get("description"),
        )


def _freeze_value(value: Any) -> TagValue:
    if isinstance(value, tuple):
        return list(value)
    return value


class RawTagBag(Mapping):
    """Immutable mapping of tag name to TagRecord.

    Known tags are looked up through ``TagName``; anything else the decoder
    produced is kept as-is so a bag survives a persistence round trip.
    """

    def __init__(self, tags: Optional[Mapping[str, Any]] = None):
        records: Dict[str, TagRecord] = {}
        for name, data in (tags or {}).items():
            key = name.value if isinstance(name, TagName) else str(name)
            records[key] = TagRecord.from_dict(data)
        self._tags = records

    def __getitem__(self, key: Union[str, TagName]) -> TagRecord:
        if isinstance(key, TagName):
            key = key.value
        return self._tags[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"RawTagBag({sorted(self._tags)})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RawTagBag):
            return self.to_dict() == other.to_dict()
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def tag(self, name: TagName) -> Optional[TagRecord]:
        """Return the record for ``name`` or None when the tag is absent."""
        return self._tags.get(name.value)

    def description(self, name: TagName) -> Optional[str]:
        """Return the description of ``name`` or None."""
        record = self.tag(name)
        return record.description if record else None

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: record.to_dict() for name, record in self._tags.items()}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "RawTagBag":
        return cls(data)


@dataclass(frozen=True)
class Coordinates:
    """Signed decimal latitude/longitude pair."""
    lat: float
    lon: float

    def in_range(self) -> bool:
        return -90 <= self.lat <= 90 and -180 <= self.lon <= 180

    def as_pair(self) -> List[float]:
        return [self.lat, self.lon]

    def cache_key(self) -> str:
        return f"{self.lat:.6f},{self.lon:.6f}"

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Coordinates":
        return cls(lat=float(data["lat"]), lon=float(data["lon"]))


@dataclass
class DisplayMetadata:
    """Flat, display-ready projection of a tag bag."""
    camera: Optional[str] = None
    exif_summary: Optional[str] = None
    formatted_date: Optional[str] = None
    coords: Optional[Coordinates] = None
    gps_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "camera": self.camera,
            "exif_summary": self.exif_summary,
            "formatted_date": self.formatted_date,
            "coords": self.coords.to_dict() if self.coords else None,
            "gps_text": self.gps_text,
        }


@dataclass
class PhotoRecord:
    """A photo in the working collection."""
    id: str
    raw_tags: RawTagBag = field(default_factory=RawTagBag)
    fallback_timestamp: int = 0  # epoch-ms, usually the file mtime
    file_name: Optional[str] = None
    path: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.raw_tags, RawTagBag):
            self.raw_tags = RawTagBag(self.raw_tags)

    @cached_property
    def normalized(self) -> DisplayMetadata:
        """Display metadata, derived on first access."""
        from photo_trail.trail.normalizer import normalize
        return normalize(self.raw_tags)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "raw_tags": self.raw_tags.to_dict(),
            "fallback_timestamp": self.fallback_timestamp,
            "file_name": self.file_name,
            "path": self.path,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PhotoRecord":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            raw_tags=RawTagBag.from_dict(data.get("raw_tags") or {}),
            fallback_timestamp=int(data.get("fallback_timestamp") or 0),
            file_name=data.get("file_name"),
            path=data.get("path"),
        )


@dataclass(frozen=True)
class Waypoint:
    """One geotagged, time-stamped stop along a route."""
    photo_id: str
    coords: Coordinates
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "photo_id": self.photo_id,
            "coords": self.coords.to_dict(),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Route:
    """Time-ordered sequence of waypoints."""
    waypoints: Tuple[Waypoint, ...] = ()

    def __post_init__(self):
        if not isinstance(self.waypoints, tuple):
            object.__setattr__(self, "waypoints", tuple(self.waypoints))

    def __len__(self) -> int:
        return len(self.waypoints)

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(self.waypoints)

    def __getitem__(self, index: int) -> Waypoint:
        return self.waypoints[index]

    @property
    def is_empty(self) -> bool:
        return not self.waypoints

    @cached_property
    def key(self) -> str:
        """Content hash identifying this route; changes whenever the route is rebuilt differently."""
        digest = hashlib.md5()
        for wp in self.waypoints:
            digest.update(f"{wp.photo_id}|{wp.coords.lat!r}|{wp.coords.lon!r}|{wp.timestamp};".encode())
        return digest.hexdigest()

    @property
    def path(self) -> List[List[float]]:
        """Polyline positions as ``[lat, lon]`` pairs."""
        return [wp.coords.as_pair() for wp in self.waypoints]

    def coordinates(self) -> List[Coordinates]:
        return [wp.coords for wp in self.waypoints]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "waypoints": [wp.to_dict() for wp in self.waypoints],
        }


@dataclass(frozen=True)
class MapViewport:
    """Map centre and zoom. A zoom of None means keep the current zoom."""
    center: Coordinates
    zoom: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"center": self.center.to_dict(), "zoom": self.zoom}


@dataclass
class PlaybackState:
    """Snapshot of the playback state machine handed to renderers."""
    status: str
    cursor: int
    tick_interval_ms: int
    auto_zoom_enabled: bool
    route_length: int = 0

    @property
    def is_playing(self) -> bool:
        return self.status == "playing"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "is_playing": self.is_playing,
            "cursor": self.cursor,
            "tick_interval_ms": self.tick_interval_ms,
            "auto_zoom_enabled": self.auto_zoom_enabled,
            "route_length": self.route_length,
        }
