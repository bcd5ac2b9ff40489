"""Photo directory scanner and EXIF tag extraction."""

import hashlib
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

from PIL import ExifTags, Image, UnidentifiedImageError

from photo_trail.trail.models import PhotoRecord, RawTagBag, TagName

logger = logging.getLogger(__name__)

# Supported image formats
SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".tif", ".webp", ".heic"}

_HEMISPHERE_LABELS = {
    "N": "North latitude",
    "S": "South latitude",
    "E": "East longitude",
    "W": "West longitude",
}


def _to_float(value: Any) -> Optional[float]:
    """Convert a number or Pillow IFDRational to float."""
    try:
        return float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    text = str(value).replace("\x00", "").strip()
    return text or None


def _text_tag(value: Any) -> Optional[Dict[str, Any]]:
    text = _to_text(value)
    if text is None:
        return None
    return {"value": text, "description": text}


def _number_tag(value: Any, describe) -> Optional[Dict[str, Any]]:
    number = _to_float(value)
    if number is None:
        return None
    return {"value": number, "description": describe(number)}


def _describe_exposure(seconds: float) -> str:
    if 0 < seconds < 1:
        return f"1/{round(1 / seconds)}"
    return f"{seconds:g}"


def _gps_axis_tags(value: Any, ref: Any) -> Dict[str, Dict[str, Any]]:
    """Tag records for one GPS axis: DMS list value, decimal description."""
    tags: Dict[str, Dict[str, Any]] = {}
    ref_text = _to_text(ref)
    if ref_text:
        letter = ref_text[:1].upper()
        tags["ref"] = {"value": [letter], "description": _HEMISPHERE_LABELS.get(letter, ref_text)}
    if isinstance(value, (tuple, list)):
        parts = [_to_float(v) for v in value]
        if parts and all(p is not None for p in parts):
            padded = (parts + [0.0, 0.0])[:3]
            decimal = padded[0] + padded[1] / 60 + padded[2] / 3600
            tags["axis"] = {"value": parts, "description": str(round(decimal, 7))}
    elif value is not None:
        number = _to_float(value)
        if number is not None:
            tags["axis"] = {"value": number, "description": str(number)}
    return tags


def exif_to_tag_bag(
    base: Mapping[int, Any],
    exif_ifd: Optional[Mapping[int, Any]] = None,
    gps_ifd: Optional[Mapping[int, Any]] = None,
) -> RawTagBag:
    """Convert Pillow EXIF dictionaries to a RawTagBag.

    Args:
        base: IFD0 tags from ``Image.getexif()``
        exif_ifd: the Exif sub-IFD
        gps_ifd: the GPS sub-IFD

    Returns:
        RawTagBag with ``value``/``description`` records for the known tags
    """
    exif_ifd = exif_ifd or {}
    gps_ifd = gps_ifd or {}
    tags: Dict[str, Optional[Dict[str, Any]]] = {
        TagName.MAKE.value: _text_tag(base.get(ExifTags.Base.Make)),
        TagName.MODEL.value: _text_tag(base.get(ExifTags.Base.Model)),
        TagName.DATE_TIME.value: _text_tag(base.get(ExifTags.Base.DateTime)),
        TagName.DATE_TIME_ORIGINAL.value: _text_tag(
            exif_ifd.get(ExifTags.Base.DateTimeOriginal, base.get(ExifTags.Base.DateTimeOriginal))
        ),
        TagName.FOCAL_LENGTH.value: _number_tag(
            exif_ifd.get(ExifTags.Base.FocalLength), lambda v: f"{round(v, 2):g} mm"
        ),
        TagName.EXPOSURE_TIME.value: _number_tag(exif_ifd.get(ExifTags.Base.ExposureTime), _describe_exposure),
        TagName.F_NUMBER.value: _number_tag(exif_ifd.get(ExifTags.Base.FNumber), lambda v: f"f/{round(v, 1):g}"),
    }

    lat = _gps_axis_tags(gps_ifd.get(ExifTags.GPS.GPSLatitude), gps_ifd.get(ExifTags.GPS.GPSLatitudeRef))
    lon = _gps_axis_tags(gps_ifd.get(ExifTags.GPS.GPSLongitude), gps_ifd.get(ExifTags.GPS.GPSLongitudeRef))
    tags[TagName.GPS_LATITUDE.value] = lat.get("axis")
    tags[TagName.GPS_LATITUDE_REF.value] = lat.get("ref")
    tags[TagName.GPS_LONGITUDE.value] = lon.get("axis")
    tags[TagName.GPS_LONGITUDE_REF.value] = lon.get("ref")

    return RawTagBag({name: record for name, record in tags.items() if record is not None})


def photo_id_for(path: Path) -> str:
    """Stable identifier for a photo file."""
    return hashlib.md5(str(path.resolve()).encode()).hexdigest()


class PhotoScanner:
    """Scanner for photo directories."""

    def __init__(self, recursive: bool = True):
        self.recursive = recursive
        self._stats = {"scanned": 0, "skipped": 0, "errors": 0, "geotagged": 0}

    def scan_directory(self, directory: str) -> List[PhotoRecord]:
        """Scan a directory and return a PhotoRecord per readable image."""
        directory_path = Path(directory).resolve()
        if not directory_path.is_dir():
            raise ValueError(f"Not a directory: {directory}")

        photos = list(self._scan_directory_iter(directory_path))

        logger.info(
            f"Scan completed: {self._stats['scanned']} scanned, "
            f"{self._stats['skipped']} skipped, {self._stats['errors']} errors"
        )
        return photos

    def _scan_directory_iter(self, directory: Path) -> Iterator[PhotoRecord]:
        """Generator that yields photo records from directory."""
        try:
            entries = sorted(directory.iterdir())
        except PermissionError:
            logger.warning(f"Permission denied: {directory}")
            return

        for entry in entries:
            if entry.is_dir() and self.recursive:
                yield from self._scan_directory_iter(entry)
            elif entry.is_file() and entry.suffix.lower() in SUPPORTED_EXTENSIONS:
                try:
                    record = self.extract_record(entry)
                    if record:
                        self._stats["scanned"] += 1
                        if record.normalized.coords is not None:
                            self._stats["geotagged"] += 1
                        yield record
                    else:
                        self._stats["skipped"] += 1
                except Exception as e:
                    logger.error(f"Error processing {entry}: {e}")
                    self._stats["errors"] += 1

    def extract_record(self, file_path: Path) -> Optional[PhotoRecord]:
        """Read one image file into a PhotoRecord, or None if it is not an image."""
        stat = file_path.stat()
        try:
            with Image.open(file_path) as img:
                exif = img.getexif()
                raw_tags = exif_to_tag_bag(
                    dict(exif),
                    exif.get_ifd(ExifTags.IFD.Exif),
                    exif.get_ifd(ExifTags.IFD.GPSInfo),
                )
        except UnidentifiedImageError:
            logger.debug(f"Not a valid image file: {file_path}")
            return None

        return PhotoRecord(
            id=photo_id_for(file_path),
            raw_tags=raw_tags,
            fallback_timestamp=int(stat.st_mtime * 1000),
            file_name=file_path.name,
            path=str(file_path.resolve()),
        )

    def get_stats(self) -> dict:
        """Get scanning statistics."""
        return self._stats.copy()


def scan_photos(directory: str, recursive: bool = True) -> List[PhotoRecord]:
    """Convenience function to scan photos in a directory."""
    scanner = PhotoScanner(recursive=recursive)
    return scanner.scan_directory(directory)
