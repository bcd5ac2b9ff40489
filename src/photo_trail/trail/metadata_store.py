"""SQLite storage for the photo collection and viewer state."""

import json
import logging
import sqlite3
from typing import Any, Dict, Iterable, List, Optional

from photo_trail.trail.capture_time import resolve_timestamp
from photo_trail.trail.models import PhotoRecord

logger = logging.getLogger(__name__)


class MetadataStore:
    """SQLite-based storage for photo records and app state.

    Photos are stored in their storage-neutral form (id, raw tag bag,
    fallback timestamp). The resolved coordinates and capture time are
    written alongside for inspection only; restored records are
    re-normalized from their raw tags.
    """

    def __init__(self, db_path: str = "photo_trail.db"):
        self.db_path = db_path
        self._init_db()

    def _init_db(self):
        """Initialize database tables."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS photos (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT UNIQUE NOT NULL,
                    file_name TEXT,
                    path TEXT,
                    raw_tags TEXT NOT NULL,  -- JSON object
                    fallback_timestamp INTEGER NOT NULL,
                    resolved_lat REAL,
                    resolved_lon REAL,
                    resolved_timestamp INTEGER,
                    saved_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS app_state (
                    key TEXT PRIMARY KEY,
                    value TEXT  -- JSON
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_photos_timestamp ON photos(resolved_timestamp)")

            conn.commit()

    def _photo_row(self, photo: PhotoRecord) -> tuple:
        coords = photo.normalized.coords
        return (
            photo.id,
            photo.file_name,
            photo.path,
            json.dumps(photo.raw_tags.to_dict()),
            int(photo.fallback_timestamp),
            coords.lat if coords else None,
            coords.lon if coords else None,
            resolve_timestamp(photo),
        )

    def save_photo(self, photo: PhotoRecord) -> None:
        """Insert or update one photo."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT seq FROM photos WHERE id = ?", (photo.id,))
            existing = cursor.fetchone()
            row = self._photo_row(photo)

            if existing:
                cursor.execute("""
                    UPDATE photos SET
                        file_name = ?,
                        path = ?,
                        raw_tags = ?,
                        fallback_timestamp = ?,
                        resolved_lat = ?,
                        resolved_lon = ?,
                        resolved_timestamp = ?,
                        saved_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                """, row[1:] + (photo.id,))
            else:
                cursor.execute("""
                    INSERT INTO photos (
                        id, file_name, path, raw_tags, fallback_timestamp,
                        resolved_lat, resolved_lon, resolved_timestamp
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, row)
            conn.commit()

    def save_all_photos(self, photos: Iterable[PhotoRecord]) -> int:
        """Replace the stored collection with ``photos``; returns the number saved."""
        rows = []
        for photo in photos:
            try:
                rows.append(self._photo_row(photo))
            except (TypeError, ValueError) as e:
                logger.error(f"Failed to serialize photo {photo.id}: {e}")

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM photos")
            cursor.executemany("""
                INSERT INTO photos (
                    id, file_name, path, raw_tags, fallback_timestamp,
                    resolved_lat, resolved_lon, resolved_timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, rows)
            conn.commit()

        logger.info(f"Saved {len(rows)} photos to {self.db_path}")
        return len(rows)

    def load_all_photos(self) -> List[PhotoRecord]:
        """Load every stored photo in the order it was saved."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM photos ORDER BY seq")

            photos = []
            for row in cursor.fetchall():
                try:
                    photos.append(self._row_to_photo(row))
                except (KeyError, TypeError, ValueError) as e:
                    logger.error(f"Skipping unreadable stored photo {row['id']}: {e}")
            return photos

    def get_photo(self, photo_id: str) -> Optional[PhotoRecord]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM photos WHERE id = ?", (photo_id,))
            row = cursor.fetchone()
            if row:
                return self._row_to_photo(row)
            return None

    def delete_photo(self, photo_id: str) -> bool:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM photos WHERE id = ?", (photo_id,))
            conn.commit()
            return cursor.rowcount > 0

    def clear_all_photos(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM photos")
            conn.commit()

    def save_state(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under ``key``."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO app_state (key, value) VALUES (?, ?)",
                (key, json.dumps(value)),
            )
            conn.commit()

    def load_state(self, key: str, default: Any = None) -> Any:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM app_state WHERE key = ?", (key,))
            row = cursor.fetchone()
            if row is None or row[0] is None:
                return default
            return json.loads(row[0])

    def clear_all_state(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM app_state")
            conn.commit()

    def get_stats(self) -> Dict[str, Any]:
        """Get database statistics."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            stats = {}
            cursor.execute("SELECT COUNT(*) FROM photos")
            stats["total_photos"] = cursor.fetchone()[0]

            cursor.execute("SELECT COUNT(*) FROM photos WHERE resolved_lat IS NOT NULL")
            stats["geotagged_photos"] = cursor.fetchone()[0]

            cursor.execute("SELECT MIN(resolved_timestamp), MAX(resolved_timestamp) FROM photos")
            first, last = cursor.fetchone()
            stats["first_timestamp"] = first
            stats["last_timestamp"] = last

            cursor.execute("SELECT COUNT(*) FROM app_state")
            stats["state_keys"] = cursor.fetchone()[0]

            return stats

    def _row_to_photo(self, row) -> PhotoRecord:
        """Convert database row to PhotoRecord."""
        return PhotoRecord.from_dict({
            "id": row["id"],
            "raw_tags": json.loads(row["raw_tags"]) if row["raw_tags"] else {},
            "fallback_timestamp": row["fallback_timestamp"],
            "file_name": row["file_name"],
            "path": row["path"],
        })
