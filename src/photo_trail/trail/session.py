"""The photo collection and the playback that follows it."""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from photo_trail.trail.base import RouteRenderer, TickScheduler
from photo_trail.trail.capture_time import sort_by_time
from photo_trail.trail.config import DEFAULT_TICK_INTERVAL_MS
from photo_trail.trail.metadata_store import MetadataStore
from photo_trail.trail.models import MapViewport, PhotoRecord, Route
from photo_trail.trail.playback import RoutePlayback
from photo_trail.trail.route import build_route
from photo_trail.trail.viewport import compute_viewport

logger = logging.getLogger(__name__)

PLAYBACK_STATE_KEY = "playback"
AUTO_ZOOM_STATE_KEY = "auto_zoom_enabled"


class TrailSession:
    """Owns the working collection, its route and the route playback.

    Every change to the collection rebuilds the route and hands it to the
    playback, which stops itself when the route actually changed.
    """

    def __init__(
        self,
        store: Optional[MetadataStore] = None,
        renderer: Optional[RouteRenderer] = None,
        scheduler: Optional[TickScheduler] = None,
        tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        auto_zoom_enabled: bool = True,
        on_notice: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self._photos: List[PhotoRecord] = []
        self._route = Route()
        self.playback = RoutePlayback(
            route=self._route,
            renderer=renderer,
            scheduler=scheduler,
            tick_interval_ms=tick_interval_ms,
            auto_zoom_enabled=auto_zoom_enabled,
            on_notice=on_notice,
        )

    @property
    def photos(self) -> List[PhotoRecord]:
        """The collection, ordered by capture time."""
        return list(self._photos)

    @property
    def route(self) -> Route:
        return self._route

    @property
    def viewport(self) -> Optional[MapViewport]:
        """Viewport framing the whole route, or None when nothing is geotagged."""
        return compute_viewport(self._route.coordinates())

    def get_photo(self, photo_id: str) -> Optional[PhotoRecord]:
        for photo in self._photos:
            if photo.id == photo_id:
                return photo
        return None

    def add_photos(self, photos: Iterable[PhotoRecord]) -> int:
        """Add photos to the collection.

        Raises:
            ValueError: If a photo id is already in the collection or repeated in ``photos``
        """
        incoming = list(photos)
        known = {photo.id for photo in self._photos}
        for photo in incoming:
            if photo.id in known:
                raise ValueError(f"Duplicate photo id: {photo.id}")
            known.add(photo.id)

        if incoming:
            self._set_photos(self._photos + incoming)
            logger.info(f"Added {len(incoming)} photos ({len(self._photos)} total)")
        return len(incoming)

    def replace_photos(self, photos: Iterable[PhotoRecord]) -> int:
        """Replace the whole collection; later duplicates of an id are dropped."""
        unique: Dict[str, PhotoRecord] = {}
        for photo in photos:
            if photo.id in unique:
                logger.warning(f"Ignoring duplicate photo id {photo.id}")
                continue
            unique[photo.id] = photo
        self._set_photos(unique.values())
        return len(self._photos)

    def remove_photo(self, photo_id: str) -> bool:
        remaining = [photo for photo in self._photos if photo.id != photo_id]
        if len(remaining) == len(self._photos):
            return False
        self._set_photos(remaining)
        return True

    def clear(self) -> None:
        self._set_photos([])

    def save_snapshot(self) -> int:
        """Write the collection and playback settings to the store.

        Returns:
            Number of photos saved

        Raises:
            ValueError: If the session has no store
        """
        store = self._require_store()
        saved = store.save_all_photos(self._photos)
        store.save_state(PLAYBACK_STATE_KEY, self.playback.state.to_dict())
        store.save_state(AUTO_ZOOM_STATE_KEY, self.playback.auto_zoom_enabled)
        return saved

    def restore(self) -> int:
        """Load the collection and playback settings saved by ``save_snapshot``.

        Playback is never resumed; the saved cursor is restored as a stopped
        position when it still fits the rebuilt route.
        """
        store = self._require_store()
        self.playback.stop()
        count = self.replace_photos(store.load_all_photos())

        auto_zoom = store.load_state(AUTO_ZOOM_STATE_KEY)
        if auto_zoom is not None:
            self.playback.set_auto_zoom_enabled(bool(auto_zoom))

        saved = store.load_state(PLAYBACK_STATE_KEY)
        cursor = saved.get("cursor") if isinstance(saved, dict) else None
        if isinstance(cursor, int) and cursor > 0:
            self.playback.seek(cursor)

        logger.info(f"Restored {count} photos, {len(self._route)} waypoints")
        return count

    def _require_store(self) -> MetadataStore:
        if self.store is None:
            raise ValueError("No metadata store configured for this session")
        return self.store

    def _set_photos(self, photos: Iterable[PhotoRecord]) -> None:
        self._photos = sort_by_time(photos)
        self._route = build_route(self._photos)
        if self.playback.load_route(self._route):
            logger.debug(f"Route rebuilt: {len(self._route)} waypoints")
