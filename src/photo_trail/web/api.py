"""FastAPI control surface for photo-trail."""

import asyncio
import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from photo_trail import __version__
from photo_trail.trail.base import ReverseGeocoder
from photo_trail.trail.capture_time import resolve_timestamp
from photo_trail.trail.config import EMPTY_ROUTE_NOTICE
from photo_trail.trail.factory import create_geocoder
from photo_trail.trail.marker import MarkerRenderer
from photo_trail.trail.metadata_store import MetadataStore
from photo_trail.trail.models import Coordinates, MapViewport, PhotoRecord, Waypoint
from photo_trail.trail.playback import AsyncioTickScheduler
from photo_trail.trail.route import group_by_day
from photo_trail.trail.scanner import PhotoScanner
from photo_trail.trail.session import TrailSession

from .config import WebConfig, get_default_config

logger = logging.getLogger(__name__)

app = FastAPI(
    title="photo-trail API",
    description="Replay the route behind a photo collection",
    version=__version__,
)

# Enable CORS for a separately served map frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global state
config: WebConfig = get_default_config()
executor = ThreadPoolExecutor(max_workers=2)
_session: Optional[TrailSession] = None
_geocoder: Optional[ReverseGeocoder] = None


async def get_session() -> TrailSession:
    """Session shared by all requests, restored from the database on first use.

    Runs on the event loop so concurrent first requests cannot build two sessions.
    """
    global _session
    if _session is None:
        session = TrailSession(
            store=MetadataStore(config.db_path),
            renderer=MarkerRenderer(),
            scheduler=AsyncioTickScheduler(),
            tick_interval_ms=config.tick_interval_ms,
            auto_zoom_enabled=config.auto_zoom_enabled,
        )
        try:
            session.restore()
        except sqlite3.Error as e:
            logger.warning(f"Could not restore saved session from {config.db_path}: {e}")
        _session = session
    return _session


def get_geocoder() -> ReverseGeocoder:
    global _geocoder
    if _geocoder is None:
        _geocoder = create_geocoder(config.geocoder, user_agent=config.user_agent, language=config.language)
    return _geocoder


# Pydantic models for request/response


class ScanRequest(BaseModel):
    directory: str = Field(..., description="Directory to scan")
    recursive: Optional[bool] = Field(None, description="Scan subdirectories (default from config)")
    replace: bool = Field(True, description="Replace the current collection instead of adding to it")


class ScanResponse(BaseModel):
    directory: str
    scanned: int
    skipped: int
    errors: int
    geotagged: int
    total_photos: int
    route_length: int


class CoordinatesModel(BaseModel):
    lat: float
    lon: float


class ViewportResponse(BaseModel):
    center: CoordinatesModel
    zoom: Optional[int] = None


class PhotoResult(BaseModel):
    id: str
    file_name: Optional[str] = None
    path: Optional[str] = None
    timestamp: int
    camera: Optional[str] = None
    exif_summary: Optional[str] = None
    formatted_date: Optional[str] = None
    coords: Optional[CoordinatesModel] = None
    gps_text: Optional[str] = None


class WaypointModel(BaseModel):
    photo_id: str
    lat: float
    lon: float
    timestamp: int


class RouteResponse(BaseModel):
    key: str
    waypoints: List[WaypointModel]
    days: Dict[str, List[int]]
    viewport: Optional[ViewportResponse] = None


class PlaybackResponse(BaseModel):
    status: str
    is_playing: bool
    cursor: int
    tick_interval_ms: int
    auto_zoom_enabled: bool
    route_length: int
    current: Optional[WaypointModel] = None
    marker: Optional[CoordinatesModel] = None
    viewport: Optional[ViewportResponse] = None
    notice: Optional[str] = None


class SeekRequest(BaseModel):
    index: int = Field(..., ge=0, description="Waypoint index to jump to")


class AutoZoomRequest(BaseModel):
    enabled: bool = Field(..., description="Follow waypoints with gap-based zoom")


class SnapshotResponse(BaseModel):
    saved: int
    database_path: Optional[str] = None


class GeocodeResponse(BaseModel):
    lat: float
    lon: float
    address: Optional[str] = None
    provider: str


def _coords_model(coords: Optional[Coordinates]) -> Optional[CoordinatesModel]:
    if coords is None:
        return None
    return CoordinatesModel(lat=coords.lat, lon=coords.lon)


def _viewport_model(viewport: Optional[MapViewport]) -> Optional[ViewportResponse]:
    if viewport is None:
        return None
    return ViewportResponse(center=_coords_model(viewport.center), zoom=viewport.zoom)


def _waypoint_model(waypoint: Optional[Waypoint]) -> Optional[WaypointModel]:
    if waypoint is None:
        return None
    return WaypointModel(
        photo_id=waypoint.photo_id,
        lat=waypoint.coords.lat,
        lon=waypoint.coords.lon,
        timestamp=waypoint.timestamp,
    )


def _photo_result(photo: PhotoRecord) -> PhotoResult:
    meta = photo.normalized
    return PhotoResult(
        id=photo.id,
        file_name=photo.file_name,
        path=photo.path,
        timestamp=resolve_timestamp(photo),
        camera=meta.camera,
        exif_summary=meta.exif_summary,
        formatted_date=meta.formatted_date,
        coords=_coords_model(meta.coords),
        gps_text=meta.gps_text,
    )


def _playback_response(session: TrailSession, notice: Optional[str] = None) -> PlaybackResponse:
    playback = session.playback
    state = playback.state
    marker = None
    viewport = None
    renderer = playback.renderer
    if isinstance(renderer, MarkerRenderer):
        marker = _coords_model(renderer.marker.position)
        viewport = _viewport_model(renderer.viewport)
    return PlaybackResponse(
        status=state.status,
        is_playing=state.is_playing,
        cursor=state.cursor,
        tick_interval_ms=state.tick_interval_ms,
        auto_zoom_enabled=state.auto_zoom_enabled,
        route_length=state.route_length,
        current=_waypoint_model(playback.current_waypoint),
        marker=marker,
        viewport=viewport,
        notice=notice,
    )


def _scan_directory(directory: str, recursive: bool) -> Tuple[List[PhotoRecord], Dict[str, int]]:
    scanner = PhotoScanner(recursive=recursive)
    photos = scanner.scan_directory(directory)
    return photos, scanner.get_stats()


@app.post("/api/scan", response_model=ScanResponse)
async def scan_directory(request: ScanRequest, session: TrailSession = Depends(get_session)):
    """Scan a directory and load its photos into the session."""
    directory_path = Path(request.directory)
    if not directory_path.exists() or not directory_path.is_dir():
        raise HTTPException(status_code=400, detail="The specified directory does not exist or is not accessible. Please check the path and permissions.")

    recursive = config.recursive if request.recursive is None else request.recursive
    loop = asyncio.get_running_loop()
    photos, stats = await loop.run_in_executor(executor, _scan_directory, str(directory_path), recursive)

    if request.replace:
        session.replace_photos(photos)
    else:
        known = {photo.id for photo in session.photos}
        session.add_photos([photo for photo in photos if photo.id not in known])

    logger.info(f"Loaded {len(photos)} photos from {directory_path}")
    return ScanResponse(
        directory=str(directory_path),
        scanned=stats["scanned"],
        skipped=stats["skipped"],
        errors=stats["errors"],
        geotagged=stats["geotagged"],
        total_photos=len(session.photos),
        route_length=len(session.route),
    )


@app.get("/api/photos", response_model=List[PhotoResult])
async def list_photos(session: TrailSession = Depends(get_session)):
    """Photos in the collection, ordered by capture time."""
    return [_photo_result(photo) for photo in session.photos]


@app.get("/api/photos/{photo_id}", response_model=PhotoResult)
async def get_photo(photo_id: str, session: TrailSession = Depends(get_session)):
    photo = session.get_photo(photo_id)
    if photo is None:
        raise HTTPException(status_code=404, detail="Photo not found.")
    return _photo_result(photo)


@app.delete("/api/photos/{photo_id}")
async def delete_photo(photo_id: str, session: TrailSession = Depends(get_session)):
    if not session.remove_photo(photo_id):
        raise HTTPException(status_code=404, detail="Photo not found.")
    return {"deleted": photo_id, "route_length": len(session.route)}


@app.get("/api/route", response_model=RouteResponse)
async def get_route(session: TrailSession = Depends(get_session)):
    """The time-ordered route with waypoint indices grouped by day."""
    route = session.route
    return RouteResponse(
        key=route.key,
        waypoints=[_waypoint_model(wp) for wp in route],
        days=group_by_day(route),
        viewport=_viewport_model(session.viewport),
    )


@app.get("/api/viewport", response_model=Optional[ViewportResponse])
async def get_viewport(session: TrailSession = Depends(get_session)):
    """Viewport framing the whole route; null when no photo is geotagged."""
    return _viewport_model(session.viewport)


@app.get("/api/playback", response_model=PlaybackResponse)
async def get_playback(session: TrailSession = Depends(get_session)):
    return _playback_response(session)


@app.post("/api/playback/start", response_model=PlaybackResponse)
async def start_playback(session: TrailSession = Depends(get_session)):
    """Start playback. An empty route answers with a notice instead of an error."""
    notice = None
    if not session.playback.start() and session.route.is_empty:
        notice = EMPTY_ROUTE_NOTICE
    return _playback_response(session, notice)


@app.post("/api/playback/stop", response_model=PlaybackResponse)
async def stop_playback(session: TrailSession = Depends(get_session)):
    session.playback.stop()
    return _playback_response(session)


@app.post("/api/playback/toggle", response_model=PlaybackResponse)
async def toggle_playback(session: TrailSession = Depends(get_session)):
    """Play/stop button."""
    was_playing = session.playback.is_playing
    notice = None
    if not session.playback.toggle() and not was_playing and session.route.is_empty:
        notice = EMPTY_ROUTE_NOTICE
    return _playback_response(session, notice)


@app.post("/api/playback/seek", response_model=PlaybackResponse)
async def seek_playback(request: SeekRequest, session: TrailSession = Depends(get_session)):
    if not session.playback.seek(request.index):
        raise HTTPException(status_code=400, detail=f"Waypoint index {request.index} is outside the route (length {len(session.route)}).")
    return _playback_response(session)


@app.post("/api/playback/auto-zoom", response_model=PlaybackResponse)
async def set_auto_zoom(request: AutoZoomRequest, session: TrailSession = Depends(get_session)):
    """Turn auto-zoom on or off; recentring continues either way."""
    session.playback.set_auto_zoom_enabled(request.enabled)
    return _playback_response(session)


@app.post("/api/snapshot", response_model=SnapshotResponse)
async def save_snapshot(session: TrailSession = Depends(get_session)):
    """Save the collection and playback settings to the database."""
    try:
        saved = session.save_snapshot()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except sqlite3.Error as e:
        logger.error(f"Snapshot failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save the snapshot. Please ensure the database is properly configured.")
    return SnapshotResponse(saved=saved, database_path=session.store.db_path if session.store else None)


@app.post("/api/snapshot/restore", response_model=PlaybackResponse)
async def restore_snapshot(session: TrailSession = Depends(get_session)):
    """Reload the last saved snapshot. Playback is left stopped."""
    try:
        session.restore()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _playback_response(session)


@app.get("/api/geocode", response_model=GeocodeResponse)
def reverse_geocode(lat: float, lon: float, geocoder: ReverseGeocoder = Depends(get_geocoder)):
    """Best-effort address for a coordinate; ``address`` is null when the lookup fails."""
    coords = Coordinates(lat=lat, lon=lon)
    if not coords.in_range():
        raise HTTPException(status_code=400, detail="Latitude must be within [-90, 90] and longitude within [-180, 180].")
    return GeocodeResponse(lat=lat, lon=lon, address=geocoder.reverse(coords), provider=geocoder.provider)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now()}
