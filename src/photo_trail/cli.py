"""CLI interface for photo-trail."""

import asyncio
import json
import logging
import sys
from typing import List

import click

from . import __version__

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="photo-trail")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug mode.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """photo-trail - replay the route behind a photo collection."""
    if ctx.obj is None:
        ctx.obj = {}

    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug

    if debug:
        logger.debug("Debug mode enabled")
    elif verbose:
        logger.info("Verbose mode enabled")


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Display system and package information."""
    import platform
    click.echo(f"photo-trail v{__version__}")
    click.echo(f"Python {platform.python_version()} on {platform.system()} {platform.release()}")
    click.echo(f"Platform: {platform.platform()}")

    if ctx.obj.get("verbose"):
        click.echo(f"Executable: {sys.executable}")


@cli.group()
def photos():
    """Scan photos and replay their route."""
    pass


def _load_session(ctx: click.Context, directory: str, recursive: bool, **session_kwargs):
    """Scan ``directory`` into a fresh TrailSession, exiting on a bad directory."""
    from photo_trail.trail.scanner import PhotoScanner
    from photo_trail.trail.session import TrailSession

    scanner = PhotoScanner(recursive=recursive)
    try:
        scanned = scanner.scan_directory(directory)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    session = TrailSession(**session_kwargs)
    session.replace_photos(scanned)
    stats = scanner.get_stats()
    if ctx.obj.get("verbose"):
        click.echo(
            f"Scanned {stats['scanned']} photos ({stats['geotagged']} geotagged, "
            f"{stats['skipped']} skipped, {stats['errors']} errors)"
        )
    return session


@photos.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--recursive/--no-recursive", default=True, help="Scan subdirectories recursively")
@click.option("--output-format", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.pass_context
def scan(ctx, directory, recursive, output_format):
    """Scan a directory and show normalized photo metadata."""
    from photo_trail.trail.capture_time import resolve_timestamp

    session = _load_session(ctx, directory, recursive)
    photos_list = session.photos

    if output_format == "json":
        records = []
        for photo in photos_list:
            record = {"id": photo.id, "file_name": photo.file_name, "timestamp": resolve_timestamp(photo)}
            record.update(photo.normalized.to_dict())
            records.append(record)
        click.echo(json.dumps(records, indent=2, ensure_ascii=False))
        return

    if not photos_list:
        click.echo("No photos found.")
        return

    click.echo(f"Found {len(photos_list)} photos:")
    for i, photo in enumerate(photos_list, 1):
        meta = photo.normalized
        click.echo(f"\n{i}. {photo.file_name or photo.id}")
        if meta.formatted_date:
            click.echo(f"   Date: {meta.formatted_date}")
        if meta.camera:
            click.echo(f"   Camera: {meta.camera}")
        if meta.exif_summary:
            click.echo(f"   Exposure: {meta.exif_summary}")
        click.echo(f"   GPS: {meta.gps_text or 'none'}")


@photos.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--recursive/--no-recursive", default=True, help="Scan subdirectories recursively")
@click.option("--output-format", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.pass_context
def route(ctx, directory, recursive, output_format):
    """Show the time-ordered route, grouped by day."""
    from photo_trail.trail.route import group_by_day

    session = _load_session(ctx, directory, recursive)
    trail = session.route
    days = group_by_day(trail)

    if output_format == "json":
        payload = trail.to_dict()
        payload["days"] = days
        click.echo(json.dumps(payload, indent=2))
        return

    if trail.is_empty:
        click.echo("No photos with GPS information.")
        return

    click.echo(f"Route: {len(trail)} waypoints over {len(days)} day(s)")
    for day, indices in days.items():
        click.echo(f"\n{day}")
        for index in indices:
            wp = trail[index]
            click.echo(f"  {index + 1:>3}. {wp.coords.lat:.6f}, {wp.coords.lon:.6f}  ({wp.photo_id[:8]})")


@photos.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--recursive/--no-recursive", default=True, help="Scan subdirectories recursively")
@click.pass_context
def viewport(ctx, directory, recursive):
    """Show the map viewport that frames the whole route."""
    session = _load_session(ctx, directory, recursive)
    view = session.viewport
    if view is None:
        click.echo("No photos with GPS information.")
        return
    click.echo(f"Center: {view.center.lat:.6f}, {view.center.lon:.6f}")
    click.echo(f"Zoom: {view.zoom}")


@photos.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--recursive/--no-recursive", default=True, help="Scan subdirectories recursively")
@click.option("--interval-ms", default=1000, type=click.IntRange(min=1), help="Milliseconds between waypoints")
@click.option("--auto-zoom/--no-auto-zoom", default=True, help="Zoom by distance to the next waypoint")
@click.option("--fast", is_flag=True, help="Advance without waiting between waypoints")
@click.pass_context
def play(ctx, directory, recursive, interval_ms, auto_zoom, fast):
    """Replay the route, printing each step."""
    from photo_trail.trail.marker import MarkerRenderer
    from photo_trail.trail.models import MapViewport
    from photo_trail.trail.playback import AsyncioTickScheduler, ManualTickScheduler

    steps: List[str] = []

    class EchoRenderer(MarkerRenderer):
        def set_view(self, viewport: MapViewport) -> None:
            super().set_view(viewport)
            position = self.marker.position
            line = f"[{len(self.trail)}] {position.lat:.6f}, {position.lon:.6f}  zoom {self.viewport.zoom}"
            steps.append(line)
            click.echo(line)

    scheduler = ManualTickScheduler() if fast else AsyncioTickScheduler()
    session = _load_session(
        ctx,
        directory,
        recursive,
        renderer=EchoRenderer(),
        scheduler=scheduler,
        tick_interval_ms=interval_ms,
        auto_zoom_enabled=auto_zoom,
        on_notice=lambda message: click.echo(message),
    )
    playback = session.playback

    if fast:
        if playback.start():
            scheduler.run_until_idle()
    else:
        async def run_playback():
            if playback.start():
                await playback.wait_until_idle()

        try:
            asyncio.run(run_playback())
        except KeyboardInterrupt:
            playback.stop()
            click.echo("Playback stopped")
            return

    if steps:
        click.echo(f"Playback {playback.status.value}: {len(steps)} of {len(session.route)} waypoints shown")


@photos.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--recursive/--no-recursive", default=True, help="Scan subdirectories recursively")
@click.option("--db-path", default="photo_trail.db", help="Database file path")
@click.pass_context
def save(ctx, directory, recursive, db_path):
    """Scan a directory and save the collection to the database."""
    from photo_trail.trail.metadata_store import MetadataStore

    store = MetadataStore(db_path)
    session = _load_session(ctx, directory, recursive, store=store)
    saved = session.save_snapshot()
    click.echo(f"Saved {saved} photos ({len(session.route)} waypoints) to {db_path}")


@photos.command()
@click.option("--db-path", default="photo_trail.db", help="Database file path")
@click.pass_context
def stats(ctx, db_path):
    """Show photo database statistics."""
    from photo_trail.trail.metadata_store import MetadataStore
    from photo_trail.trail.route import day_key

    store = MetadataStore(db_path)
    db_stats = store.get_stats()

    click.echo("Photo Database Statistics:")
    click.echo(f"  Database file: {db_path}")
    click.echo(f"  Total photos: {db_stats.get('total_photos', 0)}")
    click.echo(f"  Geotagged photos: {db_stats.get('geotagged_photos', 0)}")

    if ctx.obj.get("verbose") and db_stats.get("first_timestamp"):
        click.echo(f"  First day: {day_key(db_stats['first_timestamp'])}")
        click.echo(f"  Last day: {day_key(db_stats['last_timestamp'])}")


@photos.command()
@click.argument("lat", type=float)
@click.argument("lon", type=float)
@click.option("--provider", default="nominatim", help="Geocoder provider (nominatim or mock)")
@click.option("--user-agent", default=None, help="User-Agent sent to the geocoder")
@click.pass_context
def geocode(ctx, lat, lon, provider, user_agent):
    """Look up the address of a coordinate."""
    from photo_trail.trail.factory import create_geocoder
    from photo_trail.trail.models import Coordinates

    try:
        geocoder = create_geocoder(provider, user_agent=user_agent)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    address = geocoder.reverse(Coordinates(lat=lat, lon=lon))
    click.echo(address or "Address unavailable")


def main() -> None:
    """Entry point for the CLI."""
    try:
        cli(obj={})
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
