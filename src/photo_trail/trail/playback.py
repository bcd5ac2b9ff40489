"""Route playback state machine and tick schedulers."""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from photo_trail.trail.base import NullRenderer, RouteRenderer, TickScheduler
from photo_trail.trail.config import DEFAULT_TICK_INTERVAL_MS, EMPTY_ROUTE_NOTICE, PlaybackStatus
from photo_trail.trail.models import PlaybackState, Route, Waypoint
from photo_trail.trail.viewport import follow_viewport

logger = logging.getLogger(__name__)


class AsyncioTickScheduler(TickScheduler):
    """Schedules ticks on an asyncio event loop with ``call_later``."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class ManualTickScheduler(TickScheduler):
    """Keeps scheduled callbacks until they are fired explicitly."""

    def __init__(self):
        self._pending: Dict[int, Callable[[], None]] = {}
        self._next_handle = 0
        self.fired = 0

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def fire_next(self) -> bool:
        """Run the oldest pending callback. Returns False if nothing was pending."""
        if not self._pending:
            return False
        handle = min(self._pending)
        callback = self._pending.pop(handle)
        self.fired += 1
        callback()
        return True

    def run_until_idle(self, max_steps: int = 100000) -> int:
        steps = 0
        while steps < max_steps and self.fire_next():
            steps += 1
        return steps


class RoutePlayback:
    """Advances a cursor through a route on a fixed cadence.

    States are stopped, playing and finished. Only the tick advances the
    cursor (``seek`` jumps directly). Each tick carries the version of the
    route it was scheduled for, so a tick that fires after the route was
    swapped does nothing.
    """

    def __init__(
        self,
        route: Optional[Route] = None,
        renderer: Optional[RouteRenderer] = None,
        scheduler: Optional[TickScheduler] = None,
        tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        auto_zoom_enabled: bool = True,
        on_notice: Optional[Callable[[str], None]] = None,
    ):
        self._route = route if route is not None else Route()
        self._renderer = renderer or NullRenderer()
        self._scheduler = scheduler or AsyncioTickScheduler()
        self.tick_interval_ms = tick_interval_ms
        self._auto_zoom_enabled = auto_zoom_enabled
        self._on_notice = on_notice
        self._status = PlaybackStatus.STOPPED
        self._cursor = 0
        self._route_version = 0
        self._pending: Any = None
        self._waiters: List[asyncio.Future] = []

    # State

    @property
    def route(self) -> Route:
        return self._route

    @property
    def route_version(self) -> int:
        return self._route_version

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def is_playing(self) -> bool:
        return self._status == PlaybackStatus.PLAYING

    @property
    def auto_zoom_enabled(self) -> bool:
        return self._auto_zoom_enabled

    @property
    def renderer(self) -> RouteRenderer:
        return self._renderer

    @property
    def current_waypoint(self) -> Optional[Waypoint]:
        if self._route.is_empty:
            return None
        return self._route[self._cursor]

    @property
    def progress(self) -> float:
        """Fraction of the route reached, counting the current waypoint."""
        if self._route.is_empty:
            return 0.0
        return (self._cursor + 1) / len(self._route)

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            status=self._status.value,
            cursor=self._cursor,
            tick_interval_ms=self.tick_interval_ms,
            auto_zoom_enabled=self._auto_zoom_enabled,
            route_length=len(self._route),
        )

    # Controls

    def start(self) -> bool:
        """Start playback from the first waypoint.

        Returns:
            True if playback started; False when already playing or when the
            route is empty (a notice is emitted in that case)
        """
        if self._status == PlaybackStatus.PLAYING:
            logger.debug("start() ignored: already playing")
            return False
        if self._route.is_empty:
            self._notify(EMPTY_ROUTE_NOTICE)
            return False

        self._cancel_pending()
        self._renderer.reset_marker()
        self._cursor = 0
        self._status = PlaybackStatus.PLAYING
        logger.info(f"Playback started over {len(self._route)} waypoints")
        self._show_current()
        if self._cursor >= len(self._route) - 1:
            self._finish()
        else:
            self._arm()
        return True

    def stop(self) -> None:
        """Stop playback and rewind to the first waypoint."""
        if self._status != PlaybackStatus.STOPPED:
            logger.info(f"Playback stopped at {self._cursor + 1}/{len(self._route)}")
        self.reset()

    def reset(self) -> None:
        """Cancel any pending tick, rewind the cursor and clear the marker."""
        self._cancel_pending()
        self._status = PlaybackStatus.STOPPED
        self._cursor = 0
        self._renderer.reset_marker()
        self._settle_waiters()

    def toggle(self) -> bool:
        """Play/stop button: stops while playing, starts otherwise."""
        if self._status == PlaybackStatus.PLAYING:
            self.stop()
            return False
        return self.start()

    def tick(self) -> bool:
        """Advance one waypoint now. Returns True if the cursor moved."""
        return self._advance(self._route_version)

    def seek(self, index: int) -> bool:
        """Jump to ``index`` without starting or stopping playback."""
        if self._route.is_empty or not 0 <= index < len(self._route):
            logger.debug(f"seek({index}) ignored for route of {len(self._route)}")
            return False
        self._cursor = index
        self._show_current()
        return True

    def set_auto_zoom_enabled(self, enabled: bool) -> None:
        self._auto_zoom_enabled = bool(enabled)

    def disable_auto_zoom(self) -> None:
        """Hook for a zoom-out gesture on the map; auto-zoom stays off until re-enabled."""
        if self._auto_zoom_enabled:
            logger.info("Auto-zoom disabled by zoom-out gesture")
        self._auto_zoom_enabled = False

    def load_route(self, route: Route) -> bool:
        """Swap in a rebuilt route.

        Returns:
            True if the route identity changed. A changed route stops playback
            and invalidates ticks already scheduled for the old one.
        """
        if route.key == self._route.key:
            self._route = route
            return False
        self._route_version += 1
        if self._status != PlaybackStatus.STOPPED:
            logger.info("Route changed during playback; stopping")
        # The marker of the old route must not outlive it, even when stopped
        self.stop()
        self._route = route
        return True

    async def wait_until_idle(self) -> PlaybackStatus:
        """Wait until playback is no longer playing and return the final status."""
        if self._status != PlaybackStatus.PLAYING:
            return self._status
        future = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        return await future

    # Internals

    def _advance(self, version: int) -> bool:
        if version != self._route_version:
            logger.debug("Discarding tick scheduled for a previous route")
            return False
        if self._status != PlaybackStatus.PLAYING or self._route.is_empty:
            return False

        self._cancel_pending()
        last = len(self._route) - 1
        advanced = False
        if self._cursor < last:
            self._cursor += 1
            advanced = True
            self._show_current()
        if self._cursor >= last:
            self._finish()
        else:
            self._arm()
        return advanced

    def _on_timer(self, version: int) -> None:
        if version == self._route_version:
            self._pending = None
        self._advance(version)

    def _arm(self) -> None:
        version = self._route_version
        self._pending = self._scheduler.schedule(self.tick_interval_ms, lambda: self._on_timer(version))

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._scheduler.cancel(self._pending)
            self._pending = None

    def _finish(self) -> None:
        self._cancel_pending()
        self._status = PlaybackStatus.FINISHED
        logger.info(f"Playback finished at waypoint {self._cursor + 1}/{len(self._route)}")
        self._settle_waiters()

    def _show_current(self) -> None:
        waypoint = self._route[self._cursor]
        next_coords = None
        if self._cursor < len(self._route) - 1:
            next_coords = self._route[self._cursor + 1].coords
        self._renderer.move_marker(waypoint.coords)
        if self._status == PlaybackStatus.PLAYING:
            self._renderer.set_view(follow_viewport(waypoint.coords, next_coords, self._auto_zoom_enabled))
        else:
            self._renderer.set_view(follow_viewport(waypoint.coords, None, False))

    def _settle_waiters(self) -> None:
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(self._status)

    def _notify(self, message: str) -> None:
        logger.warning(message)
        if self._on_notice is not None:
            self._on_notice(message)
