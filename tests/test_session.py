"""Tests for the trail session."""

import pytest

from photo_trail.trail.config import PlaybackStatus
from photo_trail.trail.metadata_store import MetadataStore
from photo_trail.trail.playback import ManualTickScheduler
from photo_trail.trail.session import TrailSession

from conftest import make_photo


@pytest.fixture
def scheduler():
    return ManualTickScheduler()


@pytest.fixture
def session(tmp_path, scheduler):
    return TrailSession(store=MetadataStore(str(tmp_path / "session.db")), scheduler=scheduler)


class TestCollection:
    def test_add_sorts_and_builds_route(self, session, trip_photos):
        assert session.add_photos(trip_photos) == 5
        assert [p.id for p in session.photos] == ["a", "nogps", "b", "c", "d"]
        assert [wp.photo_id for wp in session.route] == ["a", "b", "c", "d"]
        assert session.playback.route is session.route

    def test_duplicate_id_is_rejected(self, session, trip_photos):
        session.add_photos(trip_photos)
        with pytest.raises(ValueError, match="Duplicate photo id"):
            session.add_photos([make_photo("a", 1.0, 1.0)])
        assert len(session.photos) == 5

    def test_duplicate_within_batch_is_rejected(self, session):
        with pytest.raises(ValueError):
            session.add_photos([make_photo("x"), make_photo("x")])
        assert session.photos == []

    def test_remove_photo(self, session, trip_photos):
        session.add_photos(trip_photos)
        assert session.remove_photo("b") is True
        assert session.remove_photo("b") is False
        assert [wp.photo_id for wp in session.route] == ["a", "c", "d"]

    def test_clear(self, session, trip_photos):
        session.add_photos(trip_photos)
        session.clear()
        assert session.photos == []
        assert session.route.is_empty
        assert session.viewport is None

    def test_replace_drops_repeated_ids(self, session):
        count = session.replace_photos([make_photo("x", fallback=1), make_photo("x", fallback=2)])
        assert count == 1
        assert session.get_photo("x").fallback_timestamp == 1

    def test_viewport_frames_route(self, session, trip_photos):
        session.add_photos(trip_photos)
        viewport = session.viewport
        assert viewport.center.lat == pytest.approx((37.5665 + 37.58) / 2)
        assert viewport.zoom == 13


class TestPlaybackWiring:
    def test_mutation_during_playback_stops_it(self, session, scheduler, trip_photos):
        session.add_photos(trip_photos)
        session.playback.start()
        scheduler.fire_next()
        assert session.playback.cursor == 1

        session.add_photos([make_photo("e", 37.59, 127.0, taken="2023:05:03 10:00:00")])
        assert session.playback.status == PlaybackStatus.STOPPED
        assert session.playback.cursor == 0
        assert scheduler.pending_count == 0

    def test_adding_untagged_photo_keeps_playing(self, session, scheduler, trip_photos):
        session.add_photos(trip_photos)
        session.playback.start()
        session.add_photos([make_photo("plain", fallback=1)])
        assert session.playback.is_playing

    def test_start_on_empty_session(self):
        notices = []
        session = TrailSession(scheduler=ManualTickScheduler(), on_notice=notices.append)
        assert session.playback.start() is False
        assert len(notices) == 1


class TestSnapshot:
    def test_save_and_restore(self, tmp_path, session, trip_photos):
        session.add_photos(trip_photos)
        session.playback.set_auto_zoom_enabled(False)
        session.playback.seek(2)
        assert session.save_snapshot() == 5

        restored = TrailSession(store=MetadataStore(str(tmp_path / "session.db")), scheduler=ManualTickScheduler())
        assert restored.restore() == 5
        assert restored.route == session.route
        assert [p.normalized for p in restored.photos] == [p.normalized for p in session.photos]
        assert restored.playback.auto_zoom_enabled is False
        assert restored.playback.cursor == 2
        assert restored.playback.status == PlaybackStatus.STOPPED

    def test_restore_never_resumes_playing(self, session, trip_photos):
        session.add_photos(trip_photos)
        session.playback.start()
        session.save_snapshot()

        restored = TrailSession(store=session.store, scheduler=ManualTickScheduler())
        restored.restore()
        assert restored.playback.status == PlaybackStatus.STOPPED

    def test_restore_from_empty_store(self, session):
        assert session.restore() == 0
        assert session.route.is_empty

    def test_without_store(self):
        session = TrailSession(scheduler=ManualTickScheduler())
        with pytest.raises(ValueError, match="No metadata store"):
            session.save_snapshot()
        with pytest.raises(ValueError):
            session.restore()

    def test_restore_ignores_malformed_playback_state(self, session, trip_photos):
        session.add_photos(trip_photos)
        session.save_snapshot()
        session.store.save_state("playback", [3])

        restored = TrailSession(store=session.store, scheduler=ManualTickScheduler())
        assert restored.restore() == 5
        assert restored.playback.cursor == 0
        assert restored.playback.status == PlaybackStatus.STOPPED
