"""Tests for the SQLite metadata store."""

import pytest

from photo_trail.trail.metadata_store import MetadataStore
from photo_trail.trail.models import PhotoRecord
from photo_trail.trail.route import build_route

from conftest import make_photo


@pytest.fixture
def store(tmp_path):
    """Create a store backed by a temporary database."""
    return MetadataStore(str(tmp_path / "trail.db"))


class TestPhotos:
    def test_round_trip_is_drift_free(self, store, trip_photos):
        store.save_all_photos(trip_photos)
        loaded = store.load_all_photos()

        assert [p.id for p in loaded] == [p.id for p in trip_photos]
        for original, restored in zip(trip_photos, loaded):
            assert restored.raw_tags == original.raw_tags
            assert restored.fallback_timestamp == original.fallback_timestamp
            assert restored.normalized == original.normalized
        assert build_route(loaded) == build_route(trip_photos)

    def test_save_all_replaces_collection(self, store, trip_photos):
        store.save_all_photos(trip_photos)
        store.save_all_photos(trip_photos[:2])
        assert [p.id for p in store.load_all_photos()] == ["c", "a"]

    def test_saving_empty_collection_clears(self, store, trip_photos):
        store.save_all_photos(trip_photos)
        assert store.save_all_photos([]) == 0
        assert store.load_all_photos() == []

    def test_save_photo_inserts_then_updates(self, store):
        store.save_photo(make_photo("p1", 1.0, 2.0, fallback=10))
        store.save_photo(make_photo("p1", 3.0, 4.0, fallback=20))

        photo = store.get_photo("p1")
        assert photo.fallback_timestamp == 20
        assert photo.normalized.coords.lat == 3.0
        assert len(store.load_all_photos()) == 1

    def test_get_missing_photo(self, store):
        assert store.get_photo("nope") is None

    def test_delete_photo(self, store, trip_photos):
        store.save_all_photos(trip_photos)
        assert store.delete_photo("a") is True
        assert store.delete_photo("a") is False
        assert "a" not in [p.id for p in store.load_all_photos()]

    def test_clear_all_photos(self, store, trip_photos):
        store.save_all_photos(trip_photos)
        store.clear_all_photos()
        assert store.load_all_photos() == []

    def test_unknown_tags_survive(self, store):
        photo = PhotoRecord(id="x", raw_tags={"LensModel": {"value": "RF 24-70", "description": "RF 24-70"}})
        store.save_photo(photo)
        assert store.get_photo("x").raw_tags["LensModel"].description == "RF 24-70"


class TestState:
    def test_state_round_trip(self, store):
        store.save_state("playback", {"status": "stopped", "cursor": 2})
        store.save_state("auto_zoom_enabled", False)
        assert store.load_state("playback") == {"status": "stopped", "cursor": 2}
        assert store.load_state("auto_zoom_enabled") is False

    def test_missing_key_returns_default(self, store):
        assert store.load_state("missing") is None
        assert store.load_state("missing", default=1) == 1

    def test_overwrite_and_clear(self, store):
        store.save_state("k", 1)
        store.save_state("k", 2)
        assert store.load_state("k") == 2
        store.clear_all_state()
        assert store.load_state("k") is None


def test_stats(store, trip_photos):
    store.save_all_photos(trip_photos)
    store.save_state("playback", {})
    stats = store.get_stats()

    assert stats["total_photos"] == 5
    assert stats["geotagged_photos"] == 4
    assert stats["first_timestamp"] <= stats["last_timestamp"]
    assert stats["state_keys"] == 1


def test_store_persists_across_instances(tmp_path, trip_photos):
    db_path = str(tmp_path / "shared.db")
    MetadataStore(db_path).save_all_photos(trip_photos)
    assert len(MetadataStore(db_path).load_all_photos()) == 5
