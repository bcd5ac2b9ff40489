"""Tests for the car marker and marker renderer."""

import pytest

from photo_trail.trail.marker import CarMarker, MarkerRenderer, ease_in_out, glide_duration_ms
from photo_trail.trail.models import Coordinates, MapViewport


@pytest.mark.parametrize(
    "distance,duration",
    [(0.0, 200), (5.0, 400), (10.0, 600), (50.0, 600)],
)
def test_glide_duration(distance, duration):
    assert glide_duration_ms(distance) == pytest.approx(duration)


@pytest.mark.parametrize("progress,eased", [(0.0, 0.0), (0.25, 0.125), (0.5, 0.5), (0.75, 0.875), (1.0, 1.0)])
def test_ease_in_out(progress, eased):
    assert ease_in_out(progress) == pytest.approx(eased)


class TestCarMarker:
    start = Coordinates(37.5, 127.0)
    end = Coordinates(37.6, 127.2)

    def test_first_move_places_without_glide(self):
        marker = CarMarker()
        assert not marker.visible
        assert marker.move_to(self.start) is None
        assert marker.visible
        assert marker.position_at(100) == self.start

    def test_glide_between_positions(self):
        marker = CarMarker()
        marker.move_to(self.start)
        glide = marker.move_to(self.end)
        assert glide is not None
        assert glide.duration_ms == pytest.approx(600)  # ~20 km hop is capped
        assert marker.position_at(0) == self.start
        arrived = marker.position_at(glide.duration_ms)
        assert arrived.lat == pytest.approx(self.end.lat)
        assert arrived.lon == pytest.approx(self.end.lon)
        halfway = marker.position_at(glide.duration_ms / 2)
        assert halfway.lat == pytest.approx(37.55)
        assert halfway.lon == pytest.approx(127.1)

    def test_moving_to_same_spot_does_not_glide(self):
        marker = CarMarker()
        marker.move_to(self.start)
        assert marker.move_to(self.start) is None

    def test_reset_forgets_previous_position(self):
        marker = CarMarker()
        marker.move_to(self.start)
        marker.reset()
        assert not marker.visible
        assert marker.move_to(self.end) is None


class TestMarkerRenderer:
    def test_keeps_zoom_when_viewport_has_none(self):
        renderer = MarkerRenderer()
        renderer.set_view(MapViewport(center=Coordinates(1.0, 1.0), zoom=16))
        renderer.set_view(MapViewport(center=Coordinates(2.0, 2.0)))
        assert renderer.viewport == MapViewport(center=Coordinates(2.0, 2.0), zoom=16)

    def test_reset_marker_clears_trail(self):
        renderer = MarkerRenderer()
        renderer.move_marker(Coordinates(1.0, 1.0))
        renderer.move_marker(Coordinates(1.0, 1.1))
        assert len(renderer.trail) == 2
        renderer.reset_marker()
        assert renderer.trail == []
        assert renderer.marker.position is None
