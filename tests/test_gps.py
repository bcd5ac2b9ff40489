"""Tests for GPS coordinate resolution."""

import pytest

from photo_trail.trail.gps import first_number, number_tokens, resolve
from photo_trail.trail.models import Coordinates, RawTagBag


def bag(**tags):
    return RawTagBag(tags)


class TestStructuredValues:
    """Clean DMS arrays and decimal values."""

    def test_north_east_dms(self):
        """Test the Seoul-area DMS example."""
        tags = bag(
            GPSLatitude={"value": [37, 30, 0]},
            GPSLatitudeRef={"value": ["N"]},
            GPSLongitude={"value": [127, 0, 0]},
            GPSLongitudeRef={"value": ["E"]},
        )
        assert resolve(tags) == Coordinates(lat=37.5, lon=127.0)

    def test_south_ref_negates_latitude(self):
        tags = bag(
            GPSLatitudeRef={"value": ["S"]},
            GPSLatitude={"value": [10, 0, 0]},
            GPSLongitudeRef={"value": ["E"]},
            GPSLongitude={"value": [20, 0, 0]},
        )
        assert resolve(tags) == Coordinates(lat=-10.0, lon=20.0)

    @pytest.mark.parametrize(
        "dms,lat_ref,lon_ref",
        [
            ((37, 33, 59.4), "N", "E"),
            ((0, 0, 0), "S", "W"),
            ((89, 59, 59.999), "S", "E"),
            ((12, 1, 30), "N", "W"),
            ((45.5, 0, 0), "N", "E"),
        ],
    )
    def test_dms_sign_follows_ref(self, dms, lat_ref, lon_ref):
        d, m, s = dms
        expected = d + m / 60 + s / 3600
        tags = bag(
            GPSLatitude={"value": list(dms)},
            GPSLatitudeRef={"value": [lat_ref]},
            GPSLongitude={"value": list(dms)},
            GPSLongitudeRef={"value": [lon_ref]},
        )
        coords = resolve(tags)
        assert coords is not None
        assert coords.lat == pytest.approx(-expected if lat_ref == "S" else expected, abs=1e-9)
        assert coords.lon == pytest.approx(-expected if lon_ref == "W" else expected, abs=1e-9)

    def test_missing_ref_defaults_to_north_east(self):
        tags = bag(GPSLatitude={"value": [1, 30, 0]}, GPSLongitude={"value": [2, 15, 0]})
        assert resolve(tags) == Coordinates(lat=1.5, lon=2.25)

    def test_rational_components(self):
        tags = bag(
            GPSLatitude={"value": [[37, 1], [30, 1], [0, 1]]},
            GPSLatitudeRef={"value": ["N"]},
            GPSLongitude={"value": [[127, 1], [90, 2], [0, 1]]},
            GPSLongitudeRef={"value": ["W"]},
        )
        coords = resolve(tags)
        assert coords.lat == pytest.approx(37.5)
        assert coords.lon == pytest.approx(-127.75)

    def test_single_element_decimal(self):
        tags = bag(
            GPSLatitude={"value": [33.25]},
            GPSLatitudeRef={"value": ["S"]},
            GPSLongitude={"value": [151.2]},
            GPSLongitudeRef={"value": ["E"]},
        )
        assert resolve(tags) == Coordinates(lat=-33.25, lon=151.2)

    def test_scalar_values(self):
        tags = bag(
            GPSLatitude={"value": 48.85},
            GPSLatitudeRef={"value": "N"},
            GPSLongitude={"value": "2.35"},
            GPSLongitudeRef={"value": ["W"]},
        )
        assert resolve(tags) == Coordinates(lat=48.85, lon=-2.35)

    def test_zero_is_a_valid_coordinate(self):
        tags = bag(
            GPSLatitude={"value": [0, 0, 0]},
            GPSLongitude={"value": [0, 0, 0]},
        )
        assert resolve(tags) == Coordinates(lat=0.0, lon=0.0)


class TestDescriptionFallbacks:
    """Tags whose structured value is missing or unusable."""

    def test_per_axis_description(self):
        tags = bag(
            GPSLatitude={"value": None, "description": "37.5 south"},
            GPSLongitude={"value": None, "description": "127.25"},
        )
        assert resolve(tags) == Coordinates(lat=-37.5, lon=127.25)

    def test_description_uses_ref_letter(self):
        tags = bag(
            GPSLatitude={"value": "n/a", "description": "about 12.5 degrees"},
            GPSLatitudeRef={"value": ["S"], "description": "South latitude"},
            GPSLongitude={"value": None, "description": "77.1"},
            GPSLongitudeRef={"description": "West longitude"},
        )
        assert resolve(tags) == Coordinates(lat=-12.5, lon=-77.1)

    def test_structured_axis_is_not_overwritten(self):
        tags = bag(
            GPSLatitude={"value": [10, 0, 0], "description": "99.9"},
            GPSLongitude={"value": None, "description": "20.5"},
        )
        assert resolve(tags) == Coordinates(lat=10.0, lon=20.5)

    def test_combined_descriptions(self):
        """Both axes written into the latitude description."""
        tags = bag(
            GPSLatitude={"value": None, "description": "37.5665, 126.978"},
            GPSLongitude={"value": None, "description": ""},
        )
        assert resolve(tags) == Coordinates(lat=37.5665, lon=126.978)

    def test_zero_denominator_falls_back_to_description(self):
        tags = bag(
            GPSLatitude={"value": [[37, 0], [0, 1], [0, 1]], "description": "37.1"},
            GPSLongitude={"value": [127, 0, 0]},
        )
        assert resolve(tags) == Coordinates(lat=37.1, lon=127.0)


class TestUnresolvable:
    """Bags that must resolve to None without raising."""

    @pytest.mark.parametrize(
        "tags",
        [
            {},
            {"Make": {"value": "Canon", "description": "Canon"}},
            {"GPSLatitude": {"value": [37, 30, 0]}},
            {"GPSLongitude": {"value": [127, 0, 0]}, "GPSLongitudeRef": {"value": ["E"]}},
            {"GPSLatitude": {"value": ["a", "b", "c"]}, "GPSLongitude": {"value": [1, 2, 3]}},
            {"GPSLatitude": {"value": [float("inf")]}, "GPSLongitude": {"value": [1.0]}},
            {"GPSLatitude": {"value": {"odd": 1}}, "GPSLongitude": {"value": []}},
        ],
    )
    def test_returns_none(self, tags):
        assert resolve(RawTagBag(tags)) is None

    def test_out_of_range_is_returned_as_is(self):
        tags = bag(GPSLatitude={"value": [95.0]}, GPSLongitude={"value": [200.0]})
        assert resolve(tags) == Coordinates(lat=95.0, lon=200.0)


@pytest.mark.parametrize(
    "text,tokens",
    [
        ("37.5 N, 127 E", [37.5, 127.0]),
        ("", []),
        ("no digits", []),
        ("1.5.6", [1.5, 6.0]),
    ],
)
def test_number_tokens(text, tokens):
    assert number_tokens(text) == tokens


def test_first_number():
    assert first_number("lat 37.25 deg") == 37.25
    assert first_number("none") is None
