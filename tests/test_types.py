"""
Tests for the position and geometry value types.
"""

import math

import pytest

from common.exceptions import ValidationError
from common.types import (
    CoordinateSystem,
    GaussKrugerPoint,
    LineString,
    Point,
    Polygon,
    RangePoint,
    RingClosure,
    normalize_longitude,
)


class TestPoint:
    """Validation, normalization and value semantics of Point."""

    def test_defaults(self):
        p = Point(116.0, 39.0)
        assert p.altitude == 0.0
        assert p.coordinate_system is CoordinateSystem.WGS84

    @pytest.mark.parametrize("lon, expected", [
        (190.0, -170.0),
        (-190.0, 170.0),
        (180.0, 180.0),
        (-180.0, -180.0),
        (540.0, -180.0),
        (116.404, 116.404),
    ])
    def test_longitude_wrapping(self, lon, expected):
        assert Point(lon, 0.0).longitude == pytest.approx(expected)

    def test_normalize_longitude_range(self):
        for lon in range(-1000, 1000, 7):
            assert -180.0 <= normalize_longitude(float(lon)) <= 180.0

    def test_latitude_clamped(self):
        assert Point(0.0, 95.0).latitude == 90.0
        assert Point(0.0, -91.5).latitude == -90.0

    def test_no_autofix_keeps_raw_values(self):
        p = Point(190.0, 95.0, no_autofix=True)
        assert p.longitude == 190.0
        assert p.latitude == 95.0

    @pytest.mark.parametrize("field_values", [
        (math.nan, 0.0, 0.0),
        (0.0, math.inf, 0.0),
        (0.0, 0.0, -math.inf),
        ("east", 0.0, 0.0),
    ])
    def test_non_finite_rejected(self, field_values):
        with pytest.raises(ValidationError):
            Point(*field_values)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            Point(math.nan, 0.0)

    def test_gk_tag_rejected(self):
        with pytest.raises(ValidationError):
            Point(500000.0, 4000000.0, 0.0, CoordinateSystem.GK)

    def test_structural_equality(self):
        assert Point(10.0, 20.0, 5.0) == Point(10.0, 20.0, 5.0)
        assert Point(10.0, 20.0) != Point.gcj02(10.0, 20.0)
        assert Point(10.0, 20.0) == Point(10.0, 20.0, no_autofix=True)

    def test_immutable(self):
        p = Point(10.0, 20.0)
        with pytest.raises(AttributeError):
            p.longitude = 11.0

    def test_with_coordinates_returns_new_point(self):
        p = Point.bd09(116.0, 39.0, 12.0)
        q = p.with_coordinates(latitude=40.0)
        assert q is not p
        assert q == Point.bd09(116.0, 40.0, 12.0)
        assert p.latitude == 39.0

    def test_with_coordinates_revalidates(self):
        with pytest.raises(ValidationError):
            Point(0.0, 0.0).with_coordinates(longitude=math.nan)

    def test_to_dict(self):
        assert Point.cgcs2000(116.0, 39.0, 50.0).to_dict() == {
            "longitude": 116.0,
            "latitude": 39.0,
            "altitude": 50.0,
            "coordinateSystem": "CGCS2000",
        }


class TestGaussKrugerPoint:
    """Plane coordinates with their zone."""

    def test_from_position(self):
        p = GaussKrugerPoint.from_position([500123.4, 4419876.5, 39])
        assert p.zone == 39
        assert p.zone_width == 3
        assert p.altitude == 0.0
        assert p.coordinate_system is CoordinateSystem.GK

    def test_from_position_with_altitude(self):
        p = GaussKrugerPoint.from_position([500123.4, 4419876.5, 20, 43.0], zone_width=6)
        assert p.altitude == 43.0
        assert p.zone_width == 6

    def test_from_position_requires_three_elements(self):
        with pytest.raises(ValidationError):
            GaussKrugerPoint.from_position([500000.0, 4000000.0])

    def test_zone_must_be_positive_integer(self):
        with pytest.raises(ValidationError):
            GaussKrugerPoint(500000.0, 4000000.0, 0)
        with pytest.raises(ValidationError):
            GaussKrugerPoint(500000.0, 4000000.0, 39.5)

    def test_zone_width_must_be_3_or_6(self):
        with pytest.raises(ValidationError):
            GaussKrugerPoint(500000.0, 4000000.0, 39, zone_width=4)

    def test_non_finite_rejected(self):
        with pytest.raises(ValidationError):
            GaussKrugerPoint(math.nan, 4000000.0, 39)


class TestLineAndPolygon:
    """Support geometries used by the measurement routines."""

    def test_linestring_requires_two_points(self):
        with pytest.raises(ValidationError):
            LineString([Point(0.0, 0.0)])

    def test_linestring_segments(self):
        a, b, c = Point(0.0, 0.0), Point(1.0, 0.0), Point(2.0, 0.0)
        assert list(LineString([a, b, c]).segments()) == [(a, b), (b, c)]

    def test_polygon_close_appends_first_point(self):
        pts = [Point(0.0, 0.0), Point(1.0, 0.0), Point(1.0, 1.0)]
        ring = Polygon(pts)
        assert len(ring) == 4
        assert ring.is_closed
        assert ring.points[-1] == pts[0]

    def test_polygon_close_keeps_closed_ring(self):
        pts = [Point(0.0, 0.0), Point(1.0, 0.0), Point(1.0, 1.0), Point(0.0, 0.0)]
        assert len(Polygon(pts)) == 4

    def test_polygon_trim_drops_closing_point(self):
        pts = [Point(0.0, 0.0), Point(1.0, 0.0), Point(1.0, 1.0), Point(0.0, 0.0)]
        ring = Polygon(pts, closure=RingClosure.TRIM)
        assert len(ring) == 3
        assert not ring.is_closed

    def test_polygon_edges_wrap_when_open(self):
        pts = [Point(0.0, 0.0), Point(1.0, 0.0), Point(1.0, 1.0)]
        open_edges = list(Polygon(pts, closure=RingClosure.TRIM).edges())
        closed_edges = list(Polygon(pts).edges())
        assert open_edges == closed_edges
        assert len(open_edges) == 3

    def test_polygon_requires_three_distinct_points(self):
        with pytest.raises(ValidationError):
            Polygon([Point(0.0, 0.0), Point(1.0, 0.0), Point(0.0, 0.0)])


class TestRangePoint:
    """Bounding ranges and their polygons."""

    def test_to_polygon_corners(self):
        box = RangePoint(max_longitude=2.0, max_latitude=1.0, min_longitude=0.0, min_latitude=-1.0)
        ring = box.to_polygon(CoordinateSystem.GCJ02)
        assert [(p.longitude, p.latitude) for p in ring] == [
            (0.0, 1.0), (2.0, 1.0), (2.0, -1.0), (0.0, -1.0), (0.0, 1.0)
        ]
        assert all(p.coordinate_system is CoordinateSystem.GCJ02 for p in ring)

    def test_contains(self):
        box = RangePoint(2.0, 1.0, 0.0, -1.0)
        assert box.contains(Point(1.0, 0.0))
        assert box.contains(Point(2.0, 1.0))
        assert not box.contains(Point(3.0, 0.0))
