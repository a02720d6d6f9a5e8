"""
Tests for the Gauss-Krüger projection.

pyproj's transverse Mercator (an exact Poder/Engsager implementation) is
used as an independent reference for the series expansions.
"""

import pytest
from pyproj import Proj

from common.exceptions import ValidationError
from common.types import CoordinateSystem, GaussKrugerPoint, Point
from geospatial.coordinate_models import CGCS2000Ellipsoid, meridian_arc_length
from geospatial.projections import (
    GaussKruger,
    central_meridian,
    cgcs2000_to_gk,
    gk_to_cgcs2000,
    zone_for_longitude,
)


class TestZones:
    """Zone numbering and central meridians."""

    @pytest.mark.parametrize("lon, zone_width, zone, cm", [
        (117.5, 3, 39, 117.0),
        (118.4, 3, 39, 117.0),
        (118.6, 3, 40, 120.0),
        (117.5, 6, 20, 117.0),
        (120.0, 6, 21, 123.0),
        (75.0, 6, 13, 75.0),
        (0.5, 3, 120, 360.0),
        (359.0, 3, 120, 360.0),
        (1.6, 3, 1, 3.0),
        (0.5, 6, 1, 3.0),
    ])
    def test_zone_and_central_meridian(self, lon, zone_width, zone, cm):
        assert zone_for_longitude(lon, zone_width) == zone
        assert central_meridian(zone, zone_width) == cm

    def test_invalid_zone_width(self):
        with pytest.raises(ValidationError):
            zone_for_longitude(117.0, 5)
        with pytest.raises(ValidationError):
            GaussKruger(zone_width=9)


class TestGaussKruger:
    """Forward and inverse series."""

    def test_central_meridian_maps_to_false_easting(self):
        gk = cgcs2000_to_gk(Point.cgcs2000(117.0, 30.0))
        assert gk.easting == pytest.approx(500000.0, abs=1e-6)
        assert gk.northing == pytest.approx(
            meridian_arc_length(0.5235987755982988, CGCS2000Ellipsoid), abs=1e-6
        )

    def test_equator_on_central_meridian(self):
        gk = cgcs2000_to_gk(Point.cgcs2000(117.0, 0.0))
        assert gk.easting == pytest.approx(500000.0, abs=1e-6)
        assert gk.northing == pytest.approx(0.0, abs=1e-6)

    def test_meridian_arc_to_pole(self):
        # Quarter meridian of the GRS80-like CGCS2000 ellipsoid
        assert meridian_arc_length(1.5707963267948966, CGCS2000Ellipsoid) == pytest.approx(
            10001965.729, abs=1e-2
        )

    def test_east_of_central_meridian_has_larger_easting(self):
        west = cgcs2000_to_gk(Point.cgcs2000(116.0, 35.0))
        east = cgcs2000_to_gk(Point.cgcs2000(118.0, 35.0))
        assert west.zone == east.zone == 39
        assert west.easting < 500000.0 < east.easting

    @pytest.mark.parametrize("lon, lat", [
        (117.0, 30.0),
        (118.4, 39.9),
        (115.6, 22.5),
        (118.49, 53.0),
        (115.51, 18.2),
    ])
    def test_round_trip_within_zone(self, lon, lat):
        p = Point.cgcs2000(lon, lat, 30.0)
        back = gk_to_cgcs2000(cgcs2000_to_gk(p, 3))
        assert back.coordinate_system is CoordinateSystem.CGCS2000
        assert back.longitude == pytest.approx(lon, abs=1e-6)
        assert back.latitude == pytest.approx(lat, abs=1e-6)
        assert back.altitude == 30.0

    def test_round_trip_six_degree_zone(self):
        p = Point.cgcs2000(119.5, 41.0)
        gk = cgcs2000_to_gk(p, 6)
        assert gk.zone_width == 6
        back = gk_to_cgcs2000(gk)
        assert back.longitude == pytest.approx(119.5, abs=1e-6)
        assert back.latitude == pytest.approx(41.0, abs=1e-6)

    @pytest.mark.parametrize("lon", [0.5, 1.0, -1.0, 0.0])
    def test_round_trip_across_prime_meridian(self, lon):
        p = Point.cgcs2000(lon, 50.0, 12.0)
        gk = cgcs2000_to_gk(p, 3)
        assert gk.zone == 120
        back = gk_to_cgcs2000(gk)
        assert back.longitude == pytest.approx(lon, abs=1e-6)
        assert back.latitude == pytest.approx(50.0, abs=1e-6)
        assert back.altitude == 12.0

    def test_prime_meridian_zone_is_symmetric(self):
        east = cgcs2000_to_gk(Point.cgcs2000(1.0, 50.0))
        west = cgcs2000_to_gk(Point.cgcs2000(-1.0, 50.0))
        assert east.easting - 500000.0 == pytest.approx(500000.0 - west.easting, abs=1e-6)
        assert east.northing == pytest.approx(west.northing, abs=1e-6)

    def test_southern_hemisphere(self):
        p = Point.cgcs2000(135.8, -33.2)
        gk = cgcs2000_to_gk(p)
        assert gk.northing < 0
        back = gk_to_cgcs2000(gk)
        assert back.latitude == pytest.approx(-33.2, abs=1e-6)

    @pytest.mark.parametrize("lon, lat, zone_width", [
        (117.0, 30.0, 3),
        (118.3, 39.9, 3),
        (115.7, 22.5, 3),
        (119.0, 45.0, 6),
    ])
    def test_matches_pyproj_tmerc(self, lon, lat, zone_width):
        projection = GaussKruger(zone_width)
        gk = cgcs2000_to_gk(Point.cgcs2000(lon, lat), zone_width)
        reference = Proj(projection.proj4_string(gk.zone))
        easting, northing = reference(lon, lat)
        assert gk.easting == pytest.approx(easting, abs=5e-3)
        assert gk.northing == pytest.approx(northing, abs=5e-3)

    def test_proj4_string(self):
        text = GaussKruger(3).proj4_string(39)
        assert "+proj=tmerc" in text
        assert "+lon_0=117" in text
        assert "+x_0=500000" in text
        assert "+k=1" in text

    def test_requires_cgcs2000_source(self):
        with pytest.raises(ValidationError):
            cgcs2000_to_gk(Point.wgs84(117.0, 30.0))

    def test_inverse_of_constructed_point(self):
        gk = GaussKrugerPoint.from_position([500000.0, 0.0, 39])
        back = gk_to_cgcs2000(gk)
        assert back.longitude == pytest.approx(117.0, abs=1e-9)
        assert back.latitude == pytest.approx(0.0, abs=1e-9)
