"""
Tests for the datum transformations and the transform dispatch table.
"""

import warnings

import pytest

from common.constants import SolverSettings
from common.exceptions import (
    ConvergenceError,
    ConvergenceWarning,
    UnsupportedConversionError,
    ValidationError,
)
from common.types import CoordinateSystem, GaussKrugerPoint, Point
from geospatial.datum_transforms import (
    bd09_to_gcj02,
    bd09_to_wgs84,
    cgcs2000_to_wgs84,
    gcj02_to_bd09,
    gcj02_to_wgs84,
    in_china,
    supported_conversions,
    transform,
    wgs84_to_bd09,
    wgs84_to_cgcs2000,
    wgs84_to_gcj02,
)
from geospatial.helmert import HelmertParameters, helmert_ecef


class TestGCJ02:
    """WGS84 <-> GCJ-02."""

    def test_known_offset_in_beijing(self, beijing):
        gcj = wgs84_to_gcj02(beijing)
        assert gcj.coordinate_system is CoordinateSystem.GCJ02
        assert gcj.longitude == pytest.approx(116.41024449916938, abs=1e-6)
        assert gcj.latitude == pytest.approx(39.91640428150164, abs=1e-6)

    def test_identity_outside_china(self, london):
        gcj = wgs84_to_gcj02(london)
        assert gcj.longitude == london.longitude
        assert gcj.latitude == london.latitude
        assert gcj.coordinate_system is CoordinateSystem.GCJ02

    def test_inverse_identity_outside_china(self):
        p = Point.gcj02(-74.006, 40.7128)
        wgs = gcj02_to_wgs84(p)
        assert (wgs.longitude, wgs.latitude) == (p.longitude, p.latitude)

    @pytest.mark.parametrize("lon, lat", [
        (116.404, 39.915),
        (121.4737, 31.2304),
        (113.2644, 23.1291),
        (87.6168, 43.8256),
        (126.6424, 45.7567),
    ])
    def test_round_trip_inside_china(self, lon, lat):
        p = Point.wgs84(lon, lat)
        assert in_china(lon, lat)
        back = gcj02_to_wgs84(wgs84_to_gcj02(p))
        assert back.longitude == pytest.approx(lon, abs=1e-6)
        assert back.latitude == pytest.approx(lat, abs=1e-6)
        assert back.coordinate_system is CoordinateSystem.WGS84

    @pytest.mark.parametrize("lon", [137.83, 137.834])
    @pytest.mark.parametrize("lat", [1.0, 10.0, 20.0, 35.0, 45.0, 55.0])
    def test_round_trip_at_eastern_edge(self, lon, lat):
        p = Point.wgs84(lon, lat)
        gcj = wgs84_to_gcj02(p)
        back = gcj02_to_wgs84(gcj)
        assert back.longitude == pytest.approx(lon, abs=1e-6)
        assert back.latitude == pytest.approx(lat, abs=1e-6)

    def test_warp_can_leave_the_box(self):
        gcj = wgs84_to_gcj02(Point.wgs84(137.83, 35.0))
        assert not in_china(gcj.longitude, gcj.latitude)
        back = gcj02_to_wgs84(gcj)
        assert back.longitude == pytest.approx(137.83, abs=1e-6)

    def test_altitude_carried(self):
        p = Point.wgs84(116.404, 39.915, 88.5)
        assert wgs84_to_gcj02(p).altitude == 88.5
        assert gcj02_to_wgs84(wgs84_to_gcj02(p)).altitude == 88.5

    def test_wrong_source_system(self):
        with pytest.raises(ValidationError):
            wgs84_to_gcj02(Point.bd09(116.404, 39.915))

    def test_capped_iteration_warns(self):
        settings = SolverSettings(gcj02_max_iterations=1)
        p = Point.gcj02(116.404, 39.915)
        with pytest.warns(ConvergenceWarning):
            result = gcj02_to_wgs84(p, settings)
        # Best estimate is still returned
        assert result.longitude == pytest.approx(116.39775550083061, abs=1e-4)

    def test_capped_iteration_raises_when_strict(self):
        settings = SolverSettings(gcj02_max_iterations=1, strict=True)
        with pytest.raises(ConvergenceError) as exc_info:
            gcj02_to_wgs84(Point.gcj02(116.404, 39.915), settings)
        report = exc_info.value.report
        assert report.solver == "gcj02_to_wgs84"
        assert report.iterations == 1
        assert not report.converged

    def test_default_settings_converge_silently(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", ConvergenceWarning)
            gcj02_to_wgs84(Point.gcj02(116.404, 39.915))


class TestBD09:
    """GCJ-02 <-> BD-09 and the chained WGS84 <-> BD-09."""

    def test_known_offset(self):
        bd = gcj02_to_bd09(Point.gcj02(116.404, 39.915))
        assert bd.coordinate_system is CoordinateSystem.BD09
        assert bd.longitude == pytest.approx(116.41036949371029, abs=1e-6)
        assert bd.latitude == pytest.approx(39.92133699351021, abs=1e-6)

    def test_refined_inverse_is_exact(self):
        p = Point.gcj02(116.404, 39.915)
        back = bd09_to_gcj02(gcj02_to_bd09(p))
        assert back.longitude == pytest.approx(p.longitude, abs=1e-8)
        assert back.latitude == pytest.approx(p.latitude, abs=1e-8)

    def test_wgs84_round_trip_beijing(self, beijing):
        bd = wgs84_to_bd09(beijing)
        assert bd.coordinate_system is CoordinateSystem.BD09
        back = bd09_to_wgs84(bd)
        assert back.longitude == pytest.approx(beijing.longitude, abs=1e-5)
        assert back.latitude == pytest.approx(beijing.latitude, abs=1e-5)

    def test_offset_applies_outside_china(self, london):
        # BD-09 has no bounding box; only the GCJ-02 step is skipped.
        bd = wgs84_to_bd09(london)
        assert bd.longitude != london.longitude


class TestCGCS2000:
    """Helmert transform between WGS84 and CGCS2000."""

    def test_frames_coincide(self, beijing):
        cg = wgs84_to_cgcs2000(beijing)
        assert cg.coordinate_system is CoordinateSystem.CGCS2000
        assert cg.longitude == pytest.approx(beijing.longitude, abs=1e-9)
        assert cg.latitude == pytest.approx(beijing.latitude, abs=1e-6)
        assert cg.altitude == pytest.approx(0.0, abs=1e-3)

    def test_round_trip(self):
        p = Point.wgs84(100.25, 25.5, 1900.0)
        back = cgcs2000_to_wgs84(wgs84_to_cgcs2000(p))
        assert back.longitude == pytest.approx(p.longitude, abs=1e-9)
        assert back.latitude == pytest.approx(p.latitude, abs=1e-9)
        assert back.altitude == pytest.approx(p.altitude, abs=1e-4)

    def test_pole(self):
        p = Point.wgs84(0.0, 90.0, 10.0)
        cg = wgs84_to_cgcs2000(p)
        assert cg.latitude == pytest.approx(90.0)
        assert cg.altitude == pytest.approx(10.0, abs=1e-3)

    def test_translation_shifts_height(self):
        params = HelmertParameters(tx=0.0, ty=0.0, tz=5.0)
        cg = wgs84_to_cgcs2000(Point.wgs84(0.0, 90.0), params=params)
        assert cg.altitude == pytest.approx(5.0, abs=1e-3)

    def test_survey_units(self):
        params = HelmertParameters.from_survey_units(scale_ppm=1.0, rz_arcsec=1.0)
        assert params.scale == pytest.approx(1e-6)
        assert params.rz == pytest.approx(4.84813681109536e-06)

    def test_inverse_parameters_undo_transform(self):
        params = HelmertParameters.from_survey_units(
            tx_m=1.0, ty_m=-2.0, tz_m=0.5, scale_ppm=0.2, rx_arcsec=0.01
        )
        X, Y, Z = 4_000_000.0, 3_000_000.0, 3_500_000.0
        back = helmert_ecef(*helmert_ecef(X, Y, Z, params), params.inverse())
        assert back == pytest.approx((X, Y, Z), abs=1e-3)


class TestTransformDispatch:
    """The single conversion entry point."""

    @pytest.mark.parametrize("point", [
        Point.wgs84(116.404, 39.915),
        Point.gcj02(116.404, 39.915),
        Point.bd09(116.404, 39.915),
        Point.cgcs2000(116.404, 39.915),
        GaussKrugerPoint(500000.0, 4419000.0, 39),
    ])
    def test_identity_on_same_system(self, point):
        assert transform(point, point.coordinate_system) is point

    def test_chained_route(self, beijing):
        direct = transform(beijing, CoordinateSystem.BD09)
        via_gcj = transform(transform(beijing, CoordinateSystem.GCJ02), CoordinateSystem.BD09)
        assert direct == via_gcj

    @pytest.mark.parametrize("source, target", [
        (Point.gcj02(116.0, 39.0), CoordinateSystem.CGCS2000),
        (Point.bd09(116.0, 39.0), CoordinateSystem.GK),
        (Point.wgs84(116.0, 39.0), CoordinateSystem.GK),
        (GaussKrugerPoint(500000.0, 4419000.0, 39), CoordinateSystem.WGS84),
    ])
    def test_unsupported_pair(self, source, target):
        with pytest.raises(UnsupportedConversionError) as exc_info:
            transform(source, target)
        assert exc_info.value.source is source.coordinate_system
        assert exc_info.value.target is target
        assert source.coordinate_system.name in str(exc_info.value)
        assert target.name in str(exc_info.value)

    def test_registered_pairs(self):
        pairs = set(supported_conversions())
        assert (CoordinateSystem.WGS84, CoordinateSystem.GCJ02) in pairs
        assert (CoordinateSystem.GK, CoordinateSystem.CGCS2000) in pairs
        assert len(pairs) == 10

    def test_gk_zone_width_from_settings(self):
        p = Point.cgcs2000(117.5, 30.0)
        gk = transform(p, CoordinateSystem.GK, SolverSettings(gk_zone_width=6))
        assert gk.zone_width == 6
        assert gk.zone == 20

    def test_gk_round_trip(self):
        p = Point.cgcs2000(118.2, 31.7, 12.0)
        back = transform(transform(p, CoordinateSystem.GK), CoordinateSystem.CGCS2000)
        assert back.longitude == pytest.approx(p.longitude, abs=1e-6)
        assert back.latitude == pytest.approx(p.latitude, abs=1e-6)
        assert back.altitude == 12.0
