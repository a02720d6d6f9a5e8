"""
Datum Transformations between WGS84, GCJ-02, BD-09, CGCS2000 and Gauss-Krüger.

This module is the single conversion entry point of the package. Each
supported (source, target) pair is registered in a dispatch table; a
request for an unregistered pair raises ``UnsupportedConversionError``.

Conversion Graph
----------------
    BD09 ⇄ GCJ02 ⇄ WGS84 ⇄ CGCS2000 ⇄ GK
    BD09 ⇄ WGS84 (chained through GCJ02)

Notes on the Chinese Systems
----------------------------
GCJ-02 is an empirical warp of WGS84 applied only inside a bounding box
around China; outside the box it is the identity, which is not an error.
The warp has no closed-form inverse, so GCJ-02 -> WGS84 is solved by
fixed-point iteration. BD-09 adds a polar offset on top of GCJ-02; its
closed-form reverse formula is only approximate and is refined by the
same fixed-point scheme.
"""

import math
from typing import Callable, Dict, Tuple, Union

from common.constants import GeodeticConstants, SolverSettings, DEFAULT_SOLVER_SETTINGS
from common.exceptions import UnsupportedConversionError, ValidationError
from common.logging_config import get_logger, log_convergence
from common.types import ConvergenceReport, CoordinateSystem, GaussKrugerPoint, Point
from geospatial.coordinate_models import ELLIPSOIDS
from geospatial.helmert import HelmertParameters, WGS84_TO_CGCS2000, helmert_transform
from geospatial.projections import cgcs2000_to_gk, gk_to_cgcs2000

logger = get_logger(__name__)

AnyPoint = Union[Point, GaussKrugerPoint]

X_PI = GeodeticConstants.X_PI.value
KRASOVSKY_A = GeodeticConstants.KRASOVSKY_SEMI_MAJOR_AXIS.value
KRASOVSKY_EE = GeodeticConstants.KRASOVSKY_ECCENTRICITY_SQUARED.value
BD09_DLON = GeodeticConstants.BD09_LONGITUDE_OFFSET.value
BD09_DLAT = GeodeticConstants.BD09_LATITUDE_OFFSET.value


def _require(point: AnyPoint, system: CoordinateSystem) -> None:
    if point.coordinate_system is not system:
        raise ValidationError(
            f"Expected a {system.name} point, got {point.coordinate_system.name}"
        )


def in_china(longitude: float, latitude: float) -> bool:
    """Whether a position lies inside the GCJ-02 bounding box."""
    min_lon, max_lon, min_lat, max_lat = GeodeticConstants.CHINA_BOUNDS
    return min_lon <= longitude <= max_lon and min_lat <= latitude <= max_lat


def _delta_longitude(x: float, y: float) -> float:
    ret = 300.0 + x + 2.0 * y + 0.1 * x * x + 0.1 * x * y + 0.1 * math.sqrt(abs(x))
    ret += 2.0 * (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) / 3.0
    ret += 2.0 * (20.0 * math.sin(x * math.pi) + 40.0 * math.sin(x / 3.0 * math.pi)) / 3.0
    ret += 2.0 * (150.0 * math.sin(x / 12.0 * math.pi) + 300.0 * math.sin(x / 30.0 * math.pi)) / 3.0
    return ret


def _delta_latitude(x: float, y: float) -> float:
    ret = -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + 0.1 * x * y + 0.2 * math.sqrt(abs(x))
    ret += 2.0 * (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) / 3.0
    ret += 2.0 * (20.0 * math.sin(y * math.pi) + 40.0 * math.sin(y / 3.0 * math.pi)) / 3.0
    ret += 2.0 * (160.0 * math.sin(y / 12.0 * math.pi) + 320.0 * math.sin(y * math.pi / 30.0)) / 3.0
    return ret


def _warp_offset(longitude: float, latitude: float) -> Tuple[float, float]:
    dlng = _delta_longitude(longitude - 105.0, latitude - 35.0)
    dlat = _delta_latitude(longitude - 105.0, latitude - 35.0)

    radlat = latitude / 180.0 * math.pi
    magic = math.sin(radlat)
    magic = 1 - KRASOVSKY_EE * magic * magic
    sqrtmagic = math.sqrt(magic)

    dlng = (dlng * 180.0) / (KRASOVSKY_A / sqrtmagic * math.cos(radlat) * math.pi)
    dlat = (dlat * 180.0) / (KRASOVSKY_A * (1 - KRASOVSKY_EE) / (magic * sqrtmagic) * math.pi)
    return dlng, dlat


def gcj02_offset(longitude: float, latitude: float) -> Tuple[float, float]:
    """GCJ-02 minus WGS84 offset (degrees) at a WGS84 position.

    Returns (0, 0) outside the China bounding box.
    """
    if not in_china(longitude, latitude):
        return 0.0, 0.0
    return _warp_offset(longitude, latitude)


def _fixed_point_inverse(
    forward: Callable[[float, float], Tuple[float, float]],
    target: Tuple[float, float],
    start: Tuple[float, float],
    tolerance: float,
    max_iterations: int,
    solver: str,
    strict: bool
) -> Tuple[float, float]:
    """Find (lon, lat) with ``forward(lon, lat) == target``.

    Each iteration subtracts the forward residual from the candidate; stops
    when both axis residuals are below ``tolerance`` or at the cap.
    """
    lon, lat = start
    residual = math.inf
    iterations = 0

    for iterations in range(1, max_iterations + 1):
        f_lon, f_lat = forward(lon, lat)
        d_lon = f_lon - target[0]
        d_lat = f_lat - target[1]
        residual = max(abs(d_lon), abs(d_lat))
        if residual < tolerance:
            break
        lon -= d_lon
        lat -= d_lat

    log_convergence(logger, ConvergenceReport(
        solver=solver,
        iterations=iterations,
        residual=residual,
        tolerance=tolerance,
        converged=residual < tolerance
    ), strict=strict)
    return lon, lat


# =============================================================================
# GCJ-02 <-> WGS84
# =============================================================================

def _wgs84_to_gcj02_raw(longitude: float, latitude: float) -> Tuple[float, float]:
    dlng, dlat = gcj02_offset(longitude, latitude)
    return longitude + dlng, latitude + dlat


def wgs84_to_gcj02(
    point: Point,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> Point:
    """Apply the GCJ-02 warp (identity outside China)."""
    _require(point, CoordinateSystem.WGS84)
    longitude, latitude = _wgs84_to_gcj02_raw(point.longitude, point.latitude)
    return Point(longitude, latitude, point.altitude, CoordinateSystem.GCJ02)


def gcj02_to_wgs84(
    point: Point,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> Point:
    """Invert the GCJ-02 warp by fixed-point iteration.

    The warp can push a WGS84 position just inside the China bounding box
    to a GCJ-02 position just outside it, so the box is tested on the
    first estimate of the WGS84 position rather than on the input. When
    that estimate falls outside the box the warp is the identity and the
    point comes back with only its tag changed.
    """
    _require(point, CoordinateSystem.GCJ02)

    target = (point.longitude, point.latitude)
    d_lon, d_lat = _warp_offset(*target)
    start = (target[0] - d_lon, target[1] - d_lat)
    if not in_china(*start):
        start = target

    longitude, latitude = _fixed_point_inverse(
        _wgs84_to_gcj02_raw,
        target=target,
        start=start,
        tolerance=settings.gcj02_tolerance,
        max_iterations=settings.gcj02_max_iterations,
        solver="gcj02_to_wgs84",
        strict=settings.strict
    )
    return Point(longitude, latitude, point.altitude, CoordinateSystem.WGS84)


# =============================================================================
# BD-09 <-> GCJ-02
# =============================================================================

def _gcj02_to_bd09_raw(longitude: float, latitude: float) -> Tuple[float, float]:
    z = math.sqrt(longitude * longitude + latitude * latitude) + 0.00002 * math.sin(latitude * X_PI)
    theta = math.atan2(latitude, longitude) + 0.000003 * math.cos(longitude * X_PI)
    return z * math.cos(theta) + BD09_DLON, z * math.sin(theta) + BD09_DLAT


def _bd09_to_gcj02_raw(longitude: float, latitude: float) -> Tuple[float, float]:
    x = longitude - BD09_DLON
    y = latitude - BD09_DLAT
    z = math.sqrt(x * x + y * y) - 0.00002 * math.sin(y * X_PI)
    theta = math.atan2(y, x) - 0.000003 * math.cos(x * X_PI)
    return z * math.cos(theta), z * math.sin(theta)


def gcj02_to_bd09(
    point: Point,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> Point:
    """Apply the BD-09 polar offset to a GCJ-02 point."""
    _require(point, CoordinateSystem.GCJ02)
    longitude, latitude = _gcj02_to_bd09_raw(point.longitude, point.latitude)
    return Point(longitude, latitude, point.altitude, CoordinateSystem.BD09)


def bd09_to_gcj02(
    point: Point,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> Point:
    """Remove the BD-09 polar offset.

    The closed-form reverse formula seeds a fixed-point refinement against
    ``gcj02_to_bd09`` so that the round trip is exact to
    ``settings.bd09_tolerance``.
    """
    _require(point, CoordinateSystem.BD09)
    target = (point.longitude, point.latitude)
    longitude, latitude = _fixed_point_inverse(
        _gcj02_to_bd09_raw,
        target=target,
        start=_bd09_to_gcj02_raw(*target),
        tolerance=settings.bd09_tolerance,
        max_iterations=settings.bd09_max_iterations,
        solver="bd09_to_gcj02",
        strict=settings.strict
    )
    return Point(longitude, latitude, point.altitude, CoordinateSystem.GCJ02)


def wgs84_to_bd09(
    point: Point,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> Point:
    return gcj02_to_bd09(wgs84_to_gcj02(point, settings), settings)


def bd09_to_wgs84(
    point: Point,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> Point:
    return gcj02_to_wgs84(bd09_to_gcj02(point, settings), settings)


# =============================================================================
# WGS84 <-> CGCS2000
# =============================================================================

def _helmert_point(
    point: Point,
    params: HelmertParameters,
    target: CoordinateSystem,
    settings: SolverSettings
) -> Point:
    lat_rad, lon_rad, altitude = helmert_transform(
        math.radians(point.latitude),
        math.radians(point.longitude),
        point.altitude,
        params,
        ELLIPSOIDS[point.coordinate_system],
        ELLIPSOIDS[target],
        settings
    )
    return Point(math.degrees(lon_rad), math.degrees(lat_rad), altitude, target)


def wgs84_to_cgcs2000(
    point: Point,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS,
    params: HelmertParameters = WGS84_TO_CGCS2000
) -> Point:
    """Helmert transform from WGS84 to CGCS2000."""
    _require(point, CoordinateSystem.WGS84)
    return _helmert_point(point, params, CoordinateSystem.CGCS2000, settings)


def cgcs2000_to_wgs84(
    point: Point,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS,
    params: HelmertParameters = WGS84_TO_CGCS2000
) -> Point:
    """Helmert transform from CGCS2000 to WGS84 (inverse parameters)."""
    _require(point, CoordinateSystem.CGCS2000)
    return _helmert_point(point, params.inverse(), CoordinateSystem.WGS84, settings)


# =============================================================================
# Dispatch
# =============================================================================

_CONVERSIONS: Dict[Tuple[CoordinateSystem, CoordinateSystem], Callable] = {
    (CoordinateSystem.WGS84, CoordinateSystem.GCJ02): wgs84_to_gcj02,
    (CoordinateSystem.GCJ02, CoordinateSystem.WGS84): gcj02_to_wgs84,
    (CoordinateSystem.GCJ02, CoordinateSystem.BD09): gcj02_to_bd09,
    (CoordinateSystem.BD09, CoordinateSystem.GCJ02): bd09_to_gcj02,
    (CoordinateSystem.WGS84, CoordinateSystem.BD09): wgs84_to_bd09,
    (CoordinateSystem.BD09, CoordinateSystem.WGS84): bd09_to_wgs84,
    (CoordinateSystem.WGS84, CoordinateSystem.CGCS2000): wgs84_to_cgcs2000,
    (CoordinateSystem.CGCS2000, CoordinateSystem.WGS84): cgcs2000_to_wgs84,
    (CoordinateSystem.CGCS2000, CoordinateSystem.GK):
        lambda point, settings: cgcs2000_to_gk(point, settings.gk_zone_width, settings),
    (CoordinateSystem.GK, CoordinateSystem.CGCS2000): gk_to_cgcs2000,
}


def supported_conversions() -> Tuple[Tuple[CoordinateSystem, CoordinateSystem], ...]:
    """All registered (source, target) pairs."""
    return tuple(_CONVERSIONS)


def transform(
    point: AnyPoint,
    target: CoordinateSystem,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> AnyPoint:
    """Convert a point to another coordinate system.

    Parameters
    ----------
    point : Point or GaussKrugerPoint
        The source position; its tag selects the source system.
    target : CoordinateSystem
        The requested system.
    settings : SolverSettings
        Tolerances, iteration caps, strictness and the GK zone width.

    Returns
    -------
    Point or GaussKrugerPoint
        A new value in the target system, or ``point`` itself when it is
        already in the target system.

    Raises
    ------
    UnsupportedConversionError
        If no conversion is registered for the pair.

    Examples
    --------
    >>> beijing = Point.wgs84(116.404, 39.915)
    >>> transform(beijing, CoordinateSystem.BD09).coordinate_system
    <CoordinateSystem.BD09: 'BD09'>
    """
    source = point.coordinate_system
    if source is target:
        return point

    conversion = _CONVERSIONS.get((source, target))
    if conversion is None:
        raise UnsupportedConversionError(source, target)

    logger.debug(f"Transform {source.name} -> {target.name}")
    return conversion(point, settings)
