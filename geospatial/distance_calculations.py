"""
Spherical Distance, Bearing and Destination Calculations.

This module measures along great circles of a sphere whose radius defaults
to the WGS84 semi-major axis. Every function is pure: positions go in as
``Point`` values and new ``Point`` values come out.

Scientific Context
------------------
Domain: Spherical trigonometry
Model: Sphere of configurable radius (default 6 378 137 m; Baidu maps use
6 370 996.81 m)

Accuracy
--------
The spherical model departs from the ellipsoidal geodesic by up to about
0.5%. ``geodesic_distance`` wraps ``pyproj`` (GeographicLib algorithms by
Charles Karney) for callers that need the ellipsoidal reference.

Local Approximations
--------------------
``closest_on_segment`` projects onto the segment treating
(longitude, latitude, altitude) as a flat 3D vector space. It is only
locally valid and is not a true geodesic-segment computation.

References
----------
- Sinnott, R.W. (1984). Virtues of the Haversine. Sky and Telescope, 68(2).
- Karney, C.F.F. (2013). Algorithms for geodesics. Journal of Geodesy, 87(1), 43-55.
"""

from dataclasses import dataclass
import math
from typing import Optional
import numpy as np

from pyproj import Geod

from common.constants import GeodeticConstants
from common.exceptions import ValidationError
from common.types import CoordinateSystem, LineString, Point
from common.units import Measure, magnitude_in, validate_units

EARTH_RADIUS = GeodeticConstants.EARTH_RADIUS.value
BD_EARTH_RADIUS = GeodeticConstants.BD_EARTH_RADIUS.value

# Ellipsoidal geodesic calculators per geodetic system
_GEODS = {
    CoordinateSystem.WGS84: Geod(ellps='WGS84'),
    CoordinateSystem.CGCS2000: Geod(ellps='GRS80'),
}


def _radius_m(radius: Measure) -> float:
    radius_m = magnitude_in(radius, 'm')
    if not radius_m > 0:
        raise ValidationError(f"Sphere radius must be positive, got {radius_m}")
    return radius_m


@validate_units({'radius': 'm'})
def distance(point1: Point, point2: Point, radius: Measure = EARTH_RADIUS) -> float:
    """Compute the great-circle distance between two points.

    Parameters
    ----------
    point1, point2 : Point
        Endpoints; only their coordinates are used.
    radius : float or pint.Quantity
        Sphere radius (meters if a bare number).

    Returns
    -------
    float
        Distance in meters. If the altitudes differ, the horizontal
        distance and the altitude difference are combined in quadrature.

    Notes
    -----
    Haversine form:

    d = 2R · asin(√(sin²(Δφ/2) + sin²(Δλ/2) · cos φ1 · cos φ2))

    Examples
    --------
    >>> round(distance(Point(0, 0), Point(0, 1), 6371000.0), 1)
    111194.9
    """
    radius_m = _radius_m(radius)

    lat1 = math.radians(point1.latitude)
    lat2 = math.radians(point2.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(point2.longitude - point1.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.sin(d_lon / 2) ** 2 * math.cos(lat1) * math.cos(lat2)
    # Rounding can push h slightly outside [0, 1]
    h = min(max(h, 0.0), 1.0)
    horizontal = 2 * radius_m * math.asin(math.sqrt(h))

    d_alt = point2.altitude - point1.altitude
    if d_alt == 0.0:
        return horizontal
    return math.hypot(horizontal, d_alt)


def bearing(point1: Point, point2: Point) -> float:
    """Initial great-circle bearing from ``point1`` to ``point2``.

    Returns
    -------
    float
        Bearing in degrees clockwise from north, in [0, 360).
    """
    lat1 = math.radians(point1.latitude)
    lat2 = math.radians(point2.latitude)
    d_lon = math.radians(point2.longitude - point1.longitude)

    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lon)
    result = math.degrees(math.atan2(y, x)) % 360.0
    return 0.0 if result >= 360.0 else result


def closest_on_segment(point: Point, segment: LineString) -> Point:
    """Closest point to ``point`` on a two-point segment.

    The projection parameter is clamped to [0, 1]; a zero-length segment
    yields its first endpoint.

    Parameters
    ----------
    point : Point
        Query point. The result carries its coordinate system.
    segment : LineString
        Only the first two vertices are used.

    Returns
    -------
    Point
        The projected position, including the interpolated altitude.
    """
    start, end = segment.points[0], segment.points[1]
    a = np.array(start.as_tuple())
    b = np.array(end.as_tuple())
    p = np.array(point.as_tuple())

    ab = b - a
    length2 = float(ab @ ab)
    t = 0.0 if length2 == 0.0 else float(ab @ (p - a)) / length2

    if t <= 0.0:
        closest = a
    elif t >= 1.0:
        closest = b
    else:
        closest = a + t * ab

    return point.with_coordinates(
        longitude=float(closest[0]),
        latitude=float(closest[1]),
        altitude=float(closest[2])
    )


def closest_on_line(point: Point, line: LineString) -> Point:
    """Closest point to ``point`` over every segment of a polyline."""
    best: Optional[Point] = None
    best_distance = math.inf

    for start, end in line.segments():
        candidate = closest_on_segment(point, LineString([start, end]))
        d = distance(point, candidate)
        if d < best_distance:
            best, best_distance = candidate, d

    return best


def distance_to_line(point: Point, line: LineString) -> float:
    """Distance in meters from ``point`` to the nearest point of a polyline."""
    return min(
        distance(point, closest_on_segment(point, LineString([start, end])))
        for start, end in line.segments()
    )


@validate_units({'radius': 'm'})
def line_distance(line: LineString, radius: Measure = EARTH_RADIUS) -> float:
    """Length of a polyline: sum of its great-circle segment distances."""
    return sum(distance(start, end, radius) for start, end in line.segments())


@validate_units({'dist': 'm', 'radius': 'm'})
def move(
    point: Point,
    dist: Measure,
    bearing_deg: float,
    radius: Measure = EARTH_RADIUS
) -> Point:
    """Great-circle destination point.

    Parameters
    ----------
    point : Point
        Start position.
    dist : float or pint.Quantity
        Distance to travel (meters if a bare number).
    bearing_deg : float
        Initial bearing in degrees clockwise from north.
    radius : float or pint.Quantity
        Sphere radius (meters if a bare number).

    Returns
    -------
    Point
        Destination in the start point's coordinate system, longitude wrapped
        into [-180, 180). Altitude is unchanged.
    """
    delta = magnitude_in(dist, 'm') / _radius_m(radius)
    lat1 = math.radians(point.latitude)
    theta = math.radians(math.fmod(bearing_deg, 360.0))

    lat2 = math.asin(
        math.sin(lat1) * math.cos(delta)
        + math.cos(lat1) * math.sin(delta) * math.cos(theta)
    )
    lon2 = point.longitude + math.degrees(math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2)
    ))

    return point.with_coordinates(
        longitude=math.fmod(lon2 + 540.0, 360.0) - 180.0,
        latitude=math.degrees(lat2)
    )


def panning(
    point: Point,
    dist: Measure,
    bearing_deg: float,
    radius: Measure = EARTH_RADIUS
) -> Point:
    """Alias of ``move``."""
    return move(point, dist, bearing_deg, radius)


@dataclass
class GeodesicResult:
    """Result of an ellipsoidal inverse geodesic calculation.

    Attributes
    ----------
    distance_m : float
        Geodesic (shortest path) distance in meters.
    azimuth_forward_deg : float
        Forward azimuth at point 1 in degrees, [0, 360).
    azimuth_back_deg : float
        Back azimuth at point 2 in degrees, [0, 360).
    """
    distance_m: float
    azimuth_forward_deg: float
    azimuth_back_deg: float


def geodesic_inverse(point1: Point, point2: Point) -> GeodesicResult:
    """Solve the inverse geodesic problem on the points' ellipsoid.

    Raises
    ------
    ValidationError
        If the points are in different systems, or the system has no
        reference ellipsoid (GCJ-02 and BD-09 are warped, not ellipsoidal).
    """
    system = point1.coordinate_system
    if point2.coordinate_system is not system:
        raise ValidationError(
            f"Points are in different systems: {system.name} and "
            f"{point2.coordinate_system.name}"
        )
    geod = _GEODS.get(system)
    if geod is None:
        raise ValidationError(f"No reference ellipsoid for {system.name}")

    az_forward, az_back, distance_m = geod.inv(
        point1.longitude, point1.latitude, point2.longitude, point2.latitude
    )
    return GeodesicResult(
        distance_m=float(distance_m),
        azimuth_forward_deg=float(az_forward) % 360.0,
        azimuth_back_deg=float(az_back) % 360.0
    )


def geodesic_distance(point1: Point, point2: Point) -> float:
    """Ellipsoidal geodesic distance in meters.

    Examples
    --------
    >>> round(geodesic_distance(Point(0, 0), Point(0, 1)), 1)
    110574.4
    """
    return geodesic_inverse(point1, point2).distance_m
