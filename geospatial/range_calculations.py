"""
Ring Areas, Bounding Ranges and Axis-Aligned Translations.

The routines here convert a metric distance to an angular offset on a
sphere:

    range = (180 / π) · dist / R        (degrees of latitude)
    range_lon = range / cos(φ)          (degrees of longitude)

which is accurate for small distances away from the poles.

``ring_area`` is a planar shoelace summation with longitude scaled by
cos(φ) and both axes scaled by R·(π/180). It approximates small-extent
rings well; it is not a spherical-excess formula and degrades for large or
antimeridian-crossing polygons.
"""

import math

from common.exceptions import ValidationError
from common.types import Direction, Location, Point, Polygon, RangePoint
from common.units import Measure, magnitude_in, validate_units
from geospatial.distance_calculations import EARTH_RADIUS, _radius_m

RADIAN = math.pi / 180.0


def _angular_range(dist: Measure, radius: Measure) -> float:
    return 180.0 / math.pi * magnitude_in(dist, 'm') / _radius_m(radius)


@validate_units({'radius': 'm'})
def ring_area(polygon: Polygon, radius: Measure = EARTH_RADIUS) -> float:
    """Approximate area of a polygon ring.

    Parameters
    ----------
    polygon : Polygon
        The ring; an open ring is treated as closed.
    radius : float or pint.Quantity
        Sphere radius (meters if a bare number).

    Returns
    -------
    float
        Area in square meters (always non-negative).
    """
    scale = _radius_m(radius) * RADIAN
    total = 0.0

    for a, b in polygon.edges():
        x_a = a.longitude * scale * math.cos(a.latitude * RADIAN)
        x_b = b.longitude * scale * math.cos(b.latitude * RADIAN)
        total += x_a * b.latitude * scale - x_b * a.latitude * scale

    return 0.5 * abs(total)


@validate_units({'dist': 'm', 'radius': 'm'})
def point_range(point: Point, dist: Measure, radius: Measure = EARTH_RADIUS) -> RangePoint:
    """Bounding box extending ``dist`` from ``point`` in every direction.

    Examples
    --------
    >>> box = point_range(Point(116.404, 39.915), 1000)
    >>> box.contains(Point(116.404, 39.915))
    True
    """
    lat_range = _angular_range(dist, radius)
    lon_range = lat_range / math.cos(point.latitude * RADIAN)

    return RangePoint(
        max_longitude=point.longitude + lon_range,
        max_latitude=point.latitude + lat_range,
        min_longitude=point.longitude - lon_range,
        min_latitude=point.latitude - lat_range,
        altitude=point.altitude
    )


@validate_units({'dist': 'm', 'radius': 'm'})
def point_location_range(
    point: Point,
    dist: Measure,
    location: Location,
    radius: Measure = EARTH_RADIUS
) -> RangePoint:
    """Bounding box of side ``dist`` with ``point`` at one of its corners.

    Parameters
    ----------
    point : Point
        The anchor.
    dist : float or pint.Quantity
        Side length of the box (meters if a bare number).
    location : Location
        Which corner the anchor occupies. NORTHWEST puts the box to the
        south-east of the point, and so on.
    radius : float or pint.Quantity
        Sphere radius (meters if a bare number).
    """
    lat_range = _angular_range(dist, radius)
    lon_range = lat_range / math.cos(point.latitude * RADIAN)
    lon, lat = point.longitude, point.latitude

    if location is Location.NORTHWEST:
        bounds = (lon + lon_range, lat, lon, lat - lat_range)
    elif location is Location.NORTHEAST:
        bounds = (lon, lat, lon - lon_range, lat - lat_range)
    elif location is Location.SOUTHEAST:
        bounds = (lon, lat + lat_range, lon - lon_range, lat)
    elif location is Location.SOUTHWEST:
        bounds = (lon + lon_range, lat + lat_range, lon, lat)
    else:
        raise ValidationError(f"Unknown corner location {location!r}")

    return RangePoint(*bounds, altitude=point.altitude)


@validate_units({'dist': 'm', 'radius': 'm'})
def point_panning(
    point: Point,
    dist: Measure,
    direction: Direction,
    radius: Measure = EARTH_RADIUS
) -> Point:
    """Translate a point along a parallel or meridian.

    LEFT/RIGHT change only the longitude, UP/DOWN only the latitude; the
    altitude and coordinate system are preserved.

    The result goes through the usual point autofix unless the input was
    built with ``no_autofix``: panning RIGHT across the antimeridian wraps
    the longitude to the western side (179.999 becomes about -179.99), and
    panning UP or DOWN past a pole clamps the latitude to ±90.
    """
    lat_range = _angular_range(dist, radius)

    if direction is Direction.LEFT:
        return point.with_coordinates(
            longitude=point.longitude - lat_range / math.cos(point.latitude * RADIAN)
        )
    if direction is Direction.RIGHT:
        return point.with_coordinates(
            longitude=point.longitude + lat_range / math.cos(point.latitude * RADIAN)
        )
    if direction is Direction.UP:
        return point.with_coordinates(latitude=point.latitude + lat_range)
    if direction is Direction.DOWN:
        return point.with_coordinates(latitude=point.latitude - lat_range)
    raise ValidationError(f"Unknown direction {direction!r}")
