"""
Type Definitions for the Geodesy Core.

This module defines the value types exchanged between the datum, projection,
measurement and geoid modules. All positions are immutable: every transform
or measurement that produces a position returns a new value.

Design Rationale
----------------
A single ``Point`` type tagged with its ``CoordinateSystem`` replaces one
class per coordinate system. Functions dispatch on the tag, so adding a
conversion never requires a new class.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
import math

from common.exceptions import ValidationError


class CoordinateSystem(Enum):
    """Coordinate systems understood by the transform graph.

    - WGS84: global GPS reference
    - GCJ02: Chinese obfuscated system used by most Chinese map services
    - BD09: Baidu system, derived from GCJ02
    - CGCS2000: China Geodetic Coordinate System 2000
    - GK: Gauss-Krüger plane coordinates projected from CGCS2000
    """
    WGS84 = "WGS84"
    GCJ02 = "GCJ02"
    BD09 = "BD09"
    CGCS2000 = "CGCS2000"
    GK = "GK"


class Direction(Enum):
    """Axis-aligned panning directions (numeric keypad layout)."""
    LEFT = 4
    RIGHT = 6
    UP = 8
    DOWN = 2


class Location(Enum):
    """Corner of a range box at which the anchor point sits."""
    NORTHWEST = 0
    NORTHEAST = 1
    SOUTHEAST = 2
    SOUTHWEST = 3


class RingClosure(Enum):
    """How a Polygon normalizes its ring at construction.

    CLOSE appends the first vertex when the ring is open; TRIM drops a
    duplicate closing vertex.
    """
    CLOSE = "close"
    TRIM = "trim"


def _finite(name: str, value: Any) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite value.")
    return value


def normalize_longitude(longitude: float) -> float:
    """Wrap a longitude into [-180, 180].

    180 itself is kept as 180; every other value maps into [-180, 180).
    """
    # In-range values are returned as-is so re-validation never drifts
    if -180.0 <= longitude <= 180.0:
        return longitude
    offset = 180.0 if (longitude < -180 or longitude == 180) else -180.0
    return math.fmod(longitude + 180.0, 360.0) + offset


def clamp_latitude(latitude: float) -> float:
    """Clamp a latitude into [-90, 90]."""
    return max(min(latitude, 90.0), -90.0)


@dataclass(frozen=True)
class Point:
    """A geodetic position tagged with its coordinate system.

    Attributes
    ----------
    longitude : float
        Longitude in DEGREES. Wrapped into [-180, 180] unless ``no_autofix``.
    latitude : float
        Latitude in DEGREES. Clamped to [-90, 90] unless ``no_autofix``.
    altitude : float, optional
        Height in METERS. Default is 0.
    coordinate_system : CoordinateSystem, optional
        The reference system of the coordinates. Default is WGS84.
    no_autofix : bool, optional
        Disable longitude wrapping and latitude clamping. Not part of
        equality.

    Raises
    ------
    ValidationError
        If any coordinate is not a finite number, or the tag is GK (use
        ``GaussKrugerPoint`` for plane coordinates).

    Examples
    --------
    >>> Point(190.0, 95.0)
    Point(longitude=-170.0, latitude=90.0, altitude=0.0, coordinate_system=<CoordinateSystem.WGS84: 'WGS84'>)
    """
    longitude: float
    latitude: float
    altitude: float = 0.0
    coordinate_system: CoordinateSystem = CoordinateSystem.WGS84
    no_autofix: bool = field(default=False, compare=False, repr=False)

    def __post_init__(self):
        """Validate and normalize coordinates."""
        longitude = _finite("Longitude", self.longitude)
        latitude = _finite("Latitude", self.latitude)
        altitude = _finite("Altitude", self.altitude)

        if not isinstance(self.coordinate_system, CoordinateSystem):
            raise ValidationError(
                f"Unknown coordinate system {self.coordinate_system!r}"
            )
        if self.coordinate_system is CoordinateSystem.GK:
            raise ValidationError(
                "Gauss-Krüger coordinates must be built with GaussKrugerPoint"
            )

        if not self.no_autofix:
            longitude = normalize_longitude(longitude)
            latitude = clamp_latitude(latitude)

        object.__setattr__(self, "longitude", longitude)
        object.__setattr__(self, "latitude", latitude)
        object.__setattr__(self, "altitude", altitude)

    @classmethod
    def wgs84(cls, longitude: float, latitude: float, altitude: float = 0.0) -> 'Point':
        return cls(longitude, latitude, altitude, CoordinateSystem.WGS84)

    @classmethod
    def gcj02(cls, longitude: float, latitude: float, altitude: float = 0.0) -> 'Point':
        return cls(longitude, latitude, altitude, CoordinateSystem.GCJ02)

    @classmethod
    def bd09(cls, longitude: float, latitude: float, altitude: float = 0.0) -> 'Point':
        return cls(longitude, latitude, altitude, CoordinateSystem.BD09)

    @classmethod
    def cgcs2000(cls, longitude: float, latitude: float, altitude: float = 0.0) -> 'Point':
        return cls(longitude, latitude, altitude, CoordinateSystem.CGCS2000)

    def with_coordinates(
        self,
        longitude: Optional[float] = None,
        latitude: Optional[float] = None,
        altitude: Optional[float] = None,
        coordinate_system: Optional[CoordinateSystem] = None
    ) -> 'Point':
        """Return a copy with some fields replaced (re-validated)."""
        changes: Dict[str, Any] = {}
        if longitude is not None:
            changes["longitude"] = longitude
        if latitude is not None:
            changes["latitude"] = latitude
        if altitude is not None:
            changes["altitude"] = altitude
        if coordinate_system is not None:
            changes["coordinate_system"] = coordinate_system
        return replace(self, **changes)

    def as_tuple(self) -> Tuple[float, float, float]:
        """(longitude, latitude, altitude)."""
        return self.longitude, self.latitude, self.altitude

    def to_dict(self) -> Dict[str, Any]:
        """Export in the shape expected by GeoJSON-style collaborators."""
        return {
            "longitude": self.longitude,
            "latitude": self.latitude,
            "altitude": self.altitude,
            "coordinateSystem": self.coordinate_system.value,
        }


@dataclass(frozen=True)
class GaussKrugerPoint:
    """A Gauss-Krüger plane position.

    Attributes
    ----------
    easting : float
        Easting in METERS, including the 500 000 m false easting.
    northing : float
        Northing in METERS from the equator.
    zone : int
        Zone number.
    zone_width : int, optional
        Zone width in degrees, 3 or 6. Default is 3.
    altitude : float, optional
        Height in METERS. Default is 0.
    """
    easting: float
    northing: float
    zone: int
    zone_width: int = 3
    altitude: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "easting", _finite("Easting", self.easting))
        object.__setattr__(self, "northing", _finite("Northing", self.northing))
        object.__setattr__(self, "altitude", _finite("Altitude", self.altitude))

        zone = _finite("Zone", self.zone)
        if zone != int(zone) or zone < 1:
            raise ValidationError(f"Zone must be a positive integer, got {self.zone!r}")
        object.__setattr__(self, "zone", int(zone))

        if self.zone_width not in (3, 6):
            raise ValidationError(
                f"Zone width must be 3 or 6 degrees, got {self.zone_width!r}"
            )

    @property
    def coordinate_system(self) -> CoordinateSystem:
        return CoordinateSystem.GK

    @classmethod
    def from_position(cls, position: Sequence[Any], zone_width: int = 3) -> 'GaussKrugerPoint':
        """Build from ``[easting, northing, zone]`` or ``[easting, northing, zone, altitude]``.

        Raises
        ------
        ValidationError
            If fewer than three elements are given.
        """
        if len(position) < 3:
            raise ValidationError("Position requires at least three elements")
        altitude = position[3] if len(position) > 3 else 0.0
        return cls(
            easting=position[0],
            northing=position[1],
            zone=position[2],
            zone_width=zone_width,
            altitude=altitude
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "easting": self.easting,
            "northing": self.northing,
            "zone": self.zone,
            "zoneWidth": self.zone_width,
            "altitude": self.altitude,
            "coordinateSystem": CoordinateSystem.GK.value,
        }


class LineString:
    """An ordered sequence of at least two points."""

    def __init__(self, points: Sequence[Point]):
        points = list(points)
        if len(points) < 2:
            raise ValidationError("LineString requires at least two points.")
        self._points: Tuple[Point, ...] = tuple(points)

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._points

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LineString):
            return NotImplemented
        return self._points == other._points

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._points)!r})"

    def segments(self) -> Iterator[Tuple[Point, Point]]:
        """Yield each pair of consecutive vertices."""
        return zip(self._points, self._points[1:])


class Polygon:
    """A single ring of points used as input to area calculations.

    Parameters
    ----------
    points : sequence of Point
        Ring vertices; the closing vertex may be present or not.
    closure : RingClosure
        CLOSE (default) appends the first vertex to an open ring; TRIM
        removes a duplicate closing vertex.

    Raises
    ------
    ValidationError
        If the ring has fewer than three distinct vertices.
    """

    def __init__(self, points: Sequence[Point], closure: RingClosure = RingClosure.CLOSE):
        points = list(points)
        is_closed = len(points) > 1 and points[0] == points[-1]
        distinct = len(points) - 1 if is_closed else len(points)
        if distinct < 3:
            raise ValidationError("Polygon requires at least three points.")

        if closure is RingClosure.CLOSE and not is_closed:
            points.append(points[0])
        elif closure is RingClosure.TRIM and is_closed:
            points.pop()

        self._points: Tuple[Point, ...] = tuple(points)
        self._closure = closure

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._points

    @property
    def closure(self) -> RingClosure:
        return self._closure

    @property
    def is_closed(self) -> bool:
        return self._points[0] == self._points[-1]

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Polygon):
            return NotImplemented
        return self._points == other._points

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._points)!r}, closure={self._closure})"

    def edges(self) -> Iterator[Tuple[Point, Point]]:
        """Yield every ring edge, wrapping back to the first vertex if open."""
        ring: List[Point] = list(self._points)
        if not self.is_closed:
            ring.append(ring[0])
        return zip(ring, ring[1:])


@dataclass(frozen=True)
class RangePoint:
    """An axis-aligned bounding range in degrees.

    Attributes
    ----------
    max_longitude, max_latitude : float
        North-east bound in DEGREES.
    min_longitude, min_latitude : float
        South-west bound in DEGREES.
    altitude : float, optional
        Height in METERS carried from the point the range was derived from.
    """
    max_longitude: float
    max_latitude: float
    min_longitude: float
    min_latitude: float
    altitude: float = 0.0

    def contains(self, point: Point) -> bool:
        """Whether ``point`` falls inside the range (bounds inclusive)."""
        return (
            self.min_longitude <= point.longitude <= self.max_longitude
            and self.min_latitude <= point.latitude <= self.max_latitude
        )

    def to_polygon(
        self,
        coordinate_system: CoordinateSystem = CoordinateSystem.WGS84
    ) -> Polygon:
        """Build the closed rectangle NW -> NE -> SE -> SW -> NW."""
        corners = [
            (self.min_longitude, self.max_latitude),
            (self.max_longitude, self.max_latitude),
            (self.max_longitude, self.min_latitude),
            (self.min_longitude, self.min_latitude),
        ]
        return Polygon(
            [Point(lon, lat, self.altitude, coordinate_system) for lon, lat in corners],
            closure=RingClosure.CLOSE
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "maxLongitude": self.max_longitude,
            "maxLatitude": self.max_latitude,
            "minLongitude": self.min_longitude,
            "minLatitude": self.min_latitude,
        }


@dataclass(frozen=True)
class ConvergenceReport:
    """Outcome of an iterative solver.

    Attributes
    ----------
    solver : str
        Name of the solver that produced the report.
    iterations : int
        Number of iterations performed.
    residual : float
        Largest remaining correction at the last iteration.
    tolerance : float
        The stopping tolerance.
    converged : bool
        Whether the residual fell below the tolerance before the cap.
    """
    solver: str
    iterations: int
    residual: float
    tolerance: float
    converged: bool
