"""
Gauss-Krüger Projection.

This module projects CGCS2000 geodetic coordinates onto zoned Gauss-Krüger
(transverse Mercator, unit scale on the central meridian) plane
coordinates and back, using the classical series expansions of the
Chinese national grid.

Scientific Context
------------------
Domain: Cartography, mathematical geodesy
Model: Conformal transverse Mercator on the CGCS2000 ellipsoid

Zone Conventions
----------------
- 6° zones: zone = floor(L / 6) + 1, central meridian L0 = 6·zone - 3
- 3° zones: zone = floor((L - 1.5) / 3) + 1, central meridian L0 = 3·zone;
  the strip [358.5, 360) ∪ [0, 1.5) is zone 120 (L0 = 360 ≡ 0)

Eastings carry a 500 000 m false easting; the zone number is kept
separately rather than prefixed to the easting.

Accuracy
--------
The series are accurate to better than 1 mm within 3° of the central
meridian. Beyond that the truncation error grows quickly.

References
----------
- GB/T 17798-2007: Geospatial data transfer format
- Kong, X. et al. (2005). Foundation of Geodesy. Wuhan University Press.
"""

from abc import ABC, abstractmethod
import math
from typing import Tuple
import numpy as np

from common.constants import GeodeticConstants, SolverSettings, DEFAULT_SOLVER_SETTINGS
from common.exceptions import ValidationError
from common.logging_config import get_logger
from common.types import CoordinateSystem, GaussKrugerPoint, Point
from geospatial.coordinate_models import (
    EllipsoidParameters,
    CGCS2000Ellipsoid,
    meridian_arc_length,
    footpoint_latitude,
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
)

logger = get_logger(__name__)

FALSE_EASTING = GeodeticConstants.GK_FALSE_EASTING.value


def _check_zone_width(zone_width: int) -> None:
    if zone_width not in (3, 6):
        raise ValidationError(f"Zone width must be 3 or 6 degrees, got {zone_width!r}")


def zone_for_longitude(longitude_deg: float, zone_width: int = 3) -> int:
    """Return the zone number enclosing a longitude.

    Parameters
    ----------
    longitude_deg : float
        Longitude in degrees east, [0, 360).
    zone_width : int
        3 or 6 degrees.
    """
    _check_zone_width(zone_width)
    if zone_width == 6:
        return int(math.floor(longitude_deg / 6.0)) % 60 + 1
    # [0, 1.5) wraps into zone 120 with [358.5, 360)
    return int(math.floor((longitude_deg - 1.5) / 3.0)) % 120 + 1


def central_meridian(zone: int, zone_width: int = 3) -> float:
    """Return the central meridian (degrees) of a zone."""
    _check_zone_width(zone_width)
    if zone_width == 6:
        return 6.0 * zone - 3.0
    return 3.0 * zone


class ProjectionAdapter(ABC):
    """Abstract base class for map projection adapters.

    All projections in this system must implement this interface to
    ensure consistent handling of coordinates.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the projection."""
        pass

    @abstractmethod
    def proj4_string(self, zone: int) -> str:
        """PROJ.4 definition string of one zone."""
        pass

    @abstractmethod
    def to_projected(
        self,
        lat_rad: float,
        lon_rad: float
    ) -> Tuple[float, float, int]:
        """Transform geodetic coordinates to projected coordinates.

        Parameters
        ----------
        lat_rad, lon_rad : float
            Geodetic coordinates in radians.

        Returns
        -------
        Tuple[float, float, int]
            (easting, northing, zone), easting and northing in meters.
        """
        pass

    @abstractmethod
    def to_geodetic(
        self,
        easting: float,
        northing: float,
        zone: int
    ) -> Tuple[float, float]:
        """Transform projected coordinates to geodetic.

        Returns
        -------
        Tuple[float, float]
            (lat_rad, lon_rad) geodetic coordinates in radians.
        """
        pass


class GaussKruger(ProjectionAdapter):
    """Gauss-Krüger projection in 3° or 6° zones.

    Parameters
    ----------
    zone_width : int
        Zone width in degrees (3 or 6).
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: CGCS2000).
    settings : SolverSettings
        Controls the footpoint latitude solver of the inverse projection.
    """

    def __init__(
        self,
        zone_width: int = 3,
        ellipsoid: EllipsoidParameters = CGCS2000Ellipsoid,
        settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
    ):
        _check_zone_width(zone_width)
        self._zone_width = zone_width
        self._ellipsoid = ellipsoid
        self._settings = settings

    @property
    def name(self) -> str:
        return f"Gauss-Krüger {self._zone_width}° ({self._ellipsoid.name})"

    @property
    def zone_width(self) -> int:
        return self._zone_width

    def proj4_string(self, zone: int) -> str:
        return (
            f"+proj=tmerc +lat_0=0 +lon_0={central_meridian(zone, self._zone_width):g} "
            f"+k=1 +x_0={FALSE_EASTING:g} +y_0=0 "
            f"+a={self._ellipsoid.a!r} +rf={1.0 / self._ellipsoid.f!r} "
            "+units=m +no_defs"
        )

    def to_projected(self, lat_rad: float, lon_rad: float) -> Tuple[float, float, int]:
        lon_deg = float(np.degrees(lon_rad)) % 360.0
        zone = zone_for_longitude(lon_deg, self._zone_width)
        L0 = np.radians(central_meridian(zone, self._zone_width))

        # Longitude difference in (-π, π]
        l = (np.radians(lon_deg) - L0 + np.pi) % (2 * np.pi) - np.pi

        B = lat_rad
        sin_B = np.sin(B)
        cos_B = np.cos(B)
        t = np.tan(B)
        t2 = t * t
        eta2 = self._ellipsoid.ep2 * cos_B**2
        N = radius_of_curvature_prime_vertical(B, self._ellipsoid)
        X = meridian_arc_length(B, self._ellipsoid)

        lc = l * cos_B
        lc2 = lc * lc

        northing = X + N * sin_B * cos_B * l**2 / 2 * (
            1
            + lc2 / 12 * (5 - t2 + 9 * eta2 + 4 * eta2**2)
            + lc2**2 / 360 * (61 - 58 * t2 + t2**2)
        )
        easting = N * lc * (
            1
            + lc2 / 6 * (1 - t2 + eta2)
            + lc2**2 / 120 * (5 - 18 * t2 + t2**2 + 14 * eta2 - 58 * eta2 * t2)
        )

        return float(easting + FALSE_EASTING), float(northing), zone

    def to_geodetic(self, easting: float, northing: float, zone: int) -> Tuple[float, float]:
        L0 = np.radians(central_meridian(zone, self._zone_width))
        y = easting - FALSE_EASTING

        Bf, _ = footpoint_latitude(northing, self._ellipsoid, self._settings)

        cos_Bf = np.cos(Bf)
        tf = np.tan(Bf)
        tf2 = tf * tf
        eta2 = self._ellipsoid.ep2 * cos_Bf**2
        Nf = radius_of_curvature_prime_vertical(Bf, self._ellipsoid)
        Mf = radius_of_curvature_meridian(Bf, self._ellipsoid)

        u = y / Nf
        u2 = u * u

        B = Bf - tf * y * y / (2 * Mf * Nf) * (
            1
            - u2 / 12 * (5 + 3 * tf2 + eta2 - 9 * eta2 * tf2)
            + u2**2 / 360 * (61 + 90 * tf2 + 45 * tf2**2)
        )
        l = u / cos_Bf * (
            1
            - u2 / 6 * (1 + 2 * tf2 + eta2)
            + u2**2 / 120 * (5 + 28 * tf2 + 24 * tf2**2 + 6 * eta2 + 8 * eta2 * tf2)
        )

        return float(B), float(L0 + l)


def cgcs2000_to_gk(
    point: Point,
    zone_width: int = 3,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> GaussKrugerPoint:
    """Project a CGCS2000 point onto its Gauss-Krüger zone.

    Parameters
    ----------
    point : Point
        CGCS2000 geodetic point.
    zone_width : int
        3 or 6 degrees.

    Returns
    -------
    GaussKrugerPoint
        Plane coordinates; the altitude is carried unchanged.

    Raises
    ------
    ValidationError
        If the point is not tagged CGCS2000.
    """
    if point.coordinate_system is not CoordinateSystem.CGCS2000:
        raise ValidationError(
            f"Gauss-Krüger projection expects a CGCS2000 point, got {point.coordinate_system.name}"
        )

    projection = GaussKruger(zone_width, settings=settings)
    easting, northing, zone = projection.to_projected(
        np.radians(point.latitude), np.radians(point.longitude)
    )
    logger.debug(f"{projection.name}: zone {zone}, E={easting:.3f} N={northing:.3f}")
    return GaussKrugerPoint(
        easting=easting,
        northing=northing,
        zone=zone,
        zone_width=zone_width,
        altitude=point.altitude
    )


def gk_to_cgcs2000(
    point: GaussKrugerPoint,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> Point:
    """Recover CGCS2000 geodetic coordinates from a Gauss-Krüger point."""
    projection = GaussKruger(point.zone_width, settings=settings)
    lat_rad, lon_rad = projection.to_geodetic(point.easting, point.northing, point.zone)
    return Point(
        float(np.degrees(lon_rad)),
        float(np.degrees(lat_rad)),
        point.altitude,
        CoordinateSystem.CGCS2000
    )
