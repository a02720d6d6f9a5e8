"""
Coordinate Models for Ellipsoidal Earth Geometry.

This module implements the ellipsoid primitives shared by the datum and
projection code: radii of curvature, meridian arc length, and conversions
between geodetic and Earth-Centered Earth-Fixed (ECEF) coordinates.

Scientific Context
------------------
Domain: Geodesy, Earth geometry
Models: WGS84 and CGCS2000 (GRS80-like) reference ellipsoids

References
----------
- NIMA TR8350.2: WGS84 parameters
- GB/T 18522: CGCS2000 parameters
- Torge, W. (2001). Geodesy (3rd ed.). de Gruyter.
- Hofmann-Wellenhof, B. et al. (2008). GNSS: GPS, GLONASS, Galileo.
"""

from dataclasses import dataclass
from typing import Tuple
import numpy as np

from common.constants import GeodeticConstants, SolverSettings, DEFAULT_SOLVER_SETTINGS
from common.logging_config import get_logger, log_convergence
from common.types import ConvergenceReport, CoordinateSystem

logger = get_logger(__name__)


@dataclass(frozen=True)
class EllipsoidParameters:
    """Parameters defining a reference ellipsoid.

    Attributes
    ----------
    a : float
        Semi-major axis (equatorial radius) in meters.
    f : float
        Flattening: f = (a - b) / a
    name : str
        Identifier for the ellipsoid.

    Derived Parameters
    ------------------
    b : float
        Semi-minor axis (polar radius) in meters.
    e2 : float
        First eccentricity squared: e² = (a² - b²) / a²
    ep2 : float
        Second eccentricity squared: e'² = (a² - b²) / b²
    """
    a: float
    f: float
    name: str

    @property
    def b(self) -> float:
        """Semi-minor axis in meters."""
        return self.a * (1 - self.f)

    @property
    def e2(self) -> float:
        """First eccentricity squared."""
        return self.f * (2 - self.f)

    @property
    def ep2(self) -> float:
        """Second eccentricity squared."""
        return self.e2 / (1 - self.e2)


WGS84Ellipsoid = EllipsoidParameters(
    a=GeodeticConstants.WGS84_SEMI_MAJOR_AXIS.value,
    f=GeodeticConstants.WGS84_FLATTENING.value,
    name="WGS84"
)

CGCS2000Ellipsoid = EllipsoidParameters(
    a=GeodeticConstants.CGCS2000_SEMI_MAJOR_AXIS.value,
    f=GeodeticConstants.CGCS2000_FLATTENING.value,
    name="CGCS2000"
)

ELLIPSOIDS = {
    CoordinateSystem.WGS84: WGS84Ellipsoid,
    CoordinateSystem.CGCS2000: CGCS2000Ellipsoid,
}


def radius_of_curvature_meridian(
    latitude_rad: float,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid
) -> float:
    """Compute the radius of curvature in the meridian plane.

    Parameters
    ----------
    latitude_rad : float
        Geodetic latitude in radians.
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).

    Returns
    -------
    float
        Radius of curvature M in meters.

    Notes
    -----
    M = a(1 - e²) / (1 - e² sin²φ)^(3/2)
    """
    sin_lat = np.sin(latitude_rad)
    denominator = (1 - ellipsoid.e2 * sin_lat**2) ** 1.5
    return ellipsoid.a * (1 - ellipsoid.e2) / denominator


def radius_of_curvature_prime_vertical(
    latitude_rad: float,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid
) -> float:
    """Compute the radius of curvature in the prime vertical.

    Parameters
    ----------
    latitude_rad : float
        Geodetic latitude in radians.
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).

    Returns
    -------
    float
        Radius of curvature N in meters.

    Notes
    -----
    N = a / (1 - e² sin²φ)^(1/2)
    """
    sin_lat = np.sin(latitude_rad)
    denominator = np.sqrt(1 - ellipsoid.e2 * sin_lat**2)
    return ellipsoid.a / denominator


def _meridian_arc_coefficients(ellipsoid: EllipsoidParameters) -> Tuple[float, ...]:
    e2 = ellipsoid.e2
    m0 = ellipsoid.a * (1 - e2)
    m2 = 1.5 * e2 * m0
    m4 = 1.25 * e2 * m2
    m6 = 7.0 / 6.0 * e2 * m4
    m8 = 9.0 / 8.0 * e2 * m6

    a0 = m0 + m2 / 2 + 3 * m4 / 8 + 5 * m6 / 16 + 35 * m8 / 128
    a2 = m2 / 2 + m4 / 2 + 15 * m6 / 32 + 7 * m8 / 16
    a4 = m4 / 8 + 3 * m6 / 16 + 7 * m8 / 32
    a6 = m6 / 32 + m8 / 16
    a8 = m8 / 128
    return a0, a2, a4, a6, a8


def meridian_arc_length(
    latitude_rad: float,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid
) -> float:
    """Compute the meridian arc length from the equator.

    Parameters
    ----------
    latitude_rad : float
        Geodetic latitude in radians.
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).

    Returns
    -------
    float
        Arc length along the meridian in meters (negative south of the
        equator).

    Notes
    -----
    Series expansion in e² truncated after the e⁸ term:

    X = a0 φ - a2/2 sin 2φ + a4/4 sin 4φ - a6/6 sin 6φ + a8/8 sin 8φ

    The truncation error is below 0.1 mm for the WGS84/CGCS2000 ellipsoids.
    """
    a0, a2, a4, a6, a8 = _meridian_arc_coefficients(ellipsoid)
    phi = latitude_rad
    return (
        a0 * phi
        - a2 / 2 * np.sin(2 * phi)
        + a4 / 4 * np.sin(4 * phi)
        - a6 / 6 * np.sin(6 * phi)
        + a8 / 8 * np.sin(8 * phi)
    )


def footpoint_latitude(
    arc_length_m: float,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> Tuple[float, ConvergenceReport]:
    """Solve the latitude whose meridian arc length equals ``arc_length_m``.

    Newton refinement: φ ← φ + (X - X(φ)) / M(φ), started from X / a0.

    Parameters
    ----------
    arc_length_m : float
        Meridian arc length in meters.
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).
    settings : SolverSettings
        Tolerance (radians), iteration cap and strictness.

    Returns
    -------
    Tuple[float, ConvergenceReport]
        (footpoint latitude in radians, solver report)
    """
    a0 = _meridian_arc_coefficients(ellipsoid)[0]
    latitude_rad = arc_length_m / a0
    residual = np.inf
    iterations = 0

    for iterations in range(1, settings.latitude_max_iterations + 1):
        correction = (
            (arc_length_m - meridian_arc_length(latitude_rad, ellipsoid))
            / radius_of_curvature_meridian(latitude_rad, ellipsoid)
        )
        latitude_rad += correction
        residual = abs(correction)
        if residual < settings.latitude_tolerance:
            break

    report = ConvergenceReport(
        solver="footpoint_latitude",
        iterations=iterations,
        residual=float(residual),
        tolerance=settings.latitude_tolerance,
        converged=residual < settings.latitude_tolerance
    )
    log_convergence(logger, report, strict=settings.strict)
    return float(latitude_rad), report


def geodetic_to_ecef(
    latitude_rad: float,
    longitude_rad: float,
    altitude_m: float = 0.0,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid
) -> Tuple[float, float, float]:
    """Convert geodetic coordinates to Earth-Centered Earth-Fixed (ECEF).

    Parameters
    ----------
    latitude_rad : float
        Geodetic latitude in radians.
    longitude_rad : float
        Geodetic longitude in radians.
    altitude_m : float
        Height above ellipsoid in meters.
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).

    Returns
    -------
    Tuple[float, float, float]
        (X, Y, Z) coordinates in meters in ECEF frame.

    Notes
    -----
    The ECEF frame has:
    - Origin at Earth's center of mass
    - X-axis through the prime meridian (0° longitude) at equator
    - Y-axis through 90°E at equator
    - Z-axis through the North Pole
    """
    sin_lat = np.sin(latitude_rad)
    cos_lat = np.cos(latitude_rad)
    sin_lon = np.sin(longitude_rad)
    cos_lon = np.cos(longitude_rad)

    N = radius_of_curvature_prime_vertical(latitude_rad, ellipsoid)

    X = (N + altitude_m) * cos_lat * cos_lon
    Y = (N + altitude_m) * cos_lat * sin_lon
    Z = (N * (1 - ellipsoid.e2) + altitude_m) * sin_lat

    return float(X), float(Y), float(Z)


def ecef_to_geodetic(
    X: float,
    Y: float,
    Z: float,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> Tuple[float, float, float]:
    """Convert ECEF coordinates to geodetic (latitude, longitude, altitude).

    Parameters
    ----------
    X, Y, Z : float
        ECEF coordinates in meters.
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).
    settings : SolverSettings
        Tolerance (radians), iteration cap and strictness.

    Returns
    -------
    Tuple[float, float, float]
        (latitude_rad, longitude_rad, altitude_m)

    Notes
    -----
    The latitude is refined iteratively, typically in 2-3 iterations for
    points near the surface. On the polar axis (planar distance exactly
    zero) the result is computed directly.
    """
    longitude_rad = np.arctan2(Y, X)

    # Distance from Z-axis
    p = np.hypot(X, Y)

    if p == 0.0:
        latitude_rad = np.copysign(np.pi / 2, Z)
        altitude_m = np.abs(Z) - ellipsoid.b
        return float(latitude_rad), float(longitude_rad), float(altitude_m)

    latitude_rad = np.arctan2(Z, p * (1 - ellipsoid.e2))
    residual = np.inf
    iterations = 0

    for iterations in range(1, settings.latitude_max_iterations + 1):
        sin_lat = np.sin(latitude_rad)
        N = radius_of_curvature_prime_vertical(latitude_rad, ellipsoid)

        latitude_new = np.arctan2(Z + ellipsoid.e2 * N * sin_lat, p)
        residual = np.abs(latitude_new - latitude_rad)
        latitude_rad = latitude_new

        if residual < settings.latitude_tolerance:
            break

    log_convergence(logger, ConvergenceReport(
        solver="ecef_to_geodetic",
        iterations=iterations,
        residual=float(residual),
        tolerance=settings.latitude_tolerance,
        converged=residual < settings.latitude_tolerance
    ), strict=settings.strict)

    sin_lat = np.sin(latitude_rad)
    cos_lat = np.cos(latitude_rad)
    N = radius_of_curvature_prime_vertical(latitude_rad, ellipsoid)

    if np.abs(cos_lat) > 1e-10:
        altitude_m = p / cos_lat - N
    else:
        altitude_m = np.abs(Z) / np.abs(sin_lat) - N * (1 - ellipsoid.e2)

    return float(latitude_rad), float(longitude_rad), float(altitude_m)
