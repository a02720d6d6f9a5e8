"""
Geodetic Constants and Solver Settings.

This module provides the constants used by the datum, projection, measurement
and geoid code, each with its uncertainty bound and source. Iteration
tolerances and caps live in ``SolverSettings`` so callers can tune them
explicitly instead of relying on hidden module state.

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- CGCS2000 parameters: GB/T 18522 (China Geodetic Coordinate System 2000)
- Krasovsky 1940 ellipsoid: as used by the GCJ-02 obfuscation
- EGM96 15' grid: NGA/NASA WW15MGH
"""

from dataclasses import dataclass
from typing import Final
import numpy as np


@dataclass(frozen=True)
class Constant:
    """A constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


class GeodeticConstants:
    """Registry of constants used throughout the system.

    Reference Ellipsoids
    --------------------
    WGS84 and CGCS2000 share the semi-major axis and differ only in the
    flattening. The Krasovsky values are only used by the GCJ-02 warp.

    Spheres
    -------
    Measurement routines work on a sphere whose radius defaults to the
    WGS84 semi-major axis.
    """

    # =========================================================================
    # WGS84 Ellipsoid
    # =========================================================================

    WGS84_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    WGS84_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Flattening of WGS84 ellipsoid: f = (a - b) / a"
    )

    # =========================================================================
    # CGCS2000 Ellipsoid
    # =========================================================================

    CGCS2000_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="GB/T 18522",
        description="Semi-major axis of CGCS2000 ellipsoid"
    )

    CGCS2000_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257222101,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="GB/T 18522",
        description="Flattening of CGCS2000 ellipsoid"
    )

    # =========================================================================
    # GCJ-02 / BD-09
    # =========================================================================

    KRASOVSKY_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_245.0,
        uncertainty=0.0,
        unit="m",
        source="Krasovsky 1940",
        description="Semi-major axis used by the GCJ-02 radius-of-curvature scaling"
    )

    KRASOVSKY_ECCENTRICITY_SQUARED: Final[Constant] = Constant(
        value=0.00669342162296594323,
        uncertainty=0.0,
        unit="dimensionless",
        source="Krasovsky 1940",
        description="First eccentricity squared used by the GCJ-02 warp"
    )

    X_PI: Final[Constant] = Constant(
        value=np.pi * 3000.0 / 180.0,
        uncertainty=0.0,
        unit="rad/deg",
        source="BD-09 offset formula",
        description="Angular frequency of the BD-09 trigonometric correction"
    )

    BD09_LONGITUDE_OFFSET: Final[Constant] = Constant(
        value=0.0065,
        uncertainty=0.0,
        unit="deg",
        source="BD-09 offset formula",
        description="Constant longitude offset between GCJ-02 and BD-09"
    )

    BD09_LATITUDE_OFFSET: Final[Constant] = Constant(
        value=0.006,
        uncertainty=0.0,
        unit="deg",
        source="BD-09 offset formula",
        description="Constant latitude offset between GCJ-02 and BD-09"
    )

    # (min_lon, max_lon, min_lat, max_lat); outside it GCJ-02 equals WGS84
    CHINA_BOUNDS: Final[tuple] = (72.004, 137.8347, 0.8293, 55.8271)

    # =========================================================================
    # Measurement Spheres
    # =========================================================================

    EARTH_RADIUS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,
        unit="m",
        source="WGS84 semi-major axis",
        description="Default sphere radius for distance and area calculations"
    )

    BD_EARTH_RADIUS: Final[Constant] = Constant(
        value=6_370_996.81,
        uncertainty=0.0,
        unit="m",
        source="Baidu map API",
        description="Sphere radius used by Baidu map distance calculations"
    )

    # =========================================================================
    # Gauss-Krüger Projection
    # =========================================================================

    GK_FALSE_EASTING: Final[Constant] = Constant(
        value=500_000.0,
        uncertainty=0.0,
        unit="m",
        source="GB/T 17798",
        description="False easting added to Gauss-Krüger eastings"
    )

    # =========================================================================
    # EGM96 Geoid Grid
    # =========================================================================

    EGM96_ROWS: Final[int] = 721
    EGM96_COLUMNS: Final[int] = 1440
    EGM96_HEADER_BYTES: Final[int] = 1

    EGM96_INTERVAL: Final[Constant] = Constant(
        value=np.radians(15.0 / 60.0),
        uncertainty=0.0,
        unit="rad",
        source="NGA WW15MGH",
        description="Grid spacing of the EGM96 15-arc-minute geoid grid"
    )

    EGM96_VALUE_SCALE: Final[Constant] = Constant(
        value=0.01,
        uncertainty=0.0,
        unit="m per count",
        source="NGA WW15MGH",
        description="Stored undulations are integer centimeters"
    )


@dataclass(frozen=True)
class SolverSettings:
    """Tolerances and iteration caps for the iterative solvers.

    Attributes
    ----------
    gcj02_tolerance : float
        Per-axis stopping tolerance (degrees) of the GCJ-02 -> WGS84 inversion.
    gcj02_max_iterations : int
        Iteration cap of the GCJ-02 -> WGS84 inversion.
    bd09_tolerance : float
        Per-axis stopping tolerance (degrees) of the BD-09 -> GCJ-02 refinement.
    bd09_max_iterations : int
        Iteration cap of the BD-09 -> GCJ-02 refinement.
    latitude_tolerance : float
        Stopping tolerance (radians) of the footpoint and ECEF latitude solvers.
    latitude_max_iterations : int
        Iteration cap of the footpoint and ECEF latitude solvers.
    gk_zone_width : int
        Zone width (3 or 6 degrees) used when projecting CGCS2000 to GK.
    strict : bool
        If True, reaching an iteration cap raises ``ConvergenceError``
        instead of returning the best estimate with a warning.
    """
    gcj02_tolerance: float = 1e-7
    gcj02_max_iterations: int = 15
    bd09_tolerance: float = 1e-9
    bd09_max_iterations: int = 15
    latitude_tolerance: float = 1e-12
    latitude_max_iterations: int = 10
    gk_zone_width: int = 3
    strict: bool = False


DEFAULT_SOLVER_SETTINGS = SolverSettings()
