"""
Common utilities and infrastructure for the geodesy core.

This package provides foundational components used across all modules:
- Geodetic constants with provenance, and solver settings
- Immutable position and geometry types
- Error taxonomy
- Unit registry for distances and angles
- Logging and convergence reporting
"""

from common.constants import GeodeticConstants, SolverSettings, DEFAULT_SOLVER_SETTINGS
from common.exceptions import (
    GeodesyError,
    ValidationError,
    CoordinateRangeError,
    UnsupportedConversionError,
    ConvergenceError,
    ConvergenceWarning,
    ResourceError,
)
from common.types import (
    CoordinateSystem,
    Direction,
    Location,
    RingClosure,
    Point,
    GaussKrugerPoint,
    LineString,
    Polygon,
    RangePoint,
    ConvergenceReport,
)
from common.units import ureg, Q_, magnitude_in
from common.logging_config import get_logger, log_convergence

__all__ = [
    "GeodeticConstants",
    "SolverSettings",
    "DEFAULT_SOLVER_SETTINGS",
    "GeodesyError",
    "ValidationError",
    "CoordinateRangeError",
    "UnsupportedConversionError",
    "ConvergenceError",
    "ConvergenceWarning",
    "ResourceError",
    "CoordinateSystem",
    "Direction",
    "Location",
    "RingClosure",
    "Point",
    "GaussKrugerPoint",
    "LineString",
    "Polygon",
    "RangePoint",
    "ConvergenceReport",
    "ureg",
    "Q_",
    "magnitude_in",
    "get_logger",
    "log_convergence",
]
