"""
Error taxonomy for the geodesy core.

Every error raised by this package derives from ``GeodesyError`` and also
from the closest built-in exception, so callers may catch either.
"""

from typing import Optional


class GeodesyError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(GeodesyError, ValueError):
    """A coordinate or geometry failed validation at construction time."""


class CoordinateRangeError(ValidationError):
    """A coordinate lies outside the domain accepted by an operation."""


class UnsupportedConversionError(GeodesyError):
    """No conversion is registered between two coordinate systems."""

    def __init__(self, source, target):
        self.source = source
        self.target = target
        super().__init__(
            f"Conversion from [{getattr(source, 'name', source)}] to "
            f"[{getattr(target, 'name', target)}] is not supported"
        )


class ConvergenceError(GeodesyError, ArithmeticError):
    """An iterative solver reached its iteration cap in strict mode."""

    def __init__(self, solver: str, report: Optional[object] = None):
        self.solver = solver
        self.report = report
        detail = f": {report}" if report is not None else ""
        super().__init__(f"{solver} did not converge{detail}")


class ConvergenceWarning(UserWarning):
    """An iterative solver returned its best estimate without converging."""


class ResourceError(GeodesyError, OSError):
    """The geoid grid is missing, unreadable, or was indexed out of bounds."""
