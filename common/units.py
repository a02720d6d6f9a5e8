"""
Unit Registry for Distances and Angles.

This module provides a centralized unit system using the `pint` library.
Distance-like arguments of the measurement routines (distances, sphere
radii) accept either bare numbers, taken as meters, or pint quantities in
any length unit. Angular survey parameters (arc-seconds, ppm) are converted
through the same registry.

Example Usage
-------------
>>> from common.units import Q_, magnitude_in
>>> magnitude_in(Q_(1.5, 'km'), 'm')
1500.0
"""

from functools import wraps
import inspect
from typing import Callable, Union

import pint
from pint import UnitRegistry as PintUnitRegistry

from common.exceptions import ValidationError

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity

Measure = Union[float, int, pint.Quantity]


def magnitude_in(value: Measure, unit: str) -> float:
    """Return the magnitude of ``value`` expressed in ``unit``.

    Parameters
    ----------
    value : float or pint.Quantity
        A bare number (already in ``unit``) or a quantity.
    unit : str
        Target unit string (e.g. 'm', 'radian').

    Returns
    -------
    float
        The magnitude in the target unit.

    Raises
    ------
    ValidationError
        If the quantity's dimensionality is incompatible with ``unit``.
    """
    if isinstance(value, pint.Quantity):
        try:
            return float(value.to(unit).magnitude)
        except pint.DimensionalityError as e:
            raise ValidationError(
                f"Expected a quantity compatible with {unit}, got {value.units}"
            ) from e
    return float(value)


def validate_units(expected_units: dict[str, str]):
    """Decorator to validate units of quantity-valued arguments.

    Arguments given as bare numbers pass through untouched; arguments given
    as pint quantities must be convertible to the expected unit.

    Parameters
    ----------
    expected_units : dict[str, str]
        Mapping from argument names to expected unit strings.

    Examples
    --------
    >>> @validate_units({'dist': 'm'})
    ... def shift(point, dist):
    ...     return magnitude_in(dist, 'm')
    """
    def decorator(func: Callable) -> Callable:
        sig = inspect.signature(func)

        @wraps(func)
        def wrapper(*args, **kwargs):
            bound = sig.bind(*args, **kwargs)
            bound.apply_defaults()

            for param_name, expected_unit in expected_units.items():
                if param_name not in bound.arguments:
                    continue
                value = bound.arguments[param_name]
                if isinstance(value, pint.Quantity):
                    try:
                        value.to(expected_unit)
                    except pint.DimensionalityError as e:
                        raise ValidationError(
                            f"Parameter '{param_name}' has incompatible units. "
                            f"Expected {expected_unit}, got {value.units}"
                        ) from e

            return func(*args, **kwargs)
        return wrapper
    return decorator
