"""
Validation utilities for parameter checking.
Every failure is reported as a ConfigurationError before a run starts.
"""

from typing import Any, Optional
import math
import numbers


class ConfigurationError(ValueError):
    """Invalid or out-of-domain configuration detected before a run."""
    pass


def validate_real(value: Any, name: str) -> float:
    """
    Validate that a value is a real number (bools are rejected).

    Args:
        value: The value to validate
        name: Parameter name for error messages

    Returns:
        The value as float

    Raises:
        ConfigurationError: If value is not a real number
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(
            f"{name} must be a real number, got {type(value).__name__}"
        )
    return float(value)


def validate_positive(value: Any, name: str) -> float:
    """
    Validate that a value is strictly positive and finite.

    Args:
        value: The value to validate
        name: Parameter name for error messages

    Returns:
        The validated value

    Raises:
        ConfigurationError: If value is not positive
    """
    value = validate_real(value, name)
    if not value > 0 or math.isinf(value):
        raise ConfigurationError(f"{name} must be positive and finite, got {value}")
    return value


def validate_finite(value: Any, name: str) -> float:
    """Validate that a value is a real number other than NaN or infinity."""
    value = validate_real(value, name)
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")
    return value


def validate_non_negative(value: Any, name: str) -> float:
    """
    Validate that a value is non-negative (>= 0).

    Raises:
        ConfigurationError: If value is negative or NaN
    """
    value = validate_real(value, name)
    if not value >= 0:
        raise ConfigurationError(f"{name} must be non-negative, got {value}")
    return value


def validate_limits(
    lower: Optional[float],
    upper: Optional[float],
    name: str = "output"
) -> tuple:
    """
    Validate a (lower, upper) bound pair; None means unbounded.

    Infinite bounds are allowed. Equal bounds are allowed and pin the
    signal to a single value.

    Returns:
        Tuple of floats (lower, upper)

    Raises:
        ConfigurationError: If lower > upper or either bound is NaN
    """
    lower = -math.inf if lower is None else validate_real(lower, f"{name}_min")
    upper = math.inf if upper is None else validate_real(upper, f"{name}_max")

    if math.isnan(lower) or math.isnan(upper):
        raise ConfigurationError(f"{name} limits must not be NaN")
    if lower > upper:
        raise ConfigurationError(
            f"{name}_min must not exceed {name}_max, got [{lower}, {upper}]"
        )
    return lower, upper
