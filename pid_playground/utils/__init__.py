"""Utility functions and helpers."""

from pid_playground.utils.validators import (
    ConfigurationError,
    validate_real,
    validate_finite,
    validate_positive,
    validate_non_negative,
    validate_limits,
)
from pid_playground.utils.math_utils import clamp, positive_floor, sign

__all__ = [
    "ConfigurationError",
    "validate_real",
    "validate_finite",
    "validate_positive",
    "validate_non_negative",
    "validate_limits",
    "clamp",
    "positive_floor",
    "sign",
]
