"""
Mathematical utility functions for the simulation engine.
Uses numpy so that NaN and infinite values pass through unchanged.
"""

from typing import Optional
import numpy as np


# Floor applied to physical capacities (time constants, masses, inertias,
# resistances, inductances).
POSITIVE_FLOOR = 1e-6


def clamp(value: float, min_val: Optional[float], max_val: Optional[float]) -> float:
    """Clamp a value between minimum and maximum bounds (NaN stays NaN)."""
    if min_val is None and max_val is None:
        return float(value)
    return float(np.clip(value, min_val, max_val))


def positive_floor(value: float, floor: float = POSITIVE_FLOOR) -> float:
    """Raise a value to at least ``floor``."""
    return float(max(floor, value))


def sign(x: float) -> float:
    """Return sign of x: -1.0, 0.0 or 1.0 (NaN for NaN)."""
    return float(np.sign(x))
