"""
Step-response metrics for closed-loop runs.
Uses numpy for vectorized threshold and band checks.
"""

from typing import Dict, Optional, Iterable, Any
from dataclasses import dataclass, asdict
import math
import numpy as np


# Guard for the overshoot denominator when the setpoint is near zero
OVERSHOOT_EPS = 1e-9

# Settling band as a fraction of max(1, |setpoint|)
SETTLING_TOLERANCE = 0.02


@dataclass(frozen=True)
class StepResponseMetrics:
    """Metrics from step response analysis; None when undefined."""
    overshoot_percent: Optional[float] = None
    rise_time: Optional[float] = None
    settling_time: Optional[float] = None
    final_value: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


class PerformanceMetrics:
    """Step response metrics calculator using numpy."""

    def __init__(
        self,
        rise_low: float = 0.1,
        rise_high: float = 0.9,
        settling_tolerance: float = SETTLING_TOLERANCE
    ):
        """
        Args:
            rise_low: Lower rise-time threshold as a fraction of the setpoint
            rise_high: Upper rise-time threshold as a fraction of the setpoint
            settling_tolerance: Band half-width as a fraction of max(1, |setpoint|)
        """
        self._rise_low = rise_low
        self._rise_high = rise_high
        self._tolerance = settling_tolerance

    def calculate_step_response_metrics(
        self,
        timestamps: np.ndarray,
        outputs: np.ndarray,
        setpoint: float = 1.0
    ) -> StepResponseMetrics:
        """
        Calculate step response metrics.

        Args:
            timestamps: Sample times
            outputs: True plant output at each sample
            setpoint: Target value

        Returns:
            StepResponseMetrics (all None for an empty series)
        """
        t = np.asarray(timestamps, dtype=float)
        y = np.asarray(outputs, dtype=float)

        if len(y) == 0:
            return StepResponseMetrics()
        if len(t) != len(y):
            raise ValueError("timestamps and outputs must have the same length")

        return StepResponseMetrics(
            overshoot_percent=self._overshoot(y, setpoint),
            rise_time=self._rise_time(t, y, setpoint),
            settling_time=self._settling_time(t, y, setpoint),
            final_value=float(y[-1]),
        )

    @staticmethod
    def _overshoot(y: np.ndarray, setpoint: float) -> Optional[float]:
        overshoot = (np.max(y) - setpoint) / max(OVERSHOOT_EPS, abs(setpoint)) * 100
        return float(overshoot) if math.isfinite(overshoot) else None

    def _rise_time(self, t: np.ndarray, y: np.ndarray, setpoint: float) -> Optional[float]:
        """Time between the first rising crossings of the low and high thresholds."""
        low = self._rise_low * setpoint
        high = self._rise_high * setpoint

        prev, cur = y[:-1], y[1:]
        high_crossings = np.flatnonzero((prev < high) & (cur >= high))
        if len(high_crossings) == 0:
            return None

        # Only low crossings up to (and including) the first high crossing count
        i_high = high_crossings[0] + 1
        low_crossings = np.flatnonzero((prev[:i_high] < low) & (cur[:i_high] >= low))
        if len(low_crossings) == 0:
            return None

        i_low = low_crossings[0] + 1
        return float(t[i_high] - t[i_low])

    def _settling_time(self, t: np.ndarray, y: np.ndarray, setpoint: float) -> Optional[float]:
        """First time after which the output stays inside the band."""
        band = self._tolerance * max(1.0, abs(setpoint))
        within = np.abs(y - setpoint) <= band

        outside = np.flatnonzero(~within)
        if len(outside) == 0:
            return float(t[0])

        last_outside = outside[-1]
        if last_outside == len(y) - 1:
            return None
        return float(t[last_outside + 1])


def compute_step_metrics(samples: Iterable[Any], setpoint: float = 1.0) -> StepResponseMetrics:
    """
    Calculate step metrics from a sequence of samples.

    Args:
        samples: Objects with ``t`` and ``y_true`` attributes
        setpoint: Target value

    Returns:
        StepResponseMetrics
    """
    samples = list(samples)
    timestamps = np.array([s.t for s in samples], dtype=float)
    outputs = np.array([s.y_true for s in samples], dtype=float)
    return PerformanceMetrics().calculate_step_response_metrics(timestamps, outputs, setpoint)
