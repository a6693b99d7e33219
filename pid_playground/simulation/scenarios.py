"""
Experiment setups for closed-loop runs.
Defines the time grid, the reference waveform and measurement noise.
"""

from dataclasses import dataclass, fields, replace
from typing import Optional, Dict, Any
from enum import Enum
import json
import math
import numbers
import numpy as np

from pid_playground.utils.math_utils import sign
from pid_playground.utils.validators import (
    ConfigurationError,
    validate_finite,
    validate_positive,
    validate_non_negative,
)


class ReferenceType(Enum):
    """Types of reference waveforms."""
    STEP = "step"
    SINE = "sine"
    SQUARE = "square"


@dataclass
class ExperimentSetup:
    """
    Defines a complete experiment.

    Specifies timing, reference waveform and measurement noise. A run
    produces ``n_steps + 1`` samples at t = 0, dt, 2*dt, ...
    """

    name: str = "Experiment"
    duration: float = 10.0
    sample_time: float = 0.01

    # Reference configuration
    setpoint: float = 1.0  # Amplitude of the reference
    reference_type: ReferenceType = ReferenceType.STEP
    frequency: float = 0.5  # Hz, sine and square only

    # Noise configuration
    measurement_noise_std: float = 0.0
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate the setup."""
        self.duration = validate_positive(self.duration, "duration")
        self.sample_time = validate_positive(self.sample_time, "sample_time")
        self.setpoint = validate_finite(self.setpoint, "setpoint")
        self.frequency = validate_finite(self.frequency, "frequency")
        self.measurement_noise_std = validate_non_negative(
            self.measurement_noise_std, "measurement_noise_std"
        )

        if not isinstance(self.reference_type, ReferenceType):
            try:
                self.reference_type = ReferenceType(self.reference_type)
            except ValueError:
                raise ConfigurationError(
                    f"Unknown reference type {self.reference_type!r}"
                ) from None

        if self.seed is not None and (
            isinstance(self.seed, bool) or not isinstance(self.seed, numbers.Integral)
        ):
            raise ConfigurationError(f"seed must be an integer or None, got {self.seed!r}")

    @property
    def n_steps(self) -> int:
        """Number of integration steps, floor(T / dt)."""
        return int(math.floor(self.duration / self.sample_time))

    @property
    def n_samples(self) -> int:
        """Number of recorded samples including t = 0."""
        return self.n_steps + 1

    @property
    def metric_setpoint(self) -> float:
        """Target used for step metrics: the amplitude for steps, 1.0 otherwise."""
        if self.reference_type == ReferenceType.STEP:
            return self.setpoint
        return 1.0

    def get_reference(self, t: float) -> float:
        """
        Get reference value at time t.

        Args:
            t: Current time

        Returns:
            Reference value
        """
        if self.reference_type == ReferenceType.STEP:
            return self.setpoint

        phase = np.sin(2 * np.pi * self.frequency * t)
        if self.reference_type == ReferenceType.SINE:
            return float(self.setpoint * phase)

        return self.setpoint * sign(phase)

    def copy(self, **changes) -> 'ExperimentSetup':
        """Create a copy with optional changes."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data['reference_type'] = self.reference_type.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExperimentSetup':
        """Create from dictionary; unknown keys raise ConfigurationError."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown experiment fields: {sorted(unknown)}")
        return cls(**data)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> 'ExperimentSetup':
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))


class ScenarioLibrary:
    """Pre-defined experiments."""

    @staticmethod
    def step_response(
        setpoint: float = 1.0,
        duration: float = 10.0,
        sample_time: float = 0.01
    ) -> ExperimentSetup:
        """Basic step response test."""
        return ExperimentSetup(
            name="Step Response",
            duration=duration,
            sample_time=sample_time,
            setpoint=setpoint,
            reference_type=ReferenceType.STEP
        )

    @staticmethod
    def sine_tracking(
        amplitude: float = 1.0,
        frequency: float = 0.5,
        duration: float = 10.0,
        sample_time: float = 0.01
    ) -> ExperimentSetup:
        """Sinusoidal reference tracking."""
        return ExperimentSetup(
            name="Sine Tracking",
            duration=duration,
            sample_time=sample_time,
            setpoint=amplitude,
            reference_type=ReferenceType.SINE,
            frequency=frequency
        )

    @staticmethod
    def square_wave(
        amplitude: float = 1.0,
        frequency: float = 0.5,
        duration: float = 10.0,
        sample_time: float = 0.01
    ) -> ExperimentSetup:
        """Square wave reference between -amplitude and +amplitude."""
        return ExperimentSetup(
            name="Square Wave",
            duration=duration,
            sample_time=sample_time,
            setpoint=amplitude,
            reference_type=ReferenceType.SQUARE,
            frequency=frequency
        )

    @staticmethod
    def noise_rejection(
        setpoint: float = 1.0,
        noise_std: float = 0.05,
        seed: Optional[int] = 0,
        duration: float = 10.0,
        sample_time: float = 0.01
    ) -> ExperimentSetup:
        """Step response with measurement noise."""
        return ExperimentSetup(
            name="Noise Rejection",
            duration=duration,
            sample_time=sample_time,
            setpoint=setpoint,
            reference_type=ReferenceType.STEP,
            measurement_noise_std=noise_std,
            seed=seed
        )
