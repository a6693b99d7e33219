"""
PID Controller Parameters Configuration.
Encapsulates all PID settings in a validated, immutable-friendly structure.
"""

from dataclasses import dataclass, fields, replace
from typing import Dict, Any, Optional, Union
import json
import math

from pid_playground.plants import PlantType, parse_plant_type
from pid_playground.utils.validators import (
    ConfigurationError,
    validate_real,
    validate_positive,
    validate_limits,
)


@dataclass
class PIDParams:
    """
    PID Controller Parameters.

    Gains, derivative filter bandwidth, actuator limits and the
    anti-windup switch. A controller never changes its parameters during
    a run; build a new controller to use new ones.
    """

    # Core gains
    kp: float = 1.0  # Proportional gain
    ki: float = 0.0  # Integral gain
    kd: float = 0.0  # Derivative gain

    # Derivative low-pass bandwidth N (larger = less filtering)
    derivative_filter_n: float = 50.0

    # Actuator limits, infinite when unbounded
    output_min: float = -math.inf
    output_max: float = math.inf

    # Conditional integration while saturated
    anti_windup: bool = True

    # Sample time
    sample_time: float = 0.01

    def __post_init__(self):
        """Validate parameters after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate all parameters, normalizing numbers to float."""
        self.kp = validate_real(self.kp, "kp")
        self.ki = validate_real(self.ki, "ki")
        self.kd = validate_real(self.kd, "kd")
        self.derivative_filter_n = validate_positive(
            self.derivative_filter_n, "derivative_filter_n"
        )
        self.sample_time = validate_positive(self.sample_time, "sample_time")
        self.output_min, self.output_max = validate_limits(
            self.output_min, self.output_max, "output"
        )
        if not isinstance(self.anti_windup, bool):
            raise ConfigurationError(
                f"anti_windup must be a bool, got {type(self.anti_windup).__name__}"
            )

    @property
    def filter_unstable(self) -> bool:
        """True when N*dt >= 2, where the forward-Euler filter diverges."""
        return self.derivative_filter_n * self.sample_time >= 2.0

    def copy(self, **changes) -> 'PIDParams':
        """
        Create a copy with optional parameter changes.

        Args:
            **changes: Parameters to override

        Returns:
            New PIDParams instance
        """
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for serialization.

        Infinite limits are written as None so the result is valid JSON.
        """
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        for key in ('output_min', 'output_max'):
            if math.isinf(data[key]):
                data[key] = None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PIDParams':
        """
        Create from dictionary.

        None limits mean unbounded; unknown keys raise ConfigurationError.
        """
        data = dict(data)
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown PID parameters: {sorted(unknown)}")

        if data.get('output_min', 0.0) is None:
            data['output_min'] = -math.inf
        if data.get('output_max', 0.0) is None:
            data['output_max'] = math.inf

        return cls(**data)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> 'PIDParams':
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))

    def __str__(self) -> str:
        """Human-readable string representation."""
        return (
            f"PIDParams(Kp={self.kp:.4f}, Ki={self.ki:.4f}, Kd={self.kd:.4f}, "
            f"N={self.derivative_filter_n:g}, Ts={self.sample_time:.4f}s, "
            f"limits=[{self.output_min}, {self.output_max}], "
            f"anti_windup={self.anti_windup})"
        )


# Preset configurations
class PIDPresets:
    """Common PID parameter presets."""

    @staticmethod
    def playground() -> PIDParams:
        """Default gains of the interactive playground."""
        return PIDParams(
            kp=2.0, ki=0.5, kd=0.2,
            derivative_filter_n=50.0,
            output_min=-5.0, output_max=5.0,
            anti_windup=True
        )

    @staticmethod
    def for_plant(
        plant_type: Union[PlantType, str],
        base: Optional[PIDParams] = None
    ) -> PIDParams:
        """
        Ziegler-Nichols-ish gains for a plant.

        Only the gains and N are replaced; limits, anti-windup and sample
        time are taken from ``base`` (the playground defaults if None).

        Raises:
            ConfigurationError: If the plant type is unknown
        """
        base = base if base is not None else PIDPresets.playground()
        gains = {
            PlantType.FIRST_ORDER: dict(kp=1.2, ki=1.0, kd=0.0, derivative_filter_n=50.0),
            PlantType.MASS_SPRING_DAMPER: dict(kp=3.2, ki=2.4, kd=0.4, derivative_filter_n=60.0),
            PlantType.DC_MOTOR: dict(kp=6.0, ki=3.0, kd=0.2, derivative_filter_n=60.0),
        }
        return base.copy(**gains[parse_plant_type(plant_type)])
