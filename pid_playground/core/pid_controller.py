"""
PID Controller Implementation.

Features:
- Proportional, Integral, Derivative control
- Derivative on measurement (avoids derivative kick)
- First-order low-pass derivative filter with bandwidth N
- Output saturation
- Conditional-integration anti-windup
"""

from dataclasses import dataclass, replace
from typing import Optional, Dict, Any
import logging

from pid_playground.core.pid_params import PIDParams
from pid_playground.utils.math_utils import clamp

logger = logging.getLogger(__name__)


@dataclass
class PIDState:
    """Internal state of the PID controller."""
    integral: float = 0.0
    filtered_derivative: float = 0.0
    last_measurement: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary."""
        return {
            'integral': self.integral,
            'filtered_derivative': self.filtered_derivative,
            'last_measurement': self.last_measurement,
        }


@dataclass(frozen=True)
class ControllerOutput:
    """Result of one controller step."""
    u: float  # Saturated actuator command
    e: float  # Error setpoint - measurement


class PIDController:
    """
    PID controller stepped once per sample at a fixed interval.

    Per step:
        e       = setpoint - measurement
        dm      = (measurement - last_measurement) / dt
        d_filt += dt * N * (dm - d_filt)
        u_unsat = Kp*e + Ki*integral - Kd*d_filt
        u       = clamp(u_unsat, u_min, u_max)

    The integral accumulates e*dt after the command is computed. With
    anti-windup enabled it only does so while the command is unsaturated
    or the error pushes it back into range.

    Example:
        >>> params = PIDParams(kp=1.0, ki=0.5, kd=0.1, output_min=-10, output_max=10)
        >>> pid = PIDController(params)
        >>> out = pid.step(setpoint=1.0, measurement=0.2)
        >>> round(out.e, 3)
        0.8
    """

    def __init__(self, params: Optional[PIDParams] = None):
        """
        Initialize PID controller.

        Args:
            params: PID parameters (uses defaults if None)
        """
        self._params = params if params is not None else PIDParams()
        self._state = PIDState()
        self._saturated = False

        if self._params.filter_unstable:
            logger.warning(
                "Derivative filter N*dt = %.3g >= 2; the filtered derivative will diverge",
                self._params.derivative_filter_n * self._params.sample_time
            )

    @property
    def params(self) -> PIDParams:
        """Get current parameters."""
        return self._params

    @property
    def state(self) -> PIDState:
        """Snapshot of the internal state."""
        return replace(self._state)

    @property
    def integral(self) -> float:
        """Get current integral accumulator."""
        return self._state.integral

    @property
    def filtered_derivative(self) -> float:
        """Get current filtered measurement derivative."""
        return self._state.filtered_derivative

    @property
    def saturated(self) -> bool:
        """Whether the last command was clipped by the output limits."""
        return self._saturated

    def step(self, setpoint: float, measurement: float) -> ControllerOutput:
        """
        Advance the controller by one sample.

        Args:
            setpoint: Desired value
            measurement: Measured plant output

        Returns:
            ControllerOutput with the saturated command and the error
        """
        p = self._params
        s = self._state
        dt = p.sample_time

        error = setpoint - measurement

        self._update_derivative(measurement)

        output_unsat = p.kp * error + p.ki * s.integral - p.kd * s.filtered_derivative
        output = clamp(output_unsat, p.output_min, p.output_max)
        self._saturated = output != output_unsat

        if self._integration_allowed(output_unsat, output, error):
            s.integral += error * dt

        return ControllerOutput(u=output, e=error)

    def _update_derivative(self, measurement: float) -> None:
        """Low-pass filter the measurement derivative (forward Euler)."""
        p = self._params
        s = self._state
        dt = p.sample_time

        derivative_raw = (measurement - s.last_measurement) / dt
        s.filtered_derivative += dt * p.derivative_filter_n * (derivative_raw - s.filtered_derivative)
        s.last_measurement = measurement

    def _integration_allowed(
        self,
        output_unsat: float,
        output: float,
        error: float
    ) -> bool:
        """Conditional integration gate."""
        if not self._params.anti_windup:
            return True
        return (
            output == output_unsat
            or (output == self._params.output_max and error < 0)
            or (output == self._params.output_min and error > 0)
        )

    def __repr__(self) -> str:
        return f"PIDController({self._params})"
