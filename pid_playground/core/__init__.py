"""Core PID controller components."""

from pid_playground.core.pid_controller import PIDController, PIDState, ControllerOutput
from pid_playground.core.pid_params import PIDParams, PIDPresets

__all__ = [
    "PIDController",
    "PIDState",
    "ControllerOutput",
    "PIDParams",
    "PIDPresets",
]
