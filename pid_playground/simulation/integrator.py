"""
Fixed-step explicit integration of plant dynamics.
"""

from typing import Callable
import numpy as np


DerivativeFunction = Callable[[np.ndarray, float], np.ndarray]


def rk4_step(
    f: DerivativeFunction,
    state: np.ndarray,
    control_input: float,
    dt: float
) -> np.ndarray:
    """
    Advance a state vector by one classical Runge-Kutta (RK4) step.

    The control input is held constant over the four stage evaluations
    (zero-order hold). Non-finite values are not clamped; they propagate
    into the returned state.

    Args:
        f: Derivative function f(state, u) -> dstate/dt
        state: Current state vector
        control_input: Input held over the step
        dt: Step size in seconds

    Returns:
        New state vector (the input array is not modified)
    """
    x = np.asarray(state, dtype=float)
    u = control_input

    k1 = np.asarray(f(x, u), dtype=float)
    k2 = np.asarray(f(x + 0.5 * dt * k1, u), dtype=float)
    k3 = np.asarray(f(x + 0.5 * dt * k2, u), dtype=float)
    k4 = np.asarray(f(x + dt * k3, u), dtype=float)

    return x + (dt / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
