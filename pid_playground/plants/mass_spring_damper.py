"""
Mass-spring-damper plant model.
Transfer function: G(s) = 1 / (m*s^2 + c*s + k)
"""

from typing import Dict, Any
import math
import numpy as np
import control as ct

from pid_playground.plants.base_plant import BasePlant
from pid_playground.utils.math_utils import positive_floor


class MassSpringDamperPlant(BasePlant):
    """
    Force-driven mass on a spring with viscous damping.

    State-space representation:
        dx1/dt = x2
        dx2/dt = (u - c*x2 - k*x1) / m
        y = x1

    Where:
        - x1: position
        - x2: velocity
        - u: applied force

    Example:
        >>> plant = MassSpringDamperPlant(m=1.0, c=0.8, k=1.0)
        >>> plant.derivative(plant.initial_state(), 1.0)
        array([0., 1.])
    """

    order = 2
    output_label = "y"
    DEFAULTS = {"m": 1.0, "c": 0.8, "k": 1.0}

    def __init__(self, m: float = 1.0, c: float = 0.8, k: float = 1.0):
        """
        Initialize mass-spring-damper.

        Args:
            m: Mass (floored at 1e-6)
            c: Viscous damping coefficient
            k: Spring stiffness
        """
        self._m = positive_floor(m)
        self._c = float(c)
        self._k = float(k)

    def derivative(self, state: np.ndarray, control_input: float) -> np.ndarray:
        position, velocity = state[0], state[1]
        acceleration = (control_input - self._c * velocity - self._k * position) / self._m
        return np.array([velocity, acceleration])

    def output(self, state: np.ndarray) -> float:
        return float(state[0])

    @property
    def transfer_function(self) -> ct.TransferFunction:
        return ct.TransferFunction([1.0], [self._m, self._c, self._k])

    def get_info(self) -> Dict[str, Any]:
        """Get plant parameters."""
        return {
            'type': 'MassSpringDamperPlant',
            'm': self._m,
            'c': self._c,
            'k': self._k,
        }

    @property
    def mass(self) -> float:
        return self._m

    @property
    def damping(self) -> float:
        return self._c

    @property
    def stiffness(self) -> float:
        return self._k

    @property
    def natural_frequency(self) -> float:
        """Undamped natural frequency sqrt(k/m) in rad/s (0 for k <= 0)."""
        return math.sqrt(self._k / self._m) if self._k > 0 else 0.0

    @property
    def damping_ratio(self) -> float:
        """Damping ratio c / (2*sqrt(k*m)); infinite when k <= 0."""
        if self._k <= 0:
            return math.inf
        return self._c / (2.0 * math.sqrt(self._k * self._m))
