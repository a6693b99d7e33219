"""
First-order lag plant model.
Transfer function: G(s) = 1 / (tau*s + 1)
"""

from typing import Dict, Any
import numpy as np
import control as ct

from pid_playground.plants.base_plant import BasePlant
from pid_playground.utils.math_utils import positive_floor


class FirstOrderPlant(BasePlant):
    """
    First-order (PT1) lag with unit static gain.

    Represents a simple thermal or velocity-like process.

    State-space representation:
        dx/dt = -x/tau + u/tau
        y = x
    """

    order = 1
    output_label = "y"
    DEFAULTS = {"tau": 1.0}

    def __init__(self, tau: float = 1.0):
        """
        Args:
            tau: Time constant in seconds (floored at 1e-6)
        """
        self._tau = positive_floor(tau)

    def derivative(self, state: np.ndarray, control_input: float) -> np.ndarray:
        x = state[0]
        return np.array([-(1.0 / self._tau) * x + (1.0 / self._tau) * control_input])

    def output(self, state: np.ndarray) -> float:
        return float(state[0])

    @property
    def transfer_function(self) -> ct.TransferFunction:
        return ct.TransferFunction([1.0], [self._tau, 1.0])

    def get_info(self) -> Dict[str, Any]:
        return {
            'type': 'FirstOrderPlant',
            'tau': self._tau,
        }

    @property
    def time_constant(self) -> float:
        return self._tau
