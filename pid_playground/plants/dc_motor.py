"""
Armature-controlled DC motor with speed output.

Electrical:  L di/dt + R i + Ke w = u
Mechanical:  J dw/dt + b w = Kt i - TL
"""

from typing import Dict, Any
import numpy as np
import control as ct

from pid_playground.plants.base_plant import BasePlant
from pid_playground.utils.math_utils import positive_floor


class DCMotorPlant(BasePlant):
    """
    DC motor driven by armature voltage, observed through shaft speed.

    State vector: [angle, angular_velocity, armature_current]

    The electrical and mechanical parts couple through Kt (torque) and
    Ke (back-EMF). With small J and L this is the stiffest of the plants,
    so it wants modest gains and a small step size.
    """

    order = 3
    output_label = "ω [rad/s]"
    DEFAULTS = {
        "J": 0.01,   # rotor inertia [kg m^2]
        "b": 0.1,    # viscous friction [N m s]
        "Kt": 0.02,  # torque constant [N m/A]
        "Ke": 0.02,  # back-EMF constant [V s/rad]
        "R": 1.0,    # armature resistance [ohm]
        "L": 0.5,    # armature inductance [H]
        "TL": 0.0,   # constant load torque [N m]
    }

    def __init__(
        self,
        J: float = 0.01,
        b: float = 0.1,
        Kt: float = 0.02,
        Ke: float = 0.02,
        R: float = 1.0,
        L: float = 0.5,
        TL: float = 0.0
    ):
        self._J = positive_floor(J)
        self._b = float(b)
        self._Kt = float(Kt)
        self._Ke = float(Ke)
        self._R = positive_floor(R)
        self._L = positive_floor(L)
        self._TL = float(TL)

    def derivative(self, state: np.ndarray, control_input: float) -> np.ndarray:
        omega, current = state[1], state[2]
        d_theta = omega
        d_omega = (self._Kt * current - self._b * omega - self._TL) / self._J
        d_current = (control_input - self._R * current - self._Ke * omega) / self._L
        return np.array([d_theta, d_omega, d_current])

    def output(self, state: np.ndarray) -> float:
        return float(state[1])

    @property
    def transfer_function(self) -> ct.TransferFunction:
        """Voltage to speed, ignoring the load torque."""
        s = ct.tf("s")
        return self._Kt / ((self._J * s + self._b) * (self._L * s + self._R) + self._Kt * self._Ke)

    def get_info(self) -> Dict[str, Any]:
        return {
            'type': 'DCMotorPlant',
            'J': self._J,
            'b': self._b,
            'Kt': self._Kt,
            'Ke': self._Ke,
            'R': self._R,
            'L': self._L,
            'TL': self._TL,
        }

    @property
    def load_torque(self) -> float:
        return self._TL
