"""
Base plant model abstract class.
Defines the interface for all continuous-time plant models.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, Mapping
import numpy as np
import control as ct

from pid_playground.utils.validators import validate_real


class BasePlant(ABC):
    """
    Abstract base class for continuous-time plant models.

    A plant is stateless: the simulator owns the state vector and asks the
    plant for its derivative and output. Every subclass provides:

        - ``initial_state()``: zero vector of the plant's order
        - ``derivative(state, u)``: dx/dt for a held input u
        - ``output(state)``: scalar observable y
    """

    #: Number of state variables
    order: int = 1

    #: Axis label of the observable
    output_label: str = "y"

    #: Parameter names with their defaults
    DEFAULTS: Dict[str, float] = {}

    def initial_state(self) -> np.ndarray:
        """Zero state vector of length ``order``."""
        return np.zeros(self.order)

    @abstractmethod
    def derivative(self, state: np.ndarray, control_input: float) -> np.ndarray:
        """
        Evaluate the state derivative.

        Args:
            state: Current state vector
            control_input: Control signal u

        Returns:
            dx/dt with the same length as ``state``
        """
        pass

    @abstractmethod
    def output(self, state: np.ndarray) -> float:
        """Extract the observable from a state vector."""
        pass

    @property
    @abstractmethod
    def transfer_function(self) -> ct.TransferFunction:
        """Linear transfer function from u to y."""
        pass

    @abstractmethod
    def get_info(self) -> Dict[str, Any]:
        """Get plant information/parameters."""
        pass

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]] = None) -> "BasePlant":
        """
        Build a plant from a parameter mapping.

        Keys that the plant does not know are ignored and missing keys (or
        keys mapped to None) fall back to ``DEFAULTS``.

        Raises:
            ConfigurationError: If a known parameter is not a real number
        """
        params = params or {}
        kwargs = {}
        for name, default in cls.DEFAULTS.items():
            value = params.get(name)
            kwargs[name] = default if value is None else validate_real(value, name)
        return cls(**kwargs)

    def __repr__(self) -> str:
        args = ", ".join(
            f"{k}={v}" for k, v in self.get_info().items() if k != "type"
        )
        return f"{type(self).__name__}({args})"
