"""
Run request: everything needed to reproduce one closed-loop run.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Union
from pathlib import Path
import json

from pid_playground.core.pid_params import PIDParams
from pid_playground.plants import (
    PlantType,
    DEFAULT_PLANT_PARAMS,
    parse_plant_type,
)
from pid_playground.simulation.scenarios import ExperimentSetup
from pid_playground.utils.validators import ConfigurationError


@dataclass
class RunRequest:
    """
    Plant selection, controller configuration and experiment setup.

    ``plant_params`` is merged over ``DEFAULT_PLANT_PARAMS`` so a request
    only needs to name the parameters it changes.
    """

    plant_type: PlantType = PlantType.MASS_SPRING_DAMPER
    plant_params: Dict[str, float] = field(default_factory=dict)
    pid_params: PIDParams = field(default_factory=PIDParams)
    setup: ExperimentSetup = field(default_factory=ExperimentSetup)

    def __post_init__(self):
        self.plant_type = parse_plant_type(self.plant_type)
        self.plant_params = {**DEFAULT_PLANT_PARAMS, **(self.plant_params or {})}
        if not isinstance(self.pid_params, PIDParams):
            raise ConfigurationError("pid_params must be a PIDParams instance")
        if not isinstance(self.setup, ExperimentSetup):
            raise ConfigurationError("setup must be an ExperimentSetup instance")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'plant_type': self.plant_type.value,
            'plant_params': dict(self.plant_params),
            'pid_params': self.pid_params.to_dict(),
            'setup': self.setup.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RunRequest':
        """
        Create from dictionary.

        Every section is optional; missing ones take their defaults.
        """
        unknown = set(data) - {'plant_type', 'plant_params', 'pid_params', 'setup'}
        if unknown:
            raise ConfigurationError(f"Unknown request sections: {sorted(unknown)}")

        return cls(
            plant_type=data.get('plant_type', PlantType.MASS_SPRING_DAMPER),
            plant_params=data.get('plant_params') or {},
            pid_params=PIDParams.from_dict(data.get('pid_params') or {}),
            setup=ExperimentSetup.from_dict(data.get('setup') or {}),
        )

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> 'RunRequest':
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'RunRequest':
        """Read a request from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_json(f.read())
