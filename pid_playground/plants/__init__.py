"""Plant models for simulation and testing."""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, Union
import logging

from pid_playground.plants.base_plant import BasePlant
from pid_playground.plants.first_order import FirstOrderPlant
from pid_playground.plants.mass_spring_damper import MassSpringDamperPlant
from pid_playground.plants.dc_motor import DCMotorPlant
from pid_playground.utils.validators import ConfigurationError

logger = logging.getLogger(__name__)


class PlantType(Enum):
    """Supported plant variants."""
    FIRST_ORDER = "first_order"
    MASS_SPRING_DAMPER = "mass_spring_damper"
    DC_MOTOR = "dc_motor"


_PLANT_CLASSES: Dict[PlantType, Type[BasePlant]] = {
    PlantType.FIRST_ORDER: FirstOrderPlant,
    PlantType.MASS_SPRING_DAMPER: MassSpringDamperPlant,
    PlantType.DC_MOTOR: DCMotorPlant,
}

# Shared parameter mapping used by the playground: one dict holds the
# parameters of every variant and each plant picks its own keys.
DEFAULT_PLANT_PARAMS: Dict[str, float] = {
    name: value
    for cls in _PLANT_CLASSES.values()
    for name, value in cls.DEFAULTS.items()
}


def parse_plant_type(plant_type: Union[PlantType, str]) -> PlantType:
    """
    Resolve a plant tag to a PlantType.

    Raises:
        ConfigurationError: If the tag names no known plant
    """
    if isinstance(plant_type, PlantType):
        return plant_type
    try:
        return PlantType(plant_type)
    except ValueError:
        known = ", ".join(p.value for p in PlantType)
        raise ConfigurationError(
            f"Unknown plant type {plant_type!r} (expected one of: {known})"
        ) from None


def make_plant(
    plant_type: Union[PlantType, str],
    params: Optional[Mapping[str, Any]] = None
) -> BasePlant:
    """
    Create a plant from its tag and a parameter mapping.

    Args:
        plant_type: PlantType or its string value
        params: Parameter mapping; unknown keys are ignored

    Returns:
        Plant instance

    Raises:
        ConfigurationError: Unknown plant type or non-numeric parameter
    """
    plant = _PLANT_CLASSES[parse_plant_type(plant_type)].from_params(params)
    logger.debug("Created plant %r", plant)
    return plant


__all__ = [
    "BasePlant",
    "FirstOrderPlant",
    "MassSpringDamperPlant",
    "DCMotorPlant",
    "PlantType",
    "DEFAULT_PLANT_PARAMS",
    "parse_plant_type",
    "make_plant",
]
