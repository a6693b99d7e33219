"""
PID Playground
==============

Closed-loop PID simulation engine:
- First-order lag, mass-spring-damper and DC motor plants
- PID controller with filtered derivative, saturation and anti-windup
- Fixed-step RK4 integration over a fixed horizon
- Step-response metrics (overshoot, rise time, settling time)
"""

from pid_playground.core.pid_controller import PIDController
from pid_playground.core.pid_params import PIDParams, PIDPresets
from pid_playground.plants import PlantType, make_plant
from pid_playground.simulation.scenarios import ExperimentSetup, ReferenceType, ScenarioLibrary
from pid_playground.simulation.request import RunRequest
from pid_playground.simulation.simulator import Simulator, RunResult, simulate
from pid_playground.analyzer.metrics import StepResponseMetrics, compute_step_metrics
from pid_playground.utils.validators import ConfigurationError

__version__ = "1.0.0"
__all__ = [
    "PIDController",
    "PIDParams",
    "PIDPresets",
    "PlantType",
    "make_plant",
    "ExperimentSetup",
    "ReferenceType",
    "ScenarioLibrary",
    "RunRequest",
    "Simulator",
    "RunResult",
    "simulate",
    "StepResponseMetrics",
    "compute_step_metrics",
    "ConfigurationError",
]
