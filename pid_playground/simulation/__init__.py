"""Simulation framework: integrator, experiments and the run loop."""

from pid_playground.simulation.integrator import rk4_step
from pid_playground.simulation.noise import NoiseSource, BoxMullerNoise
from pid_playground.simulation.scenarios import ExperimentSetup, ReferenceType, ScenarioLibrary
from pid_playground.simulation.request import RunRequest
from pid_playground.simulation.simulator import Simulator, RunResult, Sample, Frame, simulate

__all__ = [
    "rk4_step",
    "NoiseSource",
    "BoxMullerNoise",
    "ExperimentSetup",
    "ReferenceType",
    "ScenarioLibrary",
    "RunRequest",
    "Simulator",
    "RunResult",
    "Sample",
    "Frame",
    "simulate",
]
