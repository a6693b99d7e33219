"""
Closed-loop simulation engine.
Runs plant, controller and integrator over a fixed horizon and collects
the sampled response.
"""

from typing import Dict, Any, List, Optional, Union, Mapping
from dataclasses import dataclass
from pathlib import Path
import logging
import time
import numpy as np

from pid_playground.core.pid_controller import PIDController
from pid_playground.core.pid_params import PIDParams
from pid_playground.plants import BasePlant, PlantType, make_plant, parse_plant_type
from pid_playground.simulation.integrator import rk4_step
from pid_playground.simulation.noise import NoiseSource, BoxMullerNoise
from pid_playground.simulation.request import RunRequest
from pid_playground.simulation.scenarios import ExperimentSetup
from pid_playground.analyzer.metrics import PerformanceMetrics, StepResponseMetrics
from pid_playground.logging.csv_logger import CSVLogger, SAMPLE_COLUMNS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    """One time-series record."""
    t: float
    y_true: float
    y_measured: float
    reference: float
    u: float
    e: float

    def to_dict(self) -> Dict[str, float]:
        return {
            't': self.t,
            'y_true': self.y_true,
            'y_measured': self.y_measured,
            'reference': self.reference,
            'u': self.u,
            'e': self.e,
        }


@dataclass(frozen=True)
class Frame:
    """Instantaneous values for animation consumers."""
    t: float
    y_true: float
    reference: float


@dataclass(frozen=True, eq=False)
class RunResult:
    """
    Container for a completed run.

    The arrays are read-only; index the result (or call ``samples()``) to
    get Sample records.
    """
    timestamps: np.ndarray
    y_true: np.ndarray
    y_measured: np.ndarray
    references: np.ndarray
    outputs: np.ndarray
    errors: np.ndarray
    metrics: StepResponseMetrics

    # Metadata
    scenario_name: str = ""
    plant_type: Optional[PlantType] = None
    plant_info: Optional[Dict[str, Any]] = None
    output_label: str = "y"
    controller_params: Optional[Dict[str, Any]] = None
    execution_time: float = 0.0

    def __post_init__(self):
        for arr in (self.timestamps, self.y_true, self.y_measured,
                    self.references, self.outputs, self.errors):
            arr.setflags(write=False)

    def __len__(self) -> int:
        return len(self.timestamps)

    def __getitem__(self, index: int) -> Sample:
        return Sample(
            t=float(self.timestamps[index]),
            y_true=float(self.y_true[index]),
            y_measured=float(self.y_measured[index]),
            reference=float(self.references[index]),
            u=float(self.outputs[index]),
            e=float(self.errors[index]),
        )

    def samples(self) -> List[Sample]:
        """All samples in time order."""
        return [self[i] for i in range(len(self))]

    def frame(self, index: int) -> Frame:
        """
        Look up the animation frame at a sample index.

        Raises:
            IndexError: If the index is out of range
        """
        return Frame(
            t=float(self.timestamps[index]),
            y_true=float(self.y_true[index]),
            reference=float(self.references[index]),
        )

    @property
    def is_finite(self) -> bool:
        """False if any recorded signal diverged to NaN or infinity."""
        return bool(all(
            np.all(np.isfinite(arr))
            for arr in (self.y_true, self.y_measured, self.outputs, self.errors)
        ))

    def to_dict(self) -> Dict[str, np.ndarray]:
        """Convert to dictionary format."""
        return {
            't': self.timestamps,
            'y_true': self.y_true,
            'y_measured': self.y_measured,
            'reference': self.references,
            'u': self.outputs,
            'e': self.errors,
        }

    def to_csv(self, file_path: Union[str, Path]) -> Path:
        """Write one row per sample; returns the file path."""
        with CSVLogger(str(file_path), columns=SAMPLE_COLUMNS) as csv_logger:
            csv_logger.log_batch([s.to_dict() for s in self.samples()])
        return Path(file_path)


class Simulator:
    """
    Closed-loop simulation engine.

    The plant is resolved once at construction; every ``run`` builds a
    fresh state vector and controller, so runs never share state.

    Example:
        >>> params = PIDParams(kp=2.0, ki=0.5, kd=0.2, output_min=-5, output_max=5)
        >>> sim = Simulator("mass_spring_damper", {"m": 1.0, "c": 0.8, "k": 1.0}, params)
        >>> result = sim.run(ExperimentSetup(duration=10.0, sample_time=0.01))
        >>> len(result)
        1001
    """

    def __init__(
        self,
        plant_type: Union[PlantType, str] = PlantType.MASS_SPRING_DAMPER,
        plant_params: Optional[Mapping[str, Any]] = None,
        pid_params: Optional[PIDParams] = None,
        csv_log_path: Optional[str] = None
    ):
        """
        Initialize simulator.

        Args:
            plant_type: Plant variant
            plant_params: Plant parameter mapping (defaults for missing keys)
            pid_params: PID controller parameters
            csv_log_path: Optional path; each run is written there as CSV

        Raises:
            ConfigurationError: Unknown plant type or invalid parameters
        """
        self._plant_type = parse_plant_type(plant_type)
        self._plant = make_plant(self._plant_type, plant_params)
        self._params = pid_params or PIDParams()
        self._csv_path = csv_log_path
        self._metrics = PerformanceMetrics()
        self._last_result: Optional[RunResult] = None

    @classmethod
    def from_request(cls, request: RunRequest, csv_log_path: Optional[str] = None) -> 'Simulator':
        """Build a simulator for a run request."""
        return cls(
            request.plant_type,
            request.plant_params,
            request.pid_params,
            csv_log_path=csv_log_path
        )

    def run(
        self,
        setup: ExperimentSetup,
        noise: Optional[NoiseSource] = None
    ) -> RunResult:
        """
        Run one experiment from t = 0.

        Args:
            setup: Experiment timing, reference and noise
            noise: Standard-normal source; a BoxMullerNoise seeded with
                   ``setup.seed`` is used if None. Only consulted when the
                   noise standard deviation is positive.

        Returns:
            RunResult containing all samples and step metrics
        """
        start_time = time.perf_counter()

        dt = setup.sample_time
        noise_std = setup.measurement_noise_std
        if noise_std > 0 and noise is None:
            noise = BoxMullerNoise(setup.seed)

        controller = PIDController(self._params.copy(sample_time=dt))
        plant = self._plant
        state = plant.initial_state()

        n_samples = setup.n_samples
        timestamps = np.zeros(n_samples)
        y_true = np.zeros(n_samples)
        y_measured = np.zeros(n_samples)
        references = np.zeros(n_samples)
        outputs = np.zeros(n_samples)
        errors = np.zeros(n_samples)

        logger.debug(
            "Running %s on %r: %d steps of %g s",
            setup.name, plant, setup.n_steps, dt
        )

        t = 0.0
        # Divergence is reported through the result, not as numpy warnings
        with np.errstate(over='ignore', invalid='ignore'):
            for i in range(n_samples):
                y = plant.output(state)
                measurement = y + noise.next_standard_normal() * noise_std if noise_std > 0 else y
                reference = setup.get_reference(t)

                out = controller.step(reference, measurement)
                state = rk4_step(plant.derivative, state, out.u, dt)

                timestamps[i] = t
                y_true[i] = y
                y_measured[i] = measurement
                references[i] = reference
                outputs[i] = out.u
                errors[i] = out.e

                t += dt

        metrics = self._metrics.calculate_step_response_metrics(
            timestamps, y_true, setup.metric_setpoint
        )

        result = RunResult(
            timestamps=timestamps,
            y_true=y_true,
            y_measured=y_measured,
            references=references,
            outputs=outputs,
            errors=errors,
            metrics=metrics,
            scenario_name=setup.name,
            plant_type=self._plant_type,
            plant_info=plant.get_info(),
            output_label=plant.output_label,
            controller_params=controller.params.to_dict(),
            execution_time=time.perf_counter() - start_time
        )

        if not result.is_finite:
            logger.warning(
                "Run %r diverged: non-finite values in the response of %r",
                setup.name, plant
            )
        logger.debug("Run %r finished in %.3f s", setup.name, result.execution_time)

        if self._csv_path is not None:
            result.to_csv(self._csv_path)

        self._last_result = result
        return result

    def run_comparison(
        self,
        setup: ExperimentSetup,
        param_sets: Dict[str, PIDParams]
    ) -> Dict[str, RunResult]:
        """
        Run the same experiment with several parameter sets.

        Args:
            setup: Experiment setup
            param_sets: Dictionary mapping names to parameter sets

        Returns:
            Dictionary mapping names to results
        """
        original = self._params
        results = {}
        try:
            for name, params in param_sets.items():
                self._params = params
                results[name] = self.run(setup.copy(name=f"{setup.name} - {name}"))
        finally:
            self._params = original
        return results

    def set_params(self, params: PIDParams) -> None:
        """Update PID parameters for subsequent runs."""
        self._params = params

    @property
    def plant(self) -> BasePlant:
        return self._plant

    @property
    def params(self) -> PIDParams:
        return self._params

    @property
    def last_result(self) -> Optional[RunResult]:
        """Most recent result; each run replaces the previous one."""
        return self._last_result


def simulate(request: RunRequest, noise: Optional[NoiseSource] = None) -> RunResult:
    """Run a request once and return its result."""
    return Simulator.from_request(request).run(request.setup, noise=noise)
