"""
Unit tests for the closed-loop simulator.
"""

import csv
import gc
import math
import weakref
import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from pid_playground.core.pid_params import PIDParams, PIDPresets
from pid_playground.plants import PlantType
from pid_playground.simulation.noise import BoxMullerNoise
from pid_playground.simulation.request import RunRequest
from pid_playground.simulation.scenarios import (
    ExperimentSetup,
    ReferenceType,
    ScenarioLibrary,
)
from pid_playground.simulation.simulator import Simulator, RunResult, Frame, simulate
from pid_playground.analyzer.metrics import compute_step_metrics
from pid_playground.logging.csv_logger import SAMPLE_COLUMNS
from pid_playground.utils.validators import ConfigurationError


class ConstantNoise:
    """Noise source that always returns the same deviate."""

    def __init__(self, value=1.0):
        self.value = value
        self.calls = 0

    def next_standard_normal(self):
        self.calls += 1
        return self.value


@pytest.fixture
def playground_sim():
    return Simulator(PlantType.MASS_SPRING_DAMPER, {}, PIDPresets.playground())


class TestExperimentSetup:
    """Test suite for ExperimentSetup."""

    def test_sample_count(self):
        """floor(T / dt) steps plus the sample at t = 0."""
        assert ExperimentSetup(duration=10.0, sample_time=0.01).n_samples == 1001
        assert ExperimentSetup(duration=1.0, sample_time=0.1).n_samples == 11
        assert ExperimentSetup(duration=1.0, sample_time=0.3).n_samples == 4

    @pytest.mark.parametrize("changes", [
        {"sample_time": 0.0},
        {"sample_time": -0.01},
        {"duration": 0.0},
        {"duration": -1.0},
        {"measurement_noise_std": -0.1},
        {"reference_type": "triangle"},
        {"seed": 1.5},
        {"setpoint": "one"},
        {"setpoint": float("nan")},
        {"setpoint": float("inf")},
        {"frequency": float("inf")},
        {"frequency": float("nan")},
    ])
    def test_invalid(self, changes):
        """Invalid setups raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ExperimentSetup(**changes)

    def test_reference_type_from_string(self):
        """Reference type accepts its string tag."""
        setup = ExperimentSetup(reference_type="square")
        assert setup.reference_type == ReferenceType.SQUARE

    def test_references(self):
        """Step, sine and square waveforms."""
        step = ExperimentSetup(setpoint=2.0)
        assert step.get_reference(0.0) == 2.0
        assert step.get_reference(7.3) == 2.0

        sine = ExperimentSetup(setpoint=2.0, reference_type="sine", frequency=0.5)
        assert sine.get_reference(0.0) == 0.0
        assert sine.get_reference(0.5) == pytest.approx(2.0)

        square = ExperimentSetup(setpoint=2.0, reference_type="square", frequency=0.5)
        assert square.get_reference(0.0) == 0.0
        assert square.get_reference(0.25) == 2.0
        assert square.get_reference(1.25) == -2.0

    def test_metric_setpoint(self):
        """Step metrics target the amplitude only for step references."""
        assert ExperimentSetup(setpoint=3.0).metric_setpoint == 3.0
        assert ExperimentSetup(setpoint=3.0, reference_type="sine").metric_setpoint == 1.0

    def test_json_round_trip(self):
        """to_json/from_json restores the setup."""
        setup = ScenarioLibrary.noise_rejection(seed=5)
        assert ExperimentSetup.from_json(setup.to_json()) == setup

    def test_from_dict_unknown_key(self):
        """Unknown keys raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ExperimentSetup.from_dict({"horizon": 5.0})


class TestSimulator:
    """Test suite for Simulator."""

    def test_sample_grid(self, playground_sim):
        """One sample per step, starting at t = 0 from rest."""
        result = playground_sim.run(ExperimentSetup(duration=10.0, sample_time=0.01))
        assert len(result) == 1001
        assert result.timestamps[0] == 0.0
        assert result.y_true[0] == 0.0
        assert np.allclose(np.diff(result.timestamps), 0.01)
        assert result.timestamps[-1] == pytest.approx(10.0)

    def test_sample_records(self, playground_sim):
        """Indexing gives Sample records consistent with the arrays."""
        result = playground_sim.run(ExperimentSetup(duration=1.0))
        sample = result[10]
        assert sample.t == result.timestamps[10]
        assert sample.u == result.outputs[10]
        assert sample.e == pytest.approx(sample.reference - sample.y_measured)
        assert len(result.samples()) == len(result)

    def test_first_sample(self, playground_sim):
        """The first command sees the full error from rest."""
        result = playground_sim.run(ExperimentSetup(setpoint=1.0))
        assert result.errors[0] == 1.0
        assert result.outputs[0] == pytest.approx(2.0)

    def test_deterministic_without_noise(self, playground_sim):
        """Identical configuration gives bit-identical results."""
        setup = ExperimentSetup(duration=5.0)
        a = playground_sim.run(setup)
        b = playground_sim.run(setup)
        for key, values in a.to_dict().items():
            assert np.array_equal(values, b.to_dict()[key]), key

    def test_noise_free_measurement(self, playground_sim):
        """Without noise the measurement is the true output."""
        result = playground_sim.run(ExperimentSetup(duration=2.0, seed=3))
        assert np.array_equal(result.y_measured, result.y_true)

    def test_seeded_noise_reproducible(self, playground_sim):
        """Same seed, same noise; different seed, different noise."""
        a = playground_sim.run(ScenarioLibrary.noise_rejection(seed=7))
        b = playground_sim.run(ScenarioLibrary.noise_rejection(seed=7))
        c = playground_sim.run(ScenarioLibrary.noise_rejection(seed=8))
        assert np.array_equal(a.y_measured, b.y_measured)
        assert not np.array_equal(a.y_measured, c.y_measured)
        assert not np.array_equal(a.y_measured, a.y_true)

    def test_injected_noise(self, playground_sim):
        """Measurement = y_true + std * deviate."""
        source = ConstantNoise(1.0)
        setup = ExperimentSetup(duration=1.0, measurement_noise_std=0.1)
        result = playground_sim.run(setup, noise=source)
        assert source.calls == len(result)
        assert np.allclose(result.y_measured - result.y_true, 0.1)

    def test_noise_not_consulted_when_zero(self, playground_sim):
        """A zero noise level never draws from the source."""
        source = ConstantNoise(1.0)
        playground_sim.run(ExperimentSetup(duration=1.0), noise=source)
        assert source.calls == 0

    def test_box_muller_statistics(self):
        """Box-Muller deviates are standard normal."""
        noise = BoxMullerNoise(seed=0)
        z = np.array([noise.next_standard_normal() for _ in range(20000)])
        assert abs(z.mean()) < 0.05
        assert z.std() == pytest.approx(1.0, abs=0.05)

    def test_output_within_limits(self, playground_sim):
        """Every command respects the actuator limits."""
        result = playground_sim.run(ExperimentSetup(setpoint=10.0, duration=5.0))
        assert np.all(result.outputs <= 5.0)
        assert np.all(result.outputs >= -5.0)
        assert np.any(result.outputs == 5.0)

    @pytest.mark.parametrize("plant_type", list(PlantType))
    def test_equilibrium(self, plant_type):
        """Zero reference from rest stays exactly at rest."""
        sim = Simulator(plant_type, {}, PIDPresets.playground())
        result = sim.run(ExperimentSetup(setpoint=0.0, duration=2.0))
        assert np.all(result.y_true == 0.0)
        assert np.all(result.outputs == 0.0)

    def test_proportional_steady_state(self):
        """P-only control of a unit-gain lag settles at Kp / (1 + Kp)."""
        sim = Simulator("first_order", {"tau": 1.0}, PIDParams(kp=1.0))
        result = sim.run(ExperimentSetup(duration=10.0))
        assert result.metrics.final_value == pytest.approx(0.5, abs=1e-4)

    def test_integral_removes_offset(self, playground_sim):
        """PI(D) control reaches the setpoint."""
        result = playground_sim.run(ScenarioLibrary.step_response(duration=60.0))
        assert result.metrics.final_value == pytest.approx(1.0, abs=0.01)
        assert result.metrics.rise_time is not None
        assert result.metrics.settling_time is not None

    def test_dc_motor_preset(self):
        """The DC motor preset tracks a speed step."""
        sim = Simulator("dc_motor", {}, PIDPresets.for_plant("dc_motor"))
        result = sim.run(ExperimentSetup(duration=20.0))
        assert result.is_finite
        assert result.output_label == "ω [rad/s]"
        assert result.metrics.final_value == pytest.approx(1.0, abs=0.05)

    def test_reference_waveforms(self, playground_sim):
        """Recorded references follow the configured waveform."""
        setup = ScenarioLibrary.sine_tracking(amplitude=2.0, frequency=0.5, duration=4.0)
        result = playground_sim.run(setup)
        expected = 2.0 * np.sin(2 * np.pi * 0.5 * result.timestamps)
        assert np.allclose(result.references, expected)

        result = playground_sim.run(ScenarioLibrary.square_wave(amplitude=2.0, duration=4.0))
        assert result.references[0] == 0.0
        assert set(np.unique(result.references)) <= {-2.0, 0.0, 2.0}
        assert np.any(result.references == 2.0)
        assert np.any(result.references == -2.0)

    def test_metrics_setpoint(self, playground_sim):
        """Step runs measure against the amplitude, other references against 1."""
        step = playground_sim.run(ExperimentSetup(setpoint=2.0, duration=5.0))
        assert step.metrics == compute_step_metrics(step.samples(), setpoint=2.0)

        sine = playground_sim.run(ScenarioLibrary.sine_tracking(amplitude=2.0, duration=5.0))
        assert sine.metrics == compute_step_metrics(sine.samples(), setpoint=1.0)

    def test_frame(self, playground_sim):
        """Frame lookup by sample index."""
        result = playground_sim.run(ExperimentSetup(duration=1.0))
        frame = result.frame(5)
        assert frame == Frame(
            t=result.timestamps[5],
            y_true=result.y_true[5],
            reference=result.references[5]
        )
        with pytest.raises(IndexError):
            result.frame(len(result))

    def test_result_read_only(self, playground_sim):
        """Result arrays cannot be modified."""
        result = playground_sim.run(ExperimentSetup(duration=1.0))
        with pytest.raises(ValueError):
            result.y_true[0] = 1.0

    def test_metadata(self, playground_sim):
        """Results record what produced them."""
        result = playground_sim.run(ExperimentSetup(name="meta", duration=1.0, sample_time=0.02))
        assert isinstance(result, RunResult)
        assert result.scenario_name == "meta"
        assert result.plant_type == PlantType.MASS_SPRING_DAMPER
        assert result.plant_info["k"] == 1.0
        assert result.controller_params["sample_time"] == 0.02
        assert result.controller_params["output_max"] == 5.0

    def test_divergence_reported(self, caplog):
        """A numerically unstable run finishes and is flagged."""
        sim = Simulator("mass_spring_damper", {"k": 1e6}, PIDParams(kp=1.0))
        result = sim.run(ExperimentSetup(duration=5.0, sample_time=0.01))
        assert len(result) == 501
        assert not result.is_finite
        assert result.metrics.overshoot_percent is None
        assert "diverged" in caplog.text

    def test_invalid_configuration(self):
        """Configuration errors surface before any run."""
        with pytest.raises(ConfigurationError):
            Simulator("tank")
        with pytest.raises(ConfigurationError):
            Simulator("first_order", {}, PIDParams(output_min=5.0, output_max=-5.0))
        with pytest.raises(ConfigurationError):
            Simulator("first_order", {"tau": "slow"})

    def test_run_comparison(self, playground_sim):
        """Comparison runs each parameter set and restores the original."""
        original = playground_sim.params
        results = playground_sim.run_comparison(
            ExperimentSetup(duration=2.0),
            {"soft": PIDParams(kp=0.5), "hard": PIDParams(kp=5.0)}
        )
        assert set(results) == {"soft", "hard"}
        assert results["soft"].controller_params["kp"] == 0.5
        assert playground_sim.params is original

    def test_rerun_replaces_result(self, playground_sim):
        """A new run replaces the previous result instead of accumulating."""
        assert playground_sim.last_result is None

        first = weakref.ref(playground_sim.run(ExperimentSetup(duration=1.0)))
        assert playground_sim.last_result is first()

        for _ in range(20):
            last = playground_sim.run(ExperimentSetup(duration=1.0))
        assert playground_sim.last_result is last
        assert not hasattr(playground_sim, "results")

        gc.collect()
        assert first() is None

    def test_csv_output(self, tmp_path):
        """Each run is written as CSV when a path is configured."""
        path = tmp_path / "out" / "run.csv"
        sim = Simulator("first_order", {}, PIDParams(kp=1.0), csv_log_path=str(path))
        result = sim.run(ExperimentSetup(duration=1.0, sample_time=0.1))

        with open(path, newline='') as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == len(result)
        assert list(rows[0].keys()) == SAMPLE_COLUMNS
        assert float(rows[0]["t"]) == 0.0
        assert float(rows[-1]["y_true"]) == pytest.approx(result.y_true[-1])


class TestRunRequest:
    """Test suite for RunRequest and simulate()."""

    def test_defaults_merged(self):
        """Plant parameters are merged over the defaults."""
        request = RunRequest(plant_type="first_order", plant_params={"tau": 2.0})
        assert request.plant_type == PlantType.FIRST_ORDER
        assert request.plant_params["tau"] == 2.0
        assert request.plant_params["m"] == 1.0

    def test_json_round_trip(self):
        """to_json/from_json restores the request."""
        request = RunRequest(
            plant_type="dc_motor",
            plant_params={"TL": 0.01},
            pid_params=PIDPresets.for_plant("dc_motor"),
            setup=ScenarioLibrary.square_wave(amplitude=3.0),
        )
        restored = RunRequest.from_json(request.to_json())
        assert restored.to_dict() == request.to_dict()
        assert restored.pid_params.output_max == 5.0

    def test_partial_request(self):
        """Missing sections take defaults."""
        request = RunRequest.from_dict({"plant_type": "first_order"})
        assert request.setup == ExperimentSetup()
        assert request.pid_params == PIDParams()

    def test_unknown_section(self):
        """Unknown sections raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            RunRequest.from_dict({"plant": "first_order"})

    def test_unknown_plant(self):
        """Unknown plant tags raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            RunRequest(plant_type="second")

    def test_load(self, tmp_path):
        """Requests load from JSON files."""
        path = tmp_path / "request.json"
        path.write_text(RunRequest(plant_type="first_order").to_json(), encoding="utf-8")
        assert RunRequest.load(path).plant_type == PlantType.FIRST_ORDER

    def test_simulate(self):
        """simulate() matches an explicit Simulator run."""
        request = RunRequest(
            plant_type="mass_spring_damper",
            pid_params=PIDPresets.playground(),
            setup=ExperimentSetup(duration=3.0),
        )
        a = simulate(request)
        b = Simulator.from_request(request).run(request.setup)
        assert np.array_equal(a.y_true, b.y_true)
        assert np.array_equal(a.outputs, b.outputs)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
