#!/usr/bin/env python3
"""
Basic PID Playground Demo

Demonstrates:
- Step response of a first-order lag under PI control
- CSV logging of every sample
- Step metrics
- Basic plotting
"""

import sys
import logging
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pid_playground.core.pid_params import PIDParams
from pid_playground.plants import PlantType
from pid_playground.simulation.simulator import Simulator
from pid_playground.simulation.scenarios import ScenarioLibrary
from pid_playground.analyzer.plots import PIDPlotter, format_metrics


def main():
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    print("=" * 60)
    print("Basic PID Playground Demo")
    print("=" * 60)

    # A thermal system or tank level: unit gain, 1 s time constant
    params = PIDParams(
        kp=1.2,            # Proportional gain
        ki=1.0,            # Integral gain
        kd=0.0,            # Derivative gain
        output_min=-5.0,   # Actuator limits
        output_max=5.0,
        anti_windup=True
    )

    sim = Simulator(
        PlantType.FIRST_ORDER,
        {"tau": 1.0},
        params,
        csv_log_path="output/basic_demo.csv"
    )

    print(f"\nPlant: {sim.plant!r}")
    print(f"Controller: {params}")

    scenario = ScenarioLibrary.step_response(setpoint=1.0, duration=10.0)

    print(f"\nRunning scenario: {scenario.name}")
    result = sim.run(scenario)

    print(f"Simulation completed in {result.execution_time:.3f}s ({len(result)} samples)")
    print(f"Final output: {result.y_true[-1]:.4f}")
    print(f"Final error: {result.errors[-1]:.4f}")

    print("\n" + "=" * 60)
    print("Step Response Metrics")
    print("=" * 60)
    metrics = result.metrics
    print(f"  Overshoot:     {metrics.overshoot_percent:.2f}%")
    print(f"  Rise time:     {metrics.rise_time}")
    print(f"  Settling time: {metrics.settling_time}")
    print(f"  Final value:   {metrics.final_value:.4f}")
    print(f"\n  {format_metrics(metrics.to_dict())}")

    print(f"\nData logged to: output/basic_demo.csv")

    plotter = PIDPlotter()
    fig = plotter.plot_run(result, title="First-Order Lag, PI Control")
    plotter.save(fig, "output/basic_demo.png")
    print("Plot saved to: output/basic_demo.png")

    plotter.show()


if __name__ == "__main__":
    main()
