#!/usr/bin/env python3
"""
Mass-Spring-Damper System PID Control Demo

Demonstrates PID control of a classic mechanical system:
- Position control with the playground gains
- Anti-windup on and off under tight actuator limits
- Square-wave and sine tracking
- Measurement noise with a fixed seed
"""

import sys
import logging
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import matplotlib.pyplot as plt

from pid_playground.core.pid_params import PIDPresets
from pid_playground.plants import PlantType
from pid_playground.simulation.simulator import Simulator
from pid_playground.simulation.scenarios import ExperimentSetup, ScenarioLibrary
from pid_playground.analyzer.plots import PIDPlotter, format_metrics


def demo_anti_windup(plotter: PIDPlotter):
    """
    Same gains with and without conditional integration.
    Limits of +/-1.2 keep the actuator saturated for most of the rise.
    """
    print("\n" + "=" * 70)
    print("DEMO 1: ANTI-WINDUP")
    print("=" * 70)

    base = PIDPresets.for_plant(PlantType.MASS_SPRING_DAMPER).copy(
        output_min=-1.2, output_max=1.2
    )
    sim = Simulator(PlantType.MASS_SPRING_DAMPER, {"m": 1.0, "c": 0.8, "k": 1.0}, base)

    results = sim.run_comparison(
        ScenarioLibrary.step_response(duration=20.0),
        {
            'anti-windup': base,
            'no anti-windup': base.copy(anti_windup=False),
        }
    )

    fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    fig.suptitle('Mass-Spring-Damper: Anti-Windup Comparison', fontsize=14, fontweight='bold')
    for name, result in results.items():
        print(f"  {name:16s} {format_metrics(result.metrics.to_dict())}")
        axes[0].plot(result.timestamps, result.y_true, linewidth=1.5, label=name)
        axes[1].plot(result.timestamps, result.outputs, linewidth=1.5, label=name)

    axes[0].plot(result.timestamps, result.references, 'k--', alpha=0.5, label='reference r')
    axes[0].set_ylabel(result.output_label)
    axes[1].set_ylabel('u')
    axes[1].set_xlabel('time [s]')
    for ax in axes:
        ax.legend(loc='best')
        ax.grid(True, alpha=0.3)
    plt.tight_layout()
    plotter.save(fig, "output/msd_anti_windup.png")


def demo_tracking(plotter: PIDPlotter):
    """Square and sine references with the playground gains."""
    print("\n" + "=" * 70)
    print("DEMO 2: REFERENCE TRACKING")
    print("=" * 70)

    sim = Simulator(PlantType.MASS_SPRING_DAMPER, {}, PIDPresets.playground())

    for scenario in (
        ScenarioLibrary.square_wave(amplitude=1.0, frequency=0.1, duration=30.0),
        ScenarioLibrary.sine_tracking(amplitude=1.0, frequency=0.2, duration=30.0),
    ):
        result = sim.run(scenario)
        tracking_rms = float((result.errors ** 2).mean() ** 0.5)
        print(f"  {scenario.name:14s} RMS error {tracking_rms:.4f}")
        fig = plotter.plot_run(result)
        plotter.save(fig, f"output/msd_{scenario.reference_type.value}.png")


def demo_noise(plotter: PIDPlotter):
    """Measurement noise feeds the controller, metrics use the true output."""
    print("\n" + "=" * 70)
    print("DEMO 3: MEASUREMENT NOISE")
    print("=" * 70)

    sim = Simulator(PlantType.MASS_SPRING_DAMPER, {}, PIDPresets.playground())
    clean = sim.run(ExperimentSetup(name="Clean", duration=15.0))
    noisy = sim.run(ScenarioLibrary.noise_rejection(noise_std=0.05, seed=42, duration=15.0))

    for result in (clean, noisy):
        print(f"  {result.scenario_name:16s} {format_metrics(result.metrics.to_dict())}")

    fig = plotter.plot_run(noisy, show_measured=True)
    plotter.save(fig, "output/msd_noise.png")


def main():
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    Path("output").mkdir(exist_ok=True)

    print("\nMass-spring-damper equation: m*x'' + c*x' + k*x = u")
    plotter = PIDPlotter()

    demo_anti_windup(plotter)
    demo_tracking(plotter)
    demo_noise(plotter)

    print("\nPlots saved to output/")
    plotter.show()


if __name__ == "__main__":
    main()
