#!/usr/bin/env python3
"""
DC Motor Speed Control Demo

Demonstrates:
- Linear model of the motor via python-control
- Speed step with the per-plant preset gains
- Load torque disturbance
- Saving a run request for the command-line runner
"""

import sys
import logging
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import control as ct

from pid_playground.core.pid_params import PIDPresets
from pid_playground.plants import PlantType, make_plant
from pid_playground.simulation.request import RunRequest
from pid_playground.simulation.scenarios import ScenarioLibrary
from pid_playground.simulation.simulator import simulate
from pid_playground.analyzer.plots import PIDPlotter, format_metrics


def main():
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    Path("output").mkdir(exist_ok=True)

    print("=" * 60)
    print("DC Motor Speed Control Demo")
    print("=" * 60)

    motor = make_plant(PlantType.DC_MOTOR)
    tf = motor.transfer_function
    print(f"\nPlant: {motor!r}")
    print(f"Voltage to speed: {tf}")
    print(f"DC gain: {float(ct.dcgain(tf)):.4f} rad/s per V")
    print(f"Poles: {ct.poles(tf)}")

    params = PIDPresets.for_plant(PlantType.DC_MOTOR)
    print(f"\nController: {params}")

    plotter = PIDPlotter()
    for load in (0.0, 0.005):
        request = RunRequest(
            plant_type=PlantType.DC_MOTOR,
            plant_params={"TL": load},
            pid_params=params,
            setup=ScenarioLibrary.step_response(setpoint=0.8, duration=10.0),
        )
        result = simulate(request)
        print(f"  TL = {load:.3f} N m: {format_metrics(result.metrics.to_dict())}")

        fig = plotter.plot_run(result, title=f"DC Motor, load torque {load:g} N m")
        plotter.save(fig, f"output/dc_motor_tl_{load:g}.png")

    request_path = Path("output/dc_motor_request.json")
    request_path.write_text(request.to_json(), encoding="utf-8")
    print(f"\nRequest saved; rerun with: pid-playground --request {request_path} --plot")

    plotter.show()


if __name__ == "__main__":
    main()
