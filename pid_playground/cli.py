"""
Command-line runner for closed-loop experiments.

Usage:
    pid-playground [options]

Examples:
    pid-playground --plant dc_motor --preset
    pid-playground --plant first_order --kp 1.2 --ki 1.0 --plot
    pid-playground --request run.json --csv output/run.csv
"""

import argparse
import logging
import sys
from typing import List, Optional

from pid_playground.core.pid_params import PIDPresets
from pid_playground.plants import PlantType
from pid_playground.simulation.request import RunRequest
from pid_playground.simulation.scenarios import ReferenceType
from pid_playground.simulation.simulator import Simulator
from pid_playground.analyzer.plots import PIDPlotter, format_metrics
from pid_playground.utils.validators import ConfigurationError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pid-playground',
        description='Simulate a PID loop around a plant and report step metrics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --plant dc_motor --preset
  %(prog)s --plant mass_spring_damper --reference sine --frequency 0.2 --plot
  %(prog)s --request run.json --csv output/run.csv
        """
    )

    parser.add_argument('--request', type=str, help='JSON run request; flags below override it')

    plant = parser.add_argument_group('plant')
    plant.add_argument('--plant', choices=[p.value for p in PlantType], help='Plant variant')
    plant.add_argument('--param', action='append', default=[], metavar='NAME=VALUE',
                       help='Plant parameter, e.g. --param tau=2.0 (repeatable)')

    gains = parser.add_argument_group('controller')
    gains.add_argument('--preset', action='store_true', help='Ziegler-Nichols-ish gains for the plant')
    gains.add_argument('--kp', type=float)
    gains.add_argument('--ki', type=float)
    gains.add_argument('--kd', type=float)
    gains.add_argument('-n', '--filter-n', type=float, dest='filter_n', help='Derivative filter N')
    gains.add_argument('--umin', type=float, help='Actuator lower limit')
    gains.add_argument('--umax', type=float, help='Actuator upper limit')
    gains.add_argument('--no-anti-windup', action='store_true', help='Integrate while saturated')

    setup = parser.add_argument_group('experiment')
    setup.add_argument('--dt', type=float, help='Step size (s)')
    setup.add_argument('-T', '--duration', type=float, help='Horizon (s)')
    setup.add_argument('--setpoint', type=float, help='Reference amplitude')
    setup.add_argument('--reference', choices=[r.value for r in ReferenceType])
    setup.add_argument('--frequency', type=float, help='Sine/square frequency (Hz)')
    setup.add_argument('--noise', type=float, help='Measurement noise std')
    setup.add_argument('--seed', type=int, help='Noise seed')

    out = parser.add_argument_group('output')
    out.add_argument('--csv', type=str, help='Write samples to this CSV file')
    out.add_argument('--plot', action='store_true', help='Show response and control plots')
    out.add_argument('--save', type=str, help='Save the plot to this image file')
    out.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    return parser


def _parse_param(text: str) -> tuple:
    name, sep, value = text.partition('=')
    if not sep:
        raise ConfigurationError(f"Plant parameter must be NAME=VALUE, got {text!r}")
    try:
        return name.strip(), float(value)
    except ValueError:
        raise ConfigurationError(f"Plant parameter {name!r} is not a number: {value!r}") from None


def request_from_args(args: argparse.Namespace) -> RunRequest:
    """Combine an optional request file with command-line overrides."""
    request = RunRequest.load(args.request) if args.request else RunRequest(
        pid_params=PIDPresets.playground()
    )

    plant_type = args.plant or request.plant_type
    plant_params = dict(request.plant_params)
    plant_params.update(_parse_param(p) for p in args.param)

    pid_params = request.pid_params
    if args.preset:
        pid_params = PIDPresets.for_plant(plant_type, base=pid_params)
    overrides = {
        'kp': args.kp, 'ki': args.ki, 'kd': args.kd,
        'derivative_filter_n': args.filter_n,
        'output_min': args.umin, 'output_max': args.umax,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if args.no_anti_windup:
        overrides['anti_windup'] = False
    pid_params = pid_params.copy(**overrides)

    setup_overrides = {
        'sample_time': args.dt, 'duration': args.duration,
        'setpoint': args.setpoint, 'reference_type': args.reference,
        'frequency': args.frequency, 'measurement_noise_std': args.noise,
        'seed': args.seed,
    }
    setup = request.setup.copy(**{k: v for k, v in setup_overrides.items() if v is not None})

    return RunRequest(plant_type, plant_params, pid_params, setup)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s'
    )

    try:
        request = request_from_args(args)
        sim = Simulator.from_request(request, csv_log_path=args.csv)
        result = sim.run(request.setup)
    except (ValueError, OSError) as e:
        logger.error("%s", e)
        return 2

    print(f"Plant:      {sim.plant!r}")
    print(f"Controller: {request.pid_params}")
    print(f"Samples:    {len(result)} ({request.setup.reference_type.value} reference)")
    print(f"Metrics:    {format_metrics(result.metrics.to_dict())}")
    if args.csv:
        print(f"CSV:        {args.csv}")

    if args.plot or args.save:
        plotter = PIDPlotter()
        fig = plotter.plot_run(result, show_measured=request.setup.measurement_noise_std > 0)
        if args.save:
            plotter.save(fig, args.save)
        if args.plot:
            plotter.show()

    return 0 if result.is_finite else 1


if __name__ == '__main__':
    sys.exit(main())
