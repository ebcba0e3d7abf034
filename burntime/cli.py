"""
Burn-Time Prediction - CLI

Runs the prediction engine over synthetic flight scenarios and prints what a
navball display would show each tick.
"""

import argparse
import logging
import math
import sys
from dataclasses import replace

from . import constants as C
from .config import create_default_config
from .main import BurnTimeEngine
from .scenarios import SCENARIOS, advance, solid_booster_part
from .utils import format_duration

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Burn-Time Prediction Demo",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--scenario", "-s",
        choices=sorted(SCENARIOS) + ["all"],
        default="all",
        help="Flight scenario to run"
    )
    parser.add_argument(
        "--ticks", "-n",
        type=int,
        default=5,
        help="Number of ticks to run per scenario"
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=10.0,
        help="Universal time between ticks (s)"
    )
    parser.add_argument(
        "--simple",
        action="store_true",
        help="Use the constant-acceleration burn model"
    )
    parser.add_argument(
        "--infinite-propellant",
        action="store_true",
        help="Simulate the infinite-propellant cheat"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress log output"
    )
    return parser.parse_args(argv)


def describe_tick(engine: BurnTimeEngine, context) -> str:
    """One display line for the tick."""
    data = engine.update(context)
    parts = [f"UT {context.ut:9.1f}"]
    if data.is_valid:
        burn = format_duration(data.burn_time)
        if data.insufficient_fuel:
            burn += " (!)"
        parts.append(f"{data.burn_type.name:<10} dV {data.dv:8.1f} m/s  Est. Burn: {burn}")
        if not math.isnan(data.time_until):
            event = data.label or "Node"
            parts.append(f"{event} in {format_duration(data.time_until)}")
    else:
        parts.append("no burn")

    for prediction in (engine.predict_atmosphere_transition(context), engine.predict_geosync(context)):
        if prediction.is_available:
            if prediction.time_until is not None:
                parts.append(f"{prediction.label} in {format_duration(prediction.time_until)}")
            else:
                parts.append(prediction.label)
    return " | ".join(parts)


def run_scenario(name: str, args) -> None:
    config = create_default_config()
    if args.simple:
        config = replace(config, use_simple_acceleration=True)
    # Every tick is a fresh computation in the demo
    config = replace(config, update_interval=0.0)
    engine = BurnTimeEngine(config)

    context = SCENARIOS[name]()
    if args.infinite_propellant:
        context = replace(context, infinite_propellant=True)

    print(f"\n>> Scenario: {name}  ({context.vessel})")
    for _ in range(args.ticks):
        print("   " + describe_tick(engine, context))
        context = advance(context, args.dt)


def main(argv=None):
    """Main execution flow."""
    args = parse_args(argv)

    # Configure verbosity
    if args.quiet:
        logging.getLogger("burntime").setLevel(logging.WARNING)

    print(f"\n{'='*70}\nBURN-TIME PREDICTION DEMO\n{'='*70}")
    logger.info(C.get_parameter_summary())

    try:
        names = sorted(SCENARIOS) if args.scenario == "all" else [args.scenario]
        for name in names:
            run_scenario(name, args)

        booster = solid_booster_part()
        engine = BurnTimeEngine(create_default_config())
        print(f"\n>> {booster.name} burn time: {format_duration(engine.predict_part_burn_time(booster))}")
        print("="*70)

    except Exception as e:
        logger.error(f"Demo failed: {e}", exc_info=True)
        print(f"\n[ERROR] Demo failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
