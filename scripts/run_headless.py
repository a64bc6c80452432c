#!/usr/bin/env python3
"""
Run the submarine simulation without a renderer.

Plays a scripted dive: flood the tanks, cruise in a slow turn while the
sonar picks up the school, blow the tanks, then recharge air at the surface.

Usage:
    python scripts/run_headless.py --verbose
    python scripts/run_headless.py --duration 30 --seed 7 --config data/submarine.json
"""

import argparse
import dataclasses
import json
import sys
from pathlib import Path

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from subsim.config import DEFAULT_CONFIG_PATH, load_config
from subsim.controls import ControlCommands
from subsim.simulation import SubmarineSimulation


# (start time, keys pressed at that moment)
DIVE_PRESSES = [
    (0.0, ["q"]),   # open vents
    (9.0, ["e"]),   # blow tanks
    (16.0, ["r"]),  # compressor on (only works at the surface)
]

# (start, end, keys held)
DIVE_HOLDS = [
    (1.0, 9.0, ["w", "a"]),
    (9.0, 12.0, ["w"]),
]


class DiveScript:
    """Turns the dive timeline into per-tick ControlCommands."""

    def __init__(self):
        self._fired = set()

    def __call__(self, t: float) -> ControlCommands:
        pressed = []
        for index, (start, keys) in enumerate(DIVE_PRESSES):
            if t >= start and index not in self._fired:
                self._fired.add(index)
                pressed.extend(keys)

        held = []
        for start, end, keys in DIVE_HOLDS:
            if start <= t < end:
                held.extend(keys)

        return ControlCommands.from_keys(held=held, pressed=pressed)


def main():
    parser = argparse.ArgumentParser(
        description="Run a scripted headless submarine dive",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python scripts/run_headless.py --verbose
    python scripts/run_headless.py --duration 60 --dt 0.02
        """,
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=20.0,
        help="Simulated seconds to run (default: 20)",
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=None,
        help="Tick length in seconds (default: from config)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for bubble scatter (default: from config)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Simulation config JSON (default: data/submarine.json)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print every event as it happens",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the final snapshot as JSON",
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config)
        if args.dt is not None:
            config = dataclasses.replace(config, time_step=args.dt)
        if args.seed is not None:
            config.seed = args.seed

        sim = SubmarineSimulation(config, verbose=args.verbose)
        sim.spawn_school()

        print(f"Running dive for {args.duration:.1f}s "
              f"(dt={config.time_step:.4f}s, {len(sim.wanderers)} fish)")
        sim.run(args.duration, DiveScript())

        snapshot = sim.get_snapshot()
        if args.json:
            print(json.dumps(snapshot.to_dict(), indent=2))
        else:
            if not args.verbose:
                print("\n--- Event Log ---")
                for event in sim.events:
                    print(f"  {event}")
            ballast = snapshot.ballast.get_status()
            print("\n--- Final State ---")
            print(f"  Depth:      {snapshot.depth:.2f}")
            print(f"  Speed:      {snapshot.speed:.2f}")
            print(f"  Ballast:    {ballast['ballast_percent']:.0f}%  "
                  f"Air: {ballast['air_percent']:.0f}%  "
                  f"Power: {ballast['electricity_percent']:.1f}%")
            print(f"  Vents {ballast['vents']}, air valve {ballast['air_valve']}, "
                  f"compressor {ballast['compressor']}")
            print(f"  Contacts:   {len(snapshot.detections)}")
            print(f"  Score:      {snapshot.vitals.score}  "
                  f"Oxygen: {snapshot.vitals.oxygen:.1f}  "
                  f"Health: {snapshot.vitals.health:.1f}")
            print(f"  Events:     {len(sim.events)}")

        return 0

    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
