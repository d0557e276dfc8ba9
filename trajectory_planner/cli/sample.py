"""
CLI entry point for the trajectory-sample command.

Builds a blended trajectory from waypoints given on the command line and
writes it to stdout as CSV sampled at the control rate.
"""

from __future__ import annotations

import argparse
import csv
import logging
import sys

from trajectory_planner.config import (
    CONTROL_RATE_HZ,
    DEFAULT_ACCELERATION,
    DEFAULT_VELOCITY,
    TRACE,
    TRACE_ENABLED,
)
from trajectory_planner.motion import Limits, from_waypoints
from trajectory_planner.utils.errors import TrajectoryPlanningError
from trajectory_planner.utils.trajectory import sample_profile

logger = logging.getLogger("trajectory_planner.cli.sample")


def _floats(raw: str) -> list[float]:
    try:
        return [float(p) for p in raw.split(",") if p.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected comma separated numbers, got {raw!r}") from e


def _waypoint(raw: str) -> tuple[list[float], float]:
    """Parse ``x[,y,...]@feed``."""
    position, sep, feed = raw.partition("@")
    if not sep:
        raise argparse.ArgumentTypeError(f"waypoint {raw!r} must look like x[,y,...]@feed")
    try:
        return _floats(position), float(feed)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid feed in waypoint {raw!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sample a blended trajectory as CSV")
    parser.add_argument("waypoints", nargs="+", type=_waypoint, help="Waypoints as x[,y,...]@feed")
    parser.add_argument(
        "--velocity", type=_floats, default=[DEFAULT_VELOCITY],
        help="Velocity limit, one value or one per axis",
    )
    parser.add_argument(
        "--acceleration", type=_floats, default=[DEFAULT_ACCELERATION],
        help="Acceleration limit, one value or one per axis",
    )
    parser.add_argument("--rate", type=float, default=CONTROL_RATE_HZ, help="Sample rate in Hz")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase verbosity; -v=INFO, -vv=DEBUG, -vvv=TRACE",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument(
        "--log-level", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set specific log level",
    )
    return parser


def _log_level(args: argparse.Namespace) -> int:
    if args.log_level:
        return TRACE if args.log_level == "TRACE" else getattr(logging, args.log_level)
    if args.verbose >= 3 or TRACE_ENABLED:
        return TRACE
    if args.verbose >= 2:
        return logging.DEBUG
    if args.verbose == 1:
        return logging.INFO
    if args.quiet:
        return logging.ERROR
    return logging.WARNING


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=_log_level(args),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        limits = Limits(velocity=args.velocity, acceleration=args.acceleration)
        trajectory = from_waypoints(limits, args.waypoints)
    except (TrajectoryPlanningError, ValueError) as e:
        logger.error("%s", e)
        return 1

    logger.info("Planned %r", trajectory)
    times, positions, velocities, accelerations = sample_profile(trajectory, args.rate)

    axes = positions.shape[1] if positions.size else 0
    writer = csv.writer(sys.stdout)
    writer.writerow(
        ["t"]
        + [f"x{i}" for i in range(axes)]
        + [f"v{i}" for i in range(axes)]
        + [f"a{i}" for i in range(axes)]
    )
    for row in range(times.size):
        writer.writerow(
            [f"{times[row]:.6f}"]
            + [f"{x:.6f}" for x in positions[row]]
            + [f"{v:.6f}" for v in velocities[row]]
            + [f"{a:.6f}" for a in accelerations[row]]
        )
    return 0


def main_entry():
    """Entry point for the trajectory-sample command."""
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
