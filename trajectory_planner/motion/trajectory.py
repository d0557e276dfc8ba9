"""
Blended multi-waypoint trajectory.

The public query surface used by a control loop: add waypoints, change
limits, and sample position/velocity/acceleration at any time.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Sequence

import numpy as np

from trajectory_planner.config import EPSILON
from trajectory_planner.utils.errors import TrajectoryInvariantError, TrajectoryPlanningError

from .constraints import ArrayLike, KinematicPoint, Limits
from .queue import Move, Waypoint, build_queue, evaluate

logger = logging.getLogger(__name__)


class Trajectory:
    """
    Waypoints, limits, and the move queue derived from them.

    Every mutation rebuilds the whole queue from the waypoint list and the
    limits. The new queue is only installed once it has been built
    successfully; a rejected mutation leaves the trajectory untouched.

    Not thread-safe: callers serialize mutations and queries.
    """

    def __init__(self, limits: Limits):
        self._limits = limits
        self._waypoints: list[Waypoint] = []
        self._queue: list[Move] = []
        self._end_times: list[float] = []

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _rebuild(self, waypoints: list[Waypoint], limits: Limits):
        if waypoints:
            # Per-axis limits must fit the waypoints even before there is a move
            limits.broadcast(waypoints[0].position.size)
        try:
            queue = build_queue(waypoints, limits)
        except TrajectoryPlanningError as e:
            logger.warning("Rejected trajectory change, keeping previous queue: %s", e)
            raise
        self._waypoints = waypoints
        self._limits = limits
        self._queue = queue
        self._end_times = [move.end_time for move in queue]

    def add_point(self, position: ArrayLike, velocity: float):
        """
        Append a waypoint and the transit speed to leave it at.

        Raises:
            TrajectoryPlanningError: the resulting queue is infeasible
            ValueError: malformed position or velocity
        """
        point = Waypoint(position=np.asarray(position, dtype=float), velocity=velocity)
        if self._waypoints and point.position.size != self._waypoints[0].position.size:
            raise ValueError(
                f"waypoint has {point.position.size} axes, trajectory has "
                f"{self._waypoints[0].position.size}"
            )
        self._rebuild(self._waypoints + [point], self._limits)
        logger.debug("Added waypoint %s @ %g", point.position.tolist(), point.velocity)

    def set_velocity_limit(self, velocity: ArrayLike):
        self._rebuild(list(self._waypoints), self._limits.with_velocity(velocity))

    def set_acceleration_limit(self, acceleration: ArrayLike):
        self._rebuild(list(self._waypoints), self._limits.with_acceleration(acceleration))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def limits(self) -> Limits:
        return self._limits

    @property
    def waypoints(self) -> tuple[Waypoint, ...]:
        return tuple(self._waypoints)

    @property
    def queue(self) -> tuple[Move, ...]:
        return tuple(self._queue)

    def duration(self) -> float:
        return self._end_times[-1] if self._end_times else 0.0

    def _find_move(self, time: float) -> Move:
        # First move ending after ``time``; the end of the queue belongs to the last move
        idx = bisect.bisect_right(self._end_times, time)
        return self._queue[min(idx, len(self._queue) - 1)]

    def _sample(self, time: float) -> tuple[np.ndarray, np.ndarray, np.ndarray] | None:
        if not self._queue or not np.isfinite(time):
            return None
        if time < 0.0 or time > self.duration() + EPSILON:
            return None
        move = self._find_move(time)
        if not (move.start_time - EPSILON <= time <= move.end_time + EPSILON):
            raise TrajectoryInvariantError(
                f"t={time!r} resolved to a move spanning "
                f"[{move.start_time!r}, {move.end_time!r}]"
            )
        return evaluate(move, time)

    def position(self, time: float) -> tuple[KinematicPoint, np.ndarray] | None:
        """Position/velocity and acceleration at ``time``, None outside [0, duration()]."""
        sample = self._sample(time)
        if sample is None:
            return None
        pos, vel, acc = sample
        return KinematicPoint(pos, vel), acc

    def velocity(self, time: float) -> np.ndarray | None:
        sample = self._sample(time)
        return None if sample is None else sample[1]

    def acceleration(self, time: float) -> np.ndarray | None:
        sample = self._sample(time)
        return None if sample is None else sample[2]

    def __len__(self):
        return len(self._queue)

    def __repr__(self):
        return (
            f"Trajectory(waypoints={len(self._waypoints)}, moves={len(self._queue)}, "
            f"duration={self.duration():.6g})"
        )


def from_waypoints(
    limits: Limits, points: Sequence[tuple[ArrayLike, float]]
) -> Trajectory:
    """Build a trajectory from ``(position, velocity)`` pairs in one rebuild."""
    trajectory = Trajectory(limits)
    waypoints = [Waypoint(position=np.asarray(p, dtype=float), velocity=v) for p, v in points]
    trajectory._rebuild(waypoints, limits)
    return trajectory
