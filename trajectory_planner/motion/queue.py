"""
Segment queue with parabolic blends.

Straight constant-velocity moves between waypoints, joined by
constant-acceleration blends so the velocity changes smoothly at every
corner instead of stopping. The queue is rebuilt from scratch from the
waypoint list; moves only refer to each other by index.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

import numpy as np
from scipy.optimize import brentq

from trajectory_planner.config import EPSILON, MAX_CLAMP_PASSES
from trajectory_planner.utils.errors import TrajectoryInvariantError, TrajectoryPlanningError

from .constraints import Limits, as_axes
from .phase import second_order
from .synchronizer import synchronize_blend, synchronize_linear

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Waypoint:
    """Target position and the transit speed to move on from it."""

    position: np.ndarray
    velocity: float

    def __post_init__(self):
        object.__setattr__(self, "position", as_axes(self.position, "waypoint position"))
        velocity = float(self.velocity)
        if not np.isfinite(velocity) or velocity <= 0:
            raise ValueError(f"transit velocity must be positive and finite, got {self.velocity!r}")
        object.__setattr__(self, "velocity", velocity)


@dataclass(frozen=True, eq=False)
class Linear:
    """Constant-velocity move."""

    start_position: np.ndarray
    end_position: np.ndarray
    velocity: np.ndarray
    duration: float
    start_time: float

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration


@dataclass(frozen=True, eq=False)
class Blend:
    """Constant-acceleration ramp between the velocities of two linear moves."""

    start_position: np.ndarray
    start_velocity: np.ndarray
    acceleration: np.ndarray
    duration: float
    start_time: float

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    @property
    def end_position(self) -> np.ndarray:
        return second_order(self.duration, self.start_position, self.start_velocity, self.acceleration)

    @property
    def end_velocity(self) -> np.ndarray:
        return self.start_velocity + self.acceleration * self.duration


Move = Union[Linear, Blend]


def evaluate(move: Move, time: float) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Position, velocity and acceleration of ``move`` at absolute ``time``."""
    match move:
        case Linear(start_position=start, velocity=velocity, start_time=t0):
            dt = time - t0
            return start + velocity * dt, velocity.copy(), np.zeros_like(velocity)
        case Blend(start_position=start, start_velocity=v0, acceleration=accel, start_time=t0):
            dt = time - t0
            return second_order(dt, start, v0, accel), v0 + accel * dt, accel.copy()
        case _:
            raise TypeError(f"unknown move type {type(move).__name__}")


@dataclass
class _Segment:
    start: np.ndarray
    end: np.ndarray
    length: float
    direction: np.ndarray
    speed: float

    @property
    def velocity(self) -> np.ndarray:
        return self.direction * self.speed


def _segments(waypoints: Sequence[Waypoint], v_max: np.ndarray) -> list[_Segment]:
    segments: list[_Segment] = []
    for idx, (p1, p2) in enumerate(zip(waypoints, waypoints[1:])):
        delta = p2.position - p1.position
        length = float(np.linalg.norm(delta))
        if length <= EPSILON:
            logger.debug("Skipping zero-length segment at waypoint %d", idx)
            continue
        # Rejects transit speeds some axis cannot follow
        synchronize_linear(delta, p1.velocity, v_max)
        segments.append(
            _Segment(
                start=p1.position,
                end=p2.position,
                length=length,
                direction=delta / length,
                speed=p1.velocity,
            )
        )
    return segments


def _run_duration(
    segment: _Segment, speed: float, prev_velocity: np.ndarray, next_velocity: np.ndarray, a_max: np.ndarray
) -> float:
    """Time left at constant velocity once half of each adjoining blend is taken."""
    velocity = segment.direction * speed
    _, blend_in = synchronize_blend(prev_velocity, velocity, a_max)
    _, blend_out = synchronize_blend(velocity, next_velocity, a_max)
    return segment.length / speed - 0.5 * (blend_in + blend_out)


def _fit_speed(
    segment: _Segment, prev_velocity: np.ndarray, next_velocity: np.ndarray, a_max: np.ndarray
) -> float:
    """Highest transit speed at which both half-blends fit on ``segment``."""

    def run(speed: float) -> float:
        return _run_duration(segment, speed, prev_velocity, next_velocity, a_max)

    high = segment.speed
    low = high
    for _ in range(200):
        low *= 0.5
        if run(low) > 0.0:
            break
    else:
        raise TrajectoryPlanningError(
            f"no transit speed fits the blends of segment {segment.start.tolist()} -> "
            f"{segment.end.tolist()}"
        )
    return float(brentq(run, low, high, xtol=EPSILON * 1e-3, rtol=4 * np.finfo(float).eps))


def _clamp_speeds(segments: list[_Segment], a_max: np.ndarray) -> None:
    """
    Lower the transit speed of linear moves too short to hold their blends.

    Works on each (Blend, Linear, Blend) triple; a clamped move ends up
    with a zero-length linear run. Lowering one speed reshapes the
    neighbouring blends, so passes repeat until nothing changes.
    """
    zero = np.zeros_like(a_max)
    for pass_no in range(MAX_CLAMP_PASSES):
        changed = False
        for k, segment in enumerate(segments):
            prev_velocity = segments[k - 1].velocity if k > 0 else zero
            next_velocity = segments[k + 1].velocity if k + 1 < len(segments) else zero
            overshoot = -_run_duration(segment, segment.speed, prev_velocity, next_velocity, a_max)
            if overshoot <= EPSILON * max(1.0, segment.length / segment.speed):
                continue
            speed = _fit_speed(segment, prev_velocity, next_velocity, a_max)
            logger.debug(
                "Segment %d too short for its blends by %.6g s, speed %.6g -> %.6g",
                k, overshoot, segment.speed, speed,
            )
            segment.speed = speed
            changed = True
        if not changed:
            if pass_no:
                logger.debug("Blend clamping settled after %d passes", pass_no + 1)
            return
    raise TrajectoryPlanningError(
        f"blend clamping did not settle within {MAX_CLAMP_PASSES} passes"
    )


def build_queue(waypoints: Sequence[Waypoint], limits: Limits) -> list[Move]:
    """
    Build the blended move queue for ``waypoints``.

    The queue starts and ends at rest and alternates
    ``Blend, Linear, Blend, ..., Linear, Blend``. Pure function: the inputs
    are not modified.

    Raises:
        TrajectoryPlanningError: a transit speed exceeds an axis limit
    """
    if len(waypoints) < 2:
        return []

    axes = waypoints[0].position.size
    for idx, wp in enumerate(waypoints):
        if wp.position.size != axes:
            raise ValueError(f"waypoint {idx} has {wp.position.size} axes, expected {axes}")

    limits = limits.broadcast(axes)
    a_max = limits.acceleration

    segments = _segments(waypoints, limits.velocity)
    if not segments:
        return []
    _clamp_speeds(segments, a_max)

    velocities = [np.zeros(axes)] + [s.velocity for s in segments] + [np.zeros(axes)]
    blends = [synchronize_blend(v1, v2, a_max) for v1, v2 in zip(velocities, velocities[1:])]

    queue: list[Move] = []
    time = 0.0
    position = segments[0].start
    prev_velocity = velocities[0]
    for k, segment in enumerate(segments):
        accel, blend_duration = blends[k]
        _, next_blend_duration = blends[k + 1]

        # Interior blends start half a blend before the corner, on the previous
        # line, which is where the previous linear move stopped.
        blend = Blend(
            start_position=position,
            start_velocity=prev_velocity,
            acceleration=accel,
            duration=blend_duration,
            start_time=time,
        )
        queue.append(blend)
        time = blend.end_time

        velocity = segment.velocity
        run = segment.length / segment.speed - 0.5 * (blend_duration + next_blend_duration)
        run = max(run, 0.0)
        start = blend.end_position
        linear = Linear(
            start_position=start,
            end_position=start + velocity * run,
            velocity=velocity,
            duration=run,
            start_time=time,
        )
        queue.append(linear)
        time = linear.end_time

        position = linear.end_position
        prev_velocity = velocity

    accel, blend_duration = blends[-1]
    queue.append(
        Blend(
            start_position=position,
            start_velocity=prev_velocity,
            acceleration=accel,
            duration=blend_duration,
            start_time=time,
        )
    )

    _verify_queue(queue)
    logger.debug(
        "Built queue of %d moves from %d waypoints, duration %.6g s",
        len(queue), len(waypoints), queue[-1].end_time,
    )
    return queue


def _verify_queue(queue: Sequence[Move]) -> None:
    for idx, (current, following) in enumerate(zip(queue, queue[1:])):
        end_pos, end_vel, _ = evaluate(current, current.end_time)
        start_pos, start_vel, _ = evaluate(following, following.start_time)
        tol = EPSILON * max(1.0, float(np.max(np.abs(end_pos))), current.end_time) * 1e3
        if not (np.all(np.isfinite(end_pos)) and np.all(np.isfinite(end_vel))):
            raise TrajectoryInvariantError(f"move {idx} has non-finite values")
        if abs(current.end_time - following.start_time) > tol:
            raise TrajectoryInvariantError(
                f"moves {idx} and {idx + 1} are not contiguous: "
                f"{current.end_time!r} != {following.start_time!r}"
            )
        if np.any(np.abs(end_pos - start_pos) > tol):
            raise TrajectoryInvariantError(
                f"position jumps between moves {idx} and {idx + 1}: "
                f"{end_pos.tolist()} -> {start_pos.tolist()}"
            )
        if np.any(np.abs(end_vel - start_vel) > tol):
            raise TrajectoryInvariantError(
                f"velocity jumps between moves {idx} and {idx + 1}: "
                f"{end_vel.tolist()} -> {start_vel.tolist()}"
            )
