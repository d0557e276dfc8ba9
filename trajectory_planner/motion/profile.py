"""
Trapezoidal single-move profile.

Builds an accelerate / cruise / decelerate profile for one straight move
between two kinematic points. Axes too short to reach the velocity limit get
a wedge profile with a lower apex velocity, then all axes are synchronized to
the slowest one.
"""

from __future__ import annotations

import logging

import numpy as np

from trajectory_planner.config import EPSILON
from trajectory_planner.utils.errors import TrajectoryInvariantError, TrajectoryPlanningError

from .constraints import ArrayLike, KinematicPoint, Limits
from .phase import Phase
from .synchronizer import AxisPlan, governing_duration, synchronize_axis

logger = logging.getLogger(__name__)


class TrapezoidalProfile:
    """
    Three-phase motion profile for a straight move of one or more axes.

    Phases per axis:
    1. Ramp from the start velocity to the apex (a deceleration when the
       axis starts faster than its velocity limit)
    2. Cruise at the apex velocity (zero length for a wedge profile)
    3. Ramp from the apex down to the end velocity

    Every axis finishes at ``duration()``.
    """

    def __init__(self, limits: Limits, start: KinematicPoint, end: KinematicPoint):
        """
        Plan the move.

        Args:
            limits: Velocity/acceleration limits, scalar or per axis
            start: Position and velocity at the start of the move
            end: Position and velocity at the end of the move

        Raises:
            TrajectoryPlanningError: the boundary velocities cannot be met
                under the limits
        """
        if start.axes != end.axes:
            raise ValueError(f"start has {start.axes} axes but end has {end.axes}")

        self.limits = limits
        self.start = start
        self.end = end
        self._axis_limits = limits.broadcast(start.axes)

        (
            self.start_phase,
            self.cruise_phase,
            self.end_phase,
            self.unsynchronized_durations,
        ) = self._plan()

        self.t1 = self.start_phase.duration
        self.t2 = self.t1 + self.cruise_phase.duration
        self.t3 = self.t2 + self.end_phase.duration
        self._duration = governing_duration(self.t3)

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def _plan(self) -> tuple[Phase, Phase, Phase, np.ndarray]:
        v_max = self._axis_limits.velocity
        a_max = self._axis_limits.acceleration
        start_pos, start_vel = self.start.position, self.start.velocity
        end_pos, end_vel = self.end.position, self.end.velocity

        delta = end_pos - start_pos
        moving = np.abs(delta) > EPSILON
        axes = delta.size

        if not np.any(moving):
            logger.debug("Zero-length move at %s", start_pos.tolist())
            cruise = Phase.cruise(np.zeros(axes), start_vel)
            return Phase.zero(axes), cruise, cruise, np.zeros(axes)

        idle_with_velocity = ~moving & ((np.abs(start_vel) > EPSILON) | (np.abs(end_vel) > EPSILON))
        if np.any(idle_with_velocity):
            raise TrajectoryPlanningError(
                f"axes {np.flatnonzero(idle_with_velocity).tolist()} do not move "
                f"but have non-zero boundary velocities"
            )

        over_end = np.abs(end_vel) > v_max + EPSILON
        if np.any(over_end):
            raise TrajectoryPlanningError(
                f"end velocity {end_vel[over_end].tolist()} exceeds velocity limit "
                f"{v_max[over_end].tolist()}"
            )

        # Idle axes are planned as if moving forward from rest, then replaced by a hold.
        direction = np.where(moving, np.sign(delta), 1.0)
        v0 = np.where(moving, start_vel, 0.0)
        v1 = np.where(moving, end_vel, 0.0)

        # (1) Accelerate towards the target, unless already faster than the limit
        overspeed = moving & (direction * v0 > v_max)
        start_dir = np.where(overspeed, -direction, direction)
        start_accel = a_max * start_dir
        end_accel = -a_max * direction

        # (2) Ramps to and from the signed velocity limit
        peak = direction * v_max
        start_phase = Phase.between(v0, peak, start_accel)
        end_phase = Phase.between(peak, v1, end_accel)

        # (3) Cruise covers what the ramps do not
        cruise_duration = np.where(
            moving,
            (delta - start_phase.distance - end_phase.distance) / peak,
            0.0,
        )

        # (4) No room to reach the limit: wedge profile with a lower apex
        wedge = moving & (cruise_duration < 0.0)
        if np.any(wedge):
            peak = peak.copy()
            for idx in np.flatnonzero(wedge):
                peak[idx] = direction[idx] * self._apex_velocity(
                    int(idx), abs(delta[idx]), direction[idx] * v0[idx],
                    direction[idx] * v1[idx], a_max[idx], bool(overspeed[idx]),
                )
            cruise_duration = np.where(wedge, 0.0, cruise_duration)
            start_phase = Phase.between(v0, peak, start_accel)
            end_phase = Phase.between(peak, v1, end_accel)
            logger.debug(
                "Wedge profile on axes %s, apex %s", np.flatnonzero(wedge).tolist(), peak[wedge].tolist()
            )

        cruise_duration = np.maximum(cruise_duration, 0.0)
        unsynchronized = start_phase.duration + cruise_duration + end_phase.duration
        unsynchronized = np.where(moving, unsynchronized, 0.0)

        # (5) Stretch every axis to the governing duration
        duration = governing_duration(unsynchronized)
        plans: list[AxisPlan] = []
        for idx in range(axes):
            if not moving[idx]:
                plans.append(AxisPlan.hold(duration))
                continue
            plan = AxisPlan(
                start_accel=float(start_accel[idx]),
                end_accel=float(end_accel[idx]),
                peak_velocity=float(peak[idx]),
                ramp_up=float(start_phase.duration[idx]),
                cruise=float(cruise_duration[idx]),
                ramp_down=float(end_phase.duration[idx]),
            )
            plans.append(
                synchronize_axis(
                    plan,
                    duration,
                    float(delta[idx]),
                    float(v0[idx]),
                    float(v1[idx]),
                    float(v_max[idx]),
                    float(a_max[idx]),
                    axis=idx,
                )
            )

        start_v = np.where(moving, start_vel, 0.0)
        peaks = np.array([p.peak_velocity for p in plans])
        start_phase = Phase.ramp([p.ramp_up for p in plans], start_v, [p.start_accel for p in plans])
        cruise_phase = Phase.cruise([p.cruise for p in plans], peaks)
        end_phase = Phase.ramp([p.ramp_down for p in plans], peaks, [p.end_accel for p in plans])

        logger.trace(  # type: ignore[attr-defined]
            "Profile %s -> %s: t=%s", self.start, self.end, [p.total for p in plans]
        )
        return start_phase, cruise_phase, end_phase, unsynchronized

    @staticmethod
    def _apex_velocity(
        axis: int, distance: float, u0: float, u1: float, a_max: float, overspeed: bool
    ) -> float:
        """Peak of a wedge profile, measured along the direction of travel."""
        if overspeed:
            raise TrajectoryPlanningError(
                f"axis {axis} starts at {u0:g} above its velocity limit and cannot "
                f"slow to {u1:g} within {distance:g}"
            )
        discriminant = a_max * distance + 0.5 * (u0 * u0 + u1 * u1)
        if discriminant < 0:
            raise TrajectoryPlanningError(
                f"axis {axis} has no wedge profile (discriminant {discriminant:.6g})"
            )
        apex = float(np.sqrt(discriminant))
        if apex < u0 - EPSILON:
            raise TrajectoryPlanningError(
                f"axis {axis} cannot slow from {u0:g} to {u1:g} within {distance:g}"
            )
        if apex < u1 - EPSILON:
            raise TrajectoryPlanningError(
                f"axis {axis} cannot reach end velocity {u1:g} from {u0:g} within {distance:g}"
            )
        return max(apex, u0, u1)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def duration(self) -> float:
        """Time taken for the move; every axis arrives at this instant."""
        return self._duration

    @property
    def peak_velocity(self) -> np.ndarray:
        """Cruise (apex) velocity of every axis after synchronization."""
        return self.cruise_phase.start_velocity

    @property
    def phases(self) -> tuple[Phase, Phase, Phase]:
        return self.start_phase, self.cruise_phase, self.end_phase

    def _sample(self, time: float) -> tuple[np.ndarray, np.ndarray, np.ndarray] | None:
        if not np.isfinite(time) or time < 0.0 or time > self._duration + EPSILON:
            return None

        t1, t2, t3 = self.t1, self.t2, self.t3
        in_start = time < t1
        in_cruise = ~in_start & (time < t2)
        in_end = ~in_start & ~in_cruise & (time <= t3 + EPSILON)
        if not np.all(in_start | in_cruise | in_end):
            raise TrajectoryInvariantError(
                f"t={time!r} is inside [0, {self._duration!r}] but outside the phases of "
                f"axes {np.flatnonzero(~(in_start | in_cruise | in_end)).tolist()}"
            )

        x1 = self.start.position + self.start_phase.distance
        x2 = x1 + self.cruise_phase.distance

        pos = np.select(
            [in_start, in_cruise],
            [
                self.start_phase.position(time, self.start.position),
                self.cruise_phase.position(time - t1, x1),
            ],
            self.end_phase.position(time - t2, x2),
        )
        vel = np.select(
            [in_start, in_cruise],
            [self.start_phase.velocity(time), self.cruise_phase.velocity(time - t1)],
            self.end_phase.velocity(time - t2),
        )
        acc = np.select(
            [in_start, in_cruise],
            [self.start_phase.acceleration, self.cruise_phase.acceleration],
            self.end_phase.acceleration,
        )
        return pos, vel, acc

    def position(self, time: float) -> tuple[KinematicPoint, np.ndarray] | None:
        """Position/velocity and acceleration at ``time``, None outside the move."""
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

    # ------------------------------------------------------------------
    # Mutators: replan from scratch, keep the old plan if the new one fails
    # ------------------------------------------------------------------

    def _replace_with(self, limits: Limits, start: KinematicPoint, end: KinematicPoint):
        replanned = TrapezoidalProfile(limits, start, end)
        self.__dict__.update(replanned.__dict__)

    def set_velocity_limit(self, velocity: ArrayLike):
        self._replace_with(self.limits.with_velocity(velocity), self.start, self.end)

    def set_acceleration_limit(self, acceleration: ArrayLike):
        self._replace_with(self.limits.with_acceleration(acceleration), self.start, self.end)

    def set_start_velocity(self, velocity: ArrayLike):
        self._replace_with(self.limits, KinematicPoint(self.start.position, velocity), self.end)

    def set_end_velocity(self, velocity: ArrayLike):
        self._replace_with(self.limits, self.start, KinematicPoint(self.end.position, velocity))

    def __repr__(self):
        return (
            f"TrapezoidalProfile(start=({self.start}), end=({self.end}), "
            f"duration={self._duration:.6g})"
        )
