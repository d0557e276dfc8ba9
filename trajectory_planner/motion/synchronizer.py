"""
Multi-axis synchronization.

Axes of a move are planned independently, then every axis faster than the
governing (slowest) one is stretched so that all of them start and arrive
together without leaving their own limits.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, replace

import numpy as np

from trajectory_planner.config import EPSILON
from trajectory_planner.utils.errors import TrajectoryPlanningError

from .phase import Phase

logger = logging.getLogger(__name__)

# (ramp up sign, ramp down sign): +1 means the ramp climbs towards the cruise
# velocity from the boundary velocity, -1 means it falls towards it.
_RAMP_SHAPES: tuple[tuple[int, int], ...] = ((1, 1), (-1, 1), (1, -1), (-1, -1))


@dataclass(frozen=True)
class AxisPlan:
    """Three-phase plan of a single axis. Velocities/accelerations are signed."""

    start_accel: float
    end_accel: float
    peak_velocity: float
    ramp_up: float
    cruise: float
    ramp_down: float

    @property
    def total(self) -> float:
        return self.ramp_up + self.cruise + self.ramp_down

    @classmethod
    def hold(cls, duration: float) -> AxisPlan:
        """Axis that stays put for ``duration``."""
        return cls(0.0, 0.0, 0.0, 0.0, max(duration, 0.0), 0.0)


def governing_duration(durations: Sequence[float] | np.ndarray) -> float:
    """Duration of the slowest axis; every other axis is stretched to it."""
    arr = np.asarray(durations, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.max(arr))


def _tolerance(duration: float) -> float:
    return EPSILON * max(1.0, abs(duration))


def synchronize_axis(
    plan: AxisPlan,
    duration: float,
    distance: float,
    start_velocity: float,
    end_velocity: float,
    v_max: float,
    a_max: float,
    axis: int = 0,
) -> AxisPlan:
    """
    Stretch one axis' plan so it finishes in exactly ``duration``.

    The peak velocity is lowered by ``a_max * delta`` and both ramps are
    shortened by ``delta``, which lengthens the cruise. When that would
    make a ramp negative (non-zero boundary velocities) or the axis starts
    over-speed, the ramp shapes are re-solved directly.

    Raises:
        TrajectoryPlanningError: no shape fits within the axis limits.
    """
    stretch = duration - plan.total
    if stretch <= _tolerance(duration):
        return plan

    if abs(distance) <= EPSILON:
        if abs(start_velocity) > EPSILON or abs(end_velocity) > EPSILON:
            raise TrajectoryPlanningError(
                f"axis {axis} does not move but has boundary velocities "
                f"{start_velocity:g} -> {end_velocity:g}"
            )
        return AxisPlan.hold(duration)

    direction = 1.0 if distance > 0 else -1.0
    accelerates = direction * plan.start_accel > 0 or plan.ramp_up <= 0.0
    if accelerates:
        a = duration - (plan.total - plan.cruise)
        apex = abs(plan.peak_velocity)
        discriminant = a * a / 4.0 + stretch * (apex / a_max)
        if discriminant < 0:
            raise TrajectoryPlanningError(
                f"axis {axis} cannot be synchronized to {duration:.6g}s "
                f"(discriminant {discriminant:.6g})"
            )
        delta = -a / 2.0 + math.sqrt(discriminant)
        ramp_up = plan.ramp_up - delta
        ramp_down = plan.ramp_down - delta
        tol = _tolerance(duration)
        if ramp_up >= -tol and ramp_down >= -tol:
            ramp_up = max(ramp_up, 0.0)
            ramp_down = max(ramp_down, 0.0)
            peak = plan.peak_velocity - direction * a_max * delta
            logger.trace(  # type: ignore[attr-defined]
                "axis %d stretched by %.6g s, delta %.6g, peak %.6g -> %.6g",
                axis, stretch, delta, plan.peak_velocity, peak,
            )
            return replace(
                plan,
                peak_velocity=peak,
                ramp_up=ramp_up,
                ramp_down=ramp_down,
                cruise=max(duration - ramp_up - ramp_down, 0.0),
            )

    logger.debug("axis %d needs a different ramp shape to last %.6g s", axis, duration)
    return _solve_ramp_shape(
        duration,
        abs(distance),
        direction * start_velocity,
        direction * end_velocity,
        v_max,
        a_max,
        direction,
        axis,
    )


def _solve_ramp_shape(
    duration: float,
    distance: float,
    u0: float,
    u1: float,
    v_max: float,
    a_max: float,
    direction: float,
    axis: int,
) -> AxisPlan:
    # Along the direction of travel, with ramp signs s1/s3 and cruise velocity vc:
    #   (s1+s3) vc² - 2(aT + s1 u0 + s3 u1) vc + (2aD + s1 u0² + s3 u1²) = 0
    tol = _tolerance(duration)
    best: tuple[float, float, float, int, int] | None = None
    for s1, s3 in _RAMP_SHAPES:
        qa = float(s1 + s3)
        qb = -2.0 * (a_max * duration + s1 * u0 + s3 * u1)
        qc = 2.0 * a_max * distance + s1 * u0 * u0 + s3 * u1 * u1
        if qa == 0.0:
            if qb == 0.0:
                continue
            roots = [-qc / qb]
        else:
            disc = qb * qb - 4.0 * qa * qc
            if disc < 0:
                continue
            sq = math.sqrt(disc)
            roots = [(-qb + sq) / (2.0 * qa), (-qb - sq) / (2.0 * qa)]

        for vc in roots:
            up = s1 * (vc - u0) / a_max
            down = s3 * (vc - u1) / a_max
            if up < -tol or down < -tol or abs(vc) > v_max + EPSILON:
                continue
            up, down = max(up, 0.0), max(down, 0.0)
            if duration - up - down < -tol:
                continue
            if best is None or vc > best[0]:
                best = (vc, up, down, s1, s3)

    if best is None:
        raise TrajectoryPlanningError(
            f"axis {axis} cannot be synchronized to {duration:.6g}s within "
            f"v_max={v_max:g}, a_max={a_max:g}"
        )

    vc, up, down, s1, s3 = best
    return AxisPlan(
        start_accel=direction * s1 * a_max,
        end_accel=-direction * s3 * a_max,
        peak_velocity=direction * vc,
        ramp_up=up,
        cruise=max(duration - up - down, 0.0),
        ramp_down=down,
    )


def synchronize_linear(
    delta: np.ndarray, speed: float, v_max: np.ndarray
) -> tuple[np.ndarray, float]:
    """
    Constant-velocity move covering ``delta`` at path ``speed``.

    Every axis arrives together, so each axis runs at ``delta / T``.

    Raises:
        TrajectoryPlanningError: an axis would exceed its velocity limit.
    """
    length = float(np.linalg.norm(delta))
    if length <= EPSILON:
        return np.zeros_like(delta), 0.0
    duration = length / speed
    velocity = delta / duration
    over = np.abs(velocity) > v_max + EPSILON
    if np.any(over):
        axes = np.flatnonzero(over).tolist()
        raise TrajectoryPlanningError(
            f"transit speed {speed:g} needs {np.abs(velocity)[over].tolist()} on axes {axes}, "
            f"above velocity limit {v_max[over].tolist()}"
        )
    return velocity, duration


def synchronize_blend(
    start_velocity: np.ndarray, end_velocity: np.ndarray, a_max: np.ndarray
) -> tuple[np.ndarray, float]:
    """
    Constant-acceleration ramp between two velocity vectors.

    The governing axis ramps at its limit; the others keep their own signed
    acceleration ``dv / T`` so they finish the ramp at the same instant.
    """
    dv = end_velocity - start_velocity
    ramp = Phase.between(start_velocity, end_velocity, np.where(dv < 0.0, -a_max, a_max))
    duration = ramp.max_duration
    if duration <= EPSILON:
        return np.zeros_like(dv), 0.0
    return dv / duration, duration
