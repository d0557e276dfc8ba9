"""
Constant-acceleration phase of a motion profile.

A phase covers every axis of a move at once: each field is an array with
one entry per axis.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from trajectory_planner.config import EPSILON

from .constraints import ArrayLike, as_axes


def second_order(t, initial_pos, initial_vel, accel):
    """x(t) = x0 + v0*t + a*t²/2, element-wise."""
    return initial_pos + initial_vel * t + 0.5 * accel * t * t


@dataclass(frozen=True, eq=False)
class Phase:
    duration: np.ndarray
    distance: np.ndarray
    start_velocity: np.ndarray
    acceleration: np.ndarray

    @classmethod
    def between(
        cls, start_velocity: ArrayLike, end_velocity: ArrayLike, acceleration: ArrayLike
    ) -> Phase:
        """
        Ramp from ``start_velocity`` to ``end_velocity`` at a signed acceleration.

        An axis with no velocity change and zero acceleration gets a zero
        duration. Zero acceleration with a velocity change is undefined.
        """
        v0 = as_axes(start_velocity, "start velocity")
        v1 = as_axes(end_velocity, "end velocity")
        accel = as_axes(acceleration, "acceleration")
        v0, v1, accel = np.broadcast_arrays(v0, v1, accel)
        dv = v1 - v0

        still = accel == 0.0
        if np.any(still & (dv != 0.0)):
            raise ValueError(
                f"zero acceleration cannot change velocity (delta {dv[still].tolist()})"
            )

        duration = np.divide(dv, accel, out=np.zeros_like(dv), where=~still)
        if np.any(duration < -EPSILON):
            raise ValueError(
                f"acceleration sign does not match velocity change: "
                f"dv={dv.tolist()}, a={accel.tolist()}"
            )
        duration = np.maximum(duration, 0.0)
        distance = second_order(duration, 0.0, v0, accel)
        return cls(duration=duration, distance=distance, start_velocity=v0.copy(), acceleration=accel.copy())

    @classmethod
    def ramp(
        cls, duration: ArrayLike, start_velocity: ArrayLike, acceleration: ArrayLike
    ) -> Phase:
        """Leg of a known duration, e.g. after synchronization fixed it."""
        duration = as_axes(duration, "duration")
        v0 = as_axes(start_velocity, "start velocity")
        accel = as_axes(acceleration, "acceleration")
        duration, v0, accel = np.broadcast_arrays(duration, v0, accel)
        if np.any(duration < 0):
            raise ValueError(f"phase duration must not be negative, got {duration.tolist()}")
        return cls(
            duration=duration.copy(),
            distance=second_order(duration, 0.0, v0, accel),
            start_velocity=v0.copy(),
            acceleration=accel.copy(),
        )

    @classmethod
    def cruise(cls, duration: ArrayLike, velocity: ArrayLike) -> Phase:
        duration = as_axes(duration, "duration")
        velocity = as_axes(velocity, "velocity")
        duration, velocity = np.broadcast_arrays(duration, velocity)
        acceleration = np.zeros_like(velocity)
        distance = second_order(duration, 0.0, velocity, acceleration)
        return cls(
            duration=duration.copy(),
            distance=distance,
            start_velocity=velocity.copy(),
            acceleration=acceleration,
        )

    @classmethod
    def zero(cls, axes: int) -> Phase:
        z = np.zeros(axes)
        return cls(duration=z, distance=z.copy(), start_velocity=z.copy(), acceleration=z.copy())

    @property
    def max_duration(self) -> float:
        """Canonical duration driving the move: the slowest axis."""
        return float(np.max(self.duration)) if self.duration.size else 0.0

    def position(self, t, start_position) -> np.ndarray:
        """Position ``t`` seconds into the phase (scalar or per-axis ``t``)."""
        return second_order(t, start_position, self.start_velocity, self.acceleration)

    def velocity(self, t) -> np.ndarray:
        return self.start_velocity + self.acceleration * t
