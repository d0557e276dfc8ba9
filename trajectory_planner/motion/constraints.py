"""
Kinematic limits and boundary points.

Defines per-axis limits for velocity and acceleration, the kinematic
point type shared by profiles and queues, and a numeric check that a
sampled trajectory respects the limits.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from trajectory_planner.config import EPSILON

ArrayLike = float | Sequence[float] | np.ndarray


def as_axes(value: ArrayLike, name: str = "value") -> np.ndarray:
    """Promote a scalar or sequence to a 1-D float array of axes."""
    arr = np.atleast_1d(np.asarray(value, dtype=float))
    if arr.ndim != 1:
        raise ValueError(f"{name} must be a scalar or a 1-D sequence, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must be finite, got {arr.tolist()}")
    return arr


@dataclass(frozen=True, eq=False)
class KinematicPoint:
    """Position and signed velocity of every axis."""

    position: np.ndarray
    velocity: np.ndarray = field(default=None)  # type: ignore[assignment]

    def __post_init__(self):
        position = as_axes(self.position, "position")
        if self.velocity is None:
            velocity = np.zeros_like(position)
        else:
            velocity = as_axes(self.velocity, "velocity")
            if velocity.size == 1 and position.size > 1:
                velocity = np.full_like(position, velocity[0])
        if velocity.shape != position.shape:
            raise ValueError(
                f"position and velocity must have the same number of axes "
                f"({position.size} != {velocity.size})"
            )
        object.__setattr__(self, "position", position)
        object.__setattr__(self, "velocity", velocity)

    @property
    def axes(self) -> int:
        return int(self.position.size)

    def __str__(self):
        pos = ", ".join(f"{p:0.4f}" for p in self.position)
        vel = ", ".join(f"{v:0.4f}" for v in self.velocity)
        return f"P: [{pos}], V: [{vel}]"


@dataclass(frozen=True, eq=False)
class Limits:
    """
    Per-axis maximum velocity and acceleration magnitudes.

    A scalar applies to every axis once the limits are broadcast to the
    axis count of a move.
    """

    velocity: np.ndarray
    acceleration: np.ndarray

    def __post_init__(self):
        velocity = as_axes(self.velocity, "velocity limit")
        acceleration = as_axes(self.acceleration, "acceleration limit")
        if np.any(velocity <= 0):
            raise ValueError(f"velocity limit must be positive, got {velocity.tolist()}")
        if np.any(acceleration <= 0):
            raise ValueError(
                f"acceleration limit must be positive, got {acceleration.tolist()}"
            )
        object.__setattr__(self, "velocity", velocity)
        object.__setattr__(self, "acceleration", acceleration)

    def broadcast(self, axes: int) -> Limits:
        """Expand scalar limits to ``axes`` axes."""
        try:
            velocity = np.broadcast_to(self.velocity, (axes,)).copy()
            acceleration = np.broadcast_to(self.acceleration, (axes,)).copy()
        except ValueError as e:
            raise ValueError(
                f"limits with {self.velocity.size}/{self.acceleration.size} axes "
                f"do not fit a move with {axes} axes"
            ) from e
        return Limits(velocity=velocity, acceleration=acceleration)

    def with_velocity(self, velocity: ArrayLike) -> Limits:
        return Limits(velocity=velocity, acceleration=self.acceleration)

    def with_acceleration(self, acceleration: ArrayLike) -> Limits:
        return Limits(velocity=self.velocity, acceleration=acceleration)


def validate_samples(
    velocities: np.ndarray,
    accelerations: np.ndarray,
    limits: Limits,
    tolerance: float = 1e-6,
) -> dict[str, float | bool]:
    """
    Validate that sampled velocities and accelerations respect the limits.

    Args:
        velocities: array of shape (N, D)
        accelerations: array of shape (N, D)
        limits: limits to check against, broadcast to D axes

    Returns:
        Dictionary with validation results
    """
    velocities = np.atleast_2d(np.asarray(velocities, dtype=float))
    accelerations = np.atleast_2d(np.asarray(accelerations, dtype=float))
    if velocities.size == 0:
        return {
            "velocity_ok": True,
            "acceleration_ok": True,
            "max_velocity": 0.0,
            "max_acceleration": 0.0,
        }

    limits = limits.broadcast(velocities.shape[1])
    tol = max(tolerance, EPSILON)
    abs_v = np.abs(velocities)
    abs_a = np.abs(accelerations)

    validation: dict[str, float | bool] = {
        "velocity_ok": bool(np.all(abs_v <= limits.velocity + tol)),
        "acceleration_ok": bool(np.all(abs_a <= limits.acceleration + tol)),
        "max_velocity": float(np.max(abs_v)),
        "max_acceleration": float(np.max(abs_a)),
    }

    return validation
