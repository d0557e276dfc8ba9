"""
Shared trajectory sampling utilities.
"""

from typing import Protocol

import numpy as np

from trajectory_planner.config import CONTROL_RATE_HZ


class SampledProfile(Protocol):
    def duration(self) -> float: ...

    def position(self, time: float): ...


def _samples_for_duration(duration: float, sample_rate: float) -> int:
    if duration <= 0:
        return 2
    n = int(round(duration * sample_rate)) + 1
    return max(2, n)


def sample_times(duration: float, sample_rate: float | None = None) -> np.ndarray:
    """Evenly spaced sample instants covering [0, duration], both ends included."""
    sr = CONTROL_RATE_HZ if sample_rate is None else float(sample_rate)
    if sr <= 0:
        raise ValueError(f"sample_rate must be positive, got {sr}")
    if duration <= 0:
        return np.zeros(1)
    n = _samples_for_duration(duration, sr)
    return np.linspace(0.0, duration, n)


def sample_profile(
    profile: SampledProfile,
    sample_rate: float | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Sample a profile or trajectory at a fixed control rate.

    Works with anything exposing ``duration()`` and
    ``position(t) -> (KinematicPoint, acceleration) | None``.

    Returns: (times (N,), positions (N, D), velocities (N, D), accelerations (N, D))
    """
    times = sample_times(profile.duration(), sample_rate)
    positions, velocities, accelerations = [], [], []
    for t in times:
        sample = profile.position(float(t))
        if sample is None:
            # Empty trajectory: nothing to sample
            return np.zeros(0), np.zeros((0, 0)), np.zeros((0, 0)), np.zeros((0, 0))
        point, accel = sample
        positions.append(point.position)
        velocities.append(point.velocity)
        accelerations.append(accel)

    return times, np.vstack(positions), np.vstack(velocities), np.vstack(accelerations)
