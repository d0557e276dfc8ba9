import numpy as np
import pytest

from trajectory_planner.config import CONTROL_RATE_HZ
from trajectory_planner.motion import KinematicPoint, Trajectory, TrapezoidalProfile
from trajectory_planner.utils.trajectory import sample_profile, sample_times


def test_sample_times_include_both_ends():
    times = sample_times(1.9, 250.0)
    assert times.shape == (476,)
    assert times[0] == 0.0
    assert times[-1] == 1.9


def test_sample_times_default_rate_and_empty():
    times = sample_times(1.0)
    assert times.shape == (int(round(CONTROL_RATE_HZ)) + 1,)
    assert np.allclose(sample_times(0.0), [0.0])

    with pytest.raises(ValueError):
        sample_times(1.0, 0.0)


def test_sample_profile_endpoints_and_shape(limits):
    start = [0.0, 1.0]
    end = [3.0, -1.0]
    profile = TrapezoidalProfile(limits, KinematicPoint(start), KinematicPoint(end))

    times, positions, velocities, accelerations = sample_profile(profile)
    expected_n = int(round(profile.duration() * CONTROL_RATE_HZ)) + 1
    assert positions.shape == (expected_n, 2)
    assert velocities.shape == accelerations.shape == (expected_n, 2)
    assert times.shape == (expected_n,)

    # Endpoints
    assert np.allclose(positions[0], start)
    assert np.allclose(positions[-1], end)

    # Monotonic progression on each axis
    diffs = np.diff(positions, axis=0)
    assert np.all(diffs[:, 0] >= -1e-9)
    assert np.all(diffs[:, 1] <= 1e-9)


def test_sample_empty_trajectory(limits):
    times, positions, velocities, accelerations = sample_profile(Trajectory(limits))
    assert times.size == 0
    assert positions.size == velocities.size == accelerations.size == 0
