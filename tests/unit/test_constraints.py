import numpy as np
import pytest

from trajectory_planner.motion import KinematicPoint, Limits, validate_samples


def test_kinematic_point_defaults_to_rest():
    point = KinematicPoint([1.0, 2.0])
    assert point.axes == 2
    assert np.allclose(point.velocity, [0.0, 0.0])


def test_kinematic_point_broadcasts_scalar_velocity():
    point = KinematicPoint([1.0, 2.0, 3.0], 0.5)
    assert np.allclose(point.velocity, [0.5, 0.5, 0.5])


def test_kinematic_point_rejects_mismatched_axes():
    with pytest.raises(ValueError):
        KinematicPoint([0.0, 0.0], [1.0, 2.0, 3.0])


def test_kinematic_point_rejects_non_finite():
    with pytest.raises(ValueError):
        KinematicPoint([0.0, np.nan])


def test_kinematic_point_str():
    assert str(KinematicPoint(1.0, -0.5)) == "P: [1.0000], V: [-0.5000]"


@pytest.mark.parametrize(
    "velocity,acceleration",
    [(0.0, 1.0), (1.0, 0.0), (-1.0, 1.0), ([1.0, 0.0], 1.0)],
)
def test_limits_must_be_positive(velocity, acceleration):
    with pytest.raises(ValueError):
        Limits(velocity=velocity, acceleration=acceleration)


def test_limits_broadcast_scalar_and_per_axis():
    limits = Limits(velocity=2.0, acceleration=[5.0, 6.0, 7.0]).broadcast(3)
    assert np.allclose(limits.velocity, [2.0, 2.0, 2.0])
    assert np.allclose(limits.acceleration, [5.0, 6.0, 7.0])

    with pytest.raises(ValueError):
        Limits(velocity=[1.0, 2.0], acceleration=1.0).broadcast(3)


def test_limits_replacement_keeps_other_limit():
    limits = Limits(velocity=2.0, acceleration=5.0)
    faster = limits.with_velocity(3.0)
    assert np.allclose(faster.velocity, [3.0])
    assert np.allclose(faster.acceleration, [5.0])
    assert np.allclose(limits.velocity, [2.0])
    assert np.allclose(limits.with_acceleration(9.0).acceleration, [9.0])


def test_validate_samples_flags_violations():
    limits = Limits(velocity=1.0, acceleration=2.0)
    ok = validate_samples(np.array([[0.5], [1.0]]), np.array([[2.0], [-2.0]]), limits)
    assert ok["velocity_ok"] and ok["acceleration_ok"]
    assert ok["max_velocity"] == 1.0

    bad = validate_samples(np.array([[0.5], [-1.5]]), np.array([[2.5], [0.0]]), limits)
    assert not bad["velocity_ok"]
    assert not bad["acceleration_ok"]
    assert bad["max_acceleration"] == 2.5


def test_validate_samples_empty():
    result = validate_samples(np.zeros((0, 0)), np.zeros((0, 0)), Limits(1.0, 1.0))
    assert result["velocity_ok"] and result["acceleration_ok"]
