"""
Pytest configuration and shared fixtures for the trajectory planner tests.

Provides common limit sets and a helper that samples a profile or
trajectory at the control rate and checks it against its limits.
"""

import logging
import os
import sys

import numpy as np
import pytest

# Add the parent directory to Python path so we can import the package
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from trajectory_planner.motion import Limits, validate_samples  # noqa: E402
from trajectory_planner.utils.trajectory import sample_profile  # noqa: E402

logger = logging.getLogger(__name__)


# ============================================================================
# LIMIT FIXTURES
# ============================================================================

@pytest.fixture
def limits() -> Limits:
    """V=2, A=5 on every axis; the limits the worked examples are computed for."""
    return Limits(velocity=2.0, acceleration=5.0)


@pytest.fixture
def per_axis_limits() -> Limits:
    return Limits(velocity=[2.0, 1.0], acceleration=[5.0, 5.0])


# ============================================================================
# SAMPLING HELPERS
# ============================================================================

@pytest.fixture
def assert_within_limits():
    """
    Sample anything with ``duration()``/``position(t)`` at 1 kHz and assert
    every sample respects ``limits``. Returns the samples for further checks.
    """

    def check(profile, limits: Limits, rate: float = 1000.0):
        times, positions, velocities, accelerations = sample_profile(profile, rate)
        result = validate_samples(velocities, accelerations, limits)
        assert result["velocity_ok"], f"max velocity {result['max_velocity']}"
        assert result["acceleration_ok"], f"max acceleration {result['max_acceleration']}"
        assert np.all(np.isfinite(positions))
        return times, positions, velocities, accelerations

    return check


# ============================================================================
# PYTEST CONFIGURATION HOOKS
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "slow: Slow-running tests"
    )


def pytest_sessionstart(session):
    logger.info("Starting trajectory planner test session")
