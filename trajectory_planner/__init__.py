"""
Trajectory Planner Python Package

Turns straight-line waypoints into continuous, kinematically bounded
multi-axis motion that a control loop can sample at any instant.

Key components:
- Trajectory: Blended waypoint queue with atomic rebuilds on every change
- TrapezoidalProfile: Accelerate/cruise/decelerate profile for a single move
- Limits / KinematicPoint: Per-axis limits and boundary states
- TrajectoryPlanningError: Raised when a request cannot be met under the limits
"""

from ._version import __version__
from .motion import KinematicPoint, Limits, Trajectory, TrapezoidalProfile
from .utils.errors import TrajectoryInvariantError, TrajectoryPlanningError

__all__ = [
    "__version__",
    "Trajectory",
    "TrapezoidalProfile",
    "Limits",
    "KinematicPoint",
    "TrajectoryPlanningError",
    "TrajectoryInvariantError",
]
