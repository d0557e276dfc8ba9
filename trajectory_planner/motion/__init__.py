from .constraints import KinematicPoint, Limits, validate_samples
from .phase import Phase
from .profile import TrapezoidalProfile
from .queue import Blend, Linear, Move, Waypoint, build_queue
from .synchronizer import AxisPlan, governing_duration, synchronize_axis
from .trajectory import Trajectory, from_waypoints

__all__ = [
    "KinematicPoint",
    "Limits",
    "Phase",
    "TrapezoidalProfile",
    "Linear",
    "Blend",
    "Move",
    "Waypoint",
    "build_queue",
    "AxisPlan",
    "governing_duration",
    "synchronize_axis",
    "Trajectory",
    "from_waypoints",
    "validate_samples",
]
