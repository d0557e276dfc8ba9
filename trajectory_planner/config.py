"""
Central configuration for trajectory planner tunables and shared constants.
"""

import logging
import os

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")
# Add Logger.trace if missing
if not hasattr(logging.Logger, "trace"):

    def _trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    logging.Logger.trace = _trace  # type: ignore[attr-defined]
    logging.TRACE = TRACE  # type: ignore[attr-defined]

TRACE_ENABLED = str(os.getenv("TRAJ_TRACE", "0")).lower() in ("1", "true", "yes", "on")

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r, expected a number", name, raw)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r, expected an integer", name, raw)
        return default


# Tolerance for zero-length moves, phase boundaries and continuity checks
EPSILON: float = _env_float("TRAJ_EPSILON", 1e-9)

# Default sample rate (Hz) used when discretizing a profile for a control loop
CONTROL_RATE_HZ: float = _env_float("TRAJ_CONTROL_RATE_HZ", 250.0)

# Limits used by the CLI when none are given (units/s, units/s²)
DEFAULT_VELOCITY: float = _env_float("TRAJ_DEFAULT_VELOCITY", 1.0)
DEFAULT_ACCELERATION: float = _env_float("TRAJ_DEFAULT_ACCELERATION", 10.0)

# Upper bound on blend clamping passes over the queue
MAX_CLAMP_PASSES: int = max(1, _env_int("TRAJ_MAX_CLAMP_PASSES", 1000))
