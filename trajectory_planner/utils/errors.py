"""
Custom exception types for the trajectory planning core.
Keep this focused and non-redundant; prefer built-ins where appropriate.
"""


class TrajectoryPlanningError(RuntimeError):
    """Requested move cannot be satisfied under the given limits."""

    def __init__(self, message: str):
        self.original_message = message
        super().__init__(f"Trajectory Planning Error: {message}")

    def __str__(self):
        return f"Trajectory Planning Error: {self.original_message}"


class TrajectoryInvariantError(AssertionError):
    """Phase or queue bookkeeping is inconsistent. Not recoverable."""

    def __init__(self, message: str):
        self.original_message = message
        super().__init__(f"Trajectory Invariant Violated: {message}")

    def __str__(self):
        return f"Trajectory Invariant Violated: {self.original_message}"
