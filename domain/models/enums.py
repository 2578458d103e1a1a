"""
Closed enumerations shared by the tracking domain.

Values are lowercase strings so they can be stored as-is in Supabase
text columns and serialized directly by pydantic.
"""

from enum import Enum


class WorkoutSessionStatus(str, Enum):
    """
    Lifecycle status shared by WorkoutSession and PlannedWorkout.

    - PLANNED: Scheduled for future execution
    - IN_PROGRESS: Currently being performed
    - COMPLETED: Finished successfully (terminal)
    - ABANDONED: Started but not finished (terminal)
    - CANCELLED: Planned but never started (terminal)
    """

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {
        WorkoutSessionStatus.COMPLETED,
        WorkoutSessionStatus.ABANDONED,
        WorkoutSessionStatus.CANCELLED,
    }
)


class ExerciseMetricType(str, Enum):
    """
    How an exercise's effort is measured.

    Determines which set fields are meaningful when computing
    the best performance of an exercise.
    """

    REPETITION = "repetition"
    DURATION = "duration"
    DISTANCE = "distance"


class PerceivedDifficulty(int, Enum):
    """Subjective post-workout rating, from very easy (1) to maximum effort (6)."""

    VERY_EASY = 1
    EASY = 2
    MODERATE = 3
    HARD = 4
    VERY_HARD = 5
    MAXIMUM = 6


class UserMetricType(str, Enum):
    """Kinds of scalar measurements tracked over time for a user."""

    WEIGHT = "weight"
    HEIGHT = "height"
    PERSONAL_RECORD = "personal_record"

    @property
    def default_unit(self) -> str:
        """Storage unit used when none is supplied."""
        return _DEFAULT_UNITS[self]


_DEFAULT_UNITS = {
    UserMetricType.WEIGHT: "kg",
    UserMetricType.HEIGHT: "cm",
    UserMetricType.PERSONAL_RECORD: "kg",
}
