"""
Domain models for workout tracking.

This package contains pure domain models that are independent of
infrastructure concerns (database, API, external services).

These models represent the core business concepts:
- WorkoutSession: Aggregate root for one execution of a workout
- WorkoutSessionExercise: One exercise performed within a session
- WorkoutSessionSet: One recorded set of an exercise
- PlannedWorkout: Aggregate root for a workout scheduled on a date
- UserMetric: Timestamped body or record measurement

Usage:
    >>> from domain.models import WorkoutSession, ExerciseMetricType

    >>> session = WorkoutSession.start_new(user_id="u1", workout_id="w1")
    >>> session.add_exercise("squat", "Back Squat", ExerciseMetricType.REPETITION,
    ...                      repetitions=5, weight=100)

    >>> # Serialize to JSON
    >>> json_str = session.model_dump_json(indent=2)
"""

from domain.models.enums import (
    ExerciseMetricType,
    PerceivedDifficulty,
    UserMetricType,
    WorkoutSessionStatus,
)
from domain.models.planned_workout import PlannedWorkout
from domain.models.user_metric import UserMetric
from domain.models.workout_session import (
    WorkoutSession,
    WorkoutSessionExercise,
    WorkoutSessionSet,
)

__all__ = [
    # Aggregates
    "WorkoutSession",
    "PlannedWorkout",
    "UserMetric",
    # Entities
    "WorkoutSessionExercise",
    "WorkoutSessionSet",
    # Enums
    "WorkoutSessionStatus",
    "ExerciseMetricType",
    "PerceivedDifficulty",
    "UserMetricType",
]
