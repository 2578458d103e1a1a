"""
Domain layer for workout tracking.

This package contains pure domain models, errors and services that are
independent of infrastructure concerns (database, API, external services).
"""

from domain.models import (
    ExerciseMetricType,
    PerceivedDifficulty,
    PlannedWorkout,
    UserMetric,
    UserMetricType,
    WorkoutSession,
    WorkoutSessionExercise,
    WorkoutSessionSet,
    WorkoutSessionStatus,
)

__all__ = [
    "ExerciseMetricType",
    "PerceivedDifficulty",
    "PlannedWorkout",
    "UserMetric",
    "UserMetricType",
    "WorkoutSession",
    "WorkoutSessionExercise",
    "WorkoutSessionSet",
    "WorkoutSessionStatus",
]
