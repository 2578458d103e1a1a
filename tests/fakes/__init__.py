"""
Fake Repository Implementations for Testing.

This package provides in-memory fake implementations of repository interfaces
for fast, isolated testing. No database or external dependencies required.

Features:
- All fakes implement the same Protocol interfaces as real implementations
- Same uniqueness guarantees as the Supabase adapters
- Supports seeding with test data
- Supports reset() for test isolation
- Factory functions for common test scenarios

Usage:
    from tests.fakes import FakeWorkoutSessionRepository, make_completed_session

    repo = FakeWorkoutSessionRepository()
    repo.seed([make_completed_session("user1", "bench", [(10, 50.0)])])
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from application.services import TrackingService
from domain.models import (
    ExerciseMetricType,
    PerceivedDifficulty,
    WorkoutSession,
)
from tests.fakes.planned_workout_repository import FakePlannedWorkoutRepository
from tests.fakes.user_metric_repository import FakeUserMetricRepository
from tests.fakes.workout_session_repository import FakeWorkoutSessionRepository

BASE_TIME = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)  # a Monday
TEST_USER_ID = "test-user-123"
OTHER_USER_ID = "other-user-456"


# =============================================================================
# Factory Functions
# =============================================================================


def make_completed_session(
    user_id: str,
    exercise_id: str,
    sets: Sequence[Tuple[Optional[int], Optional[float]]],
    *,
    started_at: datetime = BASE_TIME,
    duration: timedelta = timedelta(hours=1),
    metric_type: ExerciseMetricType = ExerciseMetricType.REPETITION,
    exercise_name: str = "Bench Press",
    workout_id: str = "workout-1",
) -> WorkoutSession:
    """
    Build a COMPLETED session with one exercise.

    Args:
        sets: (repetitions, weight) pairs for a repetition exercise
    """
    session = WorkoutSession.start_new(user_id, workout_id, now=started_at)
    session.add_exercise(exercise_id, exercise_name, metric_type, now=started_at)
    for repetitions, weight in sets:
        session.add_set(exercise_id, repetitions=repetitions, weight=weight, now=started_at)
    session.complete(PerceivedDifficulty.MODERATE, now=started_at + duration)
    return session


def make_history(
    user_id: str,
    exercise_id: str,
    volumes: Sequence[float],
    *,
    first_day: datetime = BASE_TIME,
) -> List[WorkoutSession]:
    """One completed session per day, each with a single 1-rep set of the given weight."""
    return [
        make_completed_session(
            user_id,
            exercise_id,
            [(1, volume)],
            started_at=first_day + timedelta(days=i),
        )
        for i, volume in enumerate(volumes)
    ]


class FakeClock:
    """Settable UTC clock for TrackingService."""

    def __init__(self, now: datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def create_tracking_service(
    *,
    session_repo: Optional[FakeWorkoutSessionRepository] = None,
    planned_repo: Optional[FakePlannedWorkoutRepository] = None,
    metric_repo: Optional[FakeUserMetricRepository] = None,
    clock: Optional[FakeClock] = None,
) -> TrackingService:
    """Create a TrackingService over fake repositories (fresh ones when omitted)."""
    return TrackingService(
        session_repo or FakeWorkoutSessionRepository(),
        planned_repo or FakePlannedWorkoutRepository(),
        metric_repo or FakeUserMetricRepository(),
        clock=clock or FakeClock(),
    )


__all__ = [
    # Fakes
    "FakeWorkoutSessionRepository",
    "FakePlannedWorkoutRepository",
    "FakeUserMetricRepository",
    "FakeClock",
    # Factories
    "BASE_TIME",
    "TEST_USER_ID",
    "OTHER_USER_ID",
    "make_completed_session",
    "make_history",
    "create_tracking_service",
]
