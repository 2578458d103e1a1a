"""
Unit tests for TrackingService session operations.

Tests for:
- Starting sessions and the one-active-session rule (including concurrent starts)
- Starting and cancelling sessions created with a planned date
- Completing and abandoning, with linked planned workouts
- Exercises and sets through the service
- Scoring
- Failed operations leave storage unchanged
"""

import asyncio
from datetime import date, timedelta

import pytest

from domain.errors import (
    CannotCompleteSession,
    CannotStartSession,
    ExerciseAlreadyExists,
    ExerciseNotFoundInSession,
    InvalidSessionStatus,
    NoExerciseParameters,
    UserAlreadyHasActiveWorkoutSession,
    WorkoutSessionNotFound,
)
from domain.models import (
    ExerciseMetricType,
    PerceivedDifficulty,
    PlannedWorkout,
    WorkoutSession,
    WorkoutSessionStatus,
)
from tests.fakes import BASE_TIME, OTHER_USER_ID, TEST_USER_ID, make_history

pytestmark = pytest.mark.unit


async def _start(service, user_id: str = TEST_USER_ID, workout_id: str = "workout-1"):
    result = await service.start_workout_session(user_id, workout_id)
    assert result.success, result.error
    return result.value


# =============================================================================
# Start
# =============================================================================


class TestStartWorkoutSession:
    @pytest.mark.asyncio
    async def test_start_creates_in_progress_session(self, service, session_repo):
        session = await _start(service)

        assert session.status == WorkoutSessionStatus.IN_PROGRESS
        assert session.started_at == BASE_TIME
        assert [s.id for s in session_repo.get_all()] == [session.id]

    @pytest.mark.asyncio
    async def test_second_start_is_rejected(self, service, session_repo):
        first = await _start(service)

        result = await service.start_workout_session(TEST_USER_ID, "workout-2")

        assert not result.success
        assert isinstance(result.error, UserAlreadyHasActiveWorkoutSession)
        assert result.error.active_session_id == first.id
        assert len(session_repo.get_all()) == 1

    @pytest.mark.asyncio
    async def test_other_users_are_independent(self, service):
        await _start(service, TEST_USER_ID)
        other = await _start(service, OTHER_USER_ID)

        assert other.user_id == OTHER_USER_ID

    @pytest.mark.asyncio
    async def test_planned_date_creates_planned_session_alongside_active_one(self, service):
        await _start(service)

        result = await service.start_workout_session(
            TEST_USER_ID, "workout-2", planned_date=date(2026, 3, 9)
        )

        assert result.success
        assert result.value.status == WorkoutSessionStatus.PLANNED

    @pytest.mark.asyncio
    async def test_concurrent_starts_admit_exactly_one(self, service, session_repo):
        results = await asyncio.gather(
            *(service.start_workout_session(TEST_USER_ID, f"workout-{i}") for i in range(5))
        )

        succeeded = [r for r in results if r.success]
        failed = [r for r in results if not r.success]

        assert len(succeeded) == 1
        assert len(failed) == 4
        assert all(isinstance(r.error, UserAlreadyHasActiveWorkoutSession) for r in failed)

        active = [s for s in session_repo.get_all() if s.status == WorkoutSessionStatus.IN_PROGRESS]
        assert [s.id for s in active] == [succeeded[0].value.id]

    @pytest.mark.asyncio
    async def test_can_start_again_after_completing(self, service):
        first = await _start(service)
        await service.complete_workout_session(first.id, PerceivedDifficulty.EASY)

        second = await _start(service)
        assert second.id != first.id


# =============================================================================
# Sessions created with a planned date
# =============================================================================


async def _plan(service, workout_id: str = "workout-1", planned_date: date = date(2026, 3, 9)):
    result = await service.start_workout_session(
        TEST_USER_ID, workout_id, planned_date=planned_date
    )
    assert result.success, result.error
    return result.value


class TestPlannedSessions:
    @pytest.mark.asyncio
    async def test_start_planned_session(self, service, session_repo, clock):
        planned = await _plan(service)
        clock.advance(timedelta(hours=1))

        result = await service.start_planned_session(planned.id)

        assert result.success
        assert result.value.status == WorkoutSessionStatus.IN_PROGRESS
        assert result.value.started_at == BASE_TIME + timedelta(hours=1)
        stored = await session_repo.get_by_id(planned.id)
        assert stored.status == WorkoutSessionStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_started_planned_session_can_be_completed(self, service):
        planned = await _plan(service)
        await service.start_planned_session(planned.id)

        result = await service.complete_workout_session(planned.id, PerceivedDifficulty.MODERATE)

        assert result.success
        assert result.value.status == WorkoutSessionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_start_planned_session_blocked_by_active_session(self, service, session_repo):
        active = await _start(service)
        planned = await _plan(service, "workout-2")

        result = await service.start_planned_session(planned.id)

        assert isinstance(result.error, UserAlreadyHasActiveWorkoutSession)
        assert result.error.active_session_id == active.id
        stored = await session_repo.get_by_id(planned.id)
        assert stored.status == WorkoutSessionStatus.PLANNED

    @pytest.mark.asyncio
    async def test_starting_an_in_progress_session_fails(self, service):
        active = await _start(service)

        result = await service.start_planned_session(active.id)

        assert isinstance(result.error, CannotStartSession)

    @pytest.mark.asyncio
    async def test_concurrent_planned_starts_admit_exactly_one(self, service, session_repo):
        first = await _plan(service, "workout-1")
        second = await _plan(service, "workout-2")

        results = await asyncio.gather(
            service.start_planned_session(first.id),
            service.start_planned_session(second.id),
        )

        assert sum(r.success for r in results) == 1
        active = [s for s in session_repo.get_all() if s.status == WorkoutSessionStatus.IN_PROGRESS]
        assert len(active) == 1

    @pytest.mark.asyncio
    async def test_cancel_planned_session(self, service, session_repo):
        planned = await _plan(service)

        result = await service.cancel_workout_session(planned.id, "  travelling ")

        assert result.success
        stored = await session_repo.get_by_id(planned.id)
        assert stored.status == WorkoutSessionStatus.CANCELLED
        assert stored.notes == "travelling"

    @pytest.mark.asyncio
    async def test_cancel_in_progress_session_fails(self, service, session_repo):
        active = await _start(service)

        result = await service.cancel_workout_session(active.id)

        assert isinstance(result.error, InvalidSessionStatus)
        stored = await session_repo.get_by_id(active.id)
        assert stored.status == WorkoutSessionStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_unknown_session(self, service):
        assert isinstance(
            (await service.start_planned_session("missing")).error, WorkoutSessionNotFound
        )
        assert isinstance(
            (await service.cancel_workout_session("missing")).error, WorkoutSessionNotFound
        )


# =============================================================================
# Complete / abandon
# =============================================================================


class TestCompleteAndAbandon:
    @pytest.mark.asyncio
    async def test_complete_persists_duration(self, service, session_repo, clock):
        session = await _start(service)
        clock.advance(timedelta(minutes=30))

        result = await service.complete_workout_session(
            session.id, PerceivedDifficulty.HARD, "good"
        )

        assert result.success
        assert result.value.total_duration_seconds == 1800
        stored = await session_repo.get_by_id(session.id)
        assert stored.status == WorkoutSessionStatus.COMPLETED
        assert stored.notes == "good"

    @pytest.mark.asyncio
    async def test_complete_twice_fails_without_writing(self, service, session_repo, clock):
        session = await _start(service)
        await service.complete_workout_session(session.id, PerceivedDifficulty.EASY)
        completed_at = (await session_repo.get_by_id(session.id)).completed_at
        writes = session_repo.update_calls

        clock.advance(timedelta(hours=1))
        result = await service.complete_workout_session(session.id, PerceivedDifficulty.HARD)

        assert not result.success
        assert isinstance(result.error, CannotCompleteSession)
        assert session_repo.update_calls == writes
        assert (await session_repo.get_by_id(session.id)).completed_at == completed_at

    @pytest.mark.asyncio
    async def test_unknown_session_is_not_found(self, service):
        result = await service.complete_workout_session("missing", PerceivedDifficulty.EASY)

        assert not result.success
        assert isinstance(result.error, WorkoutSessionNotFound)
        assert result.error.session_id == "missing"

    @pytest.mark.asyncio
    async def test_abandon_stores_reason(self, service, session_repo):
        session = await _start(service)

        result = await service.abandon_workout_session(session.id, "tired")

        assert result.success
        stored = await session_repo.get_by_id(session.id)
        assert stored.status == WorkoutSessionStatus.ABANDONED
        assert stored.notes == "tired"

    @pytest.mark.asyncio
    async def test_complete_also_completes_linked_planned_workout(
        self, service, planned_repo
    ):
        planned = PlannedWorkout.schedule(TEST_USER_ID, "workout-1", date(2026, 3, 2))
        planned_repo.seed([planned])
        started = await service.start_planned_workout(planned.id)
        assert started.success

        result = await service.complete_workout_session(
            started.value.session.id, PerceivedDifficulty.MODERATE
        )

        assert result.success
        stored = await planned_repo.get_by_id(planned.id)
        assert stored.status == WorkoutSessionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_abandon_also_abandons_linked_planned_workout(self, service, planned_repo):
        planned = PlannedWorkout.schedule(TEST_USER_ID, "workout-1", date(2026, 3, 2))
        planned_repo.seed([planned])
        started = await service.start_planned_workout(planned.id)

        await service.abandon_workout_session(started.value.session.id)

        stored = await planned_repo.get_by_id(planned.id)
        assert stored.status == WorkoutSessionStatus.ABANDONED


# =============================================================================
# Exercises and sets
# =============================================================================


class TestExercisesAndSets:
    @pytest.mark.asyncio
    async def test_add_exercise_with_first_set(self, service, session_repo):
        session = await _start(service)

        result = await service.add_exercise_to_session(
            session.id,
            "bench",
            "Bench Press",
            ExerciseMetricType.REPETITION,
            repetitions=10,
            weight=50,
        )

        assert result.success
        exercise = result.value.exercises[0]
        assert exercise.order == 1
        assert exercise.best_performance == 500
        assert exercise.sets[0].display_text == "10x50.0kg"

        stored = await session_repo.get_by_id(session.id)
        assert stored.get_exercise("bench").has_sets

    @pytest.mark.asyncio
    async def test_duplicate_exercise_is_rejected(self, service, session_repo):
        session = await _start(service)
        await service.add_exercise_to_session(
            session.id, "bench", "Bench Press", ExerciseMetricType.REPETITION
        )

        result = await service.add_exercise_to_session(
            session.id, "bench", "Bench Press", ExerciseMetricType.REPETITION
        )

        assert isinstance(result.error, ExerciseAlreadyExists)
        assert (await session_repo.get_by_id(session.id)).exercise_count == 1

    @pytest.mark.asyncio
    async def test_add_set_returns_the_new_set(self, service):
        session = await _start(service)
        await service.add_exercise_to_session(
            session.id, "plank", "Plank", ExerciseMetricType.DURATION, duration_seconds=60
        )

        result = await service.add_set_to_exercise(
            session.id, "plank", duration_seconds=90, rest_time_seconds=30
        )

        assert result.success
        assert result.value.set_number == 2
        assert result.value.display_text == "1:30"

    @pytest.mark.asyncio
    async def test_empty_set_is_rejected_without_writing(self, service, session_repo):
        session = await _start(service)
        await service.add_exercise_to_session(
            session.id, "plank", "Plank", ExerciseMetricType.DURATION
        )
        writes = session_repo.update_calls

        result = await service.add_set_to_exercise(session.id, "plank")

        assert isinstance(result.error, NoExerciseParameters)
        assert session_repo.update_calls == writes

    @pytest.mark.asyncio
    async def test_remove_exercise(self, service):
        session = await _start(service)
        for exercise_id in ("a", "b"):
            await service.add_exercise_to_session(
                session.id, exercise_id, exercise_id, ExerciseMetricType.REPETITION
            )

        result = await service.remove_exercise_from_session(session.id, "a")

        assert [(e.exercise_id, e.order) for e in result.value.exercises] == [("b", 1)]

    @pytest.mark.asyncio
    async def test_remove_unknown_exercise(self, service):
        session = await _start(service)
        result = await service.remove_exercise_from_session(session.id, "ghost")
        assert isinstance(result.error, ExerciseNotFoundInSession)


# =============================================================================
# Queries
# =============================================================================


class TestSessionQueries:
    @pytest.mark.asyncio
    async def test_get_missing_session_returns_none(self, service):
        assert await service.get_workout_session("missing") is None
        assert await service.get_active_workout_session(TEST_USER_ID) is None

    @pytest.mark.asyncio
    async def test_active_session(self, service):
        session = await _start(service)
        active = await service.get_active_workout_session(TEST_USER_ID)
        assert active.id == session.id

    @pytest.mark.asyncio
    async def test_history_is_newest_first_and_limited(self, service, session_repo):
        session_repo.seed(make_history(TEST_USER_ID, "bench", [100, 110, 120]))

        history = await service.get_user_workout_history(TEST_USER_ID, limit=2)

        assert len(history) == 2
        assert history[0].created_at > history[1].created_at

    @pytest.mark.asyncio
    async def test_sessions_in_period(self, service, session_repo):
        session_repo.seed(make_history(TEST_USER_ID, "bench", [100, 110, 120]))

        sessions = await service.get_workout_sessions_in_period(
            TEST_USER_ID, BASE_TIME + timedelta(days=1), BASE_TIME + timedelta(days=2)
        )

        assert len(sessions) == 2


# =============================================================================
# Scoring
# =============================================================================


class TestScoring:
    async def _session_with_bench(self, service, weight: float) -> str:
        session = await _start(service)
        await service.add_exercise_to_session(
            session.id,
            "bench",
            "Bench Press",
            ExerciseMetricType.REPETITION,
            repetitions=1,
            weight=weight,
        )
        return session.id

    @pytest.mark.asyncio
    async def test_first_attempt(self, service):
        session_id = await self._session_with_bench(service, 100)

        result = await service.calculate_exercise_score(session_id, "bench")

        assert result.success
        assert result.value.score == 75
        assert result.value.description == "Great"

    @pytest.mark.asyncio
    async def test_score_against_history(self, service, session_repo):
        session_repo.seed(
            make_history(TEST_USER_ID, "bench", [100] * 5, first_day=BASE_TIME - timedelta(days=10))
        )
        session_id = await self._session_with_bench(service, 120)

        result = await service.calculate_exercise_score(session_id, "bench")

        assert result.value.score == pytest.approx(100.0)

    @pytest.mark.asyncio
    async def test_calculate_exercise_score_does_not_write(self, service, session_repo):
        session_id = await self._session_with_bench(service, 100)
        writes = session_repo.update_calls

        await service.calculate_exercise_score(session_id, "bench")

        assert session_repo.update_calls == writes

    @pytest.mark.asyncio
    async def test_score_workout_session_stores_exercise_scores(self, service, session_repo):
        session_id = await self._session_with_bench(service, 100)

        result = await service.score_workout_session(session_id)

        assert result.success
        assert result.value.score == pytest.approx(80.0)
        assert result.value.exercise_scores == {"bench": 75}
        stored = await session_repo.get_by_id(session_id)
        assert stored.get_exercise("bench").performance_score == 75

    @pytest.mark.asyncio
    async def test_score_unknown_exercise(self, service):
        session_id = await self._session_with_bench(service, 100)
        result = await service.calculate_exercise_score(session_id, "squat")
        assert isinstance(result.error, ExerciseNotFoundInSession)

    @pytest.mark.asyncio
    async def test_history_excludes_scored_session(self, service, session_repo):
        # A completed session must not count as its own history
        session_id = await self._session_with_bench(service, 100)
        await service.complete_workout_session(session_id, PerceivedDifficulty.EASY)

        result = await service.calculate_exercise_score(session_id, "bench")

        assert result.value.score == 75


@pytest.mark.asyncio
async def test_storage_failures_propagate(service, session_repo, monkeypatch):
    class StorageDown(RuntimeError):
        pass

    async def broken_add(session: WorkoutSession):
        raise StorageDown("connection refused")

    monkeypatch.setattr(session_repo, "add", broken_add)

    with pytest.raises(StorageDown):
        await service.start_workout_session(TEST_USER_ID, "workout-1")
