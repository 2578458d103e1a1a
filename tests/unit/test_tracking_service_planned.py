"""
Unit tests for TrackingService planned-workout operations.
"""

import asyncio
from datetime import date

import pytest

from domain.errors import (
    CannotCancelPlannedWorkout,
    CannotRescheduleWorkout,
    CannotStartPlannedWorkout,
    PlannedWorkoutNotFound,
    UserAlreadyHasActiveWorkoutSession,
    WorkoutAlreadyScheduled,
)
from domain.models import PerceivedDifficulty, WorkoutSessionStatus
from tests.fakes import TEST_USER_ID

pytestmark = pytest.mark.unit

# BASE_TIME falls on 2026-03-02
YESTERDAY = date(2026, 3, 1)
TODAY = date(2026, 3, 2)
NEXT_WEEK = date(2026, 3, 9)


async def _schedule(service, scheduled_date: date = NEXT_WEEK, workout_id: str = "workout-1"):
    result = await service.schedule_workout(TEST_USER_ID, workout_id, scheduled_date)
    assert result.success, result.error
    return result.value


class TestScheduleWorkout:
    @pytest.mark.asyncio
    async def test_schedule(self, service, planned_repo):
        planned = await _schedule(service)

        assert planned.status == WorkoutSessionStatus.PLANNED
        assert planned.days_until_scheduled == 7
        assert not planned.is_overdue
        assert len(planned_repo.get_all()) == 1

    @pytest.mark.asyncio
    async def test_duplicate_schedule_is_rejected(self, service, planned_repo):
        await _schedule(service)

        result = await service.schedule_workout(TEST_USER_ID, "workout-1", NEXT_WEEK)

        assert isinstance(result.error, WorkoutAlreadyScheduled)
        assert result.error.scheduled_date == NEXT_WEEK
        assert len(planned_repo.get_all()) == 1

    @pytest.mark.asyncio
    async def test_same_workout_on_another_day_is_allowed(self, service):
        await _schedule(service, NEXT_WEEK)
        await _schedule(service, TODAY)

    @pytest.mark.asyncio
    async def test_cancelled_schedule_frees_the_day(self, service):
        planned = await _schedule(service)
        await service.cancel_planned_workout(planned.id)

        await _schedule(service)

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_schedules_admit_one(self, service, planned_repo):
        results = await asyncio.gather(
            service.schedule_workout(TEST_USER_ID, "workout-1", NEXT_WEEK),
            service.schedule_workout(TEST_USER_ID, "workout-1", NEXT_WEEK),
        )

        assert sorted(r.success for r in results) == [False, True]
        assert len(planned_repo.get_all()) == 1


class TestRescheduleAndCancel:
    @pytest.mark.asyncio
    async def test_reschedule(self, service, planned_repo):
        planned = await _schedule(service)

        result = await service.reschedule_workout(planned.id, date(2026, 3, 12))

        assert result.success
        assert (await planned_repo.get_by_id(planned.id)).scheduled_date == date(2026, 3, 12)

    @pytest.mark.asyncio
    async def test_reschedule_onto_a_taken_day(self, service, planned_repo):
        await _schedule(service, TODAY)
        planned = await _schedule(service, NEXT_WEEK)

        result = await service.reschedule_workout(planned.id, TODAY)

        assert isinstance(result.error, WorkoutAlreadyScheduled)
        assert (await planned_repo.get_by_id(planned.id)).scheduled_date == NEXT_WEEK

    @pytest.mark.asyncio
    async def test_reschedule_cancelled_workout_fails(self, service):
        planned = await _schedule(service)
        await service.cancel_planned_workout(planned.id)

        result = await service.reschedule_workout(planned.id, TODAY)

        assert isinstance(result.error, CannotRescheduleWorkout)

    @pytest.mark.asyncio
    async def test_cancel_twice_fails(self, service):
        planned = await _schedule(service)
        first = await service.cancel_planned_workout(planned.id)
        second = await service.cancel_planned_workout(planned.id)

        assert first.value.status == WorkoutSessionStatus.CANCELLED
        assert isinstance(second.error, CannotCancelPlannedWorkout)

    @pytest.mark.asyncio
    async def test_unknown_planned_workout(self, service):
        result = await service.cancel_planned_workout("missing")

        assert isinstance(result.error, PlannedWorkoutNotFound)
        assert result.error.planned_workout_id == "missing"


class TestStartPlannedWorkout:
    @pytest.mark.asyncio
    async def test_start_links_session_and_planned_workout(
        self, service, session_repo, planned_repo
    ):
        planned = await _schedule(service, TODAY)

        result = await service.start_planned_workout(planned.id)

        assert result.success
        session = result.value.session
        assert session.status == WorkoutSessionStatus.IN_PROGRESS
        assert result.value.planned_workout.workout_session_id == session.id

        stored = await planned_repo.get_by_id(planned.id)
        assert stored.status == WorkoutSessionStatus.IN_PROGRESS
        assert stored.workout_session_id == session.id
        assert (await session_repo.get_by_id(session.id)) is not None

    @pytest.mark.asyncio
    async def test_start_with_active_session_changes_nothing(
        self, service, session_repo, planned_repo
    ):
        await service.start_workout_session(TEST_USER_ID, "workout-9")
        planned = await _schedule(service, TODAY)

        result = await service.start_planned_workout(planned.id)

        assert isinstance(result.error, UserAlreadyHasActiveWorkoutSession)
        assert (await planned_repo.get_by_id(planned.id)).status == WorkoutSessionStatus.PLANNED
        assert len(session_repo.get_all()) == 1

    @pytest.mark.asyncio
    async def test_start_finished_planned_workout_fails(self, service, session_repo):
        planned = await _schedule(service, TODAY)
        started = await service.start_planned_workout(planned.id)
        await service.complete_workout_session(started.value.session.id, PerceivedDifficulty.EASY)

        result = await service.start_planned_workout(planned.id)

        assert isinstance(result.error, CannotStartPlannedWorkout)
        assert result.error.status == WorkoutSessionStatus.COMPLETED
        assert len(session_repo.get_all()) == 1

    @pytest.mark.asyncio
    async def test_concurrent_starts_create_one_session(
        self, service, session_repo, planned_repo
    ):
        planned = await _schedule(service, TODAY)

        results = await asyncio.gather(
            service.start_planned_workout(planned.id),
            service.start_planned_workout(planned.id),
        )

        winners = [r for r in results if r.success]
        assert len(winners) == 1
        assert len(session_repo.get_all()) == 1
        stored = await planned_repo.get_by_id(planned.id)
        assert stored.workout_session_id == winners[0].value.session.id

    @pytest.mark.asyncio
    async def test_failed_link_abandons_the_new_session(
        self, service, session_repo, planned_repo, monkeypatch
    ):
        planned = await _schedule(service, TODAY)

        async def broken_update(planned_workout):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(planned_repo, "update", broken_update)

        with pytest.raises(RuntimeError):
            await service.start_planned_workout(planned.id)

        [session] = session_repo.get_all()
        assert session.status == WorkoutSessionStatus.ABANDONED
        assert (await planned_repo.get_by_id(planned.id)).status == WorkoutSessionStatus.PLANNED

        monkeypatch.undo()
        retry = await service.start_planned_workout(planned.id)
        assert retry.success, retry.error

    @pytest.mark.asyncio
    async def test_planned_workout_removed_before_link(
        self, service, session_repo, planned_repo, monkeypatch
    ):
        planned = await _schedule(service, TODAY)

        async def missing_update(planned_workout):
            raise PlannedWorkoutNotFound(planned_workout_id=planned_workout.id)

        monkeypatch.setattr(planned_repo, "update", missing_update)

        result = await service.start_planned_workout(planned.id)

        assert isinstance(result.error, PlannedWorkoutNotFound)
        [session] = session_repo.get_all()
        assert session.status == WorkoutSessionStatus.ABANDONED


class TestPlannedQueries:
    @pytest.mark.asyncio
    async def test_upcoming_and_overdue(self, service):
        overdue = await _schedule(service, YESTERDAY)
        today = await _schedule(service, TODAY)
        later = await _schedule(service, NEXT_WEEK)

        upcoming = await service.get_upcoming_workouts(TEST_USER_ID)
        late = await service.get_overdue_workouts(TEST_USER_ID)

        assert [p.id for p in upcoming] == [today.id, later.id]
        assert [p.id for p in late] == [overdue.id]
        assert late[0].is_overdue

    @pytest.mark.asyncio
    async def test_cancelled_workouts_are_neither_upcoming_nor_overdue(self, service):
        planned = await _schedule(service, YESTERDAY)
        await service.cancel_planned_workout(planned.id)

        assert await service.get_overdue_workouts(TEST_USER_ID) == []

    @pytest.mark.asyncio
    async def test_planned_workouts_for_date(self, service):
        await _schedule(service, TODAY, "workout-1")
        await _schedule(service, TODAY, "workout-2")
        await _schedule(service, NEXT_WEEK, "workout-1")

        for_today = await service.get_planned_workouts_for_date(TEST_USER_ID, TODAY)

        assert sorted(p.workout_id for p in for_today) == ["workout-1", "workout-2"]
