"""
PlannedWorkout aggregate root - a future-dated intent to perform a workout.

Starting a planned workout links it to the WorkoutSession created for it;
from then on the planned workout follows that session to completion or
abandonment.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from domain.errors import (
    CannotAbandonPlannedWorkout,
    CannotCancelPlannedWorkout,
    CannotCompletePlannedWorkout,
    CannotRescheduleWorkout,
    CannotStartPlannedWorkout,
    MissingRequiredValue,
)
from domain.models.enums import WorkoutSessionStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlannedWorkout(BaseModel):
    """
    A workout scheduled for a specific calendar day.

    Examples:
        >>> planned = PlannedWorkout.schedule("u1", "w1", date(2030, 1, 15))
        >>> planned.start("session-1")
        >>> planned.status
        <WorkoutSessionStatus.IN_PROGRESS: 'in_progress'>
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str = Field(..., min_length=1)
    workout_id: str = Field(..., min_length=1)
    scheduled_date: date
    status: WorkoutSessionStatus = WorkoutSessionStatus.PLANNED
    is_from_program: bool = False
    program_id: Optional[str] = None
    workout_session_id: Optional[str] = Field(
        default=None,
        description="Session created when this planned workout was started",
    )
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = None

    @classmethod
    def schedule(
        cls,
        user_id: str,
        workout_id: str,
        scheduled_date: date,
        *,
        is_from_program: bool = False,
        program_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "PlannedWorkout":
        if not user_id:
            raise MissingRequiredValue(field="user_id")
        if not workout_id:
            raise MissingRequiredValue(field="workout_id")

        return cls(
            user_id=user_id,
            workout_id=workout_id,
            scheduled_date=scheduled_date,
            is_from_program=is_from_program,
            program_id=program_id,
            created_at=now or _utcnow(),
        )

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def reschedule(self, new_date: date, *, now: Optional[datetime] = None) -> None:
        if self.status != WorkoutSessionStatus.PLANNED:
            raise CannotRescheduleWorkout(status=self.status)
        self.scheduled_date = new_date
        self.updated_at = now or _utcnow()

    def start(self, workout_session_id: str, *, now: Optional[datetime] = None) -> None:
        if self.status != WorkoutSessionStatus.PLANNED:
            raise CannotStartPlannedWorkout(status=self.status)
        if not workout_session_id:
            raise MissingRequiredValue(field="workout_session_id")
        self.workout_session_id = workout_session_id
        self.status = WorkoutSessionStatus.IN_PROGRESS
        self.updated_at = now or _utcnow()

    def complete(self, *, now: Optional[datetime] = None) -> None:
        if self.status != WorkoutSessionStatus.IN_PROGRESS:
            raise CannotCompletePlannedWorkout(status=self.status)
        self.status = WorkoutSessionStatus.COMPLETED
        self.updated_at = now or _utcnow()

    def abandon(self, *, now: Optional[datetime] = None) -> None:
        if self.status != WorkoutSessionStatus.IN_PROGRESS:
            raise CannotAbandonPlannedWorkout(status=self.status)
        self.status = WorkoutSessionStatus.ABANDONED
        self.updated_at = now or _utcnow()

    def cancel(self, *, now: Optional[datetime] = None) -> None:
        if self.status != WorkoutSessionStatus.PLANNED:
            raise CannotCancelPlannedWorkout(status=self.status)
        self.status = WorkoutSessionStatus.CANCELLED
        self.updated_at = now or _utcnow()

    # -------------------------------------------------------------------------
    # Calendar queries
    # -------------------------------------------------------------------------

    @staticmethod
    def _today(today: Optional[date]) -> date:
        return today or _utcnow().date()

    def is_overdue(self, today: Optional[date] = None) -> bool:
        return (
            self.status == WorkoutSessionStatus.PLANNED
            and self.scheduled_date < self._today(today)
        )

    def is_upcoming(self, today: Optional[date] = None) -> bool:
        return (
            self.status == WorkoutSessionStatus.PLANNED
            and self.scheduled_date >= self._today(today)
        )

    def is_scheduled_for_today(self, today: Optional[date] = None) -> bool:
        return (
            self.status == WorkoutSessionStatus.PLANNED
            and self.scheduled_date == self._today(today)
        )

    def days_until_scheduled(self, today: Optional[date] = None) -> int:
        """Negative when the scheduled date has passed."""
        return (self.scheduled_date - self._today(today)).days
