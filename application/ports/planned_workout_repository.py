"""
PlannedWorkout Repository Interface (Port).

This module defines the abstract interface for planned workout persistence.
"""
from datetime import date
from typing import List, Optional, Protocol

from domain.models import PlannedWorkout, WorkoutSessionStatus


class PlannedWorkoutRepository(Protocol):
    """
    Abstract interface for planned workout persistence.

    Implementations must reject a second PLANNED entry for the same
    (user_id, workout_id, scheduled_date) with WorkoutAlreadyScheduled.
    """

    async def get_by_id(self, planned_workout_id: str) -> Optional[PlannedWorkout]:
        ...

    async def get_by_session_id(self, workout_session_id: str) -> Optional[PlannedWorkout]:
        """Get the planned workout that was started as the given session."""
        ...

    async def has_planned_workout(
        self, user_id: str, workout_id: str, scheduled_date: date
    ) -> bool:
        """True if a PLANNED entry exists for this user, workout and date."""
        ...

    async def list_for_user(
        self,
        user_id: str,
        *,
        status: Optional[WorkoutSessionStatus] = None,
        scheduled_date: Optional[date] = None,
    ) -> List[PlannedWorkout]:
        """List a user's planned workouts ordered by scheduled_date ascending."""
        ...

    async def add(self, planned: PlannedWorkout) -> PlannedWorkout:
        """
        Insert a new planned workout.

        Raises:
            WorkoutAlreadyScheduled: duplicate PLANNED entry for the same day
        """
        ...

    async def update(self, planned: PlannedWorkout) -> PlannedWorkout:
        """
        Replace a stored planned workout with the given state.

        Raises:
            WorkoutAlreadyScheduled: a reschedule collides with another PLANNED entry
            PlannedWorkoutNotFound: no planned workout with this id is stored
        """
        ...
