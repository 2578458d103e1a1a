"""
WorkoutSession Repository Interface (Port).

This module defines the abstract interface for workout session persistence.
A session is stored as one aggregate: its exercises and sets are loaded and
saved together with it.
"""
from datetime import datetime
from typing import List, Optional, Protocol

from domain.models import WorkoutSession, WorkoutSessionExercise, WorkoutSessionStatus


class WorkoutSessionRepository(Protocol):
    """
    Abstract interface for workout session persistence.

    Implementations must guarantee that a user never has more than one
    IN_PROGRESS session: add() and update() raise
    UserAlreadyHasActiveWorkoutSession instead of writing a second one.
    """

    async def get_by_id(self, session_id: str) -> Optional[WorkoutSession]:
        """Get a session with all its exercises and sets, or None."""
        ...

    async def get_active_session_for_user(self, user_id: str) -> Optional[WorkoutSession]:
        """Get the user's IN_PROGRESS session, if any."""
        ...

    async def get_history_for_exercise(
        self,
        user_id: str,
        exercise_id: str,
        *,
        exclude_session_id: Optional[str] = None,
    ) -> List[WorkoutSessionExercise]:
        """
        Get past performances of one exercise for a user.

        Only exercises from COMPLETED sessions are returned, ordered
        oldest to newest by performed_at.

        Args:
            user_id: Owner of the sessions
            exercise_id: Catalog exercise to look up
            exclude_session_id: Session to leave out (usually the one being scored)
        """
        ...

    async def list_for_user(
        self,
        user_id: str,
        *,
        status: Optional[WorkoutSessionStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[WorkoutSession]:
        """
        List a user's sessions, newest first by created_at.

        Args:
            status: Only sessions in this status
            start: Only sessions created at or after this time
            end: Only sessions created at or before this time
            limit: Maximum number of sessions to return
        """
        ...

    async def add(self, session: WorkoutSession) -> WorkoutSession:
        """
        Insert a new session.

        Raises:
            UserAlreadyHasActiveWorkoutSession: session is IN_PROGRESS and the
                user already has another IN_PROGRESS session
        """
        ...

    async def update(self, session: WorkoutSession) -> WorkoutSession:
        """
        Replace a stored session with the given state.

        Raises:
            UserAlreadyHasActiveWorkoutSession: the update would make a second
                IN_PROGRESS session for the user
            WorkoutSessionNotFound: no session with this id is stored
        """
        ...
