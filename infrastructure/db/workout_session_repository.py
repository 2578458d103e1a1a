"""
Supabase implementation of WorkoutSessionRepository.

A session is one row of the workout_sessions table; its exercises and
sets live in the JSONB exercises column (see domain.converters).

The single-active-session rule is enforced by a partial unique index,
which turns a concurrent second start into a 23505 error on write:

    CREATE UNIQUE INDEX workout_sessions_one_active_per_user
        ON workout_sessions (user_id) WHERE status = 'in_progress';
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from supabase import AsyncClient

from domain.converters import db_row_to_workout_session, workout_session_to_db_row
from domain.errors import UserAlreadyHasActiveWorkoutSession, WorkoutSessionNotFound
from domain.models import WorkoutSession, WorkoutSessionExercise, WorkoutSessionStatus
from infrastructure.db.errors import raise_storage_error

logger = logging.getLogger(__name__)


class SupabaseWorkoutSessionRepository:
    """
    Supabase implementation of WorkoutSessionRepository protocol.

    The client is injected via constructor for testability.
    """

    def __init__(self, client: AsyncClient, table: str = "workout_sessions"):
        """
        Initialize with Supabase client.

        Args:
            client: Async Supabase client instance (injected, not global)
            table: Name of the sessions table
        """
        self._client = client
        self._table = table

    def _query(self):
        return self._client.table(self._table)

    @staticmethod
    def _conflict(session: WorkoutSession):
        return lambda: UserAlreadyHasActiveWorkoutSession(user_id=session.user_id)

    async def get_by_id(self, session_id: str) -> Optional[WorkoutSession]:
        try:
            result = await self._query().select("*").eq("id", session_id).limit(1).execute()
        except Exception as e:
            logger.error(f"Failed to get workout session {session_id}: {e}")
            raise_storage_error("get workout session", e)
        return db_row_to_workout_session(result.data[0]) if result.data else None

    async def get_active_session_for_user(self, user_id: str) -> Optional[WorkoutSession]:
        try:
            result = await (
                self._query()
                .select("*")
                .eq("user_id", user_id)
                .eq("status", WorkoutSessionStatus.IN_PROGRESS.value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to get active session for user {user_id}: {e}")
            raise_storage_error("get active session", e)
        return db_row_to_workout_session(result.data[0]) if result.data else None

    async def get_history_for_exercise(
        self,
        user_id: str,
        exercise_id: str,
        *,
        exclude_session_id: Optional[str] = None,
    ) -> List[WorkoutSessionExercise]:
        """Exercises from completed sessions containing exercise_id, oldest first."""
        try:
            query = (
                self._query()
                .select("*")
                .eq("user_id", user_id)
                .eq("status", WorkoutSessionStatus.COMPLETED.value)
                .contains("exercises", json.dumps([{"exercise_id": exercise_id}]))
            )
            if exclude_session_id:
                query = query.neq("id", exclude_session_id)
            result = await query.order("completed_at").execute()
        except Exception as e:
            logger.error(f"Failed to get history for exercise {exercise_id}: {e}")
            raise_storage_error("get exercise history", e)

        history: List[WorkoutSessionExercise] = []
        for row in result.data or []:
            exercise = db_row_to_workout_session(row).find_exercise(exercise_id)
            if exercise is not None:
                history.append(exercise)
        return sorted(history, key=lambda e: e.performed_at)

    async def list_for_user(
        self,
        user_id: str,
        *,
        status: Optional[WorkoutSessionStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[WorkoutSession]:
        try:
            query = self._query().select("*").eq("user_id", user_id)
            if status is not None:
                query = query.eq("status", WorkoutSessionStatus(status).value)
            if start is not None:
                query = query.gte("created_at", start.isoformat())
            if end is not None:
                query = query.lte("created_at", end.isoformat())
            query = query.order("created_at", desc=True)
            if limit is not None:
                query = query.limit(limit)
            result = await query.execute()
        except Exception as e:
            logger.error(f"Failed to list workout sessions for user {user_id}: {e}")
            raise_storage_error("list workout sessions", e)
        return [db_row_to_workout_session(row) for row in result.data or []]

    async def add(self, session: WorkoutSession) -> WorkoutSession:
        row: Dict[str, Any] = workout_session_to_db_row(session)
        try:
            await self._query().insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to insert workout session {session.id}: {e}")
            raise_storage_error("insert workout session", e, self._conflict(session))
        logger.info(f"Workout session {session.id} saved for user {session.user_id}")
        return session

    async def update(self, session: WorkoutSession) -> WorkoutSession:
        row = workout_session_to_db_row(session)
        try:
            result = await self._query().update(row).eq("id", session.id).execute()
        except Exception as e:
            logger.error(f"Failed to update workout session {session.id}: {e}")
            raise_storage_error("update workout session", e, self._conflict(session))
        if not result.data:
            raise WorkoutSessionNotFound(session_id=session.id)
        return session
