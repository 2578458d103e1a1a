"""
Supabase implementation of PlannedWorkoutRepository.

Duplicate schedules are rejected by a partial unique index:

    CREATE UNIQUE INDEX planned_workouts_one_per_day
        ON planned_workouts (user_id, workout_id, scheduled_date)
        WHERE status = 'planned';
"""
import logging
from datetime import date
from typing import List, Optional

from supabase import AsyncClient

from domain.converters import db_row_to_planned_workout, planned_workout_to_db_row
from domain.errors import PlannedWorkoutNotFound, WorkoutAlreadyScheduled
from domain.models import PlannedWorkout, WorkoutSessionStatus
from infrastructure.db.errors import raise_storage_error

logger = logging.getLogger(__name__)


class SupabasePlannedWorkoutRepository:
    """Supabase implementation of PlannedWorkoutRepository protocol."""

    def __init__(self, client: AsyncClient, table: str = "planned_workouts"):
        self._client = client
        self._table = table

    def _query(self):
        return self._client.table(self._table)

    @staticmethod
    def _conflict(planned: PlannedWorkout):
        return lambda: WorkoutAlreadyScheduled(
            user_id=planned.user_id,
            workout_id=planned.workout_id,
            scheduled_date=planned.scheduled_date,
        )

    async def get_by_id(self, planned_workout_id: str) -> Optional[PlannedWorkout]:
        try:
            result = await self._query().select("*").eq("id", planned_workout_id).limit(1).execute()
        except Exception as e:
            logger.error(f"Failed to get planned workout {planned_workout_id}: {e}")
            raise_storage_error("get planned workout", e)
        return db_row_to_planned_workout(result.data[0]) if result.data else None

    async def get_by_session_id(self, workout_session_id: str) -> Optional[PlannedWorkout]:
        try:
            result = await (
                self._query()
                .select("*")
                .eq("workout_session_id", workout_session_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to get planned workout for session {workout_session_id}: {e}")
            raise_storage_error("get planned workout by session", e)
        return db_row_to_planned_workout(result.data[0]) if result.data else None

    async def has_planned_workout(
        self, user_id: str, workout_id: str, scheduled_date: date
    ) -> bool:
        try:
            result = await (
                self._query()
                .select("id")
                .eq("user_id", user_id)
                .eq("workout_id", workout_id)
                .eq("scheduled_date", scheduled_date.isoformat())
                .eq("status", WorkoutSessionStatus.PLANNED.value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to check planned workout for user {user_id}: {e}")
            raise_storage_error("check planned workout", e)
        return bool(result.data)

    async def list_for_user(
        self,
        user_id: str,
        *,
        status: Optional[WorkoutSessionStatus] = None,
        scheduled_date: Optional[date] = None,
    ) -> List[PlannedWorkout]:
        try:
            query = self._query().select("*").eq("user_id", user_id)
            if status is not None:
                query = query.eq("status", WorkoutSessionStatus(status).value)
            if scheduled_date is not None:
                query = query.eq("scheduled_date", scheduled_date.isoformat())
            result = await query.order("scheduled_date").execute()
        except Exception as e:
            logger.error(f"Failed to list planned workouts for user {user_id}: {e}")
            raise_storage_error("list planned workouts", e)
        return [db_row_to_planned_workout(row) for row in result.data or []]

    async def add(self, planned: PlannedWorkout) -> PlannedWorkout:
        try:
            await self._query().insert(planned_workout_to_db_row(planned)).execute()
        except Exception as e:
            logger.error(f"Failed to insert planned workout {planned.id}: {e}")
            raise_storage_error("insert planned workout", e, self._conflict(planned))
        logger.info(f"Planned workout {planned.id} saved for {planned.scheduled_date}")
        return planned

    async def update(self, planned: PlannedWorkout) -> PlannedWorkout:
        try:
            result = await (
                self._query()
                .update(planned_workout_to_db_row(planned))
                .eq("id", planned.id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update planned workout {planned.id}: {e}")
            raise_storage_error("update planned workout", e, self._conflict(planned))
        if not result.data:
            raise PlannedWorkoutNotFound(planned_workout_id=planned.id)
        return planned
