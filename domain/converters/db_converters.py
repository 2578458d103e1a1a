"""
Converters: Database row format <-> tracking aggregates.

Provides bidirectional conversion between Supabase database rows
and the WorkoutSession, PlannedWorkout and UserMetric domain models.

Database schema (workout_sessions table):
- id, user_id, workout_id: Identity and ownership
- status: Text (workout_session_status values)
- planned_date: Date
- started_at, completed_at: Timestamps
- total_duration_seconds, calories_estimated: Integers
- perceived_difficulty: Integer 1-6
- notes: Text
- is_from_program, program_id: Program linkage
- exercises: JSONB array of exercises, each with a nested sets array
- created_at, updated_at: Timestamps

Database schema (planned_workouts table):
- id, user_id, workout_id, scheduled_date, status
- is_from_program, program_id, workout_session_id
- created_at, updated_at

Database schema (user_metrics table):
- id, user_id, metric_type, value, unit, recorded_at, notes
- created_at, updated_at
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from domain.models import (
    PerceivedDifficulty,
    PlannedWorkout,
    UserMetric,
    UserMetricType,
    WorkoutSession,
    WorkoutSessionExercise,
    WorkoutSessionStatus,
)


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse datetime from various formats."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            if value.endswith("Z"):
                value = value[:-1] + "+00:00"
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def _parse_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _iso(value: Optional[Any]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _require(row: Dict[str, Any], *fields: str) -> None:
    missing = [f for f in fields if row.get(f) in (None, "")]
    if missing:
        raise ValueError(f"Database row missing required fields: {', '.join(missing)}")


def _with_timestamps(data: Dict[str, Any], row: Dict[str, Any]) -> Dict[str, Any]:
    # created_at falls back to the model default when the row has none
    created_at = _parse_datetime(row.get("created_at"))
    if created_at is not None:
        data["created_at"] = created_at
    data["updated_at"] = _parse_datetime(row.get("updated_at"))
    return data


# =============================================================================
# WorkoutSession
# =============================================================================


def db_row_to_workout_session(row: Dict[str, Any]) -> WorkoutSession:
    """
    Convert a workout_sessions row to a WorkoutSession aggregate.

    Raises:
        ValueError: If id, user_id, workout_id or status is missing.

    Examples:
        >>> row = {
        ...     "id": "s-1",
        ...     "user_id": "u-1",
        ...     "workout_id": "w-1",
        ...     "status": "in_progress",
        ...     "started_at": "2026-01-10T08:00:00Z",
        ...     "exercises": [],
        ... }
        >>> db_row_to_workout_session(row).status
        <WorkoutSessionStatus.IN_PROGRESS: 'in_progress'>
    """
    _require(row, "id", "user_id", "workout_id", "status")

    difficulty = row.get("perceived_difficulty")
    exercises: List[WorkoutSessionExercise] = [
        WorkoutSessionExercise.model_validate(ex) for ex in (row.get("exercises") or [])
    ]

    data: Dict[str, Any] = {
        "id": row["id"],
        "user_id": row["user_id"],
        "workout_id": row["workout_id"],
        "status": WorkoutSessionStatus(row["status"]),
        "planned_date": _parse_date(row.get("planned_date")),
        "started_at": _parse_datetime(row.get("started_at")),
        "completed_at": _parse_datetime(row.get("completed_at")),
        "total_duration_seconds": row.get("total_duration_seconds"),
        "calories_estimated": row.get("calories_estimated"),
        "perceived_difficulty": PerceivedDifficulty(difficulty) if difficulty is not None else None,
        "notes": row.get("notes"),
        "is_from_program": bool(row.get("is_from_program", False)),
        "program_id": row.get("program_id"),
        "exercises": sorted(exercises, key=lambda e: e.order),
    }
    return WorkoutSession(**_with_timestamps(data, row))


def workout_session_to_db_row(session: WorkoutSession) -> Dict[str, Any]:
    """
    Convert a WorkoutSession to a workout_sessions row.

    Exercises and their sets are serialized into the JSONB exercises
    column, so one row holds the whole aggregate.
    """
    return {
        "id": session.id,
        "user_id": session.user_id,
        "workout_id": session.workout_id,
        "status": session.status.value,
        "planned_date": _iso(session.planned_date),
        "started_at": _iso(session.started_at),
        "completed_at": _iso(session.completed_at),
        "total_duration_seconds": session.total_duration_seconds,
        "calories_estimated": session.calories_estimated,
        "perceived_difficulty": (
            session.perceived_difficulty.value if session.perceived_difficulty is not None else None
        ),
        "notes": session.notes,
        "is_from_program": session.is_from_program,
        "program_id": session.program_id,
        "exercises": [ex.model_dump(mode="json") for ex in session.exercises],
        "created_at": _iso(session.created_at),
        "updated_at": _iso(session.updated_at),
    }


# =============================================================================
# PlannedWorkout
# =============================================================================


def db_row_to_planned_workout(row: Dict[str, Any]) -> PlannedWorkout:
    """Convert a planned_workouts row to a PlannedWorkout aggregate."""
    _require(row, "id", "user_id", "workout_id", "scheduled_date", "status")

    scheduled_date = _parse_date(row["scheduled_date"])
    if scheduled_date is None:
        raise ValueError(f"Invalid scheduled_date: {row['scheduled_date']!r}")

    data: Dict[str, Any] = {
        "id": row["id"],
        "user_id": row["user_id"],
        "workout_id": row["workout_id"],
        "scheduled_date": scheduled_date,
        "status": WorkoutSessionStatus(row["status"]),
        "is_from_program": bool(row.get("is_from_program", False)),
        "program_id": row.get("program_id"),
        "workout_session_id": row.get("workout_session_id"),
    }
    return PlannedWorkout(**_with_timestamps(data, row))


def planned_workout_to_db_row(planned: PlannedWorkout) -> Dict[str, Any]:
    return {
        "id": planned.id,
        "user_id": planned.user_id,
        "workout_id": planned.workout_id,
        "scheduled_date": planned.scheduled_date.isoformat(),
        "status": planned.status.value,
        "is_from_program": planned.is_from_program,
        "program_id": planned.program_id,
        "workout_session_id": planned.workout_session_id,
        "created_at": _iso(planned.created_at),
        "updated_at": _iso(planned.updated_at),
    }


# =============================================================================
# UserMetric
# =============================================================================


def db_row_to_user_metric(row: Dict[str, Any]) -> UserMetric:
    """Convert a user_metrics row to a UserMetric."""
    _require(row, "id", "user_id", "metric_type", "value")

    metric_type = UserMetricType(row["metric_type"])
    data: Dict[str, Any] = {
        "id": row["id"],
        "user_id": row["user_id"],
        "metric_type": metric_type,
        "value": float(row["value"]),
        "unit": row.get("unit") or metric_type.default_unit,
        "notes": row.get("notes"),
    }
    recorded_at = _parse_datetime(row.get("recorded_at"))
    if recorded_at is not None:
        data["recorded_at"] = recorded_at
    return UserMetric(**_with_timestamps(data, row))


def user_metric_to_db_row(metric: UserMetric) -> Dict[str, Any]:
    return {
        "id": metric.id,
        "user_id": metric.user_id,
        "metric_type": metric.metric_type.value,
        "value": metric.value,
        "unit": metric.unit,
        "recorded_at": _iso(metric.recorded_at),
        "notes": metric.notes,
        "created_at": _iso(metric.created_at),
        "updated_at": _iso(metric.updated_at),
    }
