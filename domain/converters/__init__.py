"""
Domain converters between Supabase rows and tracking aggregates.

All converters are pure functions with no side effects.

Examples:
    >>> from domain.converters import workout_session_to_db_row, db_row_to_workout_session

    >>> row = workout_session_to_db_row(session)
    >>> session = db_row_to_workout_session(row)
"""

from domain.converters.db_converters import (
    db_row_to_planned_workout,
    db_row_to_user_metric,
    db_row_to_workout_session,
    planned_workout_to_db_row,
    user_metric_to_db_row,
    workout_session_to_db_row,
)

__all__ = [
    "db_row_to_workout_session",
    "workout_session_to_db_row",
    "db_row_to_planned_workout",
    "planned_workout_to_db_row",
    "db_row_to_user_metric",
    "user_metric_to_db_row",
]
