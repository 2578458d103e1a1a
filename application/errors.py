"""
User-facing rendering of tracking domain errors.

Domain errors carry structured data only. Boundary code (HTTP handlers,
CLI, event handlers) calls render_error_message() to turn them into text
and error_status_code() to pick a response status.
"""

from typing import Callable, Dict

from domain.errors import TrackingDomainError, TrackingErrorCategory, TrackingErrorCode

_MESSAGES: Dict[TrackingErrorCode, Callable[[TrackingDomainError], str]] = {
    TrackingErrorCode.INVALID_SESSION_STATUS: lambda e: (
        f"Cannot {e.operation.replace('_', ' ')} while the session is {e.status.value}"
    ),
    TrackingErrorCode.CANNOT_START_SESSION: lambda e: (
        f"Cannot start a session that is {e.status.value}; only planned sessions can be started"
    ),
    TrackingErrorCode.CANNOT_COMPLETE_SESSION: lambda e: (
        f"Cannot complete a session that is {e.status.value}; only sessions in progress can be completed"
    ),
    TrackingErrorCode.CANNOT_ABANDON_SESSION: lambda e: (
        f"Cannot abandon a session that is {e.status.value}; only sessions in progress can be abandoned"
    ),
    TrackingErrorCode.CANNOT_START_PLANNED_WORKOUT: lambda e: (
        f"Cannot start a planned workout that is {e.status.value}"
    ),
    TrackingErrorCode.CANNOT_RESCHEDULE_WORKOUT: lambda e: (
        f"Cannot reschedule a workout that is {e.status.value}"
    ),
    TrackingErrorCode.CANNOT_COMPLETE_PLANNED_WORKOUT: lambda e: (
        f"Cannot complete a planned workout that is {e.status.value}"
    ),
    TrackingErrorCode.CANNOT_CANCEL_PLANNED_WORKOUT: lambda e: (
        f"Cannot cancel a planned workout that is {e.status.value}"
    ),
    TrackingErrorCode.CANNOT_ABANDON_PLANNED_WORKOUT: lambda e: (
        f"Cannot abandon a planned workout that is {e.status.value}"
    ),
    TrackingErrorCode.EXERCISE_ALREADY_EXISTS: lambda e: (
        f"Exercise {e.exercise_id} is already part of this session"
    ),
    TrackingErrorCode.EXERCISE_NOT_FOUND_IN_SESSION: lambda e: (
        f"Exercise {e.exercise_id} is not part of this session"
    ),
    TrackingErrorCode.NO_EXERCISE_PARAMETERS: lambda e: (
        "A set needs at least one of repetitions, weight, duration or distance"
    ),
    TrackingErrorCode.NEGATIVE_METRIC_VALUE: lambda e: (
        f"{e.field.replace('_', ' ').capitalize()} cannot be negative (got {e.value})"
    ),
    TrackingErrorCode.ORDER_MUST_BE_AT_LEAST_ONE: lambda e: (
        f"Exercise order must be at least 1 (got {e.order})"
    ),
    TrackingErrorCode.SET_NOT_FOUND: lambda e: f"Set {e.set_number} was not found",
    TrackingErrorCode.PERFORMANCE_SCORE_OUT_OF_RANGE: lambda e: (
        f"Performance score must be between 0 and 100 (got {e.score})"
    ),
    TrackingErrorCode.MISSING_REQUIRED_VALUE: lambda e: (
        f"{e.field.replace('_', ' ').capitalize()} is required"
    ),
    TrackingErrorCode.USER_ALREADY_HAS_ACTIVE_WORKOUT_SESSION: lambda e: (
        "You already have a workout in progress; complete or abandon it first"
    ),
    TrackingErrorCode.WORKOUT_ALREADY_SCHEDULED: lambda e: (
        f"This workout is already scheduled for {e.scheduled_date.isoformat()}"
    ),
    TrackingErrorCode.METRIC_NOT_FOUND: lambda e: f"Metric {e.metric_id} was not found",
    TrackingErrorCode.WORKOUT_SESSION_NOT_FOUND: lambda e: (
        f"Workout session {e.session_id} was not found"
    ),
    TrackingErrorCode.PLANNED_WORKOUT_NOT_FOUND: lambda e: (
        f"Planned workout {e.planned_workout_id} was not found"
    ),
}

_STATUS_CODES: Dict[TrackingErrorCategory, int] = {
    TrackingErrorCategory.STATE_TRANSITION: 409,
    TrackingErrorCategory.DATA_INTEGRITY: 422,
    TrackingErrorCategory.CONFLICT: 409,
    TrackingErrorCategory.NOT_FOUND: 404,
}


def render_error_message(error: TrackingDomainError) -> str:
    """
    Render a domain error as a user-facing sentence.

    Examples:
        >>> render_error_message(SetNotFound(set_number=3))
        'Set 3 was not found'
    """
    return _MESSAGES[error.code](error)


def error_status_code(error: TrackingDomainError) -> int:
    """HTTP-style status for an error category (404, 409 or 422)."""
    return _STATUS_CODES[error.category]
