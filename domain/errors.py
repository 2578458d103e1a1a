"""
Typed domain errors for workout tracking.

Every failure the tracking core can produce is one variant of
TrackingDomainError. Variants carry structured data only; turning them
into user-facing text is the job of the boundary layer
(see application.errors.render_error_message).

Variants are grouped by TrackingErrorCategory:
- STATE_TRANSITION: operation attempted from a status that forbids it
- DATA_INTEGRITY: invalid values or missing children inside an aggregate
- CONFLICT: cross-aggregate invariants (one active session, no duplicate schedule)
- NOT_FOUND: referenced aggregate does not exist
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import ClassVar, Optional

from domain.models.enums import WorkoutSessionStatus


class TrackingErrorCategory(str, Enum):
    STATE_TRANSITION = "state_transition"
    DATA_INTEGRITY = "data_integrity"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


class TrackingErrorCode(str, Enum):
    """One code per error variant."""

    INVALID_SESSION_STATUS = "invalid_session_status"
    CANNOT_START_SESSION = "cannot_start_session"
    CANNOT_COMPLETE_SESSION = "cannot_complete_session"
    CANNOT_ABANDON_SESSION = "cannot_abandon_session"
    CANNOT_START_PLANNED_WORKOUT = "cannot_start_planned_workout"
    CANNOT_RESCHEDULE_WORKOUT = "cannot_reschedule_workout"
    CANNOT_COMPLETE_PLANNED_WORKOUT = "cannot_complete_planned_workout"
    CANNOT_CANCEL_PLANNED_WORKOUT = "cannot_cancel_planned_workout"
    CANNOT_ABANDON_PLANNED_WORKOUT = "cannot_abandon_planned_workout"
    EXERCISE_ALREADY_EXISTS = "exercise_already_exists"
    EXERCISE_NOT_FOUND_IN_SESSION = "exercise_not_found_in_session"
    NO_EXERCISE_PARAMETERS = "no_exercise_parameters"
    NEGATIVE_METRIC_VALUE = "negative_metric_value"
    ORDER_MUST_BE_AT_LEAST_ONE = "order_must_be_at_least_one"
    SET_NOT_FOUND = "set_not_found"
    PERFORMANCE_SCORE_OUT_OF_RANGE = "performance_score_out_of_range"
    MISSING_REQUIRED_VALUE = "missing_required_value"
    USER_ALREADY_HAS_ACTIVE_WORKOUT_SESSION = "user_already_has_active_workout_session"
    WORKOUT_ALREADY_SCHEDULED = "workout_already_scheduled"
    METRIC_NOT_FOUND = "metric_not_found"
    WORKOUT_SESSION_NOT_FOUND = "workout_session_not_found"
    PLANNED_WORKOUT_NOT_FOUND = "planned_workout_not_found"


class TrackingDomainError(Exception):
    """Base class for every tracking domain failure."""

    code: ClassVar[TrackingErrorCode]
    category: ClassVar[TrackingErrorCategory]

    def __post_init__(self) -> None:
        super().__init__(self.code.value)


# =============================================================================
# State-transition violations
# =============================================================================


@dataclass
class InvalidSessionStatus(TrackingDomainError):
    """A session operation was attempted from a status that does not permit it."""

    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.INVALID_SESSION_STATUS
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.STATE_TRANSITION

    status: WorkoutSessionStatus
    operation: str


@dataclass
class CannotStartSession(InvalidSessionStatus):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.CANNOT_START_SESSION

    operation: str = "start"


@dataclass
class CannotCompleteSession(InvalidSessionStatus):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.CANNOT_COMPLETE_SESSION

    operation: str = "complete"


@dataclass
class CannotAbandonSession(InvalidSessionStatus):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.CANNOT_ABANDON_SESSION

    operation: str = "abandon"


@dataclass
class _PlannedWorkoutTransitionError(TrackingDomainError):
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.STATE_TRANSITION

    status: WorkoutSessionStatus


@dataclass
class CannotStartPlannedWorkout(_PlannedWorkoutTransitionError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.CANNOT_START_PLANNED_WORKOUT


@dataclass
class CannotRescheduleWorkout(_PlannedWorkoutTransitionError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.CANNOT_RESCHEDULE_WORKOUT


@dataclass
class CannotCompletePlannedWorkout(_PlannedWorkoutTransitionError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.CANNOT_COMPLETE_PLANNED_WORKOUT


@dataclass
class CannotCancelPlannedWorkout(_PlannedWorkoutTransitionError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.CANNOT_CANCEL_PLANNED_WORKOUT


@dataclass
class CannotAbandonPlannedWorkout(_PlannedWorkoutTransitionError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.CANNOT_ABANDON_PLANNED_WORKOUT


# =============================================================================
# Data integrity violations
# =============================================================================


@dataclass
class ExerciseAlreadyExists(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.EXERCISE_ALREADY_EXISTS
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.DATA_INTEGRITY

    exercise_id: str


@dataclass
class ExerciseNotFoundInSession(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.EXERCISE_NOT_FOUND_IN_SESSION
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.DATA_INTEGRITY

    exercise_id: str


@dataclass
class NoExerciseParameters(TrackingDomainError):
    """A set was recorded without reps, weight, duration or distance."""

    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.NO_EXERCISE_PARAMETERS
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.DATA_INTEGRITY


@dataclass
class NegativeMetricValue(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.NEGATIVE_METRIC_VALUE
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.DATA_INTEGRITY

    field: str
    value: float


@dataclass
class OrderMustBeAtLeastOne(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.ORDER_MUST_BE_AT_LEAST_ONE
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.DATA_INTEGRITY

    order: int


@dataclass
class SetNotFound(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.SET_NOT_FOUND
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.DATA_INTEGRITY

    set_number: int


@dataclass
class PerformanceScoreOutOfRange(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.PERFORMANCE_SCORE_OUT_OF_RANGE
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.DATA_INTEGRITY

    score: float


@dataclass
class MissingRequiredValue(TrackingDomainError):
    """An identifier or name was empty."""

    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.MISSING_REQUIRED_VALUE
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.DATA_INTEGRITY

    field: str


# =============================================================================
# Cross-aggregate conflicts
# =============================================================================


@dataclass
class UserAlreadyHasActiveWorkoutSession(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.USER_ALREADY_HAS_ACTIVE_WORKOUT_SESSION
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.CONFLICT

    user_id: str
    active_session_id: Optional[str] = None


@dataclass
class WorkoutAlreadyScheduled(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.WORKOUT_ALREADY_SCHEDULED
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.CONFLICT

    user_id: str
    workout_id: str
    scheduled_date: date


# =============================================================================
# Not found
# =============================================================================


@dataclass
class MetricNotFound(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.METRIC_NOT_FOUND
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.NOT_FOUND

    metric_id: str


@dataclass
class WorkoutSessionNotFound(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.WORKOUT_SESSION_NOT_FOUND
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.NOT_FOUND

    session_id: str


@dataclass
class PlannedWorkoutNotFound(TrackingDomainError):
    code: ClassVar[TrackingErrorCode] = TrackingErrorCode.PLANNED_WORKOUT_NOT_FOUND
    category: ClassVar[TrackingErrorCategory] = TrackingErrorCategory.NOT_FOUND

    planned_workout_id: str
