"""
Plain data returned by TrackingService.

Aggregates never leave the application layer; callers receive these
dataclasses instead. Each DTO has a from_domain() constructor where a
domain counterpart exists.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Generic, List, Optional, TypeVar

from domain.errors import TrackingDomainError
from domain.models import (
    ExerciseMetricType,
    PerceivedDifficulty,
    PlannedWorkout,
    UserMetric,
    UserMetricType,
    WorkoutSession,
    WorkoutSessionExercise,
    WorkoutSessionSet,
    WorkoutSessionStatus,
)

T = TypeVar("T")


@dataclass
class TrackingResult(Generic[T]):
    """
    Outcome of a mutating TrackingService operation.

    Exactly one of value / error is meaningful: success=True carries the
    value, success=False carries the typed domain error.
    """

    success: bool
    value: Optional[T] = None
    error: Optional[TrackingDomainError] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> "TrackingResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: TrackingDomainError) -> "TrackingResult[T]":
        return cls(success=False, error=error)


# =============================================================================
# Sessions
# =============================================================================


@dataclass
class WorkoutSessionSetDTO:
    id: str
    set_number: int
    repetitions: Optional[int]
    weight: Optional[float]
    duration_seconds: Optional[int]
    distance: Optional[float]
    rest_time_seconds: Optional[int]
    completed_at: datetime
    display_text: str

    @classmethod
    def from_domain(cls, s: WorkoutSessionSet) -> "WorkoutSessionSetDTO":
        return cls(
            id=s.id,
            set_number=s.set_number,
            repetitions=s.repetitions,
            weight=s.weight,
            duration_seconds=s.duration_seconds,
            distance=s.distance,
            rest_time_seconds=s.rest_time_seconds,
            completed_at=s.completed_at,
            display_text=s.get_display_text(),
        )


@dataclass
class WorkoutSessionExerciseDTO:
    id: str
    exercise_id: str
    exercise_name: str
    metric_type: ExerciseMetricType
    order: int
    performed_at: datetime
    sets: List[WorkoutSessionSetDTO] = field(default_factory=list)
    performance_score: Optional[float] = None
    best_performance: Optional[float] = None
    performance_display: str = ""

    @classmethod
    def from_domain(cls, exercise: WorkoutSessionExercise) -> "WorkoutSessionExerciseDTO":
        return cls(
            id=exercise.id,
            exercise_id=exercise.exercise_id,
            exercise_name=exercise.exercise_name,
            metric_type=exercise.metric_type,
            order=exercise.order,
            performed_at=exercise.performed_at,
            sets=[WorkoutSessionSetDTO.from_domain(s) for s in exercise.sets],
            performance_score=exercise.performance_score,
            best_performance=exercise.get_best_performance(),
            performance_display=exercise.get_performance_display(),
        )


@dataclass
class WorkoutSessionDTO:
    id: str
    user_id: str
    workout_id: str
    status: WorkoutSessionStatus
    created_at: datetime
    planned_date: Optional[date] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_duration_seconds: Optional[int] = None
    calories_estimated: Optional[int] = None
    perceived_difficulty: Optional[PerceivedDifficulty] = None
    notes: Optional[str] = None
    is_from_program: bool = False
    program_id: Optional[str] = None
    exercises: List[WorkoutSessionExerciseDTO] = field(default_factory=list)
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, session: WorkoutSession) -> "WorkoutSessionDTO":
        return cls(
            id=session.id,
            user_id=session.user_id,
            workout_id=session.workout_id,
            status=session.status,
            created_at=session.created_at,
            planned_date=session.planned_date,
            started_at=session.started_at,
            completed_at=session.completed_at,
            total_duration_seconds=session.total_duration_seconds,
            calories_estimated=session.calories_estimated,
            perceived_difficulty=session.perceived_difficulty,
            notes=session.notes,
            is_from_program=session.is_from_program,
            program_id=session.program_id,
            exercises=[WorkoutSessionExerciseDTO.from_domain(e) for e in session.exercises],
            updated_at=session.updated_at,
        )


# =============================================================================
# Planned workouts
# =============================================================================


@dataclass
class PlannedWorkoutDTO:
    id: str
    user_id: str
    workout_id: str
    scheduled_date: date
    status: WorkoutSessionStatus
    is_from_program: bool
    program_id: Optional[str]
    workout_session_id: Optional[str]
    is_overdue: bool
    days_until_scheduled: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(
        cls, planned: PlannedWorkout, today: Optional[date] = None
    ) -> "PlannedWorkoutDTO":
        return cls(
            id=planned.id,
            user_id=planned.user_id,
            workout_id=planned.workout_id,
            scheduled_date=planned.scheduled_date,
            status=planned.status,
            is_from_program=planned.is_from_program,
            program_id=planned.program_id,
            workout_session_id=planned.workout_session_id,
            is_overdue=planned.is_overdue(today),
            days_until_scheduled=planned.days_until_scheduled(today),
            created_at=planned.created_at,
            updated_at=planned.updated_at,
        )


@dataclass
class StartedPlannedWorkoutDTO:
    """Result of starting a planned workout: both sides of the new link."""

    planned_workout: PlannedWorkoutDTO
    session: WorkoutSessionDTO


# =============================================================================
# Metrics
# =============================================================================


@dataclass
class UserMetricDTO:
    id: str
    user_id: str
    metric_type: UserMetricType
    value: float
    unit: str
    display_value: str
    recorded_at: datetime
    created_at: datetime
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, metric: UserMetric) -> "UserMetricDTO":
        return cls(
            id=metric.id,
            user_id=metric.user_id,
            metric_type=metric.metric_type,
            value=metric.value,
            unit=metric.unit,
            display_value=metric.get_display_value(),
            recorded_at=metric.recorded_at,
            created_at=metric.created_at,
            notes=metric.notes,
            updated_at=metric.updated_at,
        )


# =============================================================================
# Scoring
# =============================================================================


@dataclass
class ExerciseScoreDTO:
    session_id: str
    exercise_id: str
    score: float
    description: str


@dataclass
class WorkoutScoreDTO:
    session_id: str
    score: float
    description: str
    exercise_scores: Dict[str, float] = field(default_factory=dict)


# =============================================================================
# Statistics
# =============================================================================


@dataclass
class WorkoutFrequencyDTO:
    """Completed workouts grouped on one day (or one week start)."""

    date: date
    workout_count: int
    total_duration_seconds: int


@dataclass
class MetricTrendDTO:
    metric_type: UserMetricType
    current_value: float
    previous_value: Optional[float]
    percentage_change: Optional[float]
    trend: str  # "up", "down" or "stable"
    last_recorded: datetime


@dataclass
class PerformanceHistoryDTO:
    date: datetime
    value: float
    notes: Optional[str] = None


@dataclass
class ExercisePerformanceDTO:
    exercise_id: str
    exercise_name: str
    metric_type: ExerciseMetricType
    best_value: Optional[float]
    average_value: Optional[float]
    times_performed: int
    last_performed: Optional[datetime]
    history: List[PerformanceHistoryDTO] = field(default_factory=list)


@dataclass
class TrackingStatsDTO:
    total_workouts_completed: int
    total_workout_time_seconds: int
    average_workout_duration_seconds: int
    total_calories_burned: int
    workouts_this_week: int
    workouts_this_month: int
    average_perceived_difficulty: Optional[float]
    last_workout_date: Optional[datetime]
    current_streak: int
    longest_streak: int
    weekly_frequency: List[WorkoutFrequencyDTO] = field(default_factory=list)
    metric_trends: List[MetricTrendDTO] = field(default_factory=list)
