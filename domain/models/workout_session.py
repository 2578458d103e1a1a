"""
WorkoutSession aggregate root and its owned entities.

A WorkoutSession is one execution of a workout by a user. It exclusively
owns its WorkoutSessionExercise children, which in turn own an ordered,
append-only list of WorkoutSessionSet records.

State machine:

    PLANNED ──start()──> IN_PROGRESS ──complete()──> COMPLETED
       │                     │
       └──cancel()──> CANCELLED  └──abandon()──> ABANDONED

Every guard runs before any field is touched, so a rejected operation
leaves the aggregate exactly as it was.
"""

import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.errors import (
    CannotAbandonSession,
    CannotCompleteSession,
    CannotStartSession,
    ExerciseAlreadyExists,
    ExerciseNotFoundInSession,
    InvalidSessionStatus,
    MissingRequiredValue,
    NegativeMetricValue,
    NoExerciseParameters,
    OrderMustBeAtLeastOne,
    PerformanceScoreOutOfRange,
    SetNotFound,
)
from domain.models.enums import (
    ExerciseMetricType,
    PerceivedDifficulty,
    WorkoutSessionStatus,
)

# Calorie estimate used on completion: MET * reference body weight * hours
CALORIE_ESTIMATE_MET = 5.0
CALORIE_ESTIMATE_BODY_WEIGHT_KG = 70.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _require_non_negative(field: str, value: Optional[float]) -> None:
    if value is not None and value < 0:
        raise NegativeMetricValue(field=field, value=value)


def _format_duration(seconds: int) -> str:
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}" if secs else f"{minutes}min"


def _format_distance(meters: float) -> str:
    return f"{meters / 1000:.1f}km" if meters >= 1000 else f"{meters:.0f}m"


class WorkoutSessionSet(BaseModel):
    """
    One recorded effort within an exercise.

    Sets are immutable once appended; only the owning exercise creates them.
    """

    id: str = Field(default_factory=_new_id)
    set_number: int = Field(..., ge=1, description="1-based position within the exercise")
    repetitions: Optional[int] = None
    weight: Optional[float] = Field(default=None, description="Weight in kg")
    duration_seconds: Optional[int] = None
    distance: Optional[float] = Field(default=None, description="Distance in meters")
    rest_time_seconds: Optional[int] = None
    completed_at: datetime = Field(default_factory=_utcnow)

    @property
    def has_measurement(self) -> bool:
        return any(
            value is not None
            for value in (self.repetitions, self.weight, self.duration_seconds, self.distance)
        )

    def get_display_text(self) -> str:
        """Human-readable summary, e.g. '10x50.0kg' or '1:30 | 400m'."""
        parts: List[str] = []

        if self.repetitions is not None and self.weight is not None:
            parts.append(f"{self.repetitions}x{self.weight:.1f}kg")
        elif self.repetitions is not None:
            parts.append(f"{self.repetitions} reps")

        if self.duration_seconds is not None:
            parts.append(_format_duration(self.duration_seconds))

        if self.distance is not None:
            parts.append(_format_distance(self.distance))

        return " | ".join(parts) if parts else "Completed"


class WorkoutSessionExercise(BaseModel):
    """
    One exercise performed within a session.

    exercise_name is a snapshot of the catalog name taken when the
    exercise was added; it never changes afterwards.
    """

    id: str = Field(default_factory=_new_id)
    exercise_id: str = Field(..., min_length=1)
    exercise_name: str = Field(..., min_length=1)
    metric_type: ExerciseMetricType
    order: int = Field(..., ge=1)
    sets: List[WorkoutSessionSet] = Field(default_factory=list)
    performance_score: Optional[float] = Field(default=None, ge=0, le=100)
    performed_at: datetime = Field(default_factory=_utcnow)

    # -------------------------------------------------------------------------
    # Sets
    # -------------------------------------------------------------------------

    def add_set(
        self,
        repetitions: Optional[int] = None,
        weight: Optional[float] = None,
        duration_seconds: Optional[int] = None,
        distance: Optional[float] = None,
        rest_time_seconds: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> WorkoutSessionSet:
        """
        Append a new set numbered count+1.

        Raises:
            NoExerciseParameters: reps, weight, duration and distance all absent
            NegativeMetricValue: any supplied value is below zero
        """
        if all(v is None for v in (repetitions, weight, duration_seconds, distance)):
            raise NoExerciseParameters()

        _require_non_negative("repetitions", repetitions)
        _require_non_negative("weight", weight)
        _require_non_negative("duration_seconds", duration_seconds)
        _require_non_negative("distance", distance)
        _require_non_negative("rest_time_seconds", rest_time_seconds)

        new_set = WorkoutSessionSet(
            set_number=len(self.sets) + 1,
            repetitions=repetitions,
            weight=weight,
            duration_seconds=duration_seconds,
            distance=distance,
            rest_time_seconds=rest_time_seconds,
            completed_at=now or _utcnow(),
        )
        self.sets.append(new_set)
        return new_set

    def get_set(self, set_number: int) -> WorkoutSessionSet:
        for s in self.sets:
            if s.set_number == set_number:
                return s
        raise SetNotFound(set_number=set_number)

    @property
    def has_sets(self) -> bool:
        return bool(self.sets)

    # -------------------------------------------------------------------------
    # Scoring support
    # -------------------------------------------------------------------------

    def set_value(self, s: WorkoutSessionSet) -> Optional[float]:
        """Value of one set under this exercise's metric type, or None."""
        if self.metric_type == ExerciseMetricType.REPETITION:
            if s.repetitions is None:
                return None
            if s.weight is None:
                return float(s.repetitions)
            return s.repetitions * s.weight
        if self.metric_type == ExerciseMetricType.DURATION:
            return None if s.duration_seconds is None else float(s.duration_seconds)
        return s.distance

    def get_best_performance(self) -> Optional[float]:
        """
        Single best set value for this exercise.

        - REPETITION: max(reps * weight), falling back to reps for weight-less sets
        - DURATION: max(duration_seconds)
        - DISTANCE: max(distance)

        Returns:
            Best value, or None when no set carries the measured field.
        """
        values = [v for v in (self.set_value(s) for s in self.sets) if v is not None]
        return max(values) if values else None

    def get_total_volume(self) -> Optional[float]:
        """Sum of reps * weight across weighted sets (repetition exercises only)."""
        if self.metric_type != ExerciseMetricType.REPETITION:
            return None
        weighted = [
            s.repetitions * s.weight
            for s in self.sets
            if s.repetitions is not None and s.weight is not None
        ]
        return sum(weighted) if weighted else None

    def set_performance_score(self, score: float) -> None:
        if score < 0 or score > 100:
            raise PerformanceScoreOutOfRange(score=score)
        self.performance_score = score

    def update_order(self, order: int) -> None:
        if order < 1:
            raise OrderMustBeAtLeastOne(order=order)
        self.order = order

    def get_performance_display(self) -> str:
        if not self.sets:
            return "No sets recorded"

        parts = [f"{len(self.sets)} sets"]

        total_reps = sum(s.repetitions for s in self.sets if s.repetitions is not None)
        weights = [s.weight for s in self.sets if s.weight is not None]
        total_duration = sum(s.duration_seconds for s in self.sets if s.duration_seconds is not None)
        total_distance = sum(s.distance for s in self.sets if s.distance is not None)

        if total_reps > 0:
            parts.append(f"{total_reps} total reps")
        if weights and sum(weights) > 0:
            parts.append(f"{sum(weights) / len(weights):.1f}kg avg")
        if total_duration > 0:
            parts.append(f"{_format_duration(total_duration)} total")
        if total_distance > 0:
            parts.append(f"{_format_distance(total_distance)} total")

        return " | ".join(parts)


class WorkoutSession(BaseModel):
    """
    Aggregate root representing one execution of a workout.

    Sessions created with a planned_date start in PLANNED; ad-hoc sessions
    start directly in IN_PROGRESS with started_at set. The "one active
    session per user" rule spans aggregates and is enforced by the
    orchestrator and the storage adapter, not here.

    Examples:
        >>> session = WorkoutSession.start_new(user_id="u1", workout_id="w1")
        >>> ex = session.add_exercise("e1", "Bench Press", ExerciseMetricType.REPETITION)
        >>> _ = session.add_set("e1", repetitions=10, weight=50)
        >>> session.complete(PerceivedDifficulty.MODERATE)
        >>> ex.get_best_performance()
        500.0
    """

    id: str = Field(default_factory=_new_id)
    user_id: str = Field(..., min_length=1)
    workout_id: str = Field(..., min_length=1)
    status: WorkoutSessionStatus = WorkoutSessionStatus.PLANNED
    planned_date: Optional[date] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_duration_seconds: Optional[int] = None
    calories_estimated: Optional[int] = None
    perceived_difficulty: Optional[PerceivedDifficulty] = None
    notes: Optional[str] = None
    is_from_program: bool = False
    program_id: Optional[str] = None
    exercises: List[WorkoutSessionExercise] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = None

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def start_new(
        cls,
        user_id: str,
        workout_id: str,
        *,
        planned_date: Optional[date] = None,
        is_from_program: bool = False,
        program_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "WorkoutSession":
        """
        Create a session: PLANNED when planned_date is given, else IN_PROGRESS.

        Raises:
            MissingRequiredValue: user_id or workout_id is empty
        """
        if not user_id:
            raise MissingRequiredValue(field="user_id")
        if not workout_id:
            raise MissingRequiredValue(field="workout_id")

        timestamp = now or _utcnow()
        session = cls(
            user_id=user_id,
            workout_id=workout_id,
            planned_date=planned_date,
            is_from_program=is_from_program,
            program_id=program_id,
            created_at=timestamp,
        )
        if planned_date is None:
            session.status = WorkoutSessionStatus.IN_PROGRESS
            session.started_at = timestamp
        return session

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self, *, now: Optional[datetime] = None) -> None:
        if self.status != WorkoutSessionStatus.PLANNED:
            raise CannotStartSession(status=self.status)

        timestamp = now or _utcnow()
        self.status = WorkoutSessionStatus.IN_PROGRESS
        self.started_at = timestamp
        self.updated_at = timestamp

    def complete(
        self,
        perceived_difficulty: PerceivedDifficulty,
        notes: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> None:
        if self.status != WorkoutSessionStatus.IN_PROGRESS or self.started_at is None:
            raise CannotCompleteSession(status=self.status)

        difficulty = PerceivedDifficulty(perceived_difficulty)
        timestamp = now or _utcnow()
        self.status = WorkoutSessionStatus.COMPLETED
        self.completed_at = timestamp
        self.total_duration_seconds = self._elapsed_seconds(timestamp)
        self.perceived_difficulty = difficulty
        self.notes = notes.strip() if notes else None
        self.calories_estimated = self._estimate_calories()
        self.updated_at = timestamp

    def abandon(self, reason: Optional[str] = None, *, now: Optional[datetime] = None) -> None:
        if self.status != WorkoutSessionStatus.IN_PROGRESS:
            raise CannotAbandonSession(status=self.status)

        timestamp = now or _utcnow()
        self.status = WorkoutSessionStatus.ABANDONED
        self.completed_at = timestamp
        if self.started_at is not None:
            self.total_duration_seconds = self._elapsed_seconds(timestamp)
        self.notes = reason.strip() if reason else None
        self.updated_at = timestamp

    def cancel(self, reason: Optional[str] = None, *, now: Optional[datetime] = None) -> None:
        if self.status != WorkoutSessionStatus.PLANNED:
            raise InvalidSessionStatus(status=self.status, operation="cancel")

        self.status = WorkoutSessionStatus.CANCELLED
        self.notes = reason.strip() if reason else None
        self.updated_at = now or _utcnow()

    def _elapsed_seconds(self, end: datetime) -> int:
        return max(0, int((end - self.started_at).total_seconds()))

    def _estimate_calories(self) -> int:
        if not self.total_duration_seconds:
            return 0
        hours = self.total_duration_seconds / 3600
        return round(CALORIE_ESTIMATE_MET * CALORIE_ESTIMATE_BODY_WEIGHT_KG * hours)

    # -------------------------------------------------------------------------
    # Exercises and sets
    # -------------------------------------------------------------------------

    def _require_in_progress(self, operation: str) -> None:
        if self.status != WorkoutSessionStatus.IN_PROGRESS:
            raise InvalidSessionStatus(status=self.status, operation=operation)

    def add_exercise(
        self,
        exercise_id: str,
        exercise_name: str,
        metric_type: ExerciseMetricType,
        *,
        repetitions: Optional[int] = None,
        weight: Optional[float] = None,
        duration_seconds: Optional[int] = None,
        distance: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> WorkoutSessionExercise:
        """
        Append an exercise with order count+1.

        When any performance value is supplied, a first set is recorded
        immediately with those values.

        Raises:
            InvalidSessionStatus: session is not IN_PROGRESS
            MissingRequiredValue: empty exercise_id or exercise_name
            ExerciseAlreadyExists: exercise_id is already in this session
        """
        self._require_in_progress("add_exercise")

        if not exercise_id:
            raise MissingRequiredValue(field="exercise_id")
        if not exercise_name or not exercise_name.strip():
            raise MissingRequiredValue(field="exercise_name")
        if self.has_exercise(exercise_id):
            raise ExerciseAlreadyExists(exercise_id=exercise_id)

        timestamp = now or _utcnow()
        exercise = WorkoutSessionExercise(
            exercise_id=exercise_id,
            exercise_name=exercise_name.strip(),
            metric_type=ExerciseMetricType(metric_type),
            order=len(self.exercises) + 1,
            performed_at=timestamp,
        )

        initial = (repetitions, weight, duration_seconds, distance)
        if any(v is not None for v in initial):
            # Validated on the detached exercise so a bad first set never lands
            exercise.add_set(
                repetitions=repetitions,
                weight=weight,
                duration_seconds=duration_seconds,
                distance=distance,
                now=timestamp,
            )

        self.exercises.append(exercise)
        self.updated_at = timestamp
        return exercise

    def remove_exercise(self, exercise_id: str, *, now: Optional[datetime] = None) -> None:
        self._require_in_progress("remove_exercise")

        exercise = self.get_exercise(exercise_id)
        self.exercises.remove(exercise)
        for position, remaining in enumerate(self.exercises, start=1):
            remaining.update_order(position)
        self.updated_at = now or _utcnow()

    def add_set(
        self,
        exercise_id: str,
        repetitions: Optional[int] = None,
        weight: Optional[float] = None,
        duration_seconds: Optional[int] = None,
        distance: Optional[float] = None,
        rest_time_seconds: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> WorkoutSessionSet:
        self._require_in_progress("add_set")

        exercise = self.get_exercise(exercise_id)
        timestamp = now or _utcnow()
        new_set = exercise.add_set(
            repetitions=repetitions,
            weight=weight,
            duration_seconds=duration_seconds,
            distance=distance,
            rest_time_seconds=rest_time_seconds,
            now=timestamp,
        )
        self.updated_at = timestamp
        return new_set

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find_exercise(self, exercise_id: str) -> Optional[WorkoutSessionExercise]:
        for exercise in self.exercises:
            if exercise.exercise_id == exercise_id:
                return exercise
        return None

    def get_exercise(self, exercise_id: str) -> WorkoutSessionExercise:
        exercise = self.find_exercise(exercise_id)
        if exercise is None:
            raise ExerciseNotFoundInSession(exercise_id=exercise_id)
        return exercise

    def has_exercise(self, exercise_id: str) -> bool:
        return self.find_exercise(exercise_id) is not None

    @property
    def exercise_count(self) -> int:
        return len(self.exercises)

    @property
    def is_active(self) -> bool:
        return self.status == WorkoutSessionStatus.IN_PROGRESS

    @property
    def all_exercises_have_sets(self) -> bool:
        return bool(self.exercises) and all(e.has_sets for e in self.exercises)

    @property
    def end_or_created_at(self) -> datetime:
        """Timestamp used to place the session on a calendar day."""
        return self.completed_at or self.created_at

    def __str__(self) -> str:
        return (
            f"WorkoutSession({self.id}, user={self.user_id}, "
            f"status={self.status.value}, {self.exercise_count} exercises)"
        )
