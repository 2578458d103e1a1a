"""
TrackingService - orchestrates workout sessions, planned workouts and metrics.

Every mutating operation follows the same shape:

1. Load everything it needs from the repositories
2. Apply the domain transition in memory (guards raise before mutating)
3. Persist the result

Operations that write more than one aggregate run their write step under
asyncio.shield, so a cancelled caller either stops before anything is
written or lets every write of the step finish.

Domain failures come back as TrackingResult(success=False, error=...).
Anything else, including asyncio.CancelledError, propagates.
"""

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Awaitable, Callable, Coroutine, Dict, List, Optional, Set, TypeVar

from application.dtos import (
    ExercisePerformanceDTO,
    ExerciseScoreDTO,
    PlannedWorkoutDTO,
    StartedPlannedWorkoutDTO,
    TrackingResult,
    TrackingStatsDTO,
    UserMetricDTO,
    WorkoutFrequencyDTO,
    WorkoutScoreDTO,
    WorkoutSessionDTO,
    WorkoutSessionSetDTO,
)
from application.ports import (
    PlannedWorkoutRepository,
    UserMetricRepository,
    WorkoutSessionRepository,
)
from application.services import tracking_stats
from domain.errors import (
    MetricNotFound,
    PlannedWorkoutNotFound,
    TrackingDomainError,
    UserAlreadyHasActiveWorkoutSession,
    WorkoutAlreadyScheduled,
    WorkoutSessionNotFound,
)
from domain.models import (
    ExerciseMetricType,
    PerceivedDifficulty,
    PlannedWorkout,
    UserMetric,
    UserMetricType,
    WorkoutSession,
    WorkoutSessionExercise,
    WorkoutSessionStatus,
)
from domain.services import PerformanceAnalysisService, get_performance_description

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_HISTORY_LIMIT = 50
TREND_METRIC_TYPES = (UserMetricType.WEIGHT, UserMetricType.PERSONAL_RECORD)

UNLINKED_SESSION_REASON = "Planned workout could not be linked"

_write_steps: Set[asyncio.Future] = set()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackingService:
    """
    Application service for workout tracking.

    Dependencies are injected via constructor for testability.

    Usage:
        >>> service = TrackingService(session_repo, planned_repo, metric_repo)
        >>> result = await service.start_workout_session("user-1", "workout-1")
        >>> if result.success:
        ...     print(f"Started session: {result.value.id}")
    """

    def __init__(
        self,
        session_repo: WorkoutSessionRepository,
        planned_repo: PlannedWorkoutRepository,
        metric_repo: UserMetricRepository,
        performance_analysis: Optional[PerformanceAnalysisService] = None,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Initialize the service with required dependencies.

        Args:
            session_repo: Repository for workout sessions
            planned_repo: Repository for planned workouts
            metric_repo: Repository for user metrics
            performance_analysis: Scoring service (a default instance if omitted)
            history_limit: Default page size for workout history
            clock: Source of the current UTC time
        """
        self._sessions = session_repo
        self._planned = planned_repo
        self._metrics = metric_repo
        self._analysis = performance_analysis or PerformanceAnalysisService()
        self._history_limit = history_limit
        self._clock = clock

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    async def _execute(self, operation: str, work: Awaitable[T]) -> TrackingResult[T]:
        try:
            value = await work
        except TrackingDomainError as e:
            logger.warning(f"{operation} rejected: {e.code.value} {e!r}")
            return TrackingResult.fail(e)
        return TrackingResult.ok(value)

    @staticmethod
    async def _write_all(*writes: Coroutine) -> None:
        """
        Run writes in order; cancelling the caller does not interrupt them.

        A failing write stops the sequence and the remaining writes are
        discarded unrun.
        """

        async def run() -> None:
            pending = list(writes)
            try:
                while pending:
                    await pending.pop(0)
            finally:
                for write in pending:
                    write.close()

        task = asyncio.ensure_future(run())
        # Held until done so a cancelled caller does not orphan the write step
        _write_steps.add(task)
        task.add_done_callback(_write_steps.discard)
        await asyncio.shield(task)

    async def _load_session(self, session_id: str) -> WorkoutSession:
        session = await self._sessions.get_by_id(session_id)
        if session is None:
            raise WorkoutSessionNotFound(session_id=session_id)
        return session

    async def _load_planned(self, planned_workout_id: str) -> PlannedWorkout:
        planned = await self._planned.get_by_id(planned_workout_id)
        if planned is None:
            raise PlannedWorkoutNotFound(planned_workout_id=planned_workout_id)
        return planned

    async def _ensure_no_active_session(self, user_id: str) -> None:
        # Fast path only; the repository enforces the rule on write
        active = await self._sessions.get_active_session_for_user(user_id)
        if active is not None:
            raise UserAlreadyHasActiveWorkoutSession(
                user_id=user_id, active_session_id=active.id
            )

    # =========================================================================
    # Workout sessions
    # =========================================================================

    async def start_workout_session(
        self,
        user_id: str,
        workout_id: str,
        *,
        planned_date: Optional[date] = None,
        is_from_program: bool = False,
        program_id: Optional[str] = None,
    ) -> TrackingResult[WorkoutSessionDTO]:
        """
        Start an ad-hoc session, or create a PLANNED one when planned_date is given.

        Fails with UserAlreadyHasActiveWorkoutSession when the user already
        has a session in progress.
        """

        async def work() -> WorkoutSessionDTO:
            logger.info(f"Starting workout session for user {user_id} with workout {workout_id}")
            if planned_date is None:
                await self._ensure_no_active_session(user_id)

            session = WorkoutSession.start_new(
                user_id,
                workout_id,
                planned_date=planned_date,
                is_from_program=is_from_program,
                program_id=program_id,
                now=self._clock(),
            )
            await self._sessions.add(session)

            logger.info(f"Workout session {session.id} created ({session.status.value})")
            return WorkoutSessionDTO.from_domain(session)

        return await self._execute("start_workout_session", work())

    async def complete_workout_session(
        self,
        session_id: str,
        perceived_difficulty: PerceivedDifficulty,
        notes: Optional[str] = None,
    ) -> TrackingResult[WorkoutSessionDTO]:
        """Complete a session, and the planned workout it was started from."""

        async def work() -> WorkoutSessionDTO:
            logger.info(f"Completing workout session {session_id}")
            session = await self._load_session(session_id)
            planned = await self._planned.get_by_session_id(session_id)

            now = self._clock()
            session.complete(perceived_difficulty, notes, now=now)
            writes = [self._sessions.update(session)]
            if planned is not None and planned.status == WorkoutSessionStatus.IN_PROGRESS:
                planned.complete(now=now)
                writes.append(self._planned.update(planned))

            await self._write_all(*writes)
            logger.info(
                f"Workout session {session_id} completed in "
                f"{session.total_duration_seconds}s"
            )
            return WorkoutSessionDTO.from_domain(session)

        return await self._execute("complete_workout_session", work())

    async def abandon_workout_session(
        self, session_id: str, reason: Optional[str] = None
    ) -> TrackingResult[WorkoutSessionDTO]:
        """Abandon a session, and the planned workout it was started from."""

        async def work() -> WorkoutSessionDTO:
            logger.info(f"Abandoning workout session {session_id}")
            session = await self._load_session(session_id)
            planned = await self._planned.get_by_session_id(session_id)

            now = self._clock()
            session.abandon(reason, now=now)
            writes = [self._sessions.update(session)]
            if planned is not None and planned.status == WorkoutSessionStatus.IN_PROGRESS:
                planned.abandon(now=now)
                writes.append(self._planned.update(planned))

            await self._write_all(*writes)
            logger.info(f"Workout session {session_id} abandoned")
            return WorkoutSessionDTO.from_domain(session)

        return await self._execute("abandon_workout_session", work())

    async def start_planned_session(self, session_id: str) -> TrackingResult[WorkoutSessionDTO]:
        """
        Move a PLANNED session to IN_PROGRESS.

        Subject to the same single-active-session rule as a fresh start.
        """

        async def work() -> WorkoutSessionDTO:
            logger.info(f"Starting planned workout session {session_id}")
            session = await self._load_session(session_id)
            await self._ensure_no_active_session(session.user_id)

            session.start(now=self._clock())
            await self._sessions.update(session)
            logger.info(f"Workout session {session_id} in progress")
            return WorkoutSessionDTO.from_domain(session)

        return await self._execute("start_planned_session", work())

    async def cancel_workout_session(
        self, session_id: str, reason: Optional[str] = None
    ) -> TrackingResult[WorkoutSessionDTO]:
        async def work() -> WorkoutSessionDTO:
            logger.info(f"Cancelling workout session {session_id}")
            session = await self._load_session(session_id)
            session.cancel(reason, now=self._clock())
            await self._sessions.update(session)
            return WorkoutSessionDTO.from_domain(session)

        return await self._execute("cancel_workout_session", work())

    async def add_exercise_to_session(
        self,
        session_id: str,
        exercise_id: str,
        exercise_name: str,
        metric_type: ExerciseMetricType,
        *,
        repetitions: Optional[int] = None,
        weight: Optional[float] = None,
        duration_seconds: Optional[int] = None,
        distance: Optional[float] = None,
    ) -> TrackingResult[WorkoutSessionDTO]:
        async def work() -> WorkoutSessionDTO:
            logger.info(f"Adding exercise {exercise_id} to session {session_id}")
            session = await self._load_session(session_id)
            session.add_exercise(
                exercise_id,
                exercise_name,
                metric_type,
                repetitions=repetitions,
                weight=weight,
                duration_seconds=duration_seconds,
                distance=distance,
                now=self._clock(),
            )
            await self._sessions.update(session)
            return WorkoutSessionDTO.from_domain(session)

        return await self._execute("add_exercise_to_session", work())

    async def remove_exercise_from_session(
        self, session_id: str, exercise_id: str
    ) -> TrackingResult[WorkoutSessionDTO]:
        async def work() -> WorkoutSessionDTO:
            logger.info(f"Removing exercise {exercise_id} from session {session_id}")
            session = await self._load_session(session_id)
            session.remove_exercise(exercise_id, now=self._clock())
            await self._sessions.update(session)
            return WorkoutSessionDTO.from_domain(session)

        return await self._execute("remove_exercise_from_session", work())

    async def add_set_to_exercise(
        self,
        session_id: str,
        exercise_id: str,
        repetitions: Optional[int] = None,
        weight: Optional[float] = None,
        duration_seconds: Optional[int] = None,
        distance: Optional[float] = None,
        rest_time_seconds: Optional[int] = None,
    ) -> TrackingResult[WorkoutSessionSetDTO]:
        async def work() -> WorkoutSessionSetDTO:
            logger.info(f"Adding set to exercise {exercise_id} in session {session_id}")
            session = await self._load_session(session_id)
            new_set = session.add_set(
                exercise_id,
                repetitions=repetitions,
                weight=weight,
                duration_seconds=duration_seconds,
                distance=distance,
                rest_time_seconds=rest_time_seconds,
                now=self._clock(),
            )
            await self._sessions.update(session)
            return WorkoutSessionSetDTO.from_domain(new_set)

        return await self._execute("add_set_to_exercise", work())

    async def get_workout_session(self, session_id: str) -> Optional[WorkoutSessionDTO]:
        session = await self._sessions.get_by_id(session_id)
        return WorkoutSessionDTO.from_domain(session) if session else None

    async def get_active_workout_session(self, user_id: str) -> Optional[WorkoutSessionDTO]:
        session = await self._sessions.get_active_session_for_user(user_id)
        return WorkoutSessionDTO.from_domain(session) if session else None

    async def get_user_workout_history(
        self, user_id: str, limit: Optional[int] = None
    ) -> List[WorkoutSessionDTO]:
        """Most recent sessions first, at most limit (default 50)."""
        sessions = await self._sessions.list_for_user(
            user_id, limit=limit if limit is not None else self._history_limit
        )
        return [WorkoutSessionDTO.from_domain(s) for s in sessions]

    async def get_workout_sessions_in_period(
        self, user_id: str, start: datetime, end: datetime
    ) -> List[WorkoutSessionDTO]:
        sessions = await self._sessions.list_for_user(user_id, start=start, end=end)
        return [WorkoutSessionDTO.from_domain(s) for s in sessions]

    # =========================================================================
    # Scoring
    # =========================================================================

    async def _history_for(
        self, session: WorkoutSession, exercise_id: str
    ) -> List[WorkoutSessionExercise]:
        return await self._sessions.get_history_for_exercise(
            session.user_id, exercise_id, exclude_session_id=session.id
        )

    async def calculate_exercise_score(
        self, session_id: str, exercise_id: str
    ) -> TrackingResult[ExerciseScoreDTO]:
        """Score one exercise of a session against the user's history (read-only)."""

        async def work() -> ExerciseScoreDTO:
            session = await self._load_session(session_id)
            exercise = session.get_exercise(exercise_id)
            history = await self._history_for(session, exercise_id)

            score = self._analysis.calculate_performance_score(exercise, history)
            return ExerciseScoreDTO(
                session_id=session_id,
                exercise_id=exercise_id,
                score=score,
                description=get_performance_description(score),
            )

        return await self._execute("calculate_exercise_score", work())

    async def score_workout_session(self, session_id: str) -> TrackingResult[WorkoutScoreDTO]:
        """
        Score every exercise of a session and store the per-exercise scores.

        History for all exercises is fetched before anything is mutated.
        """

        async def work() -> WorkoutScoreDTO:
            logger.info(f"Scoring workout session {session_id}")
            session = await self._load_session(session_id)

            exercise_ids = [e.exercise_id for e in session.exercises]
            histories = await asyncio.gather(
                *(self._history_for(session, exercise_id) for exercise_id in exercise_ids)
            )
            history_by_exercise: Dict[str, List[WorkoutSessionExercise]] = dict(
                zip(exercise_ids, histories)
            )

            exercise_scores = self._analysis.score_session_exercises(session, history_by_exercise)
            workout_score = self._analysis.calculate_workout_score(session, history_by_exercise)

            if exercise_scores:
                for exercise in session.exercises:
                    exercise.set_performance_score(exercise_scores[exercise.exercise_id])
                await self._sessions.update(session)

            logger.info(f"Workout session {session_id} scored {workout_score:.1f}")
            return WorkoutScoreDTO(
                session_id=session_id,
                score=workout_score,
                description=get_performance_description(workout_score),
                exercise_scores=exercise_scores,
            )

        return await self._execute("score_workout_session", work())

    # =========================================================================
    # Planned workouts
    # =========================================================================

    def _today(self) -> date:
        return self._clock().date()

    async def schedule_workout(
        self,
        user_id: str,
        workout_id: str,
        scheduled_date: date,
        *,
        is_from_program: bool = False,
        program_id: Optional[str] = None,
    ) -> TrackingResult[PlannedWorkoutDTO]:
        async def work() -> PlannedWorkoutDTO:
            logger.info(
                f"Scheduling workout {workout_id} for user {user_id} on {scheduled_date}"
            )
            if await self._planned.has_planned_workout(user_id, workout_id, scheduled_date):
                raise WorkoutAlreadyScheduled(
                    user_id=user_id, workout_id=workout_id, scheduled_date=scheduled_date
                )

            planned = PlannedWorkout.schedule(
                user_id,
                workout_id,
                scheduled_date,
                is_from_program=is_from_program,
                program_id=program_id,
                now=self._clock(),
            )
            await self._planned.add(planned)
            return PlannedWorkoutDTO.from_domain(planned, self._today())

        return await self._execute("schedule_workout", work())

    async def reschedule_workout(
        self, planned_workout_id: str, new_date: date
    ) -> TrackingResult[PlannedWorkoutDTO]:
        async def work() -> PlannedWorkoutDTO:
            logger.info(f"Rescheduling planned workout {planned_workout_id} to {new_date}")
            planned = await self._load_planned(planned_workout_id)
            if new_date != planned.scheduled_date and await self._planned.has_planned_workout(
                planned.user_id, planned.workout_id, new_date
            ):
                raise WorkoutAlreadyScheduled(
                    user_id=planned.user_id,
                    workout_id=planned.workout_id,
                    scheduled_date=new_date,
                )

            planned.reschedule(new_date, now=self._clock())
            await self._planned.update(planned)
            return PlannedWorkoutDTO.from_domain(planned, self._today())

        return await self._execute("reschedule_workout", work())

    async def cancel_planned_workout(
        self, planned_workout_id: str
    ) -> TrackingResult[PlannedWorkoutDTO]:
        async def work() -> PlannedWorkoutDTO:
            logger.info(f"Cancelling planned workout {planned_workout_id}")
            planned = await self._load_planned(planned_workout_id)
            planned.cancel(now=self._clock())
            await self._planned.update(planned)
            return PlannedWorkoutDTO.from_domain(planned, self._today())

        return await self._execute("cancel_planned_workout", work())

    async def start_planned_workout(
        self, planned_workout_id: str
    ) -> TrackingResult[StartedPlannedWorkoutDTO]:
        """
        Start a planned workout as a new IN_PROGRESS session and link the two.

        The session insert and the planned workout update are written together.
        If the update fails after the insert, the new session is abandoned so
        it does not block the user's next start, and the error propagates.
        """

        async def work() -> StartedPlannedWorkoutDTO:
            logger.info(f"Starting planned workout {planned_workout_id}")
            planned = await self._load_planned(planned_workout_id)
            await self._ensure_no_active_session(planned.user_id)

            now = self._clock()
            session = WorkoutSession.start_new(
                planned.user_id,
                planned.workout_id,
                is_from_program=planned.is_from_program,
                program_id=planned.program_id,
                now=now,
            )
            planned.start(session.id, now=now)

            async def persist() -> None:
                await self._sessions.add(session)
                try:
                    await self._planned.update(planned)
                except Exception:
                    logger.error(
                        f"Linking planned workout {planned_workout_id} failed, "
                        f"abandoning session {session.id}"
                    )
                    session.abandon(UNLINKED_SESSION_REASON, now=now)
                    await self._sessions.update(session)
                    raise

            await self._write_all(persist())
            logger.info(f"Planned workout {planned_workout_id} started as session {session.id}")
            return StartedPlannedWorkoutDTO(
                planned_workout=PlannedWorkoutDTO.from_domain(planned, now.date()),
                session=WorkoutSessionDTO.from_domain(session),
            )

        return await self._execute("start_planned_workout", work())

    async def get_upcoming_workouts(self, user_id: str) -> List[PlannedWorkoutDTO]:
        today = self._today()
        planned = await self._planned.list_for_user(user_id, status=WorkoutSessionStatus.PLANNED)
        return [PlannedWorkoutDTO.from_domain(p, today) for p in planned if p.is_upcoming(today)]

    async def get_overdue_workouts(self, user_id: str) -> List[PlannedWorkoutDTO]:
        today = self._today()
        planned = await self._planned.list_for_user(user_id, status=WorkoutSessionStatus.PLANNED)
        return [PlannedWorkoutDTO.from_domain(p, today) for p in planned if p.is_overdue(today)]

    async def get_planned_workouts_for_date(
        self, user_id: str, scheduled_date: date
    ) -> List[PlannedWorkoutDTO]:
        today = self._today()
        planned = await self._planned.list_for_user(user_id, scheduled_date=scheduled_date)
        return [PlannedWorkoutDTO.from_domain(p, today) for p in planned]

    # =========================================================================
    # User metrics
    # =========================================================================

    async def record_user_metric(
        self,
        user_id: str,
        metric_type: UserMetricType,
        value: float,
        *,
        recorded_at: Optional[datetime] = None,
        notes: Optional[str] = None,
        unit: Optional[str] = None,
    ) -> TrackingResult[UserMetricDTO]:
        async def work() -> UserMetricDTO:
            logger.info(f"Recording metric {metric_type} for user {user_id}")
            metric = UserMetric.record(
                user_id,
                metric_type,
                value,
                unit=unit,
                recorded_at=recorded_at,
                notes=notes,
                now=self._clock(),
            )
            await self._metrics.add(metric)
            return UserMetricDTO.from_domain(metric)

        return await self._execute("record_user_metric", work())

    async def update_user_metric(
        self, metric_id: str, value: float, notes: Optional[str] = None
    ) -> TrackingResult[UserMetricDTO]:
        async def work() -> UserMetricDTO:
            logger.info(f"Updating metric {metric_id}")
            metric = await self._metrics.get_by_id(metric_id)
            if metric is None:
                raise MetricNotFound(metric_id=metric_id)

            metric.update_value(value, notes, now=self._clock())
            await self._metrics.update(metric)
            return UserMetricDTO.from_domain(metric)

        return await self._execute("update_user_metric", work())

    async def delete_user_metric(self, metric_id: str) -> TrackingResult[bool]:
        async def work() -> bool:
            logger.info(f"Deleting metric {metric_id}")
            if await self._metrics.get_by_id(metric_id) is None:
                raise MetricNotFound(metric_id=metric_id)
            if not await self._metrics.delete(metric_id):
                raise MetricNotFound(metric_id=metric_id)
            return True

        return await self._execute("delete_user_metric", work())

    async def get_user_metrics(self, user_id: str) -> List[UserMetricDTO]:
        metrics = await self._metrics.list_for_user(user_id)
        return [UserMetricDTO.from_domain(m) for m in metrics]

    async def get_user_metrics_by_type(
        self, user_id: str, metric_type: UserMetricType
    ) -> List[UserMetricDTO]:
        metrics = await self._metrics.list_for_user(user_id, metric_type=metric_type)
        return [UserMetricDTO.from_domain(m) for m in metrics]

    async def get_latest_metric(
        self, user_id: str, metric_type: UserMetricType
    ) -> Optional[UserMetricDTO]:
        metric = await self._metrics.get_latest_by_type(user_id, metric_type)
        return UserMetricDTO.from_domain(metric) if metric else None

    # =========================================================================
    # Statistics
    # =========================================================================

    async def get_user_tracking_stats(self, user_id: str) -> TrackingStatsDTO:
        """Totals, streaks, weekly frequency and metric trends for a user."""
        logger.info(f"Generating tracking statistics for user {user_id}")
        completed = await self._sessions.list_for_user(
            user_id, status=WorkoutSessionStatus.COMPLETED
        )

        trends = []
        for metric_type in TREND_METRIC_TYPES:
            latest = await self._metrics.list_for_user(user_id, metric_type=metric_type, limit=2)
            trend = tracking_stats.calculate_metric_trend(latest)
            if trend is not None:
                trends.append(trend)

        return tracking_stats.build_tracking_stats(completed, trends, self._clock())

    async def get_exercise_performance(
        self, user_id: str, exercise_id: str
    ) -> Optional[ExercisePerformanceDTO]:
        sessions = await self._sessions.list_for_user(user_id)
        performances = [e for s in sessions for e in s.exercises]
        return tracking_stats.build_exercise_performance(exercise_id, performances)

    async def get_workout_frequency(
        self, user_id: str, start: datetime, end: datetime
    ) -> List[WorkoutFrequencyDTO]:
        sessions = await self._sessions.list_for_user(user_id, start=start, end=end)
        return tracking_stats.calculate_daily_frequency(sessions)
