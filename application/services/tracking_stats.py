"""
Pure statistics over a user's workout sessions and metrics.

TrackingService loads the data and hands it to these functions; they do
no I/O. Every function that depends on the current time takes it as an
argument.
"""

from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from application.dtos import (
    ExercisePerformanceDTO,
    MetricTrendDTO,
    PerformanceHistoryDTO,
    TrackingStatsDTO,
    WorkoutFrequencyDTO,
)
from domain.models import (
    UserMetric,
    WorkoutSession,
    WorkoutSessionExercise,
    WorkoutSessionStatus,
)

WEEKLY_FREQUENCY_DAYS = 56  # 8 weeks
TREND_THRESHOLD_PERCENT = 2.0
EXERCISE_HISTORY_POINTS = 10


def _session_day(session: WorkoutSession) -> date:
    return session.end_or_created_at.date()


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def calculate_current_streak(sessions: Sequence[WorkoutSession], today: date) -> int:
    """
    Consecutive workout days ending today or yesterday.

    Several sessions on one day count once.
    """
    days = sorted({_session_day(s) for s in sessions}, reverse=True)
    if not days or days[0] < today - timedelta(days=1):
        return 0

    streak = 1
    for newer, older in zip(days, days[1:]):
        if older != newer - timedelta(days=1):
            break
        streak += 1
    return streak


def calculate_longest_streak(sessions: Sequence[WorkoutSession]) -> int:
    days = sorted({_session_day(s) for s in sessions})
    if not days:
        return 0

    longest = current = 1
    for previous, day in zip(days, days[1:]):
        if day == previous + timedelta(days=1):
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def calculate_weekly_frequency(
    sessions: Sequence[WorkoutSession], today: date
) -> List[WorkoutFrequencyDTO]:
    """Completed sessions of the last 8 weeks grouped by week start (Monday)."""
    cutoff = today - timedelta(days=WEEKLY_FREQUENCY_DAYS)
    recent = [s for s in sessions if s.completed_at is not None and s.completed_at.date() >= cutoff]
    return _group_by(recent, lambda s: week_start(_session_day(s)))


def calculate_daily_frequency(sessions: Sequence[WorkoutSession]) -> List[WorkoutFrequencyDTO]:
    """Completed sessions grouped by completion day."""
    completed = [
        s
        for s in sessions
        if s.status == WorkoutSessionStatus.COMPLETED and s.completed_at is not None
    ]
    return _group_by(completed, _session_day)


def _group_by(sessions, key) -> List[WorkoutFrequencyDTO]:
    groups: Dict[date, List[WorkoutSession]] = OrderedDict()
    for session in sessions:
        groups.setdefault(key(session), []).append(session)

    return [
        WorkoutFrequencyDTO(
            date=day,
            workout_count=len(group),
            total_duration_seconds=sum(s.total_duration_seconds or 0 for s in group),
        )
        for day, group in sorted(groups.items())
    ]


def calculate_metric_trend(metrics: Sequence[UserMetric]) -> Optional[MetricTrendDTO]:
    """
    Trend between the two most recent metrics of one type.

    "up" above +2%, "down" below -2%, otherwise "stable". With a single
    metric (or a zero previous value) there is no percentage and the
    trend is "stable".
    """
    ordered = sorted(metrics, key=lambda m: m.recorded_at, reverse=True)
    if not ordered:
        return None

    current = ordered[0]
    previous = ordered[1] if len(ordered) > 1 else None

    change: Optional[float] = None
    if previous is not None and previous.value != 0:
        change = (current.value - previous.value) / previous.value * 100

    if change is not None and change > TREND_THRESHOLD_PERCENT:
        trend = "up"
    elif change is not None and change < -TREND_THRESHOLD_PERCENT:
        trend = "down"
    else:
        trend = "stable"

    return MetricTrendDTO(
        metric_type=current.metric_type,
        current_value=current.value,
        previous_value=previous.value if previous else None,
        percentage_change=change,
        trend=trend,
        last_recorded=current.recorded_at,
    )


def build_tracking_stats(
    completed_sessions: Sequence[WorkoutSession],
    metric_trends: List[MetricTrendDTO],
    now: datetime,
) -> TrackingStatsDTO:
    """Aggregate totals, averages and streaks over completed sessions."""
    total = len(completed_sessions)
    total_time = sum(s.total_duration_seconds or 0 for s in completed_sessions)
    difficulties = [
        int(s.perceived_difficulty)
        for s in completed_sessions
        if s.perceived_difficulty is not None
    ]
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)
    end_times = [s.completed_at for s in completed_sessions if s.completed_at is not None]

    return TrackingStatsDTO(
        total_workouts_completed=total,
        total_workout_time_seconds=total_time,
        average_workout_duration_seconds=total_time // total if total else 0,
        total_calories_burned=sum(s.calories_estimated or 0 for s in completed_sessions),
        workouts_this_week=sum(1 for t in end_times if t >= week_ago),
        workouts_this_month=sum(1 for t in end_times if t >= month_ago),
        average_perceived_difficulty=(
            sum(difficulties) / len(difficulties) if difficulties else None
        ),
        last_workout_date=max(end_times) if end_times else None,
        current_streak=calculate_current_streak(completed_sessions, now.date()),
        longest_streak=calculate_longest_streak(completed_sessions),
        weekly_frequency=calculate_weekly_frequency(completed_sessions, now.date()),
        metric_trends=metric_trends,
    )


def build_exercise_performance(
    exercise_id: str, performances: Sequence[WorkoutSessionExercise]
) -> Optional[ExercisePerformanceDTO]:
    """
    Summarize every recorded performance of one exercise.

    best_value and average_value are taken over individual set values;
    history holds the best value of the 10 most recent performances.
    """
    matching = sorted(
        (p for p in performances if p.exercise_id == exercise_id),
        key=lambda p: p.performed_at,
        reverse=True,
    )
    if not matching:
        return None

    latest = matching[0]
    values = [
        v
        for p in matching
        for v in (p.set_value(s) for s in p.sets)
        if v is not None
    ]

    return ExercisePerformanceDTO(
        exercise_id=exercise_id,
        exercise_name=latest.exercise_name,
        metric_type=latest.metric_type,
        best_value=max(values) if values else None,
        average_value=sum(values) / len(values) if values else None,
        times_performed=len(matching),
        last_performed=latest.performed_at,
        history=[
            PerformanceHistoryDTO(date=p.performed_at, value=p.get_best_performance() or 0.0)
            for p in matching[:EXERCISE_HISTORY_POINTS]
        ],
    )
