"""
Performance Analysis Service for workout sessions.

Scores an exercise performance against the user's own history on a
0-100 scale, and rolls per-exercise scores up into a workout score.

Score components (weighted 40/30/30):
- Improvement: current best vs personal best
- Consistency: current best vs mean of the last 5 performances
- Volume: current best vs mean of all performances

The service is pure: history is passed in by the caller, and no state
is kept between calls, so one instance can be shared freely.
"""

import math
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from domain.models import WorkoutSession, WorkoutSessionExercise


# (min ratio, score) pairs, checked top to bottom
IMPROVEMENT_THRESHOLDS: Tuple[Tuple[float, float], ...] = (
    (1.00, 100.0),  # New personal record
    (0.95, 90.0),  # Within 5% of PR
    (0.90, 80.0),
    (0.85, 70.0),
    (0.80, 60.0),
    (0.70, 50.0),  # Within 30% of PR
)
CONSISTENCY_THRESHOLDS: Tuple[Tuple[float, float], ...] = (
    (1.10, 100.0),  # 10%+ better than recent average
    (1.05, 85.0),
    (0.95, 75.0),  # Within 5% of recent average
    (0.90, 65.0),
    (0.85, 55.0),
)
VOLUME_THRESHOLDS: Tuple[Tuple[float, float], ...] = (
    (1.20, 100.0),  # 20%+ above average
    (1.10, 90.0),
    (1.00, 80.0),  # Equal to average
    (0.90, 70.0),
    (0.80, 60.0),
)

DESCRIPTION_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (95, "Personal Record"),
    (85, "Excellent"),
    (75, "Great"),
    (65, "Good"),
    (55, "Solid"),
    (45, "Improving"),
    (35, "On Track"),
)

NO_SETS_SCORE = 0.0
UNMEASURABLE_SCORE = 50.0
FIRST_ATTEMPT_SCORE = 75.0
RECENT_WINDOW = 5
COMPLETION_BONUS = 5.0


def _banded(ratio: float, thresholds: Iterable[Tuple[float, float]]) -> Optional[float]:
    for minimum, score in thresholds:
        if ratio >= minimum:
            return score
    return None


def _ratio(current: float, reference: float) -> float:
    """current / reference; a zero reference is matched by zero and beaten by anything more."""
    if reference == 0:
        return 1.0 if current == 0 else math.inf
    return current / reference


def get_performance_description(score: float) -> str:
    """
    Map a 0-100 score to a short label.

    Examples:
        >>> get_performance_description(96)
        'Personal Record'
        >>> get_performance_description(10)
        'Keep Going'
    """
    for minimum, label in DESCRIPTION_THRESHOLDS:
        if score >= minimum:
            return label
    return "Keep Going"


class PerformanceAnalysisService:
    """
    Scores exercise and workout performances against historical data.

    Historical exercises are expected oldest to newest; the consistency
    window is the tail of that order.
    """

    def calculate_performance_score(
        self,
        current: WorkoutSessionExercise,
        historical: Iterable[WorkoutSessionExercise],
    ) -> float:
        """
        Score one exercise performance.

        Args:
            current: Exercise from the session being scored
            historical: Earlier performances (other exercise_ids are ignored)

        Returns:
            Score in [0, 100]: 0 with no sets, 50 when nothing measurable
            was recorded, 75 for a first attempt.
        """
        if not current.sets:
            return NO_SETS_SCORE

        current_best = current.get_best_performance()
        if current_best is None:
            return UNMEASURABLE_SCORE

        history_values = self._history_values(current.exercise_id, historical)
        if not history_values:
            return FIRST_ATTEMPT_SCORE

        return self._progress_score(current_best, history_values)

    def calculate_workout_score(
        self,
        session: WorkoutSession,
        history_by_exercise_id: Mapping[str, Iterable[WorkoutSessionExercise]],
    ) -> float:
        """
        Average of per-exercise scores, +5 when every exercise has sets.

        Returns:
            Score clamped to [0, 100]; 0 for a session without exercises.
        """
        if not session.exercises:
            return 0.0

        scores = [
            self.calculate_performance_score(
                exercise, history_by_exercise_id.get(exercise.exercise_id, ())
            )
            for exercise in session.exercises
        ]
        average = sum(scores) / len(scores)
        bonus = COMPLETION_BONUS if session.all_exercises_have_sets else 0.0

        return max(0.0, min(100.0, average + bonus))

    def score_session_exercises(
        self,
        session: WorkoutSession,
        history_by_exercise_id: Mapping[str, Iterable[WorkoutSessionExercise]],
    ) -> Dict[str, float]:
        """Per-exercise scores keyed by exercise_id."""
        return {
            exercise.exercise_id: self.calculate_performance_score(
                exercise, history_by_exercise_id.get(exercise.exercise_id, ())
            )
            for exercise in session.exercises
        }

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _history_values(
        exercise_id: str, historical: Iterable[WorkoutSessionExercise]
    ) -> List[float]:
        values: List[float] = []
        for past in historical:
            if past.exercise_id != exercise_id:
                continue
            best = past.get_best_performance()
            if best is not None:
                values.append(best)
        return values

    def _progress_score(self, current: float, history: List[float]) -> float:
        personal_best = max(history)
        recent = history[-RECENT_WINDOW:]
        recent_average = sum(recent) / len(recent)
        overall_average = sum(history) / len(history)

        improvement = self._improvement_score(_ratio(current, personal_best))
        consistency = self._consistency_score(_ratio(current, recent_average))
        volume = self._volume_score(_ratio(current, overall_average))

        # 40/30/30 weighting
        return (improvement * 4 + consistency * 3 + volume * 3) / 10

    @staticmethod
    def _improvement_score(ratio: float) -> float:
        banded = _banded(ratio, IMPROVEMENT_THRESHOLDS)
        return banded if banded is not None else max(20.0, ratio * 50)

    @staticmethod
    def _consistency_score(ratio: float) -> float:
        banded = _banded(ratio, CONSISTENCY_THRESHOLDS)
        return banded if banded is not None else max(30.0, ratio * 50)

    @staticmethod
    def _volume_score(ratio: float) -> float:
        banded = _banded(ratio, VOLUME_THRESHOLDS)
        return banded if banded is not None else max(40.0, ratio * 60)
