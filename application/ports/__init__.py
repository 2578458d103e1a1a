"""
Repository Interfaces (Ports) for workout tracking.

This package defines abstract interfaces that decouple domain logic from
infrastructure (database, external services). Implementations are provided
in the infrastructure layer.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the domain needs)
- Adapters: Concrete implementations in infrastructure/ (how it's provided)

Usage:
    from application.ports import WorkoutSessionRepository

    class TrackingService:
        def __init__(self, session_repo: WorkoutSessionRepository):
            self._session_repo = session_repo

        async def get_workout_session(self, session_id):
            return await self._session_repo.get_by_id(session_id)
"""

# Workout session persistence
from application.ports.workout_session_repository import WorkoutSessionRepository

# Planned workout persistence
from application.ports.planned_workout_repository import PlannedWorkoutRepository

# User metric persistence
from application.ports.user_metric_repository import UserMetricRepository

__all__ = [
    "WorkoutSessionRepository",
    "PlannedWorkoutRepository",
    "UserMetricRepository",
]
