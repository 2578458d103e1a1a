"""
Infrastructure Database Layer.

This package provides Supabase-backed implementations of the repository interfaces
defined in application.ports. These implementations are injected into
TrackingService for clean separation of concerns and testability.

Usage:
    from supabase import acreate_client
    from infrastructure.db import (
        SupabaseWorkoutSessionRepository,
        SupabasePlannedWorkoutRepository,
        SupabaseUserMetricRepository,
    )

    client = await acreate_client(url, key)
    session_repo = SupabaseWorkoutSessionRepository(client)
"""

from infrastructure.db.errors import TrackingStorageError
from infrastructure.db.planned_workout_repository import SupabasePlannedWorkoutRepository
from infrastructure.db.user_metric_repository import SupabaseUserMetricRepository
from infrastructure.db.workout_session_repository import SupabaseWorkoutSessionRepository

__all__ = [
    "SupabaseWorkoutSessionRepository",
    "SupabasePlannedWorkoutRepository",
    "SupabaseUserMetricRepository",
    "TrackingStorageError",
]
