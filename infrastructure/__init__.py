"""
Infrastructure Layer for workout tracking.

This package contains concrete implementations of repository interfaces:
- db/: Supabase database implementations
"""

# Re-export database repositories for convenient access
from infrastructure.db import (
    SupabasePlannedWorkoutRepository,
    SupabaseUserMetricRepository,
    SupabaseWorkoutSessionRepository,
    TrackingStorageError,
)

__all__ = [
    "SupabaseWorkoutSessionRepository",
    "SupabasePlannedWorkoutRepository",
    "SupabaseUserMetricRepository",
    "TrackingStorageError",
]
