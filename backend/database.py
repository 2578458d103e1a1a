"""
Database module for Supabase integration.

Builds the async Supabase client and wires the tracking repositories
into a TrackingService.
"""
import logging
from typing import Optional

from supabase import AsyncClient, acreate_client

from application.services import TrackingService
from backend.settings import Settings, get_settings
from infrastructure.db import (
    SupabasePlannedWorkoutRepository,
    SupabaseUserMetricRepository,
    SupabaseWorkoutSessionRepository,
)

logger = logging.getLogger(__name__)


async def get_supabase_client(settings: Optional[Settings] = None) -> Optional[AsyncClient]:
    """Get an async Supabase client, or None when credentials are missing."""
    settings = settings or get_settings()

    if not settings.is_supabase_configured:
        logger.warning("Supabase credentials not configured. Workout tracking storage is disabled.")
        return None

    try:
        return await acreate_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


def build_tracking_service(
    client: AsyncClient, settings: Optional[Settings] = None
) -> TrackingService:
    """Create a TrackingService backed by the Supabase repositories."""
    settings = settings or get_settings()
    return TrackingService(
        SupabaseWorkoutSessionRepository(client, table=settings.workout_sessions_table),
        SupabasePlannedWorkoutRepository(client, table=settings.planned_workouts_table),
        SupabaseUserMetricRepository(client, table=settings.user_metrics_table),
        history_limit=settings.workout_history_limit,
    )
