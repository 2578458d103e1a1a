"""
Sync of physical measurements from profile updates into user metrics.

When a user edits height or weight on their profile, the users module
publishes a PhysicalMeasurementsUpdated event. This handler converts the
values to storage units and records them as HEIGHT / WEIGHT metrics.

A failed sync is logged and swallowed so the profile update that raised
the event is never rolled back because of tracking.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from application.dtos import TrackingResult, UserMetricDTO
from application.errors import render_error_message
from application.services.tracking_service import TrackingService
from domain.models import UserMetricType
from domain.services import MeasurementUnitConverter

logger = logging.getLogger(__name__)


@dataclass
class PhysicalMeasurementsUpdated:
    """Event published by the users module after a profile change."""

    user_id: str
    height: Optional[float] = None
    height_unit: Optional[str] = "cm"
    weight: Optional[float] = None
    weight_unit: Optional[str] = "kg"
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = "ProfileUpdate"


class PhysicalMeasurementsSyncHandler:
    """Records profile height and weight as tracking metrics."""

    def __init__(self, tracking_service: TrackingService) -> None:
        self._tracking = tracking_service

    async def handle(self, event: PhysicalMeasurementsUpdated) -> List[UserMetricDTO]:
        """
        Record the measurements carried by event.

        Returns:
            The metrics that were recorded; empty when nothing was synced
            or the sync failed.
        """
        logger.info(f"Processing physical measurements update for user {event.user_id}")
        notes = f"Auto-sync from profile update ({event.source})"
        recorded: List[UserMetricDTO] = []

        try:
            if event.height is not None and event.height_unit:
                height_cm = MeasurementUnitConverter.height_to_cm(event.height, event.height_unit)
                result = await self._tracking.record_user_metric(
                    event.user_id,
                    UserMetricType.HEIGHT,
                    height_cm,
                    recorded_at=event.updated_at,
                    notes=notes,
                    unit="cm",
                )
                self._collect(result, recorded, "Height")

            if event.weight is not None and event.weight_unit:
                weight_kg = MeasurementUnitConverter.weight_to_kg(event.weight, event.weight_unit)
                result = await self._tracking.record_user_metric(
                    event.user_id,
                    UserMetricType.WEIGHT,
                    weight_kg,
                    recorded_at=event.updated_at,
                    notes=notes,
                    unit="kg",
                )
                self._collect(result, recorded, "Weight")

            logger.info(f"Physical measurements sync completed for user {event.user_id}")
        except Exception:
            logger.exception(f"Failed to sync physical measurements for user {event.user_id}")

        return recorded

    @staticmethod
    def _collect(
        result: TrackingResult[UserMetricDTO], recorded: List[UserMetricDTO], label: str
    ) -> None:
        if result.success:
            logger.info(f"{label} synced: {result.value.display_value}")
            recorded.append(result.value)
        else:
            logger.error(f"{label} sync rejected: {render_error_message(result.error)}")
