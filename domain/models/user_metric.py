"""
UserMetric - a timestamped scalar measurement for a user.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from domain.errors import MissingRequiredValue, NegativeMetricValue
from domain.models.enums import UserMetricType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserMetric(BaseModel):
    """
    Body weight, height or a personal record, recorded at a point in time.

    Metrics are edited in place and deleted physically; there is no
    state machine.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str = Field(..., min_length=1)
    metric_type: UserMetricType
    value: float = Field(..., ge=0)
    unit: str = Field(..., min_length=1)
    recorded_at: datetime = Field(default_factory=_utcnow)
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = None

    @classmethod
    def record(
        cls,
        user_id: str,
        metric_type: UserMetricType,
        value: float,
        *,
        unit: Optional[str] = None,
        recorded_at: Optional[datetime] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "UserMetric":
        """
        Create a metric, defaulting the unit from its type.

        Raises:
            MissingRequiredValue: user_id is empty
            NegativeMetricValue: value is below zero
        """
        if not user_id:
            raise MissingRequiredValue(field="user_id")
        if value < 0:
            raise NegativeMetricValue(field="value", value=value)

        metric_type = UserMetricType(metric_type)
        timestamp = now or _utcnow()
        return cls(
            user_id=user_id,
            metric_type=metric_type,
            value=value,
            unit=(unit or "").strip() or metric_type.default_unit,
            recorded_at=recorded_at or timestamp,
            notes=notes.strip() if notes else None,
            created_at=timestamp,
        )

    def update_value(
        self,
        value: float,
        notes: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> None:
        """Replace the value; notes are replaced only when given."""
        if value < 0:
            raise NegativeMetricValue(field="value", value=value)
        self.value = value
        if notes is not None:
            self.notes = notes.strip() or None
        self.updated_at = now or _utcnow()

    def get_display_value(self) -> str:
        return f"{self.value:.1f} {self.unit}"
