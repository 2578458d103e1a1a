"""
UserMetric Repository Interface (Port).

This module defines the abstract interface for user metric persistence.
"""
from typing import List, Optional, Protocol

from domain.models import UserMetric, UserMetricType


class UserMetricRepository(Protocol):
    """Abstract interface for user metric persistence."""

    async def get_by_id(self, metric_id: str) -> Optional[UserMetric]:
        ...

    async def get_latest_by_type(
        self, user_id: str, metric_type: UserMetricType
    ) -> Optional[UserMetric]:
        """Most recent metric of a type by recorded_at."""
        ...

    async def list_for_user(
        self,
        user_id: str,
        *,
        metric_type: Optional[UserMetricType] = None,
        limit: Optional[int] = None,
    ) -> List[UserMetric]:
        """List a user's metrics, newest first by recorded_at."""
        ...

    async def add(self, metric: UserMetric) -> UserMetric:
        ...

    async def update(self, metric: UserMetric) -> UserMetric:
        """
        Raises:
            MetricNotFound: no metric with this id is stored
        """
        ...

    async def delete(self, metric_id: str) -> bool:
        """Hard delete. Returns False when nothing was deleted."""
        ...
