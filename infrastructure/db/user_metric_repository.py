"""
Supabase implementation of UserMetricRepository.
"""
import logging
from typing import List, Optional

from supabase import AsyncClient

from domain.converters import db_row_to_user_metric, user_metric_to_db_row
from domain.errors import MetricNotFound
from domain.models import UserMetric, UserMetricType
from infrastructure.db.errors import raise_storage_error

logger = logging.getLogger(__name__)


class SupabaseUserMetricRepository:
    """Supabase implementation of UserMetricRepository protocol."""

    def __init__(self, client: AsyncClient, table: str = "user_metrics"):
        self._client = client
        self._table = table

    def _query(self):
        return self._client.table(self._table)

    async def get_by_id(self, metric_id: str) -> Optional[UserMetric]:
        try:
            result = await self._query().select("*").eq("id", metric_id).limit(1).execute()
        except Exception as e:
            logger.error(f"Failed to get metric {metric_id}: {e}")
            raise_storage_error("get metric", e)
        return db_row_to_user_metric(result.data[0]) if result.data else None

    async def get_latest_by_type(
        self, user_id: str, metric_type: UserMetricType
    ) -> Optional[UserMetric]:
        metrics = await self.list_for_user(user_id, metric_type=metric_type, limit=1)
        return metrics[0] if metrics else None

    async def list_for_user(
        self,
        user_id: str,
        *,
        metric_type: Optional[UserMetricType] = None,
        limit: Optional[int] = None,
    ) -> List[UserMetric]:
        try:
            query = self._query().select("*").eq("user_id", user_id)
            if metric_type is not None:
                query = query.eq("metric_type", UserMetricType(metric_type).value)
            query = query.order("recorded_at", desc=True)
            if limit is not None:
                query = query.limit(limit)
            result = await query.execute()
        except Exception as e:
            logger.error(f"Failed to list metrics for user {user_id}: {e}")
            raise_storage_error("list metrics", e)
        return [db_row_to_user_metric(row) for row in result.data or []]

    async def add(self, metric: UserMetric) -> UserMetric:
        try:
            await self._query().insert(user_metric_to_db_row(metric)).execute()
        except Exception as e:
            logger.error(f"Failed to insert metric {metric.id}: {e}")
            raise_storage_error("insert metric", e)
        return metric

    async def update(self, metric: UserMetric) -> UserMetric:
        try:
            result = await (
                self._query().update(user_metric_to_db_row(metric)).eq("id", metric.id).execute()
            )
        except Exception as e:
            logger.error(f"Failed to update metric {metric.id}: {e}")
            raise_storage_error("update metric", e)
        if not result.data:
            raise MetricNotFound(metric_id=metric.id)
        return metric

    async def delete(self, metric_id: str) -> bool:
        try:
            result = await self._query().delete().eq("id", metric_id).execute()
        except Exception as e:
            logger.error(f"Failed to delete metric {metric_id}: {e}")
            raise_storage_error("delete metric", e)
        return bool(result.data)
