"""Application services coordinating the tracking use cases."""

from application.services.tracking_service import TrackingService

__all__ = ["TrackingService"]
