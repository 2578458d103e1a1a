"""Handlers for events published by other modules."""

from application.handlers.physical_measurements import (
    PhysicalMeasurementsSyncHandler,
    PhysicalMeasurementsUpdated,
)

__all__ = [
    "PhysicalMeasurementsSyncHandler",
    "PhysicalMeasurementsUpdated",
]
