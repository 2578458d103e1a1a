"""Pure domain services for workout tracking."""

from domain.services.measurement_units import MeasurementUnitConverter
from domain.services.performance_analysis import (
    PerformanceAnalysisService,
    get_performance_description,
)

__all__ = [
    "MeasurementUnitConverter",
    "PerformanceAnalysisService",
    "get_performance_description",
]
