"""
Pytest fixtures shared by the tracking tests.
"""

import pytest

from application.services import TrackingService
from tests.fakes import (
    FakeClock,
    FakePlannedWorkoutRepository,
    FakeUserMetricRepository,
    FakeWorkoutSessionRepository,
    create_tracking_service,
)


@pytest.fixture
def session_repo() -> FakeWorkoutSessionRepository:
    """Create a fresh fake session repository."""
    return FakeWorkoutSessionRepository()


@pytest.fixture
def planned_repo() -> FakePlannedWorkoutRepository:
    return FakePlannedWorkoutRepository()


@pytest.fixture
def metric_repo() -> FakeUserMetricRepository:
    return FakeUserMetricRepository()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(session_repo, planned_repo, metric_repo, clock) -> TrackingService:
    """TrackingService wired to the fake repositories and clock."""
    return create_tracking_service(
        session_repo=session_repo,
        planned_repo=planned_repo,
        metric_repo=metric_repo,
        clock=clock,
    )
