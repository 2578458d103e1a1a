"""
Fake WorkoutSession Repository for testing.

This module provides an in-memory implementation of WorkoutSessionRepository
for fast, isolated testing without database dependencies.

Reads yield to the event loop once, like a real network call would, so
concurrent callers can interleave between a read and a later write.
Writes check and store without yielding, which makes the
single-active-session check a conditional write.
"""
import asyncio
from datetime import datetime
from typing import Dict, List, Optional

from domain.errors import UserAlreadyHasActiveWorkoutSession, WorkoutSessionNotFound
from domain.models import WorkoutSession, WorkoutSessionExercise, WorkoutSessionStatus


class FakeWorkoutSessionRepository:
    """
    In-memory fake implementation of WorkoutSessionRepository for testing.

    Stores deep copies of sessions keyed by session ID, so callers never
    share state with the store.

    Usage:
        repo = FakeWorkoutSessionRepository()
        repo.seed([WorkoutSession.start_new("user1", "w1")])
        session = await repo.get_by_id(session_id)
    """

    def __init__(self):
        """Initialize with empty storage."""
        self._sessions: Dict[str, WorkoutSession] = {}
        self.add_calls = 0
        self.update_calls = 0

    def reset(self) -> None:
        """Clear all stored sessions and call counters."""
        self._sessions.clear()
        self.add_calls = 0
        self.update_calls = 0

    def seed(self, sessions: List[WorkoutSession]) -> None:
        """Seed the repository with sessions, bypassing the active-session guard."""
        for session in sessions:
            self._sessions[session.id] = session.model_copy(deep=True)

    def get_all(self) -> List[WorkoutSession]:
        """Get all stored sessions (test helper)."""
        return [s.model_copy(deep=True) for s in self._sessions.values()]

    def _active_for(self, user_id: str, *, exclude_id: Optional[str] = None) -> Optional[WorkoutSession]:
        for session in self._sessions.values():
            if (
                session.user_id == user_id
                and session.status == WorkoutSessionStatus.IN_PROGRESS
                and session.id != exclude_id
            ):
                return session
        return None

    def _guard_active(self, session: WorkoutSession) -> None:
        if session.status != WorkoutSessionStatus.IN_PROGRESS:
            return
        other = self._active_for(session.user_id, exclude_id=session.id)
        if other is not None:
            raise UserAlreadyHasActiveWorkoutSession(
                user_id=session.user_id, active_session_id=other.id
            )

    # =========================================================================
    # WorkoutSessionRepository Protocol Methods
    # =========================================================================

    async def get_by_id(self, session_id: str) -> Optional[WorkoutSession]:
        await asyncio.sleep(0)
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    async def get_active_session_for_user(self, user_id: str) -> Optional[WorkoutSession]:
        # Snapshot before yielding: the answer may be stale by the time it arrives
        session = self._active_for(user_id)
        snapshot = session.model_copy(deep=True) if session else None
        await asyncio.sleep(0)
        return snapshot

    async def get_history_for_exercise(
        self,
        user_id: str,
        exercise_id: str,
        *,
        exclude_session_id: Optional[str] = None,
    ) -> List[WorkoutSessionExercise]:
        await asyncio.sleep(0)
        history: List[WorkoutSessionExercise] = []
        for session in self._sessions.values():
            if session.user_id != user_id or session.id == exclude_session_id:
                continue
            if session.status != WorkoutSessionStatus.COMPLETED:
                continue
            exercise = session.find_exercise(exercise_id)
            if exercise is not None:
                history.append(exercise.model_copy(deep=True))
        return sorted(history, key=lambda e: e.performed_at)

    async def list_for_user(
        self,
        user_id: str,
        *,
        status: Optional[WorkoutSessionStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[WorkoutSession]:
        await asyncio.sleep(0)
        sessions = [
            s
            for s in self._sessions.values()
            if s.user_id == user_id
            and (status is None or s.status == status)
            and (start is None or s.created_at >= start)
            and (end is None or s.created_at <= end)
        ]
        sessions.sort(key=lambda s: s.created_at, reverse=True)
        if limit is not None:
            sessions = sessions[:limit]
        return [s.model_copy(deep=True) for s in sessions]

    async def add(self, session: WorkoutSession) -> WorkoutSession:
        self.add_calls += 1
        self._guard_active(session)
        self._sessions[session.id] = session.model_copy(deep=True)
        return session

    async def update(self, session: WorkoutSession) -> WorkoutSession:
        self.update_calls += 1
        if session.id not in self._sessions:
            raise WorkoutSessionNotFound(session_id=session.id)
        self._guard_active(session)
        self._sessions[session.id] = session.model_copy(deep=True)
        return session
