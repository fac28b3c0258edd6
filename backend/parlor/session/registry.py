from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from parlor.logic.exceptions import UnsupportedSettingsError

if TYPE_CHECKING:
    from parlor.logic.state import GameSession


class RegistryFullError(UnsupportedSettingsError):
    """No room for another concurrent session."""


class GameRegistry:
    """In-memory map of live sessions and their per-session locks.

    Owned by one SessionManager. Insert and remove are plain dict operations,
    so no other task can observe a half-registered session.
    """

    def __init__(self, max_sessions: int = 1000) -> None:
        self._sessions: dict[str, GameSession] = {}  # session_id -> latest state
        self._locks: dict[str, asyncio.Lock] = {}  # session_id -> Lock
        self._max_sessions = max_sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def insert(self, state: GameSession) -> None:
        """Register a brand-new session. Ids are never reused."""
        if state.session_id in self._sessions:
            raise ValueError(f"session {state.session_id} already registered")
        if len(self._sessions) >= self._max_sessions:
            raise RegistryFullError("too many games are running, try again later")
        self._sessions[state.session_id] = state
        self._locks[state.session_id] = asyncio.Lock()

    def get(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    def replace(self, state: GameSession) -> None:
        """Store the result of a transition for an already registered session."""
        if state.session_id not in self._sessions:
            raise KeyError(state.session_id)
        self._sessions[state.session_id] = state

    def remove(self, session_id: str) -> GameSession | None:
        self._locks.pop(session_id, None)
        return self._sessions.pop(session_id, None)

    def lock_for(self, session_id: str) -> asyncio.Lock | None:
        """Per-session lock, or None once the session is gone."""
        return self._locks.get(session_id)

    def session_ids(self) -> list[str]:
        return list(self._sessions)
