"""Manage the pending timeout of every live session."""

from collections.abc import Awaitable, Callable

import structlog

from parlor.logic.enums import TimeoutType, Variant
from parlor.logic.timer import SessionTimer, TimerConfig

logger = structlog.get_logger()

# Callback type: (session_id, timeout_type, version) -> Awaitable[None]
TimeoutCallback = Callable[[str, TimeoutType, int], Awaitable[None]]


class TimerManager:
    """Hold one SessionTimer per session id.

    The timer is armed with the session version current at arming time. The
    caller (SessionManager) compares that token with the live session before
    acting on an expiry, so a timeout that lost the race is harmless.
    """

    def __init__(self, on_timeout: TimeoutCallback, config: TimerConfig | None = None) -> None:
        self._timers: dict[str, SessionTimer] = {}
        self._on_timeout = on_timeout
        self._config = config or TimerConfig()

    @property
    def config(self) -> TimerConfig:
        return self._config

    def has_timer(self, session_id: str) -> bool:
        timer = self._timers.get(session_id)
        return timer is not None and timer.is_active

    def get_timer(self, session_id: str) -> SessionTimer | None:
        return self._timers.get(session_id)

    def start(self, session_id: str, variant: Variant, timeout_type: TimeoutType, version: int) -> None:
        """Arm (or re-arm) the session's timer for the given timeout kind."""
        timer = self._timers.setdefault(session_id, SessionTimer())
        duration = self._config.duration_for(variant, timeout_type)
        timer.start(
            duration,
            timeout_type,
            lambda sid=session_id, tt=timeout_type, v=version: self._on_timeout(sid, tt, v),
        )
        logger.debug("timer armed", timeout_type=timeout_type, seconds=duration, version=version)

    def cancel(self, session_id: str) -> None:
        """Cancel the pending timeout but keep the slot for re-arming."""
        timer = self._timers.get(session_id)
        if timer is not None:
            timer.cancel()

    def cleanup(self, session_id: str) -> None:
        """Cancel and forget the session's timer (session removed)."""
        timer = self._timers.pop(session_id, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
