"""
Server-side session timers.

Each session has at most one pending timeout: the lobby expiry, the current
turn, the poker confirmation prompt, or the poker round. Starting a timer
cancels the previous one. On expiry the callback hands the timeout back to
the session manager, which re-validates it against the latest state.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict

from parlor.logic.enums import TimeoutType, Variant

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from parlor.settings import ParlorSettings


class TimerConfig(BaseModel):
    """Timeout durations (seconds) per variant and timeout kind."""

    model_config = ConfigDict(frozen=True)

    lobby_seconds: float = 60
    elimination_turn_seconds: float = 90
    connect_four_turn_seconds: float = 60
    blackjack_turn_seconds: float = 120
    poker_confirm_seconds: float = 30
    poker_round_seconds: float = 60

    @classmethod
    def from_settings(cls, settings: ParlorSettings) -> TimerConfig:
        return cls(
            lobby_seconds=settings.lobby_timeout_seconds,
            elimination_turn_seconds=settings.elimination_turn_timeout_seconds,
            connect_four_turn_seconds=settings.connect_four_turn_timeout_seconds,
            blackjack_turn_seconds=settings.blackjack_turn_timeout_seconds,
            poker_confirm_seconds=settings.poker_confirm_timeout_seconds,
            poker_round_seconds=settings.poker_round_timeout_seconds,
        )

    def duration_for(self, variant: Variant, timeout_type: TimeoutType) -> float:
        if timeout_type == TimeoutType.LOBBY:
            return self.lobby_seconds
        if timeout_type == TimeoutType.CONFIRM:
            return self.poker_confirm_seconds
        if timeout_type == TimeoutType.ROUND:
            return self.poker_round_seconds
        turn_seconds = {
            Variant.ELIMINATION: self.elimination_turn_seconds,
            Variant.CONNECT_FOUR: self.connect_four_turn_seconds,
            Variant.BLACKJACK: self.blackjack_turn_seconds,
            Variant.POKER_DUEL: self.poker_round_seconds,
        }
        return turn_seconds[variant]


class SessionTimer:
    """A single cancellable delayed callback."""

    def __init__(self) -> None:
        self._active_task: asyncio.Task[None] | None = None
        self.timeout_type: TimeoutType | None = None

    @property
    def is_active(self) -> bool:
        return self._active_task is not None and not self._active_task.done()

    def start(
        self,
        duration: float,
        timeout_type: TimeoutType,
        on_timeout: Callable[[], Awaitable[None]],
    ) -> None:
        """Schedule ``on_timeout`` after ``duration`` seconds, replacing any pending timeout."""
        self.cancel()
        self.timeout_type = timeout_type
        self._active_task = asyncio.create_task(self._run_timer(duration, on_timeout))

    def cancel(self) -> None:
        # never cancel the task we are running inside: the timeout callback
        # itself leads to a transition that cancels the session's timer
        if self._active_task is not None and not self._active_task.done():
            if self._active_task is not asyncio.current_task():
                self._active_task.cancel()
        self._active_task = None
        self.timeout_type = None

    async def _run_timer(self, seconds: float, on_timeout: Callable[[], Awaitable[None]]) -> None:
        try:
            await asyncio.sleep(seconds)
            await on_timeout()
        except asyncio.CancelledError:
            pass
        except (RuntimeError, OSError, ValueError):  # fmt: skip
            logger.exception("timer callback failed")
