"""Domain event models and the service event transport container.

Transitions describe what changed as a list of domain events; the session
manager wraps them in ServiceEvent with a typed routing target, and the
presenter turns the latest ones into a status line.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

from parlor.logic.cards import Card
from parlor.logic.enums import EndReason, GameErrorCode, GameResult

# ---------------------------------------------------------------------------
# Typed routing targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BroadcastTarget:
    """Event is shown to everyone watching the session."""


@dataclass(frozen=True)
class PlayerTarget:
    """Event is shown only to one player (an ephemeral reply)."""

    player_id: str


EventTarget = BroadcastTarget | PlayerTarget


class EventType(StrEnum):
    SESSION_STARTED = "session_started"
    PLAYER_JOINED = "player_joined"
    SWITCH_PICKED = "switch_picked"
    PLAYER_ELIMINATED = "player_eliminated"
    CHIP_DROPPED = "chip_dropped"
    ROWS_CLEARED = "rows_cleared"
    CARD_DEALT = "card_dealt"
    ROUND_DEALT = "round_dealt"
    ROUND_RESOLVED = "round_resolved"
    GAME_ENDED = "game_ended"
    SETTLEMENT = "settlement"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Domain event models
# ---------------------------------------------------------------------------


class GameEvent(BaseModel):
    """Base class for all domain events."""

    model_config = ConfigDict(frozen=True)

    type: EventType


class SessionStartedEvent(GameEvent):
    type: Literal[EventType.SESSION_STARTED] = EventType.SESSION_STARTED
    player_ids: list[str]


class PlayerJoinedEvent(GameEvent):
    type: Literal[EventType.PLAYER_JOINED] = EventType.PLAYER_JOINED
    player_id: str
    waiting_for: list[str]


class SwitchPickedEvent(GameEvent):
    type: Literal[EventType.SWITCH_PICKED] = EventType.SWITCH_PICKED
    player_id: str
    index: int
    detonated: bool


class PlayerEliminatedEvent(GameEvent):
    type: Literal[EventType.PLAYER_ELIMINATED] = EventType.PLAYER_ELIMINATED
    player_id: str
    timed_out: bool = False
    available_switches: int


class ChipDroppedEvent(GameEvent):
    type: Literal[EventType.CHIP_DROPPED] = EventType.CHIP_DROPPED
    player_id: str
    column: int
    row: int


class RowsClearedEvent(GameEvent):
    type: Literal[EventType.ROWS_CLEARED] = EventType.ROWS_CLEARED
    count: int


class CardDealtEvent(GameEvent):
    """A card drawn after the opening deal (player hit or dealer draw)."""

    type: Literal[EventType.CARD_DEALT] = EventType.CARD_DEALT
    recipient: Literal["player", "dealer"]
    card: Card
    hand_value: int


class RoundDealtEvent(GameEvent):
    type: Literal[EventType.ROUND_DEALT] = EventType.ROUND_DEALT
    round_number: int
    is_redeal: bool = False


class RoundResolvedEvent(GameEvent):
    type: Literal[EventType.ROUND_RESOLVED] = EventType.ROUND_RESOLVED
    round_number: int
    winner: Literal["player", "dealer"] | None
    player_rank: str
    dealer_rank: str
    player_score: int
    dealer_score: int


class GameEndedEvent(GameEvent):
    type: Literal[EventType.GAME_ENDED] = EventType.GAME_ENDED
    result: GameResult | None
    winner_id: str | None
    end_reason: EndReason


class SettlementEvent(GameEvent):
    """One ledger adjustment applied (or attempted) when a session ended."""

    type: Literal[EventType.SETTLEMENT] = EventType.SETTLEMENT
    player_id: str
    delta: int
    new_balance: int | None
    success: bool


class ErrorEvent(GameEvent):
    type: Literal[EventType.ERROR] = EventType.ERROR
    code: GameErrorCode
    message: str


Event = (
    SessionStartedEvent
    | PlayerJoinedEvent
    | SwitchPickedEvent
    | PlayerEliminatedEvent
    | ChipDroppedEvent
    | RowsClearedEvent
    | CardDealtEvent
    | RoundDealtEvent
    | RoundResolvedEvent
    | GameEndedEvent
    | SettlementEvent
    | ErrorEvent
)


# ---------------------------------------------------------------------------
# Service event transport container
# ---------------------------------------------------------------------------


class ServiceEvent(BaseModel):
    """Routing wrapper around a domain event."""

    model_config = {"arbitrary_types_allowed": True}

    event: EventType
    data: GameEvent
    target: EventTarget = BroadcastTarget()

    @model_validator(mode="after")
    def _ensure_event_matches_data(self) -> ServiceEvent:
        if self.event != self.data.type:
            raise ValueError(f"ServiceEvent.event '{self.event}' does not match data.type '{self.data.type}'")
        return self


def convert_events(raw_events: list[GameEvent]) -> list[ServiceEvent]:
    """Wrap domain events for delivery; all game events are broadcast."""
    return [ServiceEvent(event=event.type, data=event) for event in raw_events]


def error_event(player_id: str, code: GameErrorCode, message: str) -> ServiceEvent:
    """A rejection notice addressed only to the player who acted."""
    data = ErrorEvent(code=code, message=message)
    return ServiceEvent(event=data.type, data=data, target=PlayerTarget(player_id=player_id))
