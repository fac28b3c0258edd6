"""
Pydantic models for the session layer: creation configs and action outcomes.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from parlor.logic.enums import GameErrorCode, Variant
from parlor.logic.events import ServiceEvent
from parlor.logic.state import GameSession
from parlor.messaging.render import RenderableState


class PlayerRef(BaseModel):
    """A human taking part in a session, as the chat platform identifies them."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    label: str

    def as_tuple(self) -> tuple[str, str]:
        return self.player_id, self.label


class SessionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    scope_id: str
    wager: int = Field(default=0, ge=0)
    # hex seed for a reproducible game; a fresh one is generated when omitted
    seed: str | None = None


class EliminationConfig(SessionConfig):
    """Host first; any extra humans are invited and must join. Empty seats go to CPUs."""

    variant: Literal[Variant.ELIMINATION] = Variant.ELIMINATION
    players: list[PlayerRef] = Field(min_length=1, max_length=4)


class ConnectFourConfig(SessionConfig):
    """Without an opponent the host plays the CPU."""

    variant: Literal[Variant.CONNECT_FOUR] = Variant.CONNECT_FOUR
    host: PlayerRef
    opponent: PlayerRef | None = None


class BlackjackConfig(SessionConfig):
    variant: Literal[Variant.BLACKJACK] = Variant.BLACKJACK
    player: PlayerRef


class PokerDuelConfig(SessionConfig):
    variant: Literal[Variant.POKER_DUEL] = Variant.POKER_DUEL
    player: PlayerRef


type GameConfig = EliminationConfig | ConnectFourConfig | BlackjackConfig | PokerDuelConfig


class ActionOutcome(BaseModel):
    """What ``submit_action`` reports back to the caller."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    accepted: bool
    error_code: GameErrorCode | None = None
    message: str | None = None
    state: GameSession | None = None
    events: list[ServiceEvent] = []
    view: RenderableState | None = None
