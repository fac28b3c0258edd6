"""
Immutable session state models.

Every variant shares SessionBase and adds its own payload. All models are
frozen; transitions build a new state with ``model_copy(update=...)`` and
never mutate in place.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from parlor.logic.board import create_board, freeze
from parlor.logic.cards import Card
from parlor.logic.enums import BlackjackPhase, EndReason, GameResult, PokerPhase, SessionStatus, Variant

INITIAL_SWITCHES = 5


class PlayerSlot(BaseModel):
    """A seat in a session: a human identity or a CPU marker."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    label: str
    order: int
    is_cpu: bool = False
    eliminated: bool = False


class SessionBase(BaseModel):
    """Fields common to every variant."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    scope_id: str
    players: tuple[PlayerSlot, ...]
    wager: int = Field(default=0, ge=0)
    status: SessionStatus = SessionStatus.PLAYING
    result: GameResult | None = None
    winner_id: str | None = None
    end_reason: EndReason | None = None
    # bumped by the session manager on every accepted transition; timers carry it as their token
    version: int = 0
    last_action_at: float = 0.0

    @property
    def is_finished(self) -> bool:
        return self.status == SessionStatus.FINISHED

    @property
    def humans(self) -> tuple[PlayerSlot, ...]:
        return tuple(p for p in self.players if not p.is_cpu)

    def find_player(self, player_id: str) -> PlayerSlot | None:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def slot(self, order: int) -> PlayerSlot:
        for player in self.players:
            if player.order == order:
                return player
        raise KeyError(f"no player slot with order {order}")


class LobbyMixin(BaseModel):
    """Invite list for variants that gather humans before starting."""

    model_config = ConfigDict(frozen=True)

    invited: tuple[str, ...] = ()
    joined: tuple[str, ...] = ()

    @property
    def pending_invites(self) -> tuple[str, ...]:
        return tuple(pid for pid in self.invited if pid not in self.joined)


class EliminationSession(LobbyMixin, SessionBase):
    variant: Literal[Variant.ELIMINATION] = Variant.ELIMINATION
    turn_order: tuple[int, ...] = ()
    turn_index: int = 0
    available_switches: int = INITIAL_SWITCHES
    detonator_index: int = 0
    round_number: int = 1

    @property
    def current_player(self) -> PlayerSlot | None:
        if self.status != SessionStatus.PLAYING or not self.turn_order:
            return None
        return self.slot(self.turn_order[self.turn_index])

    @property
    def remaining(self) -> tuple[PlayerSlot, ...]:
        return tuple(p for p in self.players if not p.eliminated)


class ConnectFourSession(LobbyMixin, SessionBase):
    """players[0] drops chip 1, players[1] drops chip 2."""

    variant: Literal[Variant.CONNECT_FOUR] = Variant.CONNECT_FOUR
    board: tuple[tuple[int, ...], ...] = Field(default_factory=lambda: freeze(create_board()))
    current: int = 1

    @property
    def current_player(self) -> PlayerSlot | None:
        if self.status != SessionStatus.PLAYING:
            return None
        return self.players[self.current - 1]

    def chip_of(self, player_id: str) -> int | None:
        for index, player in enumerate(self.players):
            if player.player_id == player_id:
                return index + 1
        return None


class BlackjackSession(SessionBase):
    variant: Literal[Variant.BLACKJACK] = Variant.BLACKJACK
    phase: BlackjackPhase = BlackjackPhase.PLAYER_TURN
    deck: tuple[Card, ...] = ()
    player_hand: tuple[Card, ...] = ()
    dealer_hand: tuple[Card, ...] = ()

    @property
    def player(self) -> PlayerSlot:
        return self.players[0]


class RoundSummary(BaseModel):
    """Outcome of one revealed poker-duel round (winner None on a tie)."""

    model_config = ConfigDict(frozen=True)

    round_number: int
    player_hand: tuple[Card, ...]
    dealer_hand: tuple[Card, ...]
    player_rank: str
    dealer_rank: str
    winner: Literal["player", "dealer"] | None


class PokerDuelSession(SessionBase):
    variant: Literal[Variant.POKER_DUEL] = Variant.POKER_DUEL
    status: SessionStatus = SessionStatus.WAITING
    phase: PokerPhase = PokerPhase.CONFIRM_START
    # quarter of the balance when the command was issued, shown on the prompt only
    quoted_loss: int = 0
    potential_loss: int = 0
    round_number: int = 0
    player_score: int = 0
    dealer_score: int = 0
    deck: tuple[Card, ...] = ()
    player_hand: tuple[Card, ...] = ()
    dealer_hand: tuple[Card, ...] = ()
    last_round: RoundSummary | None = None

    @property
    def player(self) -> PlayerSlot:
        return self.players[0]


type GameSession = EliminationSession | ConnectFourSession | BlackjackSession | PokerDuelSession
