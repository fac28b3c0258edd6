"""
Settlement planning: which ledger operations a finished session owes.

The plan is computed purely from the terminal state; the session manager
applies it to the ledger before removing the session from the registry.
Sessions that never started, were cancelled, or were aborted owe nothing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from parlor.logic import blackjack, poker_duel
from parlor.logic.enums import EndReason, GameResult, Variant

if TYPE_CHECKING:
    from parlor.logic.state import (
        BlackjackSession,
        ConnectFourSession,
        EliminationSession,
        GameSession,
        PokerDuelSession,
    )

_NO_SETTLEMENT = frozenset({EndReason.EXPIRED, EndReason.CANCELLED, EndReason.ABORTED})


class Adjustment(BaseModel):
    """Credit (positive) or debit (negative) one player against the house."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    delta: int


class Transfer(BaseModel):
    """Move chips from one player to another in a single atomic ledger call."""

    model_config = ConfigDict(frozen=True)

    from_id: str
    to_id: str
    amount: int


class SettlementPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    operations: tuple[Adjustment | Transfer, ...] = ()
    # humans whose games-played counter goes up
    played: tuple[str, ...] = ()


def plan_settlement(state: GameSession) -> SettlementPlan:
    if not state.is_finished or state.end_reason in _NO_SETTLEMENT:
        return SettlementPlan()
    played = tuple(p.player_id for p in state.humans)
    if state.variant == Variant.ELIMINATION:
        operations = _elimination_ops(state)
    elif state.variant == Variant.CONNECT_FOUR:
        operations = _connect_four_ops(state)
    elif state.variant == Variant.BLACKJACK:
        operations = _blackjack_ops(state)
    else:
        operations = _poker_duel_ops(state)
    return SettlementPlan(operations=tuple(op for op in operations if _amount(op) != 0), played=played)


def _amount(op: Adjustment | Transfer) -> int:
    return op.delta if isinstance(op, Adjustment) else op.amount


def _elimination_ops(state: EliminationSession) -> list[Adjustment | Transfer]:
    if state.wager == 0 or state.winner_id is None:
        return []
    winner = state.find_player(state.winner_id)
    if winner is not None and not winner.is_cpu:
        return [
            Transfer(from_id=p.player_id, to_id=winner.player_id, amount=state.wager)
            for p in state.humans
            if p.eliminated
        ]
    # a CPU won: the house collects every human's wager
    return [Adjustment(player_id=p.player_id, delta=-state.wager) for p in state.humans]


def _connect_four_ops(state: ConnectFourSession) -> list[Adjustment | Transfer]:
    if state.wager == 0 or state.result != GameResult.WIN or state.winner_id is None:
        return []
    winner = state.find_player(state.winner_id)
    loser = next(p for p in state.players if p.player_id != state.winner_id)
    if winner is None:
        return []
    if not winner.is_cpu and not loser.is_cpu:
        return [Transfer(from_id=loser.player_id, to_id=winner.player_id, amount=state.wager)]
    if not winner.is_cpu:
        return [Adjustment(player_id=winner.player_id, delta=state.wager)]
    return [Adjustment(player_id=loser.player_id, delta=-state.wager)]


def _blackjack_ops(state: BlackjackSession) -> list[Adjustment | Transfer]:
    return [Adjustment(player_id=state.player.player_id, delta=blackjack.payout(state.result, state.wager))]


def _poker_duel_ops(state: PokerDuelSession) -> list[Adjustment | Transfer]:
    if state.result == GameResult.WIN:
        delta = state.wager * poker_duel.WIN_MULTIPLIER
    elif state.result == GameResult.LOSE:
        delta = -state.potential_loss
    else:
        delta = 0
    return [Adjustment(player_id=state.player.player_id, delta=delta)]
