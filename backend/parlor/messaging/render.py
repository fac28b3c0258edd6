"""
Text projection of a session for the chat front end.

``render_session`` is pure: it reads a session (and the events of the
transition that produced it) and returns a RenderableState. Delivering the
view is the Renderer's job; the core never formats platform embeds itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog
from pydantic import BaseModel, ConfigDict

from parlor.logic.actions import action_id
from parlor.logic.board import valid_columns
from parlor.logic.cards import format_hand, hand_value
from parlor.logic.enums import (
    BlackjackPhase,
    EndReason,
    GameAction,
    GameResult,
    PokerPhase,
    SessionStatus,
    Variant,
)
from parlor.logic.events import (
    ChipDroppedEvent,
    PlayerEliminatedEvent,
    PlayerJoinedEvent,
    RoundResolvedEvent,
    RowsClearedEvent,
    SettlementEvent,
    SwitchPickedEvent,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parlor.logic.events import GameEvent
    from parlor.logic.state import (
        BlackjackSession,
        ConnectFourSession,
        EliminationSession,
        GameSession,
        PokerDuelSession,
    )

logger = structlog.get_logger()

CHIP_EMOJI = {0: "⚪", 1: "🔴", 2: "🟡"}
COLUMN_EMOJI = ("1️⃣", "2️⃣", "3️⃣", "4️⃣", "5️⃣", "6️⃣", "7️⃣")
SWITCH_EMOJI = "🔘"

_TITLES = {
    Variant.ELIMINATION: "💣 Detonator",
    Variant.CONNECT_FOUR: "🔴 4tress",
    Variant.BLACKJACK: "🃏 Blackjack",
    Variant.POKER_DUEL: "♠ Poker Duel",
}

_RESULT_TEXT = {
    GameResult.WIN: "You win!",
    GameResult.LOSE: "You lose.",
    GameResult.DRAW: "It's a draw.",
    GameResult.PUSH: "Push, wager returned.",
    GameResult.BLACKJACK: "Blackjack! Paid 3:2.",
    GameResult.PLAYER_BUST: "Bust! You went over 21.",
    GameResult.DEALER_BUST: "Dealer busts, you win!",
}


class ActionButton(BaseModel):
    model_config = ConfigDict(frozen=True)

    action_id: str
    label: str


class RenderableState(BaseModel):
    """Platform-neutral view of a session."""

    model_config = ConfigDict(frozen=True)

    title: str
    body: str
    status_text: str
    actions: list[ActionButton] = []


class Renderer(Protocol):
    async def render(self, session_id: str, view: RenderableState) -> None: ...


class NullRenderer:
    """Renderer that discards every view (headless runs)."""

    async def render(self, session_id: str, view: RenderableState) -> None:
        logger.debug("view discarded", session_id=session_id, status_text=view.status_text)


def render_session(state: GameSession, events: Sequence[GameEvent] = ()) -> RenderableState:
    if state.variant == Variant.ELIMINATION:
        body, actions = _elimination_body(state)
    elif state.variant == Variant.CONNECT_FOUR:
        body, actions = _connect_four_body(state)
    elif state.variant == Variant.BLACKJACK:
        body, actions = _blackjack_body(state)
    else:
        body, actions = _poker_duel_body(state)
    if state.wager:
        body = f"{body}\nWager: {state.wager} chips"
    settlement = _settlement_lines(state, events)
    if settlement:
        body = f"{body}\n{settlement}"
    return RenderableState(
        title=_TITLES[state.variant],
        body=body,
        status_text=_status_text(state, events),
        actions=[] if state.is_finished else actions,
    )


def render_board(board: Sequence[Sequence[int]]) -> str:
    rows = ["".join(CHIP_EMOJI[cell] for cell in row) for row in board]
    rows.append("".join(COLUMN_EMOJI))
    return "\n".join(rows)


def _lobby_actions(state: EliminationSession | ConnectFourSession) -> list[ActionButton]:
    if state.status != SessionStatus.WAITING:
        return []
    return [ActionButton(action_id=action_id(GameAction.JOIN), label="Join")]


def _elimination_body(state: EliminationSession) -> tuple[str, list[ActionButton]]:
    current = state.current_player
    lines = []
    for player in sorted(state.players, key=lambda p: p.order):
        marker = "💀" if player.eliminated else ("👉" if current is not None and player == current else "🙂")
        lines.append(f"{marker} {player.label}")
    if state.status == SessionStatus.WAITING:
        lines.append(f"Waiting for {len(state.pending_invites)} player(s) to join")
        return "\n".join(lines), _lobby_actions(state)
    lines.append(f"Round {state.round_number}: {SWITCH_EMOJI * state.available_switches}")
    actions = [
        ActionButton(action_id=action_id(GameAction.PICK_SWITCH, index), label=str(index + 1))
        for index in range(state.available_switches)
    ]
    return "\n".join(lines), actions


def _connect_four_body(state: ConnectFourSession) -> tuple[str, list[ActionButton]]:
    names = " vs ".join(f"{CHIP_EMOJI[i + 1]} {p.label}" for i, p in enumerate(state.players))
    body = f"{names}\n{render_board(state.board)}"
    if state.status == SessionStatus.WAITING:
        return body, _lobby_actions(state)
    actions = [
        ActionButton(action_id=action_id(GameAction.DROP, col), label=COLUMN_EMOJI[col])
        for col in valid_columns(state.board)
    ]
    return body, actions


def _blackjack_body(state: BlackjackSession) -> tuple[str, list[ActionButton]]:
    hide = state.phase == BlackjackPhase.PLAYER_TURN
    dealer = format_hand(state.dealer_hand, hide_first=hide)
    dealer_total = "?" if hide else str(hand_value(state.dealer_hand).value)
    body = (
        f"Dealer: {dealer} ({dealer_total})\n"
        f"{state.player.label}: {format_hand(state.player_hand)} ({hand_value(state.player_hand).value})"
    )
    actions = []
    if state.phase == BlackjackPhase.PLAYER_TURN:
        actions = [
            ActionButton(action_id=action_id(GameAction.HIT), label="Hit"),
            ActionButton(action_id=action_id(GameAction.STAND), label="Stand"),
        ]
    return body, actions


def _poker_duel_body(state: PokerDuelSession) -> tuple[str, list[ActionButton]]:
    if state.phase == PokerPhase.CONFIRM_START or (state.is_finished and state.round_number == 0):
        body = (
            f"Win: +{state.wager * 2} chips\n"
            f"Lose: -{state.quoted_loss} chips (a quarter of your balance)\n"
            "Best of three hands against the dealer."
        )
        actions = [
            ActionButton(action_id=action_id(GameAction.CONFIRM), label="Deal me in"),
            ActionButton(action_id=action_id(GameAction.CANCEL), label="Walk away"),
        ]
        return body, actions

    lines = [f"Round {state.round_number} | You {state.player_score} : {state.dealer_score} Dealer"]
    if state.phase == PokerPhase.ROUND_START:
        lines.append(f"Your hand: {format_hand(state.player_hand)}")
        lines.append(f"Dealer: {format_hand(state.dealer_hand, hide_first=True)}")
        return "\n".join(lines), [ActionButton(action_id=action_id(GameAction.REVEAL), label="Reveal")]

    summary = state.last_round
    if summary is not None:
        lines.append(f"You: {format_hand(summary.player_hand)} ({summary.player_rank})")
        lines.append(f"Dealer: {format_hand(summary.dealer_hand)} ({summary.dealer_rank})")
    actions = []
    if state.phase == PokerPhase.ROUND_REVEAL:
        actions = [ActionButton(action_id=action_id(GameAction.NEXT_ROUND), label="Next round")]
    return "\n".join(lines), actions


def _settlement_lines(state: GameSession, events: Sequence[GameEvent]) -> str:
    lines = []
    for event in events:
        if not isinstance(event, SettlementEvent):
            continue
        if not event.success:
            player = state.find_player(event.player_id)
            label = player.label if player is not None else event.player_id
            lines.append(f"⚠ {event.delta:+} chips for {label} could not be settled, please contact an admin.")
            continue
        sign = "+" if event.delta >= 0 else ""
        lines.append(f"{sign}{event.delta} chips, balance {event.new_balance}")
    return "\n".join(lines)


def _status_text(state: GameSession, events: Sequence[GameEvent]) -> str:
    if state.is_finished:
        return _final_status(state)
    for event in reversed(events):
        text = _event_status(state, event)
        if text:
            return text
    if state.status == SessionStatus.WAITING:
        return "Waiting for players"
    current = getattr(state, "current_player", None)
    if current is not None:
        return f"{current.label}'s turn"
    return "Your move"


def _final_status(state: GameSession) -> str:
    if state.end_reason == EndReason.EXPIRED:
        return "Expired: nobody answered in time."
    if state.end_reason == EndReason.CANCELLED:
        return "Cancelled."
    if state.end_reason == EndReason.ABORTED:
        return "Game aborted, wagers returned."
    winner = state.find_player(state.winner_id) if state.winner_id else None
    if state.variant in (Variant.ELIMINATION, Variant.CONNECT_FOUR):
        if winner is None:
            return _RESULT_TEXT[GameResult.DRAW]
        suffix = " (opponent timed out)" if state.end_reason == EndReason.TIMEOUT else ""
        return f"{winner.label} wins!{suffix}"
    text = _RESULT_TEXT.get(state.result, "Game over.") if state.result else "Game over."
    if state.end_reason == EndReason.TIMEOUT:
        return f"Timed out. {text}"
    return text


def _event_status(state: GameSession, event: GameEvent) -> str | None:
    if isinstance(event, PlayerEliminatedEvent):
        player = state.find_player(event.player_id)
        name = player.label if player else event.player_id
        return f"💥 {name} {'ran out of time' if event.timed_out else 'hit the detonator'}!"
    if isinstance(event, SwitchPickedEvent) and not event.detonated:
        return f"Switch {event.index + 1} was safe."
    if isinstance(event, RowsClearedEvent):
        return f"{event.count} row(s) cleared!"
    if isinstance(event, ChipDroppedEvent):
        return None
    if isinstance(event, PlayerJoinedEvent):
        return f"Waiting for {len(event.waiting_for)} more" if event.waiting_for else None
    if isinstance(event, RoundResolvedEvent):
        if event.winner is None:
            return f"Round {event.round_number} tied, dealing again."
        return f"Round {event.round_number} goes to the {event.winner}."
    return None
