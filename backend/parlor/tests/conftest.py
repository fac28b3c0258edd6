from __future__ import annotations

import random
from typing import TYPE_CHECKING

import pytest

from parlor.economy.memory import InMemoryLedger
from parlor.logic.board import EMPTY, ROWS, create_board, freeze
from parlor.logic.cards import Card
from parlor.logic.enums import SessionStatus
from parlor.logic.matchmaker import fill_seats
from parlor.logic.state import BlackjackSession, ConnectFourSession, EliminationSession, PokerDuelSession
from parlor.session.manager import SessionManager
from parlor.settings import ParlorSettings
from parlor.tests.mocks import RecordingRenderer

if TYPE_CHECKING:
    from collections.abc import Sequence

SCOPE = "guild-1"


# ============================================================================
# Test State Builder Helpers
# ============================================================================


def make_rng(seed: int = 0) -> random.Random:
    return random.Random(seed)  # noqa: S311


def cards(*codes: str) -> tuple[Card, ...]:
    return tuple(Card.parse(code) for code in codes)


def stacked_deck(*codes: str) -> list[Card]:
    """A deck that deals ``codes`` in the given order (dealing pops from the end)."""
    return [Card.parse(code) for code in reversed(codes)]


def stacked_deck_factory(*decks: Sequence[str]):
    """A deck factory handing out the given stacked decks one per call."""
    remaining = [stacked_deck(*codes) for codes in decks]

    def factory(_rng: random.Random) -> list[Card]:
        return remaining.pop(0)

    return factory


def board_from_rows(rows: dict[int, str]) -> tuple[tuple[int, ...], ...]:
    """Build a frozen board from ``{row: "0012000"}``; unlisted rows are empty."""
    grid = create_board()
    for row, text in rows.items():
        assert 0 <= row < ROWS
        grid[row] = [int(ch) if ch != "." else EMPTY for ch in text]
    return freeze(grid)


def create_elimination_state(
    *,
    humans: Sequence[tuple[str, str]] = (("alice", "Alice"),),
    turn_order: Sequence[int] = (0, 1, 2, 3),
    turn_index: int = 0,
    available_switches: int = 5,
    detonator_index: int = 0,
    eliminated: Sequence[int] = (),
    wager: int = 0,
    status: SessionStatus = SessionStatus.PLAYING,
) -> EliminationSession:
    players = tuple(
        p.model_copy(update={"eliminated": p.order in eliminated}) for p in fill_seats(list(humans), 4)
    )
    return EliminationSession(
        session_id="elim-1",
        scope_id=SCOPE,
        players=players,
        wager=wager,
        status=status,
        turn_order=tuple(turn_order),
        turn_index=turn_index,
        available_switches=available_switches,
        detonator_index=detonator_index,
    )


def create_connect_four_state(
    *,
    opponent: tuple[str, str] | None = None,
    board: tuple[tuple[int, ...], ...] | None = None,
    current: int = 1,
    wager: int = 0,
) -> ConnectFourSession:
    humans = [("alice", "Alice")] + ([opponent] if opponent else [])
    return ConnectFourSession(
        session_id="c4-1",
        scope_id=SCOPE,
        players=fill_seats(humans, 2),
        wager=wager,
        board=board if board is not None else freeze(create_board()),
        current=current,
    )


def create_blackjack_state(
    *,
    player_hand: Sequence[str] = ("9h", "7c"),
    dealer_hand: Sequence[str] = ("Th", "6d"),
    deck: Sequence[str] = (),
    wager: int = 10,
) -> BlackjackSession:
    return BlackjackSession(
        session_id="bj-1",
        scope_id=SCOPE,
        players=fill_seats([("alice", "Alice")], 1),
        wager=wager,
        player_hand=cards(*player_hand),
        dealer_hand=cards(*dealer_hand),
        deck=tuple(stacked_deck(*deck)),
    )


def create_poker_state(**updates: object) -> PokerDuelSession:
    human, dealer = fill_seats([("alice", "Alice")], 2)
    state = PokerDuelSession(
        session_id="pk-1",
        scope_id=SCOPE,
        players=(human, dealer.model_copy(update={"label": "Dealer"})),
        wager=10,
        quoted_loss=25,
    )
    return state.model_copy(update=updates)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def settings():
    return ParlorSettings(
        lobby_timeout_seconds=60,
        elimination_turn_timeout_seconds=60,
        connect_four_turn_timeout_seconds=60,
        blackjack_turn_timeout_seconds=60,
        poker_confirm_timeout_seconds=60,
        poker_round_timeout_seconds=60,
    )


@pytest.fixture
def ledger():
    return InMemoryLedger(starting_balance=1000)


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
async def manager(ledger, renderer, settings):
    session_manager = SessionManager(ledger, settings=settings, renderer=renderer)
    yield session_manager
    session_manager.shutdown()
