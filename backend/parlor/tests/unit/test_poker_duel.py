"""
Unit tests for the best-of-three poker duel.
"""

import pytest

from parlor.logic import poker_duel
from parlor.logic.enums import EndReason, GameResult, PokerPhase, SessionStatus, TimeoutType
from parlor.logic.events import GameEndedEvent, RoundDealtEvent, RoundResolvedEvent
from parlor.logic.exceptions import (
    GameFinishedError,
    InvalidActionError,
    NotAPlayerError,
    StakeNotCoveredError,
)
from parlor.tests.conftest import SCOPE, cards, create_poker_state, make_rng, stacked_deck_factory

FULL_HOUSE = ("As", "Ad", "Ah", "Kc", "Kd")
HIGH_CARD = ("2c", "5d", "7h", "9s", "Jc")
TIE_PLAYER = ("As", "Ks", "Qs", "Jd", "9h")
TIE_DEALER = ("Ah", "Kh", "Qh", "Jc", "9d")

PLAYER_WINS = FULL_HOUSE + HIGH_CARD
DEALER_WINS = HIGH_CARD + FULL_HOUSE
TIED = TIE_PLAYER + TIE_DEALER


def _confirmed(*decks, balance=1000):
    factory = stacked_deck_factory(*decks)
    state, _ = poker_duel.confirm(create_poker_state(), "alice", balance, make_rng(), factory)
    return state, factory


class TestCreate:
    def test_prompt_quotes_a_quarter_of_the_balance(self):
        state, events = poker_duel.create_poker_duel("p1", SCOPE, ("alice", "Alice"), 50, 1003)

        assert state.phase == PokerPhase.CONFIRM_START
        assert state.status == SessionStatus.WAITING
        assert state.quoted_loss == 250
        assert state.players[1].label == "Dealer"
        assert events == []
        assert poker_duel.pending_timeout(state) == TimeoutType.CONFIRM


class TestConfirm:
    def test_confirm_deals_round_one(self):
        state, _ = _confirmed(PLAYER_WINS, balance=400)

        assert state.phase == PokerPhase.ROUND_START
        assert state.status == SessionStatus.PLAYING
        assert state.round_number == 1
        assert state.potential_loss == 100
        assert state.player_hand == cards(*FULL_HOUSE)
        assert state.dealer_hand == cards(*HIGH_CARD)
        assert poker_duel.pending_timeout(state) == TimeoutType.ROUND

    def test_loss_is_recomputed_from_the_fresh_balance(self):
        state, _ = _confirmed(PLAYER_WINS, balance=41)

        assert state.potential_loss == 10
        assert state.quoted_loss == 25

    def test_balance_below_wager_rejected(self):
        with pytest.raises(StakeNotCoveredError):
            poker_duel.confirm(create_poker_state(), "alice", 9, make_rng(), stacked_deck_factory(PLAYER_WINS))

    def test_stranger_cannot_confirm(self):
        with pytest.raises(NotAPlayerError):
            poker_duel.confirm(create_poker_state(), "bob", 1000, make_rng(), stacked_deck_factory(PLAYER_WINS))

    def test_cancel_closes_the_prompt(self):
        state, events = poker_duel.cancel(create_poker_state(), "alice")

        assert state.end_reason == EndReason.CANCELLED
        assert state.result is None
        assert state.phase == PokerPhase.FINISHED
        assert isinstance(events[0], GameEndedEvent)

    def test_cancel_after_confirm_rejected(self):
        state, _ = _confirmed(PLAYER_WINS)
        with pytest.raises(InvalidActionError):
            poker_duel.cancel(state, "alice")


class TestRounds:
    def test_round_win_waits_for_next_round(self):
        state, factory = _confirmed(PLAYER_WINS)
        state, events = poker_duel.reveal(state, "alice", make_rng(), factory)

        assert state.phase == PokerPhase.ROUND_REVEAL
        assert state.player_score == 1
        assert state.last_round.winner == "player"
        assert state.last_round.player_rank == "Full House"
        assert state.last_round.dealer_rank == "High Card"
        assert events[0].winner == "player"

    def test_tie_redeals_the_same_round(self):
        state, factory = _confirmed(TIED, PLAYER_WINS)
        state, events = poker_duel.reveal(state, "alice", make_rng(), factory)

        assert isinstance(events[0], RoundResolvedEvent)
        assert events[0].winner is None
        assert events[1] == RoundDealtEvent(round_number=1, is_redeal=True)
        assert state.phase == PokerPhase.ROUND_START
        assert state.round_number == 1
        assert (state.player_score, state.dealer_score) == (0, 0)
        assert state.player_hand == cards(*FULL_HOUSE)

    def test_two_round_wins_take_the_match(self):
        state, factory = _confirmed(PLAYER_WINS, PLAYER_WINS)
        state, _ = poker_duel.reveal(state, "alice", make_rng(), factory)
        state, events = poker_duel.next_round(state, "alice", make_rng(), factory)
        assert events == [RoundDealtEvent(round_number=2)]
        state, events = poker_duel.reveal(state, "alice", make_rng(), factory)

        assert state.status == SessionStatus.FINISHED
        assert state.result == GameResult.WIN
        assert state.winner_id == "alice"
        assert isinstance(events[-1], GameEndedEvent)

    def test_dealer_reaching_two_loses_the_match(self):
        state, factory = _confirmed(DEALER_WINS, PLAYER_WINS, DEALER_WINS)
        for _ in range(2):
            state, _ = poker_duel.reveal(state, "alice", make_rng(), factory)
            state, _ = poker_duel.next_round(state, "alice", make_rng(), factory)
        state, _ = poker_duel.reveal(state, "alice", make_rng(), factory)

        assert (state.player_score, state.dealer_score) == (1, 2)
        assert state.round_number == 3
        assert state.result == GameResult.LOSE
        assert state.winner_id == "CPU_1"

    def test_reveal_twice_rejected(self):
        state, factory = _confirmed(PLAYER_WINS)
        state, _ = poker_duel.reveal(state, "alice", make_rng(), factory)
        with pytest.raises(InvalidActionError):
            poker_duel.reveal(state, "alice", make_rng(), factory)

    def test_reveal_before_confirm_rejected(self):
        with pytest.raises(InvalidActionError):
            poker_duel.reveal(create_poker_state(), "alice", make_rng())

    def test_finished_match_rejected(self):
        state = create_poker_state(phase=PokerPhase.FINISHED, status=SessionStatus.FINISHED)
        with pytest.raises(GameFinishedError):
            poker_duel.next_round(state, "alice", make_rng())


class TestTimeout:
    def test_unanswered_prompt_expires(self):
        state, _ = poker_duel.apply_timeout(create_poker_state())

        assert state.end_reason == EndReason.EXPIRED
        assert state.result is None

    def test_abandoned_round_forfeits(self):
        state, _ = _confirmed(PLAYER_WINS)
        state, events = poker_duel.apply_timeout(state)

        assert state.result == GameResult.LOSE
        assert state.end_reason == EndReason.TIMEOUT
        assert events[0].winner_id == "CPU_1"
