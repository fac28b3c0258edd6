import pytest

from parlor.logic.enums import EndReason, GameResult, SessionStatus
from parlor.logic.settlement import Adjustment, SettlementPlan, Transfer, plan_settlement
from parlor.tests.conftest import (
    create_blackjack_state,
    create_connect_four_state,
    create_elimination_state,
    create_poker_state,
)

FOUR_HUMANS = (("a", "A"), ("b", "B"), ("c", "C"), ("d", "D"))
BOB = ("bob", "Bob")


def _finished(state, **updates):
    return state.model_copy(
        update={"status": SessionStatus.FINISHED, "end_reason": EndReason.COMPLETED, **updates},
    )


class TestBlackjack:
    def test_natural_pays_three_to_two(self):
        state = _finished(create_blackjack_state(wager=100), result=GameResult.BLACKJACK)

        assert plan_settlement(state) == SettlementPlan(
            operations=(Adjustment(player_id="alice", delta=150),),
            played=("alice",),
        )

    def test_push_moves_no_chips(self):
        plan = plan_settlement(_finished(create_blackjack_state(), result=GameResult.PUSH))

        assert plan.operations == ()
        assert plan.played == ("alice",)


class TestElimination:
    def test_eliminated_humans_pay_the_winner(self):
        state = _finished(
            create_elimination_state(humans=FOUR_HUMANS, eliminated=(0, 2, 3), wager=20),
            result=GameResult.WIN,
            winner_id="b",
        )

        assert plan_settlement(state).operations == (
            Transfer(from_id="a", to_id="b", amount=20),
            Transfer(from_id="c", to_id="b", amount=20),
            Transfer(from_id="d", to_id="b", amount=20),
        )

    def test_cpu_winner_debits_every_human(self):
        state = _finished(
            create_elimination_state(humans=(("a", "A"), ("b", "B")), eliminated=(0, 1, 3), wager=20),
            result=GameResult.WIN,
            winner_id="CPU_1",
        )

        assert plan_settlement(state).operations == (
            Adjustment(player_id="a", delta=-20),
            Adjustment(player_id="b", delta=-20),
        )

    def test_free_game_only_counts_play(self):
        state = _finished(create_elimination_state(humans=FOUR_HUMANS), result=GameResult.WIN, winner_id="a")
        plan = plan_settlement(state)

        assert plan.operations == ()
        assert plan.played == ("a", "b", "c", "d")


class TestConnectFour:
    def test_human_loser_pays_human_winner(self):
        state = _finished(create_connect_four_state(opponent=BOB, wager=30), result=GameResult.WIN, winner_id="bob")

        assert plan_settlement(state).operations == (Transfer(from_id="alice", to_id="bob", amount=30),)

    def test_beating_the_cpu_credits_the_house_wager(self):
        state = _finished(create_connect_four_state(wager=30), result=GameResult.WIN, winner_id="alice")

        assert plan_settlement(state).operations == (Adjustment(player_id="alice", delta=30),)

    def test_losing_to_the_cpu_debits(self):
        state = _finished(create_connect_four_state(wager=30), result=GameResult.WIN, winner_id="CPU_1")

        assert plan_settlement(state).operations == (Adjustment(player_id="alice", delta=-30),)

    def test_draw_moves_no_chips(self):
        state = _finished(create_connect_four_state(opponent=BOB, wager=30), result=GameResult.DRAW)
        plan = plan_settlement(state)

        assert plan.operations == ()
        assert plan.played == ("alice", "bob")


class TestPokerDuel:
    def test_match_win_pays_double(self):
        state = _finished(create_poker_state(wager=40), result=GameResult.WIN, winner_id="alice")

        assert plan_settlement(state).operations == (Adjustment(player_id="alice", delta=80),)

    def test_match_loss_costs_the_potential_loss(self):
        state = _finished(create_poker_state(wager=40, potential_loss=250), result=GameResult.LOSE)

        assert plan_settlement(state).operations == (Adjustment(player_id="alice", delta=-250),)


class TestNothingOwed:
    @pytest.mark.parametrize("reason", [EndReason.CANCELLED, EndReason.EXPIRED, EndReason.ABORTED])
    def test_unsettled_endings(self, reason):
        state = _finished(create_blackjack_state(), result=GameResult.PUSH, end_reason=reason)

        assert plan_settlement(state) == SettlementPlan()

    def test_unfinished_session(self):
        assert plan_settlement(create_connect_four_state(opponent=BOB, wager=30)) == SettlementPlan()
