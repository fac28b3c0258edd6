"""
Unit tests for the text projection of sessions.
"""

from parlor.logic.enums import BlackjackPhase, EndReason, GameResult, PokerPhase, SessionStatus
from parlor.logic.events import PlayerEliminatedEvent, RowsClearedEvent, SettlementEvent
from parlor.messaging.render import CHIP_EMOJI, COLUMN_EMOJI, render_board, render_session
from parlor.tests.conftest import (
    board_from_rows,
    create_blackjack_state,
    create_connect_four_state,
    create_elimination_state,
    create_poker_state,
)

FOUR_HUMANS = (("a", "A"), ("b", "B"), ("c", "C"), ("d", "D"))


def _action_ids(view):
    return [button.action_id for button in view.actions]


class TestConnectFour:
    def test_board_rows_and_column_header(self):
        text = render_board(board_from_rows({5: "1200000"}))
        lines = text.split("\n")

        assert len(lines) == 7
        assert lines[5] == CHIP_EMOJI[1] + CHIP_EMOJI[2] + CHIP_EMOJI[0] * 5
        assert lines[6] == "".join(COLUMN_EMOJI)

    def test_drop_buttons_skip_full_columns(self):
        board = board_from_rows({r: "1000000" if r % 2 else "2000000" for r in range(6)})
        view = render_session(create_connect_four_state(opponent=("bob", "Bob"), board=board))

        assert _action_ids(view) == [f"drop:{c}" for c in range(1, 7)]
        assert view.actions[0].label == COLUMN_EMOJI[1]
        assert view.status_text == "Alice's turn"

    def test_rows_cleared_status(self):
        view = render_session(create_connect_four_state(opponent=("bob", "Bob")), [RowsClearedEvent(count=1)])

        assert view.status_text == "1 row(s) cleared!"

    def test_timeout_win_is_labelled(self):
        state = create_connect_four_state(opponent=("bob", "Bob")).model_copy(
            update={
                "status": SessionStatus.FINISHED,
                "result": GameResult.WIN,
                "winner_id": "bob",
                "end_reason": EndReason.TIMEOUT,
            },
        )
        view = render_session(state)

        assert view.status_text == "Bob wins! (opponent timed out)"
        assert view.actions == []


class TestElimination:
    def test_markers_and_switch_buttons(self):
        state = create_elimination_state(
            humans=FOUR_HUMANS, turn_order=(1, 2, 3), eliminated=(0,), available_switches=4,
        )
        view = render_session(state, [PlayerEliminatedEvent(player_id="a", available_switches=4)])

        assert "💀 A" in view.body
        assert "👉 B" in view.body
        assert "🙂 C" in view.body
        assert _action_ids(view) == ["switch:0", "switch:1", "switch:2", "switch:3"]
        assert [b.label for b in view.actions] == ["1", "2", "3", "4"]
        assert view.status_text == "💥 A hit the detonator!"

    def test_lobby_offers_join(self):
        state = create_elimination_state(humans=FOUR_HUMANS, status=SessionStatus.WAITING).model_copy(
            update={"invited": ("b", "c", "d"), "joined": ("b",)},
        )
        view = render_session(state)

        assert "Waiting for 2 player(s) to join" in view.body
        assert _action_ids(view) == ["join"]


class TestBlackjack:
    def test_dealer_hole_card_hidden_during_player_turn(self):
        view = render_session(create_blackjack_state(wager=0))

        assert "Dealer: ❓ 6♦ (?)" in view.body
        assert "Alice: 9♥ 7♣ (16)" in view.body
        assert _action_ids(view) == ["hit", "stand"]

    def test_resolved_hand_shows_dealer_and_settlement(self):
        state = create_blackjack_state(wager=100).model_copy(
            update={
                "status": SessionStatus.FINISHED,
                "phase": BlackjackPhase.FINISHED,
                "result": GameResult.WIN,
                "end_reason": EndReason.COMPLETED,
            },
        )
        events = [SettlementEvent(player_id="alice", delta=100, new_balance=1100, success=True)]
        view = render_session(state, events)

        assert "Dealer: 10♥ 6♦ (16)" in view.body
        assert "Wager: 100 chips" in view.body
        assert "+100 chips, balance 1100" in view.body
        assert view.status_text == "You win!"
        assert view.actions == []

    def test_failed_settlement_is_flagged(self):
        state = create_blackjack_state().model_copy(
            update={"status": SessionStatus.FINISHED, "result": GameResult.LOSE, "end_reason": EndReason.TIMEOUT},
        )
        events = [SettlementEvent(player_id="alice", delta=-10, new_balance=None, success=False)]
        view = render_session(state, events)

        assert "⚠ -10 chips for Alice could not be settled, please contact an admin." in view.body
        assert view.status_text == "Timed out. You lose."


class TestPokerDuel:
    def test_confirm_prompt(self):
        view = render_session(create_poker_state(wager=40, quoted_loss=250))

        assert "Win: +80 chips" in view.body
        assert "Lose: -250 chips" in view.body
        assert _action_ids(view) == ["confirm", "cancel"]

    def test_round_start_offers_reveal(self):
        state = create_poker_state(phase=PokerPhase.ROUND_START, status=SessionStatus.PLAYING, round_number=1)
        view = render_session(state)

        assert "Round 1 | You 0 : 0 Dealer" in view.body
        assert _action_ids(view) == ["reveal"]

    def test_cancelled_prompt(self):
        state = create_poker_state(
            phase=PokerPhase.FINISHED, status=SessionStatus.FINISHED, end_reason=EndReason.CANCELLED,
        )

        assert render_session(state).status_text == "Cancelled."
