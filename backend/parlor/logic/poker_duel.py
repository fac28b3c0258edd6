"""
Best-of-three five-card poker duel against the dealer.

The player first confirms the stakes: a win pays twice the wager, a loss costs
a quarter of the balance held at confirmation. Each round deals fresh hands
from a new deck and the player reveals them; a tied round is dealt again under
the same round number until someone wins it. First to two round wins takes
the match.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from parlor.logic.action_result import ActionResult, finish
from parlor.logic.cards import Card, deal, shuffled_deck
from parlor.logic.enums import EndReason, GameAction, GameResult, PokerPhase, SessionStatus, TimeoutType
from parlor.logic.events import GameEvent, RoundDealtEvent, RoundResolvedEvent, SessionStartedEvent
from parlor.logic.exceptions import (
    DeckExhaustedError,
    GameFinishedError,
    InvalidActionError,
    NotAPlayerError,
    StakeNotCoveredError,
)
from parlor.logic.matchmaker import fill_seats
from parlor.logic.poker import HAND_SIZE, compare_hands, evaluate_hand
from parlor.logic.state import PokerDuelSession, RoundSummary

if TYPE_CHECKING:
    import random
    from collections.abc import Callable

    from parlor.logic.actions import ParsedAction

    DeckFactory = Callable[[random.Random], list[Card]]

ROUNDS_TO_WIN = 2
LOSS_DIVISOR = 4
WIN_MULTIPLIER = 2


def potential_loss_for(balance: int) -> int:
    """A quarter of the balance, truncated."""
    return balance // LOSS_DIVISOR


def create_poker_duel(
    session_id: str,
    scope_id: str,
    player: tuple[str, str],
    wager: int,
    balance: int,
) -> ActionResult:
    """Open the confirmation prompt, quoting the loss against the current balance."""
    human, dealer = fill_seats([player], 2)
    state = PokerDuelSession(
        session_id=session_id,
        scope_id=scope_id,
        players=(human, dealer.model_copy(update={"label": "Dealer"})),
        wager=wager,
        quoted_loss=potential_loss_for(balance),
    )
    return ActionResult(state, [])


def confirm(
    state: PokerDuelSession,
    player_id: str,
    balance: int,
    rng: random.Random,
    deck_factory: DeckFactory = shuffled_deck,
) -> ActionResult:
    """Start the match. ``balance`` must be read at the moment of confirmation."""
    _require_phase(state, player_id, PokerPhase.CONFIRM_START)
    if balance < state.wager:
        raise StakeNotCoveredError(f"your balance of {balance} no longer covers the {state.wager} chip wager")
    state = state.model_copy(
        update={
            "status": SessionStatus.PLAYING,
            "potential_loss": potential_loss_for(balance),
        },
    )
    events: list[GameEvent] = [SessionStartedEvent(player_ids=[state.player.player_id])]
    state = _deal_round(state, 1, rng, deck_factory, events)
    return ActionResult(state, events)


def cancel(state: PokerDuelSession, player_id: str) -> ActionResult:
    _require_phase(state, player_id, PokerPhase.CONFIRM_START)
    finished, event = finish(state, result=None, end_reason=EndReason.CANCELLED, phase=PokerPhase.FINISHED)
    return ActionResult(finished, [event])


def reveal(
    state: PokerDuelSession,
    player_id: str,
    rng: random.Random,
    deck_factory: DeckFactory = shuffled_deck,
) -> ActionResult:
    _require_phase(state, player_id, PokerPhase.ROUND_START)
    player_strength = evaluate_hand(state.player_hand)
    dealer_strength = evaluate_hand(state.dealer_hand)
    outcome = compare_hands(state.player_hand, state.dealer_hand)
    winner = {1: "player", -1: "dealer"}.get(outcome)

    player_score = state.player_score + (1 if winner == "player" else 0)
    dealer_score = state.dealer_score + (1 if winner == "dealer" else 0)
    summary = RoundSummary(
        round_number=state.round_number,
        player_hand=state.player_hand,
        dealer_hand=state.dealer_hand,
        player_rank=player_strength.rank_name,
        dealer_rank=dealer_strength.rank_name,
        winner=winner,
    )
    events: list[GameEvent] = [
        RoundResolvedEvent(
            round_number=state.round_number,
            winner=winner,
            player_rank=summary.player_rank,
            dealer_rank=summary.dealer_rank,
            player_score=player_score,
            dealer_score=dealer_score,
        ),
    ]
    state = state.model_copy(update={"last_round": summary})

    if winner is None:
        # ties replay the same round number with new hands
        state = _deal_round(state, state.round_number, rng, deck_factory, events, is_redeal=True)
        return ActionResult(state, events)

    state = state.model_copy(update={"player_score": player_score, "dealer_score": dealer_score})
    if player_score >= ROUNDS_TO_WIN or dealer_score >= ROUNDS_TO_WIN:
        player_won = player_score >= ROUNDS_TO_WIN
        finished, event = finish(
            state,
            result=GameResult.WIN if player_won else GameResult.LOSE,
            winner_id=state.players[0 if player_won else 1].player_id,
            phase=PokerPhase.FINISHED,
        )
        events.append(event)
        return ActionResult(finished, events)

    return ActionResult(state.model_copy(update={"phase": PokerPhase.ROUND_REVEAL}), events)


def next_round(
    state: PokerDuelSession,
    player_id: str,
    rng: random.Random,
    deck_factory: DeckFactory = shuffled_deck,
) -> ActionResult:
    _require_phase(state, player_id, PokerPhase.ROUND_REVEAL)
    events: list[GameEvent] = []
    state = _deal_round(state, state.round_number + 1, rng, deck_factory, events)
    return ActionResult(state, events)


def apply_action(
    state: PokerDuelSession,
    player_id: str,
    action: ParsedAction,
    rng: random.Random,
    deck_factory: DeckFactory = shuffled_deck,
) -> ActionResult:
    """Dispatch reveal, next_round and cancel. Confirm needs a fresh balance and goes through ``confirm``."""
    if action.action == GameAction.REVEAL:
        return reveal(state, player_id, rng, deck_factory)
    if action.action == GameAction.NEXT_ROUND:
        return next_round(state, player_id, rng, deck_factory)
    if action.action == GameAction.CANCEL:
        return cancel(state, player_id)
    raise InvalidActionError(f"{action.action.value} is not a poker duel action")


def apply_timeout(state: PokerDuelSession) -> ActionResult:
    """An unanswered prompt expires; an abandoned round forfeits the match."""
    if state.phase == PokerPhase.CONFIRM_START:
        finished, event = finish(state, result=None, end_reason=EndReason.EXPIRED, phase=PokerPhase.FINISHED)
        return ActionResult(finished, [event])
    if state.phase == PokerPhase.FINISHED:
        raise GameFinishedError("match already finished")
    finished, event = finish(
        state,
        result=GameResult.LOSE,
        winner_id=state.players[1].player_id,
        end_reason=EndReason.TIMEOUT,
        phase=PokerPhase.FINISHED,
    )
    return ActionResult(finished, [event])


def pending_timeout(state: PokerDuelSession) -> TimeoutType | None:
    if state.phase == PokerPhase.CONFIRM_START:
        return TimeoutType.CONFIRM
    if state.phase in (PokerPhase.ROUND_START, PokerPhase.ROUND_REVEAL):
        return TimeoutType.ROUND
    return None


def _require_phase(state: PokerDuelSession, player_id: str, phase: PokerPhase) -> None:
    if state.phase == PokerPhase.FINISHED:
        raise GameFinishedError("match already finished")
    if player_id != state.player.player_id:
        raise NotAPlayerError("this is not your match")
    if state.phase != phase:
        raise InvalidActionError(f"cannot do that during {state.phase.value}")


def _deal_round(
    state: PokerDuelSession,
    round_number: int,
    rng: random.Random,
    deck_factory: DeckFactory,
    events: list[GameEvent],
    *,
    is_redeal: bool = False,
) -> PokerDuelSession:
    deck = deck_factory(rng)
    hands: list[list[Card]] = [[], []]
    for hand in hands:
        for _ in range(HAND_SIZE):
            card = deal(deck)
            if card is None:
                raise DeckExhaustedError(state.session_id)
            hand.append(card)
    events.append(RoundDealtEvent(round_number=round_number, is_redeal=is_redeal))
    return state.model_copy(
        update={
            "phase": PokerPhase.ROUND_START,
            "round_number": round_number,
            "deck": tuple(deck),
            "player_hand": tuple(hands[0]),
            "dealer_hand": tuple(hands[1]),
        },
    )
