"""
Single-player blackjack against the house dealer.

The player hits or stands; a bust ends the hand at once and reaching 21
hands over to the dealer automatically. The dealer draws below 17 and the
hand is resolved with the usual precedence: naturals first, then busts,
then totals.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from parlor.logic.action_result import ActionResult, finish
from parlor.logic.cards import BLACKJACK_TOTAL, Card, deal, hand_value, is_blackjack
from parlor.logic.enums import BlackjackPhase, EndReason, GameAction, GameResult, SessionStatus, TimeoutType
from parlor.logic.events import CardDealtEvent, GameEvent, SessionStartedEvent
from parlor.logic.exceptions import (
    DeckExhaustedError,
    GameFinishedError,
    InvalidActionError,
    NotAPlayerError,
)
from parlor.logic.matchmaker import fill_seats
from parlor.logic.state import BlackjackSession

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parlor.logic.actions import ParsedAction

DEALER_STANDS_AT = 17
_PLAYER_WINS = frozenset({GameResult.WIN, GameResult.BLACKJACK, GameResult.DEALER_BUST})


def _draw(deck: list[Card], session_id: str) -> Card:
    card = deal(deck)
    if card is None:
        raise DeckExhaustedError(session_id)
    return card


def determine_result(player_hand: Sequence[Card], dealer_hand: Sequence[Card]) -> GameResult:
    """Resolve a finished hand from the player's point of view."""
    player_natural = is_blackjack(tuple(player_hand))
    dealer_natural = is_blackjack(tuple(dealer_hand))
    if player_natural and dealer_natural:
        return GameResult.PUSH
    if player_natural:
        return GameResult.BLACKJACK
    if dealer_natural:
        return GameResult.LOSE

    player_total = hand_value(player_hand).value
    dealer_total = hand_value(dealer_hand).value
    if player_total > BLACKJACK_TOTAL:
        return GameResult.PLAYER_BUST
    if dealer_total > BLACKJACK_TOTAL:
        return GameResult.DEALER_BUST
    if player_total > dealer_total:
        return GameResult.WIN
    if player_total < dealer_total:
        return GameResult.LOSE
    return GameResult.PUSH


def dealer_must_hit(dealer_hand: Sequence[Card]) -> bool:
    return hand_value(dealer_hand).value < DEALER_STANDS_AT


def payout(result: GameResult | None, wager: int) -> int:
    """Signed chip change for the player; blackjack pays 3:2 truncated toward zero."""
    if result == GameResult.BLACKJACK:
        return wager * 3 // 2
    if result in (GameResult.WIN, GameResult.DEALER_BUST):
        return wager
    if result in (GameResult.LOSE, GameResult.PLAYER_BUST):
        return -wager
    return 0


def create_blackjack(
    session_id: str,
    scope_id: str,
    player: tuple[str, str],
    wager: int,
    deck: list[Card],
) -> ActionResult:
    """Deal player, dealer, player, dealer from the end of a shuffled deck."""
    player_hand: list[Card] = []
    dealer_hand: list[Card] = []
    for _ in range(2):
        player_hand.append(_draw(deck, session_id))
        dealer_hand.append(_draw(deck, session_id))

    players = fill_seats([player], 1)
    state = BlackjackSession(
        session_id=session_id,
        scope_id=scope_id,
        players=players,
        wager=wager,
        deck=tuple(deck),
        player_hand=tuple(player_hand),
        dealer_hand=tuple(dealer_hand),
    )
    events: list[GameEvent] = [SessionStartedEvent(player_ids=[players[0].player_id])]
    if is_blackjack(state.player_hand) or is_blackjack(state.dealer_hand):
        state = _resolve(state, events)
    return ActionResult(state, events)


def hit(state: BlackjackSession, player_id: str) -> ActionResult:
    _require_player_turn(state, player_id)
    deck = list(state.deck)
    card = _draw(deck, state.session_id)
    hand = (*state.player_hand, card)
    total = hand_value(hand).value
    events: list[GameEvent] = [CardDealtEvent(recipient="player", card=card, hand_value=total)]
    state = state.model_copy(update={"deck": tuple(deck), "player_hand": hand})

    if total > BLACKJACK_TOTAL:
        state = _resolve(state, events)
    elif total == BLACKJACK_TOTAL:
        state = _dealer_turn(state, events)
    return ActionResult(state, events)


def stand(state: BlackjackSession, player_id: str) -> ActionResult:
    _require_player_turn(state, player_id)
    events: list[GameEvent] = []
    return ActionResult(_dealer_turn(state, events), events)


def apply_action(state: BlackjackSession, player_id: str, action: ParsedAction) -> ActionResult:
    if action.action == GameAction.HIT:
        return hit(state, player_id)
    if action.action == GameAction.STAND:
        return stand(state, player_id)
    raise InvalidActionError(f"{action.action.value} is not a blackjack action")


def apply_timeout(state: BlackjackSession) -> ActionResult:
    """An idle player forfeits the hand; it is not treated as a stand."""
    if state.phase != BlackjackPhase.PLAYER_TURN:
        raise GameFinishedError("hand already resolved")
    finished, event = finish(
        state,
        result=GameResult.LOSE,
        end_reason=EndReason.TIMEOUT,
        phase=BlackjackPhase.FINISHED,
    )
    return ActionResult(finished, [event])


def pending_timeout(state: BlackjackSession) -> TimeoutType | None:
    return TimeoutType.TURN if state.phase == BlackjackPhase.PLAYER_TURN else None


def _require_player_turn(state: BlackjackSession, player_id: str) -> None:
    if state.status == SessionStatus.FINISHED:
        raise GameFinishedError("hand already resolved")
    if player_id != state.player.player_id:
        raise NotAPlayerError("this is not your hand")
    if state.phase != BlackjackPhase.PLAYER_TURN:
        raise InvalidActionError("the dealer is playing")


def _dealer_turn(state: BlackjackSession, events: list[GameEvent]) -> BlackjackSession:
    deck = list(state.deck)
    dealer_hand = list(state.dealer_hand)
    state = state.model_copy(update={"phase": BlackjackPhase.DEALER_TURN})
    while dealer_must_hit(dealer_hand):
        card = _draw(deck, state.session_id)
        dealer_hand.append(card)
        events.append(CardDealtEvent(recipient="dealer", card=card, hand_value=hand_value(dealer_hand).value))
    state = state.model_copy(update={"deck": tuple(deck), "dealer_hand": tuple(dealer_hand)})
    return _resolve(state, events)


def _resolve(state: BlackjackSession, events: list[GameEvent]) -> BlackjackSession:
    result = determine_result(state.player_hand, state.dealer_hand)
    winner_id = state.player.player_id if result in _PLAYER_WINS else None
    finished, event = finish(state, result=result, winner_id=winner_id, phase=BlackjackPhase.FINISHED)
    events.append(event)
    return finished
