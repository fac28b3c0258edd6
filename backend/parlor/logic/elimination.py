"""
Four-player elimination game: avoid the detonator.

Each round hides a detonator among ``available_switches`` switches. Players
pick one switch per turn in a fixed (shuffled once) order. A safe pick takes
that switch out of play for the rest of the round; hitting the detonator
eliminates the player, and the next round starts with a switch count set by
how many players remain. The last player standing wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from parlor.logic.action_result import ActionResult, finish
from parlor.logic.cpu import choose_switch
from parlor.logic.enums import EndReason, GameAction, GameResult, SessionStatus, TimeoutType
from parlor.logic.events import (
    GameEvent,
    PlayerEliminatedEvent,
    PlayerJoinedEvent,
    SessionStartedEvent,
    SwitchPickedEvent,
)
from parlor.logic.exceptions import (
    GameFinishedError,
    InvalidActionError,
    NotAPlayerError,
    NotYourTurnError,
)
from parlor.logic.matchmaker import fill_seats
from parlor.logic.rng import fisher_yates_shuffle
from parlor.logic.state import INITIAL_SWITCHES, EliminationSession

if TYPE_CHECKING:
    import random

    from parlor.logic.actions import ParsedAction

NUM_PLAYERS = 4
# remaining players -> switches in play for the next round
SWITCHES_BY_REMAINING = {4: 5, 3: 4, 2: 3}


def switches_for(remaining: int) -> int:
    return SWITCHES_BY_REMAINING[remaining]


def create_elimination(
    session_id: str,
    scope_id: str,
    humans: list[tuple[str, str]],
    wager: int,
    rng: random.Random,
) -> ActionResult:
    """Seat the host (first entry) and invitees, filling up to four with CPUs.

    Without invitees the game starts at once; otherwise it waits in the lobby.
    """
    players = fill_seats(humans, NUM_PLAYERS)
    invited = tuple(player_id for player_id, _ in humans[1:])
    state = EliminationSession(
        session_id=session_id,
        scope_id=scope_id,
        players=players,
        wager=wager,
        invited=invited,
        joined=(),
        status=SessionStatus.WAITING,
    )
    if not invited:
        return start_game(state, rng)
    return ActionResult(state, [])


def start_game(state: EliminationSession, rng: random.Random) -> ActionResult:
    order = [player.order for player in state.players]
    fisher_yates_shuffle(order, rng)
    state = state.model_copy(
        update={
            "status": SessionStatus.PLAYING,
            "turn_order": tuple(order),
            "turn_index": 0,
            "available_switches": INITIAL_SWITCHES,
            "detonator_index": rng.randrange(INITIAL_SWITCHES),
            "round_number": 1,
        },
    )
    events: list[GameEvent] = [SessionStartedEvent(player_ids=[state.slot(o).player_id for o in order])]
    return _run_cpu_turns(state, events, rng)


def join(state: EliminationSession, player_id: str, rng: random.Random) -> ActionResult:
    """Accept an invitee. Joining twice, or after the start, changes nothing."""
    if player_id not in state.invited:
        raise NotAPlayerError("you were not invited to this game")
    if player_id in state.joined or state.status != SessionStatus.WAITING:
        return ActionResult(state, [])

    state = state.model_copy(update={"joined": (*state.joined, player_id)})
    events: list[GameEvent] = [PlayerJoinedEvent(player_id=player_id, waiting_for=list(state.pending_invites))]
    if state.pending_invites:
        return ActionResult(state, events)
    started = start_game(state, rng)
    return ActionResult(started.new_state, events + started.events)


def pick_switch(state: EliminationSession, player_id: str, index: int, rng: random.Random) -> ActionResult:
    _require_turn(state, player_id)
    if not 0 <= index < state.available_switches:
        raise InvalidActionError(f"switch {index} is not available")
    events: list[GameEvent] = []
    state = _apply_pick(state, index, rng, events)
    return _run_cpu_turns(state, events, rng)


def apply_action(
    state: EliminationSession,
    player_id: str,
    action: ParsedAction,
    rng: random.Random,
) -> ActionResult:
    if action.action == GameAction.JOIN:
        return join(state, player_id, rng)
    if action.action == GameAction.PICK_SWITCH and action.index is not None:
        return pick_switch(state, player_id, action.index, rng)
    raise InvalidActionError(f"{action.action.value} is not an elimination action")


def apply_timeout(state: EliminationSession, rng: random.Random) -> ActionResult:
    """Lobby expiry, or forced elimination of the player who failed to pick."""
    if state.status == SessionStatus.WAITING:
        finished, event = finish(state, result=None, end_reason=EndReason.EXPIRED)
        return ActionResult(finished, [event])
    if state.status != SessionStatus.PLAYING:
        raise GameFinishedError("game already finished")
    events: list[GameEvent] = []
    state = _eliminate(state, rng, events, timed_out=True)
    return _run_cpu_turns(state, events, rng)


def pending_timeout(state: EliminationSession) -> TimeoutType | None:
    if state.status == SessionStatus.WAITING:
        return TimeoutType.LOBBY
    if state.status == SessionStatus.PLAYING:
        return TimeoutType.TURN
    return None


def _require_turn(state: EliminationSession, player_id: str) -> None:
    if state.status == SessionStatus.FINISHED:
        raise GameFinishedError("game already finished")
    if state.status != SessionStatus.PLAYING:
        raise InvalidActionError("game has not started yet")
    player = state.find_player(player_id)
    if player is None:
        raise NotAPlayerError("you are not in this game")
    current = state.current_player
    if current is None or current.player_id != player_id:
        raise NotYourTurnError("it is not your turn")


def _apply_pick(
    state: EliminationSession,
    index: int,
    rng: random.Random,
    events: list[GameEvent],
) -> EliminationSession:
    current = state.slot(state.turn_order[state.turn_index])
    detonated = index == state.detonator_index
    events.append(SwitchPickedEvent(player_id=current.player_id, index=index, detonated=detonated))
    if detonated:
        return _eliminate(state, rng, events, timed_out=False)

    # removing a switch below the detonator shifts the detonator's index down
    detonator = state.detonator_index - 1 if index < state.detonator_index else state.detonator_index
    return state.model_copy(
        update={
            "available_switches": state.available_switches - 1,
            "detonator_index": detonator,
            "turn_index": (state.turn_index + 1) % len(state.turn_order),
        },
    )


def _eliminate(
    state: EliminationSession,
    rng: random.Random,
    events: list[GameEvent],
    *,
    timed_out: bool,
) -> EliminationSession:
    current = state.slot(state.turn_order[state.turn_index])
    players = tuple(
        player.model_copy(update={"eliminated": True}) if player.order == current.order else player
        for player in state.players
    )
    turn_order = tuple(order for order in state.turn_order if order != current.order)

    if len(turn_order) == 1:
        events.append(
            PlayerEliminatedEvent(player_id=current.player_id, timed_out=timed_out, available_switches=0),
        )
        winner = state.slot(turn_order[0])
        finished, ended = finish(
            state,
            result=GameResult.WIN,
            winner_id=winner.player_id,
            end_reason=EndReason.TIMEOUT if timed_out else EndReason.COMPLETED,
            players=players,
            turn_order=turn_order,
            turn_index=0,
        )
        events.append(ended)
        return finished

    available = switches_for(len(turn_order))
    events.append(
        PlayerEliminatedEvent(player_id=current.player_id, timed_out=timed_out, available_switches=available),
    )
    # the filtered list moves the next player into the eliminated player's position
    return state.model_copy(
        update={
            "players": players,
            "turn_order": turn_order,
            "turn_index": state.turn_index % len(turn_order),
            "available_switches": available,
            "detonator_index": rng.randrange(available),
            "round_number": state.round_number + 1,
        },
    )


def _run_cpu_turns(state: EliminationSession, events: list[GameEvent], rng: random.Random) -> ActionResult:
    while state.status == SessionStatus.PLAYING:
        current = state.current_player
        if current is None or not current.is_cpu:
            break
        state = _apply_pick(state, choose_switch(state.available_switches, rng), rng, events)
    return ActionResult(state, events)
