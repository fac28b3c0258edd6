"""
Connect-four with the row-clear rule.

After every chip: win check, full-board check, then the row-clear mechanic,
then win and full-board checks again (a clear can make or break a line).
When the next player is the CPU it answers within the same transition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from parlor.logic.action_result import ActionResult, finish
from parlor.logic.board import check_win, clear_full_rows, freeze, is_full, is_valid_move, place, thaw
from parlor.logic.cpu import NO_MOVE, choose_column
from parlor.logic.enums import EndReason, GameAction, GameResult, SessionStatus, TimeoutType
from parlor.logic.events import (
    ChipDroppedEvent,
    GameEvent,
    PlayerJoinedEvent,
    RowsClearedEvent,
    SessionStartedEvent,
)
from parlor.logic.exceptions import (
    GameFinishedError,
    InvalidActionError,
    NotAPlayerError,
    NotYourTurnError,
)
from parlor.logic.matchmaker import fill_seats
from parlor.logic.state import ConnectFourSession

if TYPE_CHECKING:
    import random

    from parlor.logic.actions import ParsedAction
    from parlor.logic.board import Grid


def _other(chip: int) -> int:
    return 2 if chip == 1 else 1


def create_connect_four(
    session_id: str,
    scope_id: str,
    host: tuple[str, str],
    opponent: tuple[str, str] | None,
    wager: int,
) -> ActionResult:
    """Host is chip 1. No opponent means a CPU game that starts immediately."""
    if opponent is None:
        players = fill_seats([host], 2)
        state = ConnectFourSession(session_id=session_id, scope_id=scope_id, players=players, wager=wager)
        return ActionResult(state, [SessionStartedEvent(player_ids=[p.player_id for p in players])])

    players = fill_seats([host, opponent], 2)
    state = ConnectFourSession(
        session_id=session_id,
        scope_id=scope_id,
        players=players,
        wager=wager,
        invited=(players[1].player_id,),
        status=SessionStatus.WAITING,
    )
    return ActionResult(state, [])


def join(state: ConnectFourSession, player_id: str) -> ActionResult:
    if player_id not in state.invited:
        raise NotAPlayerError("you were not challenged in this game")
    if player_id in state.joined or state.status != SessionStatus.WAITING:
        return ActionResult(state, [])
    state = state.model_copy(update={"joined": (*state.joined, player_id), "status": SessionStatus.PLAYING})
    return ActionResult(
        state,
        [
            PlayerJoinedEvent(player_id=player_id, waiting_for=[]),
            SessionStartedEvent(player_ids=[p.player_id for p in state.players]),
        ],
    )


def drop(state: ConnectFourSession, player_id: str, column: int, rng: random.Random) -> ActionResult:
    if state.status == SessionStatus.FINISHED:
        raise GameFinishedError("game already finished")
    if state.status != SessionStatus.PLAYING:
        raise InvalidActionError("game has not started yet")
    chip = state.chip_of(player_id)
    if chip is None:
        raise NotAPlayerError("you are not in this game")
    if chip != state.current:
        raise NotYourTurnError("it is not your turn")
    if not is_valid_move(state.board, column):
        raise InvalidActionError(f"column {column + 1} is full or does not exist")

    events: list[GameEvent] = []
    state = _play(state, column, events)
    current = state.current_player
    if current is not None and current.is_cpu:
        state = _cpu_turn(state, rng, events)
    return ActionResult(state, events)


def apply_action(
    state: ConnectFourSession,
    player_id: str,
    action: ParsedAction,
    rng: random.Random,
) -> ActionResult:
    if action.action == GameAction.JOIN:
        return join(state, player_id)
    if action.action == GameAction.DROP and action.index is not None:
        return drop(state, player_id, action.index, rng)
    raise InvalidActionError(f"{action.action.value} is not a connect-four action")


def apply_timeout(state: ConnectFourSession) -> ActionResult:
    """Lobby expiry, or forfeit by the player who failed to move."""
    if state.status == SessionStatus.WAITING:
        finished, event = finish(state, result=None, end_reason=EndReason.EXPIRED)
        return ActionResult(finished, [event])
    if state.status != SessionStatus.PLAYING:
        raise GameFinishedError("game already finished")
    winner = state.players[_other(state.current) - 1]
    finished, event = finish(state, result=GameResult.WIN, winner_id=winner.player_id, end_reason=EndReason.TIMEOUT)
    return ActionResult(finished, [event])


def pending_timeout(state: ConnectFourSession) -> TimeoutType | None:
    if state.status == SessionStatus.WAITING:
        return TimeoutType.LOBBY
    if state.status == SessionStatus.PLAYING:
        return TimeoutType.TURN
    return None


def _cpu_turn(state: ConnectFourSession, rng: random.Random, events: list[GameEvent]) -> ConnectFourSession:
    column = choose_column(state.board, state.current, _other(state.current), rng)
    if column == NO_MOVE:
        finished, event = finish(state, result=GameResult.DRAW)
        events.append(event)
        return finished
    return _play(state, column, events)


def _play(state: ConnectFourSession, column: int, events: list[GameEvent]) -> ConnectFourSession:
    chip = state.current
    mover = state.players[chip - 1]
    grid = thaw(state.board)
    row = place(grid, column, chip)
    if row is None:
        raise InvalidActionError(f"column {column + 1} is full or does not exist")
    events.append(ChipDroppedEvent(player_id=mover.player_id, column=column, row=row))

    outcome = _check_outcome(state, grid, chip, events)
    if outcome is not None:
        return outcome

    cleared = clear_full_rows(grid)
    if cleared:
        events.append(RowsClearedEvent(count=cleared))
        outcome = _check_outcome(state, grid, chip, events, check_opponent=True)
        if outcome is not None:
            return outcome

    return state.model_copy(update={"board": freeze(grid), "current": _other(chip)})


def _check_outcome(
    state: ConnectFourSession,
    grid: Grid,
    chip: int,
    events: list[GameEvent],
    *,
    check_opponent: bool = False,
) -> ConnectFourSession | None:
    winners = [chip]
    if check_opponent:
        # shifted rows can complete a line for either player; the mover wins ties
        winners.append(_other(chip))
    for candidate in winners:
        if check_win(grid, candidate):
            winner = state.players[candidate - 1]
            finished, event = finish(state, result=GameResult.WIN, winner_id=winner.player_id, board=freeze(grid))
            events.append(event)
            return finished
    if is_full(grid):
        finished, event = finish(state, result=GameResult.DRAW, board=freeze(grid))
        events.append(event)
        return finished
    return None
