"""
Heuristic CPU opponents.

Connect-four: take a winning column, otherwise block the opponent's winning
column, otherwise play a random valid column. Elimination: any switch at random
(the game is pure chance, so there is nothing to look ahead at).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from parlor.logic.board import check_win, place, thaw, valid_columns

if TYPE_CHECKING:
    import random

    from parlor.logic.board import Board, Grid

NO_MOVE = -1


def _wins_with(board: Grid | Board, col: int, player: int) -> bool:
    trial = thaw(board) if isinstance(board, tuple) else [list(row) for row in board]
    if place(trial, col, player) is None:
        return False
    return check_win(trial, player)


def choose_column(board: Grid | Board, cpu: int, opponent: int, rng: random.Random) -> int:
    """Pick a column for ``cpu``, or NO_MOVE when the board has no valid column."""
    columns = valid_columns(board)
    if not columns:
        return NO_MOVE
    for col in columns:
        if _wins_with(board, col, cpu):
            return col
    for col in columns:
        if _wins_with(board, col, opponent):
            return col
    return rng.choice(columns)


def choose_switch(available_switches: int, rng: random.Random) -> int:
    return rng.randrange(available_switches)
