"""
Connect-four grid primitives, including the row-clear ("4tress") mechanic.

Row 0 is the top of the grid and column indices run left to right. Cells
hold EMPTY or a player number (1 or 2). The functions here work on a
mutable ``Grid`` (list of row lists); session state keeps the frozen
``Board`` (tuple of row tuples) and converts with thaw/freeze.
"""

from __future__ import annotations

ROWS = 6
COLS = 7
EMPTY = 0
CONNECT = 4

type Grid = list[list[int]]
type Board = tuple[tuple[int, ...], ...]

# (row step, col step): horizontal, vertical, down-right, down-left
_DIRECTIONS = ((0, 1), (1, 0), (1, 1), (1, -1))


def create_board() -> Grid:
    return [[EMPTY] * COLS for _ in range(ROWS)]


def freeze(grid: Grid) -> Board:
    return tuple(tuple(row) for row in grid)


def thaw(board: Board) -> Grid:
    return [list(row) for row in board]


def is_valid_move(board: Grid | Board, col: int) -> bool:
    """A column accepts a chip while its top cell is empty."""
    return 0 <= col < COLS and board[0][col] == EMPTY


def place(grid: Grid, col: int, player: int) -> int | None:
    """Drop a chip into ``col``. Return the landing row, or None if the column is full or out of range."""
    if not is_valid_move(grid, col):
        return None
    for row in range(ROWS - 1, -1, -1):
        if grid[row][col] == EMPTY:
            grid[row][col] = player
            return row
    return None


def check_win(board: Grid | Board, player: int) -> bool:
    """Whether ``player`` has four in a row in any direction."""
    for row in range(ROWS):
        for col in range(COLS):
            if board[row][col] != player:
                continue
            for d_row, d_col in _DIRECTIONS:
                end_row = row + d_row * (CONNECT - 1)
                end_col = col + d_col * (CONNECT - 1)
                if not (0 <= end_row < ROWS and 0 <= end_col < COLS):
                    continue
                if all(board[row + d_row * k][col + d_col * k] == player for k in range(1, CONNECT)):
                    return True
    return False


def is_full(board: Grid | Board) -> bool:
    return all(cell != EMPTY for cell in board[0])


def _apply_gravity(grid: Grid, cleared_row: int) -> None:
    for row in range(cleared_row, 0, -1):
        grid[row] = list(grid[row - 1])
    grid[0] = [EMPTY] * COLS


def clear_full_rows(grid: Grid) -> int:
    """Remove every fully occupied row, shifting the rows above down by one.

    Scanning restarts from the bottom after each clear since the shift can
    bring another full row into place. Return how many rows were cleared.
    """
    cleared = 0
    row = ROWS - 1
    while row >= 0:
        if all(cell != EMPTY for cell in grid[row]):
            _apply_gravity(grid, row)
            cleared += 1
            row = ROWS - 1
            continue
        row -= 1
    return cleared


def valid_columns(board: Grid | Board) -> list[int]:
    return [col for col in range(COLS) if is_valid_move(board, col)]
