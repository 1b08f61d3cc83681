"""
Move resolution: sliding and merging tiles in one of the four directions.

Every direction is reduced to a left move. The board is reoriented with a pair of
forward/inverse functions, each row is compacted to the left, and the result is
oriented back into board coordinates.
"""

import logging
from enum import Enum
from typing import Callable, NamedTuple

from numpy import arange, array, int64, ndarray

from slide2048.config import BOARD_SIZE
from slide2048.core.board import Board

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    """Move direction, valued with the command name used by the input layer."""

    LEFT = 'left'
    UP = 'up'
    RIGHT = 'right'
    DOWN = 'down'

    @classmethod
    def parse(cls, value: 'str | Direction') -> 'Direction':
        """
        Convert a command name into a direction.

        Parameters
        ----------
        value : str or Direction
            Name of the direction, case-insensitive.

        Returns
        -------
        Direction
            The matching direction.

        Raises
        ------
        ValueError
            If the value names no direction.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid direction: {value!r}. Must be 'left', 'right', 'up', or 'down'") from None


class Orientation(NamedTuple):
    """Pair of grid transforms turning a direction into a left move and back."""

    forward: Callable[[ndarray], ndarray]
    inverse: Callable[[ndarray], ndarray]


def _identity(grid: ndarray) -> ndarray:
    return grid


def _transpose(grid: ndarray) -> ndarray:
    return grid.T


def _reverse_rows(grid: ndarray) -> ndarray:
    return grid[:, ::-1]


def _transpose_then_reverse(grid: ndarray) -> ndarray:
    return grid.T[:, ::-1]


def _reverse_then_transpose(grid: ndarray) -> ndarray:
    return grid[:, ::-1].T


ORIENTATIONS: dict[Direction, Orientation] = {
    Direction.LEFT: Orientation(_identity, _identity),
    Direction.UP: Orientation(_transpose, _transpose),
    Direction.RIGHT: Orientation(_reverse_rows, _reverse_rows),
    Direction.DOWN: Orientation(_transpose_then_reverse, _reverse_then_transpose),
}

# ##>: Flat cell indices, reoriented alongside the board to map rows back to board positions.
_CELL_INDEX = arange(BOARD_SIZE * BOARD_SIZE).reshape(BOARD_SIZE, BOARD_SIZE)


class TileMove(NamedTuple):
    """
    Displacement of one tile during a move, in board coordinates.

    ``merged`` is set on both tiles of a merged pair, they share the same target.
    """

    source: tuple[int, int]
    target: tuple[int, int]
    value: int
    merged: bool


class MoveResult(NamedTuple):
    """Outcome of resolving a move on a board."""

    board: Board
    score: int
    changed: bool
    events: tuple[TileMove, ...]


class RowMerge(NamedTuple):
    """Left compaction of a single row."""

    row: list[int]
    score: int
    changed: bool
    moves: list[tuple[int, int, int, bool]]  # (source column, target column, value, merged)


def merge_row(row: list[int]) -> RowMerge:
    """
    Slide a row to the left and merge equal neighbours.

    Parameters
    ----------
    row : list[int]
        Cell values of the row.

    Returns
    -------
    RowMerge
        The compacted row padded with zeros, the merge score, whether any tile moved
        or merged, and the per-tile moves.

    Notes
    -----
    - Each emitted cell takes part in at most one merge: ``[2, 2, 2, 0]`` becomes
      ``[4, 2, 0, 0]``.
    - The score is the sum of the merged values.
    """
    result: list[int] = []
    moves: list[tuple[int, int, int, bool]] = []
    score = 0
    changed = False
    previous = None

    for col, value in enumerate(row):
        if value == 0:
            continue

        if value == previous:
            # ##: Merge into the last emitted cell and forbid a chained merge.
            target = len(result) - 1
            result[target] = value * 2
            score += value * 2
            previous = None
            changed = True

            source_col, _, _, _ = moves[-1]
            moves[-1] = (source_col, target, value, True)
            moves.append((col, target, value, True))
        else:
            result.append(value)
            previous = value
            target = len(result) - 1
            if col != target:
                changed = True
            moves.append((col, target, value, False))

    result.extend([0] * (len(row) - len(result)))
    return RowMerge(result, score, changed, moves)


def resolve(board: Board, direction: 'str | Direction') -> MoveResult:
    """
    Compute the board obtained by moving every tile in a direction.

    Parameters
    ----------
    board : Board
        The current board. It is not modified.
    direction : str or Direction
        The move direction.

    Returns
    -------
    MoveResult
        The new board, the score gained by merges, whether any cell changed and the
        tile displacements.

    Notes
    -----
    - ``changed`` is False exactly when the new board equals the input board.
    - The sum of the tile values is preserved, no tile is spawned here.
    """
    orientation = ORIENTATIONS[Direction.parse(direction)]
    oriented = orientation.forward(board.cells)
    positions = orientation.forward(_CELL_INDEX)

    rows = []
    events = []
    score = 0
    changed = False
    for index, row in enumerate(oriented.tolist()):
        merged = merge_row(row)
        rows.append(merged.row)
        score += merged.score
        changed = changed or merged.changed

        for source_col, target_col, value, was_merged in merged.moves:
            source = divmod(int(positions[index, source_col]), BOARD_SIZE)
            target = divmod(int(positions[index, target_col]), BOARD_SIZE)
            events.append(TileMove(source, target, value, was_merged))

    new_board = Board(orientation.inverse(array(rows, dtype=int64)))
    logger.debug('Resolved %s: changed=%s, score=%d', direction, changed, score)
    return MoveResult(new_board, score, changed, tuple(events))
