"""
Detection of the end of the game.
"""

from numpy import any as np_any

from slide2048.core.board import Board
from slide2048.core.resolver import Direction, resolve


def is_terminal(board: Board) -> bool:
    """
    Check if no move can change the board anymore.

    Parameters
    ----------
    board : Board
        The board to check.

    Returns
    -------
    bool
        True if the board is full and no two neighbours share a value.

    Notes
    -----
    A board with at least one tile and one empty cell always has a move, so this
    scan agrees with ``legal_directions`` on every non-empty board.
    """
    cells = board.cells
    if not cells.all():
        return False
    return not (np_any(cells[:, :-1] == cells[:, 1:]) or np_any(cells[:-1] == cells[1:]))


def legal_directions(board: Board) -> list[Direction]:
    """
    Directions whose move would change the board.

    Parameters
    ----------
    board : Board
        The board to probe.

    Returns
    -------
    list[Direction]
        Directions for which the move resolver reports a change, in declaration order.
    """
    return [direction for direction in Direction if resolve(board, direction).changed]
