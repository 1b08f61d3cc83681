"""
Random tile generation after a successful move.
"""

import logging

from numpy.random import PCG64DXSM, Generator, default_rng

from slide2048.core.board import Board

logger = logging.getLogger(__name__)

# ##>: Tile spawn probabilities (90% for 2, 10% for 4).
TILE_SPAWN_PROBS: dict[int, float] = {2: 0.9, 4: 0.1}

# ##>: Module-level generator, used when the caller gives none.
_GENERATOR = default_rng(PCG64DXSM())


def spawn_tile(
    board: Board, rng: Generator | None = None, spawn_probs: dict[int, float] | None = None
) -> tuple[int, int] | None:
    """
    Place a new tile on a random empty cell.

    Parameters
    ----------
    board : Board
        The board to fill. **Modified in-place.**
    rng : Generator, optional
        Random generator, the module-level one is used when omitted.
    spawn_probs : dict[int, float], optional
        Tile values and their probabilities, ``TILE_SPAWN_PROBS`` by default.

    Returns
    -------
    tuple[int, int] or None
        Position of the new tile, or None when the board is full.

    Notes
    -----
    - The cell is chosen uniformly among the empty cells.
    - A full board is left untouched, this is not an error.
    """
    rng = rng if rng is not None else _GENERATOR
    spawn_probs = spawn_probs or TILE_SPAWN_PROBS

    empty_cells = board.empty_cells()
    if not empty_cells:
        logger.debug('No empty cell, nothing spawned')
        return None

    row, col = empty_cells[int(rng.integers(len(empty_cells)))]
    value = int(rng.choice(list(spawn_probs), p=list(spawn_probs.values())))
    board[row, col] = value
    logger.debug('Spawned %d at (%d, %d)', value, row, col)
    return row, col


def spawn_tiles(board: Board, count: int, rng: Generator | None = None, spawn_probs=None) -> list[tuple[int, int]]:
    """Spawn up to ``count`` tiles, stopping early when the board fills up."""
    positions = []
    for _ in range(count):
        position = spawn_tile(board, rng=rng, spawn_probs=spawn_probs)
        if position is None:
            break
        positions.append(position)
    return positions
