# -*- coding: utf-8 -*-
"""
Game rules of 2048: the board, move resolution, tile spawning and end-of-game detection.
"""

from .board import Board
from .resolver import Direction, MoveResult, Orientation, TileMove, merge_row, resolve
from .spawner import TILE_SPAWN_PROBS, spawn_tile, spawn_tiles
from .terminal import is_terminal, legal_directions

__all__ = [
    "Board",
    "Direction",
    "MoveResult",
    "Orientation",
    "TileMove",
    "merge_row",
    "resolve",
    "TILE_SPAWN_PROBS",
    "spawn_tile",
    "spawn_tiles",
    "is_terminal",
    "legal_directions",
]
