# -*- coding: utf-8 -*-
"""
Rules engine of the 2048 sliding-tile puzzle.
"""

from slide2048.config import GameConfig
from slide2048.core import Board, Direction, is_terminal, resolve, spawn_tile
from slide2048.envs import GameStatus, MoveOutcome, Session

__version__ = '1.0.0'

__all__ = [
    "GameConfig",
    "Board",
    "Direction",
    "is_terminal",
    "resolve",
    "spawn_tile",
    "GameStatus",
    "MoveOutcome",
    "Session",
]
