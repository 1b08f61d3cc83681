# -*- coding: utf-8 -*-
"""
Persistence of games and leaderboards on a key-value storage medium.
"""

from .gamestate import CorruptStateError, GameState, Snapshot, decode_state, encode_state, load_state, save_state
from .kvstore import JsonFileStore, KeyValueStore, MemoryStore, StorageError
from .leaderboard import Leaderboard, LeaderboardEntry

__all__ = [
    "CorruptStateError",
    "GameState",
    "Snapshot",
    "decode_state",
    "encode_state",
    "load_state",
    "save_state",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "StorageError",
    "Leaderboard",
    "LeaderboardEntry",
]
