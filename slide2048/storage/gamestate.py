"""
JSON codec of the saved game, shared with the web client.

The record stored under ``2048-game-state`` reads::

    {"gameBoard": [[0, 2, 0, 0], ...], "currentScore": 12,
     "previousGameState": {"gameBoard": [...], "currentScore": 8} | null}
"""

import json
import logging
from typing import NamedTuple

from slide2048.config import GAME_STATE_KEY
from slide2048.core.board import Board
from slide2048.storage.kvstore import KeyValueStore

logger = logging.getLogger(__name__)


class CorruptStateError(ValueError):
    """Raised when a stored record cannot be decoded into a game state."""


class Snapshot(NamedTuple):
    """Copy of the board and score taken before a move."""

    board: Board
    score: int


class GameState(NamedTuple):
    """Persisted part of a session."""

    board: Board
    score: int
    previous: Snapshot | None = None


def _snapshot_to_dict(board: Board, score: int) -> dict:
    return {'gameBoard': board.to_list(), 'currentScore': int(score)}


def _snapshot_from_dict(data) -> Snapshot:
    if not isinstance(data, dict):
        raise CorruptStateError(f'Expected an object, got {type(data).__name__}')

    score = data.get('currentScore')
    if isinstance(score, bool) or not isinstance(score, int) or score < 0:
        raise CorruptStateError(f'Invalid score: {score!r}')

    grid = data.get('gameBoard')
    if not isinstance(grid, list) or not all(isinstance(row, list) for row in grid):
        raise CorruptStateError('Board must be a list of rows')
    if any(isinstance(cell, bool) or not isinstance(cell, int) for row in grid for cell in row):
        raise CorruptStateError('Board cells must be integers')
    try:
        board = Board.from_list(grid)
    except ValueError as error:
        raise CorruptStateError(str(error)) from error
    return Snapshot(board, score)


def encode_state(state: GameState) -> str:
    """
    Serialize a game state to the JSON record.

    Parameters
    ----------
    state : GameState
        The state to serialize.

    Returns
    -------
    str
        The JSON document.
    """
    record = _snapshot_to_dict(state.board, state.score)
    record['previousGameState'] = (
        _snapshot_to_dict(state.previous.board, state.previous.score) if state.previous is not None else None
    )
    return json.dumps(record)


def decode_state(payload: str) -> GameState:
    """
    Parse a JSON record into a game state.

    Parameters
    ----------
    payload : str
        The JSON document.

    Returns
    -------
    GameState
        The decoded state.

    Raises
    ------
    CorruptStateError
        If the document is not valid JSON or does not describe a game.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as error:
        raise CorruptStateError(f'Invalid JSON: {error}') from error

    current = _snapshot_from_dict(data)
    previous = data.get('previousGameState')
    return GameState(current.board, current.score, _snapshot_from_dict(previous) if previous is not None else None)


def save_state(store: KeyValueStore, state: GameState, key: str = GAME_STATE_KEY) -> None:
    """Write a game state to a store. Storage errors propagate."""
    store.set_item(key, encode_state(state))


def load_state(store: KeyValueStore, key: str = GAME_STATE_KEY) -> GameState | None:
    """
    Read the saved game from a store.

    Returns
    -------
    GameState or None
        The saved game, or None when nothing usable is stored.

    Notes
    -----
    A corrupt record is logged and treated as missing. Storage errors propagate.
    """
    payload = store.get_item(key)
    if payload is None:
        return None
    try:
        return decode_state(payload)
    except CorruptStateError as error:
        logger.warning('Ignoring corrupt saved game under %r: %s', key, error)
        return None
