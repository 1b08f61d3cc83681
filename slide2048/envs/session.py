"""Game session: turns, score, undo, end of game and persistence."""

import logging
from enum import Enum
from typing import NamedTuple

from numpy.random import PCG64DXSM, Generator, default_rng

from slide2048.config import GameConfig
from slide2048.core.board import Board
from slide2048.core.resolver import Direction, TileMove, resolve
from slide2048.core.spawner import spawn_tile, spawn_tiles
from slide2048.core.terminal import is_terminal
from slide2048.storage.gamestate import GameState, Snapshot, load_state, save_state
from slide2048.storage.kvstore import JsonFileStore, KeyValueStore, MemoryStore, StorageError
from slide2048.storage.leaderboard import Leaderboard, LeaderboardEntry

logger = logging.getLogger(__name__)


class GameStatus(str, Enum):
    ACTIVE = 'active'
    ENDED = 'ended'


class MoveOutcome(NamedTuple):
    """
    What a renderer needs after a move.

    ``before`` and ``after`` are copies of the board around the move, ``after``
    includes the spawned tile. ``events`` locate every tile before the spawn.
    """

    changed: bool
    score: int
    before: Board
    after: Board
    events: tuple[TileMove, ...] = ()
    spawned: tuple[int, int] | None = None
    ended: bool = False


class Session:
    """
    A game of 2048 and its saved state.

    The session owns the board, the score and the undo snapshot. Every command runs
    to completion: the resolver computes the move, then the session commits it,
    spawns a tile, saves the game and checks for the end of the game.
    """

    # ##: Input commands.
    COMMANDS = ('up', 'down', 'left', 'right', 'undo', 'new-game', 'submit-score')

    def __init__(self, config: GameConfig | None = None, store: KeyValueStore | None = None, seed: int | None = None):
        """
        Initialize the session and load the saved game, or start a new one.

        Parameters
        ----------
        config : GameConfig, optional
            Game configuration, defaults are used when omitted.
        store : KeyValueStore, optional
            Storage medium. Defaults to a file store when ``config.storage_dir`` is
            set and to an in-memory store otherwise.
        seed : int, optional
            Seed of the tile spawner, for reproducible games.
        """
        self.config = config or GameConfig()
        if store is None:
            store = JsonFileStore(self.config.storage_dir) if self.config.storage_dir else MemoryStore()
        self._store = store
        self._rng: Generator = default_rng(seed) if seed is not None else default_rng(PCG64DXSM())
        self._leaderboard = Leaderboard(
            store,
            key=self.config.leaderboard_key,
            capacity=self.config.leaderboard_size,
            date_format=self.config.date_format,
        )

        self._board = Board()
        self._score = 0
        self._snapshot: Snapshot | None = None
        self._previous_board: Board | None = None
        self._status = GameStatus.ACTIVE
        self._submitted = False

        self.start()

    @property
    def board(self) -> Board:
        """Copy of the current board."""
        return self._board.copy()

    @property
    def score(self) -> int:
        return self._score

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def is_ended(self) -> bool:
        return self._status is GameStatus.ENDED

    @property
    def final_score(self) -> int | None:
        """Score to submit to the leaderboard, None while the game goes on."""
        return self._score if self.is_ended else None

    @property
    def previous_board(self) -> Board | None:
        """Board as it was before the last move, undo or new game."""
        return self._previous_board

    @property
    def can_undo(self) -> bool:
        return self._snapshot is not None and not self.is_ended

    @property
    def leaderboard(self) -> list[LeaderboardEntry]:
        return self._leaderboard.entries

    def _persist(self) -> bool:
        """Save the game. A failure is logged, the in-memory game stays authoritative."""
        state = GameState(self._board.copy(), self._score, self._snapshot)
        try:
            save_state(self._store, state, key=self.config.state_key)
        except StorageError as error:
            logger.warning('Cannot save game: %s', error)
            return False
        return True

    def start(self) -> None:
        """
        Resume the saved game, or start a new one when none is usable.

        Notes
        -----
        The end-of-game status is not saved, it is recomputed from the resumed board.
        """
        try:
            state = load_state(self._store, key=self.config.state_key)
        except StorageError as error:
            logger.warning('Cannot load saved game: %s', error)
            state = None

        if state is None or state.board.is_empty():
            self.new_game()
            return

        self._board = state.board
        self._score = state.score
        self._snapshot = state.previous
        self._status = GameStatus.ENDED if is_terminal(self._board) else GameStatus.ACTIVE
        self._submitted = False
        logger.info('Resumed game with score %d (%s)', self._score, self._status.value)

    def new_game(self) -> None:
        """Reset the board and score, then place the starting tiles."""
        self._previous_board = self._board.copy()
        self._board = Board()
        self._score = 0
        self._snapshot = None
        self._status = GameStatus.ACTIVE
        self._submitted = False

        spawn_tiles(self._board, self.config.start_tiles, rng=self._rng, spawn_probs=self.config.spawn_table)
        self._persist()
        logger.info('New game started')

    def apply_move(self, direction: 'str | Direction') -> MoveOutcome:
        """
        Play a move.

        Parameters
        ----------
        direction : str or Direction
            The move direction.

        Returns
        -------
        MoveOutcome
            The result of the move. Nothing changes when the game has ended or
            when the move does not move any tile.

        Raises
        ------
        ValueError
            If the direction is unknown.
        """
        direction = Direction.parse(direction)
        before = self._board.copy()
        self._previous_board = before

        if self.is_ended:
            return MoveOutcome(False, 0, before, before.copy(), ended=True)

        snapshot = Snapshot(before.copy(), self._score)
        result = resolve(self._board, direction)
        if not result.changed:
            return MoveOutcome(False, 0, before, before.copy(), result.events)

        # ##: Commit the move, the snapshot now describes the previous turn.
        self._board = result.board
        self._score += result.score
        self._snapshot = snapshot

        spawned = spawn_tile(self._board, rng=self._rng, spawn_probs=self.config.spawn_table)
        self._persist()

        if is_terminal(self._board):
            self._status = GameStatus.ENDED
            logger.info('Game over with score %d', self._score)

        logger.debug('Moved %s, score %d (+%d)', direction.value, self._score, result.score)
        return MoveOutcome(True, result.score, before, self._board.copy(), result.events, spawned, self.is_ended)

    def undo(self) -> bool:
        """
        Restore the board and score saved before the last move.

        Returns
        -------
        bool
            True if a move was undone. Only one move can be undone, and none once the
            game has ended.
        """
        if self.is_ended or self._snapshot is None:
            return False

        self._previous_board = self._board.copy()
        self._board = self._snapshot.board.copy()
        self._score = self._snapshot.score
        self._snapshot = None
        self._persist()
        logger.debug('Undo, score back to %d', self._score)
        return True

    def submit_score(self, name: str) -> LeaderboardEntry | None:
        """
        Record the final score under a player name.

        Parameters
        ----------
        name : str
            Player name, trimmed before use.

        Returns
        -------
        LeaderboardEntry or None
            The new entry, or None when the game is not over, the name is empty or
            the score of this game was already submitted.
        """
        if not self.is_ended or self._submitted:
            return None

        entry = self._leaderboard.submit(name, self._score)
        if entry is not None:
            self._submitted = True
        return entry

    def dispatch(self, command: str, *args):
        """
        Run an input command by name.

        Parameters
        ----------
        command : str
            One of ``COMMANDS``.
        *args
            The player name for ``submit-score``.

        Returns
        -------
        Any
            The return value of the matching method.

        Raises
        ------
        ValueError
            If the command is unknown.
        """
        if command not in self.COMMANDS:
            raise ValueError(f'Unknown command: {command!r}')

        if command in ('up', 'down', 'left', 'right'):
            return self.apply_move(command)
        if command == 'undo':
            return self.undo()
        if command == 'new-game':
            return self.new_game()
        return self.submit_score(*args)

    def render(self) -> None:
        """
        Render the game board. This method prints the current board and score to the console.
        """
        for row in self._board.to_list():
            print(' \t'.join(map(str, row)))
        print(f'Score: {self._score}')
