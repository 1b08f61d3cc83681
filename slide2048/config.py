"""
Configuration of the 2048 rules engine.

Defaults reproduce the classic browser game: 4x4 board, 90% of spawned tiles are 2,
a top-10 leaderboard and storage keys shared with the web client.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

# ##>: The board is always 4x4. The value is exposed for readability, not for tuning.
BOARD_SIZE = 4

GAME_STATE_KEY = '2048-game-state'
LEADERBOARD_KEY = '2048-leaderboard'


@dataclass(frozen=True)
class GameConfig:
    """
    Configuration of a game session.

    Attributes are grouped by the component that consumes them.
    """

    # ##>: Tile spawner.
    tile_values: tuple[int, ...] = (2, 4)
    tile_probs: tuple[float, ...] = (0.9, 0.1)
    start_tiles: int = 2  # Tiles placed on a new game

    # ##>: Leaderboard.
    leaderboard_size: int = 10
    date_format: str = '%d.%m.%Y'  # DD.MM.YYYY as shown by the web client

    # ##>: Persistence.
    state_key: str = GAME_STATE_KEY
    leaderboard_key: str = LEADERBOARD_KEY
    storage_dir: Path | None = None  # None keeps everything in memory

    spawn_table: dict[int, float] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if len(self.tile_values) != len(self.tile_probs):
            raise ValueError('tile_values and tile_probs must have the same length')
        if abs(sum(self.tile_probs) - 1.0) > 1e-9:
            raise ValueError(f'tile_probs must sum to 1, got {sum(self.tile_probs)}')
        if self.leaderboard_size <= 0:
            raise ValueError(f'leaderboard_size must be > 0, got {self.leaderboard_size}')
        object.__setattr__(self, 'spawn_table', dict(zip(self.tile_values, self.tile_probs)))

    @classmethod
    def from_env(cls, **overrides) -> 'GameConfig':
        """
        Build a configuration, reading the storage directory from ``SLIDE2048_STORAGE_DIR``.

        Parameters
        ----------
        **overrides
            Explicit field values, they win over the environment.

        Returns
        -------
        GameConfig
            The resulting configuration.
        """
        storage_dir = os.environ.get('SLIDE2048_STORAGE_DIR')
        if storage_dir and 'storage_dir' not in overrides:
            overrides['storage_dir'] = Path(storage_dir).expanduser()
        return cls(**overrides)
