"""
Fixed 4x4 game board backed by a numpy array.
"""

from numpy import argwhere, array, array_equal, int64, ndarray, zeros

from slide2048.config import BOARD_SIZE

SHAPE = (BOARD_SIZE, BOARD_SIZE)


def _as_grid(grid) -> ndarray:
    """
    Convert a nested sequence or array into a validated 4x4 grid.

    Raises
    ------
    ValueError
        If the grid is not 4x4 or holds negative values.
    """
    try:
        cells = array(grid, dtype=int64)
    except OverflowError as error:
        raise ValueError(f'Board cells must fit in 64 bits: {error}') from None
    if cells.shape != SHAPE:
        raise ValueError(f'Board must be {BOARD_SIZE}x{BOARD_SIZE}, got shape {cells.shape}')
    if (cells < 0).any():
        raise ValueError('Board cells must be non-negative')
    return cells


class Board:
    """
    4x4 container of cell values, ``0`` meaning an empty cell.

    The underlying array never changes shape: single cells are written through
    ``board[row, col] = value`` and the whole grid through ``replace``.
    """

    __slots__ = ('_cells',)

    def __init__(self, grid=None):
        """
        Initialize the board.

        Parameters
        ----------
        grid : array_like, optional
            A 4x4 matrix of cell values. An all-zero board is created when omitted.
        """
        self._cells = zeros(SHAPE, dtype=int64) if grid is None else _as_grid(grid)

    @classmethod
    def from_list(cls, grid: list[list[int]]) -> 'Board':
        """Build a board from nested lists."""
        return cls(grid)

    @property
    def cells(self) -> ndarray:
        """Read-only view on the cell values."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    def __getitem__(self, position: tuple[int, int]) -> int:
        row, col = position
        return int(self._cells[row, col])

    def __setitem__(self, position: tuple[int, int], value: int):
        if value < 0:
            raise ValueError(f'Cell value must be non-negative, got {value}')
        row, col = position
        self._cells[row, col] = value

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return array_equal(self._cells, other._cells)

    def __repr__(self) -> str:
        return f'Board({self.to_list()!r})'

    def replace(self, grid) -> None:
        """
        Replace every cell at once.

        Parameters
        ----------
        grid : array_like
            A 4x4 matrix of cell values, copied into the board.
        """
        self._cells[...] = _as_grid(grid)

    def copy(self) -> 'Board':
        """Deep copy of the board."""
        return Board(self._cells.copy())

    def empty_cells(self) -> list[tuple[int, int]]:
        """Positions ``(row, col)`` of the empty cells, in row-major order."""
        return [(int(row), int(col)) for row, col in argwhere(self._cells == 0)]

    def is_full(self) -> bool:
        return bool(self._cells.all())

    def is_empty(self) -> bool:
        return not self._cells.any()

    def total(self) -> int:
        """Sum of every tile value."""
        return int(self._cells.sum())

    def max_tile(self) -> int:
        return int(self._cells.max())

    def to_list(self) -> list[list[int]]:
        """JSON-ready nested lists of plain ints."""
        return self._cells.tolist()
