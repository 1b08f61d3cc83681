"""
Key-value storage media for persisted games and leaderboards.

Values are strings, as in browser local storage. ``MemoryStore`` keeps them in a dict,
``JsonFileStore`` writes one file per key inside a directory.
"""

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the storage medium cannot be read or written."""


class KeyValueStore(ABC):
    """Synchronous string key-value storage."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """
        Read the value stored under a key.

        Returns
        -------
        str or None
            The stored value, or None when the key is absent.

        Raises
        ------
        StorageError
            If the medium cannot be read.
        """

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous one.

        Raises
        ------
        StorageError
            If the medium cannot be written.
        """

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete a key, absent keys are ignored."""


class MemoryStore(KeyValueStore):
    """In-process store, lost when the process exits."""

    def __init__(self, items: dict[str, str] | None = None):
        self._items = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._items


class JsonFileStore(KeyValueStore):
    """
    Store each key as ``<directory>/<key>.json``.

    Writes go through a temporary file and a rename so that a crash never leaves a
    half-written value behind.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        name = re.sub(r'[^A-Za-z0-9_.-]', '_', key)
        return self.directory / f'{name}.json'

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        try:
            # ##>: Undecodable bytes are replaced, the JSON layer then rejects the value as corrupt.
            return path.read_bytes().decode('utf-8', errors='replace')
        except FileNotFoundError:
            return None
        except OSError as error:
            raise StorageError(f'Cannot read {path}: {error}') from error

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        temporary = path.with_name(path.name + '.tmp')
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            temporary.write_text(value, encoding='utf-8')
            temporary.replace(path)
        except OSError as error:
            raise StorageError(f'Cannot write {path}: {error}') from error
        logger.debug('Wrote %d characters to %s', len(value), path)

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as error:
            raise StorageError(f'Cannot remove {key}: {error}') from error
