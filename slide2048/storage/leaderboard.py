"""
Ranked list of past scores, persisted under ``2048-leaderboard``.
"""

import json
import logging
from datetime import date
from typing import NamedTuple

from slide2048.config import LEADERBOARD_KEY
from slide2048.storage.kvstore import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class LeaderboardEntry(NamedTuple):
    """A saved score."""

    name: str
    score: int
    date: str

    def to_dict(self) -> dict:
        return {'name': self.name, 'score': self.score, 'date': self.date}


def _entry_from_dict(data) -> LeaderboardEntry | None:
    if not isinstance(data, dict):
        return None
    name, score, when = data.get('name'), data.get('score'), data.get('date', '')
    if not isinstance(name, str) or not name.strip():
        return None
    if isinstance(score, bool) or not isinstance(score, int):
        return None
    return LeaderboardEntry(name, score, str(when))


class Leaderboard:
    """
    Top scores, sorted by descending score and capped in size.

    Ties keep insertion order: an older entry ranks above a newer one with the same
    score, and a newcomer tying the last kept entry is not kept.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = LEADERBOARD_KEY,
        capacity: int = 10,
        date_format: str = '%d.%m.%Y',
    ):
        self._store = store
        self.key = key
        self.capacity = capacity
        self.date_format = date_format

    def _load(self) -> list[LeaderboardEntry]:
        """
        Read the ranking from the store.

        Raises
        ------
        StorageError
            If the store cannot be read. Malformed data yields an empty list.
        """
        payload = self._store.get_item(self.key)
        if payload is None:
            return []

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as error:
            logger.warning('Ignoring corrupt leaderboard: %s', error)
            return []
        if not isinstance(data, list):
            logger.warning('Ignoring leaderboard of type %s', type(data).__name__)
            return []

        entries = [entry for entry in map(_entry_from_dict, data) if entry is not None]
        return self._rank(entries)

    @property
    def entries(self) -> list[LeaderboardEntry]:
        """
        Current ranking read from the store.

        Returns
        -------
        list[LeaderboardEntry]
            Entries, best first. Unreadable or malformed data yields an empty list,
            malformed entries are skipped.
        """
        try:
            return self._load()
        except StorageError as error:
            logger.warning('Cannot read leaderboard: %s', error)
            return []

    def _rank(self, entries: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
        # ##: sorted() is stable, equal scores keep their order.
        return sorted(entries, key=lambda entry: entry.score, reverse=True)[: self.capacity]

    def qualifies(self, score: int) -> bool:
        """Whether a score would enter the ranking."""
        entries = self.entries
        return len(entries) < self.capacity or score > entries[-1].score

    def submit(self, name: str, score: int, when: date | None = None) -> LeaderboardEntry | None:
        """
        Add a score to the leaderboard.

        Parameters
        ----------
        name : str
            Player name, surrounding whitespace is trimmed.
        score : int
            The final score.
        when : date, optional
            Date of the game, today by default.

        Returns
        -------
        LeaderboardEntry or None
            The stored entry, or None when the name is empty.

        Notes
        -----
        The entry is appended even when it does not make the cut, the ranking then
        drops it. A storage failure is logged and the entry is still returned. When the
        stored ranking cannot be read, nothing is written so that it is not overwritten.
        """
        name = (name or '').strip()
        if not name:
            return None

        entry = LeaderboardEntry(name, int(score), (when or date.today()).strftime(self.date_format))
        try:
            entries = self._rank(self._load() + [entry])
            self._store.set_item(self.key, json.dumps([item.to_dict() for item in entries]))
        except StorageError as error:
            logger.warning('Leaderboard not saved: %s', error)
        logger.info('Leaderboard: %s scored %d', entry.name, entry.score)
        return entry

    def clear(self) -> None:
        self._store.remove_item(self.key)
