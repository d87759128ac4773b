"""Ordered, navigable queue of pending images."""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from ..core.models import ImageEntry


logger = logging.getLogger(__name__)


class ImageQueue:
    """Pending image entries plus a cursor.

    The cursor is always a valid index or ``len(queue)``, the one-past-end
    sentinel meaning "exhausted". Navigating past either end is a no-op.
    """

    def __init__(self, entries: Iterable[ImageEntry] = ()):
        self._entries: list[ImageEntry] = list(entries)
        self._cursor = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def is_exhausted(self) -> bool:
        return self._cursor >= len(self._entries)

    def current(self) -> Optional[ImageEntry]:
        """Entry at the cursor, or None if exhausted or empty."""
        if self.is_exhausted:
            return None
        return self._entries[self._cursor]

    def advance(self) -> None:
        """Move to the next entry; past the last one the queue is exhausted."""
        if self._cursor < len(self._entries):
            self._cursor += 1

    def retreat(self) -> None:
        """Move to the previous entry, clamped at the first."""
        if self._cursor > 0:
            self._cursor -= 1

    def index_of(self, entry_id: str) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        return None

    def remove(self, entry_id: str) -> Optional[int]:
        """Remove an entry, keeping ``current()`` on the same pending item.

        Removing the current entry leaves the cursor on what was the next
        entry. Removing an entry before the cursor shifts the cursor back.

        Returns:
            Index the entry had, or None if it was not queued.
        """
        index = self.index_of(entry_id)
        if index is None:
            return None
        del self._entries[index]
        if index < self._cursor:
            self._cursor -= 1
        self._cursor = min(self._cursor, len(self._entries))
        return index

    def reinsert(self, entry: ImageEntry, position: int) -> int:
        """Put an entry back and point the cursor at it.

        Args:
            entry: Entry to restore.
            position: Its original index; clamped to the current length.

        Returns:
            Index the entry now has.
        """
        existing = self.index_of(entry.id)
        if existing is not None:
            self._cursor = existing
            return existing
        position = max(0, min(position, len(self._entries)))
        self._entries.insert(position, entry)
        self._cursor = position
        logger.debug("Reinserted %s at %d", entry.name, position)
        return position

    def append(self, entry: ImageEntry) -> None:
        """Add a newly discovered entry at the end.

        An exhausted queue becomes active again on the appended entry.
        """
        if self.index_of(entry.id) is None:
            self._entries.append(entry)

    def entries(self) -> tuple[ImageEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ImageEntry]:
        return iter(list(self._entries))
