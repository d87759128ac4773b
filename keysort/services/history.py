"""Undo history of executed moves."""
from __future__ import annotations

import logging
from typing import Iterator, Optional

from ..core.models import MoveRecord
from ..core.protocols import HistoryStore


logger = logging.getLogger(__name__)


class HistoryStack:
    """LIFO log of moves, consumed by undo.

    Repeated undos pop successively older records. There is no redo.
    Unbounded unless ``limit`` is given, in which case the oldest records
    are dropped.
    """

    def __init__(
        self,
        store: Optional[HistoryStore] = None,
        limit: Optional[int] = None,
    ):
        if limit is not None and limit <= 0:
            raise ValueError("limit must be greater than zero")
        self._records: list[MoveRecord] = []
        self._store = store
        self._limit = limit

    @property
    def limit(self) -> Optional[int]:
        return self._limit

    def push(self, record: MoveRecord) -> None:
        """Append a record, evicting the oldest past the limit."""
        self._records.append(record)
        if self._store is not None:
            self._store.push_record(record)
        if self._limit is not None and len(self._records) > self._limit:
            dropped = len(self._records) - self._limit
            del self._records[:dropped]
            if self._store is not None:
                self._store.trim_history(self._limit)
            logger.debug("History limit reached, dropped %d record(s)", dropped)

    def pop_last(self) -> Optional[MoveRecord]:
        """Remove and return the most recent record."""
        if not self._records:
            return None
        record = self._records.pop()
        if self._store is not None:
            self._store.pop_record(record.entry_id)
        return record

    def peek(self) -> Optional[MoveRecord]:
        """Most recent record, without removing it."""
        return self._records[-1] if self._records else None

    def load(self) -> int:
        """Rehydrate records from the store.

        Returns:
            Number of records loaded.
        """
        if self._store is None:
            return 0
        records = self._store.load_history()
        if self._limit is not None and len(records) > self._limit:
            records = records[-self._limit:]
            self._store.trim_history(self._limit)
        self._records = list(records)
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __iter__(self) -> Iterator[MoveRecord]:
        """Iterate newest first."""
        return iter(reversed(list(self._records)))
