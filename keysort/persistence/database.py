"""SQLite-based session store."""
from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..core.models import MoveRecord


@dataclass
class PendingOperation:
    """A pending file operation for crash recovery."""
    id: int
    source_path: str
    target_path: str
    operation: str
    created_at: datetime


class SQLiteSessionStore:
    """SQLite implementation of the binding, history and journal stores.

    One database per source folder. The connection may be used from the
    dispatcher's worker thread; callers serialize access.
    """

    def __init__(self, db_path: Path):
        """Initialize store with database path.

        Args:
            db_path: Path to SQLite database file.
        """
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._init_database()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _init_database(self) -> None:
        """Create tables if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row

        cursor = self._conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS bindings (
                key TEXT PRIMARY KEY,
                destination TEXT NOT NULL,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                entry_id TEXT NOT NULL,
                original_path TEXT NOT NULL,
                final_path TEXT NOT NULL,
                position INTEGER NOT NULL DEFAULT 0,
                timestamp TEXT NOT NULL
            )
        """)

        # Pending operations for crash recovery
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS pending_operations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                source_path TEXT NOT NULL,
                target_path TEXT,
                operation TEXT NOT NULL,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

        self._conn.commit()

    # --- Bindings ---

    def save_binding(self, key: str, destination: Path) -> None:
        """Insert or replace a binding."""
        assert self._conn is not None
        self._conn.execute("""
            INSERT INTO bindings (key, destination, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET
                destination = excluded.destination,
                updated_at = CURRENT_TIMESTAMP
        """, (key, str(destination)))
        self._conn.commit()

    def delete_binding(self, key: str) -> None:
        """Remove a binding if present."""
        assert self._conn is not None
        self._conn.execute("DELETE FROM bindings WHERE key = ?", (key,))
        self._conn.commit()

    def load_bindings(self) -> dict[str, Path]:
        """Get all stored bindings."""
        assert self._conn is not None
        cursor = self._conn.execute("SELECT key, destination FROM bindings ORDER BY key")
        return {row["key"]: Path(row["destination"]) for row in cursor.fetchall()}

    # --- History ---

    def push_record(self, record: MoveRecord) -> None:
        """Append a move record."""
        assert self._conn is not None
        self._conn.execute("""
            INSERT INTO history (entry_id, original_path, final_path, position, timestamp)
            VALUES (?, ?, ?, ?, ?)
        """, (
            record.entry_id,
            str(record.original_path),
            str(record.final_path),
            record.position,
            record.timestamp.isoformat(),
        ))
        self._conn.commit()

    def pop_record(self, entry_id: str) -> None:
        """Delete the newest record for an entry."""
        assert self._conn is not None
        self._conn.execute("""
            DELETE FROM history WHERE id = (
                SELECT MAX(id) FROM history WHERE entry_id = ?
            )
        """, (entry_id,))
        self._conn.commit()

    def load_history(self) -> list[MoveRecord]:
        """Get all records, oldest first."""
        assert self._conn is not None
        cursor = self._conn.execute("SELECT * FROM history ORDER BY id")
        return [self._row_to_record(row) for row in cursor.fetchall()]

    def trim_history(self, keep: int) -> None:
        """Drop all but the newest ``keep`` records."""
        assert self._conn is not None
        self._conn.execute("""
            DELETE FROM history WHERE id NOT IN (
                SELECT id FROM history ORDER BY id DESC LIMIT ?
            )
        """, (keep,))
        self._conn.commit()

    def clear_history(self) -> int:
        """Clear all move records."""
        assert self._conn is not None
        cursor = self._conn.execute("DELETE FROM history")
        count = cursor.rowcount
        self._conn.commit()
        return count

    # --- Pending operations ---

    def add_pending_operation(self, source: str, target: str, op: str) -> int:
        """Track a pending operation for crash recovery."""
        assert self._conn is not None
        cursor = self._conn.cursor()
        cursor.execute("""
            INSERT INTO pending_operations (source_path, target_path, operation)
            VALUES (?, ?, ?)
        """, (source, target, op))
        self._conn.commit()
        return cursor.lastrowid or 0

    def complete_pending_operation(self, op_id: int) -> None:
        """Mark operation as complete."""
        assert self._conn is not None
        self._conn.execute("DELETE FROM pending_operations WHERE id = ?", (op_id,))
        self._conn.commit()

    def get_pending_operations(self) -> list[PendingOperation]:
        """Get all pending operations."""
        assert self._conn is not None
        cursor = self._conn.execute("SELECT * FROM pending_operations ORDER BY id")
        return [
            PendingOperation(
                id=row["id"],
                source_path=row["source_path"],
                target_path=row["target_path"] or "",
                operation=row["operation"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in cursor.fetchall()
        ]

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _row_to_record(self, row: sqlite3.Row) -> MoveRecord:
        """Convert database row to MoveRecord."""
        return MoveRecord(
            entry_id=row["entry_id"],
            original_path=Path(row["original_path"]),
            final_path=Path(row["final_path"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
            position=row["position"],
        )

    def __enter__(self) -> "SQLiteSessionStore":
        return self

    def __exit__(self, *args) -> None:
        self.close()
