"""Tests for the SQLite session store."""
import pytest
from pathlib import Path
from datetime import datetime

from keysort.core.models import MoveRecord
from keysort.persistence.database import SQLiteSessionStore, PendingOperation


class TestSQLiteSessionStore:
    """Tests for SQLite store."""

    @pytest.fixture
    def db_path(self, tmp_path: Path) -> Path:
        """Get a test database path."""
        return tmp_path / "test.db"

    @pytest.fixture
    def store(self, db_path: Path):
        """Create a store instance."""
        store = SQLiteSessionStore(db_path)
        yield store
        store.close()

    def test_create_database(self, db_path):
        """Test database is created."""
        store = SQLiteSessionStore(db_path)
        assert db_path.exists()
        store.close()

    def test_creates_parent_folder(self, tmp_path):
        store = SQLiteSessionStore(tmp_path / "nested" / "dir" / "test.db")
        assert (tmp_path / "nested" / "dir" / "test.db").exists()
        store.close()

    def test_bindings(self, store):
        """Test saving, replacing and deleting bindings."""
        store.save_binding("a", Path("/one"))
        store.save_binding("b", Path("/two"))
        store.save_binding("a", Path("/three"))

        assert store.load_bindings() == {"a": Path("/three"), "b": Path("/two")}

        store.delete_binding("a")
        store.delete_binding("missing")
        assert store.load_bindings() == {"b": Path("/two")}

    def test_history_round_trip(self, store):
        """Test records keep their fields."""
        record = MoveRecord(
            entry_id="e1",
            original_path=Path("/src/a.png"),
            final_path=Path("/dest/a (2).png"),
            timestamp=datetime(2024, 1, 15, 10, 30),
            position=4,
        )
        store.push_record(record)

        assert store.load_history() == [record]

    def test_pop_record_removes_newest(self, store):
        first = MoveRecord("e1", Path("/src/a.png"), Path("/d1/a.png"))
        second = MoveRecord("e1", Path("/src/a.png"), Path("/d2/a.png"))
        store.push_record(first)
        store.push_record(second)

        store.pop_record("e1")

        assert [r.final_path for r in store.load_history()] == [Path("/d1/a.png")]

    def test_trim_and_clear_history(self, store):
        for name in "abc":
            store.push_record(MoveRecord(name, Path(f"/src/{name}"), Path(f"/d/{name}")))

        store.trim_history(2)
        assert [r.entry_id for r in store.load_history()] == ["b", "c"]

        assert store.clear_history() == 2
        assert store.load_history() == []

    def test_pending_operations(self, store):
        """Test journaling and completing operations."""
        op_id = store.add_pending_operation("/src/a.png", "/d/a.png", "move")

        pending = store.get_pending_operations()
        assert len(pending) == 1
        assert isinstance(pending[0], PendingOperation)
        assert pending[0].id == op_id
        assert pending[0].target_path == "/d/a.png"
        assert pending[0].operation == "move"
        assert isinstance(pending[0].created_at, datetime)

        store.complete_pending_operation(op_id)
        assert store.get_pending_operations() == []

    def test_survives_reopen(self, db_path):
        """Test data persists across connections."""
        with SQLiteSessionStore(db_path) as store:
            store.save_binding("a", Path("/one"))
            store.add_pending_operation("/s", "/t", "move")

        with SQLiteSessionStore(db_path) as store:
            assert store.load_bindings() == {"a": Path("/one")}
            assert len(store.get_pending_operations()) == 1

    def test_close_twice(self, db_path):
        store = SQLiteSessionStore(db_path)
        store.close()
        store.close()
