"""Protocol definitions (interfaces) for dependency injection."""
from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Any, Protocol

from .models import MoveRecord, MoveResult, SessionView


class Mover(Protocol):
    """Interface for relocating single files.

    Implementations:
    - FileMover: rename on one volume, copy-verify-delete across volumes
    """

    @abstractmethod
    def move(self, source_path: Path, destination_dir: Path) -> MoveResult:
        """Move a file into a directory, never overwriting."""
        ...

    @abstractmethod
    def reverse(self, record: MoveRecord) -> None:
        """Move a file back to where a record says it came from."""
        ...


class BindingStore(Protocol):
    """Interface for persisting the key -> folder table."""

    @abstractmethod
    def save_binding(self, key: str, destination: Path) -> None:
        """Insert or replace a binding."""
        ...

    @abstractmethod
    def delete_binding(self, key: str) -> None:
        """Remove a binding if present."""
        ...

    @abstractmethod
    def load_bindings(self) -> dict[str, Path]:
        """Get all stored bindings."""
        ...


class HistoryStore(Protocol):
    """Interface for persisting move history."""

    @abstractmethod
    def push_record(self, record: MoveRecord) -> None:
        """Append a move record."""
        ...

    @abstractmethod
    def pop_record(self, entry_id: str) -> None:
        """Delete the newest record for an entry."""
        ...

    @abstractmethod
    def load_history(self) -> list[MoveRecord]:
        """Get all records, oldest first."""
        ...

    @abstractmethod
    def trim_history(self, keep: int) -> None:
        """Drop all but the newest ``keep`` records."""
        ...


class OperationJournal(Protocol):
    """Interface for crash-recovery bookkeeping of multi-step moves."""

    @abstractmethod
    def add_pending_operation(self, source: str, target: str, op: str) -> int:
        """Track a pending operation for crash recovery."""
        ...

    @abstractmethod
    def complete_pending_operation(self, op_id: int) -> None:
        """Mark operation as complete."""
        ...

    @abstractmethod
    def get_pending_operations(self) -> list[Any]:
        """Get all pending operations."""
        ...


class SessionObserver(Protocol):
    """Callback receiving the view after every processed command."""

    def __call__(self, view: SessionView) -> None:
        ...
