"""Domain models - immutable data classes."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional


# Opaque identifier of a single physical key ("a", "F1", "space", ...)
Key = str


class SessionState(Enum):
    """Whether the controller has an image to act on."""
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


class CommandKind(Enum):
    """Every input the controller understands."""
    KEY_PRESS = "key-press"
    NEXT = "next"
    PREVIOUS = "previous"
    UNDO = "undo"
    BIND = "bind"
    UNBIND = "unbind"


class ErrorKind(Enum):
    """Failure categories reported to the surrounding application."""
    INVALID_DESTINATION = "invalid-destination"
    SOURCE_MISSING = "source-missing"
    DESTINATION_UNWRITABLE = "destination-unwritable"
    UNDO_CONFLICT = "undo-conflict"
    RESERVED_KEY = "reserved-key"
    NO_BINDING_FOR_KEY = "no-binding-for-key"


class VerifyMode(str, Enum):
    """How a cross-volume copy is checked before the original is deleted."""
    HASH = "hash"  # byte-identical (SHA-256)
    SIZE = "size"  # size and mtime only


@dataclass(frozen=True, slots=True)
class Binding:
    """A key assigned to a destination directory."""
    key: Key
    destination: Path


@dataclass(frozen=True, slots=True)
class ImageEntry:
    """A pending image file in the source folder."""
    source_path: Path
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def name(self) -> str:
        return self.source_path.name

    @property
    def extension(self) -> str:
        return self.source_path.suffix.lower()


@dataclass(frozen=True, slots=True)
class MoveResult:
    """Outcome of a single relocation."""
    source_path: Path
    final_path: Path
    cross_volume: bool = False

    @property
    def renamed(self) -> bool:
        """True when a collision forced a different filename."""
        return self.source_path.name != self.final_path.name


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """One reversible move, as kept on the history stack."""
    entry_id: str
    original_path: Path
    final_path: Path
    timestamp: datetime = field(default_factory=datetime.now)
    position: int = 0  # queue index the entry had when it was moved

    @property
    def source_name(self) -> str:
        return self.original_path.name


@dataclass(frozen=True, slots=True)
class Command:
    """A single input consumed synchronously by the controller."""
    kind: CommandKind
    key: Optional[Key] = None
    destination: Optional[Path] = None

    @classmethod
    def key_press(cls, key: Key) -> "Command":
        return cls(CommandKind.KEY_PRESS, key=key)

    @classmethod
    def next(cls) -> "Command":
        return cls(CommandKind.NEXT)

    @classmethod
    def previous(cls) -> "Command":
        return cls(CommandKind.PREVIOUS)

    @classmethod
    def undo(cls) -> "Command":
        return cls(CommandKind.UNDO)

    @classmethod
    def bind(cls, key: Key, destination: Path) -> "Command":
        return cls(CommandKind.BIND, key=key, destination=Path(destination))

    @classmethod
    def unbind(cls, key: Key) -> "Command":
        return cls(CommandKind.UNBIND, key=key)


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of the last command, for display."""
    command: CommandKind
    success: bool
    action: str = ""
    message: str = ""
    error_kind: Optional[ErrorKind] = None
    record: Optional[MoveRecord] = None

    @property
    def is_error(self) -> bool:
        return not self.success


@dataclass(frozen=True, slots=True)
class SessionView:
    """Read-only projection of the controller state.

    This is all a UI needs to render: it never owns session state,
    it polls ``SortController.view()`` or subscribes to updates.
    """
    state: SessionState
    current: Optional[ImageEntry]
    position: int
    total: int
    can_undo: bool
    last_outcome: Optional[Outcome] = None
    bindings: tuple[Binding, ...] = ()

    @property
    def is_exhausted(self) -> bool:
        return self.state == SessionState.EXHAUSTED
