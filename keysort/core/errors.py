"""Errors raised by the sorting engine.

Each class carries the ``ErrorKind`` the controller reports outward, so a
caught error can be turned into an ``Outcome`` without inspecting its type.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from .models import ErrorKind


class SortError(Exception):
    """Base class for recoverable sorting failures."""

    kind: ErrorKind

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class InvalidDestination(SortError):
    """Destination does not exist or is not a directory (checked at bind time)."""

    kind = ErrorKind.INVALID_DESTINATION


class SourceMissing(SortError):
    """The file to move vanished or was already moved externally."""

    kind = ErrorKind.SOURCE_MISSING


class DestinationUnwritable(SortError):
    """The destination was removed, is read-only, or the copy failed to verify."""

    kind = ErrorKind.DESTINATION_UNWRITABLE


class UndoConflict(SortError):
    """A file now occupies the path an undo would restore to."""

    kind = ErrorKind.UNDO_CONFLICT


class ReservedKey(SortError):
    """The key is empty or already used for navigation."""

    kind = ErrorKind.RESERVED_KEY


__all__ = [
    "SortError",
    "InvalidDestination",
    "SourceMissing",
    "DestinationUnwritable",
    "UndoConflict",
    "ReservedKey",
]
