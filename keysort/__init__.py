"""Keystroke-driven image sorting.

Triage a folder of images one at a time, sending each to a destination
folder with a single key press, with multi-step undo.
"""

__version__ = "0.3.0"

# Core exports
from .core.config import SortSettings, load_settings
from .core.models import (
    Binding,
    ImageEntry,
    MoveRecord,
    MoveResult,
    Command,
    CommandKind,
    SessionState,
    ErrorKind,
    Outcome,
    SessionView,
    VerifyMode,
)
from .core.errors import (
    SortError,
    InvalidDestination,
    SourceMissing,
    DestinationUnwritable,
    UndoConflict,
    ReservedKey,
)

# Service exports
from .services.bindings import BindingTable
from .services.queue import ImageQueue
from .services.scanner import SourceScanner
from .services.mover import FileMover
from .services.history import HistoryStack
from .services.keymap import KeyMap
from .services.controller import SortController
from .services.dispatcher import BackgroundDispatcher
from .services.recovery import JournalRecovery
from .services.session import SortSession

# Persistence exports
from .persistence.database import SQLiteSessionStore

# Logging exports
from .logging.rich_logger import RichSessionReporter

__all__ = [
    # Core
    "SortSettings",
    "load_settings",
    "Binding",
    "ImageEntry",
    "MoveRecord",
    "MoveResult",
    "Command",
    "CommandKind",
    "SessionState",
    "ErrorKind",
    "Outcome",
    "SessionView",
    "VerifyMode",
    "SortError",
    "InvalidDestination",
    "SourceMissing",
    "DestinationUnwritable",
    "UndoConflict",
    "ReservedKey",
    # Services
    "BindingTable",
    "ImageQueue",
    "SourceScanner",
    "FileMover",
    "HistoryStack",
    "KeyMap",
    "SortController",
    "BackgroundDispatcher",
    "JournalRecovery",
    "SortSession",
    # Persistence
    "SQLiteSessionStore",
    # Logging
    "RichSessionReporter",
]
