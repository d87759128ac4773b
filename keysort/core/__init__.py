"""Core domain models and protocols."""
from .protocols import (
    Mover,
    BindingStore,
    HistoryStore,
    OperationJournal,
    SessionObserver,
)
from .models import (
    Key,
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
from .errors import (
    SortError,
    InvalidDestination,
    SourceMissing,
    DestinationUnwritable,
    UndoConflict,
    ReservedKey,
)
from .config import SortSettings, load_settings

__all__ = [
    # Protocols
    "Mover",
    "BindingStore",
    "HistoryStore",
    "OperationJournal",
    "SessionObserver",
    # Models
    "Key",
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
    # Errors
    "SortError",
    "InvalidDestination",
    "SourceMissing",
    "DestinationUnwritable",
    "UndoConflict",
    "ReservedKey",
    # Config
    "SortSettings",
    "load_settings",
]
