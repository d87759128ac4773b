"""Service layer - the sorting engine."""
from .bindings import BindingTable
from .queue import ImageQueue
from .scanner import SourceScanner
from .mover import FileMover, unique_path
from .history import HistoryStack
from .keymap import KeyMap
from .controller import SortController
from .dispatcher import BackgroundDispatcher
from .recovery import JournalRecovery, RecoveryReport
from .session import SortSession

__all__ = [
    "BindingTable",
    "ImageQueue",
    "SourceScanner",
    "FileMover",
    "unique_path",
    "HistoryStack",
    "KeyMap",
    "SortController",
    "BackgroundDispatcher",
    "JournalRecovery",
    "RecoveryReport",
    "SortSession",
]
