"""Session context - wires a controller from settings.

Opens the session database, runs crash recovery, restores bindings and
history, scans the source folder and builds the controller. Everything is
closed again on exit.

Usage:
    with SortSession(settings) as session:
        view = session.controller.on_key_press("a")
"""
from __future__ import annotations

import logging
from typing import Optional

from ..core.config import SortSettings
from ..core.errors import SortError
from ..persistence.database import SQLiteSessionStore
from .bindings import BindingTable
from .controller import SortController
from .history import HistoryStack
from .keymap import KeyMap
from .mover import FileMover
from .queue import ImageQueue
from .recovery import JournalRecovery, RecoveryReport
from .scanner import SourceScanner


logger = logging.getLogger(__name__)


class SortSession:
    """Owns the store and controller for one source folder."""

    def __init__(self, settings: SortSettings, *, use_database: bool = True):
        """Initialize session.

        Args:
            settings: Session settings.
            use_database: If False, keep bindings and history in memory only.
        """
        self._settings = settings
        self._use_database = use_database
        self._store: Optional[SQLiteSessionStore] = None
        self._controller: Optional[SortController] = None
        self._keymap = KeyMap.from_settings(settings)
        self._recovery_report: Optional[RecoveryReport] = None

    @property
    def settings(self) -> SortSettings:
        return self._settings

    @property
    def keymap(self) -> KeyMap:
        return self._keymap

    @property
    def store(self) -> Optional[SQLiteSessionStore]:
        return self._store

    @property
    def recovery_report(self) -> Optional[RecoveryReport]:
        return self._recovery_report

    @property
    def controller(self) -> SortController:
        if self._controller is None:
            raise RuntimeError("Session is not open")
        return self._controller

    def open(self) -> SortController:
        if self._controller is not None:
            return self._controller

        settings = self._settings
        if not settings.source_dir.is_dir():
            raise NotADirectoryError(f"Source folder not found: {settings.source_dir}")

        if self._use_database:
            self._store = SQLiteSessionStore(settings.resolve_db_path())
            logger.info("Session database: %s", self._store.db_path)
            self._recovery_report = JournalRecovery(self._store, settings.verify_mode).recover()

        bindings = BindingTable(store=self._store, reserved_keys=self._keymap.reserved_keys)
        bindings.load()
        for key, destination in settings.bindings.items():
            try:
                bindings.bind(key, destination)
            except SortError as e:
                logger.warning("Skipping configured binding %r: %s", key, e)

        history_store = self._store if settings.persist_history else None
        history = HistoryStack(store=history_store, limit=settings.history_limit)
        history.load()

        entries = SourceScanner(settings.extensions).scan(settings.source_dir)
        logger.info("Found %d image(s) in %s", len(entries), settings.source_dir)

        self._controller = SortController(
            queue=ImageQueue(entries),
            bindings=bindings,
            mover=FileMover(journal=self._store, verify_mode=settings.verify_mode),
            history=history,
        )
        return self._controller

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None
        self._controller = None

    def __enter__(self) -> "SortSession":
        self.open()
        return self

    def __exit__(self, *args) -> None:
        self.close()
