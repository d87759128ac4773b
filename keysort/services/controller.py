"""Sort controller - the state machine driving a triage session.

Consumes ``Command`` values one at a time: key presses move the current
image into the bound folder, navigation moves the cursor, undo reverses the
most recent move. All mutable session state (queue, bindings, history) is
owned here; the UI only sees ``SessionView`` snapshots.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from ..core.errors import SortError, UndoConflict
from ..core.models import (
    Command,
    CommandKind,
    ImageEntry,
    Key,
    MoveRecord,
    Outcome,
    SessionState,
    SessionView,
)
from ..core.protocols import Mover, SessionObserver
from .bindings import BindingTable
from .history import HistoryStack
from .queue import ImageQueue


logger = logging.getLogger(__name__)


class SortController:
    """Orchestrates key -> binding -> move -> history -> queue.

    Commands are serialized by a lock so at most one move or undo is in
    flight; the view changes only once an operation has completed.
    Observers are called under that lock and must not dispatch commands.
    """

    def __init__(
        self,
        queue: ImageQueue,
        bindings: BindingTable,
        mover: Mover,
        history: Optional[HistoryStack] = None,
    ):
        self._queue = queue
        self._bindings = bindings
        self._mover = mover
        self._history = history if history is not None else HistoryStack()
        self._lock = threading.Lock()
        self._observers: list[SessionObserver] = []
        self._last_outcome: Optional[Outcome] = None

    # --- Read-only projections ---

    @property
    def state(self) -> SessionState:
        if self._queue.current() is None:
            return SessionState.EXHAUSTED
        return SessionState.ACTIVE

    @property
    def queue(self) -> ImageQueue:
        return self._queue

    @property
    def bindings(self) -> BindingTable:
        return self._bindings

    @property
    def history(self) -> HistoryStack:
        return self._history

    @property
    def last_outcome(self) -> Optional[Outcome]:
        return self._last_outcome

    def view(self) -> SessionView:
        """Snapshot of everything a UI renders."""
        current = self._queue.current()
        return SessionView(
            state=self.state,
            current=current,
            position=self._queue.cursor + 1 if current is not None else 0,
            total=len(self._queue),
            can_undo=bool(self._history),
            last_outcome=self._last_outcome,
            bindings=self._bindings.bindings(),
        )

    def subscribe(self, observer: SessionObserver) -> Callable[[], None]:
        """Call ``observer`` with the new view after every command.

        Returns:
            Function that removes the observer again.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # --- Commands ---

    def on_key_press(self, key: Key) -> SessionView:
        return self.dispatch(Command.key_press(key))

    def on_next(self) -> SessionView:
        return self.dispatch(Command.next())

    def on_previous(self) -> SessionView:
        return self.dispatch(Command.previous())

    def on_undo(self) -> SessionView:
        return self.dispatch(Command.undo())

    def bind(self, key: Key, destination: Path) -> SessionView:
        """Bind a key; raises InvalidDestination or ReservedKey on failure."""
        return self.dispatch(Command.bind(key, destination), raise_errors=True)

    def unbind(self, key: Key) -> SessionView:
        return self.dispatch(Command.unbind(key))

    def dispatch(self, command: Command, *, raise_errors: bool = False) -> SessionView:
        """Process one command to completion.

        Recoverable failures leave the session unchanged and are reported
        through ``view().last_outcome``.

        Args:
            command: Command to run.
            raise_errors: Re-raise the SortError after recording it.

        Returns:
            View after the command.
        """
        with self._lock:
            error: Optional[SortError] = None
            try:
                outcome = self._handle(command)
            except SortError as e:
                logger.warning("%s failed: %s", command.kind.value, e)
                outcome = Outcome(
                    command=command.kind,
                    success=False,
                    action="failed",
                    message=str(e),
                    error_kind=e.kind,
                )
                error = e

            self._last_outcome = outcome
            view = self.view()
            for observer in list(self._observers):
                observer(view)

        if error is not None and raise_errors:
            raise error
        return view

    def _handle(self, command: Command) -> Outcome:
        if command.kind == CommandKind.KEY_PRESS:
            assert command.key is not None
            return self._move_current(command.key)
        if command.kind == CommandKind.NEXT:
            self._queue.advance()
            return self._navigated(command.kind)
        if command.kind == CommandKind.PREVIOUS:
            self._queue.retreat()
            return self._navigated(command.kind)
        if command.kind == CommandKind.UNDO:
            return self._undo_last()
        if command.kind == CommandKind.BIND:
            assert command.key is not None and command.destination is not None
            self._bindings.bind(command.key, command.destination)
            binding = self._bindings.resolve(command.key)
            assert binding is not None
            return Outcome(
                command=command.kind,
                success=True,
                action="bound",
                message=f"{binding.key} -> {binding.destination}",
            )
        if command.kind == CommandKind.UNBIND:
            assert command.key is not None
            self._bindings.unbind(command.key)
            return Outcome(command=command.kind, success=True, action="unbound", message=command.key)
        raise ValueError(f"Unknown command: {command.kind}")

    def _move_current(self, key: Key) -> Outcome:
        entry = self._queue.current()
        if entry is None:
            return Outcome(CommandKind.KEY_PRESS, True, "ignored", "No image to sort")

        binding = self._bindings.resolve(key)
        if binding is None:
            logger.debug("No folder bound to %r", key)
            return Outcome(CommandKind.KEY_PRESS, True, "ignored", f"No folder bound to {key!r}")

        position = self._queue.cursor
        result = self._mover.move(entry.source_path, binding.destination)

        record = MoveRecord(
            entry_id=entry.id,
            original_path=entry.source_path,
            final_path=result.final_path,
            position=position,
        )
        self._history.push(record)
        self._queue.remove(entry.id)
        return Outcome(
            CommandKind.KEY_PRESS,
            True,
            "moved",
            f"{entry.name} -> {result.final_path}",
            record=record,
        )

    def _undo_last(self) -> Outcome:
        record = self._history.peek()
        if record is None:
            return Outcome(CommandKind.UNDO, True, "ignored", "Nothing to undo")

        try:
            self._mover.reverse(record)
        except UndoConflict:
            # Original path is occupied, the record can never apply again
            self._history.pop_last()
            raise
        self._history.pop_last()

        entry = ImageEntry(source_path=record.original_path, id=record.entry_id)
        self._queue.reinsert(entry, record.position)
        return Outcome(
            CommandKind.UNDO,
            True,
            "restored",
            f"{record.final_path} -> {record.original_path}",
            record=record,
        )

    def _navigated(self, kind: CommandKind) -> Outcome:
        current = self._queue.current()
        message = current.name if current is not None else "End of queue"
        logger.debug("Cursor at %d: %s", self._queue.cursor, message)
        return Outcome(kind, True, "navigated", message)
