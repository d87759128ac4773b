"""Background execution of controller commands."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from ..core.models import Command, SessionView
from .controller import SortController


logger = logging.getLogger(__name__)


class BackgroundDispatcher:
    """Runs commands off the UI thread, one at a time, in arrival order.

    Uses a single worker so moves never overlap. There is no cancellation:
    a submitted command runs to completion or failure.

    Usage:
        with BackgroundDispatcher(controller) as dispatcher:
            future = dispatcher.submit(Command.key_press("a"))
            view = future.result()
    """

    def __init__(self, controller: SortController):
        self._controller = controller
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="keysort")
        self._closed = False

    def submit(self, command: Command) -> "Future[SessionView]":
        """Queue a command; the future resolves to the view after it ran."""
        if self._closed:
            raise RuntimeError("Dispatcher is closed")
        return self._executor.submit(self._controller.dispatch, command)

    def close(self, wait: bool = True) -> None:
        """Stop accepting commands and wait for queued ones to finish."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait)
        logger.debug("Dispatcher closed")

    def __enter__(self) -> "BackgroundDispatcher":
        return self

    def __exit__(self, *args) -> None:
        self.close()
