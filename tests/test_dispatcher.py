"""Tests for background command execution."""
import threading
import time
import pytest
from pathlib import Path

from keysort.core.models import Command, SessionState
from keysort.services.bindings import BindingTable
from keysort.services.controller import SortController
from keysort.services.dispatcher import BackgroundDispatcher
from keysort.services.mover import FileMover
from keysort.services.queue import ImageQueue
from keysort.services.scanner import SourceScanner
from .fixtures import SortWorkspace


class SlowMover(FileMover):
    """Mover that records how many moves overlap."""

    def __init__(self):
        super().__init__()
        self.active = 0
        self.max_active = 0
        self._guard = threading.Lock()

    def move(self, source_path, destination_dir):
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            time.sleep(0.01)
            return super().move(source_path, destination_dir)
        finally:
            with self._guard:
                self.active -= 1


class TestBackgroundDispatcher:
    """Tests for BackgroundDispatcher."""

    @pytest.fixture
    def workspace(self, tmp_path: Path) -> SortWorkspace:
        return SortWorkspace(tmp_path, images=["a.png", "b.png", "c.png", "d.png"])

    @pytest.fixture
    def mover(self):
        return SlowMover()

    @pytest.fixture
    def controller(self, workspace, mover):
        table = BindingTable()
        table.bind("a", workspace.dest("dest1"))
        return SortController(
            queue=ImageQueue(SourceScanner().scan(workspace.source)),
            bindings=table,
            mover=mover,
        )

    def test_commands_run_in_order(self, controller):
        """Test submitted commands complete in arrival order."""
        with BackgroundDispatcher(controller) as dispatcher:
            futures = [dispatcher.submit(Command.key_press("a")) for _ in range(4)]
            views = [f.result(timeout=5) for f in futures]

        assert [v.total for v in views] == [3, 2, 1, 0]
        assert views[-1].state == SessionState.EXHAUSTED

    def test_single_flight(self, controller, mover):
        """Test moves never overlap, even with concurrent submitters."""
        with BackgroundDispatcher(controller) as dispatcher:
            futures = []
            threads = [
                threading.Thread(target=lambda: futures.append(dispatcher.submit(Command.key_press("a"))))
                for _ in range(4)
            ]
            for t in threads:
                t.start()
            for t in threads:
                t.join()
            for f in futures:
                f.result(timeout=5)

        assert mover.max_active == 1

    def test_direct_dispatch_is_serialized(self, controller, mover):
        """Test the controller lock serializes callers on separate threads."""
        threads = [threading.Thread(target=controller.on_key_press, args=("a",)) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert mover.max_active == 1
        assert controller.view().total == 0
        assert len(controller.history) == 4

    def test_submit_after_close(self, controller):
        dispatcher = BackgroundDispatcher(controller)
        dispatcher.close()
        with pytest.raises(RuntimeError):
            dispatcher.submit(Command.next())

    def test_failure_is_reported_in_view(self, controller, workspace):
        workspace.dest("dest1").rmdir()
        with BackgroundDispatcher(controller) as dispatcher:
            view = dispatcher.submit(Command.key_press("a")).result(timeout=5)
        assert view.last_outcome.success is False
        assert view.total == 4
