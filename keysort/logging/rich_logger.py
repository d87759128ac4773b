"""Rich-based session reporter implementation."""
from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.models import Binding, Outcome, SessionView


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Route stdlib logging through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or Console(stderr=True), show_path=verbose)],
        force=True,
    )


class RichSessionReporter:
    """Terminal output for a sorting session using Rich."""

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize the reporter.

        Args:
            verbose: Enable verbose output.
            quiet: Suppress all non-essential output.
            console: Console to write to (default: stderr).
        """
        self._console = console or Console(stderr=True)
        self._verbose = verbose
        self._quiet = quiet

    @property
    def console(self) -> Console:
        return self._console

    # --- Logging Methods ---

    def info(self, message: str) -> None:
        """Log an info message."""
        if not self._quiet:
            self._console.print(f"[blue]ℹ[/blue] {message}")

    def success(self, message: str) -> None:
        """Log a success message."""
        if not self._quiet:
            self._console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def error(self, message: str) -> None:
        """Log an error message."""
        self._console.print(f"[red]✗[/red] {message}", style="red")

    def debug(self, message: str) -> None:
        """Log a debug message (only in verbose mode)."""
        if self._verbose:
            self._console.print(f"[dim]  {message}[/dim]")

    # --- Specialized Output ---

    def print_header(self, title: str) -> None:
        """Print a styled header."""
        if self._quiet:
            return
        text = Text(title, style="bold cyan")
        self._console.print(Panel(text, border_style="cyan"))

    def print_bindings(self, bindings: tuple[Binding, ...]) -> None:
        """Print the key -> folder table."""
        if not bindings:
            self.info("No keys bound")
            return

        table = Table(title="Bindings", show_header=True, header_style="bold")
        table.add_column("Key", style="cyan", justify="center")
        table.add_column("Destination", style="white")
        for binding in bindings:
            style = None if binding.destination.is_dir() else "red"
            table.add_row(binding.key, str(binding.destination), style=style)
        self._console.print(table)

    def print_outcome(self, outcome: Optional[Outcome]) -> None:
        """Print the result of the last command."""
        if outcome is None:
            return
        if outcome.is_error:
            kind = outcome.error_kind.value if outcome.error_kind else "error"
            self.error(f"{kind}: {outcome.message}")
        elif outcome.action in ("moved", "restored", "bound", "unbound"):
            self.success(outcome.message)
        else:
            self.debug(outcome.message)

    def print_view(self, view: SessionView) -> None:
        """Print the current image and undo availability."""
        if self._quiet:
            return
        if view.current is None:
            remaining = f" ({view.total} pending)" if view.total else ""
            self._console.print(Panel(Text(f"Queue exhausted{remaining}", style="bold yellow")))
        else:
            title = f"{view.position}/{view.total}"
            body = Text(str(view.current.source_path), style="bold white")
            self._console.print(Panel(body, title=title, border_style="cyan"))
        undo = "[green]undo available[/green]" if view.can_undo else "[dim]nothing to undo[/dim]"
        self._console.print(f"  {undo}")

    def print_recovery_info(self, cleaned: int, completed: int, unresolved: list[str]) -> None:
        """Print crash recovery information."""
        if cleaned == 0 and completed == 0 and not unresolved:
            return

        self._console.print(
            f"[yellow]⚠ Recovered {cleaned + completed} interrupted move(s) "
            f"from previous run[/yellow] ({completed} finished, {cleaned} rolled back)"
        )
        for problem in unresolved:
            self._console.print(f"  [red]unresolved:[/red] {problem}")

    # --- Context Managers ---

    def __enter__(self) -> "RichSessionReporter":
        return self

    def __exit__(self, *args) -> None:
        pass


class QuietSessionReporter:
    """Minimal reporter that only shows errors."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        print(f"WARNING: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"ERROR: {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        pass

    def print_header(self, title: str) -> None:
        pass

    def print_bindings(self, bindings: tuple[Binding, ...]) -> None:
        pass

    def print_outcome(self, outcome: Optional[Outcome]) -> None:
        if outcome is not None and outcome.is_error:
            self.error(outcome.message)

    def print_view(self, view: SessionView) -> None:
        pass

    def print_recovery_info(self, cleaned: int, completed: int, unresolved: list[str]) -> None:
        for problem in unresolved:
            self.warning(problem)

    def __enter__(self) -> "QuietSessionReporter":
        return self

    def __exit__(self, *args) -> None:
        pass
