"""CLI with subcommands: sort, bind, unbind, bindings, recover."""
from __future__ import annotations

import argparse
import shlex
import sys
from pathlib import Path
from typing import Optional

from .core.config import SortSettings, load_settings
from .core.errors import SortError
from .logging.rich_logger import QuietSessionReporter, RichSessionReporter, setup_logging


QUIT_COMMANDS = {":q", ":quit", ":exit"}

HELP_TEXT = """\
Type a bound key and press Enter to move the current image.
  {next_key} next image, {previous_key} previous image, {undo_key} undo last move
  :bind KEY DIR   bind KEY to folder DIR
  :unbind KEY     remove a binding
  :bindings       show bindings
  :help           show this help
  :q              quit"""


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="keysort",
        description="Sort a folder of images into other folders, one keystroke per image.",
    )

    # Global options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON settings file (CLI flags override its values)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ============ SORT command ============
    sort_parser = subparsers.add_parser(
        "sort",
        help="Interactively sort the images of a folder",
    )
    _add_source_args(sort_parser)
    sort_parser.add_argument(
        "--bind",
        dest="bindings",
        action="append",
        default=[],
        metavar="KEY=DIR",
        help="Bind KEY to folder DIR and save it in the session database (repeatable)",
    )
    sort_parser.add_argument(
        "--history-limit",
        type=int,
        default=None,
        help="Maximum number of undoable moves (default: unlimited)",
    )
    sort_parser.add_argument(
        "--verify",
        choices=["hash", "size"],
        default=None,
        help="Check for moves across drives (default: hash)",
    )
    sort_parser.add_argument(
        "--no-history",
        action="store_true",
        help="Do not keep undo history between sessions",
    )

    # ============ BIND command ============
    bind_parser = subparsers.add_parser(
        "bind",
        help="Bind a key to a destination folder",
    )
    _add_source_args(bind_parser)
    bind_parser.add_argument("key", help="Key to bind")
    bind_parser.add_argument("destination", type=Path, help="Destination folder")

    # ============ UNBIND command ============
    unbind_parser = subparsers.add_parser(
        "unbind",
        help="Remove a key binding",
    )
    _add_source_args(unbind_parser)
    unbind_parser.add_argument("key", help="Key to unbind")

    # ============ BINDINGS command ============
    bindings_parser = subparsers.add_parser(
        "bindings",
        help="List key bindings",
    )
    _add_source_args(bindings_parser)

    # ============ RECOVER command ============
    recover_parser = subparsers.add_parser(
        "recover",
        help="Finish or roll back moves interrupted by a crash",
    )
    _add_source_args(recover_parser)

    return parser


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "source",
        type=Path,
        help="Folder with the images to sort",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Session database (default: SOURCE/.keysort.sqlite)",
    )


def parse_binding(value: str) -> tuple[str, Path]:
    """Split a ``KEY=DIR`` argument."""
    key, sep, destination = value.partition("=")
    if not sep or not key or not destination:
        raise ValueError(f"Expected KEY=DIR, got {value!r}")
    return key, Path(destination)


def build_settings(args: argparse.Namespace) -> SortSettings:
    """Merge the config file with CLI flags."""
    overrides = {
        "source_dir": args.source,
        "db_path": args.db,
        "history_limit": getattr(args, "history_limit", None),
        "verify_mode": getattr(args, "verify", None),
    }
    if getattr(args, "no_history", False):
        overrides["persist_history"] = False
    cli_bindings = getattr(args, "bindings", None)
    if cli_bindings:
        overrides["bindings"] = dict(parse_binding(b) for b in cli_bindings)
    return load_settings(args.config, **overrides)


# ============ Command Handlers ============

def cmd_sort(args: argparse.Namespace, reporter) -> int:
    """Handle the sort command."""
    from .services.session import SortSession

    settings = build_settings(args)

    with SortSession(settings) as session:
        controller = session.controller
        report = session.recovery_report
        if report is not None:
            reporter.print_recovery_info(report.cleaned, report.completed, report.unresolved)

        reporter.print_header(f"keysort: {settings.source_dir}")
        reporter.print_bindings(controller.bindings.bindings())
        help_text = HELP_TEXT.format(
            next_key=settings.next_key,
            previous_key=settings.previous_key,
            undo_key=settings.undo_key,
        )
        reporter.info(help_text)

        view = controller.view()
        while True:
            reporter.print_view(view)
            try:
                line = reporter_input(reporter)
            except EOFError:
                break

            line = line.strip()
            if not line:
                continue
            if line in QUIT_COMMANDS:
                break
            if line.startswith(":"):
                view = run_inline_command(line, controller, reporter, help_text)
                continue

            view = controller.dispatch(session.keymap.translate(line))
            reporter.print_outcome(view.last_outcome)

        reporter.info(f"{view.total} image(s) left in {settings.source_dir}")
    return 0


def reporter_input(reporter) -> str:
    """Read one line of input, through the Rich console when available."""
    console = getattr(reporter, "console", None)
    if console is not None:
        return console.input("[bold]key>[/bold] ")
    return input("key> ")


def run_inline_command(line: str, controller, reporter, help_text: str):
    """Handle a ``:command`` typed during a sort session."""
    parts = shlex.split(line[1:])
    name, params = (parts[0], parts[1:]) if parts else ("", [])

    if name == "bind" and len(params) == 2:
        try:
            view = controller.bind(params[0], Path(params[1]))
        except SortError:
            view = controller.view()
        reporter.print_outcome(view.last_outcome)
        return view
    if name == "unbind" and len(params) == 1:
        view = controller.unbind(params[0])
        reporter.print_outcome(view.last_outcome)
        return view
    if name == "bindings":
        reporter.print_bindings(controller.bindings.bindings())
    elif name == "help":
        reporter.info(help_text)
    else:
        reporter.warning(f"Unknown command: {line}")
    return controller.view()


def cmd_bind(args: argparse.Namespace, reporter) -> int:
    """Handle the bind command."""
    from .persistence.database import SQLiteSessionStore
    from .services.bindings import BindingTable
    from .services.keymap import KeyMap

    settings = build_settings(args)
    keymap = KeyMap.from_settings(settings)

    with SQLiteSessionStore(settings.resolve_db_path()) as store:
        table = BindingTable(store=store, reserved_keys=keymap.reserved_keys)
        try:
            table.bind(args.key, args.destination)
        except SortError as e:
            reporter.error(str(e))
            return 1
        binding = table.resolve(args.key)
        assert binding is not None
        reporter.success(f"{binding.key} -> {binding.destination}")
    return 0


def cmd_unbind(args: argparse.Namespace, reporter) -> int:
    """Handle the unbind command."""
    from .persistence.database import SQLiteSessionStore
    from .services.bindings import BindingTable

    settings = build_settings(args)

    with SQLiteSessionStore(settings.resolve_db_path()) as store:
        table = BindingTable(store=store)
        table.load()
        if args.key not in table:
            reporter.warning(f"Key {args.key!r} is not bound")
            return 0
        table.unbind(args.key)
        reporter.success(f"Unbound {args.key!r}")
    return 0


def cmd_bindings(args: argparse.Namespace, reporter) -> int:
    """Handle the bindings command."""
    from .persistence.database import SQLiteSessionStore
    from .services.bindings import BindingTable

    settings = build_settings(args)

    with SQLiteSessionStore(settings.resolve_db_path()) as store:
        table = BindingTable(store=store)
        table.load()
        reporter.print_bindings(table.bindings())
    return 0


def cmd_recover(args: argparse.Namespace, reporter) -> int:
    """Handle the recover command."""
    from .persistence.database import SQLiteSessionStore
    from .services.recovery import JournalRecovery

    settings = build_settings(args)

    with SQLiteSessionStore(settings.resolve_db_path()) as store:
        recovery = JournalRecovery(store, settings.verify_mode)
        pending = recovery.pending_count()
        if pending == 0:
            reporter.info("No interrupted moves found")
            return 0
        report = recovery.recover()
        reporter.print_recovery_info(report.cleaned, report.completed, report.unresolved)
    return 1 if report.unresolved else 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=getattr(args, "verbose", False))

    # Create reporter
    if getattr(args, "quiet", False):
        reporter = QuietSessionReporter()
    else:
        reporter = RichSessionReporter(verbose=getattr(args, "verbose", False))

    # No command specified - show help
    if not args.command:
        parser.print_help()
        return 0

    handlers = {
        "sort": cmd_sort,
        "bind": cmd_bind,
        "unbind": cmd_unbind,
        "bindings": cmd_bindings,
        "recover": cmd_recover,
    }

    # Dispatch to command handler
    try:
        handler = handlers.get(args.command)
        if handler is None:
            reporter.error(f"Unknown command: {args.command}")
            return 1
        return handler(args, reporter)

    except KeyboardInterrupt:
        # Clean exit on Ctrl+C - no stack trace
        return 130
    except Exception as e:
        reporter.error(f"Error: {e}")
        if getattr(args, "verbose", False):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
