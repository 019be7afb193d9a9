#!/usr/bin/env python3
"""
sdisk - analyze disk usage and suggest cleanups

Reports volume capacity, ranks the largest entries under one or more roots,
finds files and directories that have not been used for a while, and removes
the ones you pick. Removal is permanent; use --dry-run to preview.

Usage:
    sdisk                               # Volume overview (same as `sdisk info`)
    sdisk top --count 10 ~/Downloads    # Largest entries up to 3 levels deep
    sdisk stale --stale-days 180 ~/src  # Entries unused for 180+ days
    sdisk clean --dry-run ~/src         # Show what clean would remove
    sdisk clean --non-interactive --yes # Remove every stale candidate
"""

import argparse
import contextlib
import dataclasses
import pathlib
import signal
import sys
import time
from typing import Iterable, Iterator, Optional

from rich.markup import escape

from auxiliary import format_bytes, format_path_for_display
from console_ui import ConsoleUI, PromptError
from disk_walker import Entry, dir_size, walk
from entry_ranking import age_days, is_stale, rank, stale_cutoff
from file_operations import FileRemover, RemovalResult, reclaimed_bytes, split_nested
from sdisk_config import (
    DEFAULT_STALE_DAYS,
    DEFAULT_STALE_LIMIT,
    DEFAULT_TOP_COUNT,
    TOP_SCAN_DEPTH,
    Command,
    SdiskConfig,
)
from selector import Selector
from volumes import list_volumes

__version__ = "0.1.0"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INPUT_ERROR = 3


def _display(path: pathlib.Path) -> str:
    return escape(format_path_for_display(str(path)))


# ---------------------------------------------------------------------------
# sdisk
# ---------------------------------------------------------------------------


class Sdisk:
    """Main application class: one instance runs one command"""

    def __init__(self, config: SdiskConfig, ui: Optional[ConsoleUI] = None):
        self.config = config
        self.ui = ui or ConsoleUI()
        self._shutdown_requested = False
        self._handlers = {
            Command.INFO: self.cmd_info,
            Command.TOP: self.cmd_top,
            Command.STALE: self.cmd_stale,
            Command.CLEAN: self.cmd_clean,
        }

    # -- signal handling ----------------------------------------------------

    def _signal_handler(self, signum, frame):
        if self._shutdown_requested:
            sys.exit(1)
        self._shutdown_requested = True
        self.ui.print_warning("\nStopping scan... press Ctrl+C again to force quit.")

    @contextlib.contextmanager
    def _graceful_interrupt(self) -> Iterator[None]:
        """Turn Ctrl+C during a scan into a request to stop with partial results"""
        previous = {sig: signal.signal(sig, self._signal_handler) for sig in (signal.SIGINT, signal.SIGTERM)}
        try:
            yield
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

    def _stop_requested(self) -> bool:
        return self._shutdown_requested

    # -- scanning ------------------------------------------------------------

    def _collect(self, entries: Iterable[Entry]) -> list[Entry]:
        """Drain a lazy entry sequence behind a spinner"""
        collected: list[Entry] = []
        progress = self.ui.create_activity_progress()
        with self._graceful_interrupt(), progress:
            task = progress.add_task("Scanning...", total=None)
            for entry in entries:
                collected.append(entry)
                if len(collected) % 500 == 0:
                    progress.update(task, description=f"Scanning... {len(collected):,} entries")

        if self._shutdown_requested:
            self.ui.print_warning(f"Scan interrupted, showing partial results ({len(collected):,} entries).")
        return collected

    def _stale_entries(self, cutoff: float) -> Iterator[Entry]:
        """Stale entries of an unbounded walk, directories sized by their contents"""
        for entry in walk(self.config.roots, should_stop=self._stop_requested):
            if not is_stale(entry, cutoff):
                continue
            if entry.is_dir:
                entry = dataclasses.replace(entry, size=dir_size(entry.path))
            yield entry

    # -- reporting -----------------------------------------------------------

    def _show_entries(self, title: str, entries: list[Entry], now: Optional[float] = None):
        columns = [
            ("#", {"justify": "right", "style": "dim"}),
            ("Size", {"justify": "right", "style": "yellow", "min_width": 10}),
            ("Type", {"justify": "center", "style": "dim"}),
        ]
        if now is not None:
            columns.append(("Age", {"justify": "right", "style": "cyan"}))
        columns.append(("Path", {"overflow": "fold"}))

        rows = []
        for i, entry in enumerate(entries, 1):
            row = [str(i), format_bytes(entry.size), "dir" if entry.is_dir else "file"]
            if now is not None:
                row.append(f"{age_days(entry, now)} days")
            row.append(_display(entry.path))
            rows.append(row)

        self.ui.print_table(title, columns, rows)

    # -- removal -------------------------------------------------------------

    def _report_removal(self, result: RemovalResult):
        if result.success:
            self.ui.print_success(f"Removed {_display(result.entry.path)}")
        else:
            self.ui.print_error(
                f"Failed to remove {_display(result.entry.path)}: {escape(result.error_message or 'unknown error')}"
            )

    def remove(self, entries: list[Entry]) -> bool:
        """Remove the selected entries; returns False if any removal failed"""
        entries, covered = split_nested(entries)
        for entry, ancestor in covered:
            self.ui.print_plain(f"Skipping {_display(entry.path)}, removed with {_display(ancestor.path)}")

        remover = FileRemover(report_callback=self._report_removal)
        successful, failed = remover.remove_batch(entries)

        self.ui.console.print()
        self.ui.show_operation_summary(
            [str(r.entry.path) for r in successful],
            [(str(r.entry.path), r.error_message or "") for r in failed],
            operation_name="removed",
        )
        if successful:
            self.ui.print_info(f"Reclaimed {format_bytes(reclaimed_bytes(successful))}")
        return not failed

    def _select_and_remove(self, candidates: list[Entry], label, prompt: str, question: str) -> bool:
        selector = Selector(
            self.ui,
            interactive=self.config.interactive,
            assume_yes=self.config.assume_yes,
            dry_run=self.config.dry_run,
            label=label,
            prompt=prompt,
            question=question,
        )
        outcome = selector.run(candidates)
        if not outcome.confirmed:
            return True
        return self.remove(outcome.selected)

    # -- commands ------------------------------------------------------------

    def cmd_info(self) -> bool:
        """Print total, used and free capacity for every mounted volume"""
        self.ui.print_header("Disk overview")
        volumes = list_volumes(
            on_error=lambda mount, e: self.ui.print_warning(f"Skipping {escape(mount)}: {escape(str(e))}")
        )
        if not volumes:
            self.ui.print_info("No volumes found.")
            return True

        self.ui.print_table(
            "",
            [
                ("Volume", {"style": "cyan"}),
                ("Mounted on", {"style": "dim"}),
                ("Total", {"justify": "right"}),
                ("Used", {"justify": "right", "style": "yellow"}),
                ("Free", {"justify": "right", "style": "green"}),
            ],
            [
                [
                    escape(v.name),
                    escape(v.mount_point),
                    format_bytes(v.total_bytes),
                    format_bytes(v.used_bytes),
                    format_bytes(v.available_bytes),
                ]
                for v in volumes
            ],
        )
        return True

    def cmd_top(self) -> bool:
        """List the largest entries near the surface of the roots"""
        for root in self.config.roots:
            self.ui.print_info(f"Scanning {_display(root)}")

        entries = self._collect(walk(self.config.roots, max_depth=TOP_SCAN_DEPTH, should_stop=self._stop_requested))
        top = rank(entries, self.config.limit)
        if not top:
            self.ui.print_info("No entries found.")
            return True

        self._show_entries(f"Top {len(top)} by size", top)

        # Without a terminal user to pick entries, top only reports
        if not self.config.interactive:
            return True

        return self._select_and_remove(
            top,
            label=lambda e: f"{format_bytes(e.size)}  {format_path_for_display(str(e.path))}",
            prompt="Select entries to delete",
            question="Delete selected entries?",
        )

    def cmd_stale(self) -> bool:
        """List entries unused for --stale-days and offer to remove them"""
        days = self.config.stale_days
        for root in self.config.roots:
            self.ui.print_info(f"Finding stale items in {_display(root)} (older than {days} days)")

        now = time.time()
        entries = self._collect(self._stale_entries(stale_cutoff(days, now)))
        candidates = rank(entries, self.config.limit)
        if not candidates:
            self.ui.print_info("No stale entries found.")
            return True

        self._show_entries(f"{len(candidates)} stale entries", candidates, now=now)
        return self._select_and_remove(
            candidates,
            label=lambda e: (
                f"{format_bytes(e.size)}  {format_path_for_display(str(e.path))}  ({age_days(e, now)} days)"
            ),
            prompt="Select items to delete",
            question="Delete the selected items?" if self.config.interactive else "Delete the above items?",
        )

    def cmd_clean(self) -> bool:
        """Same pipeline as stale; the name states the intent to delete"""
        return self.cmd_stale()

    def run(self) -> bool:
        return self._handlers[self.config.command]()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def _add_global_options(parser: argparse.ArgumentParser, suppress: bool = False):
    """Options accepted both before and after the subcommand

    Subcommand copies use SUPPRESS defaults so they never overwrite a value
    given before the subcommand.
    """

    def default(value):
        return argparse.SUPPRESS if suppress else value

    parser.add_argument(
        "-p", "--path", type=pathlib.Path, default=default(None), help="Root path to analyze (default: current directory)"
    )
    parser.add_argument(
        "--stale-days",
        type=_non_negative_int,
        default=default(DEFAULT_STALE_DAYS),
        help=f"Minimum days since last access to consider stale (default: {DEFAULT_STALE_DAYS})",
    )
    parser.add_argument(
        "--non-interactive", action="store_true", default=default(False), help="Run without the selection UI"
    )
    parser.add_argument("--yes", action="store_true", default=default(False), help="Assume yes for confirmations")
    parser.add_argument(
        "--dry-run", action="store_true", default=default(False), help="Show what would be removed, remove nothing"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sdisk",
        description="sdisk - analyze disk usage and suggest cleanups",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_global_options(parser)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    info_parser = subparsers.add_parser("info", help="Show disk overview (total/used/free per volume)")
    _add_global_options(info_parser, suppress=True)

    top_parser = subparsers.add_parser("top", help="Show the largest entries (3 levels deep)")
    top_parser.add_argument(
        "-c", "--count", type=_non_negative_int, default=DEFAULT_TOP_COUNT, help="Number of entries to show"
    )
    top_parser.add_argument("paths", nargs="*", type=pathlib.Path, metavar="PATH", help="Paths to analyze")
    _add_global_options(top_parser, suppress=True)

    for name, help_text in (
        ("stale", "List stale files and directories older than --stale-days"),
        ("clean", "Remove stale files and directories after confirmation"),
    ):
        stale_parser = subparsers.add_parser(name, help=help_text)
        stale_parser.add_argument(
            "-l", "--limit", type=_non_negative_int, default=DEFAULT_STALE_LIMIT, help="Show at most N items"
        )
        stale_parser.add_argument("paths", nargs="*", type=pathlib.Path, metavar="PATH", help="Paths to analyze")
        _add_global_options(stale_parser, suppress=True)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = SdiskConfig.from_args(args)
    except OSError as e:
        ConsoleUI().print_error(f"Cannot resolve the current directory: {e}")
        return EXIT_FAILURE

    app = Sdisk(config)
    try:
        success = app.run()
    except PromptError as e:
        app.ui.print_error(f"Aborting: {e}")
        return EXIT_INPUT_ERROR

    return EXIT_OK if success else EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
