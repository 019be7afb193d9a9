#!/usr/bin/env python3
"""
Run configuration for sdisk

Builds one immutable configuration value from the parsed command line.
Every pipeline stage receives it explicitly; nothing is read from globals
and nothing is persisted between runs.
"""

import argparse
import os
import pathlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_STALE_DAYS = 90
DEFAULT_TOP_COUNT = 20
DEFAULT_STALE_LIMIT = 100
TOP_SCAN_DEPTH = 3


class Command(Enum):
    """Subcommands understood by sdisk"""

    INFO = "info"
    TOP = "top"
    STALE = "stale"
    CLEAN = "clean"


@dataclass(frozen=True)
class SdiskConfig:
    """Configuration for a single sdisk invocation"""

    command: Command
    roots: tuple[pathlib.Path, ...] = ()
    stale_days: int = DEFAULT_STALE_DAYS
    limit: int = DEFAULT_STALE_LIMIT
    interactive: bool = True
    assume_yes: bool = False
    dry_run: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "SdiskConfig":
        """Create from parsed command line arguments

        Resolving the default root calls os.getcwd(), which raises OSError
        when the working directory no longer exists.
        """
        command = Command(args.command or Command.INFO.value)

        roots: tuple[pathlib.Path, ...] = ()
        limit = DEFAULT_STALE_LIMIT
        if command is Command.TOP:
            limit = args.count
        elif command in (Command.STALE, Command.CLEAN):
            limit = args.limit
        if command is not Command.INFO:
            roots = tuple(collect_roots(args.path, args.paths))

        return cls(
            command=command,
            roots=roots,
            stale_days=args.stale_days,
            limit=limit,
            interactive=not args.non_interactive,
            assume_yes=args.yes,
            dry_run=args.dry_run,
        )


def collect_roots(path: Optional[pathlib.Path], extra: list[pathlib.Path]) -> list[pathlib.Path]:
    """Combine the --path flag and positional paths into an ordered root list

    Args:
        path: Value of the global --path flag, if given
        extra: Positional paths of the subcommand

    Returns:
        Roots in the order given with duplicates removed; the current working
        directory when no root was given at all
    """
    roots: list[pathlib.Path] = []
    if path is not None:
        roots.append(path)
    for candidate in extra or []:
        if candidate not in roots:
            roots.append(candidate)
    if not roots:
        roots.append(pathlib.Path(os.getcwd()))
    return roots
