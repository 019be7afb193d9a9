#!/usr/bin/env python3
"""
Disk Walker Module for sdisk

Handles filesystem traversal and size aggregation. Walking is best-effort:
nodes whose metadata cannot be read are left out of the result instead of
failing the scan, and symbolic links are never followed.
"""

import os
import pathlib
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional

# Size sums saturate here instead of growing without bound
MAX_SIZE = 2**64 - 1


class EntryKind(Enum):
    """Kind of filesystem node, decides how it is removed"""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class Entry:
    """One filesystem node observed during a walk"""

    path: pathlib.Path
    size: int
    kind: EntryKind
    last_used: float

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


def _last_used(st: os.stat_result) -> float:
    """Access time when available, else modification time, else the epoch"""
    accessed = getattr(st, "st_atime", None)
    if accessed is not None:
        return accessed
    modified = getattr(st, "st_mtime", None)
    if modified is not None:
        return modified
    return 0.0


def entry_from_stat(path: pathlib.Path, st: os.stat_result) -> Entry:
    """Build an Entry from lstat() metadata"""
    kind = EntryKind.DIRECTORY if stat.S_ISDIR(st.st_mode) else EntryKind.FILE
    return Entry(path=path, size=max(st.st_size, 0), kind=kind, last_used=_last_used(st))


def _stat_entry(path: pathlib.Path) -> Optional[Entry]:
    try:
        return entry_from_stat(path, os.lstat(path))
    except OSError:
        return None


def _already_walked(real_path: pathlib.Path, walked: list[pathlib.Path]) -> bool:
    return any(real_path == seen or seen in real_path.parents for seen in walked)


def walk(
    roots: Iterable[pathlib.Path],
    max_depth: Optional[int] = None,
    should_stop: Optional[Callable[[], bool]] = None,
) -> Iterator[Entry]:
    """Lazily yield entries for every reachable node under the given roots

    Each node is reported once even when roots overlap: a root equal to or
    inside an earlier root is skipped, and an earlier root found inside a
    later one is not walked again. A root that is a symlink to a directory is
    reported as the link itself and its target's contents are walked.

    Args:
        roots: Starting paths; each root is yielded itself at depth 0
        max_depth: Deepest level to report; directories at this level are
            reported but not descended into. None walks the whole tree.
        should_stop: Optional callable polled between nodes; returning True
            ends the walk early with whatever was yielded so far

    Yields:
        Entry records in walk order
    """
    walked: list[pathlib.Path] = []
    for root in roots:
        if should_stop and should_stop():
            return

        root = pathlib.Path(root)
        root_entry = _stat_entry(root)
        if root_entry is None:
            continue
        real_root = pathlib.Path(os.path.realpath(root))
        if _already_walked(real_root, walked):
            continue
        walked.append(real_root)
        yield root_entry
        if max_depth == 0 or not os.path.isdir(root):
            continue

        root_depth = len(root.parts)
        for dirpath, dirnames, filenames in os.walk(root, topdown=True, followlinks=False):
            current = pathlib.Path(dirpath)
            real_current = real_root / current.relative_to(root)
            child_depth = len(current.parts) - root_depth + 1

            # Earlier roots nested in this one were reported already
            dirnames[:] = [d for d in dirnames if real_current / d not in walked]
            filenames = [f for f in filenames if real_current / f not in walked]

            for name in dirnames + filenames:
                if should_stop and should_stop():
                    return
                entry = _stat_entry(current / name)
                if entry is not None:
                    yield entry

            # Stop descending once children sit on the depth boundary
            if max_depth is not None and child_depth >= max_depth:
                dirnames[:] = []


def dir_size(path: pathlib.Path) -> int:
    """Return the total size of regular files beneath a directory

    Unreadable files and directories contribute nothing, so the result is a
    lower bound on real usage. Never raises.
    """
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path, followlinks=False):
        for filename in filenames:
            try:
                st = os.lstat(os.path.join(dirpath, filename))
            except OSError:
                continue
            if stat.S_ISREG(st.st_mode):
                total = min(total + st.st_size, MAX_SIZE)
    return total
