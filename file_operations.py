#!/usr/bin/env python3
"""
File Removal Module

Permanently removes selected entries: files and links are unlinked, directories
are removed recursively. Every entry gets exactly one attempt and a failure
never stops the rest of the batch.
"""

import shutil
from dataclasses import dataclass
from typing import Callable, Optional

from disk_walker import Entry


@dataclass
class RemovalResult:
    """Result of removing a single entry"""

    entry: Entry
    success: bool
    error_message: Optional[str] = None


class FileRemover:
    """Removes entries one by one and reports each outcome"""

    def __init__(self, report_callback: Optional[Callable[[RemovalResult], None]] = None):
        """Initialize with optional callback, called right after each removal attempt"""
        self.report_callback = report_callback

    def remove(self, entry: Entry) -> RemovalResult:
        """Remove a single entry"""
        try:
            if entry.is_dir:
                shutil.rmtree(entry.path)
            else:
                entry.path.unlink()
            return RemovalResult(entry=entry, success=True)
        except OSError as e:
            return RemovalResult(entry=entry, success=False, error_message=str(e))

    def remove_batch(self, entries: list[Entry]) -> tuple[list[RemovalResult], list[RemovalResult]]:
        """Remove multiple entries and return success/failure lists"""
        successful = []
        failed = []

        for entry in entries:
            result = self.remove(entry)
            if self.report_callback:
                self.report_callback(result)

            if result.success:
                successful.append(result)
            else:
                failed.append(result)

        return successful, failed


def reclaimed_bytes(results: list[RemovalResult]) -> int:
    """Total size of the successfully removed entries"""
    return sum(r.entry.size for r in results if r.success)


def split_nested(entries: list[Entry]) -> tuple[list[Entry], list[tuple[Entry, Entry]]]:
    """Separate entries that lie inside another selected directory

    Returns:
        (entries to remove, [(covered entry, selected ancestor directory)]).
        Covered entries go away with their ancestor and must not be attempted
        again.
    """
    directories = {e.path: e for e in entries if e.is_dir}
    independent = []
    covered = []
    for entry in entries:
        ancestor = next((directories[p] for p in entry.path.parents if p in directories), None)
        if ancestor is None:
            independent.append(entry)
        else:
            covered.append((entry, ancestor))
    return independent, covered
