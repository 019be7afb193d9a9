#!/usr/bin/env python3
"""
Ranking and staleness policy for scanned entries

Pure functions over Entry lists; nothing here touches the filesystem.
"""

import time
from typing import Iterable, Optional

from disk_walker import Entry

SECONDS_PER_DAY = 86400


def rank(entries: Iterable[Entry], limit: int) -> list[Entry]:
    """Return the largest entries first, at most `limit` of them

    Entries of equal size keep their walk order. The input is not modified.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    # sorted() is stable, reverse=True included
    return sorted(entries, key=lambda e: e.size, reverse=True)[:limit]


def stale_cutoff(days: int, now: Optional[float] = None) -> float:
    """Timestamp before which an entry counts as stale"""
    if now is None:
        now = time.time()
    return now - days * SECONDS_PER_DAY


def is_stale(entry: Entry, cutoff: float) -> bool:
    """True when the entry was last used at or before the cutoff"""
    return entry.last_used <= cutoff


def age_days(entry: Entry, now: Optional[float] = None) -> int:
    """Whole days since the entry was last used, never negative"""
    if now is None:
        now = time.time()
    return max(int((now - entry.last_used) // SECONDS_PER_DAY), 0)
