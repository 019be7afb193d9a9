#!/usr/bin/env python3
"""
Auxiliary utility functions for sdisk

Size formatting and path display helpers shared by the report commands.
"""

import pathlib
from typing import Optional

_BINARY_UNITS = ("KiB", "MiB", "GiB", "TiB", "PiB")


def format_bytes(size_bytes: int) -> str:
    """Format byte size into human-readable string using 1024-based units

    Args:
        size_bytes: Size in bytes to format

    Returns:
        Formatted string like "1.2 GiB", "345.0 MiB", "12.0 KiB", or "789 B"
    """
    if size_bytes < 1024:
        return f"{max(size_bytes, 0)} B"

    value = float(size_bytes)
    unit = "B"
    for unit in _BINARY_UNITS:
        value /= 1024
        # unit is chosen on the rounded value
        if round(value, 1) < 1024:
            break
    return f"{value:.1f} {unit}"


def format_path_for_display(path: str, home_path: Optional[str] = None) -> str:
    """Format file path for display by replacing home directory with ~

    Args:
        path: File path to format
        home_path: Home directory path (defaults to platform home)

    Returns:
        Path with home directory replaced by ~ if applicable
    """
    if home_path is None:
        home_path = str(pathlib.Path.home())

    if home_path in ("", "/"):
        return path
    if path == home_path or path.startswith(home_path.rstrip("/") + "/"):
        return "~" + path[len(home_path.rstrip("/")) :]
    return path
