#!/usr/bin/env python3
"""
Volume enumeration for the info report, backed by psutil
"""

from dataclasses import dataclass
from typing import Callable, Optional

import psutil


@dataclass(frozen=True)
class Volume:
    """Capacity of one mounted volume"""

    name: str
    mount_point: str
    total_bytes: int
    available_bytes: int

    @property
    def used_bytes(self) -> int:
        return max(self.total_bytes - self.available_bytes, 0)


def list_volumes(on_error: Optional[Callable[[str, OSError], None]] = None) -> list[Volume]:
    """Return capacity information for every mounted physical volume

    Args:
        on_error: Called with (mount point, error) for mounts whose usage
            cannot be read; those mounts are skipped

    Returns:
        Volumes in the order psutil reports the partitions
    """
    volumes = []
    for partition in psutil.disk_partitions(all=False):
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except OSError as e:
            if on_error:
                on_error(partition.mountpoint, e)
            continue
        volumes.append(
            Volume(
                name=partition.device or partition.mountpoint,
                mount_point=partition.mountpoint,
                total_bytes=usage.total,
                available_bytes=usage.free,
            )
        )
    return volumes
