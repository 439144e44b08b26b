"""Primary disk usage and throughput collector."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import psutil
import structlog

from system_monitor.diskstats import (
    DISKSTATS_PATH,
    SECTOR_SIZE,
    extract_device_name,
    read_sectors,
)
from system_monitor.formatting import percent
from system_monitor.ringbuffer import DEFAULT_HISTORY, HistoryBuffer

log = structlog.get_logger()

ROOT_MOUNT = "/"


@dataclass
class DiskData:
    """Point-in-time state of the monitored filesystem and its device."""

    name: str = ""
    mount_point: str = ""
    total_space: int = 0
    used_space: int = 0
    free_space: int = 0
    usage_percent: float = 0.0
    read_speed: float = 0.0  # bytes/sec
    write_speed: float = 0.0  # bytes/sec
    total_read: int = 0  # bytes since boot
    total_written: int = 0  # bytes since boot


@dataclass
class _PrevSectors:
    """Previous sector counters for delta calculations."""

    read: int
    written: int
    timestamp: float  # clock() when sampled


def select_partition(partitions: list) -> tuple[object, object] | None:
    """Pick the root mount, else the filesystem with the largest capacity.

    Returns (partition, usage) or None when no filesystem can be queried.
    """
    candidates = []
    for part in partitions:
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except OSError:
            continue
        if part.mountpoint == ROOT_MOUNT:
            return part, usage
        candidates.append((part, usage))

    if not candidates:
        return None
    return max(candidates, key=lambda pu: pu[1].total)


class DiskCollector:
    """Tracks one filesystem's usage and its block device's I/O rates.

    The device is resolved once at construction and never re-resolved; if it
    disappears later, the last known values are kept.
    """

    name = "disk"

    def __init__(
        self,
        history_size: int = DEFAULT_HISTORY,
        min_interval: float = 0.1,
        diskstats_path: Path = DISKSTATS_PATH,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._min_interval = min_interval
        self._diskstats_path = diskstats_path
        self._clock = clock
        self._prev: _PrevSectors | None = None

        self.data = DiskData()
        self.read_history = HistoryBuffer(history_size)
        self.write_history = HistoryBuffer(history_size)

        selected = select_partition(psutil.disk_partitions(all=False))
        self.available = selected is not None
        if selected is None:
            log.info("disk_not_found")
            return

        part, usage = selected
        self.data.name = extract_device_name(part.device)
        self.data.mount_point = part.mountpoint
        self._apply_usage(usage)

        sectors = read_sectors(self.data.name, self._diskstats_path)
        if sectors is None:
            log.info("diskstats_missing", device=self.data.name)
        else:
            self._set_baseline(sectors, self._clock())

    def _apply_usage(self, usage) -> None:
        self.data.total_space = usage.total
        self.data.free_space = usage.free
        self.data.used_space = usage.used
        self.data.usage_percent = percent(usage.used, usage.total)

    def _set_baseline(self, sectors: tuple[int, int], now: float) -> None:
        read, written = sectors
        self._prev = _PrevSectors(read=read, written=written, timestamp=now)
        self.data.total_read = read * SECTOR_SIZE
        self.data.total_written = written * SECTOR_SIZE

    def _refresh_usage(self) -> None:
        try:
            usage = psutil.disk_usage(self.data.mount_point)
        except OSError as e:
            log.debug("disk_usage_read_failed", mount=self.data.mount_point, error=str(e))
            return
        self._apply_usage(usage)

    def _update_rates(self, sectors: tuple[int, int], now: float) -> None:
        """Derive read/write speed from the sector delta since the last computation."""
        prev = self._prev
        if prev is None:
            self._set_baseline(sectors, now)
            return

        elapsed = now - prev.timestamp
        read, written = sectors
        read_delta = max(read - prev.read, 0) * SECTOR_SIZE
        write_delta = max(written - prev.written, 0) * SECTOR_SIZE

        self.data.read_speed = read_delta / elapsed
        self.data.write_speed = write_delta / elapsed
        self._set_baseline(sectors, now)

    def collect(self) -> None:
        """Refresh usage, then rates if at least ``min_interval`` has elapsed."""
        if not self.available:
            return

        self._refresh_usage()

        now = self._clock()
        if self._prev is not None and now - self._prev.timestamp < self._min_interval:
            return

        sectors = read_sectors(self.data.name, self._diskstats_path)
        if sectors is not None:
            self._update_rates(sectors, now)

        # History in MB/s for display scale
        self.read_history.push(self.data.read_speed / 1_000_000)
        self.write_history.push(self.data.write_speed / 1_000_000)
