"""Shared test fixtures for system-monitor."""

import logging
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import PropertyMock, patch

import psutil
import pytest
import structlog

from system_monitor.config import Config


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Fresh fake clock starting at t=1000."""
    return FakeClock()


def diskstats_line(device: str, sectors_read: int, sectors_written: int) -> str:
    """Build one /proc/diskstats line with the given sector counters."""
    # major minor name reads merged sectors_read ms writes merged sectors_written ms ...
    return (
        f"   8       0 {device} 100 0 {sectors_read} 50 200 0 {sectors_written} 80 0 130 130"
    )


def write_diskstats(path: Path, rows: dict[str, tuple[int, int]]) -> None:
    """Write a diskstats table with one line per device."""
    lines = [diskstats_line(dev, r, w) for dev, (r, w) in rows.items()]
    path.write_text("\n".join(lines) + "\n")


def make_partition(device: str, mountpoint: str) -> SimpleNamespace:
    return SimpleNamespace(device=device, mountpoint=mountpoint, fstype="ext4", opts="rw")


def make_usage(total: int, used: int) -> SimpleNamespace:
    return SimpleNamespace(total=total, used=used, free=total - used, percent=0.0)


def make_nic(
    recv: int = 0,
    sent: int = 0,
    packets_recv: int = 0,
    packets_sent: int = 0,
    errin: int = 0,
    errout: int = 0,
) -> SimpleNamespace:
    """Create a psutil snetio-like counter record."""
    return SimpleNamespace(
        bytes_recv=recv,
        bytes_sent=sent,
        packets_recv=packets_recv,
        packets_sent=packets_sent,
        errin=errin,
        errout=errout,
        dropin=0,
        dropout=0,
    )


@pytest.fixture
def fake_disks(monkeypatch):
    """Patch psutil partition/usage queries with an editable table.

    Returns a dict with "partitions" (list) and "usage" (mount -> usage).
    A usage value of None makes disk_usage raise OSError for that mount.
    """
    table = {
        "partitions": [make_partition("/dev/sda1", "/")],
        "usage": {"/": make_usage(total=1000, used=250)},
    }

    def disk_partitions(all: bool = False):
        return list(table["partitions"])

    def disk_usage(mount: str):
        usage = table["usage"].get(mount)
        if usage is None:
            raise OSError(f"cannot stat {mount}")
        return usage

    monkeypatch.setattr(psutil, "disk_partitions", disk_partitions)
    monkeypatch.setattr(psutil, "disk_usage", disk_usage)
    return table


@pytest.fixture
def fake_nics(monkeypatch):
    """Patch psutil.net_io_counters with an editable interface table."""
    table: dict[str, SimpleNamespace] = {}

    def net_io_counters(pernic: bool = False):
        return dict(table)

    monkeypatch.setattr(psutil, "net_io_counters", net_io_counters)
    return table


@pytest.fixture
def restore_logging():
    """Put stdlib and structlog back the way they were after configure()."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def state_dir(tmp_path, restore_logging):
    """Point Config.state_dir (and so the log file) at a temp directory."""
    path = tmp_path / "state"
    with patch.object(Config, "state_dir", new_callable=PropertyMock, return_value=path):
        yield path
