"""Per-block-device I/O accounting from /proc/diskstats.

Each line is ``major minor name`` followed by the kernel's counters; sector
counts are always in 512-byte units regardless of the device's real sector
size.
"""

import re
from pathlib import Path

DISKSTATS_PATH = Path("/proc/diskstats")
SECTOR_SIZE = 512

# Column indexes after whitespace split
_NAME = 2
_SECTORS_READ = 5
_SECTORS_WRITTEN = 9

# nvme0n1p1, mmcblk0p2, loop0p1: partition is "p<digits>" after a digit
_P_PARTITION = re.compile(r"^(.*\d)p\d+$")
_DIGIT_PARTITION = re.compile(r"^(.*?)\d+$")
# Whole-disk devices whose names end in a digit
_WHOLE_DISK_PREFIXES = ("dm-", "md", "sr", "zram")


def extract_device_name(device: str) -> str:
    """Normalize a raw device path to its whole-disk block device name.

    "/dev/sda1" -> "sda", "/dev/nvme0n1p1" -> "nvme0n1", "/dev/sda" -> "sda".
    """
    name = device.removeprefix("/dev/")
    if name.startswith(_WHOLE_DISK_PREFIXES):
        return name
    if name.startswith(("nvme", "mmcblk", "loop")):
        m = _P_PARTITION.match(name)
        return m.group(1) if m else name
    m = _DIGIT_PARTITION.match(name)
    if m and m.group(1):
        return m.group(1)
    return name


def parse_sectors(content: str, device: str) -> tuple[int, int] | None:
    """Find (sectors_read, sectors_written) for ``device`` in diskstats text.

    Returns None if the device has no line or the line is malformed.
    """
    for line in content.splitlines():
        parts = line.split()
        if len(parts) <= _SECTORS_WRITTEN or parts[_NAME] != device:
            continue
        try:
            return int(parts[_SECTORS_READ]), int(parts[_SECTORS_WRITTEN])
        except ValueError:
            return None
    return None


def read_sectors(device: str, path: Path = DISKSTATS_PATH) -> tuple[int, int] | None:
    """Read cumulative sector counters for ``device``.

    Returns None when the table is unreadable or the device is absent.
    """
    try:
        content = path.read_text()
    except OSError:
        return None
    return parse_sectors(content, device)
