"""Host identity and uptime."""

import platform
import time
from dataclasses import dataclass

import psutil


@dataclass
class SystemData:
    os_name: str = "Unknown"
    os_version: str = ""
    kernel_version: str = ""
    hostname: str = "localhost"
    uptime_secs: int = 0


def _os_release() -> tuple[str, str]:
    """Return (name, version) of the distribution, or the platform pair."""
    try:
        release = platform.freedesktop_os_release()
    except OSError:
        return platform.system() or "Unknown", platform.version()
    return release.get("NAME", platform.system()), release.get("VERSION_ID", "")


def read_uptime() -> int:
    """Seconds since boot."""
    return max(0, int(time.time() - psutil.boot_time()))


class SystemCollector:
    """Identity facts are read once; uptime is re-read every tick."""

    name = "system"

    def __init__(self) -> None:
        os_name, os_version = _os_release()
        self.data = SystemData(
            os_name=os_name,
            os_version=os_version,
            kernel_version=platform.release(),
            hostname=platform.node() or "localhost",
            uptime_secs=read_uptime(),
        )

    def collect(self) -> None:
        self.data.uptime_secs = read_uptime()
