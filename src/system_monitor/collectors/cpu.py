"""CPU usage collector."""

import platform
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import psutil
import structlog

from system_monitor.ringbuffer import DEFAULT_HISTORY, HistoryBuffer

log = structlog.get_logger()

CPUINFO_PATH = Path("/proc/cpuinfo")


@dataclass
class CpuData:
    """Point-in-time CPU state."""

    model: str = ""
    physical_cores: int = 0
    logical_cores: int = 0
    global_usage: float = 0.0  # Mean of per-core usage, 0-100
    per_core_usage: list[float] = field(default_factory=list)
    frequency_mhz: int = 0


def read_cpu_model(path: Path = CPUINFO_PATH) -> str:
    """Return the CPU brand string.

    Reads the first "model name" line of /proc/cpuinfo, falling back to
    platform.processor() where that file does not exist.
    """
    try:
        for line in path.read_text().splitlines():
            key, sep, value = line.partition(":")
            if sep and key.strip() == "model name":
                return value.strip()
    except OSError:
        pass
    return platform.processor() or ""


def _first_frequency() -> int:
    """Current clock of the first reporting CPU in MHz, 0 if unknown."""
    try:
        freqs = psutil.cpu_freq(percpu=True)
    except (OSError, NotImplementedError, AttributeError) as e:
        log.debug("cpu_freq_unavailable", error=str(e))
        return 0
    for freq in freqs or []:
        if freq.current:
            return int(freq.current)
    return 0


class CpuCollector:
    """Samples per-core utilisation and clock frequency.

    psutil derives utilisation from the delta between two reads, so
    construction primes the counters and waits ``calibration_delay`` before a
    second read; the primed value is never surfaced.
    """

    name = "cpu"

    def __init__(
        self,
        history_size: int = DEFAULT_HISTORY,
        calibration_delay: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        psutil.cpu_percent(percpu=True)
        sleep(calibration_delay)
        per_core = psutil.cpu_percent(percpu=True)

        logical = psutil.cpu_count(logical=True) or len(per_core)
        physical = psutil.cpu_count(logical=False) or logical

        self.data = CpuData(
            model=read_cpu_model(),
            physical_cores=physical,
            logical_cores=logical,
            per_core_usage=[0.0] * len(per_core),
            frequency_mhz=_first_frequency(),
        )
        self.history = HistoryBuffer(history_size)

    def collect(self) -> None:
        """Re-read per-core usage and push the global mean into history."""
        per_core = [float(p) for p in psutil.cpu_percent(percpu=True)]

        self.data.per_core_usage = per_core
        self.data.global_usage = sum(per_core) / len(per_core) if per_core else 0.0
        self.data.frequency_mhz = _first_frequency()

        self.history.push(self.data.global_usage)
