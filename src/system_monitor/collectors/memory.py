"""Physical memory and swap collector."""

from dataclasses import dataclass

import psutil

from system_monitor.formatting import percent
from system_monitor.ringbuffer import DEFAULT_HISTORY, HistoryBuffer


@dataclass
class MemoryData:
    """Point-in-time RAM and swap usage (bytes)."""

    total: int = 0
    used: int = 0
    available: int = 0
    usage_percent: float = 0.0
    swap_total: int = 0
    swap_used: int = 0
    swap_percent: float = 0.0


class MemoryCollector:
    """Stateless refresh of memory counters; only history carries over."""

    name = "memory"

    def __init__(self, history_size: int = DEFAULT_HISTORY) -> None:
        self.data = MemoryData()
        self.history = HistoryBuffer(history_size)

    def collect(self) -> None:
        vm = psutil.virtual_memory()
        swap = psutil.swap_memory()

        self.data.total = vm.total
        self.data.used = vm.used
        self.data.available = vm.available
        self.data.usage_percent = percent(vm.used, vm.total)

        self.data.swap_total = swap.total
        self.data.swap_used = swap.used
        self.data.swap_percent = percent(swap.used, swap.total)

        self.history.push(self.data.usage_percent)
