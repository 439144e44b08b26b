"""Process table collector with top-N rankings."""

from dataclasses import dataclass, field

import psutil

from system_monitor.formatting import percent

TOP_N = 5

_ATTRS = ["pid", "name", "cpu_percent", "memory_info", "num_threads", "status"]


@dataclass
class ProcessInfo:
    """Single process as seen in one tick."""

    pid: int
    name: str
    cpu_percent: float
    memory_bytes: int
    memory_percent: float
    threads: int
    status: str


@dataclass
class ProcessData:
    """Aggregate counts plus the two top-N views."""

    total_processes: int = 0
    total_threads: int = 0
    running: int = 0
    sleeping: int = 0
    zombies: int = 0
    top_cpu: list[ProcessInfo] = field(default_factory=list)
    top_memory: list[ProcessInfo] = field(default_factory=list)


def rank(processes: list[ProcessInfo], top_n: int = TOP_N) -> tuple[list, list]:
    """Return (top_cpu, top_memory) from one unsorted process list.

    Both views sort the same enumeration-ordered list independently; sorts
    are stable, so equal values keep process-table order.
    """
    top_cpu = sorted(processes, key=lambda p: p.cpu_percent, reverse=True)[:top_n]
    top_memory = sorted(processes, key=lambda p: p.memory_bytes, reverse=True)[:top_n]
    return top_cpu, top_memory


class ProcessCollector:
    """Full refresh of the process table each tick.

    Memory percent is relative to total RAM captured at construction so the
    basis stays stable across ticks.
    """

    name = "process"

    def __init__(self, top_n: int = TOP_N) -> None:
        self.top_n = top_n
        self.total_memory = psutil.virtual_memory().total
        self.data = ProcessData()

    def _to_info(self, info: dict) -> ProcessInfo:
        mem = info.get("memory_info")
        memory_bytes = mem.rss if mem is not None else 0
        threads = info.get("num_threads") or 1
        return ProcessInfo(
            pid=info["pid"],
            name=info.get("name") or "",
            cpu_percent=float(info.get("cpu_percent") or 0.0),
            memory_bytes=memory_bytes,
            memory_percent=percent(memory_bytes, self.total_memory),
            threads=threads,
            status=info.get("status") or "unknown",
        )

    def collect(self) -> None:
        data = ProcessData()
        processes: list[ProcessInfo] = []

        for proc in psutil.process_iter(_ATTRS, ad_value=None):
            p = self._to_info(proc.info)
            processes.append(p)

            data.total_threads += p.threads
            if p.status == psutil.STATUS_RUNNING:
                data.running += 1
            elif p.status == psutil.STATUS_SLEEPING:
                data.sleeping += 1
            elif p.status == psutil.STATUS_ZOMBIE:
                data.zombies += 1

        data.total_processes = len(processes)
        data.top_cpu, data.top_memory = rank(processes, self.top_n)
        self.data = data
