"""Owns every collector and advances them together once per tick."""

import copy
import json
from dataclasses import asdict, dataclass
from datetime import datetime

import psutil
import structlog

from system_monitor.collectors import (
    CpuCollector,
    CpuData,
    DiskCollector,
    DiskData,
    GpuCollector,
    GpuData,
    MemoryCollector,
    MemoryData,
    NetworkCollector,
    NetworkData,
    ProcessCollector,
    ProcessData,
    SystemCollector,
    SystemData,
)
from system_monitor.config import Config
from system_monitor.errors import CollectionError, InitError

log = structlog.get_logger()


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of every collector's data and history after a tick.

    History tuples are oldest first; disk and network histories are MB/s.
    """

    timestamp: datetime
    tick: int
    cpu: CpuData
    memory: MemoryData
    system: SystemData
    gpu: GpuData
    network: NetworkData
    disk: DiskData
    process: ProcessData
    cpu_history: tuple[float, ...]
    memory_history: tuple[float, ...]
    gpu_history: tuple[float, ...]
    rx_history: tuple[float, ...]
    tx_history: tuple[float, ...]
    disk_read_history: tuple[float, ...]
    disk_write_history: tuple[float, ...]

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        d = asdict(self)
        d["timestamp"] = self.timestamp.isoformat()
        return d

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict())


class CollectorRegistry:
    """One instance of each collector, refreshed in a fixed order.

    Order: CPU, Memory, System, GPU, Network, Disk, Process.
    """

    def __init__(self, config: Config | None = None) -> None:
        config = config or Config()
        history = config.history.size
        sampling = config.sampling

        try:
            self.cpu = CpuCollector(history, calibration_delay=sampling.cpu_calibration_delay)
            self.memory = MemoryCollector(history)
            self.system = SystemCollector()
            self.gpu = GpuCollector(history, enabled=config.gpu.enabled)
            self.network = NetworkCollector(history, min_interval=sampling.min_rate_interval)
            self.disk = DiskCollector(history, min_interval=sampling.min_rate_interval)
            self.process = ProcessCollector()
        except (psutil.Error, OSError) as e:
            raise InitError(f"Failed to query baseline system stats: {e}") from e

        self.config = config
        self.tick_count = 0

    @property
    def collectors(self) -> list:
        """Collectors in update order."""
        return [
            self.cpu,
            self.memory,
            self.system,
            self.gpu,
            self.network,
            self.disk,
            self.process,
        ]

    def update(self) -> None:
        """Run every collector once.

        A failing collector does not stop the rest; failures are raised
        together as CollectionError after the pass.
        """
        failures: dict[str, Exception] = {}
        for collector in self.collectors:
            try:
                collector.collect()
            except Exception as e:
                log.error("collector_failed", collector=collector.name, error=str(e))
                failures[collector.name] = e

        self.tick_count += 1
        if failures:
            raise CollectionError(failures)

    def close(self) -> None:
        """Release collector resources (NVML)."""
        self.gpu.close()

    def __enter__(self) -> "CollectorRegistry":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def snapshot(self) -> Snapshot:
        """Return a frozen copy of current data and history."""
        return Snapshot(
            timestamp=datetime.now(),
            tick=self.tick_count,
            cpu=copy.deepcopy(self.cpu.data),
            memory=copy.deepcopy(self.memory.data),
            system=copy.deepcopy(self.system.data),
            gpu=copy.deepcopy(self.gpu.data),
            network=copy.deepcopy(self.network.data),
            disk=copy.deepcopy(self.disk.data),
            process=copy.deepcopy(self.process.data),
            cpu_history=tuple(self.cpu.history.snapshot()),
            memory_history=tuple(self.memory.history.snapshot()),
            gpu_history=tuple(self.gpu.history.snapshot()),
            rx_history=tuple(self.network.rx_history.snapshot()),
            tx_history=tuple(self.network.tx_history.snapshot()),
            disk_read_history=tuple(self.disk.read_history.snapshot()),
            disk_write_history=tuple(self.disk.write_history.snapshot()),
        )
