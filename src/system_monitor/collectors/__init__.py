"""Per-subsystem metric collectors."""

from system_monitor.collectors.cpu import CpuCollector, CpuData
from system_monitor.collectors.disk import DiskCollector, DiskData
from system_monitor.collectors.gpu import GpuCollector, GpuData
from system_monitor.collectors.memory import MemoryCollector, MemoryData
from system_monitor.collectors.network import NetworkCollector, NetworkData
from system_monitor.collectors.process import ProcessCollector, ProcessData, ProcessInfo
from system_monitor.collectors.system import SystemCollector, SystemData

__all__ = [
    "CpuCollector",
    "CpuData",
    "DiskCollector",
    "DiskData",
    "GpuCollector",
    "GpuData",
    "MemoryCollector",
    "MemoryData",
    "NetworkCollector",
    "NetworkData",
    "ProcessCollector",
    "ProcessData",
    "ProcessInfo",
    "SystemCollector",
    "SystemData",
]
