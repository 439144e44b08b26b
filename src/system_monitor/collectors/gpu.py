"""NVIDIA GPU collector via NVML, with a no-device fallback."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pynvml
import structlog

from system_monitor.formatting import percent
from system_monitor.ringbuffer import DEFAULT_HISTORY, HistoryBuffer

log = structlog.get_logger()


@dataclass
class GpuData:
    """GPU state; every numeric field stays zero when ``available`` is False."""

    available: bool = False
    name: str = ""
    driver_version: str = ""
    usage_percent: float = 0.0
    memory_used: int = 0
    memory_total: int = 0
    memory_percent: float = 0.0
    temperature: int = 0  # °C
    fan_speed: int = 0  # %
    power_draw: int = 0  # W
    power_limit: int = 0  # W
    clock_core: int = 0  # MHz
    clock_memory: int = 0  # MHz
    encoder_usage: int = 0  # %
    decoder_usage: int = 0  # %
    pcie_gen: int = 0
    pcie_width: int = 0


def _text(value: str | bytes) -> str:
    # Older pynvml releases return bytes
    return value.decode() if isinstance(value, bytes) else value


class _NoDevice:
    """No supported GPU: every poll is a no-op."""

    name: str | None = None

    def poll(self, data: GpuData) -> bool:
        return False

    def close(self) -> None:
        pass


class _NvmlDevice:
    """Device 0 of an initialised NVML library."""

    def __init__(self, handle: Any) -> None:
        self._handle = handle
        self.name = _text(pynvml.nvmlDeviceGetName(handle))

    def _read(self, metric: str, fn: Callable[..., Any], *args: Any) -> Any:
        """Call one NVML query; None on failure so the field keeps its value."""
        try:
            return fn(self._handle, *args)
        except pynvml.NVMLError as e:
            log.debug("gpu_metric_read_failed", metric=metric, error=str(e))
            return None

    def poll(self, data: GpuData) -> bool:
        util = self._read("utilization", pynvml.nvmlDeviceGetUtilizationRates)
        if util is not None:
            data.usage_percent = float(util.gpu)

        mem = self._read("memory", pynvml.nvmlDeviceGetMemoryInfo)
        if mem is not None:
            data.memory_used = mem.used
            data.memory_total = mem.total
            data.memory_percent = percent(mem.used, mem.total)

        temp = self._read(
            "temperature", pynvml.nvmlDeviceGetTemperature, pynvml.NVML_TEMPERATURE_GPU
        )
        if temp is not None:
            data.temperature = temp

        fan = self._read("fan_speed", pynvml.nvmlDeviceGetFanSpeed)
        if fan is not None:
            data.fan_speed = fan

        # NVML reports milliwatts
        power = self._read("power_draw", pynvml.nvmlDeviceGetPowerUsage)
        if power is not None:
            data.power_draw = power // 1000
        limit = self._read("power_limit", pynvml.nvmlDeviceGetPowerManagementLimit)
        if limit is not None:
            data.power_limit = limit // 1000

        core = self._read("clock_core", pynvml.nvmlDeviceGetClockInfo, pynvml.NVML_CLOCK_GRAPHICS)
        if core is not None:
            data.clock_core = core
        mem_clock = self._read(
            "clock_memory", pynvml.nvmlDeviceGetClockInfo, pynvml.NVML_CLOCK_MEM
        )
        if mem_clock is not None:
            data.clock_memory = mem_clock

        gen = self._read("pcie_gen", pynvml.nvmlDeviceGetCurrPcieLinkGeneration)
        if gen is not None:
            data.pcie_gen = gen
        width = self._read("pcie_width", pynvml.nvmlDeviceGetCurrPcieLinkWidth)
        if width is not None:
            data.pcie_width = width

        # (utilization %, sampling period µs)
        enc = self._read("encoder", pynvml.nvmlDeviceGetEncoderUtilization)
        if enc is not None:
            data.encoder_usage = enc[0]
        dec = self._read("decoder", pynvml.nvmlDeviceGetDecoderUtilization)
        if dec is not None:
            data.decoder_usage = dec[0]

        return True

    def close(self) -> None:
        try:
            pynvml.nvmlShutdown()
        except pynvml.NVMLError as e:
            log.debug("gpu_shutdown_failed", error=str(e))


def open_device() -> tuple["_NvmlDevice | _NoDevice", str]:
    """Initialise NVML and open device 0.

    Returns (device, driver_version); the no-device variant and an empty
    version when NVML is missing or has no device.
    """
    try:
        pynvml.nvmlInit()
    except pynvml.NVMLError as e:
        log.info("gpu_unavailable", reason=str(e))
        return _NoDevice(), ""

    try:
        handle = pynvml.nvmlDeviceGetHandleByIndex(0)
        device = _NvmlDevice(handle)
    except pynvml.NVMLError as e:
        log.info("gpu_unavailable", reason=str(e))
        pynvml.nvmlShutdown()
        return _NoDevice(), ""

    try:
        driver = _text(pynvml.nvmlSystemGetDriverVersion())
    except pynvml.NVMLError:
        driver = ""
    return device, driver


class GpuCollector:
    """Capability-gated GPU collector.

    The device variant is chosen once at construction; an absent GPU is not
    an error and leaves ``data`` at its zero defaults for the collector's
    lifetime.
    """

    name = "gpu"

    def __init__(self, history_size: int = DEFAULT_HISTORY, enabled: bool = True) -> None:
        self.history = HistoryBuffer(history_size)
        if enabled:
            self._device, driver = open_device()
        else:
            self._device, driver = _NoDevice(), ""

        self.data = GpuData()
        if isinstance(self._device, _NvmlDevice):
            self.data.available = True
            self.data.name = self._device.name
            self.data.driver_version = driver

    @property
    def is_available(self) -> bool:
        return self.data.available

    def collect(self) -> None:
        if self._device.poll(self.data):
            self.history.push(self.data.usage_percent)

    def close(self) -> None:
        """Release NVML; the collector reports nothing new afterwards."""
        self._device.close()
        self._device = _NoDevice()
