"""Primary network interface throughput collector."""

import time
from collections.abc import Callable
from dataclasses import dataclass

import psutil
import structlog

from system_monitor.ringbuffer import DEFAULT_HISTORY, HistoryBuffer

log = structlog.get_logger()

FALLBACK_INTERFACE = "eth0"


@dataclass
class NetworkData:
    """Cumulative counters and derived speeds for the primary interface."""

    interface: str = ""
    rx_bytes: int = 0
    tx_bytes: int = 0
    rx_speed: float = 0.0  # bytes/sec
    tx_speed: float = 0.0  # bytes/sec
    rx_packets: int = 0
    tx_packets: int = 0
    rx_errors: int = 0
    tx_errors: int = 0


def select_interface(counters: dict) -> str:
    """Return the interface with the most combined traffic.

    Ties keep the first interface in enumeration order.
    """
    if not counters:
        return FALLBACK_INTERFACE
    return max(counters, key=lambda nic: counters[nic].bytes_recv + counters[nic].bytes_sent)


class NetworkCollector:
    """Derives rx/tx speed for one interface chosen at construction."""

    name = "network"

    def __init__(
        self,
        history_size: int = DEFAULT_HISTORY,
        min_interval: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._min_interval = min_interval
        self._clock = clock

        counters = psutil.net_io_counters(pernic=True)
        interface = select_interface(counters)
        nic = counters.get(interface)

        self.data = NetworkData(interface=interface)
        self.rx_history = HistoryBuffer(history_size)
        self.tx_history = HistoryBuffer(history_size)

        # No baseline until the interface's counters have been seen once
        self._has_baseline = nic is not None
        if nic is not None:
            self._set_counters(nic)
        self._last_rx = nic.bytes_recv if nic else 0
        self._last_tx = nic.bytes_sent if nic else 0
        self._last_update = self._clock()

    def _set_counters(self, nic) -> None:
        self.data.rx_bytes = nic.bytes_recv
        self.data.tx_bytes = nic.bytes_sent
        self.data.rx_packets = nic.packets_recv
        self.data.tx_packets = nic.packets_sent
        self.data.rx_errors = nic.errin
        self.data.tx_errors = nic.errout

    def collect(self) -> None:
        now = self._clock()
        elapsed = now - self._last_update
        if elapsed < self._min_interval:
            return

        try:
            nic = psutil.net_io_counters(pernic=True).get(self.data.interface)
        except OSError as e:
            log.debug("net_counters_read_failed", interface=self.data.interface, error=str(e))
            return
        if nic is None:
            return

        rx, tx = nic.bytes_recv, nic.bytes_sent
        if not self._has_baseline:
            self._set_counters(nic)
            self._last_rx = rx
            self._last_tx = tx
            self._last_update = now
            self._has_baseline = True
            return

        # Counter reset or wrap reads as zero traffic, never negative
        rx_delta = max(rx - self._last_rx, 0)
        tx_delta = max(tx - self._last_tx, 0)

        self.data.rx_speed = rx_delta / elapsed
        self.data.tx_speed = tx_delta / elapsed
        self._set_counters(nic)

        self._last_rx = rx
        self._last_tx = tx
        self._last_update = now

        # History in MB/s for display scale
        self.rx_history.push(self.data.rx_speed / 1_000_000)
        self.tx_history.push(self.data.tx_speed / 1_000_000)
