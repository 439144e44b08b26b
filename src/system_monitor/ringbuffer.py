# src/system_monitor/ringbuffer.py
"""Ring buffer for sparkline history.

Stores 60 samples by default (one minute of trend at 1Hz refresh).
"""

DEFAULT_HISTORY = 60


class HistoryBuffer:
    """Fixed-capacity circular buffer of scalar samples.

    Storage is allocated once at construction; push overwrites the oldest
    slot when full.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._data: list[float] = [0.0] * capacity
        self._head = 0
        self._len = 0

    def __len__(self) -> int:
        """Return number of samples in buffer."""
        return self._len

    @property
    def is_empty(self) -> bool:
        """Return True if buffer has no samples."""
        return self._len == 0

    @property
    def capacity(self) -> int:
        """Return maximum number of samples the buffer can hold."""
        return len(self._data)

    @property
    def latest(self) -> float | None:
        """Most recently pushed sample, or None when empty."""
        if self._len == 0:
            return None
        return self._data[(self._head - 1) % len(self._data)]

    def push(self, value: float) -> None:
        """Add a sample to the buffer."""
        n = len(self._data)
        self._data[self._head] = value
        self._head = (self._head + 1) % n
        if self._len < n:
            self._len += 1

    def snapshot(self) -> list[float]:
        """Return samples oldest first (copy)."""
        n = len(self._data)
        start = (self._head - self._len) % n
        return [self._data[(start + i) % n] for i in range(self._len)]

    def clear(self) -> None:
        """Empty the buffer."""
        self._head = 0
        self._len = 0
