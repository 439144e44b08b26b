"""Exception types for system-monitor."""


class MonitorError(Exception):
    """Base class for all system-monitor errors."""


class InitError(MonitorError):
    """Baseline OS stats could not be queried while building collectors."""


class CollectionError(MonitorError):
    """One or more collectors failed during a tick.

    The remaining collectors still ran; ``failures`` maps collector name to
    the exception it raised.
    """

    def __init__(self, failures: dict[str, Exception]) -> None:
        self.failures = failures
        names = ", ".join(failures)
        super().__init__(f"Collection failed for: {names}")
