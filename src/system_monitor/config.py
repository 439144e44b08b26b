"""Configuration system for system-monitor."""

from dataclasses import dataclass, field, replace
from pathlib import Path

import tomlkit

from system_monitor.ringbuffer import DEFAULT_HISTORY

MIN_REFRESH_RATE = 0.25
MAX_REFRESH_RATE = 5.0


@dataclass
class SamplingConfig:
    """Tick cadence and rate-computation tuning."""

    refresh_rate: float = 1.0  # Seconds between ticks
    min_rate_interval: float = 0.1  # Skip disk/network rate math below this elapsed time
    cpu_calibration_delay: float = 0.2  # Seconds between the two priming CPU reads


@dataclass
class HistoryConfig:
    """Sparkline history configuration."""

    size: int = DEFAULT_HISTORY  # Samples kept per trend (60 = 1 minute at 1Hz)


@dataclass
class GpuConfig:
    """GPU monitoring configuration."""

    enabled: bool = True


@dataclass
class SystemConfig:
    """Process-level settings."""

    # Log file rotation
    log_max_bytes: int = 5 * 1024 * 1024  # Max log file size (5MB)
    log_backup_count: int = 3  # Number of backup log files to keep


@dataclass
class Config:
    """Main configuration container."""

    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    gpu: GpuConfig = field(default_factory=GpuConfig)
    system: SystemConfig = field(default_factory=SystemConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "system-monitor"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def state_dir(self) -> Path:
        """State directory for logs."""
        return Path.home() / ".local" / "state" / "system-monitor"

    @property
    def log_path(self) -> Path:
        """JSON Lines log path."""
        return self.state_dir / "monitor.log"

    def with_refresh_rate(self, rate: float) -> "Config":
        """Return a copy with refresh_rate overridden, clamped to the supported range."""
        clamped = max(MIN_REFRESH_RATE, min(MAX_REFRESH_RATE, rate))
        return replace(self, sampling=replace(self.sampling, refresh_rate=clamped))

    def with_gpu(self, enabled: bool) -> "Config":
        """Return a copy with GPU monitoring toggled."""
        return replace(self, gpu=replace(self.gpu, enabled=enabled))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        All defaults come from the dataclass definitions, so Config() and
        Config.load() of an empty file are identical.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        return cls(
            sampling=_load_sampling_config(data.get("sampling", {})),
            history=_load_history_config(data.get("history", {})),
            gpu=_load_gpu_config(data.get("gpu", {})),
            system=_load_system_config(data.get("system", {})),
        )


def _load_sampling_config(data: dict) -> SamplingConfig:
    """Load sampling config, validating intervals."""
    d = SamplingConfig()
    refresh_rate = float(data.get("refresh_rate", d.refresh_rate))
    min_rate_interval = float(data.get("min_rate_interval", d.min_rate_interval))
    cpu_calibration_delay = float(data.get("cpu_calibration_delay", d.cpu_calibration_delay))

    if refresh_rate <= 0:
        raise ValueError(f"refresh_rate must be > 0, got {refresh_rate}")
    if min_rate_interval <= 0:
        raise ValueError(f"min_rate_interval must be > 0, got {min_rate_interval}")
    if cpu_calibration_delay < 0:
        raise ValueError(f"cpu_calibration_delay must be >= 0, got {cpu_calibration_delay}")

    return SamplingConfig(
        refresh_rate=max(MIN_REFRESH_RATE, min(MAX_REFRESH_RATE, refresh_rate)),
        min_rate_interval=min_rate_interval,
        cpu_calibration_delay=cpu_calibration_delay,
    )


def _load_history_config(data: dict) -> HistoryConfig:
    """Load history config."""
    size = int(data.get("size", HistoryConfig().size))
    if size < 1:
        raise ValueError(f"history size must be >= 1, got {size}")
    return HistoryConfig(size=size)


def _load_system_config(data: dict) -> SystemConfig:
    """Load system config from TOML data."""
    d = SystemConfig()
    return SystemConfig(
        log_max_bytes=data.get("log_max_bytes", d.log_max_bytes),
        log_backup_count=data.get("log_backup_count", d.log_backup_count),
    )


def _load_gpu_config(data: dict) -> GpuConfig:
    """Load GPU config."""
    return GpuConfig(enabled=bool(data.get("enabled", GpuConfig().enabled)))
