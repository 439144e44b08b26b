"""Tests for configuration system."""

import pytest

from system_monitor.config import (
    Config,
    GpuConfig,
    HistoryConfig,
    SamplingConfig,
    SystemConfig,
)


def test_sampling_config_defaults():
    """SamplingConfig has correct defaults."""
    config = SamplingConfig()
    assert config.refresh_rate == 1.0
    assert config.min_rate_interval == 0.1
    assert config.cpu_calibration_delay == 0.2


def test_history_and_gpu_defaults():
    assert HistoryConfig().size == 60
    assert GpuConfig().enabled is True


def test_system_config_defaults():
    config = SystemConfig()
    assert config.log_max_bytes == 5 * 1024 * 1024
    assert config.log_backup_count == 3


def test_config_paths():
    """Config provides correct data paths."""
    config = Config()
    assert "system-monitor" in str(config.config_dir)
    assert config.config_path.name == "config.toml"
    assert config.log_path.parent == config.state_dir


def test_load_missing_file_returns_defaults(tmp_path):
    config = Config.load(tmp_path / "absent.toml")
    assert config == Config()


def test_load_reads_values(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        """
[sampling]
refresh_rate = 2.0
min_rate_interval = 0.2

[history]
size = 120

[gpu]
enabled = false

[system]
log_backup_count = 7
"""
    )
    config = Config.load(path)

    assert config.sampling.refresh_rate == 2.0
    assert config.sampling.min_rate_interval == 0.2
    assert config.sampling.cpu_calibration_delay == 0.2  # default kept
    assert config.history.size == 120
    assert config.gpu.enabled is False
    assert config.system.log_backup_count == 7
    assert config.system.log_max_bytes == SystemConfig().log_max_bytes


def test_load_partial_section_uses_defaults(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[history]\n")
    config = Config.load(path)
    assert config.history.size == 60
    assert config.sampling == SamplingConfig()


def test_load_invalid_toml_raises(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[sampling\nrefresh_rate = ")
    with pytest.raises(ValueError, match="Failed to parse config file"):
        Config.load(path)


def test_load_rejects_bad_history_size(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[history]\nsize = 0\n")
    with pytest.raises(ValueError, match="history size"):
        Config.load(path)


def test_load_rejects_non_positive_interval(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[sampling]\nmin_rate_interval = 0\n")
    with pytest.raises(ValueError, match="min_rate_interval"):
        Config.load(path)


def test_load_clamps_refresh_rate(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[sampling]\nrefresh_rate = 30\n")
    assert Config.load(path).sampling.refresh_rate == 5.0


class TestOverrides:
    @pytest.mark.parametrize("rate,expected", [(0.01, 0.25), (1.5, 1.5), (60.0, 5.0)])
    def test_with_refresh_rate_clamps(self, rate, expected):
        assert Config().with_refresh_rate(rate).sampling.refresh_rate == expected

    def test_with_refresh_rate_returns_copy(self):
        config = Config()
        config.with_refresh_rate(3.0)
        assert config.sampling.refresh_rate == 1.0

    def test_with_gpu(self):
        config = Config().with_gpu(False)
        assert config.gpu.enabled is False
        assert Config().gpu.enabled is True
