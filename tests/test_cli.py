"""Tests for CLI commands."""

import json
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pynvml
import pytest
from click.testing import CliRunner

from system_monitor.cli import format_line, main
from system_monitor.collectors import (
    CpuData,
    DiskData,
    GpuData,
    MemoryData,
    NetworkData,
    ProcessData,
    ProcessInfo,
    SystemData,
)
from system_monitor.errors import CollectionError, InitError
from system_monitor.registry import Snapshot


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


def make_snapshot(**overrides) -> Snapshot:
    values = dict(
        timestamp=datetime(2026, 1, 1, 12, 0, 0),
        tick=1,
        cpu=CpuData(model="Test CPU", physical_cores=4, logical_cores=8, global_usage=12.5),
        memory=MemoryData(total=8 * 1024**3, used=2 * 1024**3, usage_percent=25.0),
        system=SystemData(os_name="Linux", hostname="box", uptime_secs=3700),
        gpu=GpuData(),
        network=NetworkData(interface="eth0", rx_speed=2048.0, tx_speed=100.0),
        disk=DiskData(name="sda", mount_point="/", read_speed=1_048_576.0),
        process=ProcessData(total_processes=321),
        cpu_history=(12.5,),
        memory_history=(25.0,),
        gpu_history=(),
        rx_history=(0.002,),
        tx_history=(0.0001,),
        disk_read_history=(1.05,),
        disk_write_history=(0.0,),
    )
    values.update(overrides)
    return Snapshot(**values)


@pytest.fixture(autouse=True)
def isolated_logs(state_dir):
    """Keep the log file written by every command inside tmp_path."""
    return state_dir


@pytest.fixture
def fake_registry():
    """Patch CollectorRegistry with a mock returning a fixed snapshot."""
    registry = MagicMock()
    registry.snapshot.return_value = make_snapshot()
    registry.system.data = make_snapshot().system
    registry.cpu.data = make_snapshot().cpu
    registry.disk.data = DiskData(
        name="sda",
        mount_point="/",
        total_space=500 * 1024**3,
        used_space=100 * 1024**3,
        total_read=3 * 1024**3,
        total_written=512 * 1024**2,
    )
    registry.network.data = NetworkData(interface="eth0", rx_bytes=2048, tx_bytes=1024**3)
    top = ProcessInfo(
        pid=42,
        name="postgres",
        cpu_percent=37.4,
        memory_bytes=300 * 1024**2,
        memory_percent=3.7,
        threads=8,
        status="running",
    )
    registry.process.data = ProcessData(
        total_processes=321, running=2, sleeping=318, zombies=1, top_cpu=[top], top_memory=[top]
    )
    registry.gpu.data = GpuData()
    registry.gpu.is_available = False
    with patch("system_monitor.registry.CollectorRegistry", return_value=registry) as cls:
        cls.instance = registry
        yield cls


def test_format_line():
    line = format_line(make_snapshot())
    assert "cpu  12.5%" in line
    assert "mem  25.0% (2.0 GB)" in line
    assert "↓2.0 KB/s" in line
    assert "r 1.0 MB/s" in line
    assert "procs 321" in line
    assert "gpu" not in line


def test_format_line_with_gpu():
    snap = make_snapshot(gpu=GpuData(available=True, usage_percent=55.0, temperature=70))
    assert "gpu 55% 70°C" in format_line(snap)


class TestSnapshotCommand:
    def test_prints_json(self, runner, fake_registry, tmp_path):
        result = runner.invoke(main, ["-C", str(tmp_path / "none.toml"), "snapshot"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["cpu"]["global_usage"] == 12.5
        fake_registry.instance.update.assert_called_once()
        fake_registry.instance.close.assert_called_once()

    def test_no_gpu_flag(self, runner, fake_registry, tmp_path):
        runner.invoke(main, ["-C", str(tmp_path / "none.toml"), "snapshot", "--no-gpu"])
        config = fake_registry.call_args.args[0]
        assert config.gpu.enabled is False

    def test_collection_error_still_prints(self, runner, fake_registry, tmp_path):
        fake_registry.instance.update.side_effect = CollectionError({"gpu": RuntimeError("x")})
        result = runner.invoke(main, ["-C", str(tmp_path / "none.toml"), "snapshot"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["tick"] == 1

    def test_init_error_exits_1(self, runner, tmp_path):
        with patch(
            "system_monitor.registry.CollectorRegistry", side_effect=InitError("no /proc")
        ):
            result = runner.invoke(main, ["-C", str(tmp_path / "none.toml"), "snapshot"])
        assert result.exit_code == 1

    def test_bad_config_exits_1(self, runner, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text("[history]\nsize = -1\n")
        result = runner.invoke(main, ["-C", str(path), "snapshot"])
        assert result.exit_code == 1

    def test_stdout_is_pure_json_without_gpu(self, runner, tmp_path, state_dir, monkeypatch):
        """Collector log events go to the log file, leaving stdout parseable."""

        def no_library():
            raise pynvml.NVMLError(pynvml.NVML_ERROR_LIBRARY_NOT_FOUND)

        monkeypatch.setattr(pynvml, "nvmlInit", no_library)
        path = tmp_path / "config.toml"
        path.write_text("[sampling]\ncpu_calibration_delay = 0.05\n")

        result = runner.invoke(main, ["-C", str(path), "snapshot"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["gpu"]["available"] is False
        assert data["process"]["total_processes"] > 0
        assert "gpu_unavailable" in (state_dir / "monitor.log").read_text()


class TestWatchCommand:
    def test_runs_count_ticks(self, runner, fake_registry, tmp_path):
        with patch("system_monitor.logging.configure") as configure, patch("time.sleep"):
            result = runner.invoke(
                main, ["-C", str(tmp_path / "none.toml"), "watch", "-n", "3", "-r", "0.25"]
            )

        assert result.exit_code == 0, result.output
        assert fake_registry.instance.update.call_count == 3
        assert result.output.count("procs 321") == 3
        configure.assert_called_once()
        assert configure.call_args.args[0].sampling.refresh_rate == 0.25

    def test_json_lines(self, runner, fake_registry, tmp_path):
        with patch("system_monitor.logging.configure"), patch("time.sleep"):
            result = runner.invoke(
                main, ["-C", str(tmp_path / "none.toml"), "watch", "-n", "2", "--json"]
            )
        lines = result.stdout.splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])["network"]["interface"] == "eth0"

    def test_tick_failure_does_not_abort(self, runner, fake_registry, tmp_path):
        fake_registry.instance.update.side_effect = CollectionError({"disk": OSError("gone")})
        with patch("system_monitor.logging.configure"), patch("time.sleep"):
            result = runner.invoke(
                main, ["-C", str(tmp_path / "none.toml"), "watch", "-n", "2"]
            )
        assert result.exit_code == 0
        assert fake_registry.instance.update.call_count == 2


class TestInfoCommand:
    def test_shows_identity(self, runner, fake_registry, tmp_path):
        result = runner.invoke(main, ["-C", str(tmp_path / "none.toml"), "info"])
        assert result.exit_code == 0, result.output
        assert "Host: box" in result.output
        assert "Uptime: 1h 1m" in result.output
        assert "CPU: Test CPU (4C/8T)" in result.output
        assert "Disk: sda on / (100 GB / 500 GB)" in result.output
        assert "Disk I/O: 3.0 GB read, 512 MB written" in result.output
        assert "Network: eth0 (rx 2 KB, tx 1.0 GB)" in result.output
        assert "Processes: 321 (2 running, 318 sleeping, 1 zombie)" in result.output
        assert "Top CPU: postgres (37% 300M)" in result.output
        assert "Top memory: postgres (37% 300M)" in result.output
        assert "GPU: not available" in result.output
        fake_registry.instance.close.assert_called_once()
