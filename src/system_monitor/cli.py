"""CLI commands for system-monitor."""

from pathlib import Path

import click

from system_monitor import __version__


def _load_config(ctx: click.Context):
    """Load config from the --config path (or default location)."""
    from system_monitor import logging as mlog
    from system_monitor.config import Config

    path: Path | None = ctx.obj.get("config_path")
    try:
        return Config.load(path)
    except ValueError as e:
        mlog.config_error(str(path or Config().config_path), str(e))
        raise SystemExit(1) from e


def _build_registry(config):
    """Route structlog to the log file, then construct collectors.

    Exits with status 1 on startup failure. Logging is configured first so
    collector events never reach stdout.
    """
    from system_monitor import logging as mlog
    from system_monitor.errors import InitError
    from system_monitor.registry import CollectorRegistry

    mlog.configure(config)
    try:
        return CollectorRegistry(config)
    except InitError as e:
        mlog.init_failed(str(e))
        raise SystemExit(1) from e


def _tick(registry) -> None:
    """Advance one tick; per-collector failures are reported, not raised."""
    from system_monitor import logging as mlog
    from system_monitor.errors import CollectionError

    try:
        registry.update()
    except CollectionError as e:
        mlog.tick_failed(list(e.failures))


def format_line(snap) -> str:
    """One-line summary of a snapshot for the watch command."""
    from system_monitor.formatting import format_bytes, format_speed

    parts = [
        f"cpu {snap.cpu.global_usage:5.1f}%",
        f"mem {snap.memory.usage_percent:5.1f}% ({format_bytes(snap.memory.used)})",
        f"net ↓{format_speed(snap.network.rx_speed)} ↑{format_speed(snap.network.tx_speed)}",
        f"disk r {format_speed(snap.disk.read_speed)} w {format_speed(snap.disk.write_speed)}",
        f"procs {snap.process.total_processes}",
    ]
    if snap.gpu.available:
        parts.append(f"gpu {snap.gpu.usage_percent:.0f}% {snap.gpu.temperature}°C")
    return " | ".join(parts)


@click.group()
@click.version_option(__version__)
@click.option(
    "--config",
    "-C",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config file",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """Sample host CPU, memory, disk, network, process and GPU metrics."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command()
@click.option("--no-gpu", is_flag=True, help="Disable GPU monitoring")
@click.option("--pretty", is_flag=True, help="Indent JSON output")
@click.pass_context
def snapshot(ctx: click.Context, no_gpu: bool, pretty: bool) -> None:
    """Collect one tick and print it as JSON."""
    import json

    config = _load_config(ctx)
    if no_gpu:
        config = config.with_gpu(False)

    registry = _build_registry(config)
    try:
        _tick(registry)
        data = registry.snapshot().to_dict()
    finally:
        registry.close()
    click.echo(json.dumps(data, indent=2 if pretty else None))


@main.command()
@click.option("--refresh", "-r", type=float, default=None, help="Seconds between ticks")
@click.option("--count", "-n", type=int, default=0, help="Stop after N ticks (0 = forever)")
@click.option("--no-gpu", is_flag=True, help="Disable GPU monitoring")
@click.option("--json", "as_json", is_flag=True, help="Print JSON Lines instead of text")
@click.pass_context
def watch(
    ctx: click.Context, refresh: float | None, count: int, no_gpu: bool, as_json: bool
) -> None:
    """Print a summary line every tick."""
    import time

    from system_monitor import logging as mlog

    config = _load_config(ctx)
    if refresh is not None:
        config = config.with_refresh_rate(refresh)
    if no_gpu:
        config = config.with_gpu(False)

    mlog.version_info("system-monitor", __version__)
    mlog.config_summary(
        config.sampling.refresh_rate, config.history.size, config.gpu.enabled
    )

    registry = _build_registry(config)
    mlog.collectors_ready(
        registry.disk.data.name,
        registry.network.data.interface,
        registry.gpu.data.name if registry.gpu.is_available else None,
    )

    interval = config.sampling.refresh_rate
    ticks = 0
    try:
        while count == 0 or ticks < count:
            start = time.monotonic()
            _tick(registry)
            ticks += 1

            snap = registry.snapshot()
            click.echo(snap.to_json() if as_json else format_line(snap))

            if count and ticks >= count:
                break
            remaining = interval - (time.monotonic() - start)
            if remaining > 0:
                time.sleep(remaining)
    except KeyboardInterrupt:
        pass
    finally:
        registry.close()


@main.command()
@click.option("--no-gpu", is_flag=True, help="Disable GPU monitoring")
@click.pass_context
def info(ctx: click.Context, no_gpu: bool) -> None:
    """Show host identity and the devices being monitored."""
    from system_monitor.formatting import (
        format_proc_memory,
        format_space,
        format_total,
        format_uptime,
    )

    config = _load_config(ctx)
    if no_gpu:
        config = config.with_gpu(False)
    registry = _build_registry(config)
    try:
        _tick(registry)
    finally:
        registry.close()

    system = registry.system.data
    cpu = registry.cpu.data
    disk = registry.disk.data
    net = registry.network.data
    gpu = registry.gpu.data
    procs = registry.process.data

    click.echo(f"Host: {system.hostname}")
    click.echo(f"OS: {system.os_name} {system.os_version}".rstrip())
    click.echo(f"Kernel: {system.kernel_version}")
    click.echo(f"Uptime: {format_uptime(system.uptime_secs)}")
    click.echo(f"CPU: {cpu.model or 'unknown'} ({cpu.physical_cores}C/{cpu.logical_cores}T)")
    if disk.mount_point:
        click.echo(
            f"Disk: {disk.name} on {disk.mount_point} "
            f"({format_space(disk.used_space)} / {format_space(disk.total_space)})"
        )
        click.echo(
            f"Disk I/O: {format_total(disk.total_read)} read, "
            f"{format_total(disk.total_written)} written"
        )
    else:
        click.echo("Disk: none")
    click.echo(
        f"Network: {net.interface} "
        f"(rx {format_total(net.rx_bytes)}, tx {format_total(net.tx_bytes)})"
    )
    if gpu.available:
        click.echo(f"GPU: {gpu.name} (driver {gpu.driver_version})")
    else:
        click.echo("GPU: not available")
    click.echo(
        f"Processes: {procs.total_processes} "
        f"({procs.running} running, {procs.sleeping} sleeping, {procs.zombies} zombie)"
    )
    for label, top in (("Top CPU", procs.top_cpu), ("Top memory", procs.top_memory)):
        entries = ", ".join(
            f"{p.name} ({p.cpu_percent:.0f}% {format_proc_memory(p.memory_bytes)})" for p in top
        )
        click.echo(f"{label}: {entries or 'none'}")
