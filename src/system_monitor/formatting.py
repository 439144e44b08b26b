"""Formatting utilities for consistent output across CLI and consumers."""

KB = 1024
MB = KB * 1024
GB = MB * 1024
TB = GB * 1024


def percent(used: float, total: float) -> float:
    """Return used/total as a percentage clamped to [0, 100].

    A zero (or negative) total yields 0.0 instead of dividing.
    """
    if total <= 0:
        return 0.0
    return max(0.0, min(100.0, used / total * 100.0))


def format_bytes(num_bytes: int) -> str:
    """Format a memory size: "1.5 GB" above a gigabyte, else whole MB."""
    if num_bytes >= GB:
        return f"{num_bytes / GB:.1f} GB"
    return f"{num_bytes / MB:.0f} MB"


def format_space(num_bytes: int) -> str:
    """Format disk capacity in GB or TB."""
    if num_bytes >= TB:
        return f"{num_bytes / TB:.1f} TB"
    return f"{num_bytes / GB:.0f} GB"


def format_speed(bytes_per_sec: float) -> str:
    """Format a throughput in B/s, KB/s, MB/s or GB/s."""
    if bytes_per_sec >= GB:
        return f"{bytes_per_sec / GB:.1f} GB/s"
    if bytes_per_sec >= MB:
        return f"{bytes_per_sec / MB:.1f} MB/s"
    if bytes_per_sec >= KB:
        return f"{bytes_per_sec / KB:.1f} KB/s"
    return f"{bytes_per_sec:.0f} B/s"


def format_total(num_bytes: int) -> str:
    """Format a cumulative transfer total in KB, MB or GB."""
    if num_bytes >= GB:
        return f"{num_bytes / GB:.1f} GB"
    if num_bytes >= MB:
        return f"{num_bytes / MB:.0f} MB"
    return f"{num_bytes / KB:.0f} KB"


def format_proc_memory(num_bytes: int) -> str:
    """Compact per-process memory: "1.2G" or "512M"."""
    if num_bytes >= GB:
        return f"{num_bytes / GB:.1f}G"
    return f"{num_bytes // MB}M"


def format_uptime(secs: int) -> str:
    """Format uptime as "3d 4h 5m", "4h 5m" or "5m".

    Args:
        secs: Seconds since boot

    Returns:
        Compact uptime string; larger units are omitted when zero.
    """
    days = secs // 86400
    hours = (secs % 86400) // 3600
    mins = (secs % 3600) // 60

    if days > 0:
        return f"{days}d {hours}h {mins}m"
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"
