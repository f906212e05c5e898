import datetime
import math
from typing import Optional


def format_elapsed(ms: int) -> str:
    """ms -> HH:MM:SS"""
    total_seconds = int(ms // 1000)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_time_estimate(ms: Optional[float]) -> str:
    """ETA text. Unknown (None, negative, infinite) renders as '-', never as zero."""
    if ms is None or not math.isfinite(ms) or ms < 0:
        return "-"

    total_minutes = int(ms // 60000)
    hours = total_minutes // 60
    minutes = total_minutes % 60

    if hours > 24:
        return f"~{hours // 24}d {hours % 24}h"
    if hours > 0:
        return f"~{hours}h {minutes}m"
    return f"~{minutes}m"


def format_number(num: Optional[float]) -> str:
    if num is None:
        return "-"
    return f"{num:,}"


def format_change(num: Optional[float]) -> str:
    if num is None:
        return "-"
    prefix = "+" if num >= 0 else ""
    return prefix + f"{num:,}"


def format_compact(num: Optional[float]) -> str:
    """Signed K/M/B shorthand: 1500 -> '+1.5K'."""
    if num is None:
        return "-"

    abs_num = abs(num)
    sign = "+" if num >= 0 else "-"
    if abs_num >= 1_000_000_000:
        return f"{sign}{abs_num / 1_000_000_000:.1f}B"
    if abs_num >= 1_000_000:
        return f"{sign}{abs_num / 1_000_000:.1f}M"
    if abs_num >= 1_000:
        return f"{sign}{abs_num / 1_000:.1f}K"
    return f"{sign}{abs_num}"


def format_datetime(timestamp_ms: int) -> str:
    """Local time, YYYY-MM-DD HH:MM:SS"""
    dt = datetime.datetime.fromtimestamp(timestamp_ms / 1000)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def format_duration(seconds: int) -> str:
    minutes = seconds // 60
    if minutes >= 60:
        return f"{minutes // 60}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m"
    return "under 1m"
