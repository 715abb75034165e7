"""Display helpers for byte sizes, durations and decimals."""

from __future__ import annotations

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(num_bytes: float) -> str:
    """Human-readable size with 1024 steps, e.g. ``1536`` -> ``"1.5 KB"``."""
    num = max(float(num_bytes), 0.0)
    power = 0
    while num >= 1024 and power < len(BYTE_UNITS) - 1:
        num /= 1024
        power += 1
    return f"{_trim(round(num, 2))} {BYTE_UNITS[power]}"


def format_uptime(seconds: float) -> str:
    """``93784`` -> ``"1d 2h 3m"``."""
    total = int(seconds)
    days = total // 86400
    hours = (total % 86400) // 3600
    minutes = (total % 3600) // 60
    return f"{days}d {hours}h {minutes}m"


def format_decimal(value: float, places: int = 2) -> str:
    """Fixed decimals with thousands separators (``1234.5`` -> ``"1,234.50"``)."""
    return f"{value:,.{places}f}"


def _trim(value: float) -> str:
    text = f"{value:.2f}"
    return text.rstrip("0").rstrip(".")
