"""Human-readable formatting for sizes, numbers, durations and dates."""

import math
from datetime import datetime

SIZE_UNITS = ['Bytes', 'KB', 'MB', 'GB', 'TB']


def format_file_size(num_bytes: int) -> str:
    """Format a byte count using 1024-based units, e.g. ``1536 -> '1.5 KB'``."""
    if num_bytes <= 0:
        return '0 Bytes'

    k = 1024
    i = min(int(math.floor(math.log(num_bytes) / math.log(k))), len(SIZE_UNITS) - 1)
    value = round(num_bytes / (k ** i), 2)
    return f"{value:g} {SIZE_UNITS[i]}"


def format_number(value: float, precision: int = 4) -> str:
    return f"{value:.{precision}f}"


def format_percent(value: float, precision: int = 1) -> str:
    """Format a ratio in [0, 1] as a percentage string."""
    return f"{value * 100:.{precision}f}%"


def format_duration(seconds: float) -> str:
    """
    Format an elapsed time.

    Below one second the value is shown in milliseconds, below a minute in
    seconds with two decimals, otherwise as minutes and whole seconds.
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.2f} s"

    minutes = int(seconds // 60)
    remaining = seconds % 60
    return f"{minutes}m {remaining:.0f}s"


def format_date(value: datetime) -> str:
    return value.strftime("%b %d, %Y, %H:%M:%S")
