"""Human-readable display values for search results."""

from datetime import datetime

_SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_file_size(size: int) -> str:
    """Format bytes with binary prefixes: 1536 -> '1.5 KB', 2048 -> '2 KB'."""
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    rounded = round(value, 1)
    number = str(int(rounded)) if rounded.is_integer() else str(rounded)
    return f"{number} {_SIZE_UNITS[unit]}"


def format_short_date(value: datetime) -> str:
    """Format a date as 'Jan 5, 2024'."""
    return f"{value:%b} {value.day}, {value.year}"
