"""Helpers for ``YYYY-MM`` month keys.

Keys are zero-padded, so lexicographic order is chronological order.
"""

import calendar
from datetime import date


def month_key(d: date) -> str:
    return d.strftime("%Y-%m")


def parse_month_key(key: str) -> tuple[int, int]:
    """Split ``YYYY-MM`` into ``(year, month)``; raises ``ValueError`` if malformed."""
    try:
        year_str, month_str = key.split("-")
        year, month = int(year_str), int(month_str)
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid month key '{key}'. Expected YYYY-MM.") from e
    if len(year_str) != 4 or len(month_str) != 2 or not 1 <= month <= 12:
        raise ValueError(f"Invalid month key '{key}'. Expected YYYY-MM.")
    return year, month


def shift_month(key: str, delta: int) -> str:
    year, month = parse_month_key(key)
    index = year * 12 + (month - 1) + delta
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def days_in_month(key: str) -> int:
    year, month = parse_month_key(key)
    return calendar.monthrange(year, month)[1]
