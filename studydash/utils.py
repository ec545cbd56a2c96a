"""
Utility functions for date/time parsing and formatting.
"""
from __future__ import annotations

import calendar
from datetime import date
from typing import Optional


def parse_time_string(time_str: str) -> Optional[tuple[int, int]]:
    """Parse HH:MM time string. Returns (hour, minute) or None."""
    try:
        parts = time_str.split(":")
        if len(parts) == 2:
            hour, minute = int(parts[0]), int(parts[1])
            if 0 <= hour <= 23 and 0 <= minute <= 59:
                return (hour, minute)
    except (ValueError, AttributeError):
        pass
    return None


def parse_date_string(date_str: str) -> Optional[date]:
    """Parse YYYY-MM-DD. Returns date or None."""
    try:
        return date.fromisoformat(date_str)
    except (ValueError, TypeError):
        return None


def parse_int_safe(value: Optional[str], default: Optional[int] = None) -> Optional[int]:
    """Safely parse integer, returns default on error."""
    try:
        return int(value)  # type: ignore[arg-type]
    except (ValueError, TypeError):
        return default


def shift_months(day: date, months: int) -> date:
    """Move a date by whole months, clamping to the last day of the target month."""
    index = day.month - 1 + months
    year = day.year + index // 12
    month = index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def date_range_around(today: date, months_before: int, months_after: int) -> tuple[str, str]:
    """(start, end) as YYYY-MM-DD strings around today."""
    start = shift_months(today, -months_before)
    end = shift_months(today, months_after)
    return start.isoformat(), end.isoformat()
