"""
Unit tests for date/time parsing helpers.
"""
from __future__ import annotations

from datetime import date

from studydash.utils import (
    date_range_around,
    parse_date_string,
    parse_int_safe,
    parse_time_string,
    shift_months,
)


def test_parse_time_string_valid_and_invalid():
    assert parse_time_string("09:05") == (9, 5)
    assert parse_time_string("23:59") == (23, 59)
    assert parse_time_string("24:00") is None
    assert parse_time_string("9") is None
    assert parse_time_string(None) is None  # type: ignore[arg-type]


def test_parse_date_string():
    assert parse_date_string("2025-02-28") == date(2025, 2, 28)
    assert parse_date_string("2025-02-30") is None
    assert parse_date_string("tomorrow") is None


def test_parse_int_safe():
    assert parse_int_safe("-300") == -300
    assert parse_int_safe("abc") is None
    assert parse_int_safe(None, 7) == 7


def test_shift_months_clamps_day():
    assert shift_months(date(2025, 3, 31), -1) == date(2025, 2, 28)
    assert shift_months(date(2024, 3, 31), -1) == date(2024, 2, 29)


def test_shift_months_crosses_year():
    assert shift_months(date(2025, 11, 15), 3) == date(2026, 2, 15)
    assert shift_months(date(2025, 1, 15), -2) == date(2024, 11, 15)


def test_date_range_around():
    assert date_range_around(date(2025, 1, 10), 2, 3) == ("2024-11-10", "2025-04-10")
