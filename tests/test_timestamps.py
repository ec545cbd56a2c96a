"""
Unit tests for Canvas timestamp normalization (pure, no DB).
"""
from __future__ import annotations

import pytest

from studydash.domain.canvas.timestamps import (
    normalize_timestamp,
    parse_canvas_timestamp,
    timestamp_candidates,
)


def test_normalize_utc_z_suffix_to_eastern_winter():
    """04:59Z in January is 23:59 the previous day in EST (UTC-5)."""
    assert normalize_timestamp("2025-01-15T04:59:00Z") == ("2025-01-14", "23:59")


def test_normalize_utc_to_eastern_summer():
    """03:59Z in June is 23:59 the previous day in EDT (UTC-4)."""
    assert normalize_timestamp("2025-06-01T03:59:00Z") == ("2025-05-31", "23:59")


def test_normalize_naive_input_is_treated_as_utc():
    assert normalize_timestamp("2025-01-15T12:00:00") == ("2025-01-15", "07:00")


def test_normalize_explicit_offset():
    """12:00+02:00 is 10:00Z, i.e. 05:00 EST."""
    assert normalize_timestamp("2025-01-15T12:00:00+02:00") == ("2025-01-15", "05:00")


def test_normalize_ignores_client_timezone_and_offset():
    ts = "2025-03-20T15:30:00Z"
    baseline = normalize_timestamp(ts)
    assert normalize_timestamp(ts, "Asia/Tokyo", -540) == baseline
    assert normalize_timestamp(ts, "Europe/Helsinki", 120) == baseline


def test_normalize_is_deterministic():
    ts = "2025-11-02T06:30:00Z"
    assert normalize_timestamp(ts) == normalize_timestamp(ts)


@pytest.mark.parametrize("bad", ["", "   ", "not-a-date", "2025-13-45T00:00:00Z"])
def test_malformed_timestamp_raises(bad):
    with pytest.raises(ValueError):
        normalize_timestamp(bad)


def test_parse_canvas_timestamp_returns_aware_utc():
    dt = parse_canvas_timestamp("2025-01-15T04:59:00Z")
    assert dt.utcoffset() is not None
    assert dt.utcoffset().total_seconds() == 0
    assert (dt.hour, dt.minute) == (4, 59)


def test_timestamp_candidates_disagree_near_midnight():
    """Only the reference-zone reading moves the date back."""
    c = timestamp_candidates("2025-01-15T02:00:00Z")
    assert c.local == "2025-01-15"
    assert c.utc == "2025-01-15"
    assert c.reference == "2025-01-14"
