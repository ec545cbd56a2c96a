"""
Canvas timestamp normalization.

Canvas emits ISO-8601 strings suffixed with `Z`, but some installations send
local wall-clock time labelled as UTC. The stored value is always computed the
same way: parse as UTC, render in the reference zone (US Eastern). The other
readings are kept as pure functions for diagnostics only.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo

from studydash.constants import REFERENCE_TIMEZONE

logger = logging.getLogger(__name__)

_REFERENCE_TZ = ZoneInfo(REFERENCE_TIMEZONE)


class TimestampCandidates(NamedTuple):
    local: str  # 'Z' stripped, wall-clock date
    utc: str  # UTC calendar date
    reference: str  # date in REFERENCE_TIMEZONE (the stored one)


def parse_canvas_timestamp(ts: str) -> datetime:
    """Parse a Canvas timestamp as an aware UTC datetime. Raises ValueError."""
    if not isinstance(ts, str) or not ts.strip():
        raise ValueError(f"Invalid Canvas timestamp: {ts!r}")
    text = ts.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def date_as_local(ts: str) -> str:
    text = ts.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1]
    naive = datetime.fromisoformat(text)
    return naive.strftime("%Y-%m-%d")


def date_from_utc_components(ts: str) -> str:
    return parse_canvas_timestamp(ts).strftime("%Y-%m-%d")


def date_in_reference_zone(ts: str) -> str:
    return parse_canvas_timestamp(ts).astimezone(_REFERENCE_TZ).strftime("%Y-%m-%d")


def timestamp_candidates(ts: str) -> TimestampCandidates:
    candidates = TimestampCandidates(
        local=date_as_local(ts),
        utc=date_from_utc_components(ts),
        reference=date_in_reference_zone(ts),
    )
    logger.debug(
        "Canvas timestamp %s: local=%s utc=%s reference=%s",
        ts, candidates.local, candidates.utc, candidates.reference,
    )
    return candidates


def normalize_timestamp(
    ts: str,
    client_timezone: Optional[str] = None,
    client_offset: Optional[int] = None,
) -> tuple[str, str]:
    """
    Return (YYYY-MM-DD, HH:MM) for a Canvas timestamp, rendered in the
    reference zone.

    client_timezone / client_offset are accepted from the request headers but
    do not change the result.
    """
    when = parse_canvas_timestamp(ts).astimezone(_REFERENCE_TZ)
    return when.strftime("%Y-%m-%d"), when.strftime("%H:%M")
