"""
Helpers for optional datetime handling and calendar-day math.
"""
from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import Any

import pytz


def dt_replace_utc(dt: datetime | None | Any) -> datetime | None:
    """
    Return dt with tzinfo=UTC if naive, or None if dt is None.
    Use for optional datetimes that may be naive (e.g. from SQLite).
    """
    if dt is None:
        return None
    if isinstance(dt, datetime):
        return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt
    return None


def utc_now() -> datetime:
    return datetime.now(UTC)


def tomorrow_in_timezone(tz_name: str, now: datetime | None = None) -> date:
    """
    Calendar day after `now` as seen in tz_name.

    Args:
        tz_name: IANA timezone name (e.g. "America/New_York")
        now: Reference instant; naive values are treated as UTC

    Returns:
        The local date of tomorrow in that timezone
    """
    tz = pytz.timezone(tz_name)
    reference = dt_replace_utc(now) or utc_now()
    return (reference.astimezone(tz) + timedelta(days=1)).date()
