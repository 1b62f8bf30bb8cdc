"""Developer fatigue from late-night commit times.

A lagging, branch-wide signal: it looks at the latest commits on the branch,
not at the change being evaluated. Hours are read in a fixed civil timezone so
results do not depend on the host's local zone.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from nightwatch.exceptions import ConfigError

DEFAULT_TIMEZONE = "Australia/Sydney"
COMMIT_LIMIT = 50
WINDOW_DAYS = 7
LATE_START_HOUR = 0
LATE_END_HOUR = 5
FATIGUE_THRESHOLD = 3


@dataclass(frozen=True)
class FatigueSignal:
    fatigue: bool
    late_week_count: int


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"Unknown timezone: {name!r}") from e


def hour_in_zone(ts: datetime, zone: ZoneInfo) -> int:
    """Hour of day of ``ts`` in ``zone``. Naive datetimes are taken as UTC."""
    return _as_utc(ts).astimezone(zone).hour


def detect_fatigue(
    timestamps: Iterable[datetime],
    now: datetime,
    tz_name: str = DEFAULT_TIMEZONE,
    window_days: int = WINDOW_DAYS,
    late_start_hour: int = LATE_START_HOUR,
    late_end_hour: int = LATE_END_HOUR,
    threshold: int = FATIGUE_THRESHOLD,
) -> FatigueSignal:
    """Count commits inside the window made in [late_start_hour, late_end_hour)."""
    zone = get_zone(tz_name)
    cutoff = _as_utc(now) - timedelta(days=window_days)

    late = 0
    for ts in timestamps:
        if _as_utc(ts) < cutoff:
            continue
        if late_start_hour <= hour_in_zone(ts, zone) < late_end_hour:
            late += 1

    return FatigueSignal(fatigue=late >= threshold, late_week_count=late)
