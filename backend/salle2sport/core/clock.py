# backend/salle2sport/core/clock.py
"""
Time source used by every rule that depends on "now".

Services take a ``clock`` argument so tests can pin the instant instead of
patching ``datetime``.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import pytz


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """A clock frozen at a given instant until moved explicitly."""

    def __init__(self, instant: datetime):
        self._instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta


def ensure_utc(dt: datetime) -> datetime:
    """
    Return ``dt`` as an aware UTC datetime.

    Naive values are assumed to already be UTC (SQLite drops tzinfo on
    readback).
    """
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(timezone.utc)


def hours_until(target: datetime, now: datetime) -> float:
    """Hours from ``now`` until ``target``; negative once ``target`` has passed."""
    return (ensure_utc(target) - ensure_utc(now)).total_seconds() / 3600


def start_of_month(now: datetime) -> datetime:
    """First instant of the UTC calendar month containing ``now``."""
    now = ensure_utc(now)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def local_day_bounds(now: datetime, tz_name: str) -> tuple:
    """
    UTC bounds ``[start, end)`` of the local calendar day containing ``now``.

    Args:
        now: Reference instant
        tz_name: Olson timezone name, e.g. ``Europe/Paris``
    """
    local_tz = pytz.timezone(tz_name)
    local_now = ensure_utc(now).astimezone(local_tz)
    local_midnight = local_tz.localize(
        datetime(local_now.year, local_now.month, local_now.day)
    )
    next_midnight = local_tz.localize(
        datetime(local_now.year, local_now.month, local_now.day) + timedelta(days=1)
    )
    return ensure_utc(local_midnight), ensure_utc(next_midnight)


def parse_instant(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix accepted) into aware UTC."""
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


default_clock = SystemClock()
