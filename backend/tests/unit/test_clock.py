"""Unit tests for time helpers."""

from datetime import datetime, timedelta, timezone

import pytz

from salle2sport.core.clock import (
    FixedClock,
    ensure_utc,
    hours_until,
    local_day_bounds,
    parse_instant,
    start_of_month,
)

NOW = datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)


class TestFixedClock:
    def test_returns_pinned_instant(self):
        assert FixedClock(NOW).now() == NOW

    def test_advance_and_set(self):
        clock = FixedClock(NOW)
        clock.advance(timedelta(hours=3))
        assert clock.now() == NOW + timedelta(hours=3)
        clock.set(datetime(2024, 2, 1))
        assert clock.now() == datetime(2024, 2, 1, tzinfo=timezone.utc)


def test_ensure_utc_converts_offsets():
    paris = pytz.timezone("Europe/Paris").localize(datetime(2024, 1, 15, 15, 30))
    assert ensure_utc(paris) == NOW
    assert ensure_utc(datetime(2024, 1, 15, 14, 30)).tzinfo is not None


def test_hours_until_is_signed():
    assert hours_until(NOW + timedelta(hours=2), NOW) == 2.0
    assert hours_until(NOW - timedelta(minutes=30), NOW) == -0.5


def test_start_of_month():
    assert start_of_month(NOW) == datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestLocalDayBounds:
    def test_paris_winter_day(self):
        start, end = local_day_bounds(NOW, "Europe/Paris")
        assert start == datetime(2024, 1, 14, 23, 0, tzinfo=timezone.utc)
        assert end == datetime(2024, 1, 15, 23, 0, tzinfo=timezone.utc)

    def test_late_utc_evening_is_next_local_day(self):
        start, _ = local_day_bounds(datetime(2024, 1, 15, 23, 30, tzinfo=timezone.utc), "Europe/Paris")
        assert start == datetime(2024, 1, 15, 23, 0, tzinfo=timezone.utc)

    def test_dst_change_day_is_23_hours(self):
        start, end = local_day_bounds(datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc), "Europe/Paris")
        assert end - start == timedelta(hours=23)


class TestParseInstant:
    def test_z_suffix(self):
        assert parse_instant("2024-01-15T14:30:00Z") == NOW

    def test_empty_is_none(self):
        assert parse_instant(None) is None
        assert parse_instant("") is None
