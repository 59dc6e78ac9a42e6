"""Unit tests for half-open interval overlap."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from salle2sport.services.conflict_checker import overlaps

T0 = datetime(2024, 1, 20, 10, 0, tzinfo=timezone.utc)


def test_identical_slots_overlap():
    assert overlaps(T0, 60, T0, 60)


def test_partial_overlap_both_directions():
    later = T0 + timedelta(minutes=30)
    assert overlaps(T0, 60, later, 60)
    assert overlaps(later, 60, T0, 60)


def test_back_to_back_does_not_overlap():
    assert not overlaps(T0, 60, T0 + timedelta(minutes=60), 60)
    assert not overlaps(T0 + timedelta(minutes=60), 60, T0, 60)


def test_containment_overlaps():
    assert overlaps(T0, 120, T0 + timedelta(minutes=30), 15)


def test_disjoint_slots():
    assert not overlaps(T0, 45, T0 + timedelta(hours=2), 60)


def test_naive_datetimes_are_treated_as_utc():
    naive = datetime(2024, 1, 20, 10, 30)
    assert overlaps(T0, 60, naive, 60)
