"""Tests for the no-show reconciliation pass."""

from datetime import timedelta

from salle2sport.core.enums import BookingStatus
from salle2sport.models import Booking
from salle2sport.services.no_show_sweeper import NoShowSweeper

from conftest import NOW


def test_marks_only_started_classes(db, clock, factory):
    user = factory.user()
    past = factory.booking(user, factory.session(starts_at=NOW - timedelta(hours=1), coach="A"))
    future = factory.booking(user, factory.session(starts_at=NOW + timedelta(hours=1), coach="B"))

    count = NoShowSweeper(db, clock).sweep()

    assert count == 1
    db.expire_all()
    assert db.get(Booking, past.id).status == "NO_SHOW"
    assert db.get(Booking, past.id).updated_at == NOW
    assert db.get(Booking, future.id).status == "CONFIRMED"


def test_class_starting_exactly_now_is_not_swept(db, clock, factory):
    booking = factory.booking(factory.user(), factory.session(starts_at=NOW))

    assert NoShowSweeper(db, clock).sweep() == 0
    db.expire_all()
    assert db.get(Booking, booking.id).status == "CONFIRMED"


def test_terminal_bookings_are_untouched(db, clock, factory):
    session = factory.session(starts_at=NOW - timedelta(days=1))
    cancelled = factory.booking(factory.user(), session, status=BookingStatus.CANCELLED)
    by_class = factory.booking(factory.user(), session, status=BookingStatus.CANCELLED_BY_CLASS)

    assert NoShowSweeper(db, clock).sweep() == 0
    db.expire_all()
    assert db.get(Booking, cancelled.id).status == "CANCELLED"
    assert db.get(Booking, by_class.id).status == "CANCELLED_BY_CLASS"


def test_second_run_is_a_no_op(db, clock, factory):
    session = factory.session(starts_at=NOW - timedelta(hours=3))
    for _ in range(4):
        factory.booking(factory.user(), session)

    sweeper = NoShowSweeper(db, clock)
    assert sweeper.sweep() == 4
    assert sweeper.sweep() == 0


def test_explicit_cutoff_overrides_clock(db, clock, factory):
    factory.booking(factory.user(), factory.session(starts_at=NOW + timedelta(hours=1)))

    assert NoShowSweeper(db, clock).sweep(NOW + timedelta(hours=2)) == 1


def test_sweep_records_gauge(db, clock, factory):
    from salle2sport.monitoring.prometheus_metrics import REGISTRY

    factory.booking(factory.user(), factory.session(starts_at=NOW - timedelta(minutes=1)))
    NoShowSweeper(db, clock).sweep()

    assert REGISTRY.get_sample_value("salle2sport_no_show_sweep_last_count") == 1.0
