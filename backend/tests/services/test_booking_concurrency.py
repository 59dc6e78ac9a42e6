"""
Concurrent bookings against a file-backed SQLite database.

Each member books from its own thread and session, the way two web
requests would.
"""

import threading
import time

import pytest
from sqlalchemy.orm import sessionmaker

from salle2sport.core.clock import FixedClock
from salle2sport.core.enums import BookingStatus
from salle2sport.core.exceptions import DomainException
from salle2sport.database import create_db_engine, init_db
from salle2sport.models import Booking
from salle2sport.repositories.booking_repository import BookingRepository
from salle2sport.services.booking_service import BookingService

from conftest import NOW, Factory


@pytest.fixture
def file_sessions(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'bookings.db'}")
    init_db(bind=engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def slow_count(monkeypatch):
    """Widen the gap between counting seats and inserting the booking."""
    original = BookingRepository.count_confirmed_for_class

    def _count(self, class_id):
        confirmed = original(self, class_id)
        time.sleep(0.2)
        return confirmed

    monkeypatch.setattr(BookingRepository, "count_confirmed_for_class", _count)


def _book_concurrently(file_sessions, user_ids, class_id):
    barrier = threading.Barrier(len(user_ids))
    results = {}

    def _book(user_id):
        with file_sessions() as db:
            service = BookingService(db, FixedClock(NOW))
            barrier.wait(timeout=5)
            try:
                service.create_booking(user_id, class_id)
                results[user_id] = "ok"
            except DomainException as exc:
                results[user_id] = exc.code

    threads = [threading.Thread(target=_book, args=(user_id,)) for user_id in user_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=15)
    return results


def _confirmed(file_sessions, class_id):
    with file_sessions() as db:
        return (
            db.query(Booking)
            .filter_by(class_id=class_id, status=BookingStatus.CONFIRMED.value)
            .count()
        )


def test_only_one_member_gets_the_last_seat(file_sessions, slow_count):
    with file_sessions() as setup:
        factory = Factory(setup)
        class_id = factory.session(capacity=1).id
        user_ids = [factory.user().id, factory.user().id]

    results = _book_concurrently(file_sessions, user_ids, class_id)

    assert sorted(results.values()) == ["CLASS_FULL", "ok"]
    assert _confirmed(file_sessions, class_id) == 1


def test_concurrent_bookings_fill_but_never_exceed_capacity(file_sessions, slow_count):
    with file_sessions() as setup:
        factory = Factory(setup)
        class_id = factory.session(capacity=2).id
        user_ids = [factory.user().id for _ in range(3)]

    results = _book_concurrently(file_sessions, user_ids, class_id)

    assert sorted(results.values()) == ["CLASS_FULL", "ok", "ok"]
    assert _confirmed(file_sessions, class_id) == 2


def test_sqlite_engine_takes_write_lock_at_begin(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'lock.db'}")
    try:
        with engine.connect() as conn:
            conn.begin()
            assert conn.connection.driver_connection.in_transaction
    finally:
        engine.dispose()
