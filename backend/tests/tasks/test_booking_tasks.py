"""Tests for the Celery no-show sweep task and its schedule."""

from contextlib import contextmanager
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from salle2sport.models import Booking

from conftest import NOW


@pytest.fixture
def scoped_db(db):
    """Route the task's session_scope to the test session."""

    @contextmanager
    def _scope():
        yield db

    with patch("salle2sport.tasks.booking_tasks.session_scope", _scope):
        yield db


class TestSweepNoShowsTask:
    def test_sweeps_with_explicit_cutoff(self, scoped_db, factory):
        from salle2sport.tasks.booking_tasks import sweep_no_shows

        booking = factory.booking(factory.user(), factory.session(starts_at=NOW - timedelta(hours=1)))

        result = sweep_no_shows("2024-01-15T14:30:00Z")

        assert result == {"count": 1, "swept_at": NOW.isoformat()}
        scoped_db.expire_all()
        assert scoped_db.get(Booking, booking.id).status == "NO_SHOW"

    def test_delay_runs_eagerly_under_tests(self, scoped_db, factory):
        from salle2sport.tasks.booking_tasks import sweep_no_shows

        factory.booking(factory.user(), factory.session(starts_at=NOW - timedelta(minutes=5)))

        async_result = sweep_no_shows.delay("2024-01-15T14:30:00Z")

        assert async_result.get()["count"] == 1

    @patch("salle2sport.tasks.booking_tasks.NoShowSweeper")
    @patch("salle2sport.tasks.booking_tasks.session_scope")
    def test_defaults_to_current_time(self, mock_scope, mock_sweeper):
        from salle2sport.tasks.booking_tasks import sweep_no_shows

        mock_db = MagicMock()
        mock_scope.return_value.__enter__ = MagicMock(return_value=mock_db)
        mock_scope.return_value.__exit__ = MagicMock(return_value=False)
        mock_sweeper.return_value.sweep.return_value = 0

        result = sweep_no_shows()

        assert result["count"] == 0
        cutoff = mock_sweeper.return_value.sweep.call_args[0][0]
        assert cutoff.tzinfo is not None
        assert result["swept_at"] == cutoff.isoformat()


class TestBeatSchedule:
    def test_sweep_is_scheduled_from_settings(self, monkeypatch):
        from salle2sport.core.config import settings
        from salle2sport.tasks.beat_schedule import get_beat_schedule

        monkeypatch.setattr(settings, "no_show_sweep_minutes", 5)
        entry = get_beat_schedule()["sweep-no-shows"]

        assert entry["task"] == "salle2sport.tasks.booking_tasks.sweep_no_shows"
        assert entry["schedule"] == timedelta(minutes=5)

    def test_task_is_registered(self):
        from salle2sport.tasks.celery_app import celery_app
        import salle2sport.tasks.booking_tasks  # noqa: F401

        assert "salle2sport.tasks.booking_tasks.sweep_no_shows" in celery_app.tasks
        assert celery_app.conf.task_always_eager is True
