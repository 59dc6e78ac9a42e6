"""Tests for engine and session helpers."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

from salle2sport import database
from salle2sport.models import User


def test_sqlite_engine_allows_cross_thread_use():
    kwargs = database._build_engine_kwargs("sqlite:///./local.db")
    assert kwargs["connect_args"] == {"check_same_thread": False}
    assert "pool_size" not in kwargs


def test_server_engine_uses_pool_settings():
    kwargs = database._build_engine_kwargs("postgresql+psycopg2://u:p@db/salle2sport")
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["pool_size"] == 5


def test_init_db_creates_every_table():
    engine = create_engine("sqlite+pysqlite:///:memory:", poolclass=StaticPool)

    database.init_db(bind=engine)

    assert set(inspect(engine).get_table_names()) == {
        "users",
        "class_sessions",
        "bookings",
        "subscriptions",
    }


class TestSessionScopes:
    def test_session_scope_commits_and_closes(self):
        session = MagicMock()
        with patch.object(database, "SessionLocal", return_value=session):
            with database.session_scope() as db:
                assert db is session

        session.commit.assert_called_once()
        session.close.assert_called_once()

    def test_session_scope_rolls_back_on_error(self):
        session = MagicMock()
        with patch.object(database, "SessionLocal", return_value=session):
            with pytest.raises(RuntimeError):
                with database.session_scope():
                    raise RuntimeError("boom")

        session.rollback.assert_called_once()
        session.commit.assert_not_called()
        session.close.assert_called_once()

    def test_get_db_generator(self):
        session = MagicMock()
        with patch.object(database, "SessionLocal", return_value=session):
            gen = database.get_db()
            assert next(gen) is session
            with pytest.raises(StopIteration):
                next(gen)

        session.commit.assert_called_once()
        session.close.assert_called_once()


class TestTestSessionIsolation:
    """Rows committed in one test must be gone in the next."""

    EMAIL = "isolation@salle2sport.fr"

    def _create_once(self, db, factory):
        assert db.query(User).filter_by(email=self.EMAIL).count() == 0
        factory.user(email=self.EMAIL)
        assert db.query(User).filter_by(email=self.EMAIL).count() == 1

    def test_first_commit(self, db, factory):
        self._create_once(db, factory)

    def test_second_commit_sees_clean_table(self, db, factory):
        self._create_once(db, factory)
