# backend/tests/conftest.py
"""
Pytest configuration for the Salle2Sport booking core.

Every test gets a session on a shared in-memory SQLite engine. The session
joins an outer transaction through savepoints, so service-level commits
and rollbacks behave normally and everything is discarded afterwards.
"""

import os

# Must be set before any salle2sport import reads settings
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from salle2sport.core.clock import FixedClock
from salle2sport.core.enums import BookingStatus, PlanType, RoleName
from salle2sport.database import Base, enable_sqlite_immediate_transactions
import salle2sport.models  # noqa: F401
from salle2sport.models import Booking, ClassSession, Subscription, User

# Monday 15 January 2024, 14:30 UTC
NOW = datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def _engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    # pysqlite must not manage BEGIN itself or the per-test savepoints leak
    enable_sqlite_immediate_transactions(engine)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(_engine) -> Session:
    """Transactional session bound to the shared in-memory engine."""
    connection = _engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        join_transaction_mode="create_savepoint",
        expire_on_commit=False,
    )
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


class Factory:
    """Builds committed rows for tests."""

    def __init__(self, db: Session):
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def user(self, email: Optional[str] = None, role: RoleName = RoleName.USER, **kwargs) -> User:
        n = self._next()
        user = User(
            firstname=kwargs.pop("firstname", f"Membre{n}"),
            lastname=kwargs.pop("lastname", "Dupont"),
            email=email or f"membre{n}@salle2sport.fr",
            role=role.value,
            date_joined=kwargs.pop("date_joined", NOW - timedelta(days=30)),
            **kwargs,
        )
        self.db.add(user)
        self.db.commit()
        return user

    def admin(self, **kwargs) -> User:
        return self.user(role=RoleName.ADMIN, **kwargs)

    def session(
        self,
        starts_at: Optional[datetime] = None,
        duration_minutes: int = 60,
        capacity: int = 10,
        coach: str = "Marie Curie",
        **kwargs,
    ) -> ClassSession:
        n = self._next()
        session = ClassSession(
            title=kwargs.pop("title", f"Cours {n}"),
            coach=coach,
            starts_at=starts_at or NOW + timedelta(days=1),
            duration_minutes=duration_minutes,
            capacity=capacity,
            is_cancelled=kwargs.pop("is_cancelled", False),
            **kwargs,
        )
        self.db.add(session)
        self.db.commit()
        return session

    def booking(
        self,
        user: User,
        session: ClassSession,
        status: BookingStatus = BookingStatus.CONFIRMED,
        created_at: Optional[datetime] = None,
    ) -> Booking:
        booking = Booking(
            user_id=user.id,
            class_id=session.id,
            status=status.value,
            created_at=created_at or NOW - timedelta(days=1),
        )
        self.db.add(booking)
        self.db.commit()
        return booking

    def subscription(
        self,
        user: User,
        plan_type: PlanType = PlanType.STANDARD,
        start_date: Optional[datetime] = None,
        active: bool = True,
    ) -> Subscription:
        start = start_date or NOW - timedelta(days=10)
        subscription = Subscription(
            user_id=user.id,
            plan_type=plan_type.value,
            start_date=start,
            end_date=start + timedelta(days=30),
            active=active,
            auto_renew=True,
        )
        self.db.add(subscription)
        self.db.commit()
        return subscription


@pytest.fixture
def factory(db) -> Factory:
    return Factory(db)
