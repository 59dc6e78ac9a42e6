# backend/salle2sport/repositories/class_session_repository.py
"""
Class session data access.

Includes the locked read used to serialise bookings on the same class and
the aggregate queries behind the availability and popularity views.
"""

from datetime import datetime
import logging
from typing import List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import BookingStatus
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.class_session import ClassSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ClassSessionRepository(BaseRepository[ClassSession]):
    def __init__(self, db: Session):
        super().__init__(db, ClassSession)

    def get_for_update(self, class_id: str) -> Optional[ClassSession]:
        """
        Load a class with a row lock held until the surrounding transaction ends.

        Concurrent bookings of the same class queue behind this lock, so the
        capacity read and the booking insert happen as one unit.
        """
        try:
            return (
                self._build_query()
                .filter(ClassSession.id == class_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error locking class %s: %s", class_id, e)
            raise RepositoryException(f"Failed to lock class: {e}") from e

    def get_coach_sessions_starting_before(
        self,
        coach: str,
        before: datetime,
        exclude_class_id: Optional[str] = None,
    ) -> List[ClassSession]:
        """Non-cancelled classes of ``coach`` that start before ``before``."""
        query = self._build_query().filter(
            ClassSession.coach == coach,
            ClassSession.is_cancelled.is_(False),
            ClassSession.starts_at < before,
        )
        if exclude_class_id:
            query = query.filter(ClassSession.id != exclude_class_id)
        return self._execute_query(query)

    def list_with_confirmed_counts(
        self, include_cancelled: bool = True
    ) -> List[Tuple[ClassSession, int]]:
        """Every class with its CONFIRMED booking count, soonest first."""
        confirmed = func.coalesce(
            func.sum(case((Booking.status == BookingStatus.CONFIRMED.value, 1), else_=0)), 0
        )
        try:
            query = (
                self.db.query(ClassSession, confirmed)
                .outerjoin(Booking, Booking.class_id == ClassSession.id)
                .group_by(ClassSession.id)
                .order_by(ClassSession.starts_at.asc())
            )
            if not include_cancelled:
                query = query.filter(ClassSession.is_cancelled.is_(False))
            return [(session, int(count)) for session, count in query.all()]
        except SQLAlchemyError as e:
            self.logger.error("Error listing classes with counts: %s", e)
            raise RepositoryException(f"Failed to list classes: {e}") from e

    def most_booked(self, limit: int = 5) -> List[Tuple[ClassSession, int]]:
        """Classes ordered by total bookings received, any status."""
        total = func.count(Booking.id)
        try:
            rows = (
                self.db.query(ClassSession, total)
                .join(Booking, Booking.class_id == ClassSession.id)
                .group_by(ClassSession.id)
                .order_by(total.desc(), ClassSession.starts_at.asc())
                .limit(limit)
                .all()
            )
            return [(session, int(count)) for session, count in rows]
        except SQLAlchemyError as e:
            self.logger.error("Error computing popular classes: %s", e)
            raise RepositoryException(f"Failed to compute popular classes: {e}") from e
