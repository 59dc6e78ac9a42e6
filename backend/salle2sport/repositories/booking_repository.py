# backend/salle2sport/repositories/booking_repository.py
"""
Booking Repository for Salle2Sport

Handles:
- Booking CRUD (integrity errors exposed for conflict handling)
- Capacity counts over CONFIRMED bookings
- Per-user queries used by conflict checks, stats and dashboards
- Bulk status transitions for class cancellation and the no-show sweep
"""

from datetime import datetime
import logging
from typing import Any, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.enums import BookingStatus
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.class_session import ClassSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

CONFIRMED = BookingStatus.CONFIRMED.value


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def create(self, **kwargs: Any) -> Booking:
        """Create a booking, exposing integrity errors for conflict handling."""
        try:
            return super().create(**kwargs)
        except RepositoryException as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise exc.__cause__
            raise

    def _apply_eager_loading(self, query):
        return query.options(joinedload(Booking.class_session))

    # Single-class queries

    def count_confirmed_for_class(self, class_id: str) -> int:
        return self.count(class_id=class_id, status=CONFIRMED)

    def get_active_booking(self, user_id: str, class_id: str) -> Optional[Booking]:
        """The user's CONFIRMED booking for the class, if any."""
        return self.find_one_by(user_id=user_id, class_id=class_id, status=CONFIRMED)

    def get_class_bookings(self, class_id: str) -> List[Booking]:
        query = (
            self._build_query()
            .options(joinedload(Booking.user))
            .filter(Booking.class_id == class_id)
            .order_by(Booking.created_at.asc())
        )
        return self._execute_query(query)

    # Per-user queries

    def get_user_confirmed_bookings(
        self, user_id: str, exclude_class_id: Optional[str] = None
    ) -> List[Booking]:
        """CONFIRMED bookings of a user with their class loaded."""
        query = self._apply_eager_loading(self._build_query()).filter(
            Booking.user_id == user_id,
            Booking.status == CONFIRMED,
        )
        if exclude_class_id:
            query = query.filter(Booking.class_id != exclude_class_id)
        return self._execute_query(query)

    def get_user_bookings(self, user_id: str, limit: Optional[int] = None) -> List[Booking]:
        """All bookings of a user, most recently created first."""
        query = (
            self._apply_eager_loading(self._build_query())
            .filter(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return self._execute_query(query)

    def has_future_confirmed_bookings(self, user_id: str, now: datetime) -> bool:
        query = (
            self._build_query()
            .join(ClassSession, ClassSession.id == Booking.class_id)
            .filter(
                Booking.user_id == user_id,
                Booking.status == CONFIRMED,
                ClassSession.starts_at > now,
            )
        )
        try:
            return query.first() is not None
        except SQLAlchemyError as e:
            self.logger.error("Error checking future bookings for %s: %s", user_id, e)
            raise RepositoryException(f"Failed to check future bookings: {e}") from e

    def count_created_between(self, start: datetime, end: datetime) -> int:
        try:
            return (
                self._build_query()
                .filter(Booking.created_at >= start, Booking.created_at < end)
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error counting bookings between %s and %s: %s", start, end, e)
            raise RepositoryException(f"Failed to count bookings: {e}") from e

    def count_user_no_shows_since(self, user_id: str, since: datetime) -> int:
        """NO_SHOW bookings of a user whose class started at or after ``since``."""
        try:
            return (
                self._build_query()
                .join(ClassSession, ClassSession.id == Booking.class_id)
                .filter(
                    Booking.user_id == user_id,
                    Booking.status == BookingStatus.NO_SHOW.value,
                    ClassSession.starts_at >= since,
                )
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error counting no-shows for %s: %s", user_id, e)
            raise RepositoryException(f"Failed to count no-shows: {e}") from e

    # Bulk transitions

    def get_overdue_confirmed_ids(self, now: datetime) -> List[str]:
        """Ids of CONFIRMED bookings whose class started strictly before ``now``."""
        try:
            rows = (
                self.db.query(Booking.id)
                .join(ClassSession, ClassSession.id == Booking.class_id)
                .filter(Booking.status == CONFIRMED, ClassSession.starts_at < now)
                .all()
            )
            return [row[0] for row in rows]
        except SQLAlchemyError as e:
            self.logger.error("Error finding overdue bookings: %s", e)
            raise RepositoryException(f"Failed to find overdue bookings: {e}") from e

    def transition_confirmed(
        self,
        to_status: BookingStatus,
        at: datetime,
        *,
        booking_ids: Optional[Sequence[str]] = None,
        class_id: Optional[str] = None,
    ) -> int:
        """
        Move CONFIRMED bookings to ``to_status`` in one UPDATE.

        The status guard in the WHERE clause keeps terminal bookings untouched
        even if they changed since the candidates were selected.

        Returns:
            Number of rows updated
        """
        if booking_ids is None and class_id is None:
            raise ValueError("booking_ids or class_id is required")
        if booking_ids is not None and not booking_ids:
            return 0

        query = self._build_query().filter(Booking.status == CONFIRMED)
        if booking_ids is not None:
            query = query.filter(Booking.id.in_(list(booking_ids)))
        if class_id is not None:
            query = query.filter(Booking.class_id == class_id)
        try:
            return query.update(
                {Booking.status: BookingStatus(to_status).value, Booking.updated_at: at},
                synchronize_session="fetch",
            )
        except SQLAlchemyError as e:
            self.logger.error("Bulk transition to %s failed: %s", to_status, e)
            raise RepositoryException(f"Failed to update bookings: {e}") from e

