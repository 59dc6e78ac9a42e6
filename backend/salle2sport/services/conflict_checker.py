# backend/salle2sport/services/conflict_checker.py
"""
Conflict Checker Service for Salle2Sport

Detects overlapping schedules for members (their confirmed bookings) and
for coaches (the classes they teach). Intervals are half-open
``[start, start + duration)``: back-to-back classes never conflict.
"""

from datetime import datetime, timedelta
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock, ensure_utc
from ..models.class_session import ClassSession
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


def overlaps(
    start_a: datetime, duration_a: int, start_b: datetime, duration_b: int
) -> bool:
    """
    Whether two half-open intervals intersect.

    Args:
        start_a: Start of the first interval
        duration_a: Length of the first interval in minutes
        start_b: Start of the second interval
        duration_b: Length of the second interval in minutes
    """
    start_a, start_b = ensure_utc(start_a), ensure_utc(start_b)
    end_a = start_a + timedelta(minutes=duration_a)
    end_b = start_b + timedelta(minutes=duration_b)
    return start_a < end_b and start_b < end_a


class ConflictChecker(BaseService):
    """Schedule conflict detection for members and coaches."""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.class_repository = RepositoryFactory.create_class_session_repository(db)

    @BaseService.measure_operation("find_user_conflicts")
    def find_user_conflicts(self, user_id: str, session: ClassSession) -> List[ClassSession]:
        """
        Classes the user already holds a CONFIRMED booking for that overlap ``session``.

        The class being booked is excluded so the check is meaningful when
        re-validating an existing booking.
        """
        conflicts = [
            booking.class_session
            for booking in self.booking_repository.get_user_confirmed_bookings(
                user_id, exclude_class_id=session.id
            )
            if overlaps(
                session.starts_at,
                session.duration_minutes,
                booking.class_session.starts_at,
                booking.class_session.duration_minutes,
            )
        ]
        if conflicts:
            self.logger.warning(
                f"User {user_id} has {len(conflicts)} conflicting booking(s) with class {session.id}"
            )
        return conflicts

    @BaseService.measure_operation("find_coach_conflicts")
    def find_coach_conflicts(
        self,
        coach: str,
        starts_at: datetime,
        duration_minutes: int,
        exclude_class_id: Optional[str] = None,
    ) -> List[ClassSession]:
        """Non-cancelled classes of ``coach`` overlapping the proposed slot."""
        proposed_end = ensure_utc(starts_at) + timedelta(minutes=duration_minutes)
        candidates = self.class_repository.get_coach_sessions_starting_before(
            coach, proposed_end, exclude_class_id=exclude_class_id
        )
        conflicts = [
            candidate
            for candidate in candidates
            if overlaps(starts_at, duration_minutes, candidate.starts_at, candidate.duration_minutes)
        ]
        if conflicts:
            self.logger.warning(
                f"Coach {coach} has {len(conflicts)} conflicting class(es) at {starts_at.isoformat()}"
            )
        return conflicts

    def describe(self, conflicts: List[ClassSession]) -> List[Dict[str, Any]]:
        """Compact view of conflicting classes for error details."""
        return [
            {
                "class_id": c.id,
                "title": c.title,
                "starts_at": c.starts_at.isoformat(),
                "duration_minutes": c.duration_minutes,
            }
            for c in conflicts
        ]
