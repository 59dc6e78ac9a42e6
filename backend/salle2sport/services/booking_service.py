# backend/salle2sport/services/booking_service.py
"""
Booking Service for Salle2Sport

Owns the booking lifecycle: CONFIRMED on creation, then exactly one move to
CANCELLED, NO_SHOW or CANCELLED_BY_CLASS.

Creation checks run in a fixed order (user, class, cancelled class,
capacity, duplicate, time overlap) and the first violation wins. The class
row is locked for the duration of the transaction so two members cannot
both take the last seat.
"""

from datetime import timedelta
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.clock import Clock, hours_until
from ..core.config import settings
from ..core.enums import BookingStatus
from ..core.exceptions import (
    ClassCancelledException,
    ClassFullException,
    DomainException,
    DuplicateBookingException,
    ForbiddenException,
    NotFoundException,
    TimeOverlapException,
)
from ..models.booking import Booking
from ..models.class_session import ClassSession
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .capacity import has_capacity
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    """Create, cancel and bulk-transition bookings."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        conflict_checker: Optional[ConflictChecker] = None,
    ):
        super().__init__(db, clock)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.class_repository = RepositoryFactory.create_class_session_repository(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db, self.clock)

    @BaseService.measure_operation("create_booking")
    def create_booking(self, user_id: str, class_id: str) -> Booking:
        """
        Book a class for a member.

        Raises:
            NotFoundException: Unknown user or class
            ClassCancelledException: The class was cancelled
            ClassFullException: No seat left
            DuplicateBookingException: Member already holds a seat in this class
            TimeOverlapException: Member holds a seat in an overlapping class
        """
        self.log_operation("create_booking", user_id=user_id, class_id=class_id)

        with self.transaction():
            self._require_user(user_id)
            session = self.class_repository.get_for_update(class_id)
            if not session:
                raise NotFoundException("Class not found", details={"class_id": class_id})

            violations = self._rule_violations(user_id, session)
            if violations:
                self.logger.warning(
                    f"Booking rejected for user {user_id} on class {class_id}: {violations[0].code}"
                )
                raise violations[0]

            try:
                booking = self.repository.create(
                    user_id=user_id,
                    class_id=class_id,
                    status=BookingStatus.CONFIRMED.value,
                    created_at=self.now(),
                )
            except IntegrityError as exc:
                # Another transaction inserted the same active pair first
                raise DuplicateBookingException(
                    details={"user_id": user_id, "class_id": class_id}
                ) from exc

            # Backends without row locks can still let a concurrent insert through
            confirmed_count = self.repository.count_confirmed_for_class(class_id)
            if confirmed_count > session.capacity:
                raise ClassFullException(
                    details={
                        "class_id": class_id,
                        "capacity": session.capacity,
                        "confirmed": confirmed_count - 1,
                    }
                )

        prometheus_metrics.record_booking_transition(BookingStatus.CONFIRMED.value)
        self.logger.info(f"Booking {booking.id} created for user {user_id} in class {class_id}")
        return booking

    @BaseService.measure_operation("can_user_book_class")
    def can_user_book_class(self, user_id: str, class_id: str) -> Dict[str, Any]:
        """
        Dry-run of ``create_booking`` reporting every rule that would fail.

        Returns:
            ``{"valid": bool, "errors": [message, ...]}``
        """
        user = self.user_repository.get_by_id(user_id, load_relationships=False)
        session = self.class_repository.get_by_id(class_id, load_relationships=False)
        errors: List[str] = []
        if not user:
            errors.append("User not found")
        if not session:
            errors.append("Class not found")
        if user and session:
            errors.extend(v.message for v in self._rule_violations(user_id, session))
        return {"valid": not errors, "errors": errors}

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str, requesting_user_id: str) -> Booking:
        """
        Cancel a booking on behalf of its owner.

        With at least ``cancellation_notice_hours`` before the class starts the
        booking becomes CANCELLED; any later it becomes NO_SHOW.

        Raises:
            NotFoundException: Unknown booking, or booking already terminal
            ForbiddenException: Requester does not own the booking
        """
        self.log_operation(
            "cancel_booking", booking_id=booking_id, requesting_user_id=requesting_user_id
        )

        with self.transaction():
            booking = self.repository.get_by_id(booking_id)
            if not booking:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})
            if booking.user_id != requesting_user_id:
                raise ForbiddenException(
                    "Access denied", details={"booking_id": booking_id, "user_id": requesting_user_id}
                )
            if booking.is_terminal:
                raise NotFoundException(
                    "Booking not found or already cancelled",
                    details={"booking_id": booking_id, "status": booking.status},
                )

            now = self.now()
            starts_at = booking.class_session.starts_at
            timely = starts_at - now >= timedelta(hours=settings.cancellation_notice_hours)
            new_status = BookingStatus.CANCELLED if timely else BookingStatus.NO_SHOW
            booking.transition_to(new_status, at=now)

        prometheus_metrics.record_booking_transition(new_status.value)
        self.logger.info(
            f"Booking {booking_id} cancelled as {new_status.value} "
            f"({hours_until(starts_at, now):.2f}h before class)"
        )
        return booking

    def cancel_class_bookings(self, session: ClassSession) -> int:
        """
        Move every CONFIRMED booking of a cancelled class to CANCELLED_BY_CLASS.

        Runs inside the caller's transaction.

        Returns:
            Number of bookings affected
        """
        count = self.repository.transition_confirmed(
            BookingStatus.CANCELLED_BY_CLASS, self.now(), class_id=session.id
        )
        prometheus_metrics.record_booking_transition(
            BookingStatus.CANCELLED_BY_CLASS.value, count
        )
        self.logger.info(f"{count} booking(s) cancelled with class {session.id}")
        return count

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if not booking:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return booking

    def get_user_bookings(self, user_id: str) -> List[Booking]:
        self._require_user(user_id)
        return self.repository.get_user_bookings(user_id)

    def get_class_bookings(self, class_id: str) -> List[Booking]:
        if not self.class_repository.exists(id=class_id):
            raise NotFoundException("Class not found", details={"class_id": class_id})
        return self.repository.get_class_bookings(class_id)

    # Helpers

    def _require_user(self, user_id: str) -> None:
        if not self.user_repository.exists(id=user_id):
            raise NotFoundException("User not found", details={"user_id": user_id})

    def _rule_violations(self, user_id: str, session: ClassSession) -> List[DomainException]:
        """Business-rule failures for booking ``session``, in check order."""
        violations: List[DomainException] = []

        if session.is_cancelled:
            violations.append(ClassCancelledException(details={"class_id": session.id}))

        confirmed_count = self.repository.count_confirmed_for_class(session.id)
        if not has_capacity(session, confirmed_count):
            violations.append(
                ClassFullException(
                    details={
                        "class_id": session.id,
                        "capacity": session.capacity,
                        "confirmed": confirmed_count,
                    }
                )
            )

        if self.repository.get_active_booking(user_id, session.id):
            violations.append(
                DuplicateBookingException(details={"user_id": user_id, "class_id": session.id})
            )

        conflicts = self.conflict_checker.find_user_conflicts(user_id, session)
        if conflicts:
            violations.append(
                TimeOverlapException(
                    details={"conflicts": self.conflict_checker.describe(conflicts)}
                )
            )

        return violations
