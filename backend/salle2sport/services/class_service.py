# backend/salle2sport/services/class_service.py
"""
Class scheduling for administrators.

Every mutating operation requires an ADMIN requester. A coach can never be
scheduled into two overlapping non-cancelled classes, and a class that has
started can no longer be edited.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.config import settings
from ..core.exceptions import (
    ActiveBookingsException,
    ClassAlreadyCancelledException,
    CoachConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..models.class_session import ClassSession
from ..repositories.factory import RepositoryFactory
from ..schemas.class_session import ClassAvailability, ClassCreate, ClassUpdate
from .base import BaseService
from .booking_service import BookingService
from .capacity import available_spots, is_fully_booked
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)


class ClassService(BaseService):
    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        booking_service: Optional[BookingService] = None,
    ):
        super().__init__(db, clock)
        self.repository = RepositoryFactory.create_class_session_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.conflict_checker = ConflictChecker(db, self.clock)
        self.booking_service = booking_service or BookingService(
            db, self.clock, conflict_checker=self.conflict_checker
        )

    @BaseService.measure_operation("create_class")
    def create_class(
        self, data: Union[ClassCreate, Mapping[str, Any]], admin_id: str
    ) -> ClassSession:
        """
        Schedule a new class.

        Raises:
            ForbiddenException: Requester is not an admin
            ValidationException: Missing fields, non-positive capacity, or a start in the past
            CoachConflictException: The coach already teaches at an overlapping time
        """
        self._require_admin(admin_id)
        payload = self.parse_payload(ClassCreate, data)
        duration = payload.duration_minutes or settings.default_class_duration_minutes
        self.log_operation("create_class", title=payload.title, coach=payload.coach)

        if payload.starts_at <= self.now():
            raise ValidationException(
                "Class datetime must be in the future",
                details={"starts_at": payload.starts_at.isoformat()},
            )

        with self.transaction():
            self._check_coach_availability(payload.coach, payload.starts_at, duration)
            session = self.repository.create(
                title=payload.title,
                coach=payload.coach,
                description=payload.description,
                starts_at=payload.starts_at,
                duration_minutes=duration,
                capacity=payload.capacity,
                is_cancelled=False,
                created_by_id=admin_id,
                created_at=self.now(),
            )

        self.logger.info(f"Class {session.id} scheduled: {session.title} with {session.coach}")
        return session

    @BaseService.measure_operation("update_class")
    def update_class(
        self,
        class_id: str,
        data: Union[ClassUpdate, Mapping[str, Any]],
        admin_id: str,
    ) -> ClassSession:
        """
        Edit a class that has not started yet.

        Raises:
            ForbiddenException: Requester is not an admin
            NotFoundException: Unknown class
            ValidationException: Class started, new start in the past, or capacity
                below the confirmed count
            CoachConflictException: The new slot overlaps another class of the coach
        """
        self._require_admin(admin_id)
        payload = self.parse_payload(ClassUpdate, data)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        with self.transaction():
            session = self.repository.get_for_update(class_id)
            if not session:
                raise NotFoundException("Class not found", details={"class_id": class_id})

            now = self.now()
            if session.starts_at <= now:
                raise ValidationException(
                    "Cannot modify past or ongoing classes", details={"class_id": class_id}
                )
            if "starts_at" in changes and changes["starts_at"] <= now:
                raise ValidationException(
                    "Class datetime must be in the future",
                    details={"starts_at": changes["starts_at"].isoformat()},
                )

            if "capacity" in changes:
                confirmed = self.booking_repository.count_confirmed_for_class(class_id)
                if changes["capacity"] < confirmed:
                    raise ValidationException(
                        f"Cannot reduce capacity below current bookings ({confirmed})",
                        details={"capacity": changes["capacity"], "confirmed": confirmed},
                    )

            if {"coach", "starts_at", "duration_minutes"} & changes.keys():
                self._check_coach_availability(
                    changes.get("coach", session.coach),
                    changes.get("starts_at", session.starts_at),
                    changes.get("duration_minutes", session.duration_minutes),
                    exclude_class_id=class_id,
                )

            self.repository.update(class_id, **changes)

        self.logger.info(f"Class {class_id} updated: {sorted(changes)}")
        return session

    @BaseService.measure_operation("delete_class")
    def delete_class(self, class_id: str, admin_id: str) -> None:
        """Delete a class that holds no confirmed bookings."""
        self._require_admin(admin_id)

        with self.transaction():
            session = self.repository.get_by_id(class_id, load_relationships=False)
            if not session:
                raise NotFoundException("Class not found", details={"class_id": class_id})
            confirmed = self.booking_repository.count_confirmed_for_class(class_id)
            if confirmed:
                raise ActiveBookingsException(
                    "Cannot delete class with active bookings. Cancel the class instead.",
                    details={"class_id": class_id, "confirmed": confirmed},
                )
            for booking in list(session.bookings):
                self.db.delete(booking)
            self.repository.delete(class_id)

        self.logger.info(f"Class {class_id} deleted")

    @BaseService.measure_operation("cancel_class")
    def cancel_class(self, class_id: str, requesting_user_id: str) -> Dict[str, int]:
        """
        Cancel a class and release every confirmed seat.

        Returns:
            ``{"cancelled_count": n}`` where n bookings became CANCELLED_BY_CLASS

        Raises:
            NotFoundException: Unknown class
            ForbiddenException: Requester is not an admin
            ClassAlreadyCancelledException: Class was cancelled before
        """
        self.log_operation("cancel_class", class_id=class_id, requesting_user_id=requesting_user_id)

        with self.transaction():
            session = self.repository.get_for_update(class_id)
            if not session:
                raise NotFoundException("Class not found", details={"class_id": class_id})
            self._require_admin(requesting_user_id)
            if session.is_cancelled:
                raise ClassAlreadyCancelledException(details={"class_id": class_id})

            session.mark_cancelled(requesting_user_id, self.now())
            self.db.flush()
            cancelled_count = self.booking_service.cancel_class_bookings(session)

        return {"cancelled_count": cancelled_count}

    def get_class(self, class_id: str) -> ClassAvailability:
        session = self.repository.get_by_id(class_id, load_relationships=False)
        if not session:
            raise NotFoundException("Class not found", details={"class_id": class_id})
        return self._availability(session, self.booking_repository.count_confirmed_for_class(class_id))

    def list_classes(self, include_cancelled: bool = True) -> List[ClassAvailability]:
        """All classes, soonest first, with live seat counts."""
        return [
            self._availability(session, confirmed)
            for session, confirmed in self.repository.list_with_confirmed_counts(include_cancelled)
        ]

    # Helpers

    def _require_admin(self, user_id: str) -> None:
        user = self.user_repository.get_by_id(user_id, load_relationships=False)
        if not user or not user.is_admin:
            self.logger.warning(f"User {user_id} attempted an admin-only class operation")
            raise ForbiddenException("Admin access required", details={"user_id": user_id})

    def _check_coach_availability(
        self, coach, starts_at, duration_minutes, exclude_class_id: Optional[str] = None
    ) -> None:
        conflicts = self.conflict_checker.find_coach_conflicts(
            coach, starts_at, duration_minutes, exclude_class_id=exclude_class_id
        )
        if conflicts:
            raise CoachConflictException(
                details={"coach": coach, "conflicts": self.conflict_checker.describe(conflicts)}
            )

    @staticmethod
    def _availability(session: ClassSession, confirmed: int) -> ClassAvailability:
        return ClassAvailability(
            id=session.id,
            title=session.title,
            coach=session.coach,
            description=session.description,
            starts_at=session.starts_at,
            duration_minutes=session.duration_minutes,
            capacity=session.capacity,
            is_cancelled=session.is_cancelled,
            bookings_count=confirmed,
            available_spots=available_spots(session, confirmed),
            is_fully_booked=is_fully_booked(session, confirmed),
        )
