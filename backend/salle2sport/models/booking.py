# backend/salle2sport/models/booking.py
"""
Booking model for Salle2Sport.

A booking is created CONFIRMED and moves exactly once to one of the
terminal statuses (CANCELLED, NO_SHOW, CANCELLED_BY_CLASS).

At most one CONFIRMED booking may exist per (user, class); the partial
unique index enforces it in storage as well as in the service layer, so a
user may re-book a class after cancelling.
"""

from datetime import datetime
import logging
from typing import Any, Optional

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import BookingStatus
from ..core.exceptions import InvalidTransitionException
from ..database import Base
from .types import UTCDateTime, utcnow

logger = logging.getLogger(__name__)


class Booking(Base):
    """A user's seat in a class."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    class_id = Column(String(26), ForeignKey("class_sessions.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value, index=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=True)

    user = relationship("User", back_populates="bookings")
    class_session = relationship("ClassSession", back_populates="bookings")

    __table_args__ = (
        CheckConstraint(
            "status IN ('CONFIRMED', 'CANCELLED', 'NO_SHOW', 'CANCELLED_BY_CLASS')",
            name="ck_bookings_status",
        ),
        Index(
            "uq_bookings_active_user_class",
            "user_id",
            "class_id",
            unique=True,
            sqlite_where=text("status = 'CONFIRMED'"),
            postgresql_where=text("status = 'CONFIRMED'"),
        ),
    )

    def __init__(self, **kwargs: Any) -> None:
        """Bookings always start CONFIRMED."""
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.CONFIRMED.value

    @property
    def is_terminal(self) -> bool:
        return BookingStatus(self.status) in BookingStatus.terminal()

    def transition_to(self, status: BookingStatus, at: Optional[datetime] = None) -> None:
        """
        Move a CONFIRMED booking to a terminal status.

        Raises:
            InvalidTransitionException: If the booking already left CONFIRMED
        """
        if self.is_terminal:
            raise InvalidTransitionException(
                f"Booking {self.id} is already {self.status}",
                details={"booking_id": self.id, "status": self.status},
            )
        self.status = BookingStatus(status).value
        self.updated_at = at or utcnow()
        logger.info(f"Booking {self.id} transitioned to {self.status}")

    def __repr__(self) -> str:
        return f"<Booking {self.id}: user={self.user_id}, class={self.class_id}, status={self.status}>"
