# backend/salle2sport/models/class_session.py
"""
Scheduled gym class.

A class occupies the half-open interval ``[starts_at, starts_at + duration)``.
Cancellation is terminal: a cancelled class accepts no further bookings.
"""

from datetime import datetime, timedelta
import logging
from typing import cast

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import UTCDateTime, utcnow

logger = logging.getLogger(__name__)


class ClassSession(Base):
    """A single occurrence of a coached class."""

    __tablename__ = "class_sessions"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    title = Column(String(200), nullable=False)
    coach = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    starts_at = Column("datetime", UTCDateTime, nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    capacity = Column(Integer, nullable=False)

    is_cancelled = Column(Boolean, nullable=False, default=False)
    cancelled_at = Column(UTCDateTime, nullable=True)
    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)

    created_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    bookings = relationship("Booking", back_populates="class_session")
    created_by = relationship("User", foreign_keys=[created_by_id])
    cancelled_by = relationship("User", foreign_keys=[cancelled_by_id])

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_class_sessions_capacity_positive"),
        CheckConstraint("duration_minutes > 0", name="ck_class_sessions_duration_positive"),
        Index("ix_class_sessions_coach_datetime", "coach", "datetime"),
    )

    @property
    def ends_at(self) -> datetime:
        return cast(datetime, self.starts_at) + timedelta(minutes=int(self.duration_minutes))

    def mark_cancelled(self, cancelled_by_user_id: str, at: datetime) -> None:
        """Flag the class as cancelled. Bookings are transitioned by the caller."""
        self.is_cancelled = True
        self.cancelled_at = at
        self.cancelled_by_id = cancelled_by_user_id
        logger.info(f"Class {self.id} cancelled by user {cancelled_by_user_id}")

    def __repr__(self) -> str:
        return (
            f"<ClassSession {self.id}: {self.title} with {self.coach} "
            f"at {self.starts_at} ({self.duration_minutes}min, cap={self.capacity})>"
        )
