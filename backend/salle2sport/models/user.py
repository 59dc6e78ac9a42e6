# backend/salle2sport/models/user.py
"""
User model for Salle2Sport.

Members and administrators share one table; ``role`` gates the
administrative operations (class scheduling and cancellation).
"""

import logging
from typing import Any

from sqlalchemy import CheckConstraint, Column, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import RoleName
from ..database import Base
from .types import UTCDateTime, utcnow

logger = logging.getLogger(__name__)


class User(Base):
    """Gym member or administrator."""

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    firstname = Column(String(100), nullable=False)
    lastname = Column(String(100), nullable=False)
    # Always stored lower-cased; uniqueness is therefore case-insensitive
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(String(10), nullable=False, default=RoleName.USER.value)
    date_joined = Column(UTCDateTime, nullable=False, default=utcnow)

    bookings = relationship("Booking", back_populates="user", cascade="all, delete-orphan")
    subscription = relationship(
        "Subscription", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (CheckConstraint("role IN ('USER', 'ADMIN')", name="ck_users_role"),)

    def __init__(self, **kwargs: Any) -> None:
        if kwargs.get("email"):
            kwargs["email"] = kwargs["email"].strip().lower()
        super().__init__(**kwargs)

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN.value

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}"

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email} ({self.role})>"
