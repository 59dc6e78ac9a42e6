# backend/salle2sport/core/enums.py
"""
Core enums for the Salle2Sport booking core.

String-valued so they persist as plain text columns and compare equal to
the raw values read back from the database.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles gating administrative operations."""

    USER = "USER"
    ADMIN = "ADMIN"


class PlanType(str, Enum):
    """Subscription plans with a fixed monthly base price."""

    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"
    ETUDIANT = "ETUDIANT"


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    CONFIRMED = "CONFIRMED"  # Occupies a capacity slot
    CANCELLED = "CANCELLED"  # Timely voluntary cancellation
    NO_SHOW = "NO_SHOW"  # Late cancellation or lapse after class start
    CANCELLED_BY_CLASS = "CANCELLED_BY_CLASS"  # Class cancelled by an admin

    @classmethod
    def terminal(cls) -> frozenset:
        return frozenset({cls.CANCELLED, cls.NO_SHOW, cls.CANCELLED_BY_CLASS})
