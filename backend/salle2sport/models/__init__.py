"""
Database models for Salle2Sport.

- User: members and administrators
- ClassSession: scheduled coached classes
- Booking: a user's seat in a class
- Subscription: the monthly plan billed to a user
"""

from ..core.enums import BookingStatus, PlanType, RoleName
from .booking import Booking
from .class_session import ClassSession
from .subscription import Subscription
from .user import User

__all__ = [
    "Booking",
    "BookingStatus",
    "ClassSession",
    "PlanType",
    "RoleName",
    "Subscription",
    "User",
]
