"""
Repository layer for Salle2Sport.

Usage:
    from salle2sport.repositories import RepositoryFactory

    bookings = RepositoryFactory.create_booking_repository(db)
    bookings.count_confirmed_for_class(class_id)
"""

from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .class_session_repository import ClassSessionRepository
from .factory import RepositoryFactory
from .subscription_repository import SubscriptionRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "ClassSessionRepository",
    "IRepository",
    "RepositoryFactory",
    "SubscriptionRepository",
    "UserRepository",
]
