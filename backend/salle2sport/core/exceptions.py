# backend/salle2sport/core/exceptions.py
"""
Domain-specific exceptions for the Salle2Sport booking core.

These exceptions carry business-focused messages and stable codes. The
core never builds transport responses; an outer API layer can map
``http_status`` to whatever protocol it speaks.
"""

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


class ValidationException(DomainException):
    """Raised when input is malformed or fails business validation."""

    http_status = 400


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    http_status = 404


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    http_status = 403


class ConflictException(DomainException):
    """Raised when an operation violates a booking or scheduling rule."""

    http_status = 409


class ServiceException(DomainException):
    """Raised when a service operation fails unexpectedly."""

    http_status = 500


# Specific business exceptions


class _CodedConflict(ConflictException):
    default_code = "CONFLICT"
    default_message = "Operation conflicts with existing data"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or self.default_message, code=self.default_code, details=details)


class ClassCancelledException(_CodedConflict):
    """Raised when booking a class that has been cancelled."""

    default_code = "CLASS_CANCELLED"
    default_message = "Class is cancelled"


class ClassFullException(_CodedConflict):
    """Raised when a class has no remaining capacity."""

    default_code = "CLASS_FULL"
    default_message = "Class is full"


class DuplicateBookingException(_CodedConflict):
    """Raised when the user already holds an active booking for the class."""

    default_code = "DUPLICATE_BOOKING"
    default_message = "User already booked this class"


class TimeOverlapException(_CodedConflict):
    """Raised when a booking overlaps another confirmed booking of the same user."""

    default_code = "TIME_OVERLAP"
    default_message = "User has conflicting booking at this time"


class ClassAlreadyCancelledException(_CodedConflict):
    default_code = "ALREADY_CANCELLED"
    default_message = "Class is already cancelled"


class CoachConflictException(_CodedConflict):
    default_code = "COACH_CONFLICT"
    default_message = "Coach has conflicting class at this time"


class EmailAlreadyExistsException(_CodedConflict):
    default_code = "EMAIL_EXISTS"
    default_message = "Email already exists"


class SubscriptionExistsException(_CodedConflict):
    default_code = "SUBSCRIPTION_EXISTS"
    default_message = "User already has a subscription"


class ActiveBookingsException(_CodedConflict):
    """Raised when deleting an entity that still has confirmed bookings."""

    default_code = "ACTIVE_BOOKINGS"
    default_message = "Entity has active bookings"


class InvalidTransitionException(_CodedConflict):
    """Raised when a booking leaves a terminal state."""

    default_code = "INVALID_TRANSITION"
    default_message = "Booking is already in a terminal state"


class RepositoryException(Exception):
    """Raised when repository operations fail."""
