"""Booking DTOs."""

from datetime import datetime
from typing import Optional

from ..core.enums import BookingStatus
from .base import StandardizedModel


class BookingClassSummary(StandardizedModel):
    id: str
    title: str
    coach: str
    starts_at: datetime


class BookingResponse(StandardizedModel):
    id: str
    user_id: str
    class_id: str
    status: BookingStatus
    created_at: datetime
    class_session: Optional[BookingClassSummary] = None

