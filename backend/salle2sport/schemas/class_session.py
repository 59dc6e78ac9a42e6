"""Class scheduling DTOs."""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, Field, field_validator

from .base import StandardizedModel, StrictRequestModel, to_utc


class ClassCreate(StrictRequestModel):
    title: str = Field(..., min_length=1, max_length=200)
    coach: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    starts_at: datetime = Field(..., validation_alias=AliasChoices("starts_at", "datetime"))
    # None means the configured default duration
    duration_minutes: Optional[int] = Field(None, gt=0, le=24 * 60)
    capacity: int = Field(..., gt=0)

    @field_validator("starts_at")
    @classmethod
    def _normalize_start(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value)


class ClassUpdate(StrictRequestModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    coach: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    starts_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("starts_at", "datetime")
    )
    duration_minutes: Optional[int] = Field(None, gt=0, le=24 * 60)
    capacity: Optional[int] = Field(None, gt=0)

    @field_validator("starts_at")
    @classmethod
    def _normalize_start(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value)


class ClassAvailability(StandardizedModel):
    """A class with its live seat count."""

    id: str
    title: str
    coach: str
    description: Optional[str] = None
    starts_at: datetime
    duration_minutes: int
    capacity: int
    is_cancelled: bool
    bookings_count: int
    available_spots: int
    is_fully_booked: bool
