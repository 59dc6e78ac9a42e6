"""User request/response DTOs."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from ..core.enums import RoleName
from .base import StandardizedModel, StrictRequestModel


class UserCreate(StrictRequestModel):
    firstname: str = Field(..., min_length=1, max_length=100)
    lastname: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: RoleName = RoleName.USER

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()


class UserUpdate(StrictRequestModel):
    firstname: Optional[str] = Field(None, min_length=1, max_length=100)
    lastname: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[RoleName] = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value


class UserResponse(StandardizedModel):
    id: str
    firstname: str
    lastname: str
    email: str
    role: RoleName
    date_joined: datetime
