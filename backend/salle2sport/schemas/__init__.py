"""Pydantic DTOs for service inputs and outputs."""

from .base import Money, StandardizedModel, StrictRequestModel
from .booking import BookingClassSummary, BookingResponse
from .class_session import ClassAvailability, ClassCreate, ClassUpdate
from .stats import AdminOverview, BookingStats, PopularClass, RecentUser, UserDashboard
from .subscription import (
    BillingDetails,
    BillingResult,
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionStats,
    SubscriptionUpdate,
)
from .user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "AdminOverview",
    "BillingDetails",
    "BillingResult",
    "BookingClassSummary",
    "BookingResponse",
    "BookingStats",
    "ClassAvailability",
    "ClassCreate",
    "ClassUpdate",
    "Money",
    "PopularClass",
    "RecentUser",
    "StandardizedModel",
    "StrictRequestModel",
    "SubscriptionCreate",
    "SubscriptionResponse",
    "SubscriptionStats",
    "SubscriptionUpdate",
    "UserCreate",
    "UserDashboard",
    "UserResponse",
    "UserUpdate",
]
