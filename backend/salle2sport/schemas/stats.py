"""Dashboard rollups."""

from datetime import datetime
from typing import List, Optional

from .base import Money, StandardizedModel
from .booking import BookingResponse
from .subscription import SubscriptionResponse
from .user import UserResponse


class BookingStats(StandardizedModel):
    total_bookings: int = 0
    confirmed_bookings: int = 0
    cancelled_bookings: int = 0
    no_shows: int = 0
    cancelled_by_class: int = 0
    monthly_no_shows: int = 0
    monthly_bookings: int = 0
    # Percentage of all bookings that ended as NO_SHOW; 0 when there are none
    no_show_rate: float = 0.0


class UserDashboard(StandardizedModel):
    user: UserResponse
    subscription: Optional[SubscriptionResponse] = None
    stats: BookingStats
    recent_bookings: List[BookingResponse]


class PopularClass(StandardizedModel):
    class_id: str
    title: str
    coach: str
    starts_at: datetime
    total_bookings: int


class RecentUser(StandardizedModel):
    id: str
    firstname: str
    lastname: str
    email: str
    date_joined: datetime


class AdminOverview(StandardizedModel):
    total_users: int
    active_subscriptions: int
    total_bookings: int
    today_bookings: int
    monthly_revenue: Money
    yearly_revenue_estimate: Money
    popular_classes: List[PopularClass]
    recent_users: List[RecentUser]
