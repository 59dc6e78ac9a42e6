# backend/salle2sport/services/stats_service.py
"""
Read-only rollups over booking history for member and admin dashboards.
"""

from datetime import datetime
from decimal import Decimal
import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock, ensure_utc, local_day_bounds, start_of_month
from ..core.config import settings
from ..core.enums import BookingStatus
from ..core.exceptions import NotFoundException
from ..models.booking import Booking
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookingResponse
from ..schemas.stats import AdminOverview, BookingStats, PopularClass, RecentUser, UserDashboard
from ..schemas.subscription import SubscriptionResponse
from ..schemas.user import UserResponse
from .base import BaseService
from .billing_service import base_price, monthly_revenue

logger = logging.getLogger(__name__)

RECENT_BOOKINGS_LIMIT = 5
POPULAR_CLASSES_LIMIT = 5
RECENT_USERS_LIMIT = 10


def aggregate_booking_stats(bookings: Iterable[Booking], now: datetime) -> BookingStats:
    """
    Count bookings by status.

    Monthly figures use the UTC calendar month containing ``now``:
    no-shows by class start, bookings by creation time.
    """
    month_start = start_of_month(now)
    counts = {status: 0 for status in BookingStatus}
    total = monthly_no_shows = monthly_bookings = 0

    for booking in bookings:
        status = BookingStatus(booking.status)
        counts[status] += 1
        total += 1
        if booking.created_at and ensure_utc(booking.created_at) >= month_start:
            monthly_bookings += 1
        if (
            status == BookingStatus.NO_SHOW
            and booking.class_session is not None
            and ensure_utc(booking.class_session.starts_at) >= month_start
        ):
            monthly_no_shows += 1

    no_shows = counts[BookingStatus.NO_SHOW]
    return BookingStats(
        total_bookings=total,
        confirmed_bookings=counts[BookingStatus.CONFIRMED],
        cancelled_bookings=counts[BookingStatus.CANCELLED],
        no_shows=no_shows,
        cancelled_by_class=counts[BookingStatus.CANCELLED_BY_CLASS],
        monthly_no_shows=monthly_no_shows,
        monthly_bookings=monthly_bookings,
        no_show_rate=(no_shows / total) * 100 if total > 0 else 0.0,
    )


class StatsService(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.class_repository = RepositoryFactory.create_class_session_repository(db)
        self.subscription_repository = RepositoryFactory.create_subscription_repository(db)

    @BaseService.measure_operation("get_user_stats")
    def get_user_stats(self, user_id: str) -> BookingStats:
        """Booking rollup for one member; all zeros for a member with no history."""
        bookings = self.booking_repository.get_user_bookings(user_id)
        return aggregate_booking_stats(bookings, self.now())

    @BaseService.measure_operation("get_user_dashboard")
    def get_user_dashboard(self, user_id: str) -> UserDashboard:
        user = self.user_repository.get_by_id(user_id, load_relationships=False)
        if not user:
            raise NotFoundException("User not found", details={"user_id": user_id})

        bookings = self.booking_repository.get_user_bookings(user_id)
        subscription = self.subscription_repository.get_active_by_user_id(user_id)

        return UserDashboard(
            user=UserResponse.model_validate(user),
            subscription=(
                SubscriptionResponse.model_validate(subscription) if subscription else None
            ),
            stats=aggregate_booking_stats(bookings, self.now()),
            recent_bookings=[
                BookingResponse.model_validate(b) for b in bookings[:RECENT_BOOKINGS_LIMIT]
            ],
        )

    @BaseService.measure_operation("get_admin_overview")
    def get_admin_overview(self) -> AdminOverview:
        """
        Gym-wide figures for administrators.

        "Today" is the local day in ``settings.gym_timezone``; revenue covers
        the current UTC month.
        """
        now = self.now()
        day_start, day_end = local_day_bounds(now, settings.gym_timezone)
        active_subscriptions = self.subscription_repository.list_active()

        popular = [
            PopularClass(
                class_id=session.id,
                title=session.title,
                coach=session.coach,
                starts_at=session.starts_at,
                total_bookings=count,
            )
            for session, count in self.class_repository.most_booked(POPULAR_CLASSES_LIMIT)
        ]
        recent_users = [
            RecentUser.model_validate(user)
            for user in self.user_repository.search(limit=RECENT_USERS_LIMIT)
        ]

        overview = AdminOverview(
            total_users=self.user_repository.count(),
            active_subscriptions=len(active_subscriptions),
            total_bookings=self.booking_repository.count(),
            today_bookings=self.booking_repository.count_created_between(day_start, day_end),
            monthly_revenue=monthly_revenue(active_subscriptions, now),
            yearly_revenue_estimate=sum(
                (base_price(sub.plan_type) for sub in active_subscriptions), Decimal("0.00")
            )
            * 12,
            popular_classes=popular,
            recent_users=recent_users,
        )
        self.logger.info(
            f"Admin overview: {overview.total_users} users, "
            f"{overview.active_subscriptions} active subscriptions"
        )
        return overview
