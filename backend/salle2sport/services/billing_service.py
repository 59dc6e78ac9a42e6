# backend/salle2sport/services/billing_service.py
"""
Monthly billing for Salle2Sport subscribers.

    final = base - round2(base * loyalty%) + round2(base * penalty rate)

Each intermediate amount is rounded half-up to the cent before it is
combined, so PREMIUM with a 10% discount and a penalty costs
59.99 - 6.00 + 9.00 = 62.99.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Dict, Iterable, Optional, Union

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from ..core.clock import Clock, ensure_utc, start_of_month
from ..core.config import settings
from ..core.enums import PlanType
from ..core.exceptions import NotFoundException
from ..models.subscription import Subscription
from ..repositories.factory import RepositoryFactory
from ..schemas.subscription import BillingDetails, BillingResult
from .base import BaseService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

PRICE_TABLE: Dict[PlanType, Decimal] = {
    PlanType.STANDARD: Decimal("39.99"),
    PlanType.PREMIUM: Decimal("59.99"),
    PlanType.ETUDIANT: Decimal("29.99"),
}


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def base_price(plan_type: Union[PlanType, str]) -> Decimal:
    return PRICE_TABLE[PlanType(plan_type)]


def months_subscribed(start_date: datetime, now: datetime) -> int:
    """
    Whole calendar months between ``start_date`` and ``now``.

    Day of month is ignored. A start date in the future yields a negative
    number; callers treat it as "not yet eligible".
    """
    start, now = ensure_utc(start_date), ensure_utc(now)
    return (now.year - start.year) * 12 + (now.month - start.month)


def loyalty_discount_percent(months: int) -> int:
    if months >= settings.loyalty_min_months:
        return settings.loyalty_discount_percent
    return 0


def no_show_penalty(monthly_no_show_count: int, price: Decimal) -> Decimal:
    """Penalty applies only strictly above the threshold (5 no-shows cost nothing)."""
    if monthly_no_show_count > settings.no_show_penalty_threshold:
        return round2(price * Decimal(str(settings.no_show_penalty_rate)))
    return ZERO


@dataclass(frozen=True)
class BillingBreakdown:
    plan_type: PlanType
    base_price: Decimal
    months_subscribed: int
    discount_percent: int
    loyalty_discount: Decimal
    no_show_penalty: Decimal
    final_amount: Decimal

    @property
    def loyalty_eligible(self) -> bool:
        return self.discount_percent > 0


def monthly_charge(
    plan_type: Union[PlanType, str],
    start_date: datetime,
    monthly_no_show_count: int,
    now: datetime,
) -> BillingBreakdown:
    price = base_price(plan_type)
    months = months_subscribed(start_date, now)
    percent = loyalty_discount_percent(months)
    loyalty_amount = round2(price * Decimal(percent) / Decimal(100))
    penalty = no_show_penalty(monthly_no_show_count, price)
    return BillingBreakdown(
        plan_type=PlanType(plan_type),
        base_price=price,
        months_subscribed=months,
        discount_percent=percent,
        loyalty_discount=loyalty_amount,
        no_show_penalty=penalty,
        final_amount=round2(price - loyalty_amount + penalty),
    )


def monthly_revenue(subscriptions: Iterable[Subscription], now: datetime) -> Decimal:
    """
    Expected revenue for the month containing ``now``.

    Counts active subscriptions overlapping the month at base price minus
    loyalty discount; penalties are not forecast.
    """
    month_start = start_of_month(now)
    next_month = month_start + relativedelta(months=1)
    total = ZERO
    for sub in subscriptions:
        if not sub.active:
            continue
        if ensure_utc(sub.start_date) >= next_month or ensure_utc(sub.end_date) < month_start:
            continue
        charge = monthly_charge(sub.plan_type, sub.start_date, 0, now)
        total += charge.base_price - charge.loyalty_discount
    return round2(total)


class BillingService(BaseService):
    """Read-only billing calculations."""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.subscription_repository = RepositoryFactory.create_subscription_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("calculate_monthly_billing")
    def calculate_monthly_billing(self, user_id: str) -> BillingResult:
        """
        Compute this month's charge for a subscriber.

        Raises:
            NotFoundException: The user has no active subscription
        """
        subscription = self.subscription_repository.get_active_by_user_id(user_id)
        if not subscription:
            raise NotFoundException(
                "No active subscription found", details={"user_id": user_id}
            )

        now = self.now()
        no_shows = self.booking_repository.count_user_no_shows_since(user_id, start_of_month(now))
        breakdown = monthly_charge(subscription.plan_type, subscription.start_date, no_shows, now)

        self.logger.info(
            f"Billing for user {user_id}: {breakdown.plan_type.value} "
            f"{breakdown.base_price} - {breakdown.loyalty_discount} + {breakdown.no_show_penalty} "
            f"= {breakdown.final_amount}"
        )
        return BillingResult(
            user_id=user_id,
            plan_type=breakdown.plan_type,
            base_price=breakdown.base_price,
            loyalty_discount=breakdown.loyalty_discount,
            no_show_penalty=breakdown.no_show_penalty,
            final_amount=breakdown.final_amount,
            details=BillingDetails(
                loyalty_eligible=breakdown.loyalty_eligible,
                months_subscribed=breakdown.months_subscribed,
                no_shows_this_month=no_shows,
            ),
        )
