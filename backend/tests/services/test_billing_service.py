"""Tests for BillingService against stored subscriptions and bookings."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from salle2sport.core.enums import BookingStatus, PlanType
from salle2sport.core.exceptions import NotFoundException
from salle2sport.services.billing_service import BillingService

from conftest import NOW


@pytest.fixture
def service(db, clock) -> BillingService:
    return BillingService(db, clock)


def _no_shows(factory, user, starts):
    for start in starts:
        factory.booking(user, factory.session(starts_at=start), status=BookingStatus.NO_SHOW)


def test_new_standard_subscriber_pays_base_price(service, factory):
    user = factory.user()
    factory.subscription(user, PlanType.STANDARD, start_date=NOW - timedelta(days=10))

    result = service.calculate_monthly_billing(user.id)

    assert result.final_amount == Decimal("39.99")
    assert result.loyalty_discount == Decimal("0.00")
    assert result.no_show_penalty == Decimal("0.00")
    assert result.details.loyalty_eligible is False
    assert result.details.no_shows_this_month == 0


def test_loyal_premium_with_penalty(service, factory):
    user = factory.user()
    factory.subscription(user, PlanType.PREMIUM, start_date=datetime(2023, 5, 20, tzinfo=timezone.utc))
    _no_shows(factory, user, [datetime(2024, 1, day, 9, 0, tzinfo=timezone.utc) for day in range(2, 9)])

    result = service.calculate_monthly_billing(user.id)

    assert result.plan_type == "PREMIUM"
    assert result.base_price == Decimal("59.99")
    assert result.loyalty_discount == Decimal("6.00")
    assert result.no_show_penalty == Decimal("9.00")
    assert result.final_amount == Decimal("62.99")
    assert result.details.months_subscribed == 8
    assert result.details.no_shows_this_month == 7


def test_five_no_shows_are_free_six_are_not(service, factory):
    user = factory.user()
    factory.subscription(user, PlanType.PREMIUM, start_date=NOW - timedelta(days=5))
    starts = [datetime(2024, 1, day, 9, 0, tzinfo=timezone.utc) for day in range(2, 7)]
    _no_shows(factory, user, starts)

    assert service.calculate_monthly_billing(user.id).no_show_penalty == Decimal("0.00")

    _no_shows(factory, user, [datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)])
    assert service.calculate_monthly_billing(user.id).no_show_penalty == Decimal("9.00")


def test_previous_month_no_shows_are_ignored(service, factory):
    user = factory.user()
    factory.subscription(user, PlanType.ETUDIANT, start_date=NOW - timedelta(days=5))
    _no_shows(factory, user, [datetime(2023, 12, day, 9, 0, tzinfo=timezone.utc) for day in range(1, 10)])

    result = service.calculate_monthly_billing(user.id)

    assert result.details.no_shows_this_month == 0
    assert result.final_amount == Decimal("29.99")


def test_json_dump_uses_floats(service, factory):
    user = factory.user()
    factory.subscription(user, PlanType.STANDARD)

    dumped = service.calculate_monthly_billing(user.id).model_dump(mode="json")

    assert dumped["final_amount"] == 39.99
    assert dumped["plan_type"] == "STANDARD"


def test_without_subscription(service, factory):
    with pytest.raises(NotFoundException) as exc_info:
        service.calculate_monthly_billing(factory.user().id)
    assert exc_info.value.message == "No active subscription found"


def test_inactive_subscription_is_not_billed(service, factory):
    user = factory.user()
    factory.subscription(user, active=False)

    with pytest.raises(NotFoundException):
        service.calculate_monthly_billing(user.id)
