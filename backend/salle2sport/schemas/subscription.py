"""Subscription and billing DTOs."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import field_validator

from ..core.enums import PlanType
from .base import Money, StandardizedModel, StrictRequestModel, to_utc


class SubscriptionCreate(StrictRequestModel):
    plan_type: PlanType
    # None means "now"
    start_date: Optional[datetime] = None

    @field_validator("start_date")
    @classmethod
    def _normalize_start(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value)


class SubscriptionUpdate(StrictRequestModel):
    plan_type: Optional[PlanType] = None
    end_date: Optional[datetime] = None
    active: Optional[bool] = None
    auto_renew: Optional[bool] = None

    @field_validator("end_date")
    @classmethod
    def _normalize_end(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value)


class SubscriptionResponse(StandardizedModel):
    id: str
    user_id: str
    plan_type: PlanType
    start_date: datetime
    end_date: datetime
    active: bool
    auto_renew: bool


class SubscriptionStats(StandardizedModel):
    total: int
    active: int
    by_plan: Dict[str, int]


class BillingDetails(StandardizedModel):
    loyalty_eligible: bool
    months_subscribed: int
    no_shows_this_month: int


class BillingResult(StandardizedModel):
    """Monthly charge for one subscriber."""

    user_id: str
    plan_type: PlanType
    base_price: Money
    loyalty_discount: Money
    no_show_penalty: Money
    final_amount: Money
    details: BillingDetails
