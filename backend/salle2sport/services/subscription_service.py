# backend/salle2sport/services/subscription_service.py
"""Subscription lifecycle: one subscription per member, renewed monthly."""

import logging
from typing import Any, Mapping, Optional, Union

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.exceptions import NotFoundException, SubscriptionExistsException
from ..models.subscription import Subscription
from ..repositories.factory import RepositoryFactory
from ..schemas.subscription import SubscriptionCreate, SubscriptionStats, SubscriptionUpdate
from .base import BaseService

logger = logging.getLogger(__name__)

# relativedelta clamps to the last day of shorter months (Jan 31 -> Feb 29)
BILLING_PERIOD = relativedelta(months=1)


class SubscriptionService(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.repository = RepositoryFactory.create_subscription_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("create_subscription")
    def create_subscription(
        self, user_id: str, data: Union[SubscriptionCreate, Mapping[str, Any]]
    ) -> Subscription:
        """
        Subscribe a member to a plan for one calendar month.

        Raises:
            ValidationException: Unknown plan type
            NotFoundException: Unknown user
            SubscriptionExistsException: The member already has a subscription
        """
        payload = self.parse_payload(SubscriptionCreate, data)
        self.log_operation("create_subscription", user_id=user_id, plan_type=payload.plan_type)

        with self.transaction():
            if not self.user_repository.exists(id=user_id):
                raise NotFoundException("User not found", details={"user_id": user_id})
            if self.repository.get_by_user_id(user_id):
                raise SubscriptionExistsException(details={"user_id": user_id})

            start = payload.start_date or self.now()
            subscription = self.repository.create(
                user_id=user_id,
                plan_type=payload.plan_type,
                start_date=start,
                end_date=start + BILLING_PERIOD,
                active=True,
                auto_renew=True,
            )

        self.logger.info(f"Subscription {subscription.id} created for user {user_id}")
        return subscription

    def get_user_subscription(self, user_id: str) -> Optional[Subscription]:
        return self.repository.get_by_user_id(user_id)

    @BaseService.measure_operation("update_subscription")
    def update_subscription(
        self, subscription_id: str, data: Union[SubscriptionUpdate, Mapping[str, Any]]
    ) -> Subscription:
        payload = self.parse_payload(SubscriptionUpdate, data)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        with self.transaction():
            subscription = self.repository.update(subscription_id, **changes)
            if not subscription:
                raise NotFoundException(
                    "Subscription not found", details={"subscription_id": subscription_id}
                )

        self.logger.info(f"Subscription {subscription_id} updated: {sorted(changes)}")
        return subscription

    @BaseService.measure_operation("renew_subscription")
    def renew_subscription(self, subscription_id: str) -> Subscription:
        """
        Extend the subscription by one month and reactivate it.

        The new period starts when the current one ends, or now if it already
        lapsed. ``start_date`` is kept so loyalty tenure carries over.
        """
        with self.transaction():
            subscription = self.repository.get_by_id(subscription_id, load_relationships=False)
            if not subscription:
                raise NotFoundException(
                    "Subscription not found", details={"subscription_id": subscription_id}
                )
            period_start = max(self.now(), subscription.end_date)
            subscription.end_date = period_start + BILLING_PERIOD
            subscription.active = True

        self.logger.info(f"Subscription {subscription_id} renewed until {subscription.end_date}")
        return subscription

    def get_subscription_stats(self) -> SubscriptionStats:
        return SubscriptionStats(
            total=self.repository.count(),
            active=self.repository.count(active=True),
            by_plan=self.repository.count_by_plan(),
        )
