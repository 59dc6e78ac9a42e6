# backend/salle2sport/repositories/subscription_repository.py
"""Subscription data access."""

import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.subscription import Subscription
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SubscriptionRepository(BaseRepository[Subscription]):
    def __init__(self, db: Session):
        super().__init__(db, Subscription)

    def get_by_user_id(self, user_id: str) -> Optional[Subscription]:
        return self.find_one_by(user_id=user_id)

    def get_active_by_user_id(self, user_id: str) -> Optional[Subscription]:
        return self.find_one_by(user_id=user_id, active=True)

    def list_active(self) -> List[Subscription]:
        return self.find_by(active=True)

    def count_by_plan(self) -> Dict[str, int]:
        try:
            rows = (
                self.db.query(Subscription.plan_type, func.count(Subscription.id))
                .group_by(Subscription.plan_type)
                .all()
            )
            return {plan: int(count) for plan, count in rows}
        except SQLAlchemyError as e:
            self.logger.error("Error counting subscriptions by plan: %s", e)
            raise RepositoryException(f"Failed to count subscriptions: {e}") from e
