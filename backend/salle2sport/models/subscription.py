# backend/salle2sport/models/subscription.py
"""Monthly gym subscription, one per user."""

import logging

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import PlanType
from ..database import Base
from .types import UTCDateTime

logger = logging.getLogger(__name__)


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True, index=True)
    plan_type = Column(String(20), nullable=False, default=PlanType.STANDARD.value)
    start_date = Column(UTCDateTime, nullable=False)
    end_date = Column(UTCDateTime, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    auto_renew = Column(Boolean, nullable=False, default=True)

    user = relationship("User", back_populates="subscription")

    __table_args__ = (
        CheckConstraint(
            "plan_type IN ('STANDARD', 'PREMIUM', 'ETUDIANT')", name="ck_subscriptions_plan_type"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Subscription {self.id}: user={self.user_id}, plan={self.plan_type}, "
            f"active={self.active}>"
        )
