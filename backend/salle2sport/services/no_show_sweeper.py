# backend/salle2sport/services/no_show_sweeper.py
"""
Reconciliation pass turning stale CONFIRMED bookings into NO_SHOW.

A booking is stale once its class has started (strictly before ``now``).
Running the sweep again right away finds nothing, so it is safe to schedule
frequently and to run by hand.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock, ensure_utc
from ..core.enums import BookingStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class NoShowSweeper(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.repository = RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("sweep_no_shows")
    def sweep(self, now: Optional[datetime] = None) -> int:
        """
        Reclassify overdue bookings.

        Args:
            now: Cut-off instant; defaults to the service clock

        Returns:
            Number of bookings moved to NO_SHOW
        """
        cutoff = ensure_utc(now) if now else self.now()
        self.log_operation("sweep_no_shows", cutoff=cutoff.isoformat())

        with self.transaction():
            candidate_ids = self.repository.get_overdue_confirmed_ids(cutoff)
            if not candidate_ids:
                count = 0
            else:
                count = self.repository.transition_confirmed(
                    BookingStatus.NO_SHOW, cutoff, booking_ids=candidate_ids
                )

        prometheus_metrics.record_sweep(count)
        prometheus_metrics.record_booking_transition(BookingStatus.NO_SHOW.value, count)
        if count:
            self.logger.info(f"Marked {count} booking(s) as no-show (cutoff {cutoff.isoformat()})")
        else:
            self.logger.debug("No overdue bookings to sweep")
        return count
