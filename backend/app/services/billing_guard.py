"""Idempotency guard for automatic monthly generation."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import AlreadyProcessed
from app.repositories.period_processing_repository import PeriodProcessingRepository
from app.services.billing_periods import BillingPeriod, is_cycle_start
from app.services.gym_context import gym_today, require_gym

logger = logging.getLogger(__name__)


class BillingGuard:
    """Decides whether automatic generation may run for a gym's current period.

    The check is read-then-decide and therefore advisory; exactly-once
    charging is enforced by the unique charge key at write time.
    """

    def __init__(self, db: Session):
        self.db = db
        self.record_repo = PeriodProcessingRepository(db)

    def current_period(self, gym_id: UUID, today: date | None = None) -> BillingPeriod:
        gym = require_gym(self.db, gym_id)
        return BillingPeriod.from_date(gym_today(gym, today))

    def is_processed(self, gym_id: UUID, period: BillingPeriod) -> bool:
        return self.record_repo.exists(gym_id, period.year, period.month)

    def should_run(self, gym_id: UUID, today: date | None = None) -> bool:
        """True iff today starts the billing cycle and the period has no processing record."""
        gym = require_gym(self.db, gym_id)
        local = gym_today(gym, today)
        if not is_cycle_start(local):
            return False
        return not self.is_processed(gym_id, BillingPeriod.from_date(local))

    def ensure_can_run(self, gym_id: UUID, today: date | None = None) -> BillingPeriod:
        """Raise ``AlreadyProcessed`` if automatic generation already ran this period."""
        period = self.current_period(gym_id, today)
        if self.is_processed(gym_id, period):
            logger.info("Gym %s period %s already processed", gym_id, period)
            raise AlreadyProcessed(f"Period {period} was already generated for gym {gym_id}")
        return period
