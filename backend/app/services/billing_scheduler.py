"""Session-start heuristic that offers monthly generation to an operator.

The "last offered" marker only stops the operator from being prompted more
than once a day. It is supplied by the caller, returned updated, and never
consulted for exactly-once charging: that belongs to the guard and the unique
charge key.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from uuid import UUID

from app.core.exceptions import AlreadyProcessed
from app.services.billing_guard import BillingGuard
from app.services.billing_periods import BillingPeriod
from app.services.charge_generation import ChargeGenerationService, GenerationResult
from app.services.gym_context import gym_today, require_gym

logger = logging.getLogger(__name__)


class OperatorRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


PRIVILEGED_ROLES = frozenset({OperatorRole.ADMIN})


class TriggerOutcome(str, Enum):
    NOT_PRIVILEGED = "not_privileged"
    ALREADY_OFFERED = "already_offered"
    NOT_DUE = "not_due"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    DECLINED = "declined"
    GENERATED = "generated"


@dataclass(frozen=True)
class OfferMarker:
    gym_id: UUID
    last_offered_on: date | None = None

    def offered_on(self, day: date) -> bool:
        return self.last_offered_on == day


@dataclass(frozen=True)
class OperatorSession:
    gym_id: UUID
    operator_id: str
    role: OperatorRole


@dataclass
class TriggerDecision:
    outcome: TriggerOutcome
    marker: OfferMarker
    period: BillingPeriod | None = None
    result: GenerationResult | None = None


class BillingScheduleTrigger:
    """Offers generation at most once per day, and only runs it on confirmation.

    ``confirm`` receives the period about to be generated and returns whether
    the operator accepted. When it is ``None`` the trigger stops at
    ``AWAITING_CONFIRMATION`` without touching the marker, so a UI can prompt
    and call again.
    """

    def __init__(
        self,
        guard: BillingGuard,
        generator: ChargeGenerationService,
        marker: OfferMarker,
        confirm: Callable[[BillingPeriod], bool] | None = None,
    ):
        self.guard = guard
        self.generator = generator
        self.marker = marker
        self.confirm = confirm

    def _decide(
        self,
        outcome: TriggerOutcome,
        day: date | None,
        period: BillingPeriod | None = None,
        result: GenerationResult | None = None,
    ) -> TriggerDecision:
        if day is not None:
            self.marker = replace(self.marker, last_offered_on=day)
        return TriggerDecision(outcome=outcome, marker=self.marker, period=period, result=result)

    def on_session_start(self, session: OperatorSession, today: date | None = None) -> TriggerDecision:
        if session.role not in PRIVILEGED_ROLES:
            return self._decide(TriggerOutcome.NOT_PRIVILEGED, None)

        day = gym_today(require_gym(self.guard.db, session.gym_id), today)
        period = BillingPeriod.from_date(day)

        if self.marker.offered_on(day):
            return self._decide(TriggerOutcome.ALREADY_OFFERED, None, period)

        if not self.guard.should_run(session.gym_id, day):
            return self._decide(TriggerOutcome.NOT_DUE, day, period)

        if self.confirm is None:
            return self._decide(TriggerOutcome.AWAITING_CONFIRMATION, None, period)

        if not self.confirm(period):
            logger.info("Operator %s declined generation for %s", session.operator_id, period)
            return self._decide(TriggerOutcome.DECLINED, day, period)

        try:
            result = self.generator.run_automatic(
                session.gym_id, today=day, triggered_by=session.operator_id
            )
        except AlreadyProcessed:
            # Another session generated between the check and the confirmation.
            return self._decide(TriggerOutcome.NOT_DUE, day, period)
        return self._decide(TriggerOutcome.GENERATED, day, period, result)
