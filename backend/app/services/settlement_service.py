"""Settlement: moves charges from pending to paid and keeps debt totals in step."""

import logging
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import AlreadyPaid, ConcurrencyConflict, NotFoundError, ValidationError
from app.models.charge import Charge, ChargeState, PaymentMethod
from app.models.shared import utc_now
from app.repositories.charge_repository import ChargeRepository
from app.repositories.member_repository import MemberRepository
from app.services.audit_service import AuditService
from app.services.billing_periods import BillingPeriod
from app.services.cash_register_service import CashRegisterService
from app.services.gym_context import gym_today, require_gym
from app.services.ledger_service import LedgerService, MemberPeriodLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementTarget:
    """Either one specific charge or every outstanding charge of the member in the period."""

    charge_id: UUID | None = None

    @classmethod
    def all_outstanding(cls) -> "SettlementTarget":
        return cls()

    @classmethod
    def charge(cls, charge_id: UUID) -> "SettlementTarget":
        return cls(charge_id=charge_id)

    @property
    def is_all_outstanding(self) -> bool:
        return self.charge_id is None


@dataclass
class SettlementResult:
    period: BillingPeriod
    member_id: UUID
    amount: int
    ledger: MemberPeriodLedger
    cash_transaction_id: UUID
    charges: list[Charge] = field(default_factory=list)


def payment_description(member_name: str, activity_names: list[str], period: BillingPeriod) -> str:
    return f"Payment {', '.join(activity_names)} - {period.label} - {member_name}".strip()


class SettlementService:
    def __init__(self, db: Session):
        self.db = db
        self.charge_repo = ChargeRepository(db)
        self.member_repo = MemberRepository(db)
        self.cash_register = CashRegisterService(db)
        self.audit = AuditService(db)

    def _target_charges(
        self, gym_id: UUID, period: BillingPeriod, member_id: UUID, target: SettlementTarget
    ) -> list[Charge]:
        if target.is_all_outstanding:
            charges = self.charge_repo.get_for_member_period(
                gym_id, period.year, period.month, member_id
            )
            if not charges:
                raise NotFoundError(f"Member {member_id} has no charges in {period}")
            pending = [c for c in charges if ChargeState(c.state) == ChargeState.PENDING]
            if not pending:
                raise AlreadyPaid(f"All charges of member {member_id} in {period} are already paid")
            return pending

        charge = self.charge_repo.get_by_id(target.charge_id, gym_id)  # type: ignore[arg-type]
        if (
            not charge
            or charge.member_id != member_id
            or (charge.year, charge.month) != (period.year, period.month)
        ):
            raise NotFoundError(f"Charge {target.charge_id} not found")
        if ChargeState(charge.state) != ChargeState.PENDING:
            raise AlreadyPaid(f"Charge {charge.id} is already paid")
        return [charge]

    def settle(
        self,
        gym_id: UUID,
        period: BillingPeriod,
        member_id: UUID,
        target: SettlementTarget,
        method: PaymentMethod,
        operator_id: str | None = None,
        amount: int | None = None,
        today: date | None = None,
    ) -> SettlementResult:
        """Mark the targeted charges paid.

        In one transaction: each charge flips pending -> paid with a conditional
        update, the member's debt drops by exactly the settled amount, and the
        income is booked into the day's cash register.
        """
        gym = require_gym(self.db, gym_id)
        day = gym_today(gym, today)

        member = self.member_repo.get_by_id(member_id, gym_id)
        if not member:
            raise NotFoundError(f"Member {member_id} not found")
        member_name = member.full_name

        charges = self._target_charges(gym_id, period, member_id, target)
        total = sum(int(c.amount) for c in charges)
        if amount is not None and amount != total:
            raise ValidationError(f"Amount does not match. Expected {total}, got {amount}")

        charge_ids: list[UUID] = [c.id for c in charges]  # type: ignore[misc]
        settled = [(c.id, str(c.activity_name), int(c.amount)) for c in charges]
        paid_at = utc_now()

        try:
            txn = self.cash_register.record_income(
                gym_id=gym_id,
                day=day,
                amount=total,
                description=payment_description(member_name, [name for _, name, _ in settled], period),
                payment_method=method.value,
                member_id=member_id,
                charge_ids=[str(cid) for cid in charge_ids],
                operator_id=operator_id,
            )
            txn_id: UUID = txn.id  # type: ignore[assignment]
            for charge_id, _, charge_amount in settled:
                if not self.charge_repo.mark_paid(
                    charge_id,  # type: ignore[arg-type]
                    paid_at=paid_at,
                    payment_method=method,
                    paid_by=operator_id,
                    cash_transaction_id=txn_id,
                ):
                    raise AlreadyPaid(f"Charge {charge_id} was settled concurrently")
                self.audit.log_status_change(
                    resource_type="charge",
                    resource_id=charge_id,  # type: ignore[arg-type]
                    gym_id=gym_id,
                    old_status=ChargeState.PENDING.value,
                    new_status=ChargeState.PAID.value,
                    actor_id=operator_id,
                    extra={"payment_method": method.value, "amount": charge_amount},
                )
            self.member_repo.adjust_debt(member_id, gym_id, -total)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConcurrencyConflict(
                f"Concurrent write while settling member {member_id}, retry"
            ) from None
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Settled %d charges (%d) for member %s period %s via %s",
            len(charge_ids),
            total,
            member_id,
            period,
            method.value,
        )
        refreshed: list[Charge] = []
        for charge_id in charge_ids:
            charge = self.charge_repo.get_by_id(charge_id)
            if charge is not None:
                refreshed.append(charge)
        return SettlementResult(
            period=period,
            member_id=member_id,
            amount=total,
            ledger=LedgerService(self.db).get_member_ledger(gym_id, member_id, period),
            cash_transaction_id=txn_id,
            charges=refreshed,
        )
