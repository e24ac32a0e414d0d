"""Read-side projections over charges: ledgers, pending lists and period summaries."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.charge import Charge, ChargeState
from app.models.period_processing_record import PeriodProcessingRecord
from app.repositories.charge_repository import ChargeRepository
from app.repositories.member_repository import MemberRepository
from app.repositories.period_processing_repository import PeriodProcessingRepository
from app.services.billing_periods import BillingPeriod, days_overdue, due_date
from app.services.gym_context import gym_today, require_gym


@dataclass
class MemberPeriodLedger:
    member_id: UUID
    period: BillingPeriod
    total_due: int = 0
    total_paid: int = 0

    @property
    def total_outstanding(self) -> int:
        return self.total_due - self.total_paid


@dataclass
class PendingMemberItem:
    member_id: UUID
    member_name: str
    pending_charges: list[Charge]
    total_due: int
    total_paid: int
    total_outstanding: int
    due_date: date
    days_overdue: int
    is_overdue: bool


@dataclass
class ActivityBreakdown:
    members: int = 0
    total_cost: int = 0
    collected: int = 0
    pending: int = 0


@dataclass
class PeriodSummary:
    year: int
    month: int
    total_members: int = 0
    total_to_collect: int = 0
    total_collected: int = 0
    members_with_debt: int = 0
    members_up_to_date: int = 0
    activities_breakdown: dict[str, ActivityBreakdown] = field(default_factory=dict)
    processing_record: PeriodProcessingRecord | None = None

    @property
    def total_pending(self) -> int:
        return self.total_to_collect - self.total_collected


def build_ledger(member_id: UUID, period: BillingPeriod, charges: Iterable[Charge]) -> MemberPeriodLedger:
    ledger = MemberPeriodLedger(member_id=member_id, period=period)
    for charge in charges:
        amount = int(charge.amount)
        ledger.total_due += amount
        if ChargeState(charge.state) == ChargeState.PAID:
            ledger.total_paid += amount
    return ledger


def _group_by_member(charges: Iterable[Charge]) -> dict[UUID, list[Charge]]:
    grouped: dict[UUID, list[Charge]] = {}
    for charge in charges:
        grouped.setdefault(charge.member_id, []).append(charge)  # type: ignore[arg-type]
    return grouped


class LedgerService:
    def __init__(self, db: Session):
        self.db = db
        self.charge_repo = ChargeRepository(db)
        self.member_repo = MemberRepository(db)
        self.record_repo = PeriodProcessingRepository(db)

    def get_member_ledger(
        self, gym_id: UUID, member_id: UUID, period: BillingPeriod
    ) -> MemberPeriodLedger:
        charges = self.charge_repo.get_for_member_period(
            gym_id, period.year, period.month, member_id
        )
        return build_ledger(member_id, period, charges)

    def list_pending(
        self, gym_id: UUID, period: BillingPeriod, today: date | None = None
    ) -> list[PendingMemberItem]:
        """Members with outstanding charges in ``period``, most overdue first."""
        today = gym_today(require_gym(self.db, gym_id), today)
        overdue_days = days_overdue(period, today)
        period_due = due_date(period)

        grouped = _group_by_member(self.charge_repo.get_for_period(gym_id, period.year, period.month))
        members = self.member_repo.get_by_ids(gym_id, list(grouped))

        items: list[PendingMemberItem] = []
        for member_id, charges in grouped.items():
            ledger = build_ledger(member_id, period, charges)
            if ledger.total_outstanding <= 0:
                continue
            member = members.get(member_id)
            items.append(
                PendingMemberItem(
                    member_id=member_id,
                    member_name=member.full_name if member else "",
                    pending_charges=[
                        c for c in charges if ChargeState(c.state) == ChargeState.PENDING
                    ],
                    total_due=ledger.total_due,
                    total_paid=ledger.total_paid,
                    total_outstanding=ledger.total_outstanding,
                    due_date=period_due,
                    days_overdue=overdue_days,
                    is_overdue=overdue_days > 0,
                )
            )

        items.sort(key=lambda item: (-item.days_overdue, item.member_name.lower()))
        return items

    def get_period_summary(self, gym_id: UUID, period: BillingPeriod) -> PeriodSummary:
        """Aggregate totals and a per-activity breakdown for dashboards."""
        summary = PeriodSummary(year=period.year, month=period.month)
        grouped = _group_by_member(self.charge_repo.get_for_period(gym_id, period.year, period.month))

        for member_id, charges in grouped.items():
            ledger = build_ledger(member_id, period, charges)
            summary.total_members += 1
            summary.total_to_collect += ledger.total_due
            summary.total_collected += ledger.total_paid
            if ledger.total_outstanding > 0:
                summary.members_with_debt += 1
            else:
                summary.members_up_to_date += 1

            for name in {str(c.activity_name) for c in charges}:
                summary.activities_breakdown.setdefault(name, ActivityBreakdown()).members += 1
            for charge in charges:
                breakdown = summary.activities_breakdown[str(charge.activity_name)]
                amount = int(charge.amount)
                breakdown.total_cost += amount
                if ChargeState(charge.state) == ChargeState.PAID:
                    breakdown.collected += amount
                else:
                    breakdown.pending += amount

        summary.processing_record = self.record_repo.get(gym_id, period.year, period.month)
        return summary
