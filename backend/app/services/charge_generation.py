"""Monthly charge generation: the batch job and the manual per-member variant."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import (
    AlreadyExists,
    NotFoundError,
    PartialBatchFailure,
    ValidationError,
)
from app.models.charge import Charge
from app.models.member import Member
from app.models.membership import Membership
from app.repositories.activity_repository import ActivityRepository
from app.repositories.charge_repository import ChargeRepository
from app.repositories.member_repository import MemberRepository
from app.repositories.membership_repository import MembershipRepository
from app.repositories.period_processing_repository import PeriodProcessingRepository
from app.schemas.charge import ChargeCreate
from app.services.audit_service import AuditService
from app.services.billing_guard import BillingGuard
from app.services.billing_periods import BillingPeriod, due_date
from app.services.eligibility import eligible_memberships
from app.services.gym_context import gym_today, require_gym

logger = logging.getLogger(__name__)

NO_ELIGIBLE_MEMBERSHIPS = "no-eligible-memberships"
NOTHING_TO_CHARGE = "nothing-to-charge"


@dataclass
class MemberGenerationError:
    """A member whose charges could not be generated."""

    member_id: UUID
    member_name: str
    reason: str
    message: str


@dataclass
class GenerationResult:
    period: BillingPeriod
    created_count: int = 0
    member_count: int = 0
    skipped_count: int = 0
    total_amount: int = 0
    errors: list[MemberGenerationError] = field(default_factory=list)
    record_created: bool = False

    def raise_for_errors(self) -> None:
        if self.errors:
            raise PartialBatchFailure(self.errors)


@dataclass
class ManualGenerationResult:
    period: BillingPeriod
    created: bool
    reason: str | None = None
    charges: list[Charge] = field(default_factory=list)
    total_amount: int = 0


class ChargeGenerationService:
    """Creates pending charges for eligible memberships, once per (member, period)."""

    def __init__(self, db: Session):
        self.db = db
        self.member_repo = MemberRepository(db)
        self.membership_repo = MembershipRepository(db)
        self.activity_repo = ActivityRepository(db)
        self.charge_repo = ChargeRepository(db)
        self.record_repo = PeriodProcessingRepository(db)
        self.audit = AuditService(db)

    def resolve_price(self, gym_id: UUID, membership: Membership) -> int:
        """Price to snapshot into a new charge.

        The membership's own snapshot wins; otherwise the activity catalog
        price is used.
        """
        if membership.price_snapshot is not None:
            price = int(membership.price_snapshot)
        elif membership.activity_id is not None:
            activity = self.activity_repo.get_by_id(
                membership.activity_id,  # type: ignore[arg-type]
                gym_id,
            )
            if not activity:
                raise NotFoundError(
                    f"Activity {membership.activity_id} for membership {membership.id} not found"
                )
            if activity.price is None:
                raise ValidationError(f"Activity {activity.name} has no price")
            price = int(activity.price)
        else:
            raise ValidationError(f"Membership {membership.id} has no price")

        if price < 0:
            raise ValidationError(f"Membership {membership.id} has a negative price")
        return price

    def _create_charges(
        self,
        gym_id: UUID,
        member: Member,
        memberships: list[Membership],
        period: BillingPeriod,
        auto_generated: bool,
        created_by: str | None,
    ) -> list[Charge]:
        """Create one charge per membership, bump the member's debt and commit.

        Charge inserts and the debt increment share one transaction.
        Zero-priced memberships produce no charge.
        """
        member_id: UUID = member.id  # type: ignore[assignment]
        charges: list[Charge] = []
        total = 0
        for membership in memberships:
            amount = self.resolve_price(gym_id, membership)
            if amount == 0:
                logger.debug("Membership %s is free, no charge created", membership.id)
                continue
            charge = self.charge_repo.create(
                ChargeCreate(
                    year=period.year,
                    month=period.month,
                    member_id=member_id,
                    membership_id=membership.id,  # type: ignore[arg-type]
                    activity_id=membership.activity_id,  # type: ignore[arg-type]
                    activity_name=str(membership.activity_name),
                    amount=amount,
                    due_date=due_date(period),
                    auto_generated=auto_generated,
                    created_by=created_by,
                ),
                gym_id,
            )
            charges.append(charge)
            total += amount

        if not charges:
            return charges

        self.member_repo.adjust_debt(member_id, gym_id, total)
        for charge in charges:
            self.audit.log_create(
                resource_type="charge",
                resource_id=charge.id,  # type: ignore[arg-type]
                gym_id=gym_id,
                actor_id=created_by,
                data={
                    "period": period.key,
                    "member_id": str(member_id),
                    "activity_name": charge.activity_name,
                    "amount": charge.amount,
                    "auto_generated": auto_generated,
                },
            )
        self.db.commit()
        return charges

    def generate(
        self,
        gym_id: UUID,
        today: date | None = None,
        triggered_by: str | None = None,
    ) -> GenerationResult:
        """Generate the current period's charges for every member of the gym.

        Members that already have charges for the period are skipped. A failing
        member is rolled back, recorded in ``errors`` and the run continues.
        Finally the period's processing record is created if absent.
        """
        gym = require_gym(self.db, gym_id)
        period = BillingPeriod.from_date(gym_today(gym, today))
        result = GenerationResult(period=period)
        logger.info("Generating charges for gym %s period %s", gym_id, period)

        members = self.member_repo.get_all(gym_id)
        for member in members:
            member_id: UUID = member.id  # type: ignore[assignment]
            member_name = member.full_name
            try:
                if self.charge_repo.exists_for_member_period(
                    gym_id, period.year, period.month, member_id
                ):
                    result.skipped_count += 1
                    continue
                memberships = self.membership_repo.get_by_member(member_id, gym_id)
                eligible = eligible_memberships(member, memberships)
                if not eligible:
                    continue
                charges = self._create_charges(
                    gym_id,
                    member,
                    eligible,
                    period,
                    auto_generated=True,
                    created_by=triggered_by,
                )
            except AlreadyExists:
                # Another writer generated this member concurrently.
                result.skipped_count += 1
                continue
            except Exception as e:
                self.db.rollback()
                reason = getattr(e, "reason", "unexpected-error")
                logger.warning(
                    "Charge generation failed for member %s in gym %s: %s", member_id, gym_id, e
                )
                result.errors.append(
                    MemberGenerationError(
                        member_id=member_id,
                        member_name=member_name,
                        reason=reason,
                        message=str(e),
                    )
                )
                continue

            if charges:
                result.created_count += len(charges)
                result.member_count += 1
                result.total_amount += sum(int(c.amount) for c in charges)

        _, result.record_created = self.record_repo.create_if_absent(
            gym_id,
            period.year,
            period.month,
            member_count=result.member_count,
            total_amount=result.total_amount,
            error_count=len(result.errors),
            triggered_by=triggered_by,
        )
        if not result.record_created:
            logger.info("Processing record for gym %s period %s already existed", gym_id, period)

        logger.info(
            "Generated %d charges for %d members in gym %s period %s "
            "(total %d, %d skipped, %d errors)",
            result.created_count,
            result.member_count,
            gym_id,
            period,
            result.total_amount,
            result.skipped_count,
            len(result.errors),
        )
        return result

    def run_automatic(
        self,
        gym_id: UUID,
        today: date | None = None,
        triggered_by: str | None = None,
    ) -> GenerationResult:
        """Automatic generation: refuses with ``AlreadyProcessed`` once the period has a record."""
        BillingGuard(self.db).ensure_can_run(gym_id, today)
        return self.generate(gym_id, today=today, triggered_by=triggered_by)

    def generate_for_member(
        self,
        gym_id: UUID,
        member_id: UUID,
        today: date | None = None,
        operator_id: str | None = None,
    ) -> ManualGenerationResult:
        """Generate the current period's charges for one member, bypassing the guard.

        Memberships that already have a charge for the period are left alone;
        if all of them do, nothing is created and the reason is ``already-exists``.
        """
        gym = require_gym(self.db, gym_id)
        period = BillingPeriod.from_date(gym_today(gym, today))

        member = self.member_repo.get_by_id(member_id, gym_id)
        if not member:
            raise NotFoundError(f"Member {member_id} not found")

        memberships = self.membership_repo.get_by_member(member_id, gym_id)
        eligible = eligible_memberships(member, memberships)
        if not eligible:
            return ManualGenerationResult(period=period, created=False, reason=NO_ELIGIBLE_MEMBERSHIPS)

        missing = [
            m
            for m in eligible
            if self.charge_repo.get_by_key(
                gym_id, period.year, period.month, member_id, m.id  # type: ignore[arg-type]
            )
            is None
        ]
        if not missing:
            return ManualGenerationResult(period=period, created=False, reason=AlreadyExists.reason)

        try:
            charges = self._create_charges(
                gym_id, member, missing, period, auto_generated=False, created_by=operator_id
            )
        except AlreadyExists:
            logger.info("Concurrent charge creation for member %s period %s", member_id, period)
            return ManualGenerationResult(period=period, created=False, reason=AlreadyExists.reason)
        except Exception:
            self.db.rollback()
            raise

        if not charges:
            return ManualGenerationResult(period=period, created=False, reason=NOTHING_TO_CHARGE)

        logger.info(
            "Manually generated %d charges for member %s period %s", len(charges), member_id, period
        )
        return ManualGenerationResult(
            period=period,
            created=True,
            charges=charges,
            total_amount=sum(int(c.amount) for c in charges),
        )


def summarize_errors(errors: list[MemberGenerationError]) -> list[dict[str, Any]]:
    return [
        {"member_id": str(e.member_id), "member_name": e.member_name, "reason": e.reason, "message": e.message}
        for e in errors
    ]
