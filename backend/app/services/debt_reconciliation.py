"""Recompute member debt counters from their pending charges."""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import ConcurrencyConflict, NotFoundError
from app.repositories.charge_repository import ChargeRepository
from app.repositories.member_repository import MemberRepository
from app.services.audit_service import AuditService

logger = logging.getLogger(__name__)


@dataclass
class DebtReconciliation:
    member_id: UUID
    expected: int
    recorded: int
    corrected: bool = False

    @property
    def drift(self) -> int:
        return self.recorded - self.expected


class DebtReconciliationService:
    def __init__(self, db: Session):
        self.db = db
        self.member_repo = MemberRepository(db)
        self.charge_repo = ChargeRepository(db)
        self.audit = AuditService(db)

    def reconcile_member_debt(
        self,
        gym_id: UUID,
        member_id: UUID,
        apply: bool = True,
        operator_id: str | None = None,
    ) -> DebtReconciliation:
        """Compare ``total_debt`` with the sum of pending charges and repair it.

        The repair is conditional on the member's revision; if another writer
        touched the counter meanwhile, ``ConcurrencyConflict`` is raised.
        """
        member = self.member_repo.get_by_id(member_id, gym_id)
        if not member:
            raise NotFoundError(f"Member {member_id} not found")
        # The session may hold a stale copy loaded before another writer committed.
        self.db.refresh(member)

        revision = int(member.revision)
        recorded = int(member.total_debt)
        expected = self.charge_repo.sum_pending_for_member(gym_id, member_id)
        result = DebtReconciliation(member_id=member_id, expected=expected, recorded=recorded)
        if expected == recorded or not apply:
            return result

        if not self.member_repo.set_debt_if_revision(member_id, gym_id, revision, expected):
            self.db.rollback()
            raise ConcurrencyConflict(
                f"Debt of member {member_id} changed during reconciliation, retry"
            )
        self.audit.log_update(
            resource_type="member",
            resource_id=member_id,
            gym_id=gym_id,
            actor_id=operator_id,
            old_data={"total_debt": recorded},
            new_data={"total_debt": expected},
        )
        self.db.commit()
        logger.warning(
            "Corrected debt of member %s in gym %s: %d -> %d", member_id, gym_id, recorded, expected
        )
        result.corrected = True
        return result

    def reconcile_gym(self, gym_id: UUID, apply: bool = True) -> list[DebtReconciliation]:
        """Reconcile every member of a gym. Returns only members whose debt drifted."""
        drifted: list[DebtReconciliation] = []
        member_ids = [m.id for m in self.member_repo.get_all(gym_id)]
        for member_id in member_ids:
            try:
                result = self.reconcile_member_debt(gym_id, member_id, apply=apply)  # type: ignore[arg-type]
            except ConcurrencyConflict as e:
                logger.warning("Skipping member %s: %s", member_id, e)
                continue
            if result.drift != 0:
                drifted.append(result)
        return drifted
