from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import ConcurrencyConflict
from app.models.member import Member, MemberStatus
from app.schemas.member import MemberCreate


class MemberRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(self, gym_id: UUID, status: MemberStatus | None = None) -> list[Member]:
        query = self.db.query(Member).filter(Member.gym_id == gym_id)
        if status:
            query = query.filter(Member.status == status.value)
        return query.order_by(Member.last_name.asc(), Member.first_name.asc()).all()

    def get_by_id(self, member_id: UUID, gym_id: UUID | None = None) -> Member | None:
        query = self.db.query(Member).filter(Member.id == member_id)
        if gym_id is not None:
            query = query.filter(Member.gym_id == gym_id)
        return query.first()

    def get_by_ids(self, gym_id: UUID, member_ids: list[UUID]) -> dict[UUID, Member]:
        if not member_ids:
            return {}
        members = (
            self.db.query(Member)
            .filter(Member.gym_id == gym_id, Member.id.in_(member_ids))
            .all()
        )
        return {m.id: m for m in members}  # type: ignore[misc]

    def create(self, data: MemberCreate, gym_id: UUID) -> Member:
        payload = data.model_dump()
        payload["status"] = data.status.value
        member = Member(**payload, gym_id=gym_id, total_debt=0, revision=0)
        self.db.add(member)
        self.db.commit()
        self.db.refresh(member)
        return member

    def adjust_debt(self, member_id: UUID, gym_id: UUID, delta: int) -> None:
        """Atomically add ``delta`` to the member's debt counter.

        Runs as a single ``UPDATE ... SET total_debt = total_debt + :delta`` so
        concurrent writers never lose each other's increments. Does not commit.
        """
        updated = (
            self.db.query(Member)
            .filter(Member.id == member_id, Member.gym_id == gym_id)
            .update(
                {
                    Member.total_debt: Member.total_debt + delta,
                    Member.revision: Member.revision + 1,
                },
                synchronize_session=False,
            )
        )
        if updated != 1:
            raise ConcurrencyConflict(
                f"Debt update for member {member_id} affected {updated} rows"
            )

    def set_debt_if_revision(
        self, member_id: UUID, gym_id: UUID, expected_revision: int, total_debt: int
    ) -> bool:
        """Overwrite the debt counter only if nobody wrote it since ``expected_revision``."""
        updated = (
            self.db.query(Member)
            .filter(
                Member.id == member_id,
                Member.gym_id == gym_id,
                Member.revision == expected_revision,
            )
            .update(
                {
                    Member.total_debt: total_debt,
                    Member.revision: Member.revision + 1,
                },
                synchronize_session=False,
            )
        )
        return bool(updated == 1)
