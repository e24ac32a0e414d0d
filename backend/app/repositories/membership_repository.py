from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.models.membership import Membership
from app.repositories.activity_repository import ActivityRepository
from app.schemas.membership import MembershipCreate


class MembershipRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, membership_id: UUID, gym_id: UUID | None = None) -> Membership | None:
        query = self.db.query(Membership).filter(Membership.id == membership_id)
        if gym_id is not None:
            query = query.filter(Membership.gym_id == gym_id)
        return query.first()

    def get_by_member(self, member_id: UUID, gym_id: UUID) -> list[Membership]:
        return (
            self.db.query(Membership)
            .filter(Membership.member_id == member_id, Membership.gym_id == gym_id)
            .order_by(Membership.start_date.asc())
            .all()
        )

    def create(self, data: MembershipCreate, gym_id: UUID) -> Membership:
        """Assign a membership, snapshotting name and price from the catalog when omitted."""
        activity_name = data.activity_name
        price_snapshot = data.price_snapshot
        if data.activity_id is not None:
            activity = ActivityRepository(self.db).get_by_id(data.activity_id, gym_id)
            if not activity:
                raise NotFoundError(f"Activity {data.activity_id} not found")
            activity_name = activity_name or str(activity.name)
            if price_snapshot is None and activity.price is not None:
                price_snapshot = int(activity.price)
        if not activity_name:
            raise ValidationError("Membership needs an activity or an activity name")

        membership = Membership(
            gym_id=gym_id,
            member_id=data.member_id,
            activity_id=data.activity_id,
            activity_name=activity_name,
            price_snapshot=price_snapshot,
            status=data.status.value,
            auto_renewal=data.auto_renewal,
            start_date=data.start_date,
            end_date=data.end_date,
        )
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership
