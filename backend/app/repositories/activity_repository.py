from uuid import UUID

from sqlalchemy.orm import Session

from app.models.activity import Activity
from app.schemas.activity import ActivityCreate


class ActivityRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(self, gym_id: UUID) -> list[Activity]:
        return (
            self.db.query(Activity)
            .filter(Activity.gym_id == gym_id)
            .order_by(Activity.name.asc())
            .all()
        )

    def get_by_id(self, activity_id: UUID, gym_id: UUID | None = None) -> Activity | None:
        query = self.db.query(Activity).filter(Activity.id == activity_id)
        if gym_id is not None:
            query = query.filter(Activity.gym_id == gym_id)
        return query.first()

    def create(self, data: ActivityCreate, gym_id: UUID) -> Activity:
        activity = Activity(**data.model_dump(), gym_id=gym_id)
        self.db.add(activity)
        self.db.commit()
        self.db.refresh(activity)
        return activity
