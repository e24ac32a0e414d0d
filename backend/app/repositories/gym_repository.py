from uuid import UUID

from sqlalchemy.orm import Session

from app.models.gym import Gym
from app.schemas.gym import GymCreate


class GymRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, gym_id: UUID) -> Gym | None:
        return self.db.query(Gym).filter(Gym.id == gym_id).first()

    def get_all(self, auto_billing_only: bool = False) -> list[Gym]:
        query = self.db.query(Gym)
        if auto_billing_only:
            query = query.filter(Gym.auto_billing_enabled.is_(True))
        return query.order_by(Gym.created_at.asc()).all()

    def create(self, data: GymCreate) -> Gym:
        gym = Gym(**data.model_dump())
        self.db.add(gym)
        self.db.commit()
        self.db.refresh(gym)
        return gym
