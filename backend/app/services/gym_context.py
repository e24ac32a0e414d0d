from datetime import date
from uuid import UUID
from zoneinfo import ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.models.gym import Gym
from app.repositories.gym_repository import GymRepository
from app.services.billing_periods import local_today


def require_gym(db: Session, gym_id: UUID) -> Gym:
    gym = GymRepository(db).get_by_id(gym_id)
    if not gym:
        raise NotFoundError(f"Gym {gym_id} not found")
    return gym


def gym_today(gym: Gym, today: date | None = None) -> date:
    """The caller-supplied date, or today in the gym's local timezone."""
    if today is not None:
        return today
    try:
        return local_today(str(gym.timezone) if gym.timezone else None)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Gym {gym.id} has an unknown timezone: {gym.timezone}") from None
