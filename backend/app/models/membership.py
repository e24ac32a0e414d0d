from enum import Enum

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, func

from app.core.database import Base
from app.models.shared import DEFAULT_GYM_ID, UUIDType, generate_uuid


class MembershipStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class Membership(Base):
    """A member's subscription to one activity."""

    __tablename__ = "memberships"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    gym_id = Column(
        UUIDType,
        ForeignKey("gyms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_GYM_ID,
    )
    member_id = Column(
        UUIDType, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    activity_id = Column(UUIDType, ForeignKey("activities.id", ondelete="RESTRICT"), nullable=True)
    activity_name = Column(String(255), nullable=False)
    price_snapshot = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=MembershipStatus.ACTIVE.value)
    auto_renewal = Column(Boolean, nullable=False, default=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
