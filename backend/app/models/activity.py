from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from app.core.database import Base
from app.models.shared import DEFAULT_GYM_ID, UUIDType, generate_uuid


class Activity(Base):
    """Price catalog entry. Owned by the catalog subsystem; billing only reads it."""

    __tablename__ = "activities"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    gym_id = Column(
        UUIDType,
        ForeignKey("gyms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_GYM_ID,
    )
    name = Column(String(255), nullable=False)
    price = Column(Integer, nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
