"""Durable witness that automatic generation ran for a (gym, period)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from app.core.database import Base
from app.models.shared import UUIDType, utc_now


class PeriodProcessingRecord(Base):
    __tablename__ = "period_processing_records"

    gym_id = Column(UUIDType, ForeignKey("gyms.id", ondelete="RESTRICT"), primary_key=True)
    year = Column(Integer, primary_key=True)
    month = Column(Integer, primary_key=True)

    processed_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    member_count = Column(Integer, nullable=False, default=0)
    total_amount = Column(Integer, nullable=False, default=0)
    error_count = Column(Integer, nullable=False, default=0)
    triggered_by = Column(String(255), nullable=True)
