from enum import Enum

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from app.core.database import Base
from app.models.shared import DEFAULT_GYM_ID, UUIDType, generate_uuid


class DailyCashStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class TransactionCategory(str, Enum):
    MEMBERSHIP = "membership"
    OTHER = "other"


class DailyCash(Base):
    """Cash register for one gym and one local day."""

    __tablename__ = "daily_cash"
    __table_args__ = (UniqueConstraint("gym_id", "day", name="uq_daily_cash_gym_day"),)

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    gym_id = Column(
        UUIDType,
        ForeignKey("gyms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_GYM_ID,
    )
    day = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=DailyCashStatus.OPEN.value)
    opening_amount = Column(Integer, nullable=False, default=0)
    total_income = Column(Integer, nullable=False, default=0)
    total_expense = Column(Integer, nullable=False, default=0)
    membership_income = Column(Integer, nullable=False, default=0)
    other_income = Column(Integer, nullable=False, default=0)
    opened_by = Column(String(255), nullable=True)
    closed_by = Column(String(255), nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class CashTransaction(Base):
    """Income entry booked into a daily cash register."""

    __tablename__ = "cash_transactions"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    gym_id = Column(
        UUIDType,
        ForeignKey("gyms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_GYM_ID,
    )
    daily_cash_id = Column(
        UUIDType, ForeignKey("daily_cash.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    category = Column(String(20), nullable=False, default=TransactionCategory.MEMBERSHIP.value)
    amount = Column(Integer, nullable=False)
    description = Column(String(500), nullable=False)
    payment_method = Column(String(20), nullable=False)
    member_id = Column(UUIDType, nullable=True, index=True)
    charge_ids = Column(JSON, nullable=False, default=list)
    operator_id = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
