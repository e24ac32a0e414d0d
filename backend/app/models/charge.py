from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)

from app.core.database import Base
from app.models.shared import DEFAULT_GYM_ID, UUIDType, generate_uuid


class ChargeState(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class PaymentMethod(str, Enum):
    CASH = "cash"
    TRANSFER = "transfer"
    CARD = "card"
    OTHER = "other"


class Charge(Base):
    """One monetary obligation for one membership in one billing period.

    The amount is snapshotted at creation and never rewritten.
    """

    __tablename__ = "charges"
    __table_args__ = (
        UniqueConstraint(
            "gym_id",
            "year",
            "month",
            "member_id",
            "membership_id",
            name="uq_charge_gym_period_member_membership",
        ),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    gym_id = Column(
        UUIDType,
        ForeignKey("gyms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_GYM_ID,
    )
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    member_id = Column(
        UUIDType, ForeignKey("members.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    membership_id = Column(
        UUIDType, ForeignKey("memberships.id", ondelete="RESTRICT"), nullable=False
    )
    activity_id = Column(UUIDType, nullable=True)
    activity_name = Column(String(255), nullable=False)

    amount = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False)
    state = Column(String(20), nullable=False, default=ChargeState.PENDING.value, index=True)
    auto_generated = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(255), nullable=True)

    paid_at = Column(DateTime(timezone=True), nullable=True)
    payment_method = Column(String(20), nullable=True)
    paid_by = Column(String(255), nullable=True)
    cash_transaction_id = Column(UUIDType, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
