from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ChargeCreate(BaseModel):
    year: int = Field(..., ge=2000, le=9999)
    month: int = Field(..., ge=1, le=12)
    member_id: UUID
    membership_id: UUID
    activity_id: UUID | None = None
    activity_name: str
    amount: int = Field(..., ge=0)
    due_date: date
    auto_generated: bool = True
    created_by: str | None = None


class ChargeResponse(BaseModel):
    id: UUID
    year: int
    month: int
    member_id: UUID
    membership_id: UUID
    activity_id: UUID | None
    activity_name: str
    amount: int
    due_date: date
    state: str
    auto_generated: bool
    created_by: str | None
    paid_at: datetime | None
    payment_method: str | None
    paid_by: str | None

    model_config = {"from_attributes": True}
