from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.membership import MembershipStatus


class MembershipCreate(BaseModel):
    member_id: UUID
    activity_id: UUID | None = None
    activity_name: str | None = Field(default=None, max_length=255)
    price_snapshot: int | None = Field(default=None, ge=0)
    status: MembershipStatus = MembershipStatus.ACTIVE
    auto_renewal: bool = False
    start_date: date
    end_date: date | None = None
