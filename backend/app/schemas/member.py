from pydantic import BaseModel, EmailStr, Field

from app.models.member import MemberStatus


class MemberCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(default="", max_length=255)
    email: EmailStr | None = None
    status: MemberStatus = MemberStatus.ACTIVE
