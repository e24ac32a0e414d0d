from pydantic import BaseModel, Field


class ActivityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: int | None = Field(default=None, ge=0)
    active: bool = True
