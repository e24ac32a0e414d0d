from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel


class DailyCashResponse(BaseModel):
    id: UUID
    day: date
    status: str
    opening_amount: int
    total_income: int
    total_expense: int
    membership_income: int
    other_income: int
    opened_by: str | None
    closed_by: str | None
    closed_at: datetime | None

    model_config = {"from_attributes": True}


class CashTransactionResponse(BaseModel):
    id: UUID
    daily_cash_id: UUID
    category: str
    amount: int
    description: str
    payment_method: str
    member_id: UUID | None
    operator_id: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
