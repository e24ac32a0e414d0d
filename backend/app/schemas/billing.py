"""Request and response schemas for the billing endpoints."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.charge import PaymentMethod
from app.schemas.charge import ChargeResponse


class PeriodResponse(BaseModel):
    year: int
    month: int
    key: str
    label: str

    model_config = {"from_attributes": True}


class MemberGenerationErrorResponse(BaseModel):
    member_id: UUID
    member_name: str
    reason: str
    message: str

    model_config = {"from_attributes": True}


class GenerationResultResponse(BaseModel):
    period: PeriodResponse
    created_count: int
    member_count: int
    skipped_count: int
    total_amount: int
    errors: list[MemberGenerationErrorResponse]
    record_created: bool

    model_config = {"from_attributes": True}


class ManualGenerationResponse(BaseModel):
    period: PeriodResponse
    created: bool
    reason: str | None
    charges: list[ChargeResponse]
    total_amount: int

    model_config = {"from_attributes": True}


class LedgerResponse(BaseModel):
    member_id: UUID
    period: PeriodResponse
    total_due: int
    total_paid: int
    total_outstanding: int

    model_config = {"from_attributes": True}


class SettleRequest(BaseModel):
    year: int = Field(..., ge=2000, le=9999)
    month: int = Field(..., ge=1, le=12)
    member_id: UUID
    charge_id: UUID | None = None
    method: PaymentMethod
    amount: int | None = Field(default=None, ge=0)


class SettlementResponse(BaseModel):
    period: PeriodResponse
    member_id: UUID
    amount: int
    cash_transaction_id: UUID
    ledger: LedgerResponse
    charges: list[ChargeResponse]

    model_config = {"from_attributes": True}


class PendingMemberResponse(BaseModel):
    member_id: UUID
    member_name: str
    pending_charges: list[ChargeResponse]
    total_due: int
    total_paid: int
    total_outstanding: int
    due_date: date
    days_overdue: int
    is_overdue: bool

    model_config = {"from_attributes": True}


class ActivityBreakdownResponse(BaseModel):
    members: int
    total_cost: int
    collected: int
    pending: int

    model_config = {"from_attributes": True}


class ProcessingRecordResponse(BaseModel):
    year: int
    month: int
    processed_at: datetime
    member_count: int
    total_amount: int
    error_count: int
    triggered_by: str | None

    model_config = {"from_attributes": True}


class PeriodSummaryResponse(BaseModel):
    year: int
    month: int
    total_members: int
    total_to_collect: int
    total_collected: int
    total_pending: int
    members_with_debt: int
    members_up_to_date: int
    activities_breakdown: dict[str, ActivityBreakdownResponse]
    processing_record: ProcessingRecordResponse | None

    model_config = {"from_attributes": True}


class ShouldRunResponse(BaseModel):
    period: PeriodResponse
    should_run: bool
    processed: bool


class TriggerRequest(BaseModel):
    last_offered_on: date | None = None
    confirmed: bool | None = None


class TriggerResponse(BaseModel):
    outcome: str
    last_offered_on: date | None
    period: PeriodResponse | None = None
    result: GenerationResultResponse | None = None


class ReconciliationResponse(BaseModel):
    member_id: UUID
    expected: int
    recorded: int
    drift: int
    corrected: bool

    model_config = {"from_attributes": True}

