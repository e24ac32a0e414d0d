from app.schemas.activity import ActivityCreate
from app.schemas.audit_log import AuditLogResponse
from app.schemas.billing import (
    GenerationResultResponse,
    LedgerResponse,
    ManualGenerationResponse,
    PeriodSummaryResponse,
    SettleRequest,
    SettlementResponse,
)
from app.schemas.charge import ChargeCreate, ChargeResponse
from app.schemas.daily_cash import CashTransactionResponse, DailyCashResponse
from app.schemas.gym import GymCreate
from app.schemas.member import MemberCreate
from app.schemas.membership import MembershipCreate

__all__ = [
    "ActivityCreate",
    "AuditLogResponse",
    "CashTransactionResponse",
    "ChargeCreate",
    "ChargeResponse",
    "DailyCashResponse",
    "GenerationResultResponse",
    "GymCreate",
    "LedgerResponse",
    "ManualGenerationResponse",
    "MemberCreate",
    "MembershipCreate",
    "PeriodSummaryResponse",
    "SettleRequest",
    "SettlementResponse",
]
