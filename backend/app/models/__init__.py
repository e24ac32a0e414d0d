from app.models.activity import Activity
from app.models.audit_log import AuditLog
from app.models.charge import Charge, ChargeState, PaymentMethod
from app.models.daily_cash import CashTransaction, DailyCash, DailyCashStatus, TransactionCategory
from app.models.gym import Gym
from app.models.idempotency_record import IdempotencyRecord
from app.models.member import Member, MemberStatus
from app.models.membership import Membership, MembershipStatus
from app.models.period_processing_record import PeriodProcessingRecord

__all__ = [
    "Activity",
    "AuditLog",
    "CashTransaction",
    "Charge",
    "ChargeState",
    "DailyCash",
    "DailyCashStatus",
    "Gym",
    "IdempotencyRecord",
    "Member",
    "MemberStatus",
    "Membership",
    "MembershipStatus",
    "PaymentMethod",
    "PeriodProcessingRecord",
    "TransactionCategory",
]
