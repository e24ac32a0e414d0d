from app.repositories.activity_repository import ActivityRepository
from app.repositories.audit_log_repository import AuditLogRepository
from app.repositories.charge_repository import ChargeRepository
from app.repositories.daily_cash_repository import DailyCashRepository
from app.repositories.gym_repository import GymRepository
from app.repositories.idempotency_repository import IdempotencyRepository
from app.repositories.member_repository import MemberRepository
from app.repositories.membership_repository import MembershipRepository
from app.repositories.period_processing_repository import PeriodProcessingRepository

__all__ = [
    "ActivityRepository",
    "AuditLogRepository",
    "ChargeRepository",
    "DailyCashRepository",
    "GymRepository",
    "IdempotencyRepository",
    "MemberRepository",
    "MembershipRepository",
    "PeriodProcessingRepository",
]
