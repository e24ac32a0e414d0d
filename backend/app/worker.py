import logging
from typing import Any
from uuid import UUID

from arq import cron

from app.core.config import settings
from app.core.database import SessionLocal
from app.core.exceptions import AlreadyProcessed, BillingError
from app.repositories.gym_repository import GymRepository
from app.repositories.idempotency_repository import IdempotencyRepository
from app.services.billing_guard import BillingGuard
from app.services.charge_generation import ChargeGenerationService, summarize_errors
from app.services.debt_reconciliation import DebtReconciliationService
from app.tasks import redis_settings

logger = logging.getLogger(__name__)

WORKER_OPERATOR = "worker"


async def generate_monthly_charges_task(ctx: dict[str, Any]) -> int:
    """Background task: run automatic generation for gyms that opted in.

    Runs daily; the guard only lets it through on the first day of a gym's
    local month, and only once per period.

    Returns:
        Number of charges created across all gyms.
    """
    db = SessionLocal()
    try:
        guard = BillingGuard(db)
        generator = ChargeGenerationService(db)
        gym_ids: list[UUID] = [g.id for g in GymRepository(db).get_all(auto_billing_only=True)]  # type: ignore[misc]
        created = 0

        for gym_id in gym_ids:
            # Gyms are billed independently.
            try:
                if not guard.should_run(gym_id):
                    continue
                result = generator.run_automatic(gym_id, triggered_by=WORKER_OPERATOR)
            except AlreadyProcessed:
                logger.info("Gym %s was processed concurrently, skipping", gym_id)
                continue
            except BillingError as e:
                logger.warning("Automatic generation failed for gym %s: %s", gym_id, e)
                continue
            except Exception:
                db.rollback()
                logger.exception("Automatic generation crashed for gym %s", gym_id)
                continue

            created += result.created_count
            if result.errors:
                logger.warning(
                    "Gym %s period %s finished with %d member errors: %s",
                    gym_id,
                    result.period,
                    len(result.errors),
                    summarize_errors(result.errors),
                )

        if created > 0:
            logger.info("Generated %d charges", created)
        return created
    finally:
        db.close()


async def generate_gym_charges_task(ctx: dict[str, Any], gym_id: str) -> int:
    """Background task: run the generation job for one gym, outside the guard.

    Args:
        ctx: ARQ worker context.
        gym_id: UUID string of the gym.

    Returns:
        Number of charges created.
    """
    db = SessionLocal()
    try:
        result = ChargeGenerationService(db).generate(UUID(gym_id), triggered_by=WORKER_OPERATOR)
        if result.errors:
            logger.warning(
                "Gym %s period %s finished with %d member errors: %s",
                gym_id,
                result.period,
                len(result.errors),
                summarize_errors(result.errors),
            )
        return result.created_count
    finally:
        db.close()


async def reconcile_member_debts_task(ctx: dict[str, Any]) -> int:
    """Background task: repair member debt counters that drifted from their pending charges.

    Runs nightly.
    """
    db = SessionLocal()
    try:
        service = DebtReconciliationService(db)
        gym_ids: list[UUID] = [g.id for g in GymRepository(db).get_all()]  # type: ignore[misc]
        corrected = 0
        for gym_id in gym_ids:
            drifted = service.reconcile_gym(gym_id)
            corrected += sum(1 for r in drifted if r.corrected)
        if corrected > 0:
            logger.info("Corrected debt of %d members", corrected)
        return corrected
    finally:
        db.close()


async def cleanup_idempotency_records_task(ctx: dict[str, Any]) -> int:
    """Background task: delete replay records older than a day."""
    db = SessionLocal()
    try:
        count = IdempotencyRepository(db).delete_expired()
        if count > 0:
            logger.info("Deleted %d expired idempotency records", count)
        return count
    finally:
        db.close()


class WorkerSettings:
    functions = [
        generate_monthly_charges_task,
        generate_gym_charges_task,
        reconcile_member_debts_task,
        cleanup_idempotency_records_task,
    ]
    cron_jobs = [
        cron(generate_monthly_charges_task, hour=settings.BILLING_CRON_HOUR, minute=0),
        cron(reconcile_member_debts_task, hour=3, minute=0),  # nightly
        cron(cleanup_idempotency_records_task, hour=0, minute=30),
    ]
    redis_settings = redis_settings
