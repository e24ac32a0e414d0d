from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.auth import get_current_gym, get_current_operator
from app.core.database import get_db
from app.core.exceptions import (
    AlreadyExists,
    AlreadyPaid,
    AlreadyProcessed,
    BillingError,
    ConcurrencyConflict,
    NotFoundError,
    ValidationError,
)
from app.core.idempotency import IdempotencyResult, check_idempotency, record_idempotency_response
from app.schemas.billing import (
    GenerationResultResponse,
    LedgerResponse,
    ManualGenerationResponse,
    PendingMemberResponse,
    PeriodResponse,
    PeriodSummaryResponse,
    ReconciliationResponse,
    SettlementResponse,
    SettleRequest,
    ShouldRunResponse,
    TriggerRequest,
    TriggerResponse,
)
from app.services.billing_guard import BillingGuard
from app.services.billing_periods import BillingPeriod
from app.services.billing_scheduler import BillingScheduleTrigger, OfferMarker, OperatorSession
from app.services.charge_generation import ChargeGenerationService
from app.services.debt_reconciliation import DebtReconciliationService
from app.services.gym_context import gym_today, require_gym
from app.services.ledger_service import LedgerService
from app.services.settlement_service import SettlementService, SettlementTarget

router = APIRouter()

ERROR_STATUS: list[tuple[type[BillingError], int]] = [
    (NotFoundError, 404),
    (AlreadyProcessed, 409),
    (AlreadyExists, 409),
    (AlreadyPaid, 409),
    (ConcurrencyConflict, 409),
    (ValidationError, 422),
]


def to_http_error(error: BillingError) -> HTTPException:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            break
    else:
        status_code = 400
    return HTTPException(
        status_code=status_code,
        detail={"reason": error.reason, "message": error.message},
    )


def _resolve_period(db: Session, gym_id: UUID, year: int | None, month: int | None) -> BillingPeriod:
    if year is None and month is None:
        return BillingPeriod.from_date(gym_today(require_gym(db, gym_id)))
    if year is None or month is None:
        raise HTTPException(status_code=422, detail="year and month must be given together")
    return BillingPeriod(year, month)


@router.post(
    "/generate",
    response_model=GenerationResultResponse,
    summary="Generate monthly charges",
    responses={
        207: {"description": "Generation finished but some members failed"},
        404: {"description": "Gym not found"},
    },
)
async def generate_charges(
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
    operator: OperatorSession = Depends(get_current_operator),
) -> GenerationResultResponse | JSONResponse:
    """Run the generation job for the gym's current period.

    Members that already have charges are skipped, so calling this twice is safe.
    """
    service = ChargeGenerationService(db)
    try:
        result = service.generate(gym_id, triggered_by=operator.operator_id)
    except BillingError as e:
        raise to_http_error(e) from None

    response = GenerationResultResponse.model_validate(result)
    if result.errors:
        return JSONResponse(status_code=207, content=response.model_dump(mode="json"))
    return response


@router.get(
    "/should_run",
    response_model=ShouldRunResponse,
    summary="Check whether automatic generation is due",
    responses={404: {"description": "Gym not found"}},
)
async def should_run(
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
) -> ShouldRunResponse:
    guard = BillingGuard(db)
    try:
        period = guard.current_period(gym_id)
        due = guard.should_run(gym_id)
    except BillingError as e:
        raise to_http_error(e) from None
    return ShouldRunResponse(
        period=PeriodResponse.model_validate(period),
        should_run=due,
        processed=guard.is_processed(gym_id, period),
    )


@router.post(
    "/members/{member_id}/generate",
    response_model=ManualGenerationResponse,
    summary="Generate current charges for one member",
    responses={
        404: {"description": "Gym or member not found"},
        422: {"description": "Membership without price or malformed"},
    },
)
async def generate_member_charges(
    member_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
    operator: OperatorSession = Depends(get_current_operator),
) -> ManualGenerationResponse | JSONResponse:
    """Create the member's missing charges for the current period, ignoring the period guard."""
    idempotency = check_idempotency(request, db, gym_id)
    if isinstance(idempotency, JSONResponse):
        return idempotency

    service = ChargeGenerationService(db)
    try:
        result = service.generate_for_member(gym_id, member_id, operator_id=operator.operator_id)
    except BillingError as e:
        raise to_http_error(e) from None

    response = ManualGenerationResponse.model_validate(result)
    if isinstance(idempotency, IdempotencyResult):
        record_idempotency_response(
            db, gym_id, idempotency.key, 200, response.model_dump(mode="json")
        )
    return response


@router.post(
    "/settle",
    response_model=SettlementResponse,
    summary="Settle charges",
    responses={
        404: {"description": "Member or charge not found"},
        409: {"description": "Charge already paid or concurrent update"},
        422: {"description": "Amount mismatch or cash register closed"},
    },
)
async def settle_charges(
    data: SettleRequest,
    request: Request,
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
    operator: OperatorSession = Depends(get_current_operator),
) -> SettlementResponse | JSONResponse:
    """Mark one charge, or every outstanding charge of the member in the period, as paid."""
    idempotency = check_idempotency(request, db, gym_id)
    if isinstance(idempotency, JSONResponse):
        return idempotency

    target = (
        SettlementTarget.charge(data.charge_id)
        if data.charge_id is not None
        else SettlementTarget.all_outstanding()
    )
    service = SettlementService(db)
    try:
        result = service.settle(
            gym_id,
            BillingPeriod(data.year, data.month),
            data.member_id,
            target,
            data.method,
            operator_id=operator.operator_id,
            amount=data.amount,
        )
    except BillingError as e:
        raise to_http_error(e) from None

    response = SettlementResponse.model_validate(result)
    if isinstance(idempotency, IdempotencyResult):
        record_idempotency_response(
            db, gym_id, idempotency.key, 200, response.model_dump(mode="json")
        )
    return response


@router.get(
    "/pending",
    response_model=list[PendingMemberResponse],
    summary="List members with outstanding charges",
    responses={404: {"description": "Gym not found"}},
)
async def list_pending(
    year: int | None = Query(default=None, ge=2000, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
) -> list[PendingMemberResponse]:
    """Members owing money for the period, most overdue first. Defaults to the current period."""
    try:
        period = _resolve_period(db, gym_id, year, month)
        items = LedgerService(db).list_pending(gym_id, period)
    except BillingError as e:
        raise to_http_error(e) from None
    return [PendingMemberResponse.model_validate(item) for item in items]


@router.get(
    "/summary",
    response_model=PeriodSummaryResponse,
    summary="Get period summary",
    responses={404: {"description": "Gym not found"}},
)
async def get_summary(
    year: int | None = Query(default=None, ge=2000, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
) -> PeriodSummaryResponse:
    try:
        period = _resolve_period(db, gym_id, year, month)
        summary = LedgerService(db).get_period_summary(gym_id, period)
    except BillingError as e:
        raise to_http_error(e) from None
    return PeriodSummaryResponse.model_validate(summary)


@router.get(
    "/members/{member_id}/ledger",
    response_model=LedgerResponse,
    summary="Get a member's ledger for a period",
    responses={404: {"description": "Gym not found"}},
)
async def get_member_ledger(
    member_id: UUID,
    year: int | None = Query(default=None, ge=2000, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
) -> LedgerResponse:
    try:
        period = _resolve_period(db, gym_id, year, month)
        ledger = LedgerService(db).get_member_ledger(gym_id, member_id, period)
    except BillingError as e:
        raise to_http_error(e) from None
    return LedgerResponse.model_validate(ledger)


@router.post(
    "/members/{member_id}/reconcile",
    response_model=ReconciliationResponse,
    summary="Reconcile a member's debt",
    responses={
        404: {"description": "Member not found"},
        409: {"description": "Debt changed concurrently"},
    },
)
async def reconcile_member(
    member_id: UUID,
    apply: bool = Query(default=True),
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
    operator: OperatorSession = Depends(get_current_operator),
) -> ReconciliationResponse:
    """Recompute the member's debt from pending charges and, unless ``apply`` is false, fix it."""
    service = DebtReconciliationService(db)
    try:
        result = service.reconcile_member_debt(
            gym_id, member_id, apply=apply, operator_id=operator.operator_id
        )
    except BillingError as e:
        raise to_http_error(e) from None
    return ReconciliationResponse.model_validate(result)


@router.post(
    "/trigger",
    response_model=TriggerResponse,
    summary="Offer monthly generation at session start",
    responses={404: {"description": "Gym not found"}},
)
async def trigger_generation(
    data: TriggerRequest,
    db: Session = Depends(get_db),
    operator: OperatorSession = Depends(get_current_operator),
) -> TriggerResponse:
    """Session-start check for privileged operators.

    Without ``confirmed`` the response is ``awaiting_confirmation`` when
    generation is due; call again with ``confirmed`` set to accept or decline.
    The returned ``last_offered_on`` should be sent back on the next call.
    """
    confirmed = data.confirmed
    trigger = BillingScheduleTrigger(
        guard=BillingGuard(db),
        generator=ChargeGenerationService(db),
        marker=OfferMarker(gym_id=operator.gym_id, last_offered_on=data.last_offered_on),
        confirm=None if confirmed is None else (lambda _period: confirmed),
    )
    try:
        decision = trigger.on_session_start(operator)
    except BillingError as e:
        raise to_http_error(e) from None

    return TriggerResponse(
        outcome=decision.outcome.value,
        last_offered_on=decision.marker.last_offered_on,
        period=PeriodResponse.model_validate(decision.period) if decision.period else None,
        result=GenerationResultResponse.model_validate(decision.result) if decision.result else None,
    )
