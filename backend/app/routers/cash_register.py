from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.auth import get_current_gym, get_current_operator
from app.core.database import get_db
from app.core.exceptions import BillingError
from app.routers.billing import to_http_error
from app.schemas.daily_cash import CashTransactionResponse, DailyCashResponse
from app.services.billing_scheduler import OperatorSession
from app.services.cash_register_service import CashRegisterService

router = APIRouter()


@router.get(
    "/{day}",
    response_model=DailyCashResponse,
    summary="Get the cash register of a day",
    responses={404: {"description": "No cash register for that day"}},
)
async def get_cash_register(
    day: date,
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
) -> DailyCashResponse:
    register = CashRegisterService(db).get_register(gym_id, day)
    if not register:
        raise HTTPException(status_code=404, detail="Cash register not found")
    return DailyCashResponse.model_validate(register)


@router.get(
    "/{day}/transactions",
    response_model=list[CashTransactionResponse],
    summary="List the transactions of a day",
    responses={404: {"description": "No cash register for that day"}},
)
async def list_cash_transactions(
    day: date,
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
) -> list[CashTransactionResponse]:
    service = CashRegisterService(db)
    register = service.get_register(gym_id, day)
    if not register:
        raise HTTPException(status_code=404, detail="Cash register not found")
    return [CashTransactionResponse.model_validate(t) for t in service.get_transactions(register)]


@router.post(
    "/{day}/close",
    response_model=DailyCashResponse,
    summary="Close the cash register of a day",
    responses={404: {"description": "No cash register for that day"}},
)
async def close_cash_register(
    day: date,
    db: Session = Depends(get_db),
    gym_id: UUID = Depends(get_current_gym),
    operator: OperatorSession = Depends(get_current_operator),
) -> DailyCashResponse:
    """Close the register. Further payments on that day are rejected."""
    try:
        register = CashRegisterService(db).close_register(gym_id, day, operator.operator_id)
    except BillingError as e:
        raise to_http_error(e) from None
    return DailyCashResponse.model_validate(register)
