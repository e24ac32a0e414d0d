"""Daily cash register that settlements book their income into."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import CashRegisterClosed, NotFoundError
from app.models.daily_cash import CashTransaction, DailyCash, DailyCashStatus, TransactionCategory
from app.models.shared import utc_now
from app.repositories.daily_cash_repository import DailyCashRepository

logger = logging.getLogger(__name__)


class CashRegisterService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = DailyCashRepository(db)

    def get_register(self, gym_id: UUID, day: date) -> DailyCash | None:
        return self.repo.get_by_day(gym_id, day)

    def get_transactions(self, register: DailyCash) -> list[CashTransaction]:
        return self.repo.get_transactions(register.id)  # type: ignore[arg-type]

    def record_income(
        self,
        *,
        gym_id: UUID,
        day: date,
        amount: int,
        description: str,
        payment_method: str,
        member_id: UUID | None = None,
        charge_ids: list[str] | None = None,
        operator_id: str | None = None,
        category: TransactionCategory = TransactionCategory.MEMBERSHIP,
    ) -> CashTransaction:
        """Book income into the day's register, opening it if needed. Does not commit."""
        register = self.repo.get_by_day(gym_id, day)
        if register is None:
            register = self.repo.create(
                gym_id,
                day,
                opened_by=operator_id,
                notes="Opened automatically when registering a payment",
            )
            logger.info("Opened cash register for gym %s on %s", gym_id, day)

        if register.status == DailyCashStatus.CLOSED.value or not self.repo.add_income(
            register.id,  # type: ignore[arg-type]
            amount,
            category,
        ):
            raise CashRegisterClosed(f"The cash register for {day.isoformat()} is closed")

        return self.repo.create_transaction(
            gym_id=gym_id,
            daily_cash_id=register.id,  # type: ignore[arg-type]
            amount=amount,
            description=description,
            payment_method=payment_method,
            category=category,
            member_id=member_id,
            charge_ids=charge_ids,
            operator_id=operator_id,
        )

    def close_register(self, gym_id: UUID, day: date, operator_id: str | None = None) -> DailyCash:
        register = self.repo.get_by_day(gym_id, day)
        if not register:
            raise NotFoundError(f"No cash register for {day.isoformat()}")
        if register.status == DailyCashStatus.CLOSED.value:
            return register
        logger.info("Closing cash register for gym %s on %s", gym_id, day)
        return self.repo.close(register, closed_by=operator_id, closed_at=utc_now())
