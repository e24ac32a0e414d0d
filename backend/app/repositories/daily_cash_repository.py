from datetime import date, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.daily_cash import CashTransaction, DailyCash, DailyCashStatus, TransactionCategory


class DailyCashRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_day(self, gym_id: UUID, day: date) -> DailyCash | None:
        return (
            self.db.query(DailyCash)
            .filter(DailyCash.gym_id == gym_id, DailyCash.day == day)
            .first()
        )

    def create(self, gym_id: UUID, day: date, opened_by: str | None, notes: str | None) -> DailyCash:
        register = DailyCash(
            gym_id=gym_id,
            day=day,
            status=DailyCashStatus.OPEN.value,
            opening_amount=0,
            total_income=0,
            total_expense=0,
            membership_income=0,
            other_income=0,
            opened_by=opened_by,
            notes=notes,
        )
        self.db.add(register)
        self.db.flush()
        return register

    def add_income(self, register_id: UUID, amount: int, category: TransactionCategory) -> bool:
        """Atomically add income to an open register. Returns False if it is closed."""
        values = {DailyCash.total_income: DailyCash.total_income + amount}
        if category == TransactionCategory.MEMBERSHIP:
            values[DailyCash.membership_income] = DailyCash.membership_income + amount
        else:
            values[DailyCash.other_income] = DailyCash.other_income + amount
        updated = (
            self.db.query(DailyCash)
            .filter(
                DailyCash.id == register_id,
                DailyCash.status == DailyCashStatus.OPEN.value,
            )
            .update(values, synchronize_session=False)
        )
        return bool(updated == 1)

    def create_transaction(
        self,
        *,
        gym_id: UUID,
        daily_cash_id: UUID,
        amount: int,
        description: str,
        payment_method: str,
        category: TransactionCategory,
        member_id: UUID | None = None,
        charge_ids: list[str] | None = None,
        operator_id: str | None = None,
    ) -> CashTransaction:
        txn = CashTransaction(
            gym_id=gym_id,
            daily_cash_id=daily_cash_id,
            category=category.value,
            amount=amount,
            description=description,
            payment_method=payment_method,
            member_id=member_id,
            charge_ids=charge_ids or [],
            operator_id=operator_id,
        )
        self.db.add(txn)
        self.db.flush()
        return txn

    def get_transactions(self, daily_cash_id: UUID) -> list[CashTransaction]:
        return (
            self.db.query(CashTransaction)
            .filter(CashTransaction.daily_cash_id == daily_cash_id)
            .order_by(CashTransaction.created_at.asc())
            .all()
        )

    def close(self, register: DailyCash, closed_by: str | None, closed_at: datetime) -> DailyCash:
        register.status = DailyCashStatus.CLOSED.value  # type: ignore[assignment]
        register.closed_by = closed_by  # type: ignore[assignment]
        register.closed_at = closed_at  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(register)
        return register
