from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import AlreadyExists
from app.models.charge import Charge, ChargeState, PaymentMethod
from app.schemas.charge import ChargeCreate


class ChargeRepository:
    """Data access for charges. Writes flush but never commit."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, charge_id: UUID, gym_id: UUID | None = None) -> Charge | None:
        query = self.db.query(Charge).filter(Charge.id == charge_id)
        if gym_id is not None:
            query = query.filter(Charge.gym_id == gym_id)
        return query.first()

    def get_by_key(
        self, gym_id: UUID, year: int, month: int, member_id: UUID, membership_id: UUID
    ) -> Charge | None:
        return (
            self.db.query(Charge)
            .filter(
                Charge.gym_id == gym_id,
                Charge.year == year,
                Charge.month == month,
                Charge.member_id == member_id,
                Charge.membership_id == membership_id,
            )
            .first()
        )

    def exists_for_member_period(
        self, gym_id: UUID, year: int, month: int, member_id: UUID
    ) -> bool:
        query = self.db.query(Charge.id).filter(
            Charge.gym_id == gym_id,
            Charge.year == year,
            Charge.month == month,
            Charge.member_id == member_id,
        )
        return query.first() is not None

    def get_for_member_period(
        self,
        gym_id: UUID,
        year: int,
        month: int,
        member_id: UUID,
        state: ChargeState | None = None,
    ) -> list[Charge]:
        query = self.db.query(Charge).filter(
            Charge.gym_id == gym_id,
            Charge.year == year,
            Charge.month == month,
            Charge.member_id == member_id,
        )
        if state:
            query = query.filter(Charge.state == state.value)
        return query.order_by(Charge.activity_name.asc()).all()

    def get_for_period(
        self, gym_id: UUID, year: int, month: int, state: ChargeState | None = None
    ) -> list[Charge]:
        query = self.db.query(Charge).filter(
            Charge.gym_id == gym_id,
            Charge.year == year,
            Charge.month == month,
        )
        if state:
            query = query.filter(Charge.state == state.value)
        return query.order_by(Charge.member_id.asc(), Charge.activity_name.asc()).all()

    def sum_pending_for_member(self, gym_id: UUID, member_id: UUID) -> int:
        result = (
            self.db.query(func.coalesce(func.sum(Charge.amount), 0))
            .filter(
                Charge.gym_id == gym_id,
                Charge.member_id == member_id,
                Charge.state == ChargeState.PENDING.value,
            )
            .scalar()
        )
        return int(result or 0)

    def create(self, data: ChargeCreate, gym_id: UUID) -> Charge:
        """Insert a charge, relying on the unique key for create-if-absent.

        On a key collision the session is rolled back and ``AlreadyExists`` is
        raised, so any other pending work in the same transaction is discarded.
        """
        charge = Charge(
            gym_id=gym_id,
            year=data.year,
            month=data.month,
            member_id=data.member_id,
            membership_id=data.membership_id,
            activity_id=data.activity_id,
            activity_name=data.activity_name,
            amount=data.amount,
            due_date=data.due_date,
            state=ChargeState.PENDING.value,
            auto_generated=data.auto_generated,
            created_by=data.created_by,
        )
        self.db.add(charge)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyExists(
                f"Charge for member {data.member_id} membership {data.membership_id} "
                f"in {data.year}-{data.month:02d} already exists"
            ) from None
        return charge

    def mark_paid(
        self,
        charge_id: UUID,
        paid_at: datetime,
        payment_method: PaymentMethod,
        paid_by: str | None,
        cash_transaction_id: UUID | None = None,
    ) -> bool:
        """Transition pending -> paid. Returns False if the charge was not pending."""
        updated = (
            self.db.query(Charge)
            .filter(Charge.id == charge_id, Charge.state == ChargeState.PENDING.value)
            .update(
                {
                    Charge.state: ChargeState.PAID.value,
                    Charge.paid_at: paid_at,
                    Charge.payment_method: payment_method.value,
                    Charge.paid_by: paid_by,
                    Charge.cash_transaction_id: cash_transaction_id,
                },
                synchronize_session=False,
            )
        )
        return bool(updated == 1)
