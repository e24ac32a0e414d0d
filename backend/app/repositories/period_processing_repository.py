from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.period_processing_record import PeriodProcessingRecord


class PeriodProcessingRepository:
    """Append-only store of processing records. There is no update or delete."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, gym_id: UUID, year: int, month: int) -> PeriodProcessingRecord | None:
        return (
            self.db.query(PeriodProcessingRecord)
            .filter(
                PeriodProcessingRecord.gym_id == gym_id,
                PeriodProcessingRecord.year == year,
                PeriodProcessingRecord.month == month,
            )
            .first()
        )

    def exists(self, gym_id: UUID, year: int, month: int) -> bool:
        return self.get(gym_id, year, month) is not None

    def create_if_absent(
        self,
        gym_id: UUID,
        year: int,
        month: int,
        member_count: int,
        total_amount: int,
        error_count: int,
        triggered_by: str | None = None,
    ) -> tuple[PeriodProcessingRecord, bool]:
        """Create the record and commit. Returns ``(record, created)``."""
        existing = self.get(gym_id, year, month)
        if existing is not None:
            return existing, False

        record = PeriodProcessingRecord(
            gym_id=gym_id,
            year=year,
            month=month,
            member_count=member_count,
            total_amount=total_amount,
            error_count=error_count,
            triggered_by=triggered_by,
        )
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.get(gym_id, year, month)
            if existing is None:
                raise
            return existing, False
        self.db.refresh(record)
        return record, True
