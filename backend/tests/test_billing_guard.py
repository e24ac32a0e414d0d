"""Tests for the automatic generation guard."""

from datetime import date
from uuid import uuid4

import pytest

from app.core.database import get_db
from app.core.exceptions import AlreadyProcessed, NotFoundError
from app.repositories.gym_repository import GymRepository
from app.repositories.period_processing_repository import PeriodProcessingRepository
from app.schemas.gym import GymCreate
from app.services.billing_guard import BillingGuard
from app.services.billing_periods import BillingPeriod
from tests.conftest import DEFAULT_GYM_ID


@pytest.fixture
def db_session():
    """Create a database session for testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def guard(db_session):
    return BillingGuard(db_session)


def _process(db_session, gym_id, year, month):
    PeriodProcessingRepository(db_session).create_if_absent(
        gym_id, year, month, member_count=0, total_amount=0, error_count=0
    )


class TestShouldRun:
    def test_first_day_without_record(self, guard):
        assert guard.should_run(DEFAULT_GYM_ID, date(2025, 3, 1)) is True

    def test_other_day(self, guard):
        assert guard.should_run(DEFAULT_GYM_ID, date(2025, 3, 2)) is False

    def test_processed_period(self, db_session, guard):
        _process(db_session, DEFAULT_GYM_ID, 2025, 3)
        assert guard.should_run(DEFAULT_GYM_ID, date(2025, 3, 1)) is False

    def test_previous_period_record_does_not_block(self, db_session, guard):
        _process(db_session, DEFAULT_GYM_ID, 2025, 2)
        assert guard.should_run(DEFAULT_GYM_ID, date(2025, 3, 1)) is True

    def test_records_are_per_gym(self, db_session, guard):
        other = GymRepository(db_session).create(GymCreate(name="Other"))
        _process(db_session, other.id, 2025, 3)
        assert guard.should_run(DEFAULT_GYM_ID, date(2025, 3, 1)) is True
        assert guard.should_run(other.id, date(2025, 3, 1)) is False

    def test_unknown_gym(self, guard):
        with pytest.raises(NotFoundError):
            guard.should_run(uuid4(), date(2025, 3, 1))


class TestEnsureCanRun:
    def test_returns_period(self, guard):
        assert guard.ensure_can_run(DEFAULT_GYM_ID, date(2025, 3, 12)) == BillingPeriod(2025, 3)

    def test_raises_when_processed(self, db_session, guard):
        _process(db_session, DEFAULT_GYM_ID, 2025, 3)
        with pytest.raises(AlreadyProcessed, match="2025-03"):
            guard.ensure_can_run(DEFAULT_GYM_ID, date(2025, 3, 12))

    def test_current_period_uses_gym_timezone(self, db_session, guard):
        gym = GymRepository(db_session).create(GymCreate(name="Tokyo", timezone="Asia/Tokyo"))
        period = guard.current_period(gym.id)
        assert isinstance(period, BillingPeriod)
