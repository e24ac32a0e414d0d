"""Tests for recomputing member debt from pending charges."""

from datetime import date
from unittest.mock import patch
from uuid import uuid4

import pytest

from app.core.database import get_db
from app.core.exceptions import ConcurrencyConflict, NotFoundError
from app.models.audit_log import AuditLog
from app.models.member import Member
from app.repositories.member_repository import MemberRepository
from app.repositories.membership_repository import MembershipRepository
from app.schemas.member import MemberCreate
from app.schemas.membership import MembershipCreate
from app.services.charge_generation import ChargeGenerationService
from app.services.debt_reconciliation import DebtReconciliationService
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
def service(db_session):
    return DebtReconciliationService(db_session)


@pytest.fixture
def member_id(db_session):
    """A member owing 12000 in pending charges."""
    member = MemberRepository(db_session).create(
        MemberCreate(first_name="Rita", last_name="Mora"), DEFAULT_GYM_ID
    )
    MembershipRepository(db_session).create(
        MembershipCreate(
            member_id=member.id,
            activity_name="Swimming",
            price_snapshot=12000,
            auto_renewal=True,
            start_date=date(2025, 1, 1),
        ),
        DEFAULT_GYM_ID,
    )
    ChargeGenerationService(db_session).generate(DEFAULT_GYM_ID, today=date(2025, 3, 1))
    return member.id


def _member(db_session, member_id):
    db_session.expire_all()
    return db_session.query(Member).filter(Member.id == member_id).one()


def _drift(db_session, member_id, total_debt):
    member = _member(db_session, member_id)
    member.total_debt = total_debt
    db_session.commit()


class TestReconcileMember:
    def test_consistent_debt_is_left_alone(self, db_session, service, member_id):
        revision = _member(db_session, member_id).revision

        result = service.reconcile_member_debt(DEFAULT_GYM_ID, member_id)

        assert result.expected == 12000
        assert result.recorded == 12000
        assert result.drift == 0
        assert result.corrected is False
        assert _member(db_session, member_id).revision == revision

    def test_repairs_drifted_debt(self, db_session, service, member_id):
        _drift(db_session, member_id, 500)

        result = service.reconcile_member_debt(DEFAULT_GYM_ID, member_id, operator_id="admin")

        assert result.drift == 500 - 12000
        assert result.corrected is True
        assert _member(db_session, member_id).total_debt == 12000
        log = db_session.query(AuditLog).filter(AuditLog.resource_type == "member").one()
        assert log.action == "updated"
        assert log.changes == {"total_debt": {"old": 500, "new": 12000}}

    def test_dry_run_does_not_write(self, db_session, service, member_id):
        _drift(db_session, member_id, 0)

        result = service.reconcile_member_debt(DEFAULT_GYM_ID, member_id, apply=False)

        assert result.corrected is False
        assert result.expected == 12000
        assert _member(db_session, member_id).total_debt == 0

    def test_lost_race_raises_conflict(self, db_session, service, member_id):
        _drift(db_session, member_id, 0)

        with patch.object(MemberRepository, "set_debt_if_revision", return_value=False):
            with pytest.raises(ConcurrencyConflict):
                service.reconcile_member_debt(DEFAULT_GYM_ID, member_id)
        assert _member(db_session, member_id).total_debt == 0

    def test_unknown_member(self, service):
        with pytest.raises(NotFoundError):
            service.reconcile_member_debt(DEFAULT_GYM_ID, uuid4())


class TestReconcileGym:
    def test_returns_only_drifted_members(self, db_session, service, member_id):
        clean = MemberRepository(db_session).create(MemberCreate(first_name="Clean"), DEFAULT_GYM_ID)
        _drift(db_session, member_id, 99)

        drifted = service.reconcile_gym(DEFAULT_GYM_ID)

        assert [r.member_id for r in drifted] == [member_id]
        assert drifted[0].corrected is True
        assert _member(db_session, clean.id).total_debt == 0

    def test_skips_conflicting_members(self, db_session, service, member_id):
        _drift(db_session, member_id, 99)

        with patch.object(MemberRepository, "set_debt_if_revision", return_value=False):
            drifted = service.reconcile_gym(DEFAULT_GYM_ID)

        assert drifted == []
        assert _member(db_session, member_id).total_debt == 99

    def test_reports_drift_written_after_members_were_loaded(self, db_session, service, member_id):
        repo = MemberRepository(db_session)
        repo.get_all(DEFAULT_GYM_ID)
        # Another writer bumps the counter after the member is already in the session.
        repo.adjust_debt(member_id, DEFAULT_GYM_ID, 500)

        drifted = service.reconcile_gym(DEFAULT_GYM_ID)

        assert [r.member_id for r in drifted] == [member_id]
        assert drifted[0].recorded == 12500
        assert drifted[0].expected == 12000
        assert drifted[0].corrected is True
        assert _member(db_session, member_id).total_debt == 12000
