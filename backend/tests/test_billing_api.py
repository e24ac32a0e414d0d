"""Tests for the billing HTTP endpoints."""

from datetime import date
from unittest.mock import patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.core.database import get_db
from app.main import app
from app.models.charge import Charge
from app.models.gym import Gym
from app.models.member import Member
from app.repositories.gym_repository import GymRepository
from app.repositories.member_repository import MemberRepository
from app.repositories.membership_repository import MembershipRepository
from app.schemas.gym import GymCreate
from app.schemas.member import MemberCreate
from app.schemas.membership import MembershipCreate
from app.services.billing_periods import BillingPeriod
from app.services.cash_register_service import CashRegisterService
from tests.conftest import DEFAULT_GYM_ID

ADMIN_HEADERS = {"X-Operator-Id": "admin-1", "X-Operator-Role": "admin"}


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


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
def period():
    return BillingPeriod.current("UTC")


def _member(db_session, first_name="Ana", last_name="Lopez", price=10000, gym_id=DEFAULT_GYM_ID):
    member = MemberRepository(db_session).create(
        MemberCreate(first_name=first_name, last_name=last_name), gym_id
    )
    MembershipRepository(db_session).create(
        MembershipCreate(
            member_id=member.id,
            activity_name="Crossfit",
            price_snapshot=price,
            auto_renewal=True,
            start_date=date(2024, 1, 1),
        ),
        gym_id,
    )
    return member.id


class TestGenerateEndpoint:
    def test_generate(self, client, db_session, period):
        _member(db_session)

        response = client.post("/v1/billing/generate", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["period"]["key"] == period.key
        assert data["created_count"] == 1
        assert data["member_count"] == 1
        assert data["total_amount"] == 10000
        assert data["errors"] == []
        assert data["record_created"] is True

    def test_generate_twice(self, client, db_session):
        _member(db_session)
        client.post("/v1/billing/generate")

        response = client.post("/v1/billing/generate")

        assert response.status_code == 200
        assert response.json()["created_count"] == 0
        assert response.json()["skipped_count"] == 1

    def test_partial_failure_returns_207(self, client, db_session):
        _member(db_session, "Good", "Member")
        broken = MemberRepository(db_session).create(
            MemberCreate(first_name="No", last_name="Price"), DEFAULT_GYM_ID
        )
        MembershipRepository(db_session).create(
            MembershipCreate(
                member_id=broken.id,
                activity_name="Mystery",
                auto_renewal=True,
                start_date=date(2024, 1, 1),
            ),
            DEFAULT_GYM_ID,
        )

        response = client.post("/v1/billing/generate")

        assert response.status_code == 207
        data = response.json()
        assert data["created_count"] == 1
        assert len(data["errors"]) == 1
        assert data["errors"][0]["member_name"] == "No Price"
        assert data["errors"][0]["reason"] == "validation-error"

    def test_unknown_gym(self, client):
        response = client.post("/v1/billing/generate", headers={"X-Gym-Id": str(uuid4())})
        assert response.status_code == 404
        assert response.json()["detail"]["reason"] == "not-found"

    def test_invalid_gym_header(self, client):
        response = client.post("/v1/billing/generate", headers={"X-Gym-Id": "not-a-uuid"})
        assert response.status_code == 400

    def test_gym_with_unknown_timezone(self, client, db_session):
        gym = Gym(name="Broken", timezone="Mars/Olympus")
        db_session.add(gym)
        db_session.commit()

        response = client.get("/v1/billing/pending", headers={"X-Gym-Id": str(gym.id)})

        assert response.status_code == 422
        assert response.json()["detail"]["reason"] == "validation-error"


class TestShouldRunEndpoint:
    def test_due_on_cycle_day(self, client, period):
        with patch("app.services.billing_guard.is_cycle_start", return_value=True):
            response = client.get("/v1/billing/should_run")

        assert response.status_code == 200
        assert response.json() == {
            "period": {"year": period.year, "month": period.month, "key": period.key, "label": period.label},
            "should_run": True,
            "processed": False,
        }

    def test_not_due_after_processing(self, client):
        client.post("/v1/billing/generate")

        with patch("app.services.billing_guard.is_cycle_start", return_value=True):
            response = client.get("/v1/billing/should_run")

        assert response.json()["should_run"] is False
        assert response.json()["processed"] is True


class TestManualGenerateEndpoint:
    def test_generate_for_member(self, client, db_session):
        member_id = _member(db_session)

        response = client.post(f"/v1/billing/members/{member_id}/generate", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["created"] is True
        assert data["charges"][0]["created_by"] == "admin-1"
        assert data["charges"][0]["auto_generated"] is False

    def test_already_exists(self, client, db_session):
        member_id = _member(db_session)
        client.post(f"/v1/billing/members/{member_id}/generate")

        response = client.post(f"/v1/billing/members/{member_id}/generate")

        assert response.status_code == 200
        assert response.json()["created"] is False
        assert response.json()["reason"] == "already-exists"

    def test_unknown_member(self, client):
        response = client.post(f"/v1/billing/members/{uuid4()}/generate")
        assert response.status_code == 404

    def test_idempotency_key_replays_response(self, client, db_session):
        member_id = _member(db_session)
        headers = {"Idempotency-Key": "gen-1"}

        first = client.post(f"/v1/billing/members/{member_id}/generate", headers=headers)
        second = client.post(f"/v1/billing/members/{member_id}/generate", headers=headers)

        assert first.json()["created"] is True
        assert second.json() == first.json()
        assert second.headers["Idempotency-Replayed"] == "true"


class TestSettleEndpoint:
    def test_settle_all(self, client, db_session, period):
        member_id = _member(db_session)
        client.post("/v1/billing/generate")

        response = client.post(
            "/v1/billing/settle",
            json={
                "year": period.year,
                "month": period.month,
                "member_id": str(member_id),
                "method": "cash",
            },
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amount"] == 10000
        assert data["ledger"]["total_outstanding"] == 0
        assert data["charges"][0]["state"] == "paid"
        assert data["charges"][0]["paid_by"] == "admin-1"
        db_session.expire_all()
        assert db_session.query(Member).filter(Member.id == member_id).one().total_debt == 0

    def test_settle_twice_conflicts(self, client, db_session, period):
        member_id = _member(db_session)
        client.post("/v1/billing/generate")
        body = {
            "year": period.year,
            "month": period.month,
            "member_id": str(member_id),
            "method": "transfer",
        }
        client.post("/v1/billing/settle", json=body)

        response = client.post("/v1/billing/settle", json=body)

        assert response.status_code == 409
        assert response.json()["detail"]["reason"] == "already-paid"

    def test_amount_mismatch(self, client, db_session, period):
        member_id = _member(db_session)
        client.post("/v1/billing/generate")
        charge_id = db_session.query(Charge).one().id

        response = client.post(
            "/v1/billing/settle",
            json={
                "year": period.year,
                "month": period.month,
                "member_id": str(member_id),
                "charge_id": str(charge_id),
                "method": "cash",
                "amount": 1,
            },
        )

        assert response.status_code == 422
        assert response.json()["detail"]["reason"] == "validation-error"

    def test_closed_register(self, client, db_session, period):
        member_id = _member(db_session)
        client.post("/v1/billing/generate")
        cash = CashRegisterService(db_session)
        today = date.today()
        cash.record_income(
            gym_id=DEFAULT_GYM_ID, day=today, amount=1, description="Towel", payment_method="cash"
        )
        db_session.commit()
        cash.close_register(DEFAULT_GYM_ID, today)

        with patch("app.services.gym_context.local_today", return_value=today):
            response = client.post(
                "/v1/billing/settle",
                json={
                    "year": period.year,
                    "month": period.month,
                    "member_id": str(member_id),
                    "method": "cash",
                },
            )

        assert response.status_code == 422
        assert response.json()["detail"]["reason"] == "cash-register-closed"

    def test_invalid_method(self, client, db_session, period):
        member_id = _member(db_session)
        response = client.post(
            "/v1/billing/settle",
            json={
                "year": period.year,
                "month": period.month,
                "member_id": str(member_id),
                "method": "bitcoin",
            },
        )
        assert response.status_code == 422

    def test_idempotency_key_prevents_double_settlement(self, client, db_session, period):
        member_id = _member(db_session)
        client.post("/v1/billing/generate")
        body = {
            "year": period.year,
            "month": period.month,
            "member_id": str(member_id),
            "method": "cash",
        }
        headers = {"Idempotency-Key": "settle-1"}

        first = client.post("/v1/billing/settle", json=body, headers=headers)
        second = client.post("/v1/billing/settle", json=body, headers=headers)

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json() == first.json()
        assert second.headers["Idempotency-Replayed"] == "true"


class TestQueryEndpoints:
    def test_pending_defaults_to_current_period(self, client, db_session):
        _member(db_session, "Zoe", "Zapata")
        _member(db_session, "Ana", "Alvarez")
        client.post("/v1/billing/generate")

        response = client.get("/v1/billing/pending")

        assert response.status_code == 200
        names = [item["member_name"] for item in response.json()]
        assert names == ["Ana Alvarez", "Zoe Zapata"]
        assert response.json()[0]["pending_charges"][0]["amount"] == 10000

    def test_pending_for_explicit_period(self, client):
        response = client.get("/v1/billing/pending", params={"year": 2020, "month": 1})
        assert response.status_code == 200
        assert response.json() == []

    def test_year_without_month(self, client):
        response = client.get("/v1/billing/pending", params={"year": 2020})
        assert response.status_code == 422

    def test_summary(self, client, db_session, period):
        _member(db_session)
        client.post("/v1/billing/generate")

        response = client.get(
            "/v1/billing/summary", params={"year": period.year, "month": period.month}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_to_collect"] == 10000
        assert data["total_pending"] == 10000
        assert data["members_with_debt"] == 1
        assert data["activities_breakdown"]["Crossfit"]["pending"] == 10000
        assert data["processing_record"]["member_count"] == 1

    def test_member_ledger(self, client, db_session):
        member_id = _member(db_session)
        client.post("/v1/billing/generate")

        response = client.get(f"/v1/billing/members/{member_id}/ledger")

        assert response.status_code == 200
        assert response.json()["total_due"] == 10000
        assert response.json()["total_outstanding"] == 10000


class TestReconcileEndpoint:
    def test_reconcile(self, client, db_session):
        member_id = _member(db_session)
        client.post("/v1/billing/generate")
        db_session.expire_all()
        member = db_session.query(Member).filter(Member.id == member_id).one()
        member.total_debt = 0
        db_session.commit()

        response = client.post(f"/v1/billing/members/{member_id}/reconcile")

        assert response.status_code == 200
        assert response.json() == {
            "member_id": str(member_id),
            "expected": 10000,
            "recorded": 0,
            "drift": -10000,
            "corrected": True,
        }

    def test_dry_run(self, client, db_session):
        member_id = _member(db_session)

        response = client.post(
            f"/v1/billing/members/{member_id}/reconcile", params={"apply": False}
        )

        assert response.status_code == 200
        assert response.json()["corrected"] is False

    def test_unknown_member(self, client):
        response = client.post(f"/v1/billing/members/{uuid4()}/reconcile")
        assert response.status_code == 404


class TestTriggerEndpoint:
    def test_staff(self, client):
        response = client.post(
            "/v1/billing/trigger",
            json={},
            headers={"X-Operator-Id": "s", "X-Operator-Role": "staff"},
        )
        assert response.status_code == 200
        assert response.json()["outcome"] == "not_privileged"

    def test_awaiting_then_confirmed(self, client, db_session):
        _member(db_session)

        with patch("app.services.billing_guard.is_cycle_start", return_value=True):
            offered = client.post("/v1/billing/trigger", json={}, headers=ADMIN_HEADERS)
            confirmed = client.post(
                "/v1/billing/trigger", json={"confirmed": True}, headers=ADMIN_HEADERS
            )

        assert offered.json()["outcome"] == "awaiting_confirmation"
        assert offered.json()["last_offered_on"] is None
        data = confirmed.json()
        assert data["outcome"] == "generated"
        assert data["result"]["created_count"] == 1
        assert data["last_offered_on"] is not None

    def test_declined_then_already_offered(self, client):
        with patch("app.services.billing_guard.is_cycle_start", return_value=True):
            declined = client.post(
                "/v1/billing/trigger", json={"confirmed": False}, headers=ADMIN_HEADERS
            )
            again = client.post(
                "/v1/billing/trigger",
                json={"last_offered_on": declined.json()["last_offered_on"], "confirmed": True},
                headers=ADMIN_HEADERS,
            )

        assert declined.json()["outcome"] == "declined"
        assert again.json()["outcome"] == "already_offered"

    def test_trigger_for_other_gym(self, client, db_session):
        other = GymRepository(db_session).create(GymCreate(name="Other"))
        with patch("app.services.billing_guard.is_cycle_start", return_value=False):
            response = client.post(
                "/v1/billing/trigger",
                json={},
                headers={**ADMIN_HEADERS, "X-Gym-Id": str(other.id)},
            )
        assert response.json()["outcome"] == "not_due"
