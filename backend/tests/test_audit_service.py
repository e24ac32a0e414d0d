"""Tests for AuditLogRepository and AuditService."""

from uuid import uuid4

import pytest

from app.core.database import get_db
from app.repositories.audit_log_repository import AuditLogRepository
from app.schemas.audit_log import AuditLogResponse
from app.services.audit_service import AuditService
from tests.conftest import DEFAULT_GYM_ID


@pytest.fixture
def db_session():
    """Create a database session for direct testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def repo(db_session):
    """Create an AuditLogRepository instance."""
    return AuditLogRepository(db_session)


@pytest.fixture
def service(db_session):
    """Create an AuditService instance."""
    return AuditService(db_session)


class TestAuditLogRepository:
    def test_create(self, repo):
        resource_id = uuid4()
        log = repo.create(
            gym_id=DEFAULT_GYM_ID,
            resource_type="charge",
            resource_id=resource_id,
            action="created",
            changes={"amount": 10000},
            actor_type="system",
        )
        assert log.id is not None
        assert log.gym_id == DEFAULT_GYM_ID
        assert log.resource_id == resource_id
        assert log.actor_id is None

    def test_create_is_not_committed(self, db_session, repo):
        repo.create(
            gym_id=DEFAULT_GYM_ID,
            resource_type="charge",
            resource_id=uuid4(),
            action="created",
            changes={},
            actor_type="system",
        )
        db_session.rollback()
        assert repo.get_all(DEFAULT_GYM_ID) == []

    def test_get_by_resource_is_scoped(self, repo):
        resource_id = uuid4()
        repo.create(
            gym_id=DEFAULT_GYM_ID,
            resource_type="charge",
            resource_id=resource_id,
            action="created",
            changes={},
            actor_type="system",
        )
        repo.create(
            gym_id=DEFAULT_GYM_ID,
            resource_type="charge",
            resource_id=uuid4(),
            action="created",
            changes={},
            actor_type="system",
        )

        logs = repo.get_by_resource(DEFAULT_GYM_ID, "charge", resource_id)
        assert len(logs) == 1
        assert repo.get_by_resource(DEFAULT_GYM_ID, "member", resource_id) == []

    def test_schema_from_model(self, repo):
        log = repo.create(
            gym_id=DEFAULT_GYM_ID,
            resource_type="member",
            resource_id=uuid4(),
            action="updated",
            changes={"total_debt": {"old": 0, "new": 500}},
            actor_type="operator",
            actor_id="desk",
        )
        response = AuditLogResponse.model_validate(log)
        assert response.actor_id == "desk"
        assert response.changes["total_debt"]["new"] == 500


class TestAuditService:
    def test_log_create_system_actor(self, service, repo):
        resource_id = uuid4()
        service.log_create("charge", resource_id, DEFAULT_GYM_ID, data={"amount": 4500})

        [log] = repo.get_by_resource(DEFAULT_GYM_ID, "charge", resource_id)
        assert log.action == "created"
        assert log.actor_type == "system"
        assert log.changes == {"amount": 4500}

    def test_log_create_operator_actor(self, service, repo):
        resource_id = uuid4()
        service.log_create("charge", resource_id, DEFAULT_GYM_ID, actor_id="admin-1")

        [log] = repo.get_by_resource(DEFAULT_GYM_ID, "charge", resource_id)
        assert log.actor_type == "operator"
        assert log.actor_id == "admin-1"
        assert log.changes == {}

    def test_log_status_change_with_extra(self, service, repo):
        resource_id = uuid4()
        service.log_status_change(
            "charge",
            resource_id,
            DEFAULT_GYM_ID,
            old_status="pending",
            new_status="paid",
            extra={"payment_method": "cash"},
        )

        [log] = repo.get_by_resource(DEFAULT_GYM_ID, "charge", resource_id)
        assert log.action == "status_changed"
        assert log.changes == {
            "status": {"old": "pending", "new": "paid"},
            "payment_method": "cash",
        }

    def test_log_update_diffs_fields(self, service, repo):
        resource_id = uuid4()
        service.log_update(
            "member",
            resource_id,
            DEFAULT_GYM_ID,
            old_data={"total_debt": 100, "revision": 3},
            new_data={"total_debt": 0, "revision": 3},
        )

        [log] = repo.get_by_resource(DEFAULT_GYM_ID, "member", resource_id)
        assert log.changes == {"total_debt": {"old": 100, "new": 0}}

    def test_log_update_without_changes_writes_nothing(self, service, repo):
        resource_id = uuid4()
        service.log_update(
            "member",
            resource_id,
            DEFAULT_GYM_ID,
            old_data={"total_debt": 100},
            new_data={"total_debt": 100},
        )

        assert repo.get_by_resource(DEFAULT_GYM_ID, "member", resource_id) == []
