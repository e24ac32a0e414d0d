"""Audit service recording who created and settled charges."""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.repositories.audit_log_repository import AuditLogRepository


def _actor_type(actor_id: str | None) -> str:
    return "operator" if actor_id else "system"


class AuditService:
    """Service for recording audit trail entries.

    Entries are flushed into the caller's transaction, never committed here.
    """

    def __init__(self, db: Session):
        self.repo = AuditLogRepository(db)

    def log_create(
        self,
        resource_type: str,
        resource_id: UUID,
        gym_id: UUID,
        actor_id: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Log a resource creation event."""
        self.repo.create(
            gym_id=gym_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action="created",
            changes=data or {},
            actor_type=_actor_type(actor_id),
            actor_id=actor_id,
        )

    def log_status_change(
        self,
        resource_type: str,
        resource_id: UUID,
        gym_id: UUID,
        old_status: str,
        new_status: str,
        actor_id: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Log a status change event."""
        changes: dict[str, Any] = {"status": {"old": old_status, "new": new_status}}
        if extra:
            changes.update(extra)
        self.repo.create(
            gym_id=gym_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action="status_changed",
            changes=changes,
            actor_type=_actor_type(actor_id),
            actor_id=actor_id,
        )

    def log_update(
        self,
        resource_type: str,
        resource_id: UUID,
        gym_id: UUID,
        actor_id: str | None = None,
        old_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
    ) -> None:
        """Log a resource update event, auto-diffing changed fields."""
        old = old_data or {}
        new = new_data or {}
        changes: dict[str, Any] = {}
        for key in set(old.keys()) | set(new.keys()):
            old_val = old.get(key)
            new_val = new.get(key)
            if old_val != new_val:
                changes[key] = {"old": old_val, "new": new_val}
        if not changes:
            return
        self.repo.create(
            gym_id=gym_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action="updated",
            changes=changes,
            actor_type=_actor_type(actor_id),
            actor_id=actor_id,
        )
