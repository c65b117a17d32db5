"""Audit service for recording ledger, closing and adjustment state changes."""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from commission_ledger.core.auth import Actor
from commission_ledger.repositories.audit_log_repository import AuditLogRepository


def _actor_type(actor: Actor) -> str:
    return actor.role.value


class AuditService:
    """Service for recording audit trail entries.

    Entries are staged in the caller's session and committed with the change
    they describe.
    """

    def __init__(self, db: Session):
        self.repo = AuditLogRepository(db)

    def log_create(
        self,
        resource_type: str,
        resource_id: UUID,
        actor: Actor,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Log a resource creation event."""
        self.repo.create(
            resource_type=resource_type,
            resource_id=resource_id,
            action="created",
            changes=data or {},
            actor_type=_actor_type(actor),
            actor_id=actor.id,
            metadata={"actor_name": actor.name},
        )

    def log_update(
        self,
        resource_type: str,
        resource_id: UUID,
        actor: Actor,
        old_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
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
            resource_type=resource_type,
            resource_id=resource_id,
            action="updated",
            changes=changes,
            actor_type=_actor_type(actor),
            actor_id=actor.id,
            metadata={"actor_name": actor.name, **(metadata or {})},
        )

    def log_status_change(
        self,
        resource_type: str,
        resource_id: UUID,
        old_status: str,
        new_status: str,
        actor: Actor,
    ) -> None:
        """Log a status change event."""
        self.repo.create(
            resource_type=resource_type,
            resource_id=resource_id,
            action="status_changed",
            changes={"status": {"old": old_status, "new": new_status}},
            actor_type=_actor_type(actor),
            actor_id=actor.id,
            metadata={"actor_name": actor.name},
        )

    def log_action(
        self,
        resource_type: str,
        resource_id: UUID,
        action: str,
        actor: Actor,
        changes: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Log a named domain action such as ``closed`` or ``undone``."""
        self.repo.create(
            resource_type=resource_type,
            resource_id=resource_id,
            action=action,
            changes=changes or {},
            actor_type=_actor_type(actor),
            actor_id=actor.id,
            metadata={"actor_name": actor.name, **(metadata or {})},
        )
