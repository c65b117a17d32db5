"""Adjustment workflow: staff propose amount changes, admins review them."""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from commission_ledger.core.auth import Actor
from commission_ledger.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from commission_ledger.models.adjustment_request import (
    AdjustmentRequest,
    AdjustmentStatus,
    AdjustmentType,
)
from commission_ledger.models.currency import quantize_amount
from commission_ledger.models.shared import utc_now
from commission_ledger.repositories.adjustment_request_repository import (
    AdjustmentRequestRepository,
)
from commission_ledger.repositories.ledger_entry_repository import LedgerEntryRepository
from commission_ledger.services.audit_service import AuditService

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "adjustment_request"


def classify_adjustment(original: Decimal, new: Decimal) -> AdjustmentType:
    if new == 0:
        return AdjustmentType.REMOVAL
    if new > original:
        return AdjustmentType.INCREASE
    return AdjustmentType.REDUCTION


class AdjustmentService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AdjustmentRequestRepository(db)
        self.entries = LedgerEntryRepository(db)
        self.audit = AuditService(db)

    def propose(
        self, item_id: UUID, new_amount: Decimal, reason: str, actor: Actor
    ) -> AdjustmentRequest:
        """Queue a change of an entry's live amount for admin review."""
        if not reason or not reason.strip():
            raise ValidationError("A reason is required for an adjustment request", item_id=item_id)
        if new_amount < 0:
            raise ValidationError("The new amount cannot be negative", item_id=item_id)

        entry = self.entries.get_by_id(item_id)
        if entry is None:
            raise NotFoundError(f"Ledger entry {item_id} not found", item_id=item_id)

        original = entry.amount
        new_amount = quantize_amount(new_amount, str(entry.currency))
        if new_amount == original:
            raise ValidationError(
                "The new amount must differ from the current amount", item_id=item_id
            )

        request = self.repo.create(
            item_id=item_id,
            item_type=str(entry.kind),
            original_amount=original,
            new_amount=new_amount,
            adjustment_type=classify_adjustment(original, new_amount),
            reason=reason.strip(),
            requested_by=actor.id,
            requested_by_name=actor.name,
        )
        self.audit.log_create(
            RESOURCE_TYPE,
            request.id,  # type: ignore[arg-type]
            actor,
            data={
                "item_id": str(item_id),
                "original_amount": str(original),
                "new_amount": str(new_amount),
                "reason": request.reason,
            },
        )
        self.db.commit()
        self.db.refresh(request)
        logger.info(
            "Adjustment %s proposed for entry %s: %s -> %s",
            request.id,
            item_id,
            original,
            new_amount,
        )
        return request

    def _get_pending_for_review(self, request_id: UUID, actor: Actor) -> AdjustmentRequest:
        if not actor.is_admin:
            raise PermissionDeniedError("Only admins can review adjustment requests")
        request = self.repo.lock(request_id)
        if request is None:
            raise NotFoundError(f"Adjustment request {request_id} not found", item_id=request_id)
        if request.status != AdjustmentStatus.PENDING.value:
            raise ConflictError(
                f"Adjustment request is already {request.status}", item_id=request_id
            )
        return request

    def approve(self, request_id: UUID, actor: Actor) -> AdjustmentRequest:
        """Apply a pending request to the live entry."""
        try:
            request = self._get_pending_for_review(request_id, actor)
            entry = self.entries.lock(request.item_id)  # type: ignore[arg-type]
            if entry is None:
                raise NotFoundError(
                    f"Ledger entry {request.item_id} not found", item_id=request.item_id
                )
            if self.entries.is_closed(entry.id):  # type: ignore[arg-type]
                raise ConflictError(
                    f"Entry {entry.reservation_number} is part of an active closing",
                    item_id=entry.id,
                )

            old_amount = entry.amount
            new_amount = Decimal(str(request.new_amount))
            self.entries.set_amount(entry, new_amount)
            self.repo.mark_reviewed(
                request, AdjustmentStatus.APPROVED, reviewed_by=actor.id, reviewed_at=utc_now()
            )
            self.audit.log_update(
                "ledger_entry",
                entry.id,  # type: ignore[arg-type]
                actor,
                old_data={"amount": str(old_amount)},
                new_data={"amount": str(new_amount)},
                metadata={"adjustment_request_id": str(request.id)},
            )
            self.audit.log_status_change(
                RESOURCE_TYPE,
                request.id,  # type: ignore[arg-type]
                AdjustmentStatus.PENDING.value,
                AdjustmentStatus.APPROVED.value,
                actor,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.warning("Approving adjustment request %s failed", request_id)
            raise
        self.db.refresh(request)
        logger.info("Adjustment %s approved by %s", request_id, actor.id)
        return request

    def reject(self, request_id: UUID, reason: str, actor: Actor) -> AdjustmentRequest:
        """Close a pending request without touching the entry."""
        try:
            request = self._get_pending_for_review(request_id, actor)
            if not reason or not reason.strip():
                raise ValidationError("A reason is required to reject", item_id=request_id)
            self.repo.mark_reviewed(
                request,
                AdjustmentStatus.REJECTED,
                reviewed_by=actor.id,
                reviewed_at=utc_now(),
                review_reason=reason.strip(),
            )
            self.audit.log_action(
                RESOURCE_TYPE,
                request.id,  # type: ignore[arg-type]
                "rejected",
                actor,
                changes={
                    "status": {
                        "old": AdjustmentStatus.PENDING.value,
                        "new": AdjustmentStatus.REJECTED.value,
                    }
                },
                metadata={"reason": reason.strip()},
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.warning("Rejecting adjustment request %s failed", request_id)
            raise
        self.db.refresh(request)
        logger.info("Adjustment %s rejected by %s", request_id, actor.id)
        return request

    def get(self, request_id: UUID) -> AdjustmentRequest:
        request = self.repo.get_by_id(request_id)
        if request is None:
            raise NotFoundError(f"Adjustment request {request_id} not found", item_id=request_id)
        return request

    def list_pending(self, skip: int = 0, limit: int = 100) -> list[AdjustmentRequest]:
        return self.repo.get_pending(skip=skip, limit=limit)

    def list_for_item(self, item_id: UUID) -> list[AdjustmentRequest]:
        return self.repo.get_by_item(item_id)

    def list(
        self,
        status: AdjustmentStatus | None = None,
        item_id: UUID | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AdjustmentRequest]:
        return self.repo.get_all(skip=skip, limit=limit, status=status, item_id=item_id)
