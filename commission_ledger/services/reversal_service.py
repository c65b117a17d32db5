"""Reversal handler: undo a closing and reopen its entries."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from commission_ledger.core.auth import Actor
from commission_ledger.core.exceptions import (
    CommissionLedgerError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from commission_ledger.models.reversal_record import ReversalRecord
from commission_ledger.models.shared import utc_now
from commission_ledger.repositories.closing_repository import ClosingRepository
from commission_ledger.repositories.financial_entry_repository import FinancialEntryRepository
from commission_ledger.repositories.reversal_record_repository import ReversalRecordRepository
from commission_ledger.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class ReversalService:
    def __init__(self, db: Session):
        self.db = db
        self.closings = ClosingRepository(db)
        self.financial_entries = FinancialEntryRepository(db)
        self.records = ReversalRecordRepository(db)
        self.audit = AuditService(db)

    def undo(self, closing_id: UUID, reason: str, actor: Actor) -> ReversalRecord:
        """Deactivate a closing and release its entries back to open.

        The closing row and its line items stay for the record. Live entry
        amounts are untouched, so closing-time overrides do not carry back.
        """
        try:
            if not actor.is_admin:
                raise PermissionDeniedError("Only admins can undo a closing")
            closing = self.closings.lock(closing_id)
            if closing is None:
                raise NotFoundError(f"Closing {closing_id} not found", item_id=closing_id)
            if not reason or not reason.strip():
                raise ValidationError("A reason is required to undo a closing", item_id=closing_id)
            if not closing.is_active:
                raise ValidationError(
                    f"Closing {closing.invoice_number} has already been undone", item_id=closing_id
                )

            now = utc_now()
            reopened = self.closings.delete_memberships(closing_id)
            self.financial_entries.delete_by_closing(closing_id)
            self.closings.mark_undone(
                closing,
                undone_by=actor.id,
                undone_by_name=actor.name,
                undone_at=now,
                reason=reason.strip(),
            )
            record = self.records.create(
                closing_id=closing_id,
                reason=reason.strip(),
                undone_by=actor.id,
                undone_at=now,
                items_reopened=reopened,
            )
            self.audit.log_action(
                "closing",
                closing_id,
                "undone",
                actor,
                changes={"is_active": {"old": True, "new": False}},
                metadata={
                    "invoice_number": closing.invoice_number,
                    "reason": reason.strip(),
                    "items_reopened": reopened,
                },
            )
            self.db.commit()
        except CommissionLedgerError as exc:
            self.db.rollback()
            logger.warning("Undo of closing %s rejected: %s", closing_id, exc.message)
            raise

        self.db.refresh(record)
        logger.info(
            "Closing %s undone by %s, %d entries reopened",
            closing.invoice_number,
            actor.id,
            reopened,
        )
        return record
