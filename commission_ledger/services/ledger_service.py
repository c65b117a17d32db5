"""Ledger store operations: registration, listing, status changes and rollups."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from commission_ledger.core.auth import Actor
from commission_ledger.core.config import settings
from commission_ledger.core.exceptions import (
    CommissionLedgerError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from commission_ledger.models.ledger_entry import (
    LedgerEntry,
    LedgerEntryKind,
    LedgerEntryStatus,
    LogisticStatus,
)
from commission_ledger.repositories.ledger_entry_repository import LedgerEntryRepository
from commission_ledger.schemas.ledger_entry import (
    ClosingInfo,
    ClosureStatusResponse,
    LedgerEntryCreate,
    LedgerEntryFilters,
    LedgerEntryResponse,
    LedgerSummary,
    LedgerUniqueValues,
    StatusOption,
    TourOption,
)
from commission_ledger.services.audit_service import AuditService

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "ledger_entry"


def _label(value: str) -> str:
    return value.replace("-", " ").replace("_", " ").title()


class LedgerService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = LedgerEntryRepository(db)
        self.audit = AuditService(db)

    def list(
        self,
        filters: LedgerEntryFilters | None = None,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[LedgerEntry]:
        return self.repo.get_all(filters, skip=skip, limit=limit, order_by=order_by)

    def list_responses(
        self,
        filters: LedgerEntryFilters | None = None,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[LedgerEntryResponse]:
        """List entries with their closing info attached."""
        entries = self.list(filters, skip=skip, limit=limit, order_by=order_by)
        return self.to_responses(entries)

    def to_responses(self, entries: list[LedgerEntry]) -> list[LedgerEntryResponse]:
        infos = self.repo.get_closing_info([entry.id for entry in entries])  # type: ignore[misc]
        return [LedgerEntryResponse.from_entry(entry, infos.get(entry.id)) for entry in entries]  # type: ignore[arg-type]

    def get(self, entry_id: UUID) -> LedgerEntry:
        entry = self.repo.get_by_id(entry_id)
        if entry is None:
            raise NotFoundError(f"Ledger entry {entry_id} not found", item_id=entry_id)
        return entry

    def get_response(self, entry_id: UUID) -> LedgerEntryResponse:
        entry = self.get(entry_id)
        info = self.repo.get_closing_info([entry_id]).get(entry_id)
        return LedgerEntryResponse.from_entry(entry, info)

    def closing_info(self, entry_id: UUID) -> ClosingInfo:
        return self.repo.get_closing_info([entry_id]).get(entry_id, ClosingInfo())

    def register(self, data: LedgerEntryCreate, actor: Actor) -> LedgerEntry:
        """Create an entry handed over by the reservation system."""
        if data.currency not in settings.supported_currencies:
            raise ValidationError(f"Currency {data.currency} is not supported")
        entry = self.repo.create(data)
        self.audit.log_create(
            RESOURCE_TYPE,
            entry.id,  # type: ignore[arg-type]
            actor,
            data={
                "kind": entry.kind,
                "reservation_number": entry.reservation_number,
                "subject_name": entry.subject_name,
                "amount": str(entry.amount),
                "currency": entry.currency,
            },
        )
        self.db.commit()
        logger.info(
            "Registered %s entry %s for reservation %s",
            entry.kind,
            entry.id,
            entry.reservation_number,
        )
        return entry

    def update_status(
        self,
        entry_id: UUID,
        status: LedgerEntryStatus,
        actor: Actor,
        payment_date: date | None = None,
    ) -> LedgerEntry:
        """Change an open entry's status.

        The entry row is locked before the closed check; a closing takes the
        same row lock on every entry it seals.
        """
        try:
            entry = self.repo.lock(entry_id)
            if entry is None:
                raise NotFoundError(f"Ledger entry {entry_id} not found", item_id=entry_id)
            if self.repo.is_closed(entry_id):
                raise ConflictError(
                    f"Entry {entry.reservation_number} is part of an active closing",
                    item_id=entry_id,
                )
            if (
                entry.status == LedgerEntryStatus.CANCELLED.value
                and status != LedgerEntryStatus.CANCELLED
            ):
                raise ValidationError(
                    f"Entry {entry.reservation_number} is cancelled", item_id=entry_id
                )
            old_status = str(entry.status)
            entry = self.repo.update_status(entry, status, payment_date)
            if old_status != status.value:
                self.audit.log_status_change(
                    RESOURCE_TYPE, entry_id, old_status, status.value, actor
                )
            self.db.commit()
        except CommissionLedgerError as exc:
            self.db.rollback()
            logger.warning(
                "Status change of entry %s to %s rejected: %s", entry_id, status.value, exc.message
            )
            raise
        self.db.refresh(entry)
        return entry

    def approve(self, entry_id: UUID, actor: Actor) -> LedgerEntry:
        return self.update_status(entry_id, LedgerEntryStatus.APPROVED, actor)

    def pay(self, entry_id: UUID, actor: Actor, payment_date: date | None = None) -> LedgerEntry:
        return self.update_status(entry_id, LedgerEntryStatus.PAID, actor, payment_date)

    def summarize(self, filters: LedgerEntryFilters | None = None) -> list[LedgerSummary]:
        return self.repo.summarize(filters)

    def unique_values(self, kind: LedgerEntryKind) -> LedgerUniqueValues:
        """Distinct values that feed the list filter dropdowns."""
        subjects = self.repo.distinct_values(LedgerEntry.subject_name, kind)
        tours = [
            TourOption(id=tour_id, name=tour_name)
            for tour_id, tour_name in self.repo.distinct_tours(kind)
        ]
        currencies = self.repo.distinct_values(LedgerEntry.currency, kind)
        statuses = [StatusOption(value=s.value, label=_label(s.value)) for s in LedgerEntryStatus]
        logistic_statuses = []
        if kind == LedgerEntryKind.OPERATOR_PAYMENT:
            logistic_statuses = [
                StatusOption(value=s.value, label=_label(s.value)) for s in LogisticStatus
            ]
        return LedgerUniqueValues(
            subjects=subjects,
            tours=tours,
            currencies=currencies,
            statuses=statuses,
            logistic_statuses=logistic_statuses,
        )

    def closure_status(self, reservation_id: UUID) -> ClosureStatusResponse:
        """Every entry of a booking with its closing info."""
        entries = self.repo.get_all(
            LedgerEntryFilters(reservation_id=reservation_id), limit=1000, order_by="created_at:asc"
        )
        responses = self.to_responses(entries)
        return ClosureStatusResponse(
            reservation_id=reservation_id,
            entries=responses,
            all_closed=bool(responses) and all(r.closing_info.is_closed for r in responses),
        )
