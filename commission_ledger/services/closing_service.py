"""Closing engine: seal open ledger entries into a numbered invoice batch."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from commission_ledger.core.auth import Actor
from commission_ledger.core.config import settings
from commission_ledger.core.exceptions import (
    CommissionLedgerError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from commission_ledger.models.closing import (
    CLOSING_TYPE_KINDS,
    Closing,
    ClosingLineItem,
    ClosingType,
)
from commission_ledger.models.currency import quantize_amount
from commission_ledger.models.financial_entry import FinancialEntry, FinancialEntryDirection
from commission_ledger.models.ledger_entry import LedgerEntry, LedgerEntryKind
from commission_ledger.repositories.closing_repository import ClosingRepository
from commission_ledger.repositories.financial_entry_repository import FinancialEntryRepository
from commission_ledger.repositories.invoice_sequence_repository import (
    InvoiceSequenceRepository,
    format_invoice_number,
)
from commission_ledger.repositories.ledger_entry_repository import LedgerEntryRepository
from commission_ledger.schemas.closing import ClosingOverride, ClosingResponse
from commission_ledger.services.audit_service import AuditService

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "closing"


@dataclass
class LineSnapshot:
    """Amount an entry enters the closing with, after any admin override."""

    entry: LedgerEntry
    original_amount: Decimal
    amount: Decimal
    rate: Decimal | None
    is_overridden: bool
    override_notes: str | None

    def as_line_item(self) -> dict[str, Any]:
        entry = self.entry
        return {
            "ledger_entry_id": entry.id,
            "reservation_number": entry.reservation_number,
            "tour_name": entry.tour_name,
            "client_name": entry.client_name,
            "subject_name": entry.subject_name,
            "pax": entry.pax,
            "sale_date": entry.sale_date,
            "operation_date": entry.operation_date,
            "gross_amount": entry.gross_amount,
            "rate": self.rate,
            "original_amount": self.original_amount,
            "amount": self.amount,
            "is_overridden": self.is_overridden,
            "override_notes": self.override_notes,
            "status": entry.status,
            "logistic_status": entry.logistic_status,
        }


def snapshot_amount(
    entry: LedgerEntry, currency: str, override: ClosingOverride | None
) -> LineSnapshot:
    """Work out the amount an entry is closed at.

    An explicit override amount wins over a percentage; a percentage is
    applied to the gross amount and only exists for commissions.
    """
    original = quantize_amount(entry.amount, currency)
    rate = Decimal(str(entry.rate)) if entry.rate is not None else None
    if override is None or (override.amount is None and override.percentage is None):
        return LineSnapshot(entry, original, original, rate, False, None)

    if (
        override.percentage is not None
        and entry.kind == LedgerEntryKind.OPERATOR_PAYMENT.value
    ):
        raise ValidationError(
            f"Operator payment {entry.reservation_number} takes an amount override, "
            "not a percentage",
            item_id=entry.id,
        )

    if override.amount is not None:
        if override.amount < 0:
            raise ValidationError(
                f"Override for {entry.reservation_number} cannot be negative", item_id=entry.id
            )
        amount = quantize_amount(override.amount, currency)
    else:
        percentage = override.percentage
        assert percentage is not None
        if percentage < 0 or percentage > 100:
            raise ValidationError(
                f"Override percentage for {entry.reservation_number} must be between 0 and 100",
                item_id=entry.id,
            )
        gross = Decimal(str(entry.gross_amount))
        amount = quantize_amount(gross * percentage / Decimal("100"), currency)
        rate = percentage
    return LineSnapshot(entry, original, amount, rate, True, override.notes)


class ClosingService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ClosingRepository(db)
        self.entries = LedgerEntryRepository(db)
        self.sequences = InvoiceSequenceRepository(db)
        self.financial_entries = FinancialEntryRepository(db)
        self.audit = AuditService(db)

    def close(
        self,
        entry_ids: list[UUID],
        closing_type: ClosingType,
        recipient_name: str,
        period_start: date,
        period_end: date,
        currency: str,
        overrides: dict[UUID, ClosingOverride] | None,
        actor: Actor,
        recipient_id: str | None = None,
    ) -> Closing:
        """Seal the given open entries into a new closing.

        Validation, locking, numbering and every insert run in one
        transaction; any failure rolls the whole batch back.
        """
        overrides = overrides or {}
        currency = (currency or "").upper()
        try:
            self._validate_request(entry_ids, recipient_name, period_start, period_end, currency)
            entries = self._load_entries(entry_ids, closing_type)
            self._check_currency(entries, currency)
            self._check_overrides(overrides, entry_ids, actor)
            self._check_not_closed(entries)

            snapshots = [
                snapshot_amount(entry, currency, overrides.get(entry.id))  # type: ignore[call-overload]
                for entry in entries
            ]
            total = quantize_amount(sum((s.amount for s in snapshots), Decimal("0")), currency)

            sequence = self.sequences.next_value(closing_type)
            invoice_number = format_invoice_number(closing_type, sequence)
            closing = self.repo.create(
                invoice_number=invoice_number,
                sequence_number=sequence,
                closing_type=closing_type,
                recipient_name=recipient_name.strip(),
                recipient_id=recipient_id,
                period_start=period_start,
                period_end=period_end,
                currency=currency,
                item_count=len(snapshots),
                total_amount=total,
                created_by=actor.id,
                created_by_name=actor.name,
            )
            self.repo.add_line_items(closing.id, [s.as_line_item() for s in snapshots])  # type: ignore[arg-type]
            self.repo.add_memberships(closing.id, [e.id for e in entries])  # type: ignore[arg-type, misc]
            direction = (
                FinancialEntryDirection.PAYABLE
                if closing_type == ClosingType.OPERATOR
                else FinancialEntryDirection.RECEIVABLE
            )
            self.financial_entries.create(
                direction=direction,
                closing_id=closing.id,  # type: ignore[arg-type]
                counterparty=closing.recipient_name,  # type: ignore[arg-type]
                amount=total,
                currency=currency,
                description=(
                    f"{invoice_number} {closing_type.value} closing "
                    f"{period_start.isoformat()} to {period_end.isoformat()}"
                ),
            )
            self.audit.log_action(
                RESOURCE_TYPE,
                closing.id,  # type: ignore[arg-type]
                "closed",
                actor,
                changes={
                    "invoice_number": invoice_number,
                    "total_amount": str(total),
                    "currency": currency,
                    "entry_ids": [str(e.id) for e in entries],
                },
                metadata={
                    "overridden_entry_ids": [
                        str(s.entry.id) for s in snapshots if s.is_overridden
                    ],
                },
            )
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(
                "Closing %s entries failed on a concurrent closing: %s",
                closing_type.value,
                exc.orig,
            )
            raise ConflictError(
                "One or more entries were closed by another request; reload and retry"
            ) from exc
        except CommissionLedgerError as exc:
            self.db.rollback()
            logger.warning(
                "Closing %s entries rejected: %s (%s)", closing_type.value, exc.message, exc.item_id
            )
            raise

        self.db.refresh(closing)
        logger.info(
            "Closing %s created by %s: %d entries, %s %s",
            closing.invoice_number,
            actor.id,
            closing.item_count,
            closing.total_amount,
            closing.currency,
        )
        return closing

    def _validate_request(
        self,
        entry_ids: list[UUID],
        recipient_name: str,
        period_start: date,
        period_end: date,
        currency: str,
    ) -> None:
        if not entry_ids:
            raise ValidationError("Select at least one entry to close")
        seen: set[UUID] = set()
        for entry_id in entry_ids:
            if entry_id in seen:
                raise ValidationError(
                    f"Entry {entry_id} is listed more than once", item_id=entry_id
                )
            seen.add(entry_id)
        if not recipient_name or not recipient_name.strip():
            raise ValidationError("A recipient name is required")
        if period_start > period_end:
            raise ValidationError("The period start must not be after the period end")
        if currency not in settings.supported_currencies:
            raise ValidationError(f"Currency {currency or '(empty)'} is not supported")

    def _load_entries(self, entry_ids: list[UUID], closing_type: ClosingType) -> list[LedgerEntry]:
        entries = self.entries.get_by_ids_for_update(entry_ids)
        found = {entry.id: entry for entry in entries}
        for entry_id in entry_ids:
            if entry_id not in found:
                raise ValidationError(f"Entry {entry_id} does not exist", item_id=entry_id)

        expected_kind = CLOSING_TYPE_KINDS[closing_type.value]
        for entry in entries:
            if entry.kind != expected_kind:
                raise ValidationError(
                    f"Entry {entry.reservation_number} is not a {expected_kind.replace('_', ' ')}",
                    item_id=entry.id,
                )
            if entry.kind == LedgerEntryKind.OPERATOR_PAYMENT.value and not entry.can_close:
                raise ValidationError(
                    f"Entry {entry.reservation_number} cannot be closed while its tour is "
                    f"{entry.logistic_status}",
                    item_id=entry.id,
                )
        # keep the caller's order for the line items
        return [found[entry_id] for entry_id in entry_ids]

    def _check_currency(self, entries: list[LedgerEntry], currency: str) -> None:
        for entry in entries:
            if entry.currency != currency:
                raise ValidationError(
                    f"Entry {entry.reservation_number} is in {entry.currency}, "
                    f"not {currency}; a closing must use a single currency",
                    item_id=entry.id,
                )

    def _check_overrides(
        self, overrides: dict[UUID, ClosingOverride], entry_ids: list[UUID], actor: Actor
    ) -> None:
        if not overrides:
            return
        if not actor.is_admin:
            raise PermissionDeniedError("Only admins can override amounts at closing")
        for entry_id in overrides:
            if entry_id not in entry_ids:
                raise ValidationError(
                    f"Override given for entry {entry_id} which is not being closed",
                    item_id=entry_id,
                )

    def _check_not_closed(self, entries: list[LedgerEntry]) -> None:
        infos = self.entries.get_closing_info([entry.id for entry in entries])  # type: ignore[misc]
        for entry in entries:
            info = infos.get(entry.id)  # type: ignore[call-overload]
            if info is not None:
                raise ConflictError(
                    f"Entry {entry.reservation_number} is already closed in {info.invoice_number}",
                    item_id=entry.id,
                )

    def get(self, closing_id: UUID) -> Closing:
        closing = self.repo.get_by_id(closing_id)
        if closing is None:
            raise NotFoundError(f"Closing {closing_id} not found", item_id=closing_id)
        return closing

    def get_detail(self, closing_id: UUID) -> tuple[Closing, list[ClosingLineItem]]:
        closing = self.get(closing_id)
        return closing, self.repo.get_line_items(closing_id)

    def list(
        self,
        closing_type: ClosingType | None = None,
        is_active: bool | None = None,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[Closing]:
        return self.repo.get_all(
            skip=skip,
            limit=limit,
            closing_type=closing_type,
            is_active=is_active,
            order_by=order_by,
        )

    def financial_entry_for(self, closing_id: UUID) -> FinancialEntry | None:
        return self.financial_entries.get_by_closing(closing_id)

    def to_responses(self, closings: list[Closing]) -> list[ClosingResponse]:
        item_ids = self.repo.get_item_ids([c.id for c in closings])  # type: ignore[misc]
        responses = []
        for closing in closings:
            response = ClosingResponse.model_validate(closing)
            response.item_ids = item_ids.get(closing.id, [])  # type: ignore[call-overload]
            responses.append(response)
        return responses
