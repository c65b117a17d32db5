"""Ledger entry repository: filtering, locking and aggregate queries."""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import case, distinct, or_, select
from sqlalchemy import func as sa_func
from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from commission_ledger.core.sorting import apply_order_by
from commission_ledger.models.closing import ClosedEntry, Closing
from commission_ledger.models.currency import quantize_amount
from commission_ledger.models.ledger_entry import (
    LedgerEntry,
    LedgerEntryKind,
    LedgerEntryStatus,
)
from commission_ledger.schemas.ledger_entry import (
    ClosingInfo,
    DateType,
    LedgerEntryCreate,
    LedgerEntryFilters,
    LedgerSummary,
)

SORTABLE_FIELDS = (
    "sale_date",
    "operation_date",
    "reservation_number",
    "subject_name",
    "tour_name",
    "gross_amount",
    "status",
    "created_at",
)


def in_active_closing() -> ColumnElement[bool]:
    """EXISTS clause: the outer LedgerEntry row belongs to an active closing."""
    return (
        select(ClosedEntry.id)
        .join(Closing, Closing.id == ClosedEntry.closing_id)
        .where(
            ClosedEntry.ledger_entry_id == LedgerEntry.id,
            Closing.is_active.is_(True),
        )
        .exists()
    )


class LedgerEntryRepository:
    def __init__(self, db: Session):
        self.db = db

    def _apply_filters(self, query: Query, filters: LedgerEntryFilters) -> Query:  # type: ignore[type-arg]
        if filters.kind is not None:
            query = query.filter(LedgerEntry.kind == filters.kind.value)

        date_column = (
            LedgerEntry.operation_date
            if filters.date_type == DateType.OPERATION
            else LedgerEntry.sale_date
        )
        if filters.start_date is not None:
            query = query.filter(date_column >= filters.start_date)
        if filters.end_date is not None:
            query = query.filter(date_column <= filters.end_date)

        if filters.search:
            pattern = f"%{filters.search.strip()}%"
            query = query.filter(
                or_(
                    LedgerEntry.reservation_number.ilike(pattern),
                    LedgerEntry.client_name.ilike(pattern),
                    LedgerEntry.subject_name.ilike(pattern),
                    LedgerEntry.tour_name.ilike(pattern),
                )
            )
        if filters.subject_name:
            query = query.filter(LedgerEntry.subject_name == filters.subject_name)
        if filters.recipient_type is not None:
            query = query.filter(LedgerEntry.recipient_type == filters.recipient_type.value)
        if filters.tour:
            query = query.filter(
                or_(LedgerEntry.tour_id == filters.tour, LedgerEntry.tour_name == filters.tour)
            )
        if filters.statuses:
            query = query.filter(LedgerEntry.status.in_([s.value for s in filters.statuses]))
        if filters.logistic_status is not None:
            query = query.filter(LedgerEntry.logistic_status == filters.logistic_status.value)
        if filters.reservation_id is not None:
            query = query.filter(LedgerEntry.reservation_id == filters.reservation_id)

        if filters.is_closed is True:
            query = query.filter(in_active_closing())
        elif filters.is_closed is False:
            query = query.filter(~in_active_closing())
        return query

    def get_all(
        self,
        filters: LedgerEntryFilters | None = None,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[LedgerEntry]:
        query = self._apply_filters(self.db.query(LedgerEntry), filters or LedgerEntryFilters())
        query = apply_order_by(
            query,
            LedgerEntry,
            order_by,
            default_field="sale_date",
            allowed_fields=SORTABLE_FIELDS,
        )
        return query.offset(skip).limit(limit).all()

    def count(self, filters: LedgerEntryFilters | None = None) -> int:
        query = self._apply_filters(
            self.db.query(sa_func.count(LedgerEntry.id)), filters or LedgerEntryFilters()
        )
        return query.scalar() or 0

    def get_by_id(self, entry_id: UUID) -> LedgerEntry | None:
        return self.db.query(LedgerEntry).filter(LedgerEntry.id == entry_id).first()

    def get_by_ids_for_update(self, entry_ids: list[UUID]) -> list[LedgerEntry]:
        """Load entries with a row lock, in id order so lockers never deadlock.

        SQLite ignores FOR UPDATE; the closed_entries unique constraint still
        guards against double closing there.
        """
        if not entry_ids:
            return []
        return (
            self.db.query(LedgerEntry)
            .filter(LedgerEntry.id.in_(entry_ids))
            .order_by(LedgerEntry.id.asc())
            .with_for_update()
            .all()
        )

    def lock(self, entry_id: UUID) -> LedgerEntry | None:
        return (
            self.db.query(LedgerEntry)
            .filter(LedgerEntry.id == entry_id)
            .with_for_update()
            .first()
        )

    def create(self, data: LedgerEntryCreate) -> LedgerEntry:
        values: dict[str, Any] = data.model_dump()
        for key in ("kind", "recipient_type", "operation_type", "logistic_status", "status"):
            if values.get(key) is not None:
                values[key] = values[key].value

        if data.kind == LedgerEntryKind.COMMISSION:
            if data.computed_amount is None:
                rate = data.rate or Decimal("0")
                values["computed_amount"] = quantize_amount(
                    data.gross_amount * rate / Decimal("100"), data.currency
                )
            else:
                values["computed_amount"] = quantize_amount(data.computed_amount, data.currency)
        elif data.cost_amount is not None:
            values["cost_amount"] = quantize_amount(data.cost_amount, data.currency)

        entry = LedgerEntry(**values)
        self.db.add(entry)
        self.db.flush()
        self.db.refresh(entry)
        return entry

    def update_status(
        self, entry: LedgerEntry, status: LedgerEntryStatus, payment_date: date | None = None
    ) -> LedgerEntry:
        entry.status = status.value  # type: ignore[assignment]
        if status == LedgerEntryStatus.PAID:
            entry.payment_date = payment_date or date.today()  # type: ignore[assignment]
        self.db.flush()
        return entry

    def set_amount(self, entry: LedgerEntry, amount: Decimal) -> None:
        """Set the live amount without committing; the caller owns the transaction."""
        if entry.kind == LedgerEntryKind.OPERATOR_PAYMENT.value:
            entry.cost_amount = amount  # type: ignore[assignment]
        else:
            entry.computed_amount = amount  # type: ignore[assignment]
        self.db.flush()

    def is_closed(self, entry_id: UUID) -> bool:
        return (
            self.db.query(LedgerEntry.id)
            .filter(LedgerEntry.id == entry_id, in_active_closing())
            .first()
            is not None
        )

    def get_closing_info(self, entry_ids: list[UUID]) -> dict[UUID, ClosingInfo]:
        """Map each closed entry id to the active closing that holds it."""
        if not entry_ids:
            return {}
        rows = (
            self.db.query(ClosedEntry.ledger_entry_id, Closing)
            .join(Closing, Closing.id == ClosedEntry.closing_id)
            .filter(
                ClosedEntry.ledger_entry_id.in_(entry_ids),
                Closing.is_active.is_(True),
            )
            .all()
        )
        return {
            entry_id: ClosingInfo(
                is_closed=True,
                closed_at=closing.created_at,
                closed_by=closing.created_by_name or closing.created_by,
                invoice_number=closing.invoice_number,
                closing_id=closing.id,
            )
            for entry_id, closing in rows
        }

    def summarize(self, filters: LedgerEntryFilters | None = None) -> list[LedgerSummary]:
        """Aggregate the filtered entries per currency."""
        filters = filters or LedgerEntryFilters()
        amount_column = sa_func.coalesce(LedgerEntry.computed_amount, LedgerEntry.cost_amount, 0)
        pending_statuses = [LedgerEntryStatus.PENDING.value, LedgerEntryStatus.APPROVED.value]
        query = self.db.query(
            LedgerEntry.currency,
            sa_func.count(LedgerEntry.id),
            sa_func.count(distinct(LedgerEntry.reservation_id)),
            sa_func.coalesce(sa_func.sum(LedgerEntry.gross_amount), 0),
            sa_func.coalesce(sa_func.sum(amount_column), 0),
            sa_func.coalesce(
                sa_func.sum(
                    case((LedgerEntry.status.in_(pending_statuses), amount_column), else_=0)
                ),
                0,
            ),
            sa_func.coalesce(
                sa_func.sum(
                    case(
                        (LedgerEntry.status == LedgerEntryStatus.PAID.value, amount_column),
                        else_=0,
                    )
                ),
                0,
            ),
            sa_func.avg(LedgerEntry.rate),
        )
        query = self._apply_filters(query, filters)
        rows = query.group_by(LedgerEntry.currency).order_by(LedgerEntry.currency).all()
        summaries = []
        for currency, count, reservations, gross, total, pending, paid, avg_rate in rows:
            summaries.append(
                LedgerSummary(
                    currency=currency,
                    count=count,
                    reservation_count=reservations,
                    gross_total=quantize_amount(gross, currency),
                    amount_total=quantize_amount(total, currency),
                    pending_amount=quantize_amount(pending, currency),
                    paid_amount=quantize_amount(paid, currency),
                    average_rate=(
                        Decimal(str(avg_rate)).quantize(Decimal("0.01"))
                        if avg_rate is not None
                        else None
                    ),
                )
            )
        return summaries

    def distinct_values(self, column: Any, kind: LedgerEntryKind) -> list[Any]:
        rows = (
            self.db.query(column)
            .filter(LedgerEntry.kind == kind.value, column.isnot(None))
            .distinct()
            .order_by(column)
            .all()
        )
        return [row[0] for row in rows]

    def distinct_tours(self, kind: LedgerEntryKind) -> list[tuple[str | None, str]]:
        rows = (
            self.db.query(LedgerEntry.tour_id, LedgerEntry.tour_name)
            .filter(LedgerEntry.kind == kind.value, LedgerEntry.tour_name.isnot(None))
            .distinct()
            .order_by(LedgerEntry.tour_name)
            .all()
        )
        return [(tour_id, tour_name) for tour_id, tour_name in rows]
