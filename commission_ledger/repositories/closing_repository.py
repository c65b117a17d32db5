"""Repository for closings, their line items and entry memberships."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from commission_ledger.core.sorting import apply_order_by
from commission_ledger.models.closing import ClosedEntry, Closing, ClosingLineItem, ClosingType


class ClosingRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        invoice_number: str,
        sequence_number: int,
        closing_type: ClosingType,
        recipient_name: str,
        recipient_id: str | None,
        period_start: date,
        period_end: date,
        currency: str,
        item_count: int,
        total_amount: Decimal,
        created_by: str,
        created_by_name: str | None = None,
    ) -> Closing:
        closing = Closing(
            invoice_number=invoice_number,
            sequence_number=sequence_number,
            closing_type=closing_type.value,
            recipient_name=recipient_name,
            recipient_id=recipient_id,
            period_start=period_start,
            period_end=period_end,
            currency=currency,
            item_count=item_count,
            total_amount=total_amount,
            created_by=created_by,
            created_by_name=created_by_name,
            is_active=True,
        )
        self.db.add(closing)
        self.db.flush()
        return closing

    def add_line_items(
        self, closing_id: UUID, items: list[dict[str, Any]]
    ) -> list[ClosingLineItem]:
        line_items = [ClosingLineItem(closing_id=closing_id, **item) for item in items]
        self.db.add_all(line_items)
        self.db.flush()
        return line_items

    def add_memberships(self, closing_id: UUID, entry_ids: list[UUID]) -> None:
        """Mark entries closed. Raises IntegrityError on flush if any is already held."""
        self.db.add_all(
            [ClosedEntry(ledger_entry_id=entry_id, closing_id=closing_id) for entry_id in entry_ids]
        )
        self.db.flush()

    def delete_memberships(self, closing_id: UUID) -> int:
        deleted = (
            self.db.query(ClosedEntry)
            .filter(ClosedEntry.closing_id == closing_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return deleted

    def get_by_id(self, closing_id: UUID) -> Closing | None:
        return self.db.query(Closing).filter(Closing.id == closing_id).first()

    def lock(self, closing_id: UUID) -> Closing | None:
        return self.db.query(Closing).filter(Closing.id == closing_id).with_for_update().first()

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        closing_type: ClosingType | None = None,
        recipient_name: str | None = None,
        is_active: bool | None = None,
        order_by: str | None = None,
    ) -> list[Closing]:
        query = self.db.query(Closing)
        if closing_type is not None:
            query = query.filter(Closing.closing_type == closing_type.value)
        if recipient_name is not None:
            query = query.filter(Closing.recipient_name == recipient_name)
        if is_active is not None:
            query = query.filter(Closing.is_active.is_(is_active))
        query = apply_order_by(query, Closing, order_by)
        return query.offset(skip).limit(limit).all()

    def get_line_items(self, closing_id: UUID) -> list[ClosingLineItem]:
        return (
            self.db.query(ClosingLineItem)
            .filter(ClosingLineItem.closing_id == closing_id)
            .order_by(ClosingLineItem.sale_date.asc(), ClosingLineItem.reservation_number.asc())
            .all()
        )

    def get_item_ids(self, closing_ids: list[UUID]) -> dict[UUID, list[UUID]]:
        """Ledger entry ids snapshotted by each closing."""
        result: dict[UUID, list[UUID]] = {closing_id: [] for closing_id in closing_ids}
        if not closing_ids:
            return result
        rows = (
            self.db.query(ClosingLineItem.closing_id, ClosingLineItem.ledger_entry_id)
            .filter(ClosingLineItem.closing_id.in_(closing_ids))
            .order_by(ClosingLineItem.created_at.asc(), ClosingLineItem.id.asc())
            .all()
        )
        for closing_id, entry_id in rows:
            result[closing_id].append(entry_id)
        return result

    def mark_undone(
        self,
        closing: Closing,
        undone_by: str,
        undone_by_name: str | None,
        undone_at: datetime,
        reason: str,
    ) -> Closing:
        closing.is_active = False  # type: ignore[assignment]
        closing.undone_by = undone_by  # type: ignore[assignment]
        closing.undone_by_name = undone_by_name  # type: ignore[assignment]
        closing.undone_at = undone_at  # type: ignore[assignment]
        closing.undo_reason = reason  # type: ignore[assignment]
        self.db.flush()
        return closing
