"""Repository for FinancialEntry rows."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from commission_ledger.core.sorting import apply_order_by
from commission_ledger.models.financial_entry import (
    FinancialEntry,
    FinancialEntryDirection,
    FinancialEntryStatus,
)


class FinancialEntryRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        direction: FinancialEntryDirection,
        closing_id: UUID,
        counterparty: str,
        amount: Decimal,
        currency: str,
        description: str | None = None,
    ) -> FinancialEntry:
        entry = FinancialEntry(
            direction=direction.value,
            closing_id=closing_id,
            counterparty=counterparty,
            description=description,
            amount=amount,
            currency=currency,
            status=FinancialEntryStatus.OPEN.value,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_by_closing(self, closing_id: UUID) -> FinancialEntry | None:
        return self.db.query(FinancialEntry).filter(FinancialEntry.closing_id == closing_id).first()

    def delete_by_closing(self, closing_id: UUID) -> int:
        deleted = (
            self.db.query(FinancialEntry)
            .filter(FinancialEntry.closing_id == closing_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return deleted

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        direction: FinancialEntryDirection | None = None,
        currency: str | None = None,
        order_by: str | None = None,
    ) -> list[FinancialEntry]:
        query = self.db.query(FinancialEntry)
        if direction is not None:
            query = query.filter(FinancialEntry.direction == direction.value)
        if currency is not None:
            query = query.filter(FinancialEntry.currency == currency.upper())
        query = apply_order_by(query, FinancialEntry, order_by)
        return query.offset(skip).limit(limit).all()
