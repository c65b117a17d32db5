"""Repository for ReversalRecord rows."""

from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from commission_ledger.models.reversal_record import ReversalRecord


class ReversalRecordRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        closing_id: UUID,
        reason: str,
        undone_by: str,
        undone_at: datetime,
        items_reopened: int,
    ) -> ReversalRecord:
        record = ReversalRecord(
            closing_id=closing_id,
            reason=reason,
            undone_by=undone_by,
            undone_at=undone_at,
            items_reopened=items_reopened,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def get_by_closing(self, closing_id: UUID) -> list[ReversalRecord]:
        return (
            self.db.query(ReversalRecord)
            .filter(ReversalRecord.closing_id == closing_id)
            .order_by(ReversalRecord.undone_at.desc())
            .all()
        )
