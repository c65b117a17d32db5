"""Closing (invoice batch), its line-item snapshots and entry membership."""

from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)

from commission_ledger.core.database import Base
from commission_ledger.models.ledger_entry import LedgerEntryKind
from commission_ledger.models.shared import MoneyType, UUIDType, generate_uuid


class ClosingType(str, Enum):
    SALESPERSON = "salesperson"
    AGENCY = "agency"
    OPERATOR = "operator"


# Which ledger entries each closing type groups.
CLOSING_TYPE_KINDS: dict[str, str] = {
    ClosingType.SALESPERSON.value: LedgerEntryKind.COMMISSION.value,
    ClosingType.AGENCY.value: LedgerEntryKind.COMMISSION.value,
    ClosingType.OPERATOR.value: LedgerEntryKind.OPERATOR_PAYMENT.value,
}


class Closing(Base):
    """Closing model - an immutable, invoiced batch of ledger entries.

    Rows are never deleted; a reversal only flips ``is_active`` off.
    """

    __tablename__ = "closings"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    invoice_number = Column(String(50), unique=True, index=True, nullable=False)
    sequence_number = Column(Integer, nullable=False)
    closing_type = Column(String(20), nullable=False, index=True)

    recipient_name = Column(String(255), nullable=False)
    recipient_id = Column(String(64), nullable=True)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)

    currency = Column(String(3), nullable=False)
    item_count = Column(Integer, nullable=False)
    total_amount = Column(MoneyType, nullable=False)

    created_by = Column(String(255), nullable=False)
    created_by_name = Column(String(255), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    undone_at = Column(DateTime(timezone=True), nullable=True)
    undone_by = Column(String(255), nullable=True)
    undone_by_name = Column(String(255), nullable=True)
    undo_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("closing_type", "sequence_number", name="uq_closings_type_sequence"),
    )


class ClosingLineItem(Base):
    """ClosingLineItem model - a frozen copy of a ledger entry at closing time.

    ``ledger_entry_id`` is kept for traceability only; later edits to the live
    entry never reach the snapshot.
    """

    __tablename__ = "closing_line_items"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    closing_id = Column(
        UUIDType, ForeignKey("closings.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    ledger_entry_id = Column(UUIDType, nullable=False, index=True)

    reservation_number = Column(String(50), nullable=False)
    tour_name = Column(String(255), nullable=True)
    client_name = Column(String(255), nullable=True)
    subject_name = Column(String(255), nullable=False)
    pax = Column(Integer, nullable=False, default=0)
    sale_date = Column(Date, nullable=False)
    operation_date = Column(Date, nullable=False)

    gross_amount = Column(MoneyType, nullable=False)
    rate = Column(Numeric(7, 4), nullable=True)
    original_amount = Column(MoneyType, nullable=False)
    amount = Column(MoneyType, nullable=False)
    is_overridden = Column(Boolean, nullable=False, default=False)
    override_notes = Column(Text, nullable=True)

    status = Column(String(20), nullable=False)
    logistic_status = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ClosedEntry(Base):
    """Membership of a ledger entry in an active closing.

    The unique constraint on ``ledger_entry_id`` is what stops two closings
    from sealing the same entry. Rows are removed when the closing is undone.
    """

    __tablename__ = "closed_entries"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    ledger_entry_id = Column(
        UUIDType,
        ForeignKey("ledger_entries.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    closing_id = Column(
        UUIDType, ForeignKey("closings.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
