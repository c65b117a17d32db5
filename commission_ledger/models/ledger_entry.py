"""LedgerEntry model: one commission owed or one operator payment owed."""

from decimal import Decimal
from enum import Enum

from sqlalchemy import Column, Date, DateTime, Index, Integer, Numeric, String, Text, func

from commission_ledger.core.database import Base
from commission_ledger.models.shared import MoneyType, UUIDType, generate_uuid


class LedgerEntryKind(str, Enum):
    COMMISSION = "commission"
    OPERATOR_PAYMENT = "operator_payment"


class LedgerEntryStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"


class RecipientType(str, Enum):
    SALESPERSON = "salesperson"
    AGENCY = "agency"


class OperationType(str, Enum):
    OWN_OPERATION = "own-operation"
    THIRD_PARTY = "third-party"


class LogisticStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    RECONFIRMED = "reconfirmed"
    COMPLETED = "completed"
    NO_SHOW = "no-show"
    CANCELLED = "cancelled"


# Operators are only paid for tours that have concluded one way or another.
CLOSABLE_LOGISTIC_STATUSES = frozenset(
    {
        LogisticStatus.COMPLETED.value,
        LogisticStatus.NO_SHOW.value,
        LogisticStatus.CANCELLED.value,
    }
)


class LedgerEntry(Base):
    """LedgerEntry model - a commission or operator payment while it is open.

    Closing state is not stored here; an entry is closed while a
    ``closed_entries`` row links it to an active closing.
    """

    __tablename__ = "ledger_entries"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    kind = Column(String(20), nullable=False, index=True)

    subject_name = Column(String(255), nullable=False, index=True)
    recipient_type = Column(String(20), nullable=True)

    # Originating booking, owned by the reservation system
    reservation_id = Column(UUIDType, nullable=False, index=True)
    reservation_number = Column(String(50), nullable=False, index=True)
    tour_id = Column(String(64), nullable=True)
    tour_name = Column(String(255), nullable=True)
    client_name = Column(String(255), nullable=True)
    client_country = Column(String(100), nullable=True)
    adults = Column(Integer, nullable=False, default=0)
    children = Column(Integer, nullable=False, default=0)
    infants = Column(Integer, nullable=False, default=0)

    sale_date = Column(Date, nullable=False)
    operation_date = Column(Date, nullable=False)

    gross_amount = Column(MoneyType, nullable=False, default=0)
    currency = Column(String(3), nullable=False)

    # Commission fields
    rate = Column(Numeric(7, 4), nullable=True)
    computed_amount = Column(MoneyType, nullable=True)

    # Operator payment fields
    cost_amount = Column(MoneyType, nullable=True)
    operation_type = Column(String(20), nullable=True)
    logistic_status = Column(String(20), nullable=True)

    status = Column(String(20), nullable=False, default=LedgerEntryStatus.PENDING.value)
    payment_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("ix_ledger_entries_kind_status", "kind", "status"),)

    @property
    def amount(self) -> Decimal:
        """The live amount owed: commission amount or operator cost."""
        if self.kind == LedgerEntryKind.OPERATOR_PAYMENT.value:
            value = self.cost_amount
        else:
            value = self.computed_amount
        return Decimal(str(value)) if value is not None else Decimal("0")

    @property
    def can_close(self) -> bool:
        if self.kind != LedgerEntryKind.OPERATOR_PAYMENT.value:
            return True
        return self.logistic_status in CLOSABLE_LOGISTIC_STATUSES

    @property
    def pax(self) -> int:
        return int(self.adults or 0) + int(self.children or 0) + int(self.infants or 0)
