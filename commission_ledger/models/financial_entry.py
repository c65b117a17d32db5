"""FinancialEntry model: the payable or receivable a closing registers."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func

from commission_ledger.core.database import Base
from commission_ledger.models.shared import MoneyType, UUIDType, generate_uuid


class FinancialEntryDirection(str, Enum):
    PAYABLE = "payable"
    RECEIVABLE = "receivable"


class FinancialEntryStatus(str, Enum):
    OPEN = "open"


class FinancialEntry(Base):
    __tablename__ = "financial_entries"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    direction = Column(String(20), nullable=False, index=True)
    closing_id = Column(
        UUIDType, ForeignKey("closings.id", ondelete="RESTRICT"), nullable=False, unique=True
    )
    counterparty = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(MoneyType, nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(String(20), nullable=False, default=FinancialEntryStatus.OPEN.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
