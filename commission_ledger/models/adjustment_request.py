"""AdjustmentRequest model: a proposed amount change awaiting admin review."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func

from commission_ledger.core.database import Base
from commission_ledger.models.shared import MoneyType, UUIDType, generate_uuid


class AdjustmentType(str, Enum):
    INCREASE = "increase"
    REDUCTION = "reduction"
    REMOVAL = "removal"


class AdjustmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AdjustmentRequest(Base):
    __tablename__ = "adjustment_requests"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    item_id = Column(
        UUIDType, ForeignKey("ledger_entries.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    item_type = Column(String(20), nullable=False)

    original_amount = Column(MoneyType, nullable=False)
    new_amount = Column(MoneyType, nullable=False)
    adjustment_amount = Column(MoneyType, nullable=False)
    adjustment_type = Column(String(20), nullable=False)

    reason = Column(Text, nullable=False)
    requested_by = Column(String(255), nullable=False)
    requested_by_name = Column(String(255), nullable=True)

    status = Column(String(20), nullable=False, default=AdjustmentStatus.PENDING.value, index=True)
    reviewed_by = Column(String(255), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
