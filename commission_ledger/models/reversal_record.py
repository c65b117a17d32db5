"""ReversalRecord model: audit entry for an undone closing."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from commission_ledger.core.database import Base
from commission_ledger.models.shared import UUIDType, generate_uuid


class ReversalRecord(Base):
    __tablename__ = "reversal_records"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    closing_id = Column(
        UUIDType, ForeignKey("closings.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    reason = Column(Text, nullable=False)
    undone_by = Column(String(255), nullable=False)
    undone_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    items_reopened = Column(Integer, nullable=False, default=0)
