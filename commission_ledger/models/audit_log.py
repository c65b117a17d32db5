"""AuditLog model for the append-only trail of ledger state changes."""

from sqlalchemy import JSON, Column, DateTime, String, func

from commission_ledger.core.database import Base
from commission_ledger.models.shared import UUIDType, generate_uuid


class AuditLog(Base):
    """AuditLog model - one immutable fact about a ledger, closing or adjustment change."""

    __tablename__ = "audit_logs"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    resource_type = Column(String(50), nullable=False, index=True)
    resource_id = Column(UUIDType, nullable=False, index=True)
    action = Column(String(50), nullable=False, index=True)
    changes = Column(JSON, nullable=False, default=dict)
    actor_type = Column(String(50), nullable=False)
    actor_id = Column(String(255), nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
