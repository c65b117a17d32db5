"""Per-closing-type invoice number counter."""

from sqlalchemy import Column, Integer, String

from commission_ledger.core.database import Base


class InvoiceSequence(Base):
    """One row per closing type; ``last_value`` is the last number handed out."""

    __tablename__ = "invoice_sequences"

    closing_type = Column(String(20), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
