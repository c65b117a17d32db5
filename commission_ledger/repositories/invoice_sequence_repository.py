"""Per-closing-type invoice counter."""

from sqlalchemy import update
from sqlalchemy.orm import Session

from commission_ledger.models.closing import ClosingType
from commission_ledger.models.invoice_sequence import InvoiceSequence

INVOICE_PREFIXES: dict[str, str] = {
    ClosingType.SALESPERSON.value: "SAL",
    ClosingType.AGENCY.value: "AGE",
    ClosingType.OPERATOR.value: "OPE",
}


def format_invoice_number(closing_type: ClosingType, sequence: int) -> str:
    """Render e.g. ``SAL-000042``."""
    return f"{INVOICE_PREFIXES[closing_type.value]}-{sequence:06d}"


class InvoiceSequenceRepository:
    def __init__(self, db: Session):
        self.db = db

    def next_value(self, closing_type: ClosingType) -> int:
        """Increment and return the counter for a closing type.

        The increment is a single UPDATE inside the caller's transaction, so
        it holds the row lock until commit and is rolled back with the
        closing if anything later fails.
        """
        self._ensure_row(closing_type)
        self.db.execute(
            update(InvoiceSequence)
            .where(InvoiceSequence.closing_type == closing_type.value)
            .values(last_value=InvoiceSequence.last_value + 1)
        )
        value = (
            self.db.query(InvoiceSequence.last_value)
            .filter(InvoiceSequence.closing_type == closing_type.value)
            .scalar()
        )
        return int(value)

    def current_value(self, closing_type: ClosingType) -> int:
        value = (
            self.db.query(InvoiceSequence.last_value)
            .filter(InvoiceSequence.closing_type == closing_type.value)
            .scalar()
        )
        return int(value or 0)

    def _ensure_row(self, closing_type: ClosingType) -> None:
        # Migrations seed one row per type; this covers databases built with
        # create_all. A concurrent insert surfaces as IntegrityError on flush.
        exists = (
            self.db.query(InvoiceSequence.closing_type)
            .filter(InvoiceSequence.closing_type == closing_type.value)
            .first()
        )
        if exists is None:
            self.db.add(InvoiceSequence(closing_type=closing_type.value, last_value=0))
            self.db.flush()
