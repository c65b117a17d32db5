"""CSV export of filtered ledger entries."""

import csv
import io
import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from commission_ledger.models.ledger_entry import LedgerEntryKind
from commission_ledger.repositories.ledger_entry_repository import LedgerEntryRepository
from commission_ledger.schemas.ledger_entry import LedgerEntryFilters

logger = logging.getLogger(__name__)

# Upper bound on rows per export; the back office filters by period first.
MAX_EXPORT_ROWS = 10000

_COMMISSION_HEADER = [
    "reservation_number",
    "sale_date",
    "operation_date",
    "subject_name",
    "recipient_type",
    "client_name",
    "tour_name",
    "pax",
    "gross_amount",
    "rate",
    "amount",
    "currency",
    "status",
    "closed",
    "invoice_number",
]

_OPERATOR_HEADER = [
    "reservation_number",
    "sale_date",
    "operation_date",
    "subject_name",
    "operation_type",
    "logistic_status",
    "client_name",
    "tour_name",
    "pax",
    "gross_amount",
    "amount",
    "currency",
    "status",
    "closed",
    "invoice_number",
]


def export_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"commissions_{now.strftime('%Y%m%d_%H%M%S')}.csv"


class ExportService:
    """Service for rendering ledger lists as CSV."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = LedgerEntryRepository(db)

    def generate_csv(self, filters: LedgerEntryFilters | None = None) -> tuple[str, int]:
        """Return the CSV text and the number of data rows written."""
        filters = filters or LedgerEntryFilters(kind=LedgerEntryKind.COMMISSION)
        entries = self.repo.get_all(filters, limit=MAX_EXPORT_ROWS)
        infos = self.repo.get_closing_info([entry.id for entry in entries])  # type: ignore[misc]
        is_operator = filters.kind == LedgerEntryKind.OPERATOR_PAYMENT

        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(_OPERATOR_HEADER if is_operator else _COMMISSION_HEADER)
        for entry in entries:
            info = infos.get(entry.id)  # type: ignore[call-overload]
            closed = "yes" if info is not None else "no"
            invoice_number = info.invoice_number if info is not None else ""
            if is_operator:
                writer.writerow(
                    [
                        entry.reservation_number,
                        entry.sale_date.isoformat(),
                        entry.operation_date.isoformat(),
                        entry.subject_name,
                        entry.operation_type or "",
                        entry.logistic_status or "",
                        entry.client_name or "",
                        entry.tour_name or "",
                        entry.pax,
                        str(entry.gross_amount),
                        str(entry.amount),
                        entry.currency,
                        entry.status,
                        closed,
                        invoice_number,
                    ]
                )
            else:
                writer.writerow(
                    [
                        entry.reservation_number,
                        entry.sale_date.isoformat(),
                        entry.operation_date.isoformat(),
                        entry.subject_name,
                        entry.recipient_type or "",
                        entry.client_name or "",
                        entry.tour_name or "",
                        entry.pax,
                        str(entry.gross_amount),
                        str(entry.rate) if entry.rate is not None else "",
                        str(entry.amount),
                        entry.currency,
                        entry.status,
                        closed,
                        invoice_number,
                    ]
                )
        if len(entries) == MAX_EXPORT_ROWS:
            logger.warning("Export truncated at %d rows", MAX_EXPORT_ROWS)
        logger.info(
            "Exported %d %s entries to CSV",
            len(entries),
            "operator payment" if is_operator else "commission",
        )
        return output.getvalue(), len(entries)
