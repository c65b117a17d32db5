from commission_ledger.repositories.adjustment_request_repository import (
    AdjustmentRequestRepository,
)
from commission_ledger.repositories.audit_log_repository import AuditLogRepository
from commission_ledger.repositories.closing_repository import ClosingRepository
from commission_ledger.repositories.financial_entry_repository import FinancialEntryRepository
from commission_ledger.repositories.invoice_sequence_repository import InvoiceSequenceRepository
from commission_ledger.repositories.ledger_entry_repository import LedgerEntryRepository
from commission_ledger.repositories.reversal_record_repository import ReversalRecordRepository

__all__ = [
    "AdjustmentRequestRepository",
    "AuditLogRepository",
    "ClosingRepository",
    "FinancialEntryRepository",
    "InvoiceSequenceRepository",
    "LedgerEntryRepository",
    "ReversalRecordRepository",
]
