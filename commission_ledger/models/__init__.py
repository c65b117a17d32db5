from commission_ledger.models.adjustment_request import (
    AdjustmentRequest,
    AdjustmentStatus,
    AdjustmentType,
)
from commission_ledger.models.audit_log import AuditLog
from commission_ledger.models.closing import (
    CLOSING_TYPE_KINDS,
    ClosedEntry,
    Closing,
    ClosingLineItem,
    ClosingType,
)
from commission_ledger.models.currency import CurrencyCode
from commission_ledger.models.financial_entry import (
    FinancialEntry,
    FinancialEntryDirection,
    FinancialEntryStatus,
)
from commission_ledger.models.invoice_sequence import InvoiceSequence
from commission_ledger.models.ledger_entry import (
    CLOSABLE_LOGISTIC_STATUSES,
    LedgerEntry,
    LedgerEntryKind,
    LedgerEntryStatus,
    LogisticStatus,
    OperationType,
    RecipientType,
)
from commission_ledger.models.reversal_record import ReversalRecord

__all__ = [
    "AdjustmentRequest",
    "AdjustmentStatus",
    "AdjustmentType",
    "AuditLog",
    "CLOSABLE_LOGISTIC_STATUSES",
    "CLOSING_TYPE_KINDS",
    "ClosedEntry",
    "Closing",
    "ClosingLineItem",
    "ClosingType",
    "CurrencyCode",
    "FinancialEntry",
    "FinancialEntryDirection",
    "FinancialEntryStatus",
    "InvoiceSequence",
    "LedgerEntry",
    "LedgerEntryKind",
    "LedgerEntryStatus",
    "LogisticStatus",
    "OperationType",
    "RecipientType",
    "ReversalRecord",
]
