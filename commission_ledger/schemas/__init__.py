from commission_ledger.schemas.adjustment import (
    AdjustmentProposeRequest,
    AdjustmentRejectRequest,
    AdjustmentResponse,
)
from commission_ledger.schemas.audit_log import AuditLogResponse
from commission_ledger.schemas.closing import (
    CloseCommissionsRequest,
    CloseOperatorPaymentsRequest,
    CloseResult,
    ClosingDetailResponse,
    ClosingLineItemResponse,
    ClosingOverride,
    ClosingResponse,
    UndoClosingRequest,
    UndoClosingResponse,
)
from commission_ledger.schemas.financial_entry import FinancialEntryResponse
from commission_ledger.schemas.forecast import ForecastBucket, ForecastResponse
from commission_ledger.schemas.ledger_entry import (
    ClosingInfo,
    ClosureStatusResponse,
    DateType,
    LedgerEntryCreate,
    LedgerEntryFilters,
    LedgerEntryResponse,
    LedgerEntryStatusUpdate,
    LedgerSummary,
    LedgerUniqueValues,
)

__all__ = [
    "AdjustmentProposeRequest",
    "AdjustmentRejectRequest",
    "AdjustmentResponse",
    "AuditLogResponse",
    "CloseCommissionsRequest",
    "CloseOperatorPaymentsRequest",
    "CloseResult",
    "ClosingDetailResponse",
    "ClosingInfo",
    "ClosingLineItemResponse",
    "ClosingOverride",
    "ClosingResponse",
    "ClosureStatusResponse",
    "DateType",
    "FinancialEntryResponse",
    "ForecastBucket",
    "ForecastResponse",
    "LedgerEntryCreate",
    "LedgerEntryFilters",
    "LedgerEntryResponse",
    "LedgerEntryStatusUpdate",
    "LedgerSummary",
    "LedgerUniqueValues",
    "UndoClosingRequest",
    "UndoClosingResponse",
]
