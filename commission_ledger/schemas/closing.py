"""Closing schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from commission_ledger.models.closing import ClosingType
from commission_ledger.models.ledger_entry import RecipientType


class ClosingOverride(BaseModel):
    """Admin-only replacement of an entry's amount in the closing snapshot."""

    amount: Decimal | None = None
    percentage: Decimal | None = None
    notes: str | None = None


class CloseCommissionsRequest(BaseModel):
    commission_ids: list[UUID]
    closing_type: RecipientType
    recipient_name: str
    recipient_id: str | None = None
    period_start: date
    period_end: date
    currency: str = Field(min_length=3, max_length=3)
    adjustments: dict[UUID, ClosingOverride] = Field(default_factory=dict)


class CloseOperatorPaymentsRequest(BaseModel):
    payment_ids: list[UUID]
    operator_name: str
    operator_id: str | None = None
    period_start: date
    period_end: date
    currency: str = Field(min_length=3, max_length=3)
    adjustments: dict[UUID, ClosingOverride] = Field(default_factory=dict)


class ClosingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    invoice_number: str
    sequence_number: int
    closing_type: ClosingType
    recipient_name: str
    recipient_id: str | None = None
    period_start: date
    period_end: date
    currency: str
    item_count: int
    total_amount: Decimal
    created_by: str
    created_by_name: str | None = None
    is_active: bool
    undone_at: datetime | None = None
    undone_by: str | None = None
    undone_by_name: str | None = None
    undo_reason: str | None = None
    created_at: datetime
    item_ids: list[UUID] = Field(default_factory=list)


class ClosingLineItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    ledger_entry_id: UUID
    reservation_number: str
    tour_name: str | None = None
    client_name: str | None = None
    subject_name: str
    pax: int
    sale_date: date
    operation_date: date
    gross_amount: Decimal
    rate: Decimal | None = None
    original_amount: Decimal
    amount: Decimal
    is_overridden: bool
    override_notes: str | None = None
    status: str
    logistic_status: str | None = None


class ClosingDetailResponse(ClosingResponse):
    items: list[ClosingLineItemResponse] = Field(default_factory=list)


class CloseResult(BaseModel):
    closing: ClosingResponse
    financial_entry_id: UUID
    message: str


class UndoClosingRequest(BaseModel):
    reason: str = ""


class UndoClosingResponse(BaseModel):
    message: str
    items_reopened: int
    reversal_id: UUID
