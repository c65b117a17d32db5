"""Ledger entry schemas."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from commission_ledger.models.ledger_entry import (
    LedgerEntry,
    LedgerEntryKind,
    LedgerEntryStatus,
    LogisticStatus,
    OperationType,
    RecipientType,
)


class DateType(str, Enum):
    SALE = "sale"
    OPERATION = "operation"


class LedgerEntryCreate(BaseModel):
    kind: LedgerEntryKind
    subject_name: str = Field(..., min_length=1, max_length=255)
    recipient_type: RecipientType | None = None
    reservation_id: UUID
    reservation_number: str = Field(..., min_length=1, max_length=50)
    tour_id: str | None = Field(default=None, max_length=64)
    tour_name: str | None = Field(default=None, max_length=255)
    client_name: str | None = Field(default=None, max_length=255)
    client_country: str | None = Field(default=None, max_length=100)
    adults: int = Field(default=0, ge=0)
    children: int = Field(default=0, ge=0)
    infants: int = Field(default=0, ge=0)
    sale_date: date
    operation_date: date
    gross_amount: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    rate: Decimal | None = Field(default=None, ge=0, le=100)
    computed_amount: Decimal | None = Field(default=None, ge=0)
    cost_amount: Decimal | None = Field(default=None, ge=0)
    operation_type: OperationType | None = None
    logistic_status: LogisticStatus | None = None
    status: LedgerEntryStatus = LedgerEntryStatus.PENDING
    notes: str | None = None

    @model_validator(mode="after")
    def validate_kind_fields(self) -> "LedgerEntryCreate":
        if self.kind == LedgerEntryKind.COMMISSION:
            if self.rate is None and self.computed_amount is None:
                raise ValueError("Commission entries need a rate or a computed_amount")
            if self.recipient_type is None:
                self.recipient_type = RecipientType.SALESPERSON
        else:
            if self.cost_amount is None:
                raise ValueError("Operator payment entries need a cost_amount")
            if self.logistic_status is None:
                self.logistic_status = LogisticStatus.PENDING
            self.recipient_type = None
        self.currency = self.currency.upper()
        return self


class LedgerEntryStatusUpdate(BaseModel):
    status: LedgerEntryStatus
    payment_date: date | None = None


class LedgerEntryFilters(BaseModel):
    kind: LedgerEntryKind | None = None
    start_date: date | None = None
    end_date: date | None = None
    date_type: DateType = DateType.SALE
    search: str | None = None
    subject_name: str | None = None
    recipient_type: RecipientType | None = None
    tour: str | None = None
    statuses: list[LedgerEntryStatus] | None = None
    logistic_status: LogisticStatus | None = None
    reservation_id: UUID | None = None
    is_closed: bool | None = None


class ClosingInfo(BaseModel):
    is_closed: bool = False
    closed_at: datetime | None = None
    closed_by: str | None = None
    invoice_number: str | None = None
    closing_id: UUID | None = None


class LedgerEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    kind: str
    subject_name: str
    recipient_type: str | None = None
    reservation_id: UUID
    reservation_number: str
    tour_id: str | None = None
    tour_name: str | None = None
    client_name: str | None = None
    client_country: str | None = None
    adults: int
    children: int
    infants: int
    pax: int
    sale_date: date
    operation_date: date
    gross_amount: Decimal
    currency: str
    rate: Decimal | None = None
    computed_amount: Decimal | None = None
    cost_amount: Decimal | None = None
    operation_type: str | None = None
    logistic_status: str | None = None
    amount: Decimal
    can_close: bool
    status: str
    payment_date: date | None = None
    notes: str | None = None
    closing_info: ClosingInfo = Field(default_factory=ClosingInfo)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entry(
        cls, entry: LedgerEntry, closing_info: ClosingInfo | None = None
    ) -> "LedgerEntryResponse":
        response = cls.model_validate(entry)
        if closing_info is not None:
            response.closing_info = closing_info
        return response


class LedgerSummary(BaseModel):
    currency: str
    count: int
    reservation_count: int
    gross_total: Decimal
    amount_total: Decimal
    pending_amount: Decimal
    paid_amount: Decimal
    average_rate: Decimal | None = None


class TourOption(BaseModel):
    id: str | None
    name: str


class StatusOption(BaseModel):
    value: str
    label: str


class LedgerUniqueValues(BaseModel):
    subjects: list[str]
    tours: list[TourOption]
    currencies: list[str]
    statuses: list[StatusOption]
    logistic_statuses: list[StatusOption] = Field(default_factory=list)


class ClosureStatusResponse(BaseModel):
    reservation_id: UUID
    entries: list[LedgerEntryResponse]
    all_closed: bool
