"""Commission and operator-payment ledger endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from commission_ledger.core.auth import Actor, get_current_actor
from commission_ledger.core.database import get_db
from commission_ledger.models.ledger_entry import (
    LedgerEntryKind,
    LedgerEntryStatus,
    LogisticStatus,
    RecipientType,
)
from commission_ledger.schemas.ledger_entry import (
    ClosureStatusResponse,
    DateType,
    LedgerEntryCreate,
    LedgerEntryFilters,
    LedgerEntryResponse,
    LedgerEntryStatusUpdate,
    LedgerSummary,
    LedgerUniqueValues,
)
from commission_ledger.services.export_service import ExportService, export_filename
from commission_ledger.services.ledger_service import LedgerService

router = APIRouter()

_UNAUTHORIZED = {401: {"description": "Unauthorized - missing or invalid bearer token"}}


def ledger_filters(
    start_date: date | None = None,
    end_date: date | None = None,
    date_type: DateType = DateType.SALE,
    search: str | None = None,
    subject_name: str | None = None,
    recipient_type: RecipientType | None = None,
    tour: str | None = None,
    status: list[LedgerEntryStatus] | None = Query(default=None),
    logistic_status: LogisticStatus | None = None,
    is_closed: bool | None = None,
) -> LedgerEntryFilters:
    """Query-string filters shared by the list, summary and export endpoints."""
    return LedgerEntryFilters(
        start_date=start_date,
        end_date=end_date,
        date_type=date_type,
        search=search,
        subject_name=subject_name,
        recipient_type=recipient_type,
        tour=tour,
        statuses=status,
        logistic_status=logistic_status,
        is_closed=is_closed,
    )


def _with_kind(filters: LedgerEntryFilters, kind: LedgerEntryKind) -> LedgerEntryFilters:
    return filters.model_copy(update={"kind": kind})


def _list(
    response: Response,
    db: Session,
    filters: LedgerEntryFilters,
    skip: int,
    limit: int,
    order_by: str | None,
) -> list[LedgerEntryResponse]:
    service = LedgerService(db)
    response.headers["X-Total-Count"] = str(service.repo.count(filters))
    return service.list_responses(filters, skip=skip, limit=limit, order_by=order_by)


@router.get(
    "/",
    response_model=list[LedgerEntryResponse],
    summary="List commissions",
    responses=_UNAUTHORIZED,
)
async def list_commissions(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    filters: LedgerEntryFilters = Depends(ledger_filters),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[LedgerEntryResponse]:
    """List commission entries with their closing state."""
    return _list(
        response, db, _with_kind(filters, LedgerEntryKind.COMMISSION), skip, limit, order_by
    )


@router.get(
    "/operators/",
    response_model=list[LedgerEntryResponse],
    summary="List operator payments",
    responses=_UNAUTHORIZED,
)
async def list_operator_payments(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    filters: LedgerEntryFilters = Depends(ledger_filters),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[LedgerEntryResponse]:
    """List operator payment entries with their closing state."""
    return _list(
        response, db, _with_kind(filters, LedgerEntryKind.OPERATOR_PAYMENT), skip, limit, order_by
    )


@router.post(
    "/entries/",
    response_model=LedgerEntryResponse,
    status_code=201,
    summary="Register a ledger entry",
    responses={
        **_UNAUTHORIZED,
        400: {"description": "Unsupported currency"},
        422: {"description": "Validation error"},
    },
)
async def register_entry(
    data: LedgerEntryCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> LedgerEntryResponse:
    """Register a commission or operator payment handed over by the reservation system."""
    entry = LedgerService(db).register(data, actor)
    return LedgerEntryResponse.from_entry(entry)


@router.get(
    "/entries/{entry_id}",
    response_model=LedgerEntryResponse,
    summary="Get ledger entry",
    responses={**_UNAUTHORIZED, 404: {"description": "Ledger entry not found"}},
)
async def get_entry(
    entry_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> LedgerEntryResponse:
    return LedgerService(db).get_response(entry_id)


@router.post(
    "/entries/{entry_id}/status",
    response_model=LedgerEntryResponse,
    summary="Change ledger entry status",
    responses={
        **_UNAUTHORIZED,
        400: {"description": "Entry is cancelled"},
        404: {"description": "Ledger entry not found"},
        409: {"description": "Entry is part of an active closing"},
    },
)
async def update_entry_status(
    entry_id: UUID,
    data: LedgerEntryStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> LedgerEntryResponse:
    service = LedgerService(db)
    service.update_status(entry_id, data.status, actor, payment_date=data.payment_date)
    return service.get_response(entry_id)


@router.post(
    "/{entry_id}/approve/",
    response_model=LedgerEntryResponse,
    summary="Approve a ledger entry",
    responses={
        **_UNAUTHORIZED,
        404: {"description": "Ledger entry not found"},
        409: {"description": "Entry is part of an active closing"},
    },
)
async def approve_entry(
    entry_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> LedgerEntryResponse:
    service = LedgerService(db)
    service.approve(entry_id, actor)
    return service.get_response(entry_id)


@router.post(
    "/{entry_id}/pay/",
    response_model=LedgerEntryResponse,
    summary="Mark a ledger entry as paid",
    responses={
        **_UNAUTHORIZED,
        404: {"description": "Ledger entry not found"},
        409: {"description": "Entry is part of an active closing"},
    },
)
async def pay_entry(
    entry_id: UUID,
    payment_date: date | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> LedgerEntryResponse:
    service = LedgerService(db)
    service.pay(entry_id, actor, payment_date=payment_date)
    return service.get_response(entry_id)


@router.get(
    "/summary/",
    response_model=list[LedgerSummary],
    summary="Commission totals per currency",
    responses=_UNAUTHORIZED,
)
async def commission_summary(
    filters: LedgerEntryFilters = Depends(ledger_filters),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[LedgerSummary]:
    return LedgerService(db).summarize(_with_kind(filters, LedgerEntryKind.COMMISSION))


@router.get(
    "/operators/summary/",
    response_model=list[LedgerSummary],
    summary="Operator payment totals per currency",
    responses=_UNAUTHORIZED,
)
async def operator_summary(
    filters: LedgerEntryFilters = Depends(ledger_filters),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[LedgerSummary]:
    return LedgerService(db).summarize(_with_kind(filters, LedgerEntryKind.OPERATOR_PAYMENT))


@router.get(
    "/unique-values/",
    response_model=LedgerUniqueValues,
    summary="Filter options for commissions",
    responses=_UNAUTHORIZED,
)
async def commission_unique_values(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> LedgerUniqueValues:
    return LedgerService(db).unique_values(LedgerEntryKind.COMMISSION)


@router.get(
    "/operators/unique-values/",
    response_model=LedgerUniqueValues,
    summary="Filter options for operator payments",
    responses=_UNAUTHORIZED,
)
async def operator_unique_values(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> LedgerUniqueValues:
    return LedgerService(db).unique_values(LedgerEntryKind.OPERATOR_PAYMENT)


@router.get(
    "/closure-status/{reservation_id}/",
    response_model=ClosureStatusResponse,
    summary="Closing state of every entry of a reservation",
    responses=_UNAUTHORIZED,
)
async def closure_status(
    reservation_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ClosureStatusResponse:
    return LedgerService(db).closure_status(reservation_id)


@router.get(
    "/export/",
    summary="Export ledger entries as CSV",
    responses={**_UNAUTHORIZED, 200: {"content": {"text/csv": {}}}},
)
async def export_entries(
    kind: LedgerEntryKind = LedgerEntryKind.COMMISSION,
    filters: LedgerEntryFilters = Depends(ledger_filters),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> Response:
    """Download the filtered list as a CSV file."""
    content, _ = ExportService(db).generate_csv(_with_kind(filters, kind))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )
