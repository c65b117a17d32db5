"""Closing endpoints: close, inspect, undo and download invoices."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from commission_ledger.core.auth import Actor, get_current_actor
from commission_ledger.core.database import get_db
from commission_ledger.models.closing import Closing, ClosingType
from commission_ledger.schemas.closing import (
    CloseCommissionsRequest,
    CloseOperatorPaymentsRequest,
    CloseResult,
    ClosingDetailResponse,
    ClosingLineItemResponse,
    ClosingResponse,
    UndoClosingRequest,
    UndoClosingResponse,
)
from commission_ledger.services.closing_service import ClosingService
from commission_ledger.services.pdf_service import PdfService
from commission_ledger.services.reversal_service import ReversalService

router = APIRouter()

_CLOSE_RESPONSES = {
    400: {"description": "Invalid selection, mixed currencies or entry not closable"},
    401: {"description": "Unauthorized - missing or invalid bearer token"},
    403: {"description": "Amount overrides require an admin"},
    409: {"description": "An entry is already part of an active closing"},
}


def _close_result(service: ClosingService, closing: Closing) -> CloseResult:
    financial_entry = service.financial_entry_for(closing.id)  # type: ignore[arg-type]
    assert financial_entry is not None
    return CloseResult(
        closing=service.to_responses([closing])[0],
        financial_entry_id=financial_entry.id,  # type: ignore[arg-type]
        message=(
            f"Closing {closing.invoice_number} created with {closing.item_count} "
            f"item(s) totalling {closing.total_amount} {closing.currency}"
        ),
    )


@router.post(
    "/close/",
    response_model=CloseResult,
    status_code=201,
    summary="Close commissions",
    responses=_CLOSE_RESPONSES,
)
async def close_commissions(
    data: CloseCommissionsRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> CloseResult:
    """Seal salesperson or agency commissions into a numbered closing."""
    service = ClosingService(db)
    closing = service.close(
        data.commission_ids,
        ClosingType(data.closing_type.value),
        data.recipient_name,
        data.period_start,
        data.period_end,
        data.currency,
        data.adjustments,
        actor,
        recipient_id=data.recipient_id,
    )
    return _close_result(service, closing)


@router.post(
    "/operators/close/",
    response_model=CloseResult,
    status_code=201,
    summary="Close operator payments",
    responses=_CLOSE_RESPONSES,
)
async def close_operator_payments(
    data: CloseOperatorPaymentsRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> CloseResult:
    """Seal concluded operator payments into a numbered closing."""
    service = ClosingService(db)
    closing = service.close(
        data.payment_ids,
        ClosingType.OPERATOR,
        data.operator_name,
        data.period_start,
        data.period_end,
        data.currency,
        data.adjustments,
        actor,
        recipient_id=data.operator_id,
    )
    return _close_result(service, closing)


@router.get(
    "/closings/",
    response_model=list[ClosingResponse],
    summary="List closings",
    responses={401: {"description": "Unauthorized - missing or invalid bearer token"}},
)
async def list_closings(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    closing_type: ClosingType | None = None,
    is_active: bool | None = None,
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[ClosingResponse]:
    service = ClosingService(db)
    closings = service.list(
        closing_type=closing_type,
        is_active=is_active,
        skip=skip,
        limit=limit,
        order_by=order_by,
    )
    return service.to_responses(closings)


@router.get(
    "/closings/{closing_id}/",
    response_model=ClosingDetailResponse,
    summary="Get closing with line items",
    responses={
        401: {"description": "Unauthorized - missing or invalid bearer token"},
        404: {"description": "Closing not found"},
    },
)
async def get_closing(
    closing_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ClosingDetailResponse:
    service = ClosingService(db)
    closing, line_items = service.get_detail(closing_id)
    response = service.to_responses([closing])[0]
    return ClosingDetailResponse(
        **response.model_dump(),
        items=[ClosingLineItemResponse.model_validate(item) for item in line_items],
    )


@router.post(
    "/closings/{closing_id}/undo/",
    response_model=UndoClosingResponse,
    summary="Undo a closing",
    responses={
        400: {"description": "Reason missing or closing already undone"},
        401: {"description": "Unauthorized - missing or invalid bearer token"},
        403: {"description": "Only admins can undo a closing"},
        404: {"description": "Closing not found"},
    },
)
async def undo_closing(
    closing_id: UUID,
    data: UndoClosingRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> UndoClosingResponse:
    """Reverse a closing and reopen its entries."""
    record = ReversalService(db).undo(closing_id, data.reason, actor)
    return UndoClosingResponse(
        message=f"Closing undone, {record.items_reopened} item(s) reopened",
        items_reopened=record.items_reopened,  # type: ignore[arg-type]
        reversal_id=record.id,  # type: ignore[arg-type]
    )


@router.get(
    "/closings/{closing_id}/invoice/",
    summary="Download closing invoice PDF",
    responses={
        200: {"content": {"application/pdf": {}}},
        401: {"description": "Unauthorized - missing or invalid bearer token"},
        404: {"description": "Closing not found"},
    },
)
async def download_closing_invoice(
    closing_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> Response:
    closing, line_items = ClosingService(db).get_detail(closing_id)
    pdf_bytes = PdfService().generate_closing_pdf(closing, line_items)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="invoice_{closing.invoice_number}.pdf"'
        },
    )
