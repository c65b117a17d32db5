"""Adjustment request endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from commission_ledger.core.auth import Actor, get_current_actor
from commission_ledger.core.database import get_db
from commission_ledger.models.adjustment_request import AdjustmentRequest, AdjustmentStatus
from commission_ledger.schemas.adjustment import (
    AdjustmentProposeRequest,
    AdjustmentRejectRequest,
    AdjustmentResponse,
)
from commission_ledger.services.adjustment_service import AdjustmentService

router = APIRouter()


@router.post(
    "/adjustments/request/",
    response_model=AdjustmentResponse,
    status_code=201,
    summary="Request an amount adjustment",
    responses={
        400: {"description": "Reason missing, negative amount or amount unchanged"},
        401: {"description": "Unauthorized - missing or invalid bearer token"},
        404: {"description": "Ledger entry not found"},
    },
)
async def request_adjustment(
    data: AdjustmentProposeRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> AdjustmentRequest:
    return AdjustmentService(db).propose(data.item_id, data.new_amount, data.reason, actor)


@router.get(
    "/adjustments/",
    response_model=list[AdjustmentResponse],
    summary="List adjustment requests",
    responses={401: {"description": "Unauthorized - missing or invalid bearer token"}},
)
async def list_adjustments(
    status: AdjustmentStatus | None = Query(default=None),
    item_id: UUID | None = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[AdjustmentRequest]:
    return AdjustmentService(db).list(status=status, item_id=item_id, skip=skip, limit=limit)


@router.get(
    "/adjustments/pending/",
    response_model=list[AdjustmentResponse],
    summary="List pending adjustment requests",
    responses={401: {"description": "Unauthorized - missing or invalid bearer token"}},
)
async def list_pending_adjustments(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[AdjustmentRequest]:
    return AdjustmentService(db).list_pending(skip=skip, limit=limit)


@router.get(
    "/adjustments/item/{item_id}/",
    response_model=list[AdjustmentResponse],
    summary="Adjustment history of a ledger entry",
    responses={401: {"description": "Unauthorized - missing or invalid bearer token"}},
)
async def list_item_adjustments(
    item_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[AdjustmentRequest]:
    return AdjustmentService(db).list_for_item(item_id)


@router.post(
    "/adjustments/{request_id}/approve/",
    response_model=AdjustmentResponse,
    summary="Approve an adjustment request",
    responses={
        401: {"description": "Unauthorized - missing or invalid bearer token"},
        403: {"description": "Only admins can review adjustments"},
        404: {"description": "Adjustment request not found"},
        409: {"description": "Request already reviewed or entry is closed"},
    },
)
async def approve_adjustment(
    request_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> AdjustmentRequest:
    return AdjustmentService(db).approve(request_id, actor)


@router.post(
    "/adjustments/{request_id}/reject/",
    response_model=AdjustmentResponse,
    summary="Reject an adjustment request",
    responses={
        400: {"description": "Reason missing"},
        401: {"description": "Unauthorized - missing or invalid bearer token"},
        403: {"description": "Only admins can review adjustments"},
        404: {"description": "Adjustment request not found"},
        409: {"description": "Request already reviewed"},
    },
)
async def reject_adjustment(
    request_id: UUID,
    data: AdjustmentRejectRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> AdjustmentRequest:
    return AdjustmentService(db).reject(request_id, data.reason, actor)
