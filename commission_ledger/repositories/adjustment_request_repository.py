"""Repository for AdjustmentRequest rows."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from commission_ledger.models.adjustment_request import (
    AdjustmentRequest,
    AdjustmentStatus,
    AdjustmentType,
)


class AdjustmentRequestRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        item_id: UUID,
        item_type: str,
        original_amount: Decimal,
        new_amount: Decimal,
        adjustment_type: AdjustmentType,
        reason: str,
        requested_by: str,
        requested_by_name: str | None = None,
    ) -> AdjustmentRequest:
        request = AdjustmentRequest(
            item_id=item_id,
            item_type=item_type,
            original_amount=original_amount,
            new_amount=new_amount,
            adjustment_amount=new_amount - original_amount,
            adjustment_type=adjustment_type.value,
            reason=reason,
            requested_by=requested_by,
            requested_by_name=requested_by_name,
            status=AdjustmentStatus.PENDING.value,
        )
        self.db.add(request)
        self.db.flush()
        return request

    def get_by_id(self, request_id: UUID) -> AdjustmentRequest | None:
        return (
            self.db.query(AdjustmentRequest).filter(AdjustmentRequest.id == request_id).first()
        )

    def lock(self, request_id: UUID) -> AdjustmentRequest | None:
        return (
            self.db.query(AdjustmentRequest)
            .filter(AdjustmentRequest.id == request_id)
            .with_for_update()
            .first()
        )

    def get_pending(self, skip: int = 0, limit: int = 100) -> list[AdjustmentRequest]:
        """Pending requests, oldest first."""
        return (
            self.db.query(AdjustmentRequest)
            .filter(AdjustmentRequest.status == AdjustmentStatus.PENDING.value)
            .order_by(AdjustmentRequest.created_at.asc(), AdjustmentRequest.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_item(self, item_id: UUID) -> list[AdjustmentRequest]:
        return (
            self.db.query(AdjustmentRequest)
            .filter(AdjustmentRequest.item_id == item_id)
            .order_by(AdjustmentRequest.created_at.desc())
            .all()
        )

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        status: AdjustmentStatus | None = None,
        item_id: UUID | None = None,
    ) -> list[AdjustmentRequest]:
        query = self.db.query(AdjustmentRequest)
        if status is not None:
            query = query.filter(AdjustmentRequest.status == status.value)
        if item_id is not None:
            query = query.filter(AdjustmentRequest.item_id == item_id)
        return (
            query.order_by(AdjustmentRequest.created_at.desc(), AdjustmentRequest.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def mark_reviewed(
        self,
        request: AdjustmentRequest,
        status: AdjustmentStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        review_reason: str | None = None,
    ) -> AdjustmentRequest:
        request.status = status.value  # type: ignore[assignment]
        request.reviewed_by = reviewed_by  # type: ignore[assignment]
        request.reviewed_at = reviewed_at  # type: ignore[assignment]
        request.review_reason = review_reason  # type: ignore[assignment]
        self.db.flush()
        return request
