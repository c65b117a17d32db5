"""Adjustment request schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

# Reason and amount checks live in AdjustmentService so that the API and
# direct callers fail the same way.


class AdjustmentProposeRequest(BaseModel):
    item_id: UUID
    new_amount: Decimal
    reason: str = ""


class AdjustmentRejectRequest(BaseModel):
    reason: str = ""


class AdjustmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    item_id: UUID
    item_type: str
    original_amount: Decimal
    new_amount: Decimal
    adjustment_amount: Decimal
    adjustment_type: str
    reason: str
    requested_by: str
    requested_by_name: str | None = None
    status: str
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_reason: str | None = None
    created_at: datetime
