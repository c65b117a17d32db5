from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class FinancialEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    direction: str
    closing_id: UUID
    counterparty: str
    description: str | None = None
    amount: Decimal
    currency: str
    status: str
    created_at: datetime
