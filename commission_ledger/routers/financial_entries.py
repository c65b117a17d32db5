"""Payables and receivables registered by closings."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from commission_ledger.core.auth import Actor, get_current_actor
from commission_ledger.core.database import get_db
from commission_ledger.models.financial_entry import FinancialEntry, FinancialEntryDirection
from commission_ledger.repositories.financial_entry_repository import FinancialEntryRepository
from commission_ledger.schemas.financial_entry import FinancialEntryResponse

router = APIRouter()


@router.get(
    "/",
    response_model=list[FinancialEntryResponse],
    summary="List financial entries",
    responses={401: {"description": "Unauthorized - missing or invalid bearer token"}},
)
async def list_financial_entries(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    direction: FinancialEntryDirection | None = None,
    currency: str | None = None,
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[FinancialEntry]:
    return FinancialEntryRepository(db).get_all(
        skip=skip,
        limit=limit,
        direction=direction,
        currency=currency,
        order_by=order_by,
    )
