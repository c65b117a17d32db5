"""Forecast endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from commission_ledger.core.auth import Actor, get_current_actor
from commission_ledger.core.database import get_db
from commission_ledger.schemas.forecast import ForecastResponse
from commission_ledger.services.forecast_service import ForecastService

router = APIRouter()


@router.get(
    "/forecast/",
    response_model=ForecastResponse,
    summary="Expected income and liabilities per currency",
    responses={401: {"description": "Unauthorized - missing or invalid bearer token"}},
)
async def get_forecast(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ForecastResponse:
    """Roll up open entries: commissions as income, operator payments as liabilities."""
    return ForecastService(db).forecast()
