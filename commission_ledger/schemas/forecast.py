from decimal import Decimal

from pydantic import BaseModel


class ForecastBucket(BaseModel):
    currency: str
    amount: Decimal
    count: int


class ForecastResponse(BaseModel):
    expected_income: list[ForecastBucket]
    forecast_liabilities: list[ForecastBucket]
    net_forecast: list[ForecastBucket]
