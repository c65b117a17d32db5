"""Forecast of open commissions (income) against open operator payments (liabilities)."""

from decimal import Decimal

from sqlalchemy import func as sa_func
from sqlalchemy.orm import Session

from commission_ledger.models.currency import quantize_amount
from commission_ledger.models.ledger_entry import LedgerEntry, LedgerEntryKind, LedgerEntryStatus
from commission_ledger.repositories.ledger_entry_repository import in_active_closing
from commission_ledger.schemas.forecast import ForecastBucket, ForecastResponse


class ForecastService:
    def __init__(self, db: Session):
        self.db = db

    def _open_totals(self, kind: LedgerEntryKind) -> dict[str, tuple[Decimal, int]]:
        amount_column = (
            LedgerEntry.computed_amount
            if kind == LedgerEntryKind.COMMISSION
            else LedgerEntry.cost_amount
        )
        rows = (
            self.db.query(
                LedgerEntry.currency,
                sa_func.coalesce(sa_func.sum(amount_column), 0),
                sa_func.count(LedgerEntry.id),
            )
            .filter(
                LedgerEntry.kind == kind.value,
                LedgerEntry.status != LedgerEntryStatus.CANCELLED.value,
                ~in_active_closing(),
            )
            .group_by(LedgerEntry.currency)
            .all()
        )
        return {
            currency: (quantize_amount(amount, currency), count) for currency, amount, count in rows
        }

    def forecast(self) -> ForecastResponse:
        income = self._open_totals(LedgerEntryKind.COMMISSION)
        liabilities = self._open_totals(LedgerEntryKind.OPERATOR_PAYMENT)

        net: list[ForecastBucket] = []
        for currency in sorted(set(income) | set(liabilities)):
            income_amount, income_count = income.get(currency, (Decimal("0"), 0))
            liability_amount, liability_count = liabilities.get(currency, (Decimal("0"), 0))
            net.append(
                ForecastBucket(
                    currency=currency,
                    amount=quantize_amount(income_amount - liability_amount, currency),
                    count=income_count + liability_count,
                )
            )

        return ForecastResponse(
            expected_income=_buckets(income),
            forecast_liabilities=_buckets(liabilities),
            net_forecast=net,
        )


def _buckets(totals: dict[str, tuple[Decimal, int]]) -> list[ForecastBucket]:
    return [
        ForecastBucket(currency=currency, amount=amount, count=count)
        for currency, (amount, count) in sorted(totals.items())
    ]
