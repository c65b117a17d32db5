"""Currency codes used by the back office and their minor-unit precision."""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class CurrencyCode(str, Enum):
    USD = "USD"
    EUR = "EUR"
    BRL = "BRL"
    ARS = "ARS"
    CLP = "CLP"
    GBP = "GBP"
    PEN = "PEN"
    COP = "COP"
    MXN = "MXN"
    UYU = "UYU"


# Digits after the decimal point; anything not listed uses 2.
MINOR_UNITS: dict[str, int] = {
    CurrencyCode.CLP.value: 0,
}


def minor_unit_exponent(currency: str) -> Decimal:
    """Return the quantum for a currency, e.g. Decimal("0.01") for USD."""
    digits = MINOR_UNITS.get(currency.upper(), 2)
    return Decimal(1).scaleb(-digits)


def quantize_amount(amount: Decimal | int | str, currency: str) -> Decimal:
    """Round an amount half-up to the currency's minor unit."""
    return Decimal(str(amount)).quantize(minor_unit_exponent(currency), rounding=ROUND_HALF_UP)
