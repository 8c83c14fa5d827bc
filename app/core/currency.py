"""
Currency formatting utilities for EUR, RSD and CHF.
Amounts are integers in the smallest currency unit (cents, paras, rappen).
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Iterable, List, Tuple

from app.models import Currency

Q2 = Decimal("0.01")

SUPPORTED_CURRENCIES: List[Dict[str, str]] = [
    {"value": Currency.EUR.value, "label": "EUR (€)", "symbol": "€"},
    {"value": Currency.RSD.value, "label": "RSD (дин)", "symbol": "дин"},
    {"value": Currency.CHF.value, "label": "CHF (Fr)", "symbol": "Fr"},
]

CURRENCY_NAMES = {
    Currency.EUR.value: "Euro",
    Currency.RSD.value: "Serbian Dinar",
    Currency.CHF.value: "Swiss Franc",
}


def to_display_amount(units: int) -> Decimal:
    return (Decimal(units) / 100).quantize(Q2)


def to_smallest_unit(display_amount) -> int:
    """
    Convert a display amount ("12.34", 12.34) to smallest units.
    Invalid or negative input yields 0.
    """
    try:
        value = Decimal(str(display_amount).replace(",", "."))
    except (InvalidOperation, ValueError):
        return 0
    if not value.is_finite() or value < 0:
        return 0
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def get_currency_symbol(currency: str) -> str:
    for entry in SUPPORTED_CURRENCIES:
        if entry["value"] == currency:
            return entry["symbol"]
    return "€"


def get_currency_name(currency: str) -> str:
    return CURRENCY_NAMES.get(currency, CURRENCY_NAMES[Currency.EUR.value])


def format_currency(units: int, currency: str) -> str:
    amount = f"{to_display_amount(units):.2f}"
    symbol = get_currency_symbol(currency)
    if currency == Currency.RSD.value:
        return f"{amount} {symbol}"
    if currency == Currency.CHF.value:
        return f"{symbol} {amount}"
    return f"{symbol}{amount}"


def calculate_multi_currency_total(items: Iterable[Tuple[int, str]]) -> Dict[str, int]:
    """Sum (amount, currency) pairs per currency"""
    totals: Dict[str, int] = {}
    for amount, currency in items:
        totals[currency] = totals.get(currency, 0) + amount
    return totals


def format_multi_currency_total(totals: Dict[str, int]) -> str:
    """
    Format per-currency totals as "€10.00 + Fr 2.00".
    Non-zero totals are listed by descending magnitude.
    """
    if not totals:
        return format_currency(0, Currency.EUR.value)
    if len(totals) == 1:
        currency, amount = next(iter(totals.items()))
        return format_currency(amount, currency)

    ordered = sorted(
        (c for c, amount in totals.items() if amount != 0),
        key=lambda c: (-abs(totals[c]), c),
    )
    if not ordered:
        return format_currency(0, Currency.EUR.value)
    return " + ".join(format_currency(totals[c], c) for c in ordered)
