# warehouse_ledger/utils/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from warehouse_ledger.constants import CENT

ZERO = Decimal("0.00")


def to_money(value: Any, field_name: str = "amount") -> Decimal:
    """Converts a number or numeric string to a Decimal rounded to cents."""
    if value is None or value == "":
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"{field_name} must be numeric, got {value!r}.")
    if not amount.is_finite():
        raise ValueError(f"{field_name} must be a finite number.")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return to_money(amount * Decimal(str(percent)) / Decimal("100"))


def format_currency(amount: Decimal, currency: str = "USD") -> str:
    symbol = "$" if currency == "USD" else f"{currency} "
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(to_money(amount)):,.2f}"
