"""Decimal money helpers.

Amounts are carried as Decimal in full precision. Rounding to the currency's
minor unit (2 places) happens only when formatting for display or export.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

ZERO = Decimal("0")
_CENTS = Decimal("0.01")

# Amounts at or above this are out of range for a repair order
MAX_AMOUNT = Decimal("1e13")


def coerce_amount(value: Any) -> Decimal:
    """
    Coerce a loosely-typed numeric value to Decimal.

    Accepts Decimal, int, float and numeric strings (surrounding whitespace
    ignored). Missing, empty, non-numeric, non-finite and out-of-range
    (absolute value >= MAX_AMOUNT) values become 0.
    Never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # str() keeps the short repr: 0.1 -> Decimal("0.1"), not the binary expansion
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not result.is_finite() or result.copy_abs() >= MAX_AMOUNT:
        return ZERO
    return result


def quantize_money(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, half up."""
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    """Format an amount for display: 130 -> '130.00'."""
    return f"{quantize_money(amount):.2f}"
