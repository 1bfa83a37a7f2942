"""Decimal money utilities.

All amounts are Decimal quantized to 2 decimal places and travel over the wire
and through the cache as strings ("1234.50"). No float anywhere.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_amount(value: str | int | float | Decimal) -> Decimal:
    """Parse a user-supplied amount into a 2dp Decimal.

    Floats go through ``str`` first so 0.1 stays 0.10 rather than its binary expansion.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Invalid amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    """Decimal -> '1234.50'."""
    return f"{amount.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP):f}"
