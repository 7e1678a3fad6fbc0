# PATH: core/format_money.py
"""
Safe money formatting utilities for PRICER.

No float money. All values are str or Decimal; this module only renders
them for humans. Persisted values keep full precision via str(Decimal).
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Union

Numeric = Union[str, Decimal, int, None]


def format_money(value: Numeric, decimals: int = 6) -> str:
    """
    Safely format a money value to string with specified decimal places.

    Handles:
    - str: parse as Decimal, format
    - Decimal: format directly
    - int: convert to Decimal, format
    - None / empty string: zero

    Uses ROUND_HALF_UP (0.005 -> 0.01 with 2 decimals).

    Example:
        >>> format_money("123.45")
        '123.450000'
        >>> format_money(Decimal("0.001"), 2)
        '0.00'
        >>> format_money(None)
        '0.000000'
    """
    zero = f"0.{'0' * decimals}" if decimals > 0 else "0"
    if value is None:
        return zero

    try:
        if isinstance(value, str):
            if not value.strip():
                return zero
            dec_value = Decimal(value)
        elif isinstance(value, bool):
            # bool before int (bool is a subclass of int)
            dec_value = Decimal(1 if value else 0)
        else:
            dec_value = Decimal(value)

        with localcontext() as ctx:
            ctx.prec = 80
            quantize_str = "0." + "0" * decimals if decimals > 0 else "0"
            rounded = dec_value.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        return zero

    return f"{rounded:.{decimals}f}"


def format_usd(value: Numeric) -> str:
    """Format a USD amount for display, e.g. "$1234.57"."""
    return f"${format_money(value, decimals=2)}"


def format_price(value: Numeric) -> str:
    """Format a derived price with full on-chain precision (18 places)."""
    return format_money(value, decimals=18)
