# PATH: core/math.py
"""
core/math.py - Mathematical utilities.

CRITICAL: No float allowed in prices, reserves or USD amounts.
All on-chain amounts are int (raw units) or Decimal (scaled).
"""

from contextlib import contextmanager
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_EVEN, InvalidOperation, localcontext
from typing import Iterator

from core.constants import (
    DECIMAL_ZERO,
    ErrorCode,
    MAX_TOKEN_DECIMALS,
    PRICING_PRECISION,
)
from core.exceptions import ValidationError


# =============================================================================
# ARITHMETIC CONTEXT
# =============================================================================

@contextmanager
def pricing_context() -> Iterator[None]:
    """
    Run Decimal arithmetic with the indexer's precision.

    34 significant digits, banker's rounding. Other indexers computing the
    same figures use decimal128, so results must not depend on the caller's
    ambient decimal context.
    """
    with localcontext() as ctx:
        ctx.prec = PRICING_PRECISION
        ctx.rounding = ROUND_HALF_EVEN
        yield


# =============================================================================
# SAFE CONVERSIONS (NO FLOAT)
# =============================================================================

def safe_decimal(value: int | str | Decimal) -> Decimal:
    """
    Safely convert value to Decimal.

    Raises ValidationError if float is passed or conversion fails.
    """
    if isinstance(value, float):
        raise ValidationError(
            "Float values are not allowed. Use int, str, or Decimal.",
            {"value": value, "type": type(value).__name__},
            code=ErrorCode.VALIDATION_FLOAT_NOT_ALLOWED,
        )
    if isinstance(value, bool):
        raise ValidationError(
            f"Cannot convert to Decimal: {value}",
            {"value": value, "type": "bool"},
        )

    try:
        result = Decimal(value)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValidationError(
            f"Cannot convert to Decimal: {value}",
            {"value": value, "type": type(value).__name__, "error": str(e)},
        )

    if not result.is_finite():
        raise ValidationError(
            f"Non-finite Decimal not allowed: {value}",
            {"value": str(value)},
        )
    return result


def safe_int(value: int | str | Decimal) -> int:
    """
    Safely convert value to int.

    Raises ValidationError if float is passed or conversion fails.
    """
    if isinstance(value, float):
        raise ValidationError(
            "Float values are not allowed. Use int, str, or Decimal.",
            {"value": value, "type": type(value).__name__},
            code=ErrorCode.VALIDATION_FLOAT_NOT_ALLOWED,
        )

    try:
        if isinstance(value, Decimal):
            return int(value.to_integral_value(rounding=ROUND_DOWN))
        return int(value)
    except (ValueError, TypeError, InvalidOperation) as e:
        raise ValidationError(
            f"Cannot convert to int: {value}",
            {"value": value, "type": type(value).__name__, "error": str(e)},
        )


# =============================================================================
# TOKEN AMOUNT CONVERSIONS
# =============================================================================

def _check_decimals(decimals: int) -> None:
    if decimals < 0 or decimals > MAX_TOKEN_DECIMALS:
        raise ValidationError(
            f"Invalid decimals: {decimals}",
            {"decimals": decimals},
            code=ErrorCode.VALIDATION_INVALID_DECIMALS,
        )


def raw_to_decimal(raw: int, decimals: int) -> Decimal:
    """
    Convert a raw on-chain integer amount to a scaled Decimal.

    Exact: scaleb only moves the exponent.

    Example: raw_to_decimal(1500000, 6) -> Decimal('1.500000')  # 1.5 USDC
    """
    _check_decimals(decimals)
    with localcontext() as ctx:
        ctx.prec = len(str(abs(raw))) + MAX_TOKEN_DECIMALS
        return Decimal(raw).scaleb(-decimals)


# =============================================================================
# SPOT PRICES
# =============================================================================

def spot_prices(reserve0: Decimal, reserve1: Decimal) -> tuple[Decimal, Decimal]:
    """
    Spot prices of a pair from its reserves.

    Returns (token0_price, token1_price) where token0_price is token0 per
    one token1 (for a USDC/WFTM pair: USD per FTM). Both are zero when
    either reserve is zero.
    """
    if reserve0 == DECIMAL_ZERO or reserve1 == DECIMAL_ZERO:
        return DECIMAL_ZERO, DECIMAL_ZERO

    with pricing_context():
        return reserve0 / reserve1, reserve1 / reserve0
