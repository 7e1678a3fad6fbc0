"""
pricing/tracking.py - Tracked volume and liquidity.

Decides how much of a trade's or a pool's USD value counts toward global
statistics. Only whitelisted tokens are trusted as price references:

  volume     both whitelisted -> average of both sides
             one whitelisted  -> that side
             neither          -> 0
             fewer than min_lp_count LPs and a reserve below
             min_usd_new_pairs -> 0 (checked first)

  liquidity  both whitelisted -> sum of both sides
             one whitelisted  -> that side * 2
             neither          -> 0
"""

from decimal import Decimal

from core.constants import DECIMAL_TWO, DECIMAL_ZERO
from core.logging import get_logger
from core.math import pricing_context
from core.models import Bundle, Pair, Token
from pricing.config import PricingConfig

logger = get_logger("pricer.tracking")


def usd_price(token: Token, bundle: Bundle) -> Decimal:
    """USD price of token: derived base price * base currency USD price."""
    with pricing_context():
        return token.derived_base_price * bundle.base_price_usd


def _below_new_pair_threshold(
    token0: Token,
    token1: Token,
    pair: Pair,
    price0: Decimal,
    price1: Decimal,
    config: PricingConfig,
) -> bool:
    """Low-LP guard: True if the pair's trusted reserves are too thin to count."""
    listed0 = config.is_whitelisted(token0.address)
    listed1 = config.is_whitelisted(token1.address)

    with pricing_context():
        reserve0_usd = pair.reserve0 * price0
        reserve1_usd = pair.reserve1 * price1

        if listed0 and listed1:
            return reserve0_usd + reserve1_usd < config.min_usd_new_pairs
        if listed0:
            return reserve0_usd * DECIMAL_TWO < config.min_usd_new_pairs
        if listed1:
            return reserve1_usd * DECIMAL_TWO < config.min_usd_new_pairs
    return False


def tracked_volume_usd(
    amount0: Decimal,
    token0: Token,
    amount1: Decimal,
    token1: Token,
    pair: Pair,
    bundle: Bundle,
    config: PricingConfig,
) -> Decimal:
    """
    USD value of a trade that counts toward global volume.

    Args:
        amount0: Amount of token0 traded
        token0: Pair's token0
        amount1: Amount of token1 traded
        token1: Pair's token1
        pair: Pair the trade happened on (reserves, LP count)
        bundle: Base currency USD price snapshot
        config: Whitelist and thresholds

    Returns:
        Tracked USD volume, 0 when neither side is trusted or the pair is
        a thin new pair.
    """
    price0 = usd_price(token0, bundle)
    price1 = usd_price(token1, bundle)

    if pair.liquidity_provider_count < config.min_lp_count:
        if _below_new_pair_threshold(token0, token1, pair, price0, price1, config):
            logger.debug(
                "Volume not tracked: thin pair with few LPs",
                extra={
                    "context": {
                        "pair": pair.address,
                        "liquidity_provider_count": pair.liquidity_provider_count,
                    }
                },
            )
            return DECIMAL_ZERO

    listed0 = config.is_whitelisted(token0.address)
    listed1 = config.is_whitelisted(token1.address)

    with pricing_context():
        # both are whitelist tokens, take average of both amounts
        if listed0 and listed1:
            return (amount0 * price0 + amount1 * price1) / DECIMAL_TWO

        # take full value of the whitelisted token amount
        if listed0:
            return amount0 * price0
        if listed1:
            return amount1 * price1

    return DECIMAL_ZERO


def tracked_liquidity_usd(
    amount0: Decimal,
    token0: Token,
    amount1: Decimal,
    token1: Token,
    bundle: Bundle,
    config: PricingConfig,
) -> Decimal:
    """
    USD value of reserves that counts toward global liquidity.

    No LP-count guard. A single trusted side is doubled as a proxy for the
    whole (roughly balanced) pool.
    """
    price0 = usd_price(token0, bundle)
    price1 = usd_price(token1, bundle)

    listed0 = config.is_whitelisted(token0.address)
    listed1 = config.is_whitelisted(token1.address)

    with pricing_context():
        if listed0 and listed1:
            return amount0 * price0 + amount1 * price1

        # take double value of the whitelisted token amount
        if listed0:
            return amount0 * price0 * DECIMAL_TWO
        if listed1:
            return amount1 * price1 * DECIMAL_TWO

    return DECIMAL_ZERO
