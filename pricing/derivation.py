"""
pricing/derivation.py - Base-currency price discovery.

PRICE DISCOVERY CONTRACT
========================
derive_price_in_base(token) returns the token's price in base currency:

1. The base token itself is worth exactly 1.
2. Otherwise walk the whitelist in declared order. For each entry, look up
   the (token, entry, variant) pair in the registry and load it from the
   store. The first pair whose reserve_base is strictly above
   min_liquidity_base prices the token as

       counterparty spot price * counterparty derived_base_price

3. Nothing qualifies -> 0.

The first qualifying entry wins; there is no best-price comparison and no
routing through more than one whitelisted token. Missing pairs and missing
entities are skipped, never raised.
========================
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from core.constants import DECIMAL_ONE, DECIMAL_ZERO, PriceSide
from core.logging import get_logger
from core.math import pricing_context
from core.models import Token
from core.validators import is_zero_address
from data.store import EntityStore
from discovery.registry import PairRegistry
from pricing.config import PricingConfig

logger = get_logger("pricer.derivation")


@dataclass(frozen=True)
class PriceSource:
    """Pair that produced a derived price."""
    whitelist_entry: str
    pair_address: str
    side: PriceSide
    spot_price: Decimal
    counterparty_price: Decimal
    price: Decimal

    def to_dict(self) -> dict:
        return {
            "whitelist_entry": self.whitelist_entry,
            "pair_address": self.pair_address,
            "side": self.side.name.lower(),
            "spot_price": str(self.spot_price),
            "counterparty_price": str(self.counterparty_price),
            "price": str(self.price),
        }


def _skip(token: Token, entry: str, reason: str, **context) -> None:
    logger.debug(
        "Whitelist entry skipped",
        extra={
            "context": {
                "token": token.address,
                "whitelist_entry": entry,
                "reason": reason,
                **context,
            }
        },
    )


def find_price_source(
    token: Token,
    stable: bool,
    store: EntityStore,
    registry: PairRegistry,
    config: PricingConfig,
) -> Optional[PriceSource]:
    """
    Find the whitelisted pair that prices token.

    Returns None when no whitelist entry has a qualifying pair. The base
    token is not special-cased here; see derive_price_in_base.
    """
    for entry in config.whitelist:
        pair_address = registry.get_pair(token.address, entry, stable)
        if not pair_address or is_zero_address(pair_address):
            _skip(token, entry, "no_pair")
            continue

        pair = store.load_pair(pair_address)
        if pair is None:
            _skip(token, entry, "pair_not_in_store", pair=pair_address)
            continue

        side = pair.side_of(token.address)
        if side is None:
            _skip(token, entry, "token_not_in_pair", pair=pair.address)
            continue

        if not pair.reserve_base > config.min_liquidity_base:
            _skip(
                token, entry, "below_min_liquidity",
                pair=pair.address, reserve_base=str(pair.reserve_base),
            )
            continue

        spot_price = pair.token1_price if side is PriceSide.TOKEN0 else pair.token0_price
        counterparty = store.load_token(pair.counterparty_of(token.address))

        if counterparty is None:
            _skip(token, entry, "counterparty_not_in_store", pair=pair.address)
            continue

        with pricing_context():
            price = spot_price * counterparty.derived_base_price

        return PriceSource(
            whitelist_entry=entry,
            pair_address=pair.address,
            side=side,
            spot_price=spot_price,
            counterparty_price=counterparty.derived_base_price,
            price=price,
        )

    return None


def derive_price_in_base(
    token: Token,
    stable: bool,
    store: EntityStore,
    registry: PairRegistry,
    config: PricingConfig,
) -> Decimal:
    """
    Price of token in base currency.

    Args:
        token: Token to price
        stable: Pool variant to look up (stable-swap vs constant-product)
        store: Entity store holding pairs and tokens
        registry: Factory lookup (token_a, token_b, stable) -> pair address
        config: Pricing configuration (base token, whitelist, thresholds)

    Returns:
        Derived price; 1 for the base token, 0 if no whitelisted pair qualifies.
        The caller persists it onto token.derived_base_price.
    """
    if token.address == config.base_token:
        return DECIMAL_ONE

    source = find_price_source(token, stable, store, registry, config)
    if source is None:
        logger.debug(
            "No whitelisted pair qualifies",
            extra={"context": {"token": token.address, "stable": stable}},
        )
        return DECIMAL_ZERO

    logger.debug(
        "Derived price",
        extra={"context": {"token": token.address, **source.to_dict()}},
    )
    return source.price


def get_base_price_usd(store: EntityStore, config: PricingConfig) -> Decimal:
    """
    USD price of the base currency.

    Reads the spot price of the configured stable/base reference pair, whose
    token0 is the stable asset. Returns 0 ("price unknown") if that pair is
    not in the store yet.
    """
    pair = store.load_pair(config.usd_reference_pair)
    if pair is None:
        logger.debug(
            "USD reference pair not in store",
            extra={"context": {"pair": config.usd_reference_pair}},
        )
        return DECIMAL_ZERO
    return pair.token0_price
