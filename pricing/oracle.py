"""
pricing/oracle.py - PriceOracle facade.

Binds the entity store, the pair registry and the pricing config so event
handlers can call the pricing functions without threading collaborators
through every call. Holds no state of its own.
"""

from decimal import Decimal
from typing import Optional

from core.models import Bundle, Pair, Token
from data.store import EntityStore
from discovery.registry import PairRegistry
from pricing.config import PricingConfig
from pricing.derivation import (
    PriceSource,
    derive_price_in_base,
    find_price_source,
    get_base_price_usd,
)
from pricing.tracking import tracked_liquidity_usd, tracked_volume_usd


class PriceOracle:
    """Pricing functions bound to one store, registry and config."""

    def __init__(
        self,
        store: EntityStore,
        registry: PairRegistry,
        config: PricingConfig,
    ):
        self.store = store
        self.registry = registry
        self.config = config

    def derive_price_in_base(self, token: Token, stable: bool = False) -> Decimal:
        return derive_price_in_base(token, stable, self.store, self.registry, self.config)

    def price_source(self, token: Token, stable: bool = False) -> Optional[PriceSource]:
        return find_price_source(token, stable, self.store, self.registry, self.config)

    def base_price_usd(self) -> Decimal:
        return get_base_price_usd(self.store, self.config)

    def tracked_volume_usd(
        self,
        amount0: Decimal,
        token0: Token,
        amount1: Decimal,
        token1: Token,
        pair: Pair,
        bundle: Bundle | None = None,
    ) -> Decimal:
        """Tracked volume; bundle defaults to the store's current one."""
        return tracked_volume_usd(
            amount0, token0, amount1, token1, pair,
            bundle or self.store.load_bundle(),
            self.config,
        )

    def tracked_liquidity_usd(
        self,
        amount0: Decimal,
        token0: Token,
        amount1: Decimal,
        token1: Token,
        bundle: Bundle | None = None,
    ) -> Decimal:
        """Tracked liquidity; bundle defaults to the store's current one."""
        return tracked_liquidity_usd(
            amount0, token0, amount1, token1,
            bundle or self.store.load_bundle(),
            self.config,
        )
