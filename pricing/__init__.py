"""
pricing - Price discovery and tracked volume/liquidity.

- config.py: PricingConfig (base token, whitelist, thresholds)
- derivation.py: derive_price_in_base, get_base_price_usd
- tracking.py: tracked_volume_usd, tracked_liquidity_usd
- oracle.py: PriceOracle facade
"""

from pricing.config import PricingConfig, load_pricing_config
from pricing.derivation import (
    PriceSource,
    derive_price_in_base,
    find_price_source,
    get_base_price_usd,
)
from pricing.oracle import PriceOracle
from pricing.tracking import tracked_liquidity_usd, tracked_volume_usd, usd_price

__all__ = [
    "PriceOracle",
    "PriceSource",
    "PricingConfig",
    "derive_price_in_base",
    "find_price_source",
    "get_base_price_usd",
    "load_pricing_config",
    "tracked_liquidity_usd",
    "tracked_volume_usd",
    "usd_price",
]
