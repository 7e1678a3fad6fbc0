"""
pricing/config.py - Pricing configuration.

Base token, USD reference pair, whitelist and thresholds per chain.
Loaded once at startup and never mutated: whitelist order is part of the
pricing contract.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from config import load_pricing, load_yaml
from core.constants import (
    DEFAULT_CHAIN,
    DEFAULT_MIN_LIQUIDITY_BASE,
    DEFAULT_MIN_LP_COUNT,
    DEFAULT_MIN_USD_NEW_PAIRS,
    ErrorCode,
)
from core.exceptions import ConfigError, ValidationError
from core.math import safe_decimal
from core.validators import canonical_address


@dataclass(frozen=True)
class PricingConfig:
    """Immutable pricing configuration for one chain."""

    base_token: str
    usd_reference_pair: str
    whitelist: tuple[str, ...]

    # Reserve (in base currency) a pair needs to seed a derived price
    min_liquidity_base: Decimal = DEFAULT_MIN_LIQUIDITY_BASE

    # USD reserve floor for pairs with few liquidity providers
    min_usd_new_pairs: Decimal = DEFAULT_MIN_USD_NEW_PAIRS
    min_lp_count: int = DEFAULT_MIN_LP_COUNT

    factory: str | None = None
    chain: str = DEFAULT_CHAIN

    _whitelist_set: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            base_token = canonical_address(self.base_token)
            reference = canonical_address(self.usd_reference_pair)
            whitelist = tuple(canonical_address(a) for a in self.whitelist)
            factory = canonical_address(self.factory) if self.factory else None
            min_liquidity = safe_decimal(self.min_liquidity_base)
            min_usd = safe_decimal(self.min_usd_new_pairs)
        except ValidationError as e:
            raise ConfigError(
                f"Invalid pricing config for {self.chain}: {e.message}",
                {"chain": self.chain, **e.details},
            ) from e

        if not whitelist:
            raise ConfigError(
                f"Whitelist is empty for {self.chain}",
                {"chain": self.chain},
            )

        duplicates = sorted({a for a in whitelist if whitelist.count(a) > 1})
        if duplicates:
            raise ConfigError(
                f"Duplicate whitelist entries for {self.chain}",
                {"chain": self.chain, "duplicates": duplicates},
            )

        if isinstance(self.min_lp_count, bool) or not isinstance(self.min_lp_count, int) or self.min_lp_count < 0:
            raise ConfigError(
                f"min_lp_count must be a non-negative int, got {self.min_lp_count!r}",
                {"chain": self.chain},
            )

        if min_liquidity < 0 or min_usd < 0:
            raise ConfigError(
                "Thresholds must be non-negative",
                {
                    "chain": self.chain,
                    "min_liquidity_base": str(min_liquidity),
                    "min_usd_new_pairs": str(min_usd),
                },
            )

        object.__setattr__(self, "base_token", base_token)
        object.__setattr__(self, "usd_reference_pair", reference)
        object.__setattr__(self, "whitelist", whitelist)
        object.__setattr__(self, "factory", factory)
        object.__setattr__(self, "min_liquidity_base", min_liquidity)
        object.__setattr__(self, "min_usd_new_pairs", min_usd)
        object.__setattr__(self, "_whitelist_set", frozenset(whitelist))

    def is_whitelisted(self, address: str) -> bool:
        return address.lower() in self._whitelist_set

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain": self.chain,
            "base_token": self.base_token,
            "usd_reference_pair": self.usd_reference_pair,
            "factory": self.factory,
            "whitelist": list(self.whitelist),
            "min_liquidity_base": str(self.min_liquidity_base),
            "min_usd_new_pairs": str(self.min_usd_new_pairs),
            "min_lp_count": self.min_lp_count,
        }


def pricing_config_from_dict(data: dict[str, Any], chain: str = DEFAULT_CHAIN) -> PricingConfig:
    """
    Build PricingConfig from one chain's YAML block.

    Thresholds are read as strings so YAML never turns them into floats.
    """
    missing = [k for k in ("base_token", "usd_reference_pair", "whitelist") if k not in data]
    if missing:
        raise ConfigError(
            f"Pricing config for {chain} is missing {', '.join(missing)}",
            {"chain": chain, "missing": missing},
        )

    whitelist = data["whitelist"]
    if not isinstance(whitelist, list):
        raise ConfigError(
            f"whitelist for {chain} must be a list",
            {"chain": chain, "type": type(whitelist).__name__},
        )

    return PricingConfig(
        base_token=data["base_token"],
        usd_reference_pair=data["usd_reference_pair"],
        whitelist=tuple(whitelist),
        min_liquidity_base=str(data.get("min_liquidity_base", DEFAULT_MIN_LIQUIDITY_BASE)),
        min_usd_new_pairs=str(data.get("min_usd_new_pairs", DEFAULT_MIN_USD_NEW_PAIRS)),
        min_lp_count=data.get("min_lp_count", DEFAULT_MIN_LP_COUNT),
        factory=data.get("factory"),
        chain=chain,
    )


def load_pricing_config(
    chain: str = DEFAULT_CHAIN,
    config_path: Path | None = None,
) -> PricingConfig:
    """
    Load pricing configuration from YAML file.

    Args:
        chain: Chain key in the file (default: fantom)
        config_path: Path to pricing.yaml (default: config/pricing.yaml)

    Returns:
        PricingConfig for the chain
    """
    if config_path is None:
        data = load_pricing()
    else:
        data = load_yaml(config_path.name, config_path.parent)

    if chain not in data:
        raise ConfigError(
            f"Unknown chain: {chain}",
            {"chain": chain, "known": sorted(data)},
            code=ErrorCode.CONFIG_UNKNOWN_CHAIN,
        )

    return pricing_config_from_dict(data[chain], chain=chain)
