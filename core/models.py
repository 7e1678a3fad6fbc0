# PATH: core/models.py
"""
Core data models for PRICER.

ENTITY CONTRACT
===============
Token, Pair and Bundle mirror the entities the indexing pipeline persists.
The pricing core only reads them; the pipeline mutates reserves and
writes derived prices back.

- Addresses are canonical (lowercase) from construction on.
- Every numeric field is Decimal. Floats are rejected.
- to_dict() encodes Decimals as strings; from_dict() reverses it exactly.

PAIR PRICE INVARIANT
====================
  token0_price = reserve0 / reserve1   (token0 per one token1)
  token1_price = reserve1 / reserve0   (token1 per one token0)
  both zero when either reserve is zero
===============
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

from core.constants import DECIMAL_ZERO, DEFAULT_TOKEN_DECIMALS, PoolVariant, PriceSide
from core.exceptions import ValidationError
from core.math import raw_to_decimal, safe_decimal, safe_int, spot_prices
from core.validators import canonical_address


@dataclass
class Token:
    """ERC-20 token tracked by the indexer."""
    address: str
    symbol: str = ""
    name: str = ""
    decimals: int = DEFAULT_TOKEN_DECIMALS
    derived_base_price: Decimal = DECIMAL_ZERO

    def __post_init__(self):
        self.address = canonical_address(self.address)
        self.decimals = safe_int(self.decimals)
        self.derived_base_price = safe_decimal(self.derived_base_price)

    def __hash__(self) -> int:
        return hash(self.address)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return False
        return self.address == other.address

    @property
    def id(self) -> str:
        return self.address

    def amount_from_raw(self, raw: int) -> Decimal:
        """Scale a raw on-chain amount by this token's decimals."""
        return raw_to_decimal(raw, self.decimals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "derived_base_price": str(self.derived_base_price),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Token":
        return cls(
            address=data["address"],
            symbol=data.get("symbol", ""),
            name=data.get("name", ""),
            decimals=data.get("decimals", DEFAULT_TOKEN_DECIMALS),
            derived_base_price=data.get("derived_base_price", "0"),
        )


@dataclass
class Pair:
    """Two-token liquidity pool."""
    address: str
    token0: str
    token1: str
    reserve0: Decimal = DECIMAL_ZERO
    reserve1: Decimal = DECIMAL_ZERO
    reserve_base: Decimal = DECIMAL_ZERO
    token0_price: Decimal = DECIMAL_ZERO
    token1_price: Decimal = DECIMAL_ZERO
    liquidity_provider_count: int = 0
    stable: bool = False

    def __post_init__(self):
        self.address = canonical_address(self.address)
        self.token0 = canonical_address(self.token0)
        self.token1 = canonical_address(self.token1)
        if self.token0 == self.token1:
            raise ValidationError(
                f"Pair {self.address} has identical tokens",
                {"pair": self.address, "token": self.token0},
            )
        self.reserve0 = safe_decimal(self.reserve0)
        self.reserve1 = safe_decimal(self.reserve1)
        self.reserve_base = safe_decimal(self.reserve_base)
        self.token0_price = safe_decimal(self.token0_price)
        self.token1_price = safe_decimal(self.token1_price)
        self.liquidity_provider_count = safe_int(self.liquidity_provider_count)

    def __hash__(self) -> int:
        return hash(self.address)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pair):
            return False
        return self.address == other.address

    @property
    def id(self) -> str:
        return self.address

    @property
    def variant(self) -> PoolVariant:
        return PoolVariant.from_flag(self.stable)

    def side_of(self, token_address: str) -> Optional[PriceSide]:
        """Which side token_address is on, or None if not in this pair."""
        address = token_address.lower()
        if address == self.token0:
            return PriceSide.TOKEN0
        if address == self.token1:
            return PriceSide.TOKEN1
        return None

    def counterparty_of(self, token_address: str) -> Optional[str]:
        side = self.side_of(token_address)
        if side is None:
            return None
        return self.token1 if side is PriceSide.TOKEN0 else self.token0

    def sync_reserves(self, reserve0: Decimal, reserve1: Decimal) -> None:
        """Apply new reserves and recompute spot prices."""
        self.reserve0 = safe_decimal(reserve0)
        self.reserve1 = safe_decimal(reserve1)
        self.token0_price, self.token1_price = spot_prices(self.reserve0, self.reserve1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "token0": self.token0,
            "token1": self.token1,
            "reserve0": str(self.reserve0),
            "reserve1": str(self.reserve1),
            "reserve_base": str(self.reserve_base),
            "token0_price": str(self.token0_price),
            "token1_price": str(self.token1_price),
            "liquidity_provider_count": self.liquidity_provider_count,
            "stable": self.stable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pair":
        pair = cls(
            address=data["address"],
            token0=data["token0"],
            token1=data["token1"],
            reserve_base=data.get("reserve_base", "0"),
            liquidity_provider_count=data.get("liquidity_provider_count", 0),
            stable=bool(data.get("stable", False)),
        )
        reserve0 = data.get("reserve0", "0")
        reserve1 = data.get("reserve1", "0")
        if "token0_price" in data or "token1_price" in data:
            pair.reserve0 = safe_decimal(reserve0)
            pair.reserve1 = safe_decimal(reserve1)
            pair.token0_price = safe_decimal(data.get("token0_price", "0"))
            pair.token1_price = safe_decimal(data.get("token1_price", "0"))
        else:
            pair.sync_reserves(reserve0, reserve1)
        return pair


@dataclass(frozen=True)
class Bundle:
    """Read-only snapshot of the base currency's USD price."""
    base_price_usd: Decimal = field(default=DECIMAL_ZERO)

    def __post_init__(self):
        object.__setattr__(self, "base_price_usd", safe_decimal(self.base_price_usd))

    def to_dict(self) -> Dict[str, Any]:
        return {"base_price_usd": str(self.base_price_usd)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bundle":
        return cls(base_price_usd=data.get("base_price_usd", "0"))
