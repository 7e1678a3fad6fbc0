"""
discovery/registry.py - Pair lookup by token pair and pool variant.

Mirrors the factory's getPair(tokenA, tokenB, stable):
- Token order does not matter (the factory records both orderings)
- Stable and volatile pools of the same tokens are distinct pairs
- No pair -> ADDRESS_ZERO, never an exception (other PairRegistry
  implementations may answer None; price discovery accepts both)

Two implementations:
1. StaticPairRegistry  - in-memory, built from snapshot pairs (tests, CLI)
2. FactoryPairRegistry - on-chain factory via eth_call (CLI --rpc)
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from chains.providers import RPCProvider
from core.constants import ADDRESS_ZERO, GET_PAIR_SELECTOR, ErrorCode, PoolVariant
from core.exceptions import InfraError, ValidationError
from core.logging import get_logger
from core.models import Pair
from core.validators import address_from_word, address_to_word, canonical_address, is_zero_address

logger = get_logger(__name__)


class PairRegistry(Protocol):
    """
    Factory lookup: (token_a, token_b, stable) -> pair address.

    "No pair" is ADDRESS_ZERO or None; callers accept both.
    """

    def get_pair(self, token_a: str, token_b: str, stable: bool) -> Optional[str]:
        ...


@dataclass(frozen=True)
class PairKey:
    """Order-insensitive registry key."""
    token_lo: str
    token_hi: str
    variant: PoolVariant

    @classmethod
    def of(cls, token_a: str, token_b: str, stable: bool) -> "PairKey":
        a = canonical_address(token_a)
        b = canonical_address(token_b)
        lo, hi = sorted((a, b))
        return cls(token_lo=lo, token_hi=hi, variant=PoolVariant.from_flag(stable))


class StaticPairRegistry:
    """
    In-memory registry of known pairs.

    Lookups with identical or malformed token addresses find nothing,
    the same as asking the factory for a pair that was never created.
    """

    def __init__(self):
        self._pairs: dict[PairKey, str] = {}

    def register(self, token_a: str, token_b: str, stable: bool, pair_address: str) -> None:
        key = PairKey.of(token_a, token_b, stable)
        self._pairs[key] = canonical_address(pair_address)

    def register_pair(self, pair: Pair) -> None:
        self.register(pair.token0, pair.token1, pair.stable, pair.address)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Pair]) -> "StaticPairRegistry":
        registry = cls()
        for pair in pairs:
            registry.register_pair(pair)
        return registry

    def get_pair(self, token_a: str, token_b: str, stable: bool) -> str:
        try:
            key = PairKey.of(token_a, token_b, stable)
        except ValidationError:
            return ADDRESS_ZERO
        return self._pairs.get(key, ADDRESS_ZERO)

    def __len__(self) -> int:
        return len(self._pairs)


def encode_get_pair(token_a: str, token_b: str, stable: bool) -> str:
    """ABI-encode getPair(address,address,bool) call data."""
    flag = "1" if stable else "0"
    return (
        GET_PAIR_SELECTOR
        + address_to_word(token_a)
        + address_to_word(token_b)
        + flag.rjust(64, "0")
    )


class FactoryPairRegistry:
    """
    Registry backed by the on-chain pair factory.

    RPC failures propagate as InfraError: an unreachable node says nothing
    about whether a pair exists.
    """

    def __init__(
        self,
        provider: RPCProvider,
        factory_address: str,
        block: str = "latest",
    ):
        self.provider = provider
        self.factory_address = canonical_address(factory_address)
        self.block = block

    def get_pair(self, token_a: str, token_b: str, stable: bool) -> str:
        if canonical_address(token_a) == canonical_address(token_b):
            return ADDRESS_ZERO

        data = encode_get_pair(token_a, token_b, stable)
        response = self.provider.eth_call(self.factory_address, data, self.block)

        if not isinstance(response.result, str):
            raise InfraError(
                code=ErrorCode.INFRA_BAD_RESPONSE,
                message="getPair returned a non-string result",
                details={"factory": self.factory_address, "result": repr(response.result)},
            )

        try:
            pair_address = address_from_word(response.result)
        except ValidationError as e:
            raise InfraError(
                code=ErrorCode.INFRA_BAD_RESPONSE,
                message=f"getPair returned malformed data: {e.message}",
                details={"factory": self.factory_address, **e.details},
            ) from e

        if is_zero_address(pair_address):
            return ADDRESS_ZERO

        logger.debug(
            "Factory pair found",
            extra={
                "context": {
                    "token_a": token_a,
                    "token_b": token_b,
                    "stable": stable,
                    "pair": pair_address,
                    "latency_ms": response.latency_ms,
                }
            },
        )
        return pair_address
