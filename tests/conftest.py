"""
Pytest configuration and fixtures for PRICER tests.
"""

import sys
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.models import Bundle, Pair, Token  # noqa: E402
from data.store import InMemoryEntityStore  # noqa: E402
from discovery.registry import StaticPairRegistry  # noqa: E402
from pricing.config import PricingConfig  # noqa: E402


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


ADDRESSES = SimpleNamespace(
    WFTM="0x" + "1" * 40,
    USDC="0x" + "2" * 40,
    DAI="0x" + "3" * 40,
    BOO="0x" + "4" * 40,
    SPIRIT="0x" + "5" * 40,
    USDC_WFTM="0x" + "a" * 40,
    BOO_WFTM="0x" + "b" * 40,
    BOO_USDC="0x" + "c" * 40,
    BOO_DAI="0x" + "d" * 40,
    BOO_SPIRIT="0x" + "e" * 40,
)


class World:
    """Store + registry + config wired together for pricing tests."""

    def __init__(self, config: PricingConfig):
        self.config = config
        self.store = InMemoryEntityStore()
        self.registry = StaticPairRegistry()

    def token(self, address: str, price: str = "0", symbol: str = "") -> Token:
        token = Token(address=address, symbol=symbol, derived_base_price=Decimal(price))
        self.store.add_token(token)
        return token

    def pair(
        self,
        address: str,
        token0: str,
        token1: str,
        reserve0: str = "0",
        reserve1: str = "0",
        reserve_base: str = "0",
        liquidity_provider_count: int = 10,
        stable: bool = False,
        in_store: bool = True,
    ) -> Pair:
        pair = Pair(
            address=address,
            token0=token0,
            token1=token1,
            reserve_base=Decimal(reserve_base),
            liquidity_provider_count=liquidity_provider_count,
            stable=stable,
        )
        pair.sync_reserves(Decimal(reserve0), Decimal(reserve1))
        self.registry.register_pair(pair)
        if in_store:
            self.store.add_pair(pair)
        return pair

    def bundle(self, base_price_usd: str) -> Bundle:
        bundle = Bundle(base_price_usd=Decimal(base_price_usd))
        self.store.set_bundle(bundle)
        return bundle


@pytest.fixture
def addrs() -> SimpleNamespace:
    return ADDRESSES


@pytest.fixture
def pricing_config() -> PricingConfig:
    return PricingConfig(
        base_token=ADDRESSES.WFTM,
        usd_reference_pair=ADDRESSES.USDC_WFTM,
        whitelist=(ADDRESSES.WFTM, ADDRESSES.USDC, ADDRESSES.DAI),
    )


@pytest.fixture
def world(pricing_config) -> World:
    return World(pricing_config)
