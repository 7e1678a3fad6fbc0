# PATH: core/constants.py
"""
core/constants.py - Enums, defaults, and constants.

Only truly constant values here. Per-chain values (base token, whitelist,
reference pair) go to config/pricing.yaml.
"""

from decimal import Decimal
from enum import Enum
from typing import Final


# =============================================================================
# ADDRESSES
# =============================================================================

# Sentinel returned by the factory when no pair exists
ADDRESS_ZERO: Final[str] = "0x0000000000000000000000000000000000000000"

ADDRESS_HEX_LENGTH: Final[int] = 40


# =============================================================================
# DECIMALS
# =============================================================================

DECIMAL_ZERO: Final[Decimal] = Decimal("0")
DECIMAL_ONE: Final[Decimal] = Decimal("1")
DECIMAL_TWO: Final[Decimal] = Decimal("2")

# Significant digits for pricing arithmetic (IEEE 754 decimal128)
PRICING_PRECISION: Final[int] = 34

# Fractional digits of on-chain token amounts
DEFAULT_TOKEN_DECIMALS: Final[int] = 18
MAX_TOKEN_DECIMALS: Final[int] = 36


# =============================================================================
# PRICING DEFAULTS
# =============================================================================

# Minimum reserve (in base currency) for a pair to seed a derived price
DEFAULT_MIN_LIQUIDITY_BASE: Final[Decimal] = Decimal("1")

# Minimum USD reserve for pairs with few liquidity providers
DEFAULT_MIN_USD_NEW_PAIRS: Final[Decimal] = Decimal("1")

# Pairs with fewer LPs than this get the low-liquidity guard
DEFAULT_MIN_LP_COUNT: Final[int] = 5

DEFAULT_CHAIN: Final[str] = "fantom"


# =============================================================================
# FACTORY ABI
# =============================================================================

# getPair(address,address,bool)
GET_PAIR_SELECTOR: Final[str] = "0x6801cc30"


class PoolVariant(str, Enum):
    """Pool curve style, as keyed by the factory."""
    VOLATILE = "volatile"  # x * y = k
    STABLE = "stable"      # x^3 * y + y^3 * x = k

    @classmethod
    def from_flag(cls, stable: bool) -> "PoolVariant":
        return cls.STABLE if stable else cls.VOLATILE


class PriceSide(int, Enum):
    """Which side of a pair a token sits on."""
    TOKEN0 = 0
    TOKEN1 = 1


class ErrorCode(str, Enum):
    """
    Error codes for PRICER.

    Pricing functions never raise for missing state; these codes cover bad
    input, bad configuration and infrastructure failures.
    """
    # Validation
    VALIDATION_FLOAT_NOT_ALLOWED = "VALIDATION_FLOAT_NOT_ALLOWED"
    VALIDATION_INVALID_DECIMAL = "VALIDATION_INVALID_DECIMAL"
    VALIDATION_INVALID_ADDRESS = "VALIDATION_INVALID_ADDRESS"
    VALIDATION_INVALID_DECIMALS = "VALIDATION_INVALID_DECIMALS"

    # Configuration
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_UNKNOWN_CHAIN = "CONFIG_UNKNOWN_CHAIN"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Entity store
    STORE_SNAPSHOT_INVALID = "STORE_SNAPSHOT_INVALID"
    STORE_ENTITY_NOT_FOUND = "STORE_ENTITY_NOT_FOUND"

    # Infrastructure
    INFRA_RPC_ERROR = "INFRA_RPC_ERROR"
    INFRA_RPC_TIMEOUT = "INFRA_RPC_TIMEOUT"
    INFRA_BAD_RESPONSE = "INFRA_BAD_RESPONSE"

    UNKNOWN = "UNKNOWN"
