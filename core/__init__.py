"""
core - Core utilities and models for PRICER.

This package contains:
- models.py: Entities (Token, Pair, Bundle)
- constants.py: Enums and constants
- exceptions.py: Typed exceptions with error codes
- math.py: Decimal utilities (no float), pricing arithmetic context
- validators.py: Address canonicalization
- format_money.py: Display formatting
- logging.py: Structured JSON logging
"""

from core.constants import (
    ADDRESS_ZERO,
    DECIMAL_ONE,
    DECIMAL_ZERO,
    ErrorCode,
    PoolVariant,
    PriceSide,
)
from core.exceptions import (
    ConfigError,
    InfraError,
    PricerError,
    StoreError,
    ValidationError,
)
from core.logging import get_logger, setup_logging
from core.models import Bundle, Pair, Token

__all__ = [
    # Constants
    "ADDRESS_ZERO",
    "DECIMAL_ONE",
    "DECIMAL_ZERO",
    "ErrorCode",
    "PoolVariant",
    "PriceSide",
    # Exceptions
    "ConfigError",
    "InfraError",
    "PricerError",
    "StoreError",
    "ValidationError",
    # Models
    "Bundle",
    "Pair",
    "Token",
    # Logging
    "get_logger",
    "setup_logging",
]
