# PATH: core/exceptions.py
"""
Typed exceptions for PRICER.

Every error carries an ErrorCode, a message and a details dict.
Pricing lookups do not raise on absent entities; only bad input,
bad configuration and infrastructure failures end up here.
"""

from typing import Any, Optional

from core.constants import ErrorCode


class PricerError(Exception):
    """Base exception for PRICER."""

    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str = "",
        details: Optional[dict] = None,
        code: Optional[ErrorCode] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(PricerError):
    """Invalid input value (float money, malformed address, ...)."""
    default_code = ErrorCode.VALIDATION_INVALID_DECIMAL


class ConfigError(PricerError):
    """Missing or invalid configuration."""
    default_code = ErrorCode.CONFIG_INVALID


class StoreError(PricerError):
    """Entity store could not be built or read."""
    default_code = ErrorCode.STORE_SNAPSHOT_INVALID


class InfraError(PricerError):
    """Infrastructure-related errors (RPC, timeouts, bad responses)."""
    default_code = ErrorCode.INFRA_RPC_ERROR
