# PATH: core/validators.py
"""
Address validators for PRICER.

CONTRACTS:
- canonical_address(): lowercase "0x" + 40 hex chars, or ValidationError
- is_address(): non-raising check
- is_zero_address(): True for the factory's "no pair" sentinel

Entities, config and registries all key by canonical addresses, so a
checksummed and a lowercase spelling of the same address compare equal.

USAGE:
    from core.validators import canonical_address

    address = canonical_address("0x21be370D5312f44cB42ce377BC9b8a0cEF1A4C83")
"""

import re

from core.constants import ADDRESS_HEX_LENGTH, ADDRESS_ZERO, ErrorCode
from core.exceptions import ValidationError

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{%d}$" % ADDRESS_HEX_LENGTH)


def is_address(value: object) -> bool:
    """Check if value is a 20-byte hex address (any case)."""
    return isinstance(value, str) and ADDRESS_PATTERN.match(value.strip()) is not None


def canonical_address(value: object) -> str:
    """
    Canonicalize an address to lowercase.

    Raises:
        ValidationError: if value is not a 20-byte hex address
    """
    if not is_address(value):
        raise ValidationError(
            f"Invalid address: {value!r}",
            {"value": repr(value)},
            code=ErrorCode.VALIDATION_INVALID_ADDRESS,
        )
    return value.strip().lower()


def is_zero_address(value: str) -> bool:
    """True if value is the zero address (case-insensitive)."""
    return value.strip().lower() == ADDRESS_ZERO


def address_from_word(word: str) -> str:
    """
    Decode an ABI-encoded address from a 32-byte return word.

    Accepts "0x"-prefixed hex. An empty result ("0x") decodes to the zero
    address; a call to a non-contract returns exactly that.
    """
    data = word[2:] if word.startswith("0x") else word
    if not data:
        return ADDRESS_ZERO
    if len(data) < 64 or any(c not in "0123456789abcdefABCDEF" for c in data):
        raise ValidationError(
            f"Malformed address word: {word!r}",
            {"value": word},
            code=ErrorCode.VALIDATION_INVALID_ADDRESS,
        )
    return "0x" + data[24:64].lower()


def address_to_word(address: str) -> str:
    """ABI-encode an address as a 32-byte hex word (no prefix)."""
    return canonical_address(address)[2:].rjust(64, "0")
