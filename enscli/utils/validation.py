"""
Input Validation - sanity checks on user-supplied flags.

Catches malformed input before anything is sent to the node:
- Salts that are missing or oversized
- Addresses that are not 20-byte hex
- Gas limits and nonces outside sane bounds
"""

import re
from typing import Tuple, Any, Optional

from enscli.crypto import is_valid_address

# =============================================================================
# Constants
# =============================================================================

MAX_ADDRESS_SIZE = 20
MAX_STRING_LENGTH = 1024
MAX_NAME_LENGTH = 255

# Gas bounds
MIN_GAS_LIMIT = 21_000
MAX_GAS_LIMIT = 30_000_000
MAX_NONCE = 2**64 - 1

# Characters never valid in an ENS label
_FORBIDDEN_NAME_CHARS = re.compile(r"[\s/\\:@#?%]")


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = 0,
    max_val: int = MAX_NONCE,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_string(
    value: Any,
    name: str,
    max_length: int = MAX_STRING_LENGTH,
    pattern: Optional[str] = None,
) -> Tuple[bool, str]:
    """
    Validate string input.

    Args:
        value: Value to validate
        name: Field name for errors
        max_length: Maximum string length
        pattern: Optional regex pattern

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    if len(value) > max_length:
        return False, f"{name} exceeds max length {max_length}"

    if pattern and not re.match(pattern, value):
        return False, f"{name} does not match required pattern"

    return True, ""


def validate_hex_string(value: Any, name: str, expected_bytes: Optional[int] = None) -> Tuple[bool, str]:
    """
    Validate a hex string (with or without 0x prefix).

    Args:
        value: Value to validate
        name: Field name
        expected_bytes: Expected byte length when decoded

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    hex_str = value[2:] if value.startswith(("0x", "0X")) else value

    if len(hex_str) % 2 != 0:
        return False, f"{name} has odd length, invalid hex"

    try:
        bytes.fromhex(hex_str)
    except ValueError:
        return False, f"{name} contains invalid hex characters"

    if expected_bytes is not None:
        actual_bytes = len(hex_str) // 2
        if actual_bytes != expected_bytes:
            return False, f"{name} must be {expected_bytes} bytes, got {actual_bytes}"

    return True, ""


def validate_address(address: Any) -> Tuple[bool, str]:
    """Validate a 0x-prefixed 20-byte address."""
    valid, err = validate_hex_string(address, "address", MAX_ADDRESS_SIZE)
    if not valid:
        return False, err
    if not is_valid_address(address):
        return False, "address must start with 0x and carry a valid checksum if mixed-case"
    return True, ""


def validate_salt(salt: Any) -> Tuple[bool, str]:
    """A salt must be a non-empty phrase."""
    if salt is None or salt == "":
        return False, "Salt is required"
    return validate_string(salt, "salt")


def validate_name_input(name: Any) -> Tuple[bool, str]:
    """Validate a raw name argument before normalization."""
    if name is None or (isinstance(name, str) and not name.strip()):
        return False, "This command requires a name"
    valid, err = validate_string(name, "name", MAX_NAME_LENGTH)
    if not valid:
        return False, err
    if _FORBIDDEN_NAME_CHARS.search(name.strip()):
        return False, f"name {name!r} contains invalid characters"
    return True, ""


def validate_gas_limit(gas_limit: Any) -> Tuple[bool, str]:
    """Validate a transaction gas limit."""
    return validate_integer(gas_limit, "gas_limit", MIN_GAS_LIMIT, MAX_GAS_LIMIT)


def validate_nonce(nonce: Any) -> Tuple[bool, str]:
    """Validate an explicit transaction nonce (None means 'ask the node')."""
    if nonce is None:
        return True, ""
    return validate_integer(nonce, "nonce", 0, MAX_NONCE)


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_integer",
    "validate_string",
    "validate_hex_string",
    "validate_address",
    "validate_salt",
    "validate_name_input",
    "validate_gas_limit",
    "validate_nonce",
    "MAX_ADDRESS_SIZE",
    "MIN_GAS_LIMIT",
    "MAX_GAS_LIMIT",
]
