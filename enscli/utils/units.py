"""
Ether denominations - parse and format human-readable amounts.

Flags take amounts such as "0.01 Ether", "20 GWei" or a bare number of wei.
The text is split into number and unit here; conversion to integer wei is
done by web3, which also enforces the uint256 range.
"""

import re
from decimal import Decimal, DecimalException

from web3 import Web3

from enscli.core.auction.errors import InvalidAmountError


# =============================================================================
# Constants
# =============================================================================

# Units used when formatting: (web3 unit, display name, smallest amount shown in it)
DISPLAY_UNITS = [
    ("ether", "Ether", 10**15),
    ("gwei", "GWei", 10**9),
]

_AMOUNT_RE = re.compile(r"^\s*([+-]?[0-9]*\.?[0-9]+(?:[eE][+-]?[0-9]+)?)\s*([A-Za-z]*)\s*$")


# =============================================================================
# Parsing
# =============================================================================


def string_to_wei(text: str, field: str = "amount") -> int:
    """
    Convert an amount string to wei.

    Args:
        text: Amount such as "0.01 Ether", "20gwei" or "1000"
        field: Field name for error messages

    Returns:
        Amount in wei

    Raises:
        InvalidAmountError: on empty input, unknown units, negative,
            fractional-wei or out-of-range (above uint256) amounts
    """
    if text is None or not str(text).strip():
        raise InvalidAmountError(field, text, "no amount given")

    match = _AMOUNT_RE.match(str(text))
    if not match:
        raise InvalidAmountError(field, text)

    number, unit = match.groups()
    unit = unit.lower() if unit else "wei"
    try:
        amount = Decimal(number)
    except DecimalException:
        raise InvalidAmountError(field, text) from None
    if amount < 0:
        raise InvalidAmountError(field, text, "must not be negative")

    try:
        wei = Web3.to_wei(amount, unit)
    except ValueError as e:
        raise InvalidAmountError(field, text, str(e)) from None
    except DecimalException:
        raise InvalidAmountError(field, text, "does not fit in uint256") from None

    # to_wei truncates, so anything that does not convert back exactly had fractional wei
    if Web3.from_wei(wei, unit) != amount:
        raise InvalidAmountError(field, text, "is not a whole number of wei")

    return wei


def optional_wei(text, field: str = "amount"):
    """Like string_to_wei, but an empty or missing value means None."""
    if text is None or not str(text).strip():
        return None
    return string_to_wei(text, field)


# =============================================================================
# Formatting
# =============================================================================


def wei_to_string(wei: int) -> str:
    """
    Format wei in the largest unit that keeps the number readable.

    10000000000000000 -> "0.01 Ether"; 20000000000 -> "20 GWei".
    """
    for unit, display, threshold in DISPLAY_UNITS:
        if abs(wei) >= threshold:
            value = Decimal(Web3.from_wei(wei, unit)).normalize()
            return f"{value:f} {display}"
    return f"{wei} Wei"
