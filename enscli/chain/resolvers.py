"""
Address resolution - hex literals and ENS names.

Flags such as --address accept either a raw 0x address or a name that the
registry resolves to one. The command layer picks the resolver; neither the
protocol engine nor the backend has to care which form the user typed.
"""

from enscli.chain.interfaces import AddressResolver, EnsBackend
from enscli.core.auction import InvalidAddressError
from enscli.crypto import ZERO_ADDRESS, to_checksum_address
from enscli.utils.logger import get_logger
from enscli.utils.validation import validate_address

logger = get_logger("resolvers")


class LiteralAddressResolver:
    """Accepts 0x-prefixed 20-byte hex addresses."""

    def resolve(self, text: str) -> str:
        valid, err = validate_address(text)
        if not valid:
            raise InvalidAddressError(f"Invalid address {text!r}: {err}")
        return to_checksum_address(text)


class NameLookupResolver:
    """Resolves an ENS name through the registry and its resolver."""

    def __init__(self, backend: EnsBackend):
        self.backend = backend

    def resolve(self, text: str) -> str:
        name = text.strip().lower()
        address = self.backend.address_of(name)
        if not address or address.lower() == ZERO_ADDRESS:
            raise InvalidAddressError(f"{name} does not resolve to an address")
        logger.debug(f"Resolved {name} to {address}")
        return to_checksum_address(address)


def looks_like_address(text: str) -> bool:
    """Hex input is treated as an address even if malformed, so typos are reported as such."""
    return text.strip().lower().startswith("0x")


def resolver_for(text: str, backend: EnsBackend) -> AddressResolver:
    """Pick the resolver variant matching the form of the input."""
    if looks_like_address(text):
        return LiteralAddressResolver()
    return NameLookupResolver(backend)


def resolve_address(backend: EnsBackend, text: str) -> str:
    """
    Resolve an --address flag.

    Args:
        backend: Node used for name lookups
        text: Hex address or ENS name

    Returns:
        Checksummed address

    Raises:
        InvalidAddressError: on empty, malformed or unresolvable input
    """
    if text is None or not text.strip():
        raise InvalidAddressError("No address given")
    return resolver_for(text, backend).resolve(text.strip())
