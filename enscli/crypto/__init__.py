"""
Cryptographic primitives for the ENS client.

This module provides:
- Keccak-256 hashing (Ethereum flavour, not NIST SHA3)
- ENS name hashing (labelhash, EIP-137 namehash)
- Address derivation from a secp256k1 private key
- EIP-55 checksummed addresses and hex helpers

Design Notes:
-------------
The auction registrar recomputes every sealed bid on-chain with keccak256 over
tightly packed arguments. Any hash used to build a commitment must therefore be
byte-identical to the EVM's, which is why keccak comes from pycryptodome rather
than hashlib's sha3_256 (a different padding).
"""

from Crypto.Hash import keccak
from py_ecc.secp256k1 import secp256k1
from web3 import Web3


# =============================================================================
# Constants
# =============================================================================

# secp256k1 curve order (number of points on the curve)
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

ZERO_ADDRESS = "0x" + "00" * 20
EMPTY_NODE = b"\x00" * 32


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: sealed bids, ENS labels and nodes, address derivation.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def labelhash(label: str) -> bytes:
    """Hash of a single ENS label, e.g. "enstest" for "enstest.eth"."""
    return keccak256(label.encode("utf-8"))


def namehash(name: str) -> bytes:
    """
    Compute the EIP-137 namehash of a dotted name.

    namehash("") is 32 zero bytes; every further label is folded in from the
    right: node = keccak256(node || labelhash(label)).

    Args:
        name: Normalized name (e.g. "enstest.eth")

    Returns:
        32-byte node
    """
    node = EMPTY_NODE
    if name:
        for label in reversed(name.split(".")):
            node = keccak256(node + labelhash(label))
    return node


def salt_hash(salt: str) -> bytes:
    """Hash a memorable salt phrase into the bytes32 the registrar expects."""
    return keccak256(salt.encode("utf-8"))


# =============================================================================
# Addresses
# =============================================================================


def private_key_to_public_key(private_key: bytes) -> bytes:
    """
    Derive public key from private key.

    Args:
        private_key: 32-byte private key

    Returns:
        64-byte uncompressed public key (x || y, no 0x04 prefix)
    """
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    public_key_point = secp256k1.privtopub(private_key)
    x_bytes = public_key_point[0].to_bytes(32, byteorder="big")
    y_bytes = public_key_point[1].to_bytes(32, byteorder="big")
    return x_bytes + y_bytes


def private_key_to_address(private_key: bytes) -> str:
    """
    Derive the checksummed address owned by a private key.

    Address = last 20 bytes of keccak256(public_key).
    """
    public_key = private_key_to_public_key(private_key)
    return to_checksum_address(keccak256(public_key)[-20:])


def to_checksum_address(address) -> str:
    """
    Format an address with EIP-55 mixed-case checksum.

    Args:
        address: 20 raw bytes or a 0x hex string

    Returns:
        0x-prefixed checksummed address

    Raises:
        ValueError: if the input is not an address
    """
    if isinstance(address, str) and not address.startswith(("0x", "0X")):
        raise ValueError(f"Invalid address: {address}")
    return Web3.to_checksum_address(address)


def address_to_bytes(address: str) -> bytes:
    """Convert a 0x address to its 20 raw bytes."""
    if not is_valid_address(address):
        raise ValueError(f"Invalid address: {address}")
    return hex_to_bytes(address)


def is_valid_address(address: str) -> bool:
    """
    Check if string is a 0x-prefixed address.

    All-lower or all-upper hex is accepted as is; mixed case must carry a
    valid EIP-55 checksum.
    """
    if not isinstance(address, str):
        return False
    if not address.startswith(("0x", "0X")):
        return False
    return Web3.is_address(address)


# =============================================================================
# Utility Functions
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)
