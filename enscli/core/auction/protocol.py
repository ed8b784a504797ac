"""
Sealed-Bid Auction Protocol - commit-reveal bidding for ENS names.

The registrar runs a Vickrey auction per name in two rounds:
1. Bidding: bidders publish sealed bids (commitments) and escrow a masked amount
2. Revealing: bidders disclose value and salt so the registrar can unseal them

This module holds the data model of that protocol and the checks the client
makes before it spends gas: phase preconditions, commitment computation, mask
resolution and reveal verification. It performs no I/O: the phase and any
published commitment are supplied by the caller.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from enscli.crypto import (
    keccak256,
    labelhash,
    namehash,
    salt_hash,
    address_to_bytes,
    is_valid_address,
    to_checksum_address,
    bytes_to_hex,
)
from enscli.core.auction.errors import (
    InvalidPhaseError,
    CommitmentMismatchError,
    InvalidAmountError,
    InvalidNameError,
    InvalidInputError,
    InvalidAddressError,
)
from enscli.utils.logger import get_logger
from enscli.utils.validation import validate_name_input, validate_salt

logger = get_logger("auction")


# =============================================================================
# Constants
# =============================================================================

NAME_SUFFIX = ".eth"

# Bid values are packed as uint256 inside the sealed bid
MAX_UINT256 = 2**256 - 1

COMMAND_START = "start"
COMMAND_BID = "bid"
COMMAND_REVEAL = "reveal"
COMMAND_RESOLVER = "resolver"


# =============================================================================
# Enums
# =============================================================================


class AuctionPhase(IntEnum):
    """Phase of a name's auction, as reported by the registrar."""
    OPEN = 0        # Available, no auction running
    AUCTION = 1     # Auction started, not yet accepting bids
    BIDDING = 2     # Accepting sealed bids
    REVEALING = 3   # Accepting reveals
    OWNED = 4       # Auction settled, name registered
    FORBIDDEN = 5   # Barred from auction

    @property
    def label(self) -> str:
        return self.name.capitalize()


# Phase each command needs before it may run
REQUIRED_PHASES = {
    COMMAND_START: AuctionPhase.OPEN,
    COMMAND_BID: AuctionPhase.BIDDING,
    COMMAND_REVEAL: AuctionPhase.REVEALING,
    COMMAND_RESOLVER: AuctionPhase.OWNED,
}

# Forward edges of the lifecycle; FORBIDDEN is reachable from anywhere
PHASE_TRANSITIONS = {
    AuctionPhase.OPEN: AuctionPhase.AUCTION,
    AuctionPhase.AUCTION: AuctionPhase.BIDDING,
    AuctionPhase.BIDDING: AuctionPhase.REVEALING,
    AuctionPhase.REVEALING: AuctionPhase.OWNED,
}


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class Name:
    """
    A normalized ENS name.

    "EnsTest" and "enstest.eth" both normalize to "enstest.eth".
    """
    value: str

    def __post_init__(self):
        valid, err = validate_name_input(self.value)
        if not valid:
            raise InvalidNameError(err)

        normalized = self.value.strip().lower()
        if not normalized.endswith(NAME_SUFFIX):
            normalized += NAME_SUFFIX
        if any(not label for label in normalized.split(".")):
            raise InvalidNameError(f"Invalid name: {self.value!r}")

        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        """The label directly below .eth, which is what the registrar auctions."""
        return self.value.split(".")[-2]

    @property
    def labelhash(self) -> bytes:
        return labelhash(self.label)

    @property
    def namehash(self) -> bytes:
        return namehash(self.value)


@dataclass(frozen=True)
class Bid:
    """
    A sealed bid.

    The commitment hides the true value; the escrow actually sent with the
    transaction is the mask, which is never allowed below the value.
    """
    name: Name
    bidder: str
    value: int
    salt: str
    mask: Optional[int] = None

    def __post_init__(self):
        _check_fields(self)
        if self.mask is not None:
            _check_amount("mask", self.mask)

    @property
    def escrow(self) -> int:
        """Amount of wei sent with the bid."""
        return resolve_mask(self.value, self.mask)

    @property
    def commitment(self) -> bytes:
        return compute_commitment(self)


@dataclass(frozen=True)
class Reveal:
    """
    Disclosure of a previously sealed bid.

    Must recompute to the commitment published during bidding.
    """
    name: Name
    bidder: str
    value: int
    salt: str

    def __post_init__(self):
        _check_fields(self)

    @property
    def commitment(self) -> bytes:
        return compute_commitment(self)

    @property
    def salt_hash(self) -> bytes:
        return salt_hash(self.salt)


def _check_amount(field: str, amount) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(field, amount, "must be an integer number of wei")
    if amount < 0:
        raise InvalidAmountError(field, amount, "must not be negative")
    if amount > MAX_UINT256:
        raise InvalidAmountError(field, amount, "does not fit in uint256")


def _check_fields(bid) -> None:
    if not isinstance(bid.name, Name):
        raise InvalidNameError(f"Expected Name, got {type(bid.name).__name__}")
    if not is_valid_address(bid.bidder):
        raise InvalidAddressError(f"Invalid bidder address: {bid.bidder!r}")
    _check_amount("bid", bid.value)
    valid, err = validate_salt(bid.salt)
    if not valid:
        raise InvalidInputError(err)


# =============================================================================
# Protocol Operations
# =============================================================================


def required_phase(command: str) -> AuctionPhase:
    """Phase a command needs before it may run."""
    try:
        return REQUIRED_PHASES[command]
    except KeyError:
        raise ValueError(f"Unknown command: {command}") from None


def validate_phase(name: Name, expected: AuctionPhase, actual: AuctionPhase) -> None:
    """
    Check that a name is in the phase a command requires.

    Args:
        name: Name the command acts on
        expected: Phase the command needs
        actual: Phase currently reported by the registrar

    Raises:
        InvalidPhaseError: if the phases differ
    """
    if actual != expected:
        logger.debug(f"{name}: phase {actual.label}, needed {expected.label}")
        raise InvalidPhaseError(name, expected, actual)


def compute_commitment(bid) -> bytes:
    """
    Compute the sealed bid for (name, bidder, value, salt).

    Matches the registrar's shaBid() exactly:
        keccak256(labelhash || bidder[20] || uint256(value) || keccak256(salt))

    The mask is not part of the commitment.

    Args:
        bid: Bid or Reveal

    Returns:
        32-byte commitment
    """
    packed = (
        bid.name.labelhash +
        address_to_bytes(bid.bidder) +
        bid.value.to_bytes(32, byteorder="big") +
        salt_hash(bid.salt)
    )
    return keccak256(packed)


def resolve_mask(value: int, mask: Optional[int] = None) -> int:
    """
    Amount to escrow for a bid of `value`.

    A requested mask at or above the value is used as-is; anything lower
    (including no mask) is clamped up to the value.
    """
    if mask is None or mask < value:
        return value
    return mask


def validate_reveal(reveal: Reveal, published: Optional[bytes]) -> None:
    """
    Check a reveal against the commitment published while bidding.

    Args:
        reveal: Value and salt being disclosed
        published: Commitment on record for (name, bidder), or None

    Raises:
        CommitmentMismatchError: if the recomputed commitment differs
    """
    expected = compute_commitment(reveal)
    if published is None or bytes(published) != expected:
        logger.warning(
            f"Reveal mismatch for {reveal.bidder} on {reveal.name}: "
            f"computed {bytes_to_hex(expected)}, "
            f"on record {bytes_to_hex(published) if published else None}"
        )
        raise CommitmentMismatchError(reveal.name, to_checksum_address(reveal.bidder))


def next_phase(phase: AuctionPhase) -> Optional[AuctionPhase]:
    """Phase that normally follows `phase`, or None at the end of the lifecycle."""
    return PHASE_TRANSITIONS.get(phase)


def can_transition(current: AuctionPhase, target: AuctionPhase) -> bool:
    """Whether the registrar may move a name from `current` to `target`."""
    if target == AuctionPhase.FORBIDDEN:
        return current != AuctionPhase.FORBIDDEN
    return PHASE_TRANSITIONS.get(current) == target
