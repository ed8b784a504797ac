"""
Command orchestration - one function per CLI command.

Each command is a straight line:
1. Validate flags (amounts, salt, gas) before touching the network
2. Check the name is in the phase the command requires
3. Resolve the acting address and unlock its keystore
4. Build a transaction session
5. Re-check the phase and send a single registrar transaction
6. Log the result

Commands take an explicit TransactionOptions rather than reading global
flags, and raise EnsCliError subclasses; presenting them is the CLI's job.
"""

from dataclasses import dataclass
from typing import Optional

from enscli.chain.interfaces import EnsBackend, TransactionSession
from enscli.chain.resolvers import resolve_address
from enscli.chain.wallet import Keystore
from enscli.core.auction import (
    AuctionPhase,
    Bid,
    Name,
    Reveal,
    InvalidInputError,
    JournalError,
    NoResolverError,
    required_phase,
    validate_phase,
    validate_reveal,
    COMMAND_START,
    COMMAND_BID,
    COMMAND_REVEAL,
    COMMAND_RESOLVER,
)
from enscli.core.config import DEFAULT_GAS_LIMIT, DEFAULT_GAS_PRICE
from enscli.core.journal import BidJournal
from enscli.crypto import ZERO_ADDRESS, bytes_to_hex, to_checksum_address
from enscli.utils.logger import get_logger
from enscli.utils.units import optional_wei, string_to_wei, wei_to_string
from enscli.utils.validation import validate_gas_limit, validate_nonce, validate_salt

logger = get_logger("commands")


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class TransactionOptions:
    """Flags shared by every command that sends a transaction."""
    address: str
    passphrase: str = ""
    gas_price: str = DEFAULT_GAS_PRICE
    gas_limit: int = DEFAULT_GAS_LIMIT
    nonce: Optional[int] = None


@dataclass(frozen=True)
class TransactionResult:
    """A transaction accepted by the node."""
    transaction: str
    name: Name
    address: str
    network_id: int


@dataclass(frozen=True)
class BidResult(TransactionResult):
    bid: Bid


@dataclass(frozen=True)
class RevealResult(TransactionResult):
    reveal: Reveal


# =============================================================================
# Helpers
# =============================================================================


def _check_salt(salt: Optional[str]) -> None:
    valid, err = validate_salt(salt)
    if not valid:
        raise InvalidInputError(err)


def _check_options(options: TransactionOptions) -> int:
    """Validate transaction flags and return the gas price in wei."""
    gas_price = string_to_wei(options.gas_price, "gas price")

    valid, err = validate_gas_limit(options.gas_limit)
    if not valid:
        raise InvalidInputError(err)

    valid, err = validate_nonce(options.nonce)
    if not valid:
        raise InvalidInputError(err)

    return gas_price


def _require_phase(backend: EnsBackend, name: Name, command: str) -> None:
    validate_phase(name, required_phase(command), backend.get_phase(name))


def _open_session(
    backend: EnsBackend,
    keystore: Keystore,
    address: str,
    options: TransactionOptions,
    gas_price: int,
) -> TransactionSession:
    account = keystore.unlock(address, options.passphrase)
    return TransactionSession(
        account=account,
        chain_id=backend.chain_id(),
        gas_price=gas_price,
        gas_limit=options.gas_limit,
        nonce=options.nonce,
    )


def published_commitment(
    backend: EnsBackend,
    journal: Optional[BidJournal],
    reveal: Reveal,
) -> Optional[bytes]:
    """
    Commitment on record for the reveal's (name, bidder).

    The journal is consulted first, then the registrar's sealed bids (which
    also covers bids placed from another machine). If neither knows the
    recomputed commitment, the latest journaled one is returned so the
    mismatch can be reported against it. An unreadable journal is skipped.
    """
    expected = reveal.commitment
    journaled = []
    if journal is not None:
        try:
            journaled = journal.commitments(reveal.name, reveal.bidder)
        except JournalError as e:
            logger.warning(f"Ignoring bid journal: {e}")

    if expected in journaled:
        return expected
    if backend.sealed_bid_exists(reveal.bidder, expected):
        return expected
    return journaled[-1] if journaled else None


# =============================================================================
# Commands
# =============================================================================


def start_auction(
    backend: EnsBackend,
    keystore: Keystore,
    name: Name,
    options: TransactionOptions,
) -> TransactionResult:
    """
    Start the auction for an available name.

    Raises:
        InvalidPhaseError: if the name is not Open
    """
    gas_price = _check_options(options)

    _require_phase(backend, name, COMMAND_START)

    address = resolve_address(backend, options.address)
    session = _open_session(backend, keystore, address, options, gas_price)

    _require_phase(backend, name, COMMAND_START)
    tx = backend.start_auction(session, name)

    logger.info("Auction start", extra={"fields": {
        "transactionid": tx,
        "networkid": session.chain_id,
        "name": str(name),
        "address": address,
    }})
    return TransactionResult(transaction=tx, name=name, address=address, network_id=session.chain_id)


def place_bid(
    backend: EnsBackend,
    keystore: Keystore,
    name: Name,
    options: TransactionOptions,
    bid_amount: str,
    salt: str,
    mask_amount: Optional[str] = None,
    journal: Optional[BidJournal] = None,
) -> BidResult:
    """
    Place a sealed bid.

    Args:
        backend: Connected node
        keystore: Keystore holding the bidding account
        name: Name being bid on
        options: Address, passphrase and gas settings
        bid_amount: True bid, e.g. "0.01 Ether"
        salt: Phrase needed again to reveal the bid
        mask_amount: Amount to send instead of the bid; raised to the bid if lower
        journal: Where to remember the commitment for the reveal

    Returns:
        BidResult with the transaction id and the bid that was sealed

    Raises:
        InvalidInputError: missing salt or bad gas settings
        InvalidAmountError: unparseable bid, mask or gas price
        InvalidPhaseError: if the name is not accepting bids
    """
    _check_salt(salt)
    value = string_to_wei(bid_amount, "bid price")
    mask = optional_wei(mask_amount, "mask")
    gas_price = _check_options(options)

    _require_phase(backend, name, COMMAND_BID)

    bidder = resolve_address(backend, options.address)
    session = _open_session(backend, keystore, bidder, options, gas_price)

    bid = Bid(name=name, bidder=bidder, value=value, salt=salt, mask=mask)
    commitment = bid.commitment

    _require_phase(backend, name, COMMAND_BID)
    tx = backend.new_bid(session, commitment, bid.escrow)

    if journal is not None:
        try:
            journal.record(bid, tx)
        except JournalError as e:
            logger.warning(f"Bid {tx} was sent but not journaled: {e}")

    logger.info("Auction bid", extra={"fields": {
        "transactionid": tx,
        "networkid": session.chain_id,
        "name": str(name),
        "address": bidder,
        "salt": salt,
        "bid": bid.value,
        "mask": bid.escrow,
        "commitment": bytes_to_hex(commitment),
    }})
    logger.debug(f"Sealed {wei_to_string(bid.value)} on {name}, escrowing {wei_to_string(bid.escrow)}")
    return BidResult(transaction=tx, name=name, address=bidder, network_id=session.chain_id, bid=bid)


def reveal_bid(
    backend: EnsBackend,
    keystore: Keystore,
    name: Name,
    options: TransactionOptions,
    bid_amount: str,
    salt: str,
    journal: Optional[BidJournal] = None,
) -> RevealResult:
    """
    Reveal a previously sealed bid.

    The reveal is checked against the published commitment before any
    transaction is sent; a reveal that cannot match is never submitted.

    Raises:
        InvalidInputError: missing salt or bad gas settings
        InvalidAmountError: unparseable bid or gas price
        InvalidPhaseError: if the name is not in its reveal period
        CommitmentMismatchError: if no sealed bid matches value and salt
    """
    _check_salt(salt)
    value = string_to_wei(bid_amount, "bid price")
    gas_price = _check_options(options)

    _require_phase(backend, name, COMMAND_REVEAL)

    bidder = resolve_address(backend, options.address)
    reveal = Reveal(name=name, bidder=bidder, value=value, salt=salt)
    validate_reveal(reveal, published_commitment(backend, journal, reveal))

    session = _open_session(backend, keystore, bidder, options, gas_price)

    _require_phase(backend, name, COMMAND_REVEAL)
    tx = backend.unseal_bid(session, reveal)

    if journal is not None:
        try:
            journal.mark_revealed(name, bidder, reveal.commitment, tx)
        except JournalError as e:
            logger.warning(f"Reveal {tx} was sent but not journaled: {e}")

    logger.info("Auction reveal", extra={"fields": {
        "transactionid": tx,
        "networkid": session.chain_id,
        "name": str(name),
        "address": bidder,
        "salt": salt,
        "bid": value,
    }})
    return RevealResult(transaction=tx, name=name, address=bidder, network_id=session.chain_id, reveal=reveal)


def query_resolver(backend: EnsBackend, name: Name) -> str:
    """
    Resolver contract of an owned name.

    Raises:
        InvalidPhaseError: if the name is not Owned
        NoResolverError: if the owner never set a resolver
    """
    _require_phase(backend, name, COMMAND_RESOLVER)

    resolver = backend.resolver_of(name)
    if not resolver or resolver.lower() == ZERO_ADDRESS:
        raise NoResolverError(f"No resolver for {name}")
    return to_checksum_address(resolver)


def query_phase(backend: EnsBackend, name: Name) -> AuctionPhase:
    """Current auction phase of a name."""
    return backend.get_phase(name)
