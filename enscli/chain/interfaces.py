"""
Boundary contracts between the client and the chain.

Commands only talk to the chain through these protocols, so they can run
against the web3 backend in production and an in-memory fake in tests.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from enscli.core.auction import AuctionPhase, Name, Reveal


# =============================================================================
# Transaction Session
# =============================================================================


@dataclass(frozen=True)
class UnlockedAccount:
    """An address together with the private key that controls it."""
    address: str
    private_key: bytes

    def __repr__(self) -> str:
        return f"UnlockedAccount(address={self.address!r})"


@dataclass(frozen=True)
class TransactionSession:
    """
    Everything needed to sign and send a transaction to the registrar.

    nonce=None asks the node for the account's next pending nonce.
    """
    account: UnlockedAccount
    chain_id: int
    gas_price: int
    gas_limit: int
    nonce: Optional[int] = None

    @property
    def sender(self) -> str:
        return self.account.address


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class PhaseOracle(Protocol):
    """Reports the on-chain auction phase of a name."""

    def get_phase(self, name: Name) -> AuctionPhase:
        ...


@runtime_checkable
class TransactionSubmitter(Protocol):
    """Signs and sends registrar transactions, returning the transaction hash."""

    def start_auction(self, session: TransactionSession, name: Name) -> str:
        ...

    def new_bid(self, session: TransactionSession, commitment: bytes, escrow: int) -> str:
        ...

    def unseal_bid(self, session: TransactionSession, reveal: Reveal) -> str:
        ...


@runtime_checkable
class CommitmentStore(Protocol):
    """Where commitments published for a (name, bidder) pair can be looked up."""

    def lookup(self, name: Name, bidder: str) -> Optional[bytes]:
        ...


@runtime_checkable
class AddressResolver(Protocol):
    """Turns user input (hex address or ENS name) into a checksummed address."""

    def resolve(self, text: str) -> str:
        ...


@runtime_checkable
class EnsBackend(PhaseOracle, TransactionSubmitter, Protocol):
    """Everything the commands need from a connected node."""

    def chain_id(self) -> int:
        ...

    def resolver_of(self, name: Name) -> str:
        ...

    def address_of(self, name: str) -> str:
        ...

    def sealed_bid_exists(self, bidder: str, commitment: bytes) -> bool:
        ...
