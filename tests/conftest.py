"""
Shared fixtures: an in-memory chain backend and a throwaway keystore.
"""

import json

import pytest
from eth_account import Account

from enscli.chain.interfaces import TransactionSession
from enscli.chain.wallet import Keystore
from enscli.core.auction import AuctionPhase, Name, Reveal
from enscli.crypto import ZERO_ADDRESS

# Well-known throwaway key (never fund it)
TEST_PRIVATE_KEY = bytes.fromhex("4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318")
TEST_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"
TEST_PASSPHRASE = "my secret passphrase"

OTHER_ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


class FakeBackend:
    """
    In-memory stand-in for the registry and auction registrar.

    Records every transaction it is asked to send.
    """

    def __init__(self, default_phase: AuctionPhase = AuctionPhase.OPEN, network_id: int = 1):
        self.default_phase = default_phase
        self.network_id = network_id
        self.phases = {}
        self.phase_sequence = {}
        self.resolvers = {}
        self.addresses = {}
        self.sealed = set()
        self.sent = []
        self.phase_queries = 0

    def set_phase(self, name: str, phase: AuctionPhase):
        self.phases[str(Name(name))] = phase

    # Reads

    def chain_id(self) -> int:
        return self.network_id

    def get_phase(self, name: Name) -> AuctionPhase:
        self.phase_queries += 1
        queue = self.phase_sequence.get(str(name))
        if queue:
            return queue.pop(0)
        return self.phases.get(str(name), self.default_phase)

    def resolver_of(self, name: Name) -> str:
        return self.resolvers.get(str(name), ZERO_ADDRESS)

    def address_of(self, name: str) -> str:
        return self.addresses.get(name, ZERO_ADDRESS)

    def sealed_bid_exists(self, bidder: str, commitment: bytes) -> bool:
        return (bidder.lower(), bytes(commitment)) in self.sealed

    # Writes

    def start_auction(self, session: TransactionSession, name: Name) -> str:
        return self._send("startAuction", session, name=str(name))

    def new_bid(self, session: TransactionSession, commitment: bytes, escrow: int) -> str:
        self.sealed.add((session.sender.lower(), bytes(commitment)))
        return self._send("newBid", session, commitment=commitment, value=escrow)

    def unseal_bid(self, session: TransactionSession, reveal: Reveal) -> str:
        return self._send("unsealBid", session, name=str(reveal.name), value=reveal.value)

    def _send(self, method: str, session: TransactionSession, **fields) -> str:
        tx = "0x" + f"{len(self.sent) + 1:064x}"
        self.sent.append({
            "method": method,
            "from": session.sender,
            "nonce": session.nonce,
            "gas_price": session.gas_price,
            "gas_limit": session.gas_limit,
            "transaction": tx,
            **fields,
        })
        return tx


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def keystore_dir(tmp_path):
    """Keystore directory holding TEST_ADDRESS, encrypted with cheap KDF settings."""
    directory = tmp_path / "keystore"
    directory.mkdir()
    keyfile = Account.encrypt(TEST_PRIVATE_KEY, TEST_PASSPHRASE, kdf="pbkdf2", iterations=2)
    path = directory / f"UTC--2017-05-01T00-00-00.000000000Z--{keyfile['address']}"
    path.write_text(json.dumps(keyfile))
    return directory


@pytest.fixture
def keystore(keystore_dir):
    return Keystore(keystore_dir)
