"""
Web3 backend - the ENS registry and auction registrar over JSON-RPC.

Reads go straight to contract calls; writes are built against the
registrar ABI, signed locally with the unlocked key and sent raw, so the node
never needs to hold the account.
"""

from typing import Optional

from web3 import Web3
from web3.exceptions import Web3Exception

from enscli.chain.interfaces import TransactionSession
from enscli.core.auction import AuctionPhase, ChainError, Name, Reveal
from enscli.core.config import ClientConfig
from enscli.crypto import (
    ZERO_ADDRESS,
    namehash,
    to_checksum_address,
)
from enscli.utils.logger import get_logger

logger = get_logger("chain")


# =============================================================================
# ABIs (only the functions the client calls)
# =============================================================================

REGISTRY_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "node", "type": "bytes32"}],
        "name": "owner",
        "outputs": [{"name": "", "type": "address"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "node", "type": "bytes32"}],
        "name": "resolver",
        "outputs": [{"name": "", "type": "address"}],
        "type": "function",
    },
]

RESOLVER_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "node", "type": "bytes32"}],
        "name": "addr",
        "outputs": [{"name": "", "type": "address"}],
        "type": "function",
    },
]

REGISTRAR_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_hash", "type": "bytes32"}],
        "name": "state",
        "outputs": [{"name": "", "type": "uint8"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [
            {"name": "", "type": "address"},
            {"name": "", "type": "bytes32"},
        ],
        "name": "sealedBids",
        "outputs": [{"name": "", "type": "address"}],
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [{"name": "_hash", "type": "bytes32"}],
        "name": "startAuction",
        "outputs": [],
        "payable": False,
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [{"name": "sealedBid", "type": "bytes32"}],
        "name": "newBid",
        "outputs": [],
        "payable": True,
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_hash", "type": "bytes32"},
            {"name": "_value", "type": "uint256"},
            {"name": "_salt", "type": "bytes32"},
        ],
        "name": "unsealBid",
        "outputs": [],
        "payable": False,
        "type": "function",
    },
]

# Registrar Mode enum -> auction phase
REGISTRAR_MODES = {
    0: AuctionPhase.OPEN,        # Open
    1: AuctionPhase.BIDDING,     # Auction: sealed bids accepted
    2: AuctionPhase.OWNED,       # Owned
    3: AuctionPhase.FORBIDDEN,   # Forbidden
    4: AuctionPhase.REVEALING,   # Reveal
    5: AuctionPhase.FORBIDDEN,   # NotYetAvailable
}


def phase_from_registrar_mode(mode: int) -> AuctionPhase:
    """Map the registrar's state() result to an auction phase."""
    try:
        return REGISTRAR_MODES[mode]
    except KeyError:
        raise ChainError(f"Registrar reported unknown state {mode}") from None


# =============================================================================
# Backend
# =============================================================================


class Web3Backend:
    """
    ENS access through a web3 HTTP provider.

    The node is first contacted by the first call that needs it, and the
    registrar address is looked up lazily as the owner of the "eth" node.
    """

    def __init__(self, w3: Web3, registry_address: str, endpoint: str = ""):
        self.w3 = w3
        self.endpoint = endpoint
        self.registry = w3.eth.contract(
            address=to_checksum_address(registry_address),
            abi=REGISTRY_ABI,
        )
        self._registrar = None
        self._chain_id: Optional[int] = None
        self._connected = False

    @classmethod
    def connect(cls, config: ClientConfig) -> "Web3Backend":
        """
        Backend for the node named in the configuration.

        No request is made until a command needs the chain.
        """
        provider = Web3.HTTPProvider(
            config.connection,
            request_kwargs={"timeout": config.timeout},
        )
        return cls(Web3(provider), config.registry_address, endpoint=config.connection)

    def _ensure_connected(self):
        if self._connected:
            return
        if not self.w3.is_connected():
            raise ChainError(f"Cannot reach Ethereum node at {self.endpoint or self.w3.provider}")
        logger.debug(f"Connected to {self.endpoint}")
        self._connected = True

    # =========================================================================
    # Contracts
    # =========================================================================

    @property
    def registrar(self):
        if self._registrar is None:
            address = self._call(self.registry.functions.owner(namehash("eth")))
            if address == ZERO_ADDRESS:
                raise ChainError("No registrar owns the eth node")
            self._registrar = self.w3.eth.contract(
                address=to_checksum_address(address),
                abi=REGISTRAR_ABI,
            )
            logger.debug(f"Registrar at {address}")
        return self._registrar

    def _call(self, fn):
        self._ensure_connected()
        try:
            return fn.call()
        except (Web3Exception, ValueError, OSError) as e:
            raise ChainError(f"Call to {fn.fn_name} failed: {e}") from e

    # =========================================================================
    # Reads
    # =========================================================================

    def chain_id(self) -> int:
        if self._chain_id is None:
            self._ensure_connected()
            try:
                self._chain_id = self.w3.eth.chain_id
            except (Web3Exception, ValueError, OSError) as e:
                raise ChainError(f"Failed to obtain chain ID: {e}") from e
        return self._chain_id

    def get_phase(self, name: Name) -> AuctionPhase:
        mode = self._call(self.registrar.functions.state(name.labelhash))
        phase = phase_from_registrar_mode(mode)
        logger.debug(f"{name} is in phase {phase.label}")
        return phase

    def resolver_of(self, name: Name) -> str:
        return self._call(self.registry.functions.resolver(name.namehash))

    def address_of(self, name: str) -> str:
        node = namehash(name)
        resolver = self._call(self.registry.functions.resolver(node))
        if resolver == ZERO_ADDRESS:
            return ZERO_ADDRESS
        contract = self.w3.eth.contract(address=to_checksum_address(resolver), abi=RESOLVER_ABI)
        return self._call(contract.functions.addr(node))

    def sealed_bid_exists(self, bidder: str, commitment: bytes) -> bool:
        deed = self._call(self.registrar.functions.sealedBids(to_checksum_address(bidder), commitment))
        return deed != ZERO_ADDRESS

    # =========================================================================
    # Writes
    # =========================================================================

    def start_auction(self, session: TransactionSession, name: Name) -> str:
        return self._transact(session, self.registrar.functions.startAuction(name.labelhash))

    def new_bid(self, session: TransactionSession, commitment: bytes, escrow: int) -> str:
        return self._transact(session, self.registrar.functions.newBid(commitment), value=escrow)

    def unseal_bid(self, session: TransactionSession, reveal: Reveal) -> str:
        fn = self.registrar.functions.unsealBid(reveal.name.labelhash, reveal.value, reveal.salt_hash)
        return self._transact(session, fn)

    def _transact(self, session: TransactionSession, fn, value: int = 0) -> str:
        """Build, sign and send a registrar call from the session's account."""
        self._ensure_connected()
        sender = to_checksum_address(session.sender)
        try:
            nonce = session.nonce
            if nonce is None:
                nonce = self.w3.eth.get_transaction_count(sender, "pending")

            tx = fn.build_transaction({
                "from": sender,
                "value": value,
                "gas": session.gas_limit,
                "gasPrice": session.gas_price,
                "nonce": nonce,
                "chainId": session.chain_id,
            })
            signed = self.w3.eth.account.sign_transaction(tx, session.account.private_key)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except (Web3Exception, ValueError, OSError) as e:
            raise ChainError(f"Failed to send {fn.fn_name} transaction: {e}") from e

        tx_id = Web3.to_hex(tx_hash)
        logger.debug(f"Sent {fn.fn_name} from {sender} (nonce {nonce}): {tx_id}")
        return tx_id
