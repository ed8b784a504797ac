"""
Chain access for the ENS client.

- Collaborator protocols (phase oracle, transaction submitter, commitment store)
- Address resolution for hex literals and ENS names
- Keystore unlocking
"""

from enscli.chain.interfaces import (
    UnlockedAccount,
    TransactionSession,
    PhaseOracle,
    TransactionSubmitter,
    CommitmentStore,
    AddressResolver,
    EnsBackend,
)

from enscli.chain.resolvers import (
    LiteralAddressResolver,
    NameLookupResolver,
    resolver_for,
    resolve_address,
)

from enscli.chain.wallet import Keystore

__all__ = [
    "UnlockedAccount",
    "TransactionSession",
    "PhaseOracle",
    "TransactionSubmitter",
    "CommitmentStore",
    "AddressResolver",
    "EnsBackend",
    "LiteralAddressResolver",
    "NameLookupResolver",
    "resolver_for",
    "resolve_address",
    "Keystore",
]
