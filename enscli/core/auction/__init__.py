"""
ENS Auction Module.

This module provides the sealed-bid protocol used by the auction registrar:
- Auction phases and the phase each command requires
- Sealed bid commitments
- Mask (escrow) resolution
- Reveal verification
"""

from enscli.core.auction.protocol import (
    AuctionPhase,
    Name,
    Bid,
    Reveal,
    validate_phase,
    compute_commitment,
    resolve_mask,
    validate_reveal,
    required_phase,
    next_phase,
    can_transition,
    REQUIRED_PHASES,
    NAME_SUFFIX,
    COMMAND_START,
    COMMAND_BID,
    COMMAND_REVEAL,
    COMMAND_RESOLVER,
)

from enscli.core.auction.errors import (
    EnsCliError,
    InvalidPhaseError,
    CommitmentMismatchError,
    InvalidAmountError,
    InvalidNameError,
    InvalidInputError,
    InvalidAddressError,
    NoResolverError,
    WalletError,
    ChainError,
    ConfigError,
    JournalError,
)

__all__ = [
    # Protocol
    "AuctionPhase",
    "Name",
    "Bid",
    "Reveal",
    "validate_phase",
    "compute_commitment",
    "resolve_mask",
    "validate_reveal",
    "required_phase",
    "next_phase",
    "can_transition",
    "REQUIRED_PHASES",
    "NAME_SUFFIX",
    "COMMAND_START",
    "COMMAND_BID",
    "COMMAND_REVEAL",
    "COMMAND_RESOLVER",
    # Errors
    "EnsCliError",
    "InvalidPhaseError",
    "CommitmentMismatchError",
    "InvalidAmountError",
    "InvalidNameError",
    "InvalidInputError",
    "InvalidAddressError",
    "NoResolverError",
    "WalletError",
    "ChainError",
    "ConfigError",
    "JournalError",
]
