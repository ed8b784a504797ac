"""
Error taxonomy for the ENS client.

Every failure a command can report derives from EnsCliError so the CLI can
turn it into a message and exit code in one place. Errors raised by the
auction protocol itself are deterministic given their inputs and are never
retried.
"""


class EnsCliError(Exception):
    """Base class for all client errors."""


class InvalidPhaseError(EnsCliError):
    """The name's auction is not in the phase the command requires."""

    def __init__(self, name, expected, actual):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{name} is in phase {actual.label}, expected {expected.label}"
        )


class CommitmentMismatchError(EnsCliError):
    """A reveal does not match any commitment published by the bidder."""

    def __init__(self, name, bidder: str):
        self.name = name
        self.bidder = bidder
        super().__init__(
            f"No sealed bid from {bidder} on {name} matches the supplied bid and salt"
        )


class InvalidAmountError(EnsCliError, ValueError):
    """Malformed numeric input for a bid, mask or gas price."""

    def __init__(self, field: str, raw, reason: str = "not a valid amount"):
        self.field = field
        self.raw = raw
        super().__init__(f"Invalid {field} {raw!r}: {reason}")


class InvalidNameError(EnsCliError, ValueError):
    """A name argument could not be normalized."""


class InvalidInputError(EnsCliError):
    """A required flag is missing or unusable (e.g. an empty salt)."""


class InvalidAddressError(EnsCliError):
    """An address argument could not be resolved to an account."""


class NoResolverError(EnsCliError):
    """An owned name has no resolver set."""


class WalletError(EnsCliError):
    """The keystore for an address is missing or cannot be unlocked."""


class ChainError(EnsCliError):
    """The Ethereum node rejected or failed a call."""


class ConfigError(EnsCliError):
    """Configuration file or environment contains invalid values."""


class JournalError(EnsCliError):
    """The local bid journal cannot be read or written."""
