"""
Bid Journal - local record of sealed bids placed from this machine.

The registrar only stores sealed bids keyed by (bidder, commitment), so it
cannot tell a bidder which of its commitments belongs to a name. The journal
remembers that mapping so a reveal can be checked before it is sent.

Salts are never written to the journal.
"""

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import List, Optional

from enscli.core.auction import Bid, JournalError, Name
from enscli.crypto import bytes_to_hex, hex_to_bytes
from enscli.utils.logger import get_logger

logger = get_logger("journal")

JOURNAL_FILE = "bids.json"


@dataclass
class JournalEntry:
    """One sealed bid sent to the registrar"""
    name: str
    bidder: str
    value: int
    mask: int
    commitment: str
    transaction: str
    revealed: bool = False
    reveal_transaction: Optional[str] = None

    def matches(self, name: Name, bidder: str) -> bool:
        return self.name == str(name) and self.bidder.lower() == bidder.lower()


class BidJournal:
    """
    JSON-file journal of placed bids.

    Every write rewrites the whole file.
    """

    def __init__(self, data_dir: Path, filename: str = JOURNAL_FILE):
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / filename

    # =========================================================================
    # Persistence
    # =========================================================================

    def _load(self) -> List[JournalEntry]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return [JournalEntry(**entry) for entry in data]
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise JournalError(f"Cannot read bid journal {self.path}: {e}") from e
        except TypeError as e:
            raise JournalError(f"Bid journal {self.path} is malformed: {e}") from e

    def _save(self, entries: List[JournalEntry]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps([asdict(e) for e in entries], indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            raise JournalError(f"Cannot write bid journal {self.path}: {e}") from e

    # =========================================================================
    # Commitment Store
    # =========================================================================

    def record(self, bid: Bid, transaction: str) -> JournalEntry:
        """Remember a bid once its transaction has been sent."""
        entry = JournalEntry(
            name=str(bid.name),
            bidder=bid.bidder,
            value=bid.value,
            mask=bid.escrow,
            commitment=bytes_to_hex(bid.commitment),
            transaction=transaction,
        )
        entries = self._load()
        entries.append(entry)
        self._save(entries)

        logger.debug(f"Journaled bid {entry.commitment[:10]}... on {entry.name} from {entry.bidder}")
        return entry

    def commitments(self, name: Name, bidder: str) -> List[bytes]:
        """All commitments journaled for (name, bidder), oldest first."""
        return [
            hex_to_bytes(e.commitment)
            for e in self._load()
            if e.matches(name, bidder)
        ]

    def lookup(self, name: Name, bidder: str) -> Optional[bytes]:
        """Latest commitment journaled for (name, bidder), if any."""
        found = self.commitments(name, bidder)
        return found[-1] if found else None

    def mark_revealed(self, name: Name, bidder: str, commitment: bytes, transaction: str) -> bool:
        """
        Flag a journaled bid as revealed.

        Returns:
            True if an unrevealed matching entry was found
        """
        target = bytes_to_hex(commitment)
        entries = self._load()
        for entry in entries:
            if entry.revealed:
                continue
            if entry.matches(name, bidder) and entry.commitment == target:
                entry.revealed = True
                entry.reveal_transaction = transaction
                self._save(entries)
                return True
        return False

    # =========================================================================
    # Queries
    # =========================================================================

    def entries(self, name: Optional[Name] = None) -> List[JournalEntry]:
        """Journaled bids, optionally for one name only."""
        entries = self._load()
        if name is None:
            return entries
        return [e for e in entries if e.name == str(name)]

    def unrevealed(self, name: Optional[Name] = None) -> List[JournalEntry]:
        """Bids that still need revealing."""
        return [e for e in self.entries(name) if not e.revealed]
