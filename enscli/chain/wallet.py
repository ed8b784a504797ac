"""
Wallet - unlock local keystore accounts.

Keystores are Web3 Secret Storage (V3) JSON files as written by geth and
most Ethereum wallets, one per account, usually under ~/.ethereum/keystore.
"""

import json
from pathlib import Path
from typing import Iterator, Tuple

from eth_account import Account

from enscli.chain.interfaces import UnlockedAccount
from enscli.core.auction import WalletError
from enscli.crypto import private_key_to_address
from enscli.utils.logger import get_logger

logger = get_logger("wallet")


class Keystore:
    """Directory of encrypted account files."""

    def __init__(self, directory: Path):
        self.directory = Path(directory).expanduser()

    def _files(self) -> Iterator[Tuple[Path, dict]]:
        if not self.directory.is_dir():
            return
        for path in sorted(self.directory.iterdir()):
            if not path.is_file():
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError):
                logger.debug(f"Skipping non-keystore file {path.name}")
                continue
            if isinstance(data, dict) and "address" in data and ("crypto" in data or "Crypto" in data):
                yield path, data

    def find(self, address: str) -> dict:
        """
        Keystore JSON for an address.

        Raises:
            WalletError: if no keystore holds the address
        """
        wanted = address.lower().removeprefix("0x")
        for path, data in self._files():
            if data["address"].lower().removeprefix("0x") == wanted:
                logger.debug(f"Found keystore {path.name} for {address}")
                return data
        raise WalletError(f"No keystore for {address} in {self.directory}")

    def unlock(self, address: str, passphrase: str) -> UnlockedAccount:
        """
        Decrypt the key for an address.

        The decrypted key is checked against the address by re-deriving it on
        secp256k1, so a keystore whose address field lies is rejected.

        Args:
            address: Account to unlock
            passphrase: Keystore passphrase

        Returns:
            UnlockedAccount

        Raises:
            WalletError: missing keystore, wrong passphrase or key/address mismatch
        """
        keyfile = self.find(address)
        try:
            private_key = bytes(Account.decrypt(keyfile, passphrase or ""))
        except ValueError as e:
            raise WalletError(f"Failed to unlock {address}: {e}") from e

        derived = private_key_to_address(private_key)
        if derived.lower() != address.lower():
            raise WalletError(f"Keystore for {address} holds the key of {derived}")

        logger.info(f"Unlocked account {derived}")
        return UnlockedAccount(address=derived, private_key=private_key)
