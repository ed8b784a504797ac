"""
Client configuration for the ENS client.

Settings come from, in increasing order of precedence:
1. Defaults below
2. A config file (TOML or JSON), given with --config or found in $HOME
3. ENS_* environment variables (a .env file in the working directory is loaded first)
4. Command-line flags
"""

import json
import os
import tomllib
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from enscli.core.auction.errors import ConfigError
from enscli.crypto import is_valid_address, to_checksum_address
from enscli.utils.logger import get_logger
from enscli.utils.units import string_to_wei
from enscli.utils.validation import validate_gas_limit

logger = get_logger("config")


# =============================================================================
# Constants
# =============================================================================

DEFAULT_CONNECTION = "http://localhost:8545"

# ENS registry on mainnet (the registry the auction registrar was deployed under)
ENS_REGISTRY_ADDRESS = "0x314159265dD8dbb310642f98f50C066173C1259b"

DEFAULT_GAS_PRICE = "20 GWei"
DEFAULT_GAS_LIMIT = 500_000
DEFAULT_TIMEOUT = 5  # seconds

# Searched in $HOME when --config is not given
DEFAULT_CONFIG_FILES = (".ens.toml", ".ens.json")

# Environment variable -> config field
ENV_VARS = {
    "ENS_CONNECTION": "connection",
    "ENS_REGISTRY": "registry_address",
    "ENS_KEYSTORE_DIR": "keystore_dir",
    "ENS_DATA_DIR": "data_dir",
    "ENS_GAS_PRICE": "gas_price",
    "ENS_GAS_LIMIT": "gas_limit",
    "ENS_TIMEOUT": "timeout",
    "ENS_LOG": "log_file",
}


# =============================================================================
# Config Model
# =============================================================================


class ClientConfig(BaseModel):
    """Connection and transaction settings shared by every command"""

    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    # Node
    connection: str = DEFAULT_CONNECTION
    timeout: int = DEFAULT_TIMEOUT
    registry_address: str = ENS_REGISTRY_ADDRESS

    # Transactions
    gas_price: str = DEFAULT_GAS_PRICE
    gas_limit: int = DEFAULT_GAS_LIMIT

    # Paths
    keystore_dir: Path = Path("~/.ethereum/keystore")
    data_dir: Path = Path("~/.ens")
    log_file: Optional[Path] = None

    @field_validator("connection")
    @classmethod
    def _check_connection(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"connection must be an http(s) URL, got {value!r}")
        return value

    @field_validator("registry_address")
    @classmethod
    def _check_registry(cls, value: str) -> str:
        if not is_valid_address(value):
            raise ValueError(f"registry_address is not an address: {value!r}")
        return to_checksum_address(value)

    @field_validator("gas_price")
    @classmethod
    def _check_gas_price(cls, value: str) -> str:
        string_to_wei(value, "gas price")
        return value

    @field_validator("gas_limit")
    @classmethod
    def _check_gas_limit(cls, value: int) -> int:
        valid, err = validate_gas_limit(value)
        if not valid:
            raise ValueError(err)
        return value

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @field_validator("keystore_dir", "data_dir", "log_file")
    @classmethod
    def _expand(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None

    def override(self, **overrides) -> "ClientConfig":
        """Return a copy with the given non-None values applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        return _build({**self.model_dump(), **updates})


def _build(values: Mapping) -> ClientConfig:
    try:
        return ClientConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


# =============================================================================
# Loading
# =============================================================================


def read_config_file(path: Path) -> dict:
    """
    Read a TOML or JSON config file.

    Args:
        path: File to read; the suffix picks the format (.json, else TOML)

    Returns:
        Mapping of config fields
    """
    try:
        if path.suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        else:
            with open(path, "rb") as f:
                data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a table of settings")
    # Tolerate both a flat file and one with an [ens] table
    return dict(data.get("ens", data))


def find_config_file(home: Optional[Path] = None) -> Optional[Path]:
    """First default config file present in the home directory, if any."""
    home = home or Path.home()
    for filename in DEFAULT_CONFIG_FILES:
        candidate = home / filename
        if candidate.is_file():
            return candidate
    return None


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> ClientConfig:
    """
    Load configuration from file and environment.

    Args:
        config_path: Optional path to config file
        environ: Environment to read ENS_* variables from (default os.environ)
        home: Directory searched for default config files

    Returns:
        ClientConfig instance
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    values: dict = {}

    path = Path(config_path).expanduser() if config_path else find_config_file(home)
    if path is not None:
        values.update(read_config_file(path))
        logger.info(f"Using config file: {path}")

    for var, field in ENV_VARS.items():
        if environ.get(var):
            values[field] = environ[var]

    return _build(values)
