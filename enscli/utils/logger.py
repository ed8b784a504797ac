"""
Centralized logging configuration for the ENS client.

Provides colored console output on stderr (stdout is reserved for command
results) and an optional JSON-lines activity log, with separate loggers for
each subsystem (auction, commands, chain, wallet, journal).
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog


class JSONFormatter(logging.Formatter):
    """One JSON object per record; structured fields come from extra={"fields": ...}."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if fields:
            entry.update(fields)
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ENSLogger:
    """Centralized logger for client components"""

    _initialized = False
    _log_file: Optional[Path] = None

    @classmethod
    def setup(
        cls,
        level: int = logging.WARNING,
        log_file: Optional[str] = None,
        quiet: bool = False,
    ):
        """
        Setup logging configuration.

        Calling setup again replaces the previous handlers, so each CLI
        invocation gets exactly the outputs it asked for.

        Args:
            level: Console logging level (DEBUG, INFO, WARNING, ERROR)
            log_file: File receiving JSON activity records. If None, no file
            quiet: Suppress console output entirely
        """
        root_logger = logging.getLogger("ens")
        root_logger.setLevel(logging.DEBUG)
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers.clear()
        root_logger.propagate = False

        # Console handler with colors
        if not quiet:
            console_handler = colorlog.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_formatter = colorlog.ColoredFormatter(
                "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
                log_colors={
                    "DEBUG": "cyan",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "red,bg_white",
                },
            )
            console_handler.setFormatter(console_formatter)
            root_logger.addHandler(console_handler)

        # Activity log (if requested)
        cls._log_file = Path(log_file).expanduser() if log_file else None
        if cls._log_file:
            cls._log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(cls._log_file, encoding="utf-8")
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(JSONFormatter())
            root_logger.addHandler(file_handler)

        if not root_logger.handlers:
            root_logger.addHandler(logging.NullHandler())

        cls._initialized = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a logger for a specific subsystem.

        Args:
            name: Subsystem name (e.g., 'auction', 'chain', 'wallet')

        Returns:
            Logger instance
        """
        if not cls._initialized:
            cls.setup()

        return logging.getLogger(f"ens.{name}")


# Convenience functions
def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific subsystem"""
    return ENSLogger.get_logger(name)


def setup_logging(level: int = logging.WARNING, log_file: Optional[str] = None, quiet: bool = False):
    """Setup logging configuration"""
    ENSLogger.setup(level=level, log_file=log_file, quiet=quiet)
