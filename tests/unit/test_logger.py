"""
Tests for logging setup and the JSON activity log.
"""

import json
import logging

import pytest

from enscli.utils.logger import JSONFormatter, get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    setup_logging()


def make_record(**extra):
    record = logging.LogRecord("ens.commands", logging.INFO, __file__, 1, "Auction bid", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_plain_record(self):
        entry = json.loads(JSONFormatter().format(make_record()))
        assert entry["msg"] == "Auction bid"
        assert entry["level"] == "info"
        assert entry["logger"] == "ens.commands"

    def test_fields_merged(self):
        record = make_record(fields={"transactionid": "0x01", "bid": 10**16})
        entry = json.loads(JSONFormatter().format(record))
        assert entry["transactionid"] == "0x01"
        assert entry["bid"] == 10**16


class TestSetup:

    def test_logger_namespace(self):
        assert get_logger("wallet").name == "ens.wallet"

    def test_activity_log_written(self, tmp_path):
        path = tmp_path / "logs" / "ens.log"
        setup_logging(log_file=str(path), quiet=True)

        get_logger("commands").info("Auction start", extra={"fields": {"name": "enstest.eth"}})
        get_logger("commands").debug("not recorded")

        lines = path.read_text().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["name"] == "enstest.eth"

    def test_quiet_without_file(self):
        setup_logging(quiet=True)
        handlers = logging.getLogger("ens").handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.NullHandler)
