"""
Integration tests for the command line interface.

The backend, keystore and journal are injected through the click context, so
every command runs end to end without a node.
"""

import pytest
from click.testing import CliRunner

from enscli.cli.main import cli
from enscli.core.auction import AuctionPhase
from enscli.core.config import ClientConfig
from enscli.core.journal import BidJournal
from enscli.utils.logger import setup_logging

TEST_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"
TEST_PASSPHRASE = "my secret passphrase"
RESOLVER_ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"

SENDER = ["--address", TEST_ADDRESS, "--passphrase", TEST_PASSPHRASE]


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    setup_logging()


@pytest.fixture
def journal(tmp_path):
    return BidJournal(tmp_path / "data")


@pytest.fixture
def invoke(backend, keystore, journal, tmp_path):
    runner = CliRunner()

    def _invoke(*args):
        obj = {
            "backend": backend,
            "keystore": keystore,
            "journal": journal,
            "config": ClientConfig(data_dir=tmp_path / "data"),
        }
        return runner.invoke(cli, list(args), obj=obj)

    return _invoke


class TestAuctionStart:

    def test_start(self, invoke, backend):
        result = invoke("auction", "start", *SENDER, "enstest")
        assert result.exit_code == 0
        assert f"Transaction ID is {backend.sent[0]['transaction']}" in result.output
        assert backend.sent[0]["name"] == "enstest.eth"

    def test_wrong_phase(self, invoke, backend):
        backend.set_phase("enstest", AuctionPhase.OWNED)
        result = invoke("auction", "start", *SENDER, "enstest.eth")
        assert result.exit_code == 1
        assert "Name not in a suitable state to start an auction" in result.output
        assert backend.sent == []

    def test_quiet_reports_by_exit_code(self, invoke, backend):
        backend.set_phase("enstest", AuctionPhase.OWNED)
        result = invoke("--quiet", "auction", "start", *SENDER, "enstest")
        assert result.exit_code == 1
        assert result.output == ""

        backend.set_phase("enstest", AuctionPhase.OPEN)
        result = invoke("-q", "auction", "start", *SENDER, "enstest")
        assert result.exit_code == 0
        assert result.output == ""

    def test_missing_name(self, invoke):
        result = invoke("auction", "start", *SENDER)
        assert result.exit_code == 1
        assert "Invalid name" in result.output

    def test_gas_flags(self, invoke, backend):
        result = invoke("auction", "start", *SENDER, "-g", "4 GWei", "--gaslimit", "60000", "--nonce", "3", "enstest")
        assert result.exit_code == 0
        sent = backend.sent[0]
        assert sent["gas_price"] == 4 * 10**9
        assert sent["gas_limit"] == 60_000
        assert sent["nonce"] == 3


class TestAuctionBid:

    @pytest.fixture(autouse=True)
    def bidding(self, backend):
        backend.set_phase("enstest", AuctionPhase.BIDDING)

    def test_bid(self, invoke, backend, journal):
        result = invoke("auction", "bid", *SENDER, "--bid", "0.01 Ether", "--salt", "my salt", "enstest")
        assert result.exit_code == 0
        assert backend.sent[0]["value"] == 10**16
        assert len(journal.entries()) == 1

    def test_mask(self, invoke, backend):
        result = invoke("auction", "bid", *SENDER, "-b", "0.01 Ether", "-m", "0.5 Ether", "-s", "my salt", "enstest")
        assert result.exit_code == 0
        assert backend.sent[0]["value"] == 5 * 10**17

    def test_missing_salt(self, invoke, backend):
        result = invoke("auction", "bid", *SENDER, "enstest")
        assert result.exit_code == 1
        assert "Salt is required" in result.output
        assert backend.sent == []

    def test_bad_mask(self, invoke, backend):
        result = invoke("auction", "bid", *SENDER, "-s", "my salt", "-m", "plenty", "enstest")
        assert result.exit_code == 1
        assert "Failed to place bid" in result.output
        assert backend.phase_queries == 0

    def test_listing(self, invoke):
        invoke("auction", "bid", *SENDER, "-b", "0.01 Ether", "-m", "1 Ether", "-s", "my salt", "enstest")
        result = invoke("auction", "bids")
        assert result.exit_code == 0
        assert "enstest.eth" in result.output
        assert "0.01 Ether" in result.output
        assert "[sealed]" in result.output
        assert "my salt" not in result.output

    def test_empty_listing(self, invoke):
        result = invoke("auction", "bids", "other")
        assert "No bids found." in result.output

    def test_oversized_bid(self, invoke, backend):
        result = invoke("auction", "bid", *SENDER, "-s", "my salt", "-b", "1e60 Ether", "enstest")
        assert result.exit_code == 1
        assert "Failed to place bid: Invalid bid price '1e60 Ether'" in result.output
        assert backend.phase_queries == 0

    def test_damaged_journal_listing(self, invoke, journal):
        journal.path.parent.mkdir(parents=True)
        journal.path.write_text("{not json")

        result = invoke("auction", "bids")
        assert result.exit_code == 1
        assert "Failed to read bid journal" in result.output

        result = invoke("-q", "auction", "bids")
        assert result.exit_code == 1
        assert result.output == ""

    def test_bid_kept_when_journal_damaged(self, invoke, backend, journal):
        journal.path.parent.mkdir(parents=True)
        journal.path.write_text("{not json")

        result = invoke("auction", "bid", *SENDER, "-s", "my salt", "enstest")
        assert result.exit_code == 0
        assert f"Transaction ID is {backend.sent[0]['transaction']}" in result.output


class TestUnreachableNode:
    """No backend is injected, so commands build one for a port nothing listens on."""

    @pytest.fixture
    def invoke_offline(self, keystore, tmp_path):
        runner = CliRunner()
        config = ClientConfig(connection="http://127.0.0.1:1", timeout=1, data_dir=tmp_path / "data")

        def _invoke(*args):
            return runner.invoke(cli, list(args), obj={"keystore": keystore, "config": config})

        return _invoke

    def test_bad_flags_reported_before_connecting(self, invoke_offline):
        result = invoke_offline("auction", "bid", *SENDER, "-s", "my salt", "-b", "a lot", "enstest")
        assert result.exit_code == 1
        assert "Failed to place bid: Invalid bid price" in result.output
        assert "Cannot reach" not in result.output

    def test_node_reported_on_first_use(self, invoke_offline):
        result = invoke_offline("auction", "status", "enstest")
        assert result.exit_code == 1
        assert "Cannot reach Ethereum node at http://127.0.0.1:1" in result.output


class TestAuctionReveal:

    def test_reveal_after_bid(self, invoke, backend, journal):
        backend.set_phase("enstest", AuctionPhase.BIDDING)
        invoke("auction", "bid", *SENDER, "-s", "my salt", "enstest")

        backend.set_phase("enstest", AuctionPhase.REVEALING)
        result = invoke("auction", "reveal", *SENDER, "-s", "my salt", "enstest")
        assert result.exit_code == 0
        assert backend.sent[-1]["method"] == "unsealBid"
        assert journal.entries()[0].revealed

    def test_reveal_wrong_salt(self, invoke, backend):
        backend.set_phase("enstest", AuctionPhase.BIDDING)
        invoke("auction", "bid", *SENDER, "-s", "my salt", "enstest")

        backend.set_phase("enstest", AuctionPhase.REVEALING)
        result = invoke("auction", "reveal", *SENDER, "-s", "not my salt", "enstest")
        assert result.exit_code == 1
        assert "Failed to reveal bid" in result.output
        assert len(backend.sent) == 1

    def test_reveal_too_early(self, invoke, backend):
        backend.set_phase("enstest", AuctionPhase.BIDDING)
        result = invoke("auction", "reveal", *SENDER, "-s", "my salt", "enstest")
        assert result.exit_code == 1
        assert "Name not in a suitable state to reveal a bid" in result.output


class TestQueries:

    def test_status(self, invoke, backend):
        backend.set_phase("enstest", AuctionPhase.REVEALING)
        result = invoke("auction", "status", "EnsTest.eth")
        assert result.exit_code == 0
        assert result.output.strip() == "Revealing"

    def test_resolver(self, invoke, backend):
        backend.set_phase("enstest", AuctionPhase.OWNED)
        backend.resolvers["enstest.eth"] = RESOLVER_ADDRESS
        result = invoke("resolver", "enstest")
        assert result.exit_code == 0
        assert result.output.strip() == RESOLVER_ADDRESS

    def test_resolver_while_bidding(self, invoke, backend):
        backend.set_phase("enstest", AuctionPhase.BIDDING)
        result = invoke("resolver", "enstest")
        assert result.exit_code == 1
        assert "Name not in a suitable state to obtain the resolver" in result.output

    def test_no_resolver(self, invoke, backend):
        backend.set_phase("enstest", AuctionPhase.OWNED)
        result = invoke("resolver", "enstest")
        assert result.exit_code == 1
        assert "No resolver for that name" in result.output

    def test_quiet_resolver(self, invoke, backend):
        backend.set_phase("enstest", AuctionPhase.OWNED)
        backend.resolvers["enstest.eth"] = RESOLVER_ADDRESS
        result = invoke("-q", "resolver", "enstest")
        assert result.exit_code == 0
        assert result.output == ""


class TestLogging:

    def test_activity_log(self, invoke, backend, tmp_path):
        log_file = tmp_path / "ens.log"
        backend.set_phase("enstest", AuctionPhase.BIDDING)
        result = invoke("-q", "--log", str(log_file), "auction", "bid", *SENDER, "-s", "my salt", "enstest")
        assert result.exit_code == 0

        text = log_file.read_text()
        assert '"msg": "Auction bid"' in text
        assert backend.sent[0]["transaction"] in text
