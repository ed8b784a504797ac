"""
ENS CLI - Command Line Interface for the ENS auction registrar

Main entry point for all CLI commands.
"""

import logging
from typing import Optional

import click

from enscli import __version__
from enscli.core.auction import (
    EnsCliError,
    InvalidPhaseError,
    Name,
)
from enscli.core.config import ClientConfig, load_config
from enscli.utils.logger import setup_logging, get_logger
from enscli.utils.units import wei_to_string

logger = get_logger("cli")


# =============================================================================
# Context Helpers
# =============================================================================


def fail(ctx: click.Context, message: str, error: Optional[Exception] = None):
    """Report a failure (unless quiet) and exit with status 1."""
    if not ctx.obj.get("quiet"):
        text = f"{message}: {error}" if error is not None else message
        click.echo(text, err=True)
    ctx.exit(1)


def say(ctx: click.Context, text: str):
    """Print a result line unless in quiet mode."""
    if not ctx.obj.get("quiet"):
        click.echo(text)


def get_config(ctx: click.Context) -> ClientConfig:
    return ctx.obj["config"]


def get_backend(ctx: click.Context):
    """Backend for the configured node; the node is contacted on first use."""
    if ctx.obj.get("backend") is None:
        from enscli.chain.web3_backend import Web3Backend

        ctx.obj["backend"] = Web3Backend.connect(get_config(ctx))
    return ctx.obj["backend"]


def get_keystore(ctx: click.Context):
    if ctx.obj.get("keystore") is None:
        from enscli.chain.wallet import Keystore

        ctx.obj["keystore"] = Keystore(get_config(ctx).keystore_dir)
    return ctx.obj["keystore"]


def get_journal(ctx: click.Context):
    if ctx.obj.get("journal") is None:
        from enscli.core.journal import BidJournal

        ctx.obj["journal"] = BidJournal(get_config(ctx).data_dir)
    return ctx.obj["journal"]


def parse_name(ctx: click.Context, raw: str) -> Name:
    try:
        return Name(raw)
    except EnsCliError as e:
        fail(ctx, "Invalid name", e)


def run(ctx: click.Context, phase_message: str, failure_message: str, fn, *args, **kwargs):
    """
    Run a command function, turning client errors into exit status 1.

    Args:
        phase_message: Shown when the name is in the wrong phase
        failure_message: Shown for every other client error
    """
    try:
        return fn(*args, **kwargs)
    except InvalidPhaseError as e:
        fail(ctx, phase_message, e)
    except EnsCliError as e:
        logger.debug(f"{fn.__name__} failed: {e!r}")
        fail(ctx, failure_message, e)


def transaction_options(fn):
    """Flags shared by every command that sends a transaction."""
    fn = click.option("--nonce", type=int, default=-1, help="Nonce for the transaction (-1 asks the node)")(fn)
    fn = click.option("--gaslimit", type=int, default=None, help="Gas limit for the transaction")(fn)
    fn = click.option("-g", "--gasprice", default=None, help="Gas price for the transaction")(fn)
    fn = click.option("-p", "--passphrase", default="", help="Passphrase for the account sending the transaction")(fn)
    fn = click.option("-a", "--address", default="", help="Address sending the transaction")(fn)
    return fn


def build_options(ctx: click.Context, address, passphrase, gasprice, gaslimit, nonce):
    from enscli.core.commands import TransactionOptions

    config = get_config(ctx)
    return TransactionOptions(
        address=address,
        passphrase=passphrase,
        gas_price=gasprice or config.gas_price,
        gas_limit=gaslimit if gaslimit is not None else config.gas_limit,
        nonce=None if nonce == -1 else nonce,
    )


# =============================================================================
# Root
# =============================================================================


@click.group()
@click.option("--config", "config_path", default=None, help="Config file (default is $HOME/.ens.toml)")
@click.option("-l", "--log", "log_file", default=None, help="Log activity to the named file")
@click.option("-q", "--quiet", is_flag=True, help="No output; success is reported by exit code")
@click.option("-c", "--connection", default=None, help="URL of the Ethereum node")
@click.option("--keystore", "keystore_dir", default=None, help="Keystore directory")
@click.option("--data-dir", default=None, help="Data directory for the bid journal")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, config_path, log_file, quiet, connection, keystore_dir, data_dir, debug):
    """Manage entries for the Ethereum Name Service (ENS)"""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet

    try:
        config = ctx.obj.get("config") or load_config(config_path)
        config = config.override(
            connection=connection,
            keystore_dir=keystore_dir,
            data_dir=data_dir,
            log_file=log_file,
        )
    except EnsCliError as e:
        fail(ctx, "Failed to load configuration", e)

    ctx.obj["config"] = config
    level = logging.DEBUG if debug else logging.WARNING
    setup_logging(level=level, log_file=config.log_file, quiet=quiet)


# =============================================================================
# Auction Commands
# =============================================================================


@cli.group()
def auction():
    """Auction commands"""
    pass


@auction.command("start")
@click.argument("name", required=False, default="")
@transaction_options
@click.pass_context
def auction_start(ctx, name, address, passphrase, gasprice, gaslimit, nonce):
    """Start the auction for an ENS name.

    \b
        ens auction start --address=0x5FfC014343cd971B7eb70732021E26C35B744cc4 --passphrase="my secret passphrase" enstest.eth

    In quiet mode this will return 0 if the transaction to start the auction
    is sent successfully, otherwise 1.
    """
    from enscli.core.commands import start_auction

    ens_name = parse_name(ctx, name)
    options = build_options(ctx, address, passphrase, gasprice, gaslimit, nonce)
    result = run(
        ctx,
        "Name not in a suitable state to start an auction",
        "Failed to start auction",
        start_auction, get_backend(ctx), get_keystore(ctx), ens_name, options,
    )
    say(ctx, f"Transaction ID is {result.transaction}")


@auction.command("bid")
@click.argument("name", required=False, default="")
@click.option("-b", "--bid", "bid_amount", default="0.01 Ether", help="Bid price for the name")
@click.option("-m", "--mask", "mask_amount", default="", help="Amount of Ether sent in the transaction (must be at least the bid)")
@click.option("-s", "--salt", default="", help="Memorable phrase needed when revealing bid")
@transaction_options
@click.pass_context
def auction_bid(ctx, name, bid_amount, mask_amount, salt, address, passphrase, gasprice, gaslimit, nonce):
    """Bid the auction for an ENS name.

    \b
        ens auction bid --address=0x5FfC014343cd971B7eb70732021E26C35B744cc4 --passphrase="my secret passphrase" --bid="0.01 Ether" --salt="my salt" enstest.eth

    The keystore for the address must be local and unlockable with the
    supplied passphrase.

    In quiet mode this will return 0 if the transaction to place the bid is
    sent successfully, otherwise 1.
    """
    from enscli.core.commands import place_bid

    ens_name = parse_name(ctx, name)
    options = build_options(ctx, address, passphrase, gasprice, gaslimit, nonce)
    result = run(
        ctx,
        "Name not in a suitable state to bid on an auction",
        "Failed to place bid",
        place_bid, get_backend(ctx), get_keystore(ctx), ens_name, options,
        bid_amount=bid_amount, salt=salt, mask_amount=mask_amount, journal=get_journal(ctx),
    )
    say(ctx, f"Transaction ID is {result.transaction}")


@auction.command("reveal")
@click.argument("name", required=False, default="")
@click.option("-b", "--bid", "bid_amount", default="0.01 Ether", help="Bid price for the name")
@click.option("-s", "--salt", default="", help="Memorable phrase used when bidding")
@transaction_options
@click.pass_context
def auction_reveal(ctx, name, bid_amount, salt, address, passphrase, gasprice, gaslimit, nonce):
    """Reveal a bid in an auction for an ENS name.

    \b
        ens auction reveal --address=0x5FfC014343cd971B7eb70732021E26C35B744cc4 --passphrase="my secret passphrase" --bid="0.01 Ether" --salt="my salt" enstest.eth

    In quiet mode this will return 0 if the transaction to reveal the bid is
    sent successfully, otherwise 1.
    """
    from enscli.core.commands import reveal_bid

    ens_name = parse_name(ctx, name)
    options = build_options(ctx, address, passphrase, gasprice, gaslimit, nonce)
    result = run(
        ctx,
        "Name not in a suitable state to reveal a bid",
        "Failed to reveal bid",
        reveal_bid, get_backend(ctx), get_keystore(ctx), ens_name, options,
        bid_amount=bid_amount, salt=salt, journal=get_journal(ctx),
    )
    say(ctx, f"Transaction ID is {result.transaction}")


@auction.command("status")
@click.argument("name", required=False, default="")
@click.pass_context
def auction_status(ctx, name):
    """Show the auction phase of an ENS name"""
    from enscli.core.commands import query_phase

    ens_name = parse_name(ctx, name)
    phase = run(ctx, "", "Failed to obtain auction phase", query_phase, get_backend(ctx), ens_name)
    say(ctx, phase.label)


@auction.command("bids")
@click.argument("name", required=False, default="")
@click.pass_context
def auction_bids(ctx, name):
    """List bids placed from this machine"""
    ens_name = parse_name(ctx, name) if name else None
    entries = run(ctx, "", "Failed to read bid journal", get_journal(ctx).entries, ens_name)
    if not entries:
        say(ctx, "No bids found.")
        return

    for entry in entries:
        status = "revealed" if entry.revealed else "sealed"
        say(ctx, f"  {entry.name}: {entry.bidder} bid {wei_to_string(entry.value)} "
                 f"(sent {wei_to_string(entry.mask)}) [{status}] {entry.transaction}")


# =============================================================================
# Resolver Command
# =============================================================================


@cli.command("resolver")
@click.argument("name", required=False, default="")
@click.pass_context
def resolver(ctx, name):
    """Obtain the resolver of an ENS name.

    \b
        ens resolver enstest.eth

    In quiet mode this will return 0 if the name has a resolver, otherwise 1.
    """
    from enscli.core.commands import query_resolver

    ens_name = parse_name(ctx, name)
    address = run(
        ctx,
        "Name not in a suitable state to obtain the resolver",
        "No resolver for that name",
        query_resolver, get_backend(ctx), ens_name,
    )
    say(ctx, address)


if __name__ == "__main__":
    cli()
