"""
Shared plumbing for t2022 CLI commands
"""

import functools
import logging

import click
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from t2022_cli.amounts import parse_ui_amount
from t2022_cli.client import LedgerClient
from t2022_cli.errors import ArgumentError, T2022CliError
from t2022_cli.keys import load_keypair
from t2022_cli.utils import handle_cli_error

logger = logging.getLogger("t2022")


class PubkeyParamType(click.ParamType):
    """Click parameter type for base58 account addresses"""

    name = "address"

    def convert(self, value, param, ctx):
        if isinstance(value, Pubkey):
            return value
        try:
            return Pubkey.from_string(value)
        except ValueError:
            self.fail(f"{value!r} is not a valid address", param, ctx)


class AmountParamType(click.ParamType):
    """Click parameter type for human-readable token amounts"""

    name = "amount"

    def convert(self, value, param, ctx):
        try:
            return parse_ui_amount(value)
        except ArgumentError as e:
            self.fail(str(e), param, ctx)


PUBKEY = PubkeyParamType()
AMOUNT = AmountParamType()


def get_client(ctx: click.Context) -> LedgerClient:
    """Return the ledger client for this invocation, creating it on first use"""
    if ctx.obj.get('client') is None:
        config = ctx.obj['config']
        ctx.obj['client'] = LedgerClient(config.json_rpc_url, commitment=config.commitment)
    return ctx.obj['client']


def get_payer(ctx: click.Context) -> Keypair:
    """Return the fee payer keypair, loading it from the configured path on first use"""
    if ctx.obj.get('payer') is None:
        config = ctx.obj['config']
        ctx.obj['payer'] = load_keypair(config.keypair_path)
    return ctx.obj['payer']


def handle_errors(func):
    """Report CLI errors once and exit with the error's exit code"""
    @functools.wraps(func)
    def wrapper(ctx, *args, **kwargs):
        try:
            return func(ctx, *args, **kwargs)
        except T2022CliError as e:
            handle_cli_error(e, ctx.obj['console'])
            ctx.exit(e.exit_code)
    return wrapper
