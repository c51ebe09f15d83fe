"""
Read-only inspection commands for the t2022 CLI
"""

import logging

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from solders.pubkey import Pubkey

from t2022_cli.client import LedgerClient
from t2022_cli.commands import PUBKEY, get_client, handle_errors
from t2022_cli.commands.token import fetch_mint
from t2022_cli.extensions import (
    AccountState,
    ExtensionType,
    MintState,
    TransferFeeConfig,
    unpack_account,
)
from t2022_cli.utils import display_value, format_output

logger = logging.getLogger("t2022")


def get_account_state(client: LedgerClient, address: Pubkey) -> AccountState:
    """Fetch and decode a token account"""
    return unpack_account(client.require_account_data(address))


def _extension_names(state) -> str:
    names = [extension_type.display_name for extension_type in state.extension_types]
    return ", ".join(names) if names else "(none)"


def _display_account_table(console: Console, state: AccountState, address: Pubkey):
    """Display a token account as a table"""
    console.print(Panel(f"[bold]Token Account: {address}[/bold]", expand=False))

    table = Table(title="Account Information")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    properties = [
        ("Mint", state.mint),
        ("Owner", state.owner),
        ("Amount", state.amount),
        ("Delegate", state.delegate),
        ("State", state.state),
        ("Is Native", state.is_native),
        ("Delegated Amount", state.delegated_amount),
        ("Close Authority", state.close_authority),
        ("Extensions", _extension_names(state)),
    ]

    fee_amount = state.get_extension(ExtensionType.TRANSFER_FEE_AMOUNT)
    if fee_amount is not None:
        properties.append(("Withheld Amount", fee_amount.withheld_amount))

    for prop, value in properties:
        table.add_row(prop, display_value(value))

    console.print(table)


def _display_transfer_fee_config(console: Console, fee_config: TransferFeeConfig):
    """Display the transfer fee extension of a mint"""
    table = Table(title="Transfer Fee Config")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    rows = [
        ("Config Authority", fee_config.transfer_fee_config_authority),
        ("Withdraw Withheld Authority", fee_config.withdraw_withheld_authority),
        ("Withheld Amount", fee_config.withheld_amount),
    ]
    for label, fee in (("Older", fee_config.older_transfer_fee), ("Newer", fee_config.newer_transfer_fee)):
        rows.extend([
            (f"{label} Fee Epoch", fee.epoch),
            (f"{label} Fee Basis Points", fee.transfer_fee_basis_points),
            (f"{label} Maximum Fee", fee.maximum_fee),
        ])

    for prop, value in rows:
        table.add_row(prop, display_value(value))

    console.print(table)


def _display_mint_table(console: Console, state: MintState, address: Pubkey):
    """Display a mint as a table"""
    console.print(Panel(f"[bold]Mint: {address}[/bold]", expand=False))

    table = Table(title="Mint Information")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    properties = [
        ("Mint Authority", state.mint_authority),
        ("Supply", state.supply),
        ("Decimals", state.decimals),
        ("Initialized", "Yes" if state.is_initialized else "No"),
        ("Freeze Authority", state.freeze_authority),
        ("Extensions", _extension_names(state)),
    ]
    for prop, value in properties:
        table.add_row(prop, display_value(value))

    console.print(table)

    fee_config = state.get_extension(ExtensionType.TRANSFER_FEE_CONFIG)
    if fee_config is not None:
        _display_transfer_fee_config(console, fee_config)


@click.command('account-info')
@click.argument('address', type=PUBKEY)
@click.option('--format', type=click.Choice(['table', 'json']), default='table', help='Output format')
@click.option('--output', type=click.Path(), help='Save JSON output to file')
@click.pass_context
@handle_errors
def account_info_command(ctx, address, format, output):
    """Show a token account and its extensions"""
    console = ctx.obj['console']

    client = get_client(ctx)
    with console.status(f"[bold green]Fetching account {address}..."):
        state = get_account_state(client, address)

    if format == 'table' and not output:
        _display_account_table(console, state, address)
    else:
        format_output({"address": str(address), **state.to_dict()}, output, console)


@click.command('mint-info')
@click.argument('address', type=PUBKEY)
@click.option('--format', type=click.Choice(['table', 'json']), default='table', help='Output format')
@click.option('--output', type=click.Path(), help='Save JSON output to file')
@click.pass_context
@handle_errors
def mint_info_command(ctx, address, format, output):
    """Show a mint and its extensions"""
    console = ctx.obj['console']

    client = get_client(ctx)
    with console.status(f"[bold green]Fetching mint {address}..."):
        state = fetch_mint(client, address)

    if format == 'table' and not output:
        _display_mint_table(console, state, address)
    else:
        format_output({"address": str(address), **state.to_dict()}, output, console)
