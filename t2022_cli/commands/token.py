"""
Token commands for the t2022 CLI: create-token, mint and transfer
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

import click
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from t2022_cli.amounts import format_ui_amount, ui_amount_to_amount
from t2022_cli.client import LedgerClient
from t2022_cli.commands import AMOUNT, PUBKEY, get_client, get_payer, handle_errors
from t2022_cli.extensions import ExtensionType, MintState, get_mint_len, unpack_mint
from t2022_cli.instructions import (
    build_create_token_instructions,
    build_mint_to_instructions,
    build_transfer_instructions,
    derive_associated_token_address,
)
from t2022_cli.keys import load_or_generate_keypair
from t2022_cli.transaction import submit_transaction

logger = logging.getLogger("t2022")


@dataclass
class TokenCommandResult:
    """What a token command built and submitted"""
    mint: Pubkey
    signature: str
    instructions: List[Instruction] = field(default_factory=list)
    amount: Optional[int] = None
    decimals: Optional[int] = None
    destination: Optional[Pubkey] = None


def fetch_mint(client: LedgerClient, mint: Pubkey) -> MintState:
    """Fetch and decode a mint"""
    return unpack_mint(client.require_account_data(mint))


def create_token(
    client: LedgerClient,
    payer: Keypair,
    mint_keypair: Keypair,
    skip_preflight: bool = True,
) -> TokenCommandResult:
    """Create a mint with a transfer fee extension, funded and controlled by ``payer``"""
    space = get_mint_len([ExtensionType.TRANSFER_FEE_CONFIG])
    lamports = client.get_minimum_balance_for_rent_exemption(space)
    logger.debug(f"Mint account needs {space} bytes and {lamports} lamports")

    instructions = build_create_token_instructions(
        payer=payer.pubkey(),
        mint=mint_keypair.pubkey(),
        lamports=lamports,
        space=space,
    )
    signature = submit_transaction(client, instructions, payer, [mint_keypair], skip_preflight=skip_preflight)
    return TokenCommandResult(mint=mint_keypair.pubkey(), signature=signature, instructions=instructions)


def mint_tokens(
    client: LedgerClient,
    payer: Keypair,
    mint: Pubkey,
    ui_amount: Decimal,
    skip_preflight: bool = True,
) -> TokenCommandResult:
    """Mint ``ui_amount`` tokens into the payer's associated token account"""
    mint_state = fetch_mint(client, mint)
    amount = ui_amount_to_amount(ui_amount, mint_state.decimals)

    destination = derive_associated_token_address(payer.pubkey(), mint)
    instructions = build_mint_to_instructions(
        payer=payer.pubkey(),
        mint=mint,
        amount=amount,
        destination_exists=client.account_exists(destination),
    )
    signature = submit_transaction(client, instructions, payer, skip_preflight=skip_preflight)
    return TokenCommandResult(
        mint=mint,
        signature=signature,
        instructions=instructions,
        amount=amount,
        decimals=mint_state.decimals,
        destination=destination,
    )


def transfer_tokens(
    client: LedgerClient,
    payer: Keypair,
    mint: Pubkey,
    ui_amount: Decimal,
    recipient: Pubkey,
    skip_preflight: bool = True,
) -> TokenCommandResult:
    """Transfer ``ui_amount`` tokens from the payer to ``recipient``"""
    mint_state = fetch_mint(client, mint)
    amount = ui_amount_to_amount(ui_amount, mint_state.decimals)

    destination = derive_associated_token_address(recipient, mint)
    instructions = build_transfer_instructions(
        payer=payer.pubkey(),
        mint=mint,
        recipient=recipient,
        amount=amount,
        decimals=mint_state.decimals,
        destination_exists=client.account_exists(destination),
    )
    signature = submit_transaction(client, instructions, payer, skip_preflight=skip_preflight)
    return TokenCommandResult(
        mint=mint,
        signature=signature,
        instructions=instructions,
        amount=amount,
        decimals=mint_state.decimals,
        destination=destination,
    )


@click.command('create-token')
@click.argument('keypair_path', required=False, type=click.Path(dir_okay=False))
@click.pass_context
@handle_errors
def create_token_command(ctx, keypair_path):
    """Create a new token with a 1.23% transfer fee

    KEYPAIR_PATH optionally names a keypair file for the new mint; a fresh
    keypair is generated when it is omitted.
    """
    console = ctx.obj['console']
    config = ctx.obj['config']

    payer = get_payer(ctx)
    mint_keypair = load_or_generate_keypair(keypair_path)
    console.print(f"Mint: [cyan]{mint_keypair.pubkey()}[/cyan]", soft_wrap=True)

    client = get_client(ctx)
    with console.status("[bold green]Creating token..."):
        result = create_token(client, payer, mint_keypair, skip_preflight=config.skip_preflight)

    console.print(f"Signature: [green]{result.signature}[/green]", soft_wrap=True)


@click.command('mint')
@click.argument('token_address', type=PUBKEY)
@click.argument('amount', type=AMOUNT)
@click.pass_context
@handle_errors
def mint_command(ctx, token_address, amount):
    """Mint AMOUNT tokens of TOKEN_ADDRESS into your token account"""
    console = ctx.obj['console']
    config = ctx.obj['config']

    payer = get_payer(ctx)
    client = get_client(ctx)
    with console.status(f"[bold green]Minting {amount} tokens..."):
        result = mint_tokens(client, payer, token_address, amount, skip_preflight=config.skip_preflight)

    console.print(
        f"Minting {format_ui_amount(result.amount, result.decimals)} tokens "
        f"to [cyan]{result.destination}[/cyan]",
        soft_wrap=True,
    )
    console.print(f"Signature: [green]{result.signature}[/green]", soft_wrap=True)


@click.command('transfer')
@click.argument('token_address', type=PUBKEY)
@click.argument('amount', type=AMOUNT)
@click.argument('recipient_address', type=PUBKEY)
@click.pass_context
@handle_errors
def transfer_command(ctx, token_address, amount, recipient_address):
    """Transfer AMOUNT tokens of TOKEN_ADDRESS to RECIPIENT_ADDRESS"""
    console = ctx.obj['console']
    config = ctx.obj['config']

    payer = get_payer(ctx)
    client = get_client(ctx)
    with console.status(f"[bold green]Transferring {amount} tokens..."):
        result = transfer_tokens(
            client, payer, token_address, amount, recipient_address,
            skip_preflight=config.skip_preflight,
        )

    console.print(
        f"Transferring {format_ui_amount(result.amount, result.decimals)} tokens "
        f"to [cyan]{result.destination}[/cyan]",
        soft_wrap=True,
    )
    console.print(f"Signature: [green]{result.signature}[/green]", soft_wrap=True)
