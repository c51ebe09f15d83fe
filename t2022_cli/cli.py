"""
t2022 CLI - Command-line client for Token-2022 tokens
"""

import click
import logging
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import Config
from .utils import setup_logging
from .commands.token import create_token_command, mint_command, transfer_command
from .commands.inspect import account_info_command, mint_info_command

# Set up logger
logger = logging.getLogger("t2022")

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--config', type=click.Path(dir_okay=False), help='Path to Solana CLI config file')
@click.option('-u', '--url', help='JSON RPC URL, overriding the config file')
@click.option('-k', '--keypair', type=click.Path(dir_okay=False), help='Fee payer keypair file, overriding the config file')
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug, config, url, keypair, no_color):
    """t2022 CLI - Create, mint, transfer and inspect Token-2022 tokens"""
    # Set up logging
    setup_logging(debug)

    # Initialize console
    console = Console(color_system=None if no_color else "auto")

    # Load configuration
    config_obj = Config(config, overrides={"json_rpc_url": url, "keypair_path": keypair})

    # Store in context; a client or payer already present is kept
    ctx.ensure_object(dict)
    ctx.obj['console'] = console
    ctx.obj['config'] = config_obj
    ctx.obj['debug'] = debug
    ctx.obj.setdefault('client', None)
    ctx.obj.setdefault('payer', None)

    logger.debug("CLI initialized")


# Add commands
cli.add_command(create_token_command)
cli.add_command(mint_command)
cli.add_command(transfer_command)
cli.add_command(account_info_command)
cli.add_command(mint_info_command)


@cli.command()
@click.option('--key', help='Configuration key to get')
@click.pass_context
def config(ctx, key):
    """Show the effective configuration"""
    console = ctx.obj['console']
    config = ctx.obj['config']

    if key:
        # Get specific config value
        value = config.get(key)
        if value is not None:
            console.print(f"{key}: {value}", soft_wrap=True)
        else:
            console.print(f"[yellow]Configuration key '{key}' not found[/yellow]")
    else:
        # List all config values
        config_data = config.get_all()

        table = Table(title="Configuration")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")

        for k, v in config_data.items():
            table.add_row(k, str(v))

        console.print(f"[dim]Config file: {config.config_path}[/dim]", soft_wrap=True)
        console.print(table)


if __name__ == '__main__':
    cli()
