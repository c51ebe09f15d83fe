"""
Utility functions for the t2022 CLI
"""

import json
import logging
import sys
from pathlib import Path
from typing import Dict, Any, Optional

from rich.console import Console
from rich.panel import Panel

from .errors import T2022CliError

logger = logging.getLogger("t2022")

LOG_DIR = Path(".t2022-cli") / "logs"


def setup_logging(debug: bool = False):
    """Set up logging for the CLI"""
    log_level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s: %(message)s',
                                  datefmt='%Y-%m-%d %H:%M:%S')

    # Console handler only reports warnings unless debugging; output goes through rich
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level if debug else logging.WARNING)
    console_handler.setFormatter(formatter)

    # Create file handler
    log_dir = Path.home() / LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_dir / "t2022_cli.log")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)

    # Configure the CLI logger only; solana-py and httpx keep their own levels
    t2022_logger = logging.getLogger("t2022")
    t2022_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in t2022_logger.handlers[:]:
        t2022_logger.removeHandler(handler)
        handler.close()

    t2022_logger.addHandler(console_handler)
    t2022_logger.addHandler(file_handler)

    logger.debug("Logging initialized")


def format_output(data: Dict[str, Any], output_path: Optional[str], console: Console):
    """Write data as JSON to a file or the console"""
    formatted_data = json.dumps(data, indent=2)

    if output_path:
        with open(output_path, 'w') as f:
            f.write(formatted_data)
        console.print(f"[green]Output saved to {output_path}[/green]")
    else:
        console.print_json(formatted_data)


def handle_cli_error(error: T2022CliError, console: Console):
    """Report a CLI error to the operator"""
    console.print(Panel(f"[bold red]Error: {str(error)}[/bold red]", title=error.title, expand=False))
    logger.error(f"{error.title}: {str(error)}")


def display_value(value: Any) -> str:
    """Render an optional field for table output"""
    if value is None:
        return "(not set)"
    return str(value)
