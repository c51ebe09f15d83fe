"""
Keypair loading for the t2022 CLI
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from solders.keypair import Keypair

from .errors import KeyLoadError

logger = logging.getLogger("t2022")


def load_keypair(path: Union[str, Path]) -> Keypair:
    """
    Load a keypair from a Solana JSON key file.

    Args:
        path: Path to a file holding a JSON array of 64 byte values

    Returns:
        The loaded keypair
    """
    key_path = Path(path).expanduser()

    try:
        with open(key_path, 'r') as f:
            raw = json.load(f)
    except FileNotFoundError as exc:
        raise KeyLoadError(f"Keypair file not found: {key_path}", exc) from exc
    except OSError as exc:
        raise KeyLoadError(f"Unable to read keypair file {key_path}: {exc}", exc) from exc
    except ValueError as exc:
        raise KeyLoadError(f"Keypair file {key_path} is not valid JSON", exc) from exc

    if not isinstance(raw, list) or len(raw) != 64:
        raise KeyLoadError(f"Keypair file {key_path} must contain a JSON array of 64 bytes")

    try:
        keypair = Keypair.from_bytes(bytes(raw))
    except (TypeError, ValueError) as exc:
        raise KeyLoadError(f"Keypair file {key_path} does not hold a valid keypair: {exc}", exc) from exc

    logger.debug(f"Loaded keypair {keypair.pubkey()} from {key_path}")
    return keypair


def load_or_generate_keypair(path: Optional[Union[str, Path]] = None) -> Keypair:
    """Load a keypair from ``path``, or generate a fresh one when no path is given"""
    if path:
        return load_keypair(path)

    keypair = Keypair()
    logger.debug(f"Generated new keypair {keypair.pubkey()}")
    return keypair
