"""
Configuration management for the t2022 CLI
"""

import logging
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

logger = logging.getLogger("t2022")

DEFAULT_CONFIG = {
    "json_rpc_url": "https://api.mainnet-beta.solana.com",
    "websocket_url": "",
    "keypair_path": "~/.config/solana/id.json",
    "commitment": "confirmed",
    "skip_preflight": True,
}


class Config:
    """Read-only view of the Solana CLI configuration file"""

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        """Initialize configuration manager"""
        if config_path:
            self.config_path = Path(config_path).expanduser()
        else:
            self.config_path = Path.home() / ".config" / "solana" / "cli" / "config.yml"

        self.config = self._load_config()

        # Command-line overrides win over the file, but only non-empty ones
        for key, value in (overrides or {}).items():
            if value is not None:
                self.config[key] = value

        logger.debug(f"Loaded configuration from {self.config_path}")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file, falling back to defaults"""
        if not self.config_path.exists():
            logger.debug(f"No config file at {self.config_path}, using defaults")
            return DEFAULT_CONFIG.copy()

        try:
            with open(self.config_path, 'r') as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Error loading config file: {e}")
            return DEFAULT_CONFIG.copy()

        if not isinstance(config, dict):
            logger.warning(f"Ignoring config file {self.config_path}: expected a mapping")
            return DEFAULT_CONFIG.copy()

        # Merge with defaults for any missing keys
        return {**DEFAULT_CONFIG, **config}

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value"""
        return self.config.get(key, default)

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values"""
        return self.config.copy()

    @property
    def json_rpc_url(self) -> str:
        """Get the JSON RPC URL"""
        return self.get("json_rpc_url")

    @property
    def keypair_path(self) -> Path:
        """Get the fee payer keypair path with ``~`` expanded"""
        return Path(self.get("keypair_path")).expanduser()

    @property
    def commitment(self) -> str:
        """Get the commitment level used for RPC requests"""
        return self.get("commitment")

    @property
    def skip_preflight(self) -> bool:
        """Whether transactions are sent without preflight simulation"""
        return bool(self.get("skip_preflight"))
