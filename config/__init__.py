# PATH: config/__init__.py
"""
Configuration loading utilities for PRICER.
"""

from pathlib import Path
from typing import Any, Dict

import yaml

from core.constants import ErrorCode
from core.exceptions import ConfigError


CONFIG_DIR = Path(__file__).parent


def load_yaml(filename: str, config_dir: Path | None = None) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of file in config directory
        config_dir: Directory to read from (default: this package)

    Returns:
        Parsed YAML as dict
    """
    filepath = (config_dir or CONFIG_DIR) / filename
    if not filepath.exists():
        raise ConfigError(
            f"Config file not found: {filepath}",
            {"path": str(filepath)},
            code=ErrorCode.CONFIG_NOT_FOUND,
        )

    with open(filepath, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file must contain a mapping: {filepath}",
            {"path": str(filepath), "type": type(data).__name__},
        )
    return data


def load_chains() -> Dict[str, Any]:
    """Load chains configuration."""
    return load_yaml("chains.yaml")


def load_pricing() -> Dict[str, Any]:
    """Load pricing configuration."""
    return load_yaml("pricing.yaml")


def get_chain_config(chain_key: str) -> Dict[str, Any]:
    """
    Get configuration for a specific chain.

    Args:
        chain_key: Chain identifier (e.g., 'fantom')

    Returns:
        Chain configuration dict
    """
    chains = load_chains()
    if chain_key not in chains:
        raise ConfigError(
            f"Unknown chain: {chain_key}",
            {"chain": chain_key, "known": sorted(chains)},
            code=ErrorCode.CONFIG_UNKNOWN_CHAIN,
        )
    return chains[chain_key]
