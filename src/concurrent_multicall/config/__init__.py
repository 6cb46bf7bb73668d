"""
Configuration management for concurrent_multicall.

Use get_config() to access all configuration settings.

Example:
    from concurrent_multicall.config import get_config

    config = get_config()

    # Access chain settings
    ethereum_rpc = config.chains.get_rpc_url("ethereum")

    # Access engine settings
    batch_config = config.multicall.to_batch_config()
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .manager import ConfigManager, get_config, reload_config
from .multicall import MULTICALL3_ADDRESS, MulticallConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "MulticallConfig",
    "MULTICALL3_ADDRESS",
    "ConfigManager",
    "get_config",
    "reload_config",
]
