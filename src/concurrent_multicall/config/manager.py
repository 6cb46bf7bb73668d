"""
Configuration manager for concurrent_multicall.

This module provides a centralized way to access all configuration settings
across the application. It combines all configuration classes into a single
easy-to-use interface.
"""

import logging
from typing import Any, Dict, Optional

from web3 import Web3

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .multicall import MulticallConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Centralized configuration manager that combines all configuration classes.

    This class provides easy access to all configuration settings and ensures
    that configurations are properly initialized and validated.
    """

    def __init__(self, environment: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            environment: Override the environment (local, dev, staging, production, test)
        """
        self._environment = environment
        self._base_config = None
        self._chain_config = None
        self._multicall_config = None
        self._initialize_configs()

    def _initialize_configs(self):
        """Initialize all configuration objects."""
        try:
            # Initialize base configuration first
            if self._environment:
                self._base_config = BaseConfig(ENVIRONMENT=self._environment)
            else:
                self._base_config = BaseConfig()

            self._chain_config = ChainConfig()
            self._multicall_config = MulticallConfig()

            logger.info(f"Configuration initialized for environment: {self.environment}")

        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}")

    @property
    def environment(self) -> str:
        """Get current environment."""
        return self._base_config.ENVIRONMENT

    @property
    def base(self) -> BaseConfig:
        """Get base configuration."""
        return self._base_config

    @property
    def chains(self) -> ChainConfig:
        """Get chain configuration."""
        return self._chain_config

    @property
    def multicall(self) -> MulticallConfig:
        """Get multicall engine configuration."""
        return self._multicall_config

    def validate_configuration(self) -> bool:
        """
        Validate all configuration settings.

        Returns:
            True if all configurations are valid

        Raises:
            ConfigError: If any configuration is invalid
        """
        if not self.chains.supported_chains:
            raise ConfigError("No chains configured")

        try:
            self.chains.get_chain_config(self.chains.DEFAULT_CHAIN)
        except ValueError as e:
            raise ConfigError(f"Invalid default chain: {e}")

        if not Web3.is_address(self.multicall.MULTICALL_ADDRESS):
            raise ConfigError(
                f"Invalid multicall address: {self.multicall.MULTICALL_ADDRESS}"
            )

        from ..batchers.codecs import get_codec

        try:
            get_codec(self.multicall.CODEC)
        except ValueError as e:
            raise ConfigError(str(e))

        # Range checks for the engine knobs live with the engine config
        self.multicall.to_batch_config()

        logger.info("Configuration validation successful")
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert all configurations to dictionary format."""
        return {
            "environment": self.environment,
            "base": self.base.to_dict() if self.base else {},
            "chains": self.chains.to_dict() if self.chains else {},
            "multicall": self.multicall.to_dict() if self.multicall else {},
        }

    def __repr__(self) -> str:
        """String representation of the configuration manager."""
        return f"ConfigManager(environment={self.environment})"


# Global configuration manager instance
_config_manager = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        environment: Override environment
        force_reload: Force reload of configuration

    Returns:
        ConfigManager instance
    """
    global _config_manager

    if _config_manager is None or force_reload:
        _config_manager = ConfigManager(environment=environment)
        _config_manager.validate_configuration()

    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    """
    Reload the global configuration manager.

    Args:
        environment: Override environment

    Returns:
        New ConfigManager instance
    """
    return get_config(environment=environment, force_reload=True)
