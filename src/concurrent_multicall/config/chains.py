"""
Chain-specific configuration for concurrent_multicall.
"""

from dataclasses import dataclass, field
from typing import Dict

from .base import BaseConfig


@dataclass
class ChainConfig(BaseConfig):
    """RPC endpoints and chain ids for the chains multicall batches are sent to."""

    # Default chain settings
    DEFAULT_CHAIN: str = field(
        default_factory=lambda: BaseConfig.get_env("DEFAULT_CHAIN", "ethereum")
    )

    # Chain-specific RPC URLs
    ETHEREUM_RPC_URL: str = field(
        default_factory=lambda: BaseConfig.get_env(
            "ETHEREUM_RPC_URL", "http://localhost:8545"
        )
    )
    BASE_RPC_URL: str = field(
        default_factory=lambda: BaseConfig.get_env("BASE_RPC_URL", "https://mainnet.base.org")
    )
    ARBITRUM_RPC_URL: str = field(
        default_factory=lambda: BaseConfig.get_env(
            "ARBITRUM_RPC_URL", "https://arb1.arbitrum.io/rpc"
        )
    )

    # Chain IDs
    ETHEREUM_CHAIN_ID: int = 1
    BASE_CHAIN_ID: int = 8453
    ARBITRUM_CHAIN_ID: int = 42161

    @property
    def supported_chains(self) -> Dict[str, Dict]:
        """Get configuration for all supported chains."""
        return {
            "ethereum": {
                "chain_id": self.ETHEREUM_CHAIN_ID,
                "rpc_url": self.ETHEREUM_RPC_URL,
                "native_token": "ETH",
            },
            "base": {
                "chain_id": self.BASE_CHAIN_ID,
                "rpc_url": self.BASE_RPC_URL,
                "native_token": "ETH",
            },
            "arbitrum": {
                "chain_id": self.ARBITRUM_CHAIN_ID,
                "rpc_url": self.ARBITRUM_RPC_URL,
                "native_token": "ETH",
            },
        }

    def get_chain_config(self, chain_name: str) -> Dict:
        """
        Get configuration for a specific chain.

        Args:
            chain_name: Name of the blockchain (ethereum, base, arbitrum)

        Returns:
            Chain configuration dictionary

        Raises:
            ValueError: If the chain is not supported
        """
        chain_name = chain_name.lower()
        if chain_name not in self.supported_chains:
            raise ValueError(
                f"Unsupported chain: {chain_name}. "
                f"Supported chains: {list(self.supported_chains.keys())}"
            )
        return self.supported_chains[chain_name]

    def get_rpc_url(self, chain_name: str) -> str:
        """Get RPC URL for a specific chain."""
        return self.get_chain_config(chain_name)["rpc_url"]

    def get_chain_id(self, chain_name: str) -> int:
        """Get chain ID for a specific chain."""
        return self.get_chain_config(chain_name)["chain_id"]
