"""
concurrent_multicall: batched, concurrency-limited read-only contract calls.
"""

from .batchers import (
    ConcurrentMulticall,
    MulticallCall,
    ResultMode,
    concurrent_multicall,
)
from .config import ConfigError, get_config

__version__ = "0.1.0"

__all__ = [
    "ConcurrentMulticall",
    "MulticallCall",
    "ResultMode",
    "concurrent_multicall",
    "ConfigError",
    "get_config",
]
