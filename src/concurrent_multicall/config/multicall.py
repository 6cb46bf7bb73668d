"""
Multicall engine configuration for concurrent_multicall.

Every knob of the batching engine can be overridden from the environment
(or a ``.env`` file), e.g.::

    MULTICALL_BATCH_SIZE=1500
    MULTICALL_CONCURRENCY=5
    MULTICALL_RESULT_MODE=compacted
"""

from dataclasses import dataclass, field
from typing import Optional

from .base import BaseConfig

MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"


@dataclass
class MulticallConfig(BaseConfig):
    """Settings for slicing, batching and dispatching multicall requests."""

    MULTICALL_ADDRESS: str = field(
        default_factory=lambda: BaseConfig.get_env("MULTICALL_ADDRESS", MULTICALL3_ADDRESS)
    )
    # Aggregator ABI: aggregate3 (Multicall3) or try_aggregate (Multicall2)
    CODEC: str = field(
        default_factory=lambda: BaseConfig.get_env("MULTICALL_CODEC", "aggregate3")
    )

    # Memory bound: calls held in flight per pass
    SLICE_SIZE: int = field(
        default_factory=lambda: BaseConfig.get_env_int("MULTICALL_SLICE_SIZE", 300_000)
    )
    # Calls combined into one aggregate request
    BATCH_SIZE: int = field(
        default_factory=lambda: BaseConfig.get_env_int("MULTICALL_BATCH_SIZE", 1000)
    )
    # Aggregate requests outstanding at once
    CONCURRENCY_LIMIT: int = field(
        default_factory=lambda: BaseConfig.get_env_int("MULTICALL_CONCURRENCY", 5)
    )
    RESULT_MODE: str = field(
        default_factory=lambda: BaseConfig.get_env("MULTICALL_RESULT_MODE", "positional")
    )

    # Per-request settings
    TIMEOUT: float = field(
        default_factory=lambda: BaseConfig.get_env_float("MULTICALL_TIMEOUT", 30.0)
    )
    MAX_RETRIES: int = field(
        default_factory=lambda: BaseConfig.get_env_int("MULTICALL_MAX_RETRIES", 1)
    )
    RETRY_DELAY: float = field(
        default_factory=lambda: BaseConfig.get_env_float("MULTICALL_RETRY_DELAY", 1.0)
    )

    def to_batch_config(self, result_mode: Optional[str] = None):
        """
        Build a validated engine configuration from these settings.

        Args:
            result_mode: Override for RESULT_MODE

        Returns:
            BatchConfig ready to hand to the engine

        Raises:
            ConfigError: If any setting is out of range
        """
        from ..batchers.base import BatchConfig, ResultMode

        mode = ResultMode.parse(result_mode or self.RESULT_MODE)

        config = BatchConfig(
            slice_size=self.SLICE_SIZE,
            batch_size=self.BATCH_SIZE,
            concurrency_limit=self.CONCURRENCY_LIMIT,
            result_mode=mode,
            timeout=self.TIMEOUT if self.TIMEOUT > 0 else None,
            max_retries=self.MAX_RETRIES,
            retry_delay=self.RETRY_DELAY,
        )
        config.validate()
        return config
