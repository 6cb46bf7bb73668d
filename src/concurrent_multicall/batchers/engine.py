"""
Concurrent multicall engine.

Drives a list of read-only calls through the whole pipeline::

    calls -> slices -> batches -> waves -> per-batch results -> output

Only one slice's worth of batches and results is held at a time, at most
``concurrency_limit`` aggregate requests are in flight, and a failed
request only ever costs the calls of its own batch.

Example:
    from web3 import Web3
    from concurrent_multicall.batchers import MulticallCall, concurrent_multicall

    web3 = Web3(Web3.HTTPProvider("http://localhost:8545"))
    calls = [MulticallCall(pair, True, "0x0902f1ac") for pair in pairs]
    results = await concurrent_multicall(web3, calls, batch_size=1000, concurrency_limit=5)
"""

import logging
import time
from typing import List, Optional, Sequence, Tuple, Union

from web3 import Web3

from .assembler import ResultAssembler
from .base import BatchConfig, CallResult, MulticallCall, ResultMode, RunSummary
from .chunking import GroupBatcher, MemoryChunker
from .codecs import Aggregate3Codec, BatchCodec, get_codec
from .executor import ConcurrencyLimitedExecutor
from .isolation import FailureIsolator
from .observability import EventSink, LoggingEventSink, RunCompleted, SliceStarted
from .transport import Transport, Web3Transport

logger = logging.getLogger(__name__)


class ConcurrentMulticall:
    """
    Batches read-only calls into aggregate requests and runs them concurrently.

    The configuration is validated on construction, so a bad slice size,
    batch size or concurrency limit fails before any request is sent. After
    that, an invocation always runs to completion: failed batches show up as
    ``None`` results (positional mode) or are left out (compacted mode) and
    are reported through the event sink.
    """

    def __init__(
        self,
        transport: Transport,
        codec: Optional[BatchCodec] = None,
        config: Optional[BatchConfig] = None,
        sink: Optional[EventSink] = None,
        address: Optional[str] = None,
    ):
        self.transport = transport
        self.codec = codec or Aggregate3Codec()
        self._config = (config or BatchConfig()).validate()
        self.sink = sink or LoggingEventSink(logging.getLogger(f"{__name__}.{self.__class__.__name__}"))
        self._address = address or self.codec.default_address

        self.chunker = MemoryChunker(self._config.slice_size)
        self.batcher = GroupBatcher(self._config.batch_size)
        self.isolator = FailureIsolator(
            transport, self.codec, self._address, self._config, self.sink
        )
        self.executor = ConcurrencyLimitedExecutor(
            self.isolator, self._config.concurrency_limit, self.sink
        )

    @property
    def config(self) -> BatchConfig:
        return self._config

    @property
    def result_mode(self) -> ResultMode:
        """Result mode used when an invocation does not override it."""
        return self._config.result_mode

    @property
    def address(self) -> str:
        return self._address

    def close(self):
        """Release the transport's resources, if it holds any."""
        close = getattr(self.transport, "close", None)
        if callable(close):
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    async def execute_with_summary(
        self,
        calls: Sequence[MulticallCall],
        result_mode: Optional[Union[ResultMode, str]] = None,
    ) -> Tuple[List[CallResult], RunSummary]:
        """
        Run every call and report totals.

        Args:
            calls: Calls in the order results should come back
            result_mode: Override for the configured result mode

        Returns:
            Results in input order, and the run summary
        """
        mode = ResultMode.parse(result_mode) if result_mode is not None else self.result_mode
        assembler = ResultAssembler(mode)
        summary = RunSummary(result_mode=mode, total_calls=len(calls))
        started = time.monotonic()

        slice_count = self.chunker.count(len(calls))
        batch_index = 0
        wave_index = 0

        for slice_ in self.chunker.slices(calls):
            self.sink.emit(
                SliceStarted(
                    slice_index=slice_.index,
                    slice_count=slice_count,
                    start=slice_.start,
                    end=slice_.end,
                    total_calls=len(calls),
                )
            )

            batches = self.batcher.batches(slice_, first_index=batch_index)
            batch_index += len(batches)

            async for wave, outcomes in self.executor.run(
                batches, slice_.index, wave_index, total_calls=len(calls)
            ):
                wave_index += 1
                summary.failed_batches.extend(
                    outcome.batch.index for outcome in outcomes if outcome.failed
                )
                assembler.add_wave(outcomes)

            summary.slices += 1

        summary.batches = batch_index
        summary.waves = wave_index
        summary.succeeded = assembler.succeeded
        summary.failed = assembler.failed
        summary.elapsed = time.monotonic() - started
        self.sink.emit(RunCompleted(summary=summary))

        return assembler.results(), summary

    async def execute(
        self,
        calls: Sequence[MulticallCall],
        result_mode: Optional[Union[ResultMode, str]] = None,
    ) -> List[CallResult]:
        """Run every call; see ``execute_with_summary``."""
        results, _ = await self.execute_with_summary(calls, result_mode)
        return results

    @classmethod
    def from_config(
        cls,
        config_manager,
        chain: Optional[str] = None,
        sink: Optional[EventSink] = None,
    ) -> "ConcurrentMulticall":
        """
        Build an engine talking to a chain's RPC endpoint from configuration.

        Args:
            config_manager: ConfigManager instance
            chain: Chain name (defaults to the configured default chain)
            sink: Event sink (defaults to logging)

        Returns:
            Engine with a Web3 HTTP transport and the configured codec
        """
        chain = chain or config_manager.chains.DEFAULT_CHAIN
        rpc_url = config_manager.chains.get_rpc_url(chain)
        batch_config = config_manager.multicall.to_batch_config()

        web3 = Web3(Web3.HTTPProvider(rpc_url))
        transport = Web3Transport(web3, max_workers=batch_config.concurrency_limit)
        codec = get_codec(config_manager.multicall.CODEC)

        logger.info(f"Multicall engine for {chain} at {rpc_url} (codec={config_manager.multicall.CODEC})")

        return cls(
            transport,
            codec=codec,
            config=batch_config,
            sink=sink,
            address=config_manager.multicall.MULTICALL_ADDRESS,
        )


# Convenience function for easy usage
async def concurrent_multicall(
    web3: Web3,
    calls: Sequence[MulticallCall],
    batch_size: int = 1000,
    concurrency_limit: int = 5,
    slice_size: int = 300_000,
    result_mode: Union[ResultMode, str] = ResultMode.POSITIONAL,
    block_identifier: Union[int, str] = "latest",
) -> List[CallResult]:
    """
    Convenience function to run calls through Multicall3 ``aggregate3``.

    Args:
        web3: Web3 instance
        calls: Calls to run
        batch_size: Number of calls in each aggregate request
        concurrency_limit: Number of aggregate requests in flight at once
        slice_size: Number of calls processed per memory-bounded pass
        result_mode: ``positional`` or ``compacted``
        block_identifier: Block to call at

    Returns:
        Per-call results (see ResultMode)
    """
    config = BatchConfig(
        slice_size=slice_size,
        batch_size=batch_size,
        concurrency_limit=concurrency_limit,
        result_mode=result_mode,
    ).validate()
    with Web3Transport(web3, block_identifier, max_workers=concurrency_limit) as transport:
        engine = ConcurrentMulticall(transport, config=config)
        return await engine.execute(calls)
