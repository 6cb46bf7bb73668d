"""
Wave-based execution of batches with a bounded number of requests in flight.
"""

import asyncio
import time
from typing import AsyncIterator, Iterator, List, Optional, Sequence, Tuple

from ..config.base import ConfigError
from .base import Batch, BatchOutcome, Wave
from .isolation import FailureIsolator
from .observability import EventSink, NullEventSink, WaveCompleted, WaveStarted


class ConcurrencyLimitedExecutor:
    """
    Runs batches in waves of at most ``concurrency_limit`` concurrent requests.

    All batches of a wave are submitted together and the next wave is not
    submitted until every batch of the current one has resolved. Results of
    a wave are handed back in batch order, whatever order the responses
    arrived in.
    """

    def __init__(
        self,
        isolator: FailureIsolator,
        concurrency_limit: int,
        sink: Optional[EventSink] = None,
    ):
        if isinstance(concurrency_limit, bool) or not isinstance(concurrency_limit, int) or concurrency_limit <= 0:
            raise ConfigError(
                f"concurrency_limit must be a positive integer, got: {concurrency_limit!r}"
            )
        self.isolator = isolator
        self.concurrency_limit = concurrency_limit
        self.sink = sink or NullEventSink()

    def waves(self, batches: Sequence[Batch], slice_index: int = 0, first_index: int = 0) -> Iterator[Wave]:
        """Group consecutive batches into waves of ``min(concurrency_limit, remaining)``."""
        for offset, start in enumerate(range(0, len(batches), self.concurrency_limit)):
            yield Wave(
                index=first_index + offset,
                slice_index=slice_index,
                batches=tuple(batches[start : start + self.concurrency_limit]),
            )

    async def run_wave(self, wave: Wave) -> List[BatchOutcome]:
        """Submit every batch of a wave at once and wait for all of them."""
        return list(
            await asyncio.gather(*(self.isolator.run(batch, wave.index) for batch in wave.batches))
        )

    async def run(
        self,
        batches: Sequence[Batch],
        slice_index: int = 0,
        first_wave_index: int = 0,
        total_calls: Optional[int] = None,
    ) -> AsyncIterator[Tuple[Wave, List[BatchOutcome]]]:
        """
        Execute batches wave by wave.

        Args:
            batches: Batches in input order
            slice_index: Slice the batches were cut from
            first_wave_index: Run-wide index given to the first wave
            total_calls: Size of the whole input, for progress reporting

        Yields:
            Each wave with its batch outcomes in batch order, in wave order
        """
        if total_calls is None:
            total_calls = sum(len(batch) for batch in batches)

        for wave in self.waves(batches, slice_index, first_wave_index):
            self.sink.emit(
                WaveStarted(
                    slice_index=slice_index,
                    wave_index=wave.index,
                    batch_indices=tuple(batch.index for batch in wave.batches),
                    start=wave.start,
                    end=wave.end,
                    total_calls=total_calls,
                )
            )

            started = time.monotonic()
            wave_results = await self.run_wave(wave)

            failed = sum(result is None for outcome in wave_results for result in outcome.results)
            self.sink.emit(
                WaveCompleted(
                    slice_index=slice_index,
                    wave_index=wave.index,
                    succeeded=wave.call_count - failed,
                    failed=failed,
                    elapsed=time.monotonic() - started,
                )
            )

            yield wave, wave_results
