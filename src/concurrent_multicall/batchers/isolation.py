"""
Per-batch failure isolation.

A batch either yields one result per call, as reported by the aggregator,
or degrades to ``None`` for every one of its calls. Transport errors,
timeouts and undecodable responses never escape to sibling batches.
"""

import asyncio
import logging
from typing import List, Optional

from .base import Batch, BatchConfig, BatchOutcome, CallResult
from .codecs import BatchCodec
from .errors import DecodeError, ErrorHandler, TransportError
from .observability import BatchFailed, BatchRetried, EventSink, NullEventSink
from .transport import Transport


class FailureIsolator:
    """Executes single batches, converting batch-level failures into per-call ``None``."""

    def __init__(
        self,
        transport: Transport,
        codec: BatchCodec,
        address: str,
        config: BatchConfig,
        sink: Optional[EventSink] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.transport = transport
        self.codec = codec
        self.address = address
        self.config = config
        self.sink = sink or NullEventSink()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = error_handler or ErrorHandler(self.logger)

    async def _execute(self, batch: Batch) -> List[CallResult]:
        payload = self.codec.encode_batch(batch.calls)

        request = self.transport.execute(self.address, payload)
        if self.config.timeout is None:
            response = await request
        else:
            try:
                response = await asyncio.wait_for(request, timeout=self.config.timeout)
            except asyncio.TimeoutError:
                raise TransportError(
                    f"Aggregate request timed out after {self.config.timeout}s"
                )

        results = self.codec.decode_batch(response, len(batch))
        if len(results) != len(batch):
            raise DecodeError(f"Decoded {len(results)} results for a batch of {len(batch)} calls")
        return results

    async def run(self, batch: Batch, wave_index: int) -> BatchOutcome:
        """
        Execute a batch, retrying retryable failures up to ``max_retries`` attempts.

        Args:
            batch: Batch to execute
            wave_index: Wave the batch belongs to, for diagnostics

        Returns:
            BatchOutcome with one result per call; all ``None`` if the batch failed
        """
        max_retries = self.config.max_retries

        for attempt in range(max_retries):
            try:
                results = list(await self._execute(batch))
                return BatchOutcome(batch=batch, results=results, attempts=attempt + 1)
            except Exception as e:
                category = self.error_handler.classify_error(e)
                self.error_handler.log_error(
                    e,
                    {
                        "batch_index": batch.index,
                        "wave_index": wave_index,
                        "slice_index": batch.slice_index,
                        "attempt": attempt + 1,
                        "max_retries": max_retries,
                    },
                )

                if self.error_handler.should_retry(e, attempt, max_retries):
                    delay = self.error_handler.get_retry_delay(
                        e, attempt, self.config.retry_delay
                    )
                    self.sink.emit(
                        BatchRetried(
                            slice_index=batch.slice_index,
                            wave_index=wave_index,
                            batch_index=batch.index,
                            attempt=attempt + 1,
                            delay=delay,
                            error_type=type(e).__name__,
                            error_category=category,
                            error_message=str(e),
                        )
                    )
                    await asyncio.sleep(delay)
                    continue

                self.sink.emit(
                    BatchFailed(
                        slice_index=batch.slice_index,
                        wave_index=wave_index,
                        batch_index=batch.index,
                        start=batch.start,
                        end=batch.end,
                        attempts=attempt + 1,
                        error_type=type(e).__name__,
                        error_category=category,
                        error_message=str(e),
                    )
                )
                return BatchOutcome(
                    batch=batch,
                    results=[None] * len(batch),
                    error=f"{type(e).__name__}: {e}",
                    attempts=attempt + 1,
                )
