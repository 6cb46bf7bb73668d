"""
Progress and failure events emitted by the multicall engine.

The engine never prints or keeps global counters. It reports what it is
doing through an event sink passed in by the caller, which keeps the core
independent of any particular logging or metrics backend.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple, Type, TypeVar

from .base import RunSummary

E = TypeVar("E")


@dataclass(frozen=True)
class SliceStarted:
    slice_index: int
    slice_count: int
    start: int
    end: int
    total_calls: int


@dataclass(frozen=True)
class WaveStarted:
    slice_index: int
    wave_index: int
    batch_indices: Tuple[int, ...]
    start: int
    end: int
    total_calls: int


@dataclass(frozen=True)
class WaveCompleted:
    slice_index: int
    wave_index: int
    succeeded: int
    failed: int
    elapsed: float


@dataclass(frozen=True)
class BatchRetried:
    slice_index: int
    wave_index: int
    batch_index: int
    attempt: int
    delay: float
    error_type: str
    error_category: str
    error_message: str


@dataclass(frozen=True)
class BatchFailed:
    """A whole batch degraded to per-call failures."""

    slice_index: int
    wave_index: int
    batch_index: int
    start: int
    end: int
    attempts: int
    error_type: str
    error_category: str
    error_message: str


@dataclass(frozen=True)
class RunCompleted:
    summary: RunSummary


class EventSink(Protocol):
    """Anything that accepts engine events."""

    def emit(self, event: object) -> None:
        ...


class NullEventSink:
    """Discards every event."""

    def emit(self, event: object) -> None:
        pass


class RecordingEventSink:
    """Keeps events in memory, in emission order."""

    def __init__(self):
        self.events: List[object] = []

    def emit(self, event: object) -> None:
        self.events.append(event)

    def of_type(self, event_type: Type[E]) -> List[E]:
        return [event for event in self.events if isinstance(event, event_type)]

    def clear(self) -> None:
        self.events.clear()


class LoggingEventSink:
    """
    Renders engine events to a standard library logger.

    Progress goes to INFO (slices, run totals) and DEBUG (waves); batch
    failures go to WARNING with the failure details attached as ``extra``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def emit(self, event: object) -> None:
        if isinstance(event, SliceStarted):
            self.logger.info(
                f"Processing slice {event.slice_index + 1}/{event.slice_count}: "
                f"calls {event.start} to {event.end} of {event.total_calls}"
            )
        elif isinstance(event, WaveStarted):
            self.logger.debug(
                f"Wave {event.wave_index}: processing {len(event.batch_indices)} batches "
                f"concurrently (calls {event.start} to {event.end} of {event.total_calls})"
            )
        elif isinstance(event, WaveCompleted):
            self.logger.debug(
                f"Wave {event.wave_index} completed in {event.elapsed:.3f}s: "
                f"{event.succeeded} succeeded, {event.failed} failed"
            )
        elif isinstance(event, BatchRetried):
            self.logger.info(
                f"Retrying batch {event.batch_index} in {event.delay}s "
                f"(attempt {event.attempt}): {event.error_message}"
            )
        elif isinstance(event, BatchFailed):
            self.logger.warning(
                f"Batch {event.batch_index} (calls {event.start} to {event.end}) failed "
                f"after {event.attempts} attempt(s): {event.error_type}: {event.error_message}",
                extra={
                    "slice_index": event.slice_index,
                    "wave_index": event.wave_index,
                    "batch_index": event.batch_index,
                    "error_type": event.error_type,
                    "error_category": event.error_category,
                },
            )
        elif isinstance(event, RunCompleted):
            summary = event.summary
            self.logger.info(
                f"Multicall run finished in {summary.elapsed:.2f}s: "
                f"{summary.succeeded}/{summary.total_calls} calls succeeded across "
                f"{summary.batches} batches in {summary.waves} waves "
                f"({len(summary.failed_batches)} batches failed, mode={summary.result_mode.value})"
            )
