"""
Base types for concurrent multicall batching.

A run moves calls through three transient groupings:

- ``Slice``: a contiguous memory-bounded window of the input
- ``Batch``: the calls of one aggregate request
- ``Wave``: the batches in flight at the same time

Each grouping carries its own offset into the input so results and
diagnostics can always be traced back to input positions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from ..config.base import ConfigError

#: Result of a single call: return data on success, None on failure
CallResult = Optional[bytes]


class ResultMode(str, Enum):
    """How per-call results are handed back to the caller."""

    #: One entry per input call, None where the call failed
    POSITIONAL = "positional"
    #: Only successful return data, input order preserved
    COMPACTED = "compacted"

    @classmethod
    def parse(cls, value: Union["ResultMode", str]) -> "ResultMode":
        """Look up a mode by value, case-insensitively; ConfigError if unknown."""
        try:
            return cls(value.lower() if isinstance(value, str) else value)
        except ValueError:
            raise ConfigError(
                f"Invalid result mode: {value!r}. Expected one of {[m.value for m in cls]}"
            )


@dataclass(frozen=True)
class MulticallCall:
    """A single read-only call to be folded into an aggregate request."""

    target: str
    allow_failure: bool
    call_data: Union[bytes, str]


@dataclass(frozen=True)
class Batch:
    """Calls sent together as one aggregate request."""

    index: int
    slice_index: int
    start: int
    calls: Tuple[MulticallCall, ...]

    @property
    def end(self) -> int:
        return self.start + len(self.calls)

    def __len__(self) -> int:
        return len(self.calls)


@dataclass(frozen=True)
class Slice:
    """Contiguous window of the input processed in one pass."""

    index: int
    start: int
    calls: Sequence[MulticallCall]

    @property
    def end(self) -> int:
        return self.start + len(self.calls)

    def __len__(self) -> int:
        return len(self.calls)


@dataclass(frozen=True)
class Wave:
    """Batches submitted concurrently; the next wave waits for all of them."""

    index: int
    slice_index: int
    batches: Tuple[Batch, ...]

    @property
    def start(self) -> int:
        return self.batches[0].start if self.batches else 0

    @property
    def end(self) -> int:
        return self.batches[-1].end if self.batches else 0

    @property
    def call_count(self) -> int:
        return sum(len(batch) for batch in self.batches)

    def __len__(self) -> int:
        return len(self.batches)


@dataclass
class BatchConfig:
    """Configuration for batch operations."""

    slice_size: int = 300_000
    batch_size: int = 1000
    concurrency_limit: int = 5
    result_mode: ResultMode = ResultMode.POSITIONAL
    timeout: Optional[float] = 30.0
    max_retries: int = 1
    retry_delay: float = 1.0

    def validate(self) -> "BatchConfig":
        """
        Check every knob is in range.

        Returns:
            The config itself, for chaining

        Raises:
            ConfigError: If a size, limit or delay is out of range
        """
        for name in ("slice_size", "batch_size", "concurrency_limit", "max_retries"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got: {value!r}")

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError(f"timeout must be positive or None, got: {self.timeout!r}")

        if self.retry_delay < 0:
            raise ConfigError(f"retry_delay must not be negative, got: {self.retry_delay!r}")

        self.result_mode = ResultMode.parse(self.result_mode)

        return self


@dataclass
class RunSummary:
    """Totals for one engine invocation."""

    result_mode: ResultMode
    total_calls: int = 0
    slices: int = 0
    batches: int = 0
    waves: int = 0
    succeeded: int = 0
    failed: int = 0
    failed_batches: List[int] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def success_rate(self) -> float:
        return self.succeeded / self.total_calls if self.total_calls else 0.0


@dataclass
class BatchOutcome:
    """Per-call results of one executed batch."""

    batch: Batch
    results: List[CallResult]
    #: Set when the whole batch degraded to failures
    error: Optional[str] = None
    attempts: int = 1

    @property
    def failed(self) -> bool:
        return self.error is not None
