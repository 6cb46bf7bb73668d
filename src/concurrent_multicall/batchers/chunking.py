"""
Partitioning of the call list into slices and batches.

Slices bound memory: everything built for a slice (batches, encoded
requests, results) is released before the next slice starts. Batches
bound request size: each one becomes a single aggregate call.
"""

from typing import Iterator, List, Sequence

from ..config.base import ConfigError
from .base import Batch, MulticallCall, Slice


def _require_positive(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{name} must be a positive integer, got: {value!r}")
    return value


class MemoryChunker:
    """Splits the full input into contiguous slices of at most ``slice_size`` calls."""

    def __init__(self, slice_size: int):
        self.slice_size = _require_positive("slice_size", slice_size)

    def slices(self, calls: Sequence[MulticallCall]) -> Iterator[Slice]:
        """Lazily yield slices covering ``calls`` in order; the last may be shorter."""
        for index, start in enumerate(range(0, len(calls), self.slice_size)):
            yield Slice(
                index=index,
                start=start,
                calls=calls[start : start + self.slice_size],
            )

    def count(self, total_calls: int) -> int:
        """Number of slices ``total_calls`` calls are split into."""
        return -(-total_calls // self.slice_size)


class GroupBatcher:
    """Groups the calls of a slice into aggregate requests of at most ``batch_size`` calls."""

    def __init__(self, batch_size: int):
        self.batch_size = _require_positive("batch_size", batch_size)

    def batches(self, slice_: Slice, first_index: int = 0) -> List[Batch]:
        """
        Partition a slice into batches without reordering.

        Args:
            slice_: Slice to partition
            first_index: Run-wide index given to the first batch

        Returns:
            Batches in input order, numbered consecutively from first_index
        """
        calls = slice_.calls
        return [
            Batch(
                index=first_index + offset,
                slice_index=slice_.index,
                start=slice_.start + start,
                calls=tuple(calls[start : start + self.batch_size]),
            )
            for offset, start in enumerate(range(0, len(calls), self.batch_size))
        ]
