"""
Reassembly of per-batch results into the caller's output list.
"""

from typing import List, Sequence, Union

from .base import BatchOutcome, CallResult, ResultMode


class ResultAssembler:
    """
    Concatenates per-batch results in the order they are added.

    Batches must be added in input order (batch order within a wave, wave
    order within a slice, slice order within the run). In positional mode
    every call keeps its slot and failures stay as ``None``; in compacted
    mode failures are dropped.
    """

    def __init__(self, mode: Union[ResultMode, str] = ResultMode.POSITIONAL):
        self.mode = ResultMode.parse(mode)
        self._results: List[CallResult] = []
        self.succeeded = 0
        self.failed = 0

    def add(self, batch_results: Sequence[CallResult]) -> None:
        """Append the results of one batch."""
        successes = [result for result in batch_results if result is not None]
        self.succeeded += len(successes)
        self.failed += len(batch_results) - len(successes)

        if self.mode is ResultMode.POSITIONAL:
            self._results.extend(batch_results)
        else:
            self._results.extend(successes)

    def add_wave(self, outcomes: Sequence[BatchOutcome]) -> None:
        """Append the outcomes of one wave, already in batch order."""
        for outcome in outcomes:
            self.add(outcome.results)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    def results(self) -> List[CallResult]:
        return list(self._results)
