"""
Tests for wave-based concurrent batch execution.
"""

import pytest

from ...config import ConfigError
from ..base import BatchConfig, Slice
from ..chunking import GroupBatcher
from ..executor import ConcurrencyLimitedExecutor
from ..isolation import FailureIsolator
from ..observability import WaveCompleted, WaveStarted
from .fakes import AGGREGATOR, EchoCodec, FakeTransport, make_calls


def build_executor(transport, concurrency_limit, sink=None):
    isolator = FailureIsolator(
        transport, EchoCodec(), AGGREGATOR, BatchConfig(timeout=None), sink
    )
    return ConcurrencyLimitedExecutor(isolator, concurrency_limit, sink)


def build_batches(call_count, batch_size):
    calls = make_calls(call_count)
    return GroupBatcher(batch_size).batches(Slice(index=0, start=0, calls=calls))


async def collect(executor, batches):
    return [(wave, outcomes) async for wave, outcomes in executor.run(batches)]


class TestWavePlanning:
    """Test grouping of batches into waves."""

    def test_waves_respect_limit(self):
        """Test waves hold at most concurrency_limit batches."""
        executor = build_executor(FakeTransport(), 3)
        waves = list(executor.waves(build_batches(20, 2)))

        assert [len(w) for w in waves] == [3, 3, 3, 1]
        assert [w.index for w in waves] == [0, 1, 2, 3]
        assert waves[1].start == 6 and waves[1].end == 12

    def test_limit_above_batch_count_gives_one_wave(self):
        """Test a large limit submits the whole slice at once."""
        executor = build_executor(FakeTransport(), 50)
        waves = list(executor.waves(build_batches(10, 2)))

        assert len(waves) == 1
        assert len(waves[0]) == 5

    def test_wave_indices_continue(self):
        """Test wave numbering continues from first_index."""
        executor = build_executor(FakeTransport(), 2)
        waves = list(executor.waves(build_batches(8, 2), slice_index=3, first_index=7))

        assert [w.index for w in waves] == [7, 8]
        assert all(w.slice_index == 3 for w in waves)

    @pytest.mark.parametrize("limit", [0, -2])
    def test_invalid_limit(self, limit):
        """Test non-positive concurrency limits are rejected."""
        with pytest.raises(ConfigError, match="concurrency_limit"):
            build_executor(FakeTransport(), limit)


class TestWaveExecution:
    """Test execution order and result ordering."""

    @pytest.mark.asyncio
    async def test_six_calls_three_batches_two_waves(self):
        """Test batch size 2, limit 2 and 6 calls run 3 batches in 2 waves."""
        transport = FakeTransport()
        executor = build_executor(transport, 2)
        batches = build_batches(6, 2)

        executed = await collect(executor, batches)

        assert len(batches) == 3
        assert [[b.index for b in wave.batches] for wave, _ in executed] == [[0, 1], [2]]

        trace = transport.trace
        first, second, third = b"call-00000", b"call-00002", b"call-00004"
        assert trace[:2] == [("start", first), ("start", second)]
        third_start = trace.index(("start", third))
        assert third_start > trace.index(("end", first))
        assert third_start > trace.index(("end", second))

    @pytest.mark.asyncio
    async def test_out_of_order_completion_keeps_batch_order(self):
        """Test results come back in batch order when the first batch is slowest."""
        transport = FakeTransport(delays={b"call-00000": 0.05, b"call-00002": 0.02})
        executor = build_executor(transport, 3)

        executed = await collect(executor, build_batches(6, 2))

        (wave, outcomes), = executed
        assert transport.trace.index(("end", b"call-00004")) < transport.trace.index(("end", b"call-00000"))
        assert [o.batch.index for o in outcomes] == [0, 1, 2]
        flat = [r for o in outcomes for r in o.results]
        assert flat == [f"call-{i:05d}".encode() for i in range(6)]

    @pytest.mark.asyncio
    async def test_limit_one_is_sequential(self):
        """Test a limit of 1 never has two requests in flight."""
        transport = FakeTransport(delays={b"call-00000": 0.01})
        executor = build_executor(transport, 1)

        executed = await collect(executor, build_batches(5, 1))

        assert len(executed) == 5
        assert transport.max_in_flight == 1
        assert [kind for kind, _ in transport.trace] == ["start", "end"] * 5

    @pytest.mark.asyncio
    async def test_in_flight_never_exceeds_limit(self):
        """Test simultaneous requests are bounded by the limit."""
        transport = FakeTransport(delays={f"call-{i:05d}".encode(): 0.005 for i in range(0, 100, 4)})
        executor = build_executor(transport, 4)

        await collect(executor, build_batches(100, 4))

        assert transport.max_in_flight == 4

    @pytest.mark.asyncio
    async def test_no_batches(self):
        """Test an empty batch list completes without requests."""
        transport = FakeTransport()
        executor = build_executor(transport, 3)

        assert await collect(executor, []) == []
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_wave_events(self, sink):
        """Test each wave reports its start and completion."""
        transport = FakeTransport(fail=lambda request_id: request_id == b"call-00004")
        executor = build_executor(transport, 2, sink)

        await collect(executor, build_batches(6, 2))

        started = sink.of_type(WaveStarted)
        completed = sink.of_type(WaveCompleted)
        assert [e.batch_indices for e in started] == [(0, 1), (2,)]
        assert [(e.succeeded, e.failed) for e in completed] == [(4, 0), (0, 2)]
        assert started[1].start == 4 and started[1].end == 6
