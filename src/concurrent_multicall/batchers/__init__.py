"""
Concurrent multicall batching.

This package splits large lists of read-only contract calls into
memory-bounded slices and size-bounded aggregate requests, runs those
requests with a bounded number in flight, and reassembles per-call
results in input order while isolating failures to single batches.
"""

from .assembler import ResultAssembler
from .base import (
    Batch,
    BatchConfig,
    BatchOutcome,
    CallResult,
    MulticallCall,
    ResultMode,
    RunSummary,
    Slice,
    Wave,
)
from .chunking import GroupBatcher, MemoryChunker
from .codecs import Aggregate3Codec, BatchCodec, TryAggregateCodec, get_codec
from .engine import ConcurrentMulticall, concurrent_multicall
from .errors import (
    BatchError,
    ConfigError,
    DecodeError,
    ErrorHandler,
    RateLimitError,
    TransportError,
    ValidationError,
)
from .executor import ConcurrencyLimitedExecutor
from .isolation import FailureIsolator
from .observability import (
    BatchFailed,
    BatchRetried,
    EventSink,
    LoggingEventSink,
    NullEventSink,
    RecordingEventSink,
    RunCompleted,
    SliceStarted,
    WaveCompleted,
    WaveStarted,
)
from .transport import AsyncWeb3Transport, Transport, Web3Transport

__all__ = [
    'MulticallCall',
    'CallResult',
    'ResultMode',
    'Slice',
    'Batch',
    'Wave',
    'BatchConfig',
    'BatchOutcome',
    'RunSummary',
    'MemoryChunker',
    'GroupBatcher',
    'ConcurrencyLimitedExecutor',
    'FailureIsolator',
    'ResultAssembler',
    'ConcurrentMulticall',
    'concurrent_multicall',
    'BatchCodec',
    'Aggregate3Codec',
    'TryAggregateCodec',
    'get_codec',
    'Transport',
    'Web3Transport',
    'AsyncWeb3Transport',
    'EventSink',
    'LoggingEventSink',
    'NullEventSink',
    'RecordingEventSink',
    'SliceStarted',
    'WaveStarted',
    'WaveCompleted',
    'BatchRetried',
    'BatchFailed',
    'RunCompleted',
    'BatchError',
    'ConfigError',
    'TransportError',
    'RateLimitError',
    'DecodeError',
    'ValidationError',
    'ErrorHandler',
]
