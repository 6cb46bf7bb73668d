"""
Aggregate request codecs.

A codec turns a batch of calls into the calldata of one aggregator
contract call and splits the aggregator's response back into one result
per call. The engine only sees opaque bytes on both sides, so any
aggregator with a ``(bool success, bytes returnData)[]`` style response
can be plugged in.
"""

from typing import List, Optional, Protocol, Sequence, Tuple

from eth_abi import decode, encode
from eth_typing import ChecksumAddress
from eth_utils import function_signature_to_4byte_selector, to_checksum_address
from hexbytes import HexBytes

from ..config.multicall import MULTICALL3_ADDRESS
from .base import CallResult, MulticallCall
from .errors import DecodeError, ValidationError

MULTICALL2_ADDRESS = "0x5BA1e12693Dc8F9c48aAD8770482f4739bEeD696"

AGGREGATE3_SIGNATURE = "aggregate3((address,bool,bytes)[])"
TRY_AGGREGATE_SIGNATURE = "tryAggregate(bool,(address,bytes)[])"

_RESULT_TYPES = ["(bool,bytes)[]"]


class BatchCodec(Protocol):
    """Encodes batches into aggregate calldata and decodes aggregate responses."""

    default_address: str

    def encode_batch(self, calls: Sequence[MulticallCall]) -> bytes:
        ...

    def decode_batch(self, response: bytes, expected_count: int) -> List[CallResult]:
        ...


def _normalize_call(call: MulticallCall) -> Tuple[ChecksumAddress, bytes]:
    """Checksum the target and turn hex calldata into bytes."""
    try:
        target = to_checksum_address(call.target)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Invalid call target {call.target!r}: {e}")

    try:
        call_data = bytes(HexBytes(call.call_data))
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Invalid calldata for {target}: {e}")

    return target, call_data


def _decode_results(response: bytes, expected_count: int) -> List[CallResult]:
    """Split a ``(bool,bytes)[]`` response into per-call results."""
    try:
        (results,) = decode(_RESULT_TYPES, bytes(response))
    except Exception as e:
        raise DecodeError(f"Failed to decode aggregate response: {e}") from e

    if len(results) != expected_count:
        raise DecodeError(
            f"Aggregate response has {len(results)} results, expected {expected_count}"
        )

    return [bytes(return_data) if success else None for success, return_data in results]


class Aggregate3Codec:
    """
    Multicall3 ``aggregate3`` codec.

    Each call carries its own ``allowFailure`` flag. A call that fails with
    ``allowFailure=True`` comes back as ``None``; a call that fails with
    ``allowFailure=False`` makes the aggregator revert the whole request.
    """

    default_address = MULTICALL3_ADDRESS
    selector = function_signature_to_4byte_selector(AGGREGATE3_SIGNATURE)

    def encode_batch(self, calls: Sequence[MulticallCall]) -> bytes:
        call_structs = []
        for call in calls:
            target, call_data = _normalize_call(call)
            call_structs.append((target, bool(call.allow_failure), call_data))

        return self.selector + encode(["(address,bool,bytes)[]"], [call_structs])

    def decode_batch(self, response: bytes, expected_count: int) -> List[CallResult]:
        return _decode_results(response, expected_count)


class TryAggregateCodec:
    """
    Multicall2 ``tryAggregate`` codec.

    The aggregator only has a request-wide ``requireSuccess`` switch, which
    is always sent as false, so per-call ``allow_failure`` flags are ignored
    and every failing call comes back as ``None``.
    """

    default_address = MULTICALL2_ADDRESS
    selector = function_signature_to_4byte_selector(TRY_AGGREGATE_SIGNATURE)

    def __init__(self, require_success: bool = False):
        self.require_success = require_success

    def encode_batch(self, calls: Sequence[MulticallCall]) -> bytes:
        call_structs = [_normalize_call(call) for call in calls]
        return self.selector + encode(
            ["bool", "(address,bytes)[]"], [self.require_success, call_structs]
        )

    def decode_batch(self, response: bytes, expected_count: int) -> List[CallResult]:
        return _decode_results(response, expected_count)


def get_codec(name: Optional[str] = None) -> BatchCodec:
    """
    Look up a codec by aggregator name.

    Args:
        name: ``aggregate3`` (default) or ``try_aggregate``

    Returns:
        Codec instance

    Raises:
        ValueError: If the name is unknown
    """
    codecs = {
        "aggregate3": Aggregate3Codec,
        "try_aggregate": TryAggregateCodec,
    }
    key = (name or "aggregate3").lower()
    if key not in codecs:
        raise ValueError(f"No codec available for {name}. Available: {list(codecs)}")
    return codecs[key]()
