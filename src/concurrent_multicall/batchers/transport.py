"""
Transports that deliver aggregate requests to a node.

A transport exposes one coroutine, ``execute(address, payload)``, which
performs a read-only ``eth_call`` against the aggregator contract and
returns the raw response bytes. Every failure is raised as a
TransportError so the engine can isolate it to the batch that caused it.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Protocol

from hexbytes import HexBytes
from web3 import AsyncWeb3, Web3
from web3.types import BlockIdentifier

from .errors import RateLimitError, TransportError


class Transport(Protocol):
    """Sends one aggregate request and returns the raw response."""

    async def execute(self, address: str, payload: bytes) -> bytes:
        ...


def _retry_after(error: Exception) -> Optional[float]:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    value = headers.get("Retry-After") if hasattr(headers, "get") else None
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def to_transport_error(error: Exception, address: str) -> TransportError:
    """Wrap a client exception, recognising rate limiting."""
    if isinstance(error, TransportError):
        return error

    status = getattr(getattr(error, "response", None), "status_code", None)
    message = str(error)
    if status == 429 or "too many requests" in message.lower() or "rate limit" in message.lower():
        return RateLimitError(
            f"Rate limited calling {address}: {message}", retry_after=_retry_after(error)
        )

    return TransportError(f"eth_call to {address} failed: {type(error).__name__}: {message}")


class Web3Transport:
    """
    Transport over a synchronous ``Web3`` client.

    The blocking ``eth.call`` runs in a dedicated thread pool so that up to
    ``max_workers`` aggregate requests can be outstanding at once. Size the
    pool to the engine's concurrency limit.
    """

    def __init__(
        self,
        web3: Web3,
        block_identifier: BlockIdentifier = "latest",
        max_workers: int = 5,
    ):
        self.web3 = web3
        self.block_identifier = block_identifier
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="multicall"
        )
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _call(self, address: str, payload: bytes) -> bytes:
        result = self.web3.eth.call(
            {"to": Web3.to_checksum_address(address), "data": HexBytes(payload)},
            block_identifier=self.block_identifier,
        )
        return bytes(result)

    async def execute(self, address: str, payload: bytes) -> bytes:
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(self._executor, self._call, address, payload)
        except Exception as e:
            self.logger.debug(f"eth_call failed: {e}")
            raise to_transport_error(e, address) from e

    def close(self):
        """Shut down the worker threads."""
        self._executor.shutdown(wait=False)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class AsyncWeb3Transport:
    """Transport over an ``AsyncWeb3`` client; concurrency is native."""

    def __init__(self, web3: AsyncWeb3, block_identifier: BlockIdentifier = "latest"):
        self.web3 = web3
        self.block_identifier = block_identifier
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def execute(self, address: str, payload: bytes) -> bytes:
        try:
            result = await self.web3.eth.call(
                {"to": AsyncWeb3.to_checksum_address(address), "data": HexBytes(payload)},
                block_identifier=self.block_identifier,
            )
        except Exception as e:
            self.logger.debug(f"eth_call failed: {e}")
            raise to_transport_error(e, address) from e
        return bytes(result)
