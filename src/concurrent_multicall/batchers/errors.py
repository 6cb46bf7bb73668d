"""
Error handling utilities for batch calling operations.

This module provides specialized exception classes and the error
classification used to decide how a failed batch is reported and
whether it is worth another attempt.
"""

import asyncio
import re
from typing import Optional, Dict, Any
import logging

from ..config.base import ConfigError

MAX_RETRY_DELAY = 60.0

# Addresses and other hex blobs must not match status-code keywords
_HEX_RE = re.compile(r"0x[0-9a-fA-F]+")


class BatchError(Exception):
    """Base exception for batch operations."""
    pass


class TransportError(BatchError):
    """Raised when an aggregate request could not be completed."""
    pass


class RateLimitError(TransportError):
    """Raised when rate limit is hit."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class DecodeError(BatchError):
    """Raised when an aggregate response cannot be split into per-call results."""
    pass


class ValidationError(BatchError):
    """Raised when a call cannot be encoded into an aggregate request."""
    pass


class ErrorHandler:
    """
    Centralized error handling for batch operations.

    Provides classification, logging, and recovery strategies
    for various types of errors encountered during batch calls.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """
        Classify an error into a category for appropriate handling.

        Args:
            error: Exception to classify

        Returns:
            Error category string
        """
        if isinstance(error, RateLimitError):
            return 'rate_limit'
        if isinstance(error, DecodeError):
            return 'decode'
        if isinstance(error, ValidationError):
            return 'validation'
        if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
            return 'network'

        # A wrapped client error is classified by what the client reported
        if isinstance(error, TransportError) and error.__cause__ is not None:
            return self.classify_error(error.__cause__)

        error_str = _HEX_RE.sub("", str(error)).lower()

        # Rate limiting errors
        if any(keyword in error_str for keyword in ['rate limit', 'too many requests', '429']):
            return 'rate_limit'

        # Network connectivity errors
        if any(keyword in error_str for keyword in ['connection', 'timeout', 'timed out', 'network', 'dns']):
            return 'network'

        # Contract execution errors
        if any(keyword in error_str for keyword in ['revert', 'execution reverted', 'out of gas']):
            return 'contract'

        # Validation errors
        if any(keyword in error_str for keyword in ['invalid', 'bad request', '400']):
            return 'validation'

        return 'unknown'

    def should_retry(self, error: Exception, attempt: int, max_retries: int) -> bool:
        """
        Determine if an error should trigger a retry.

        Args:
            error: Exception that occurred
            attempt: Current attempt number (0-based)
            max_retries: Maximum number of attempts allowed

        Returns:
            True if operation should be retried
        """
        if attempt + 1 >= max_retries:
            return False

        # Network, rate limit and unclassified failures may succeed later.
        # Decode, validation and contract errors are deterministic.
        return self.classify_error(error) in ('network', 'rate_limit', 'unknown')

    def get_retry_delay(self, error: Exception, attempt: int, base_delay: float = 1.0) -> float:
        """
        Calculate appropriate retry delay based on error type and attempt.

        Args:
            error: Exception that occurred
            attempt: Current attempt number (0-based)
            base_delay: Delay of the first retry in seconds

        Returns:
            Delay in seconds before retry
        """
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return min(error.retry_after, MAX_RETRY_DELAY)

        error_category = self.classify_error(error)

        # Base exponential backoff
        delay = min(base_delay * (2 ** attempt), MAX_RETRY_DELAY)

        # Rate limit errors get longer delays
        if error_category == 'rate_limit':
            return min(delay * 2, MAX_RETRY_DELAY)

        # Network errors get standard backoff
        if error_category == 'network':
            return delay

        # Unknown errors get conservative delay
        return min(delay * 1.5, MAX_RETRY_DELAY)

    def log_error(self, error: Exception, context: Dict[str, Any]):
        """
        Log error with appropriate level and context.

        Args:
            error: Exception to log
            context: Additional context for logging
        """
        error_category = self.classify_error(error)

        log_data = {
            'error_type': type(error).__name__,
            'error_category': error_category,
            'error_message': str(error),
            **context
        }

        # Log validation errors as warnings
        if error_category == 'validation':
            self.logger.warning("Validation error occurred", extra=log_data)
        # Log contract and decode errors as errors
        elif error_category in ('contract', 'decode'):
            self.logger.error("Batch response unusable", extra=log_data)
        # Log rate limit as info (expected)
        elif error_category == 'rate_limit':
            self.logger.info("Rate limit encountered", extra=log_data)
        # Everything else as warning
        else:
            self.logger.warning("Batch operation error", extra=log_data)


__all__ = [
    'BatchError',
    'ConfigError',
    'TransportError',
    'RateLimitError',
    'DecodeError',
    'ValidationError',
    'ErrorHandler',
]
