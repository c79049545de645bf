# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Retry policy for upstream API calls.

Transient failures (rate limiting, server errors, network errors) are
retried with jittered exponential backoff. Query errors and other client
errors are raised immediately. Each attempt takes its own token from the
rate limiter, so retries never exceed the configured call rate.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..exceptions import UpstreamError
from .bucket import TokenBucketLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """
    Bounded retry with full-jitter exponential backoff.

    Attempt ``n`` (0-based) that fails with a retryable error is followed by
    a sleep drawn uniformly from ``[0, min(max_delay, base_delay * 2**n)]``.
    """

    def __init__(
        self,
        max_attempts: int = 4,
        base_delay: float = 0.1,
        max_delay: float = 5.0,
    ) -> None:
        """
        Initialize the retry policy.

        Args:
            max_attempts: Attempts per call, including the first
            base_delay: Backoff base in seconds
            max_delay: Cap on a single backoff delay in seconds
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if base_delay < 0 or max_delay < 0:
            raise ValueError("backoff delays must not be negative")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay

    @staticmethod
    def is_retryable(error: BaseException) -> bool:
        """Classify an error as transient (worth retrying) or not."""
        if not isinstance(error, UpstreamError):
            return False
        if error.status_code == 429:
            return True
        if error.status_code is not None and error.status_code >= 500:
            return True
        return bool(error.retryable)

    def get_backoff_delay(self, attempt: int) -> float:
        """Calculate the jittered backoff delay after a failed attempt."""
        ceiling = min(self.max_delay, self.base_delay * (2**attempt))
        return random.uniform(0, ceiling)  # nosec B311 # noqa: S311

    async def call(
        self,
        operation: Callable[[], Awaitable[T]],
        limiter: TokenBucketLimiter | None = None,
        description: str = "upstream call",
    ) -> T:
        """
        Run ``operation`` until it succeeds, fails permanently, or attempts run out.

        Args:
            operation: Zero-argument coroutine factory performing one attempt
            limiter: Optional limiter; one token is taken before every attempt
            description: Label used in log messages

        Returns:
            The result of the first successful attempt

        Raises:
            Exception: The last error once retries are exhausted, or the first
                non-retryable error
            asyncio.CancelledError: If the caller is cancelled at any point
        """
        for attempt in range(self.max_attempts):
            if limiter is not None:
                await limiter.acquire()
            try:
                return await operation()
            except asyncio.CancelledError:
                raise  # Always re-raise for graceful shutdown
            except Exception as e:
                if not self.is_retryable(e) or attempt + 1 >= self.max_attempts:
                    raise
                delay = self.get_backoff_delay(attempt)
                logger.debug(
                    f"{description} failed (attempt {attempt + 1}/{self.max_attempts}): "
                    f"{e}; retrying in {delay:.3f}s"
                )
                await asyncio.sleep(delay)
        raise AssertionError("unreachable")  # pragma: no cover


__all__ = ["RetryPolicy"]
